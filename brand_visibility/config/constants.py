"""
Configuration constants for the Brand Visibility Engine.

This module contains the policy tables shared across the extractor,
classifier and scoring modules: stopwords, generic terms and category
phrases for candidate discovery, candidate limits, per-mention confidence
values and the default table of well-known competitors.
"""

# Bumped whenever extraction or scoring rules change in a way that can alter
# results for identical input. Persisted by callers alongside each result.
ANALYSIS_VERSION = "1.0.0"

# ============================================================================
# Candidate discovery limits
# ============================================================================

# Maximum distinct discovered names kept per response (earliest first)
MAX_CANDIDATES = 15

# Maximum tokens in one capitalized-run candidate; longer runs are chunked
MAX_RUN_TOKENS = 3

# Candidates shorter than this (in characters) are discarded
MIN_CANDIDATE_LENGTH = 2

# Timeout for the assisted extraction call (seconds)
ASSIST_TIMEOUT_SECONDS = 10.0

# ============================================================================
# Confidence per mention
# ============================================================================

# Resolved to an entry of the caller's catalog
CONFIDENCE_CATALOG = 1.0

# Resolved to the org name passed in directly or to a known competitor
CONFIDENCE_KNOWN = 0.9

# Unresolved, discovered by the capitalization-run scanner
CONFIDENCE_DISCOVERED = 0.6

# Unresolved, proposed by the external completion call (grounded)
CONFIDENCE_ASSISTED = 0.5

# Reported when a response contains no mentions at all
CONFIDENCE_EMPTY = 1.0

# ============================================================================
# Stopwords
# ============================================================================

# Lowercased tokens that never form (or start/end) a discovered brand name.
# Covers sentence-initial function words, pronouns, list headings and the
# generic business nouns that answer text capitalizes in titles.
STOPWORDS = frozenset(
    [
        # Articles, conjunctions, prepositions
        "a", "an", "the", "and", "or", "but", "nor", "so", "yet",
        "for", "with", "without", "on", "in", "at", "to", "from", "of",
        "by", "as", "if", "into", "onto", "over", "under", "via", "vs",
        "versus", "about", "after", "before", "between", "through",
        "while", "although", "because", "since", "unlike", "like",
        # Determiners and pronouns
        "this", "that", "these", "those", "it", "its", "i", "we", "you",
        "your", "yours", "our", "ours", "they", "their", "them", "he",
        "she", "his", "her", "my", "me", "us", "each", "every", "all",
        "both", "either", "neither", "some", "many", "most", "more",
        "less", "other", "another", "any", "such", "which", "who",
        "what", "when", "where", "why", "how", "whether",
        # Discourse words
        "here", "there", "also", "however", "additionally", "overall",
        "finally", "first", "second", "third", "next", "then", "yes",
        "no", "not", "note", "please", "instead", "otherwise",
        "conclusion", "summary", "example", "examples", "step", "steps",
        "ultimately", "generally", "usually", "typically", "especially",
        "alternatively", "meanwhile", "furthermore", "moreover",
        "similarly", "likewise", "overview", "considerations",
        "consideration", "known",
        # Numbers
        "one", "two", "three", "four", "five", "six", "seven", "eight",
        "nine", "ten",
        # Ranking and list vocabulary
        "top", "best", "leading", "popular", "great", "good", "better",
        "recommended", "recommendation", "recommendations", "option",
        "options", "alternative", "alternatives", "choice", "choices",
        "pros", "cons", "features", "feature", "pricing", "price",
        "key", "free", "plan", "plans", "paid",
        # Action words that open sentences
        "use", "using", "try", "consider", "choose", "start", "get",
        "check", "compare", "compared", "look", "see", "find", "learn",
        "read", "click", "build", "create", "track", "improve",
        # Generic business nouns
        "tool", "tools", "software", "platform", "platforms", "solution",
        "solutions", "service", "services", "system", "systems", "app",
        "apps", "crm", "erp", "saas", "api", "marketing", "sales",
        "email", "customer", "customers", "business", "businesses",
        "company", "companies", "small", "enterprise", "support", "data",
        "analytics", "automation", "management", "integration",
        "integrations", "team", "users", "user",
    ]
)

# Lowercased words that may appear inside a brand name ("Help Scout",
# "Sprout Social") but never form one on their own. A candidate made only of
# these words and STOPWORDS is rejected; runs are not trimmed on them.
GENERIC_TERMS = frozenset(
    [
        # Common verbs and their forms
        "is", "are", "was", "were", "be", "been", "have", "has", "had",
        "do", "does", "did", "will", "would", "could", "should", "may",
        "might", "can", "make", "makes", "made", "take", "takes", "know",
        "knows", "uses", "used", "work", "works", "working", "help",
        "helps", "helping", "creates", "creating", "builds", "building",
        "need", "needs", "want", "wants", "show", "shows", "run", "runs",
        "provide", "provides", "providing", "include", "includes",
        "including", "offer", "offers", "offering", "allow", "allows",
        "considering", "choosing", "starting", "getting", "keep", "keeping",
        "focus", "focused", "manage", "managing", "handle", "handles",
        "scale", "scaling", "grow", "growing", "explore", "review",
        # Common nouns
        "time", "way", "day", "thing", "things", "part", "place", "case",
        "point", "number", "group", "problem", "fact", "money", "lot",
        "month", "year", "issue", "issues", "side", "kind", "area",
        "question", "questions", "interest", "policy", "market", "name",
        "idea", "information", "level", "office", "result", "results",
        "change", "reason", "research", "experience", "job", "end",
        "community", "program", "home", "process", "sense", "course",
        "effect", "control", "role", "report", "rate", "value", "action",
        "model", "position", "record", "form", "event", "site", "project",
        "projects", "base", "activity", "cost", "costs", "industry",
        "image", "phone", "practice", "product", "products", "news",
        "test", "type", "source", "technology", "organization",
        "opportunity", "term", "rule", "material", "risk", "future",
        "security", "board", "deal", "performance", "goal", "order",
        "approach", "size", "list", "quality", "answer", "answers",
        "analysis", "benefit", "benefits", "section", "skill", "skills",
        "strategy", "network", "memory", "card", "impact", "structure",
        "range", "style", "challenge", "challenges", "budget", "budgets",
        "setup", "workload", "scope", "trial",
        # Adjectives and adverbs answers capitalize in headings
        "new", "old", "bad", "large", "big", "long", "short", "high",
        "low", "right", "last", "early", "late", "important", "social",
        "national", "local", "real", "different", "same", "own", "current",
        "available", "total", "general", "recent", "simple", "complex",
        "easy", "hard", "fast", "slow", "quick", "strong", "weak", "safe",
        "ready", "sure", "possible", "necessary", "special", "certain",
        "similar", "various", "several", "few", "much", "enough", "least",
        "very", "too", "quite", "rather", "pretty", "really", "probably",
        "perhaps", "maybe", "actually", "particularly", "normally",
        "often", "sometimes", "always", "never", "still", "already",
        "together", "cheap", "expensive", "affordable",
        "reliable", "flexible", "scalable", "robust", "powerful",
        "intuitive", "comprehensive", "advanced", "basic", "custom",
        "extensive", "seamless", "modern", "ideal", "suitable", "unique",
        "main", "final", "standard", "specific", "public", "private",
        "personal", "direct", "organic", "digital", "online", "mobile",
        "cloud", "web",
        # Business and technology terms
        "application", "applications", "technologies", "website",
        "websites", "internet", "networks", "database", "databases",
        "server", "servers", "client", "clients", "apis", "interface",
        "interfaces", "framework", "frameworks", "library", "libraries",
        "organizations", "enterprises", "development", "design",
        "reports", "dashboard", "dashboards", "workflow", "workflows",
        "processes", "function", "functions", "module", "modules",
        "component", "components", "optimization", "privacy",
        "compliance", "collaboration", "communication", "productivity",
        "efficiency", "scalability", "reliability", "availability",
        "flexibility", "usability", "accessibility", "compatibility",
        "functionality", "capability", "capabilities", "capacity",
        "innovation", "transformation", "intelligence", "insights",
        "engagement", "conversion", "conversions", "roi", "kpi",
        "metrics", "tracking", "monitoring", "reporting", "visualization",
        "personalization", "customization",
        # Marketing and sales terms
        "campaign", "campaigns", "audience", "audiences", "segment",
        "segments", "content", "emails", "newsletter", "newsletters",
        "blog", "blogs", "media", "post", "posts", "video", "videos",
        "images", "photo", "photos", "graphics", "brand", "brands",
        "branding", "identity", "landing", "page", "pages", "forms",
        "survey", "surveys", "lead", "leads", "prospect", "prospects",
        "contact", "contacts", "lists", "tag", "tags", "category",
        "categories", "keyword", "keywords", "seo", "sem", "ppc",
        "traffic", "visitors", "funnel", "funnels", "attribution",
        "journey", "opportunities", "deals", "pipeline", "forecast",
        "revenue", "selling", "buyer", "buyers", "vendor", "vendors",
        "partner", "partners", "channel", "channels", "retail",
        "affiliate", "commission", "margin", "profit", "discount",
        "promotion", "contract", "agreement", "terms", "conditions",
        # Support and service terms
        "assistance", "ticket", "tickets", "ticketing", "cases",
        "problems", "resolution", "chat", "call", "calls", "message",
        "messages", "messaging", "notification", "notifications",
        "alert", "alerts", "feedback", "reviews", "rating", "ratings",
        "satisfaction", "nps", "knowledge", "documentation", "guide",
        "guides", "tutorial", "tutorials", "training", "onboarding",
        "configuration", "installation", "implementation", "deployment",
        "agent", "agents", "inbox", "desk", "helpdesk",
        # Files, accounts and teams
        "file", "files", "document", "documents", "folder", "folders",
        "upload", "download", "import", "export", "backup", "sync",
        "sharing", "permission", "permissions", "access", "login",
        "account", "accounts", "profile", "profiles", "settings",
        "admin", "member", "members", "teams", "groups", "roles",
    ]
)

# Normalized category phrases that are never a brand, checked against the
# whole capitalized run before it is trimmed ("Social Media", "Project
# Management").
GENERIC_PHRASES = frozenset(
    [
        # Marketing and email
        "marketing automation", "email automation", "marketing platform",
        "email platform", "marketing software", "email software",
        "marketing tools", "email marketing", "content marketing",
        "digital marketing", "online marketing", "inbound marketing",
        "outbound marketing", "growth marketing", "affiliate marketing",
        "influencer marketing", "search engine optimization",
        "landing page", "landing pages", "lead generation", "lead nurturing",
        # CRM and sales
        "customer relationship management", "crm platform", "crm software",
        "crm system", "sales automation", "sales pipeline",
        "contact management", "lead management", "pipeline management",
        # Analytics
        "data analytics", "web analytics", "marketing analytics",
        "business analytics", "business intelligence", "customer analytics",
        # Customer experience
        "customer experience", "customer journey", "customer data",
        "customer support", "customer service", "customer success",
        "customer satisfaction", "customer engagement", "customer retention",
        "help desk", "help center", "knowledge base", "live chat",
        "shared inbox", "self service",
        # Social media
        "social media", "social media management", "social listening",
        "social monitoring", "social scheduling", "social analytics",
        # Projects and collaboration
        "project management", "task management", "workflow management",
        "team collaboration", "time tracking", "resource management",
        "video conferencing", "web conferencing", "team communication",
        "workflow automation", "process automation", "business automation",
        "api integration", "data integration",
        # Answer structure
        "key features", "key considerations", "final thoughts",
        "bottom line", "use case", "use cases", "next steps",
        "pros and cons", "free trial", "free plan", "ease of use",
        "getting started", "in summary", "in conclusion",
        # Deployment and pricing
        "enterprise software", "cloud platform", "saas platform",
        "open source", "pricing plans", "pricing tiers",
    ]
)

# ============================================================================
# Assisted extraction
# ============================================================================

ASSIST_SYSTEM_INSTRUCTION = (
    "You extract brand, company and product names from an AI assistant's "
    "answer. List every brand, company or product name that appears in the "
    "answer text, exactly as it is written there, one name per line. Do not "
    "add names that are not in the answer. Do not number the lines or add "
    "any commentary. If there are no names, reply with an empty message."
)

ASSIST_USER_TEMPLATE = "Search query:\n{prompt_text}\n\nAnswer text:\n{response_text}"

# Lines the completion call may emit to signal "nothing found"
ASSIST_EMPTY_MARKERS = frozenset(["none", "n a", "no brands", "no names"])

# ============================================================================
# Well-known competitors
# ============================================================================

# Curated global competitors, merged into the gazetteer only when a config
# sets classifier.use_default_known_competitors. Each item is
# (canonical name, category, aliases).
DEFAULT_KNOWN_COMPETITORS: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    ("HubSpot", "crm", ("hub spot", "hubspot crm", "marketing hub", "sales hub", "service hub")),
    ("Salesforce", "crm", ("sales force", "sfdc", "salesforce crm")),
    ("Zoho CRM", "crm", ("zoho", "zoho one")),
    ("Pipedrive", "crm", ("pipe drive",)),
    ("Freshworks", "crm", ("freshsales", "freshdesk")),
    ("Monday.com", "project", ("mondaycom",)),
    ("Asana", "project", ()),
    ("Trello", "project", ()),
    ("ClickUp", "project", ("click up",)),
    ("Notion", "productivity", ()),
    ("Mailchimp", "email", ("mail chimp",)),
    ("Constant Contact", "email", ("constantcontact",)),
    ("ActiveCampaign", "email", ("active campaign",)),
    ("ConvertKit", "email", ("convert kit",)),
    ("Klaviyo", "email", ()),
    ("GetResponse", "email", ("get response",)),
    ("AWeber", "email", ()),
    ("Campaign Monitor", "email", ("campaignmonitor",)),
    ("Marketo", "automation", ("adobe marketo",)),
    ("Pardot", "automation", ("salesforce pardot",)),
    ("Eloqua", "automation", ("oracle eloqua",)),
    ("SharpSpring", "automation", ("sharp spring",)),
    ("SEMrush", "seo", ("sem rush",)),
    ("Ahrefs", "seo", ()),
    ("Moz", "seo", ("moz pro",)),
    ("Google Analytics", "analytics", ("ga4", "universal analytics")),
    ("Adobe Analytics", "analytics", ("omniture",)),
    ("Mixpanel", "analytics", ()),
    ("Amplitude", "analytics", ()),
    ("Hootsuite", "social", ("hoot suite",)),
    ("Sprout Social", "social", ("sproutsocial",)),
    ("SocialBee", "social", ("social bee",)),
    ("CoSchedule", "social", ("co schedule",)),
    ("BuzzSumo", "content", ("buzz sumo",)),
    ("Canva", "design", ()),
    ("Figma", "design", ()),
    ("Zapier", "automation", ()),
    ("IFTTT", "automation", ()),
    ("Hotjar", "analytics", ("hot jar",)),
    ("Crazy Egg", "analytics", ("crazyegg",)),
    ("Optimizely", "optimization", ()),
    ("VWO", "optimization", ("visual website optimizer",)),
    ("Slack", "communication", ()),
    ("Microsoft Teams", "communication", ("ms teams",)),
    ("Intercom", "support", ()),
    ("Zendesk", "support", ("zen desk",)),
    ("LiveChat", "support", ("live chat",)),
)

# Minimum rapidfuzz ratio for two catalog names to be flagged as likely
# duplicates by the catalog lint
NEAR_DUPLICATE_THRESHOLD = 90.0
