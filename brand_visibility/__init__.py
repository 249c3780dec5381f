"""
Brand Visibility Engine.

Extracts brand and competitor mentions from AI-generated answers and scores
how visible the organization's brand is.

Example:
    >>> from brand_visibility import BrandCatalogEntry, analyze_response
    >>> result = analyze_response(
    ...     "Top tools: Acme Corp, Zendesk, Freshdesk, Intercom.",
    ...     "best help desk software",
    ...     "Acme Corp",
    ...     [BrandCatalogEntry(name="Acme Corp", is_org_brand=True)],
    ... )
    >>> result.score
    7
"""

from brand_visibility.config.schema import (
    BrandCatalogEntry,
    EngineSettings,
    KnownCompetitor,
    ScoringTable,
)
from brand_visibility.exceptions import (
    BrandVisibilityError,
    ExternalAssistFailure,
    InputError,
)
from brand_visibility.extractor import (
    AnalysisMetadata,
    AnalysisResult,
    AssistedExtractor,
    CatalogCollision,
    CompetitorMention,
    DeterministicExtractor,
    Gazetteer,
    GazetteerCache,
    Mention,
    analyze_response,
    build_gazetteer,
    classify,
    normalize,
    score,
)

__all__ = [
    "AnalysisMetadata",
    "AnalysisResult",
    "AssistedExtractor",
    "BrandCatalogEntry",
    "BrandVisibilityError",
    "CatalogCollision",
    "CompetitorMention",
    "DeterministicExtractor",
    "EngineSettings",
    "ExternalAssistFailure",
    "Gazetteer",
    "GazetteerCache",
    "InputError",
    "KnownCompetitor",
    "Mention",
    "ScoringTable",
    "analyze_response",
    "build_gazetteer",
    "classify",
    "normalize",
    "score",
]
