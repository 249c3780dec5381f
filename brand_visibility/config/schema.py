"""
Configuration and catalog schema models for the Brand Visibility Engine.

This module defines Pydantic models for the brand catalog supplied by the
caller and for the engine configuration (engine.config.yaml). All models use
Pydantic v2 field validators for validation.

Models:
    BrandCatalogEntry: A known brand name with its variants (caller-owned)
    KnownCompetitor: A well-known competitor that may not be in the catalog yet
    PenaltyTier: One step of the competitor-density penalty
    ScoringTable: Documented, monotonic scoring constants
    AssistModelConfig: Completion model used by the assisted strategy
    ExtractionSettings: Extraction strategy and candidate limits
    ClassifierSettings: Known-competitor handling
    EngineSettings: All tunables for one analysis
    EngineConfig: Root configuration model (validates entire YAML)
    RuntimeAssistModel: Assist model with API key resolved from environment
"""

from typing import Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from brand_visibility.config.constants import (
    ASSIST_TIMEOUT_SECONDS,
    DEFAULT_KNOWN_COMPETITORS,
    MAX_CANDIDATES,
    MAX_RUN_TOKENS,
    MIN_CANDIDATE_LENGTH,
    STOPWORDS,
)


def _clean_names(values: tuple[str, ...]) -> tuple[str, ...]:
    """Strip names, drop empties and exact duplicates, keep order."""
    cleaned: list[str] = []
    for value in values:
        stripped = value.strip()
        if stripped and stripped not in cleaned:
            cleaned.append(stripped)
    return tuple(cleaned)


class BrandCatalogEntry(BaseModel):
    """
    A known name the organization cares about.

    Catalog entries are owned by the caller's persistence layer. The engine
    only reads them and reports newly observed names back; it never mutates
    an entry.

    Attributes:
        name: Canonical display string
        is_org_brand: True exactly for the organization's own brand(s)
        variants: Alternate spellings (abbreviations, suffix-stripped forms,
            common misspellings) that must resolve to this entry

    Example:
        >>> entry = BrandCatalogEntry(
        ...     name="Acme Corp", is_org_brand=True, variants=["Acme", "ACME Inc."]
        ... )
        >>> entry.variants
        ('Acme', 'ACME Inc.')
    """

    model_config = ConfigDict(frozen=True)

    name: str
    is_org_brand: bool = False
    # Stored catalog rows carry variants as a JSON column named variants_json
    variants: tuple[str, ...] = Field(
        default=(), validation_alias=AliasChoices("variants", "variants_json")
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name is non-empty and strip whitespace."""
        if not v or v.strip() == "":
            raise ValueError("Catalog entry name cannot be empty")
        return v.strip()

    @field_validator("variants", mode="before")
    @classmethod
    def coerce_missing_variants(cls, v: object) -> object:
        """Treat a null variants column as no variants."""
        return () if v is None else v

    @field_validator("variants")
    @classmethod
    def validate_variants(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Strip variants and drop empty or repeated ones."""
        return _clean_names(v)


class KnownCompetitor(BaseModel):
    """
    A well-known competitor name, supplied by the caller or taken from the
    built-in table.

    Known competitors only help resolve names that literally appear in the
    answer. They are never reported as mentioned unless the caller opts in to
    merging unmentioned ones.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    category: str | None = None
    aliases: tuple[str, ...] = ()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name is non-empty and strip whitespace."""
        if not v or v.strip() == "":
            raise ValueError("Known competitor name cannot be empty")
        return v.strip()

    @field_validator("aliases")
    @classmethod
    def validate_aliases(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Strip aliases and drop empty or repeated ones."""
        return _clean_names(v)

    def to_catalog_entry(self) -> BrandCatalogEntry:
        """Return a non-org catalog entry for gazetteer building."""
        return BrandCatalogEntry(name=self.name, is_org_brand=False, variants=self.aliases)


class PenaltyTier(BaseModel):
    """
    One step of the competitor-density penalty.

    A response mentioning at least min_competitors distinct competitors loses
    `penalty` points (the highest matching tier applies).
    """

    model_config = ConfigDict(frozen=True)

    min_competitors: int = Field(ge=1)
    penalty: int = Field(ge=0)


def _default_penalties() -> tuple[PenaltyTier, ...]:
    return (
        PenaltyTier(min_competitors=2, penalty=1),
        PenaltyTier(min_competitors=4, penalty=2),
    )


class ScoringTable(BaseModel):
    """
    Scoring constants for the visibility score.

    The score of an absent org is min_score. A present org scores
    base_presence plus a prominence bonus minus a competitor-density penalty,
    clamped to [min_score, max_score].

    Default table (1-10 scale):
        - absent: 1
        - present: 5 + 3 = 8
        - 0-1 competitors: no penalty
        - 2-3 competitors: -1
        - 4 or more competitors: -2

    Attributes:
        min_score: Lower bound, also the score for an absent org
        max_score: Upper bound
        base_presence: Starting value when the org is present
        presence_bonus: Flat prominence bonus used when rank_bonuses is None
        rank_bonuses: Optional per-rank bonuses (index = org rank, 0 = first
            entity mentioned). Must be non-increasing; ranks beyond the list
            use the last value.
        competitor_penalties: Step function over distinct competitor count.
            Thresholds strictly increasing, penalties non-decreasing.
    """

    model_config = ConfigDict(frozen=True)

    min_score: int = 1
    max_score: int = 10
    base_presence: int = 5
    presence_bonus: int = Field(default=3, ge=0)
    rank_bonuses: tuple[int, ...] | None = None
    competitor_penalties: tuple[PenaltyTier, ...] = Field(
        default_factory=_default_penalties
    )

    @field_validator("rank_bonuses")
    @classmethod
    def validate_rank_bonuses(cls, v: tuple[int, ...] | None) -> tuple[int, ...] | None:
        """Validate rank bonuses are non-negative and non-increasing."""
        if v is None:
            return v
        if not v:
            raise ValueError("rank_bonuses cannot be empty (omit it to use presence_bonus)")
        if any(bonus < 0 for bonus in v):
            raise ValueError("rank_bonuses must be non-negative")
        if any(later > earlier for earlier, later in zip(v, v[1:], strict=False)):
            raise ValueError(
                "rank_bonuses must be non-increasing: an earlier mention "
                "can never earn a smaller bonus than a later one"
            )
        return v

    @field_validator("competitor_penalties")
    @classmethod
    def validate_competitor_penalties(
        cls, v: tuple[PenaltyTier, ...]
    ) -> tuple[PenaltyTier, ...]:
        """Validate the penalty step function is monotonic."""
        for earlier, later in zip(v, v[1:], strict=False):
            if later.min_competitors <= earlier.min_competitors:
                raise ValueError(
                    "competitor_penalties thresholds must be strictly increasing"
                )
            if later.penalty < earlier.penalty:
                raise ValueError(
                    "competitor_penalties must be non-decreasing: more "
                    "competitors can never reduce the penalty"
                )
        return v

    @model_validator(mode="after")
    def validate_bounds(self) -> "ScoringTable":
        """Validate min_score < max_score and base_presence lies within them."""
        if self.min_score >= self.max_score:
            raise ValueError(
                f"max_score ({self.max_score}) must exceed min_score ({self.min_score})"
            )
        if not self.min_score <= self.base_presence <= self.max_score:
            raise ValueError(
                f"base_presence ({self.base_presence}) must lie within "
                f"[{self.min_score}, {self.max_score}]"
            )
        return self


class AssistModelConfig(BaseModel):
    """
    Completion model used by the assisted extraction strategy.

    Attributes:
        provider: Completion provider (OpenAI-compatible chat completions)
        model_name: Model identifier (e.g., "gpt-4o-mini")
        env_api_key: Environment variable holding the API key
        base_url: Optional OpenAI-compatible endpoint base URL
        temperature: Sampling temperature for the extraction call
    """

    provider: Literal["openai"] = "openai"
    model_name: str
    env_api_key: str = "OPENAI_API_KEY"
    base_url: str | None = None
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)

    @field_validator("model_name")
    @classmethod
    def validate_model_name(cls, v: str) -> str:
        """Validate model_name is non-empty."""
        if not v or v.strip() == "":
            raise ValueError("model_name cannot be empty")
        return v.strip()

    @field_validator("env_api_key")
    @classmethod
    def validate_env_api_key(cls, v: str) -> str:
        """Validate env_api_key is non-empty."""
        if not v or v.strip() == "":
            raise ValueError("env_api_key cannot be empty")
        return v.strip()


class ExtractionSettings(BaseModel):
    """
    Extraction strategy selection and candidate limits.

    Attributes:
        strategy: "deterministic" (default, no external call) or "assisted"
        max_candidates: Distinct discovered names kept per response
        max_run_tokens: Longest capitalized run kept as one candidate
        min_candidate_length: Shorter candidates are discarded
        discover_new_names: When False (strict mode) only names resolving
            through the gazetteer are reported; unresolved candidates are
            rejected instead of becoming newly discovered competitors
        extra_stopwords: Additional words that never form a brand name
        assist_timeout_seconds: Bound on the external completion call
        assist_model: Completion model for the assisted strategy
    """

    strategy: Literal["deterministic", "assisted"] = "deterministic"
    max_candidates: int = Field(default=MAX_CANDIDATES, ge=1)
    max_run_tokens: int = Field(default=MAX_RUN_TOKENS, ge=1)
    min_candidate_length: int = Field(default=MIN_CANDIDATE_LENGTH, ge=1)
    discover_new_names: bool = True
    extra_stopwords: tuple[str, ...] = ()
    assist_timeout_seconds: float = Field(default=ASSIST_TIMEOUT_SECONDS, gt=0)
    assist_model: AssistModelConfig | None = None

    @field_validator("extra_stopwords")
    @classmethod
    def validate_extra_stopwords(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Lowercase and strip extra stopwords."""
        return tuple(word.strip().lower() for word in v if word.strip())

    @property
    def stopwords(self) -> frozenset[str]:
        """Built-in stopwords plus extra_stopwords."""
        return STOPWORDS | frozenset(self.extra_stopwords)


class ClassifierSettings(BaseModel):
    """
    Known-competitor handling for the classifier.

    Attributes:
        known_competitors: Caller-supplied well-known competitors
        use_default_known_competitors: Also use the built-in global table
        merge_unmentioned_known_competitors: Report known competitors that
            were NOT mentioned (occurrences=0). Off by default so the engine
            never reports competitors absent from the answer.
        excluded_competitors: Names never reported as competitors, compared
            on normalized form (e.g. partners or the org's own products)
        competitor_overrides: Names always detected as competitors when they
            appear capitalized, even if the generic-word filter or strict
            mode would drop them. An excluded name stays excluded.
    """

    known_competitors: tuple[KnownCompetitor, ...] = ()
    use_default_known_competitors: bool = False
    merge_unmentioned_known_competitors: bool = False
    excluded_competitors: tuple[str, ...] = ()
    competitor_overrides: tuple[str, ...] = ()

    @field_validator("excluded_competitors", "competitor_overrides")
    @classmethod
    def validate_names(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Strip names and drop empty or repeated ones."""
        return _clean_names(v)

    def resolved_known_competitors(self) -> tuple[KnownCompetitor, ...]:
        """
        Return caller-supplied known competitors, then competitor overrides,
        then the built-in table if enabled.
        """
        competitors = list(self.known_competitors)
        competitors.extend(
            KnownCompetitor(name=name, category="override") for name in self.competitor_overrides
        )
        if self.use_default_known_competitors:
            competitors.extend(
                KnownCompetitor(name=name, category=category, aliases=aliases)
                for name, category, aliases in DEFAULT_KNOWN_COMPETITORS
            )
        return tuple(competitors)


class EngineSettings(BaseModel):
    """All tunables for one analysis call."""

    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    classifier: ClassifierSettings = Field(default_factory=ClassifierSettings)
    scoring: ScoringTable = Field(default_factory=ScoringTable)


class EngineConfig(BaseModel):
    """
    Root configuration model for engine.config.yaml.

    Used by the CLI and the eval runner. Services embedding the engine
    usually construct EngineSettings and the catalog directly.

    Example YAML:
        org_name: Acme Corp
        brand_catalog:
          - name: Acme Corp
            is_org_brand: true
            variants: [Acme, ACME Inc.]
          - name: Zendesk
        settings:
          extraction:
            strategy: deterministic
    """

    org_name: str
    brand_catalog: list[BrandCatalogEntry] = Field(default_factory=list)
    settings: EngineSettings = Field(default_factory=EngineSettings)

    @field_validator("org_name")
    @classmethod
    def validate_org_name(cls, v: str) -> str:
        """Validate org_name is non-empty."""
        if not v or v.strip() == "":
            raise ValueError("org_name cannot be empty")
        return v.strip()

    @model_validator(mode="after")
    def validate_assist_model_present(self) -> "EngineConfig":
        """Validate an assist model is configured when the assisted strategy is selected."""
        extraction = self.settings.extraction
        if extraction.strategy == "assisted" and extraction.assist_model is None:
            raise ValueError(
                "settings.extraction.assist_model is required when strategy is 'assisted'"
            )
        return self


class RuntimeAssistModel(BaseModel):
    """
    Assist model configuration with its API key resolved from the environment.

    Security:
        The api_key field is never logged or written to disk.
    """

    provider: str
    model_name: str
    api_key: str = Field(repr=False)
    base_url: str | None = None
    temperature: float = 0.0

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate api_key is non-empty."""
        if not v or v.strip() == "":
            raise ValueError("api_key cannot be empty")
        return v
