"""
Response analysis pipeline and result assembly for the Brand Visibility Engine.

This module ties together gazetteer building, mention extraction,
classification and scoring into a single entry point. It turns one
(prompt, response) pair into an immutable AnalysisResult.

Processing pipeline:
1. Validate inputs (InputError on empty response or prompt, no partial result)
2. Build the gazetteer, or use one supplied by the caller (e.g. GazetteerCache)
3. Run the configured extraction strategy:
   - deterministic: gazetteer scan plus capitalization runs (default)
   - assisted: external completion call with mandatory grounding, falling
     back to deterministic on any ExternalAssistFailure
4. Classify mentions into org mentions and de-duplicated competitors
5. Score and assemble the result

Key features:
- Pure apart from the optional assisted completion call
- Stateless: safe to run concurrently for unrelated (org, prompt) pairs
- Degenerate answers (no mentions at all) yield a normal result with score=MIN
- Newly observed competitor names are returned, never written anywhere

Example:
    >>> catalog = [BrandCatalogEntry(name="Acme Corp", is_org_brand=True)]
    >>> result = analyze_response(
    ...     response_text="We recommend Acme Corp for this use case.",
    ...     prompt_text="best help desk software",
    ...     org_name="Acme Corp",
    ...     brand_catalog=catalog,
    ... )
    >>> (result.org_brand_present, result.org_brand_position, result.score)
    (True, 0, 8)
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from brand_visibility.completion.models import CompletionClient
from brand_visibility.config.constants import ANALYSIS_VERSION, CONFIDENCE_EMPTY
from brand_visibility.config.schema import (
    BrandCatalogEntry,
    EngineSettings,
    ScoringTable,
)
from brand_visibility.exceptions import ExternalAssistFailure, InputError
from brand_visibility.extractor.assisted_extractor import AssistedExtractor
from brand_visibility.extractor.classifier import CompetitorMention, classify
from brand_visibility.extractor.gazetteer import CatalogCollision, Gazetteer, build_gazetteer
from brand_visibility.extractor.mention_detector import (
    DeterministicExtractor,
    ExtractionOutcome,
    Mention,
)
from brand_visibility.extractor.scoring import DEFAULT_SCORING, prominence_rank, score
from brand_visibility.utils.logging import log_with_context

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisMetadata:
    """
    Observability data attached to every AnalysisResult.

    Attributes:
        method: Strategy that produced the mentions ("deterministic" or "assisted")
        confidence: Mean per-mention confidence, 1.0 when there are no mentions
        fallback_used: True if the assisted strategy was requested but the
            deterministic strategy produced the result
        fallback_reason: Why the fallback happened
        candidates_considered: Distinct names examined by the extractor
        rejected_candidates: Distinct names dropped by filters or grounding
        catalog_collisions: Catalog variants shared by more than one entry
        response_length: Length of response_text in characters
        mention_count: Total mentions (org and competitor occurrences)
        analysis_version: Version of the extraction and scoring rules
    """

    method: str
    confidence: float
    fallback_used: bool = False
    fallback_reason: str | None = None
    candidates_considered: int = 0
    rejected_candidates: tuple[str, ...] = ()
    catalog_collisions: tuple[CatalogCollision, ...] = ()
    response_length: int = 0
    mention_count: int = 0
    analysis_version: str = ANALYSIS_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "confidence": self.confidence,
            "fallback_used": self.fallback_used,
            "fallback_reason": self.fallback_reason,
            "candidates_considered": self.candidates_considered,
            "rejected_candidates": list(self.rejected_candidates),
            "catalog_collisions": [c.to_dict() for c in self.catalog_collisions],
            "response_length": self.response_length,
            "mention_count": self.mention_count,
            "analysis_version": self.analysis_version,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """
    The engine's sole output for one (prompt, response) pair.

    Immutable once returned; callers persist to_dict() verbatim.

    Attributes:
        org_brand_present: True if at least one mention refers to the org
        org_brand_position: 0-based rank of the org among distinct entities
            ordered by first appearance, None when absent
        org_brands: Canonical org names seen, in first-appearance order
        competitors: De-duplicated competitors in first-appearance order
        competitor_count: len(competitors)
        score: Visibility score in [min_score, max_score]
        new_names: Competitor names not in the caller's catalog (to upsert)
        metadata: Strategy, confidence and extraction bookkeeping
    """

    org_brand_present: bool
    org_brand_position: int | None
    org_brands: tuple[str, ...]
    competitors: tuple[CompetitorMention, ...]
    competitor_count: int
    score: int
    new_names: tuple[str, ...]
    metadata: AnalysisMetadata

    @property
    def competitor_names(self) -> list[str]:
        return [c.name for c in self.competitors]

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dict."""
        return {
            "org_brand_present": self.org_brand_present,
            "org_brand_position": self.org_brand_position,
            "org_brands": list(self.org_brands),
            "competitors": [c.to_dict() for c in self.competitors],
            "competitor_count": self.competitor_count,
            "score": self.score,
            "new_names": list(self.new_names),
            "metadata": self.metadata.to_dict(),
        }


def validate_inputs(response_text: object, prompt_text: object) -> None:
    """
    Fail fast on missing input.

    Raises:
        InputError: If response_text or prompt_text is missing, not a string,
            or whitespace-only
    """
    if not isinstance(response_text, str) or not response_text.strip():
        raise InputError("response_text cannot be empty")
    if not isinstance(prompt_text, str) or not prompt_text.strip():
        raise InputError("prompt_text cannot be empty")


def coerce_catalog(
    brand_catalog: Iterable[BrandCatalogEntry | Mapping[str, Any]] | None,
) -> list[BrandCatalogEntry]:
    """
    Accept catalog rows as models or plain dicts (e.g. database rows).

    Raises:
        InputError: If a row is not a valid catalog entry
    """
    if brand_catalog is None:
        return []

    entries: list[BrandCatalogEntry] = []
    for i, row in enumerate(brand_catalog):
        if isinstance(row, BrandCatalogEntry):
            entries.append(row)
            continue
        try:
            entries.append(BrandCatalogEntry.model_validate(row))
        except ValueError as e:
            raise InputError(f"Invalid brand catalog entry at index {i}: {e}") from e
    return entries


def _mean_confidence(mentions: Sequence[Mention]) -> float:
    if not mentions:
        return CONFIDENCE_EMPTY
    return round(sum(m.confidence for m in mentions) / len(mentions), 3)


def assemble_result(
    org_mentions: Sequence[Mention],
    competitors: Sequence[CompetitorMention],
    outcome: ExtractionOutcome,
    org_name: str,
    table: ScoringTable = DEFAULT_SCORING,
    collisions: Sequence[CatalogCollision] = (),
    response_length: int = 0,
    fallback_reason: str | None = None,
) -> AnalysisResult:
    """
    Merge classifier and score outputs into an AnalysisResult.

    No I/O; a pure transformation.

    Args:
        org_mentions: Org mentions from classify()
        competitors: Competitors from classify()
        outcome: Extraction outcome the mentions came from
        org_name: Organization name (display name for unresolved org mentions)
        table: Scoring constants
        collisions: Catalog collisions found while building the gazetteer
        response_length: Length of the analyzed response
        fallback_reason: Set when the deterministic strategy replaced the
            assisted one

    Returns:
        Immutable AnalysisResult
    """
    org_brands: list[str] = []
    for mention in org_mentions:
        name = mention.matched_entry.name if mention.matched_entry else org_name.strip()
        if name not in org_brands:
            org_brands.append(name)

    present = bool(org_mentions)
    position = prominence_rank(org_mentions, competitors)
    competitor_count = len(competitors)

    metadata = AnalysisMetadata(
        method=outcome.method,
        confidence=_mean_confidence(outcome.mentions),
        fallback_used=fallback_reason is not None,
        fallback_reason=fallback_reason,
        candidates_considered=outcome.candidates_considered,
        rejected_candidates=tuple(outcome.rejected_candidates),
        catalog_collisions=tuple(collisions),
        response_length=response_length,
        mention_count=len(outcome.mentions),
    )

    return AnalysisResult(
        org_brand_present=present,
        org_brand_position=position,
        org_brands=tuple(org_brands),
        competitors=tuple(competitors),
        competitor_count=competitor_count,
        score=score(present, position, competitor_count, table),
        new_names=tuple(c.name for c in competitors if c.grounded and not c.in_catalog),
        metadata=metadata,
    )


def analyze_response(
    response_text: str,
    prompt_text: str,
    org_name: str,
    brand_catalog: Iterable[BrandCatalogEntry | Mapping[str, Any]] | None = None,
    settings: EngineSettings | None = None,
    client: CompletionClient | None = None,
    gazetteer: Gazetteer | None = None,
    analysis_id: str | None = None,
) -> AnalysisResult:
    """
    Analyze one provider response for brand visibility.

    Args:
        response_text: Raw text produced by the upstream language model
        prompt_text: Tracked search prompt that elicited the response
        org_name: Organization name
        brand_catalog: Catalog entries (models or dicts); only read
        settings: Engine settings (defaults when None)
        client: Completion client, required by the assisted strategy
        gazetteer: Prebuilt gazetteer for this catalog (e.g. from GazetteerCache)
        analysis_id: Optional correlation id added to log records

    Returns:
        AnalysisResult

    Raises:
        InputError: If response_text or prompt_text is empty, or a catalog
            row is invalid

    Note:
        ExternalAssistFailure never escapes: the deterministic strategy takes
        over and metadata.fallback_used is set.
    """
    validate_inputs(response_text, prompt_text)
    catalog = coerce_catalog(brand_catalog)
    settings = settings or EngineSettings()
    known_competitors = settings.classifier.resolved_known_competitors()

    if gazetteer is None:
        gazetteer = build_gazetteer(catalog, org_name, known_competitors)

    outcome: ExtractionOutcome | None = None
    fallback_reason: str | None = None

    if settings.extraction.strategy == "assisted":
        if client is None:
            fallback_reason = "no completion client configured"
            logger.warning("Assisted strategy selected without a completion client, using deterministic")
        else:
            extractor = AssistedExtractor(client=client, settings=settings.extraction)
            try:
                outcome = extractor.extract_outcome(
                    response_text, catalog, org_name, prompt_text, gazetteer=gazetteer
                )
            except ExternalAssistFailure as e:
                fallback_reason = str(e)
                logger.warning(f"Assisted extraction failed, falling back to deterministic: {e}")

    if outcome is None:
        outcome = DeterministicExtractor(settings=settings.extraction).extract_outcome(
            response_text, catalog, org_name, prompt_text, gazetteer=gazetteer
        )

    org_mentions, competitors = classify(
        outcome.mentions,
        catalog,
        org_name,
        gazetteer=gazetteer,
        known_competitors=known_competitors,
        merge_unmentioned_known_competitors=settings.classifier.merge_unmentioned_known_competitors,
        excluded_competitors=settings.classifier.excluded_competitors,
    )

    result = assemble_result(
        org_mentions,
        competitors,
        outcome,
        org_name,
        table=settings.scoring,
        collisions=gazetteer.collisions,
        response_length=len(response_text),
        fallback_reason=fallback_reason,
    )

    log_with_context(
        logger,
        logging.INFO,
        "Analysis completed",
        context={
            "method": result.metadata.method,
            "fallback_used": result.metadata.fallback_used,
            "org_brand_present": result.org_brand_present,
            "competitor_count": result.competitor_count,
            "score": result.score,
        },
        analysis_id=analysis_id,
    )

    return result
