"""
Brand mention detection: the deterministic extraction strategy.

Scans a response in two passes:

1. Gazetteer scan. The normalized response is split into tokens; at every
   token position the longest n-gram present in the gazetteer wins. Matching
   happens on normalized text, so case, punctuation and possessives
   ("Acme Corp's") never prevent a hit, while token boundaries prevent
   substring false positives ("hub" never matches inside "GitHub").
2. Capitalization-run discovery (see candidates.py) for names that are not
   in the gazetteer yet. Each candidate is resolved through the gazetteer;
   unresolved candidates become newly discovered mentions.

Key features:
- Mentions carry raw text, normalized text and raw character offsets
- Output sorted by first appearance (prominence depends on it)
- Well-known competitors only match capitalized text, so dictionary-word
  brand names ("Notion", "Slack") don't fire on ordinary prose
- Overlapping matches resolved in favour of the longer match, except that
  a gazetteer match of the organization is never displaced

Example:
    >>> catalog = [BrandCatalogEntry(name="Acme Corp", is_org_brand=True)]
    >>> extractor = DeterministicExtractor()
    >>> mentions = extractor.extract("Try Acme Corp or Zendesk.", catalog, "Acme Corp", "best help desk")
    >>> [(m.raw_text, m.source) for m in mentions]
    [('Acme Corp', 'gazetteer'), ('Zendesk', 'pattern')]
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from brand_visibility.config.constants import (
    CONFIDENCE_ASSISTED,
    CONFIDENCE_CATALOG,
    CONFIDENCE_DISCOVERED,
    CONFIDENCE_KNOWN,
)
from brand_visibility.config.schema import (
    BrandCatalogEntry,
    ExtractionSettings,
    KnownCompetitor,
)
from brand_visibility.extractor.candidates import discover_candidates
from brand_visibility.extractor.gazetteer import ORIGIN_KNOWN, Gazetteer, build_gazetteer
from brand_visibility.extractor.normalizer import (
    normalize,
    normalize_with_offsets,
    tokenize_normalized,
)

logger = logging.getLogger(__name__)

SOURCE_GAZETTEER = "gazetteer"
SOURCE_PATTERN = "pattern"
SOURCE_ASSISTED = "assisted"
VALID_SOURCES = (SOURCE_GAZETTEER, SOURCE_PATTERN, SOURCE_ASSISTED)

# Preferred source when two overlapping matches have the same length
_SOURCE_RANK = {SOURCE_GAZETTEER: 0, SOURCE_PATTERN: 1, SOURCE_ASSISTED: 2}


@dataclass(frozen=True)
class Mention:
    """
    A single occurrence of a name found in the response.

    Attributes:
        raw_text: Substring exactly as it appears in the response
        normalized_text: normalize(raw_text)
        start_offset: Raw character offset of the occurrence
        matched_entry: Resolved catalog entry, or None for a newly discovered name
        source: "gazetteer", "pattern" or "assisted"
        in_catalog: True if matched_entry belongs to the caller's catalog
            (False for the synthetic org entry and for known competitors)
    """

    raw_text: str
    normalized_text: str
    start_offset: int
    matched_entry: BrandCatalogEntry | None = None
    source: str = SOURCE_GAZETTEER
    in_catalog: bool = False

    def __post_init__(self):
        """Validate source and offset."""
        if self.source not in VALID_SOURCES:
            raise ValueError(f"source must be one of {VALID_SOURCES}, got '{self.source}'")
        if self.start_offset < 0:
            raise ValueError(f"start_offset must be >= 0, got {self.start_offset}")

    @property
    def end_offset(self) -> int:
        return self.start_offset + len(self.raw_text)

    @property
    def canonical_name(self) -> str:
        """Display name: the entry name when resolved, otherwise the raw text."""
        return self.matched_entry.name if self.matched_entry else self.raw_text

    @property
    def canonical_key(self) -> str:
        """De-duplication key: normalized canonical name."""
        if self.matched_entry:
            return normalize(self.matched_entry.name)
        return self.normalized_text

    @property
    def confidence(self) -> float:
        """Coarse confidence that this occurrence is a real brand mention."""
        if self.matched_entry is not None:
            return CONFIDENCE_CATALOG if self.in_catalog else CONFIDENCE_KNOWN
        if self.source == SOURCE_ASSISTED:
            return CONFIDENCE_ASSISTED
        return CONFIDENCE_DISCOVERED

    def to_dict(self) -> dict:
        return {
            "raw_text": self.raw_text,
            "normalized_text": self.normalized_text,
            "start_offset": self.start_offset,
            "matched_entry": self.matched_entry.name if self.matched_entry else None,
            "source": self.source,
            "in_catalog": self.in_catalog,
        }


@dataclass(frozen=True)
class ExtractionOutcome:
    """
    Mentions plus the bookkeeping reported in result metadata.

    Attributes:
        mentions: Mentions sorted by start_offset
        method: Strategy that produced them ("deterministic" or "assisted")
        candidates_considered: Distinct names examined
        rejected_candidates: Distinct names dropped (filter, cap, grounding)
    """

    mentions: tuple[Mention, ...]
    method: str
    candidates_considered: int = 0
    rejected_candidates: tuple[str, ...] = ()


class MentionExtractor(Protocol):
    """
    Contract shared by the extraction strategies.

    Both DeterministicExtractor and AssistedExtractor implement it; the
    strategy is chosen by configuration in parser.analyze_response().
    """

    method: str

    def extract(
        self,
        response_text: str,
        catalog: Sequence[BrandCatalogEntry],
        org_name: str,
        prompt_text: str,
    ) -> list[Mention]:
        """Return mentions in order of first appearance."""
        ...

    def extract_outcome(
        self,
        response_text: str,
        catalog: Sequence[BrandCatalogEntry],
        org_name: str,
        prompt_text: str,
        gazetteer: Gazetteer | None = None,
        known_competitors: Iterable[KnownCompetitor] = (),
    ) -> ExtractionOutcome:
        """Return mentions together with extraction bookkeeping."""
        ...


def find_gazetteer_mentions(response_text: str, gazetteer: Gazetteer) -> list[Mention]:
    """
    Find every gazetteer variant occurring in the response.

    Longest match first at each token position; matched tokens are consumed,
    so "Acme Corp" wins over "Acme" and the two never overlap.

    Args:
        response_text: Raw response text
        gazetteer: Built gazetteer

    Returns:
        Mentions in order of appearance

    Example:
        >>> gazetteer = build_gazetteer([BrandCatalogEntry(name="Acme Corp")])
        >>> [m.raw_text for m in find_gazetteer_mentions("acme corp's CRM", gazetteer)]
        ['acme corp']
    """
    if gazetteer.max_key_tokens == 0:
        return []

    normalized, offsets = normalize_with_offsets(response_text)
    spans = tokenize_normalized(normalized)
    mentions: list[Mention] = []

    i = 0
    while i < len(spans):
        matched_tokens = 0
        for n in range(min(gazetteer.max_key_tokens, len(spans) - i), 0, -1):
            key = normalized[spans[i][0] : spans[i + n - 1][1]]
            entry = gazetteer.resolve(key)
            if entry is None:
                continue

            raw_start = offsets[spans[i][0]]
            raw_end = offsets[spans[i + n - 1][1] - 1] + 1
            raw_text = response_text[raw_start:raw_end]

            if gazetteer.origin(key) == ORIGIN_KNOWN and not raw_text[:1].isupper():
                continue

            mentions.append(
                Mention(
                    raw_text=raw_text,
                    normalized_text=key,
                    start_offset=raw_start,
                    matched_entry=entry,
                    source=SOURCE_GAZETTEER,
                    in_catalog=gazetteer.is_catalog_entry(entry),
                )
            )
            matched_tokens = n
            break

        i += matched_tokens or 1

    return mentions


def _is_org_gazetteer_match(mention: Mention) -> bool:
    return (
        mention.source == SOURCE_GAZETTEER
        and mention.matched_entry is not None
        and mention.matched_entry.is_org_brand
    )


def remove_overlapping_mentions(mentions: Iterable[Mention]) -> list[Mention]:
    """
    Drop mentions whose raw span overlaps an earlier, longer one.

    Gazetteer matches resolved to an org entry are kept first, so a longer
    unresolved span around the org name ("Acme Corp Helpdesk") never turns
    the organization into a competitor. Otherwise the longer match wins; on
    equal length gazetteer matches beat pattern matches, which beat
    assisted ones.

    Args:
        mentions: Mentions from any sources

    Returns:
        Non-overlapping mentions sorted by start_offset
    """
    ordered = sorted(
        mentions,
        key=lambda m: (
            not _is_org_gazetteer_match(m),
            -len(m.raw_text),
            _SOURCE_RANK[m.source],
            m.start_offset,
        ),
    )
    kept: list[Mention] = []
    for mention in ordered:
        if any(
            mention.start_offset < other.end_offset and other.start_offset < mention.end_offset
            for other in kept
        ):
            continue
        kept.append(mention)

    kept.sort(key=lambda m: m.start_offset)
    return kept


@dataclass
class DeterministicExtractor:
    """
    Default extraction strategy: gazetteer scan plus capitalization runs.

    Makes no external calls and always succeeds for valid input, which also
    makes it the fallback when the assisted strategy fails.

    Attributes:
        settings: Candidate limits, stopwords and strict mode
    """

    settings: ExtractionSettings = field(default_factory=ExtractionSettings)
    method: str = "deterministic"

    def extract(
        self,
        response_text: str,
        catalog: Sequence[BrandCatalogEntry],
        org_name: str,
        prompt_text: str = "",
    ) -> list[Mention]:
        """Return mentions in order of first appearance."""
        return list(
            self.extract_outcome(response_text, catalog, org_name, prompt_text).mentions
        )

    def extract_outcome(
        self,
        response_text: str,
        catalog: Sequence[BrandCatalogEntry],
        org_name: str,
        prompt_text: str = "",
        gazetteer: Gazetteer | None = None,
        known_competitors: Iterable[KnownCompetitor] = (),
    ) -> ExtractionOutcome:
        """
        Extract mentions and report how many candidates were examined.

        Args:
            response_text: Raw response text
            catalog: Caller's catalog (used when no gazetteer is passed)
            org_name: Organization name (used when no gazetteer is passed)
            prompt_text: Tracked prompt (unused by this strategy)
            gazetteer: Prebuilt gazetteer, e.g. from GazetteerCache
            known_competitors: Used when no gazetteer is passed

        Returns:
            ExtractionOutcome with method="deterministic"
        """
        if gazetteer is None:
            gazetteer = build_gazetteer(catalog, org_name, known_competitors)

        gazetteer_mentions = find_gazetteer_mentions(response_text, gazetteer)

        discovery = discover_candidates(
            response_text,
            blocked_spans=[(m.start_offset, m.end_offset) for m in gazetteer_mentions],
            max_candidates=self.settings.max_candidates,
            max_run_tokens=self.settings.max_run_tokens,
            min_length=self.settings.min_candidate_length,
            stopwords=self.settings.stopwords,
        )

        rejected = list(discovery.rejected)
        discovered: list[Mention] = []
        for candidate in discovery.candidates:
            entry = gazetteer.resolve(candidate.normalized)
            if entry is None and not self.settings.discover_new_names:
                if candidate.text not in rejected:
                    rejected.append(candidate.text)
                continue
            discovered.append(
                Mention(
                    raw_text=candidate.text,
                    normalized_text=candidate.normalized,
                    start_offset=candidate.start,
                    matched_entry=entry,
                    source=SOURCE_PATTERN,
                    in_catalog=gazetteer.is_catalog_entry(entry),
                )
            )

        mentions = sorted(gazetteer_mentions + discovered, key=lambda m: m.start_offset)
        considered = len({m.normalized_text for m in gazetteer_mentions}) + discovery.considered

        logger.debug(
            f"Deterministic extraction: {len(gazetteer_mentions)} gazetteer hits, "
            f"{len(discovered)} discovered, {len(rejected)} rejected"
        )

        return ExtractionOutcome(
            mentions=tuple(mentions),
            method=self.method,
            candidates_considered=considered,
            rejected_candidates=tuple(rejected),
        )
