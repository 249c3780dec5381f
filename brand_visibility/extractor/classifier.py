"""
Org vs competitor classification of extracted mentions.

A mention belongs to the organization when:
- it resolved to an entry with is_org_brand=True, or
- its normalized text equals normalize(org_name), or
- its normalized text equals a normalized name/variant of an org entry in
  the catalog (covers callers that pass mentions resolved elsewhere)

Everything else is a competitor candidate. Competitors are de-duplicated by
canonical normalized name in first-appearance order, each carrying an
occurrence count within the one response.

Known competitors that were never mentioned are only appended when the caller
opts in with merge_unmentioned_known_competitors; they are flagged
grounded=False and have zero occurrences.

Names the caller excludes (partners, resellers, its own sub-products) are
dropped from the competitor list. They are compared on normalized form
against both the canonical name and the text as written.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from brand_visibility.config.constants import CONFIDENCE_KNOWN
from brand_visibility.config.schema import BrandCatalogEntry, KnownCompetitor
from brand_visibility.extractor.gazetteer import Gazetteer, entry_keys
from brand_visibility.extractor.mention_detector import Mention
from brand_visibility.extractor.normalizer import normalize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompetitorMention:
    """
    One distinct competitor found in a response.

    Attributes:
        name: Canonical display name (catalog name when resolved)
        normalized_name: De-duplication key
        occurrences: Times the competitor appears in this response
            (0 for merged, unmentioned known competitors)
        first_offset: Raw offset of the first occurrence, None when unmentioned
        in_catalog: True if it resolved to an entry of the caller's catalog
        grounded: True if it literally appears in the response
        confidence: Highest confidence among its occurrences
    """

    name: str
    normalized_name: str
    occurrences: int
    first_offset: int | None
    in_catalog: bool
    grounded: bool = True
    confidence: float = 1.0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "normalized_name": self.normalized_name,
            "occurrences": self.occurrences,
            "first_offset": self.first_offset,
            "in_catalog": self.in_catalog,
            "grounded": self.grounded,
            "confidence": self.confidence,
        }


def org_keys(
    catalog: Iterable[BrandCatalogEntry],
    org_name: str,
    gazetteer: Gazetteer | None = None,
) -> frozenset[str]:
    """
    Normalized strings that identify the organization.

    Args:
        catalog: Caller's catalog
        org_name: Organization name passed in directly
        gazetteer: Optional gazetteer; its org-brand keys are included too

    Returns:
        Set of normalized org names and variants
    """
    keys: set[str] = set()
    org_key = normalize(org_name or "")
    if org_key:
        keys.add(org_key)
    for entry in catalog:
        if entry.is_org_brand:
            keys.update(entry_keys(entry))
    if gazetteer is not None:
        keys.update(key for key, entry in gazetteer.entries.items() if entry.is_org_brand)
    return frozenset(keys)


def is_org_mention(mention: Mention, keys: frozenset[str]) -> bool:
    """True if the mention refers to the organization."""
    if mention.matched_entry is not None and mention.matched_entry.is_org_brand:
        return True
    return mention.normalized_text in keys


def classify(
    mentions: Sequence[Mention],
    catalog: Iterable[BrandCatalogEntry],
    org_name: str,
    gazetteer: Gazetteer | None = None,
    known_competitors: Iterable[KnownCompetitor] = (),
    merge_unmentioned_known_competitors: bool = False,
    excluded_competitors: Iterable[str] = (),
) -> tuple[list[Mention], list[CompetitorMention]]:
    """
    Split mentions into org mentions and de-duplicated competitors.

    Pure and deterministic: the same input always yields equal output.

    Args:
        mentions: Mentions sorted by first appearance
        catalog: Caller's catalog
        org_name: Organization name
        gazetteer: Optional gazetteer used to build the mentions
        known_competitors: Well-known competitors (only used when merging)
        merge_unmentioned_known_competitors: Append known competitors that
            were not mentioned (occurrences=0, grounded=False)
        excluded_competitors: Names never reported as competitors

    Returns:
        (org_mentions, competitors), both in first-appearance order

    Example:
        >>> catalog = [BrandCatalogEntry(name="Acme Corp", is_org_brand=True)]
        >>> mentions = DeterministicExtractor().extract(
        ...     "Acme Corp beats Zendesk. Zendesk is older.", catalog, "Acme Corp")
        >>> org, competitors = classify(mentions, catalog, "Acme Corp")
        >>> [(c.name, c.occurrences) for c in competitors]
        [('Zendesk', 2)]
    """
    keys = org_keys(catalog, org_name, gazetteer)
    excluded = frozenset(normalize(name) for name in excluded_competitors) - {""}

    org_mentions: list[Mention] = []
    groups: dict[str, list[Mention]] = {}

    for mention in sorted(mentions, key=lambda m: m.start_offset):
        if is_org_mention(mention, keys):
            org_mentions.append(mention)
        elif mention.canonical_key in excluded or mention.normalized_text in excluded:
            logger.debug(f"Excluded competitor mention '{mention.raw_text}'")
        else:
            groups.setdefault(mention.canonical_key, []).append(mention)

    competitors = [
        CompetitorMention(
            name=group[0].canonical_name,
            normalized_name=key,
            occurrences=len(group),
            first_offset=group[0].start_offset,
            in_catalog=any(m.in_catalog for m in group),
            grounded=True,
            confidence=max(m.confidence for m in group),
        )
        for key, group in groups.items()
    ]

    if merge_unmentioned_known_competitors:
        seen = set(groups) | keys | excluded
        for competitor in known_competitors:
            key = normalize(competitor.name)
            if not key or key in seen:
                continue
            seen.add(key)
            competitors.append(
                CompetitorMention(
                    name=competitor.name,
                    normalized_name=key,
                    occurrences=0,
                    first_offset=None,
                    in_catalog=False,
                    grounded=False,
                    confidence=CONFIDENCE_KNOWN,
                )
            )
            logger.debug(f"Merged unmentioned known competitor '{competitor.name}'")

    return org_mentions, competitors
