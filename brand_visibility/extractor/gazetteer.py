"""
Gazetteer building for brand resolution.

Turns the caller's brand catalog (plus the org name and optional well-known
competitors) into a read-only hash map from every normalized variant to
exactly one canonical BrandCatalogEntry.

Key features:
- Exact normalized-string equality only (no fuzzy matching at lookup time)
- Org-brand priority on collisions: an org is never resolved as its own
  competitor because of a stale catalog entry
- Collisions recorded on the gazetteer and logged, never raised
- Read-only after build (MappingProxyType), safe to share across threads
- GazetteerCache for callers that reuse gazetteers per catalog version
- find_near_duplicates() catalog lint using rapidfuzz

Example:
    >>> catalog = [BrandCatalogEntry(name="Acme Corp", is_org_brand=True, variants=["Acme"])]
    >>> gazetteer = build_gazetteer(catalog, org_name="Acme Corp")
    >>> gazetteer.resolve("acme").name
    'Acme Corp'
    >>> gazetteer.resolve("zendesk") is None
    True
"""

import logging
import threading
from collections.abc import Hashable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from rapidfuzz import fuzz

from brand_visibility.config.constants import NEAR_DUPLICATE_THRESHOLD
from brand_visibility.config.schema import BrandCatalogEntry, KnownCompetitor
from brand_visibility.extractor.normalizer import normalize

logger = logging.getLogger(__name__)

# Where a gazetteer key came from
ORIGIN_CATALOG = "catalog"
ORIGIN_ORG_NAME = "org_name"
ORIGIN_KNOWN = "known"

# Lower value wins a collision
_PRIORITY_ORG = 0
_PRIORITY_CATALOG = 1
_PRIORITY_KNOWN = 2


@dataclass(frozen=True)
class CatalogCollision:
    """
    Two entries normalized to the same variant key.

    Attributes:
        key: The shared normalized variant
        kept: Canonical name of the entry the key resolves to
        dropped: Canonical name of the entry that lost the key
    """

    key: str
    kept: str
    dropped: str

    def to_dict(self) -> dict[str, str]:
        return {"key": self.key, "kept": self.kept, "dropped": self.dropped}


@dataclass(frozen=True)
class Gazetteer:
    """
    Read-only lookup from normalized variants to canonical catalog entries.

    Build with build_gazetteer(); do not construct directly.

    Attributes:
        entries: Normalized variant -> canonical entry
        origins: Normalized variant -> ORIGIN_* of the winning entry
        catalog_entries: Entries that came from the caller's catalog
        collisions: Catalog inconsistencies found while building
        max_key_tokens: Longest variant length in tokens (0 when empty)
    """

    entries: Mapping[str, BrandCatalogEntry]
    origins: Mapping[str, str]
    catalog_entries: frozenset[BrandCatalogEntry]
    collisions: tuple[CatalogCollision, ...] = ()
    max_key_tokens: int = 0

    def resolve(self, normalized_candidate: str) -> BrandCatalogEntry | None:
        """
        Resolve a normalized candidate to its canonical entry.

        Args:
            normalized_candidate: Output of normalize()

        Returns:
            The matching entry, or None for newly discovered names
        """
        if not normalized_candidate:
            return None
        return self.entries.get(normalized_candidate)

    def origin(self, normalized_key: str) -> str | None:
        """Return where the entry for this key came from, or None if unknown."""
        return self.origins.get(normalized_key)

    def is_catalog_entry(self, entry: BrandCatalogEntry | None) -> bool:
        """True if the entry belongs to the caller's catalog."""
        return entry is not None and entry in self.catalog_entries

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, normalized_key: object) -> bool:
        return normalized_key in self.entries


def entry_keys(entry: BrandCatalogEntry) -> list[str]:
    """Normalized keys for an entry's name and variants, in order, deduplicated."""
    keys: list[str] = []
    for variant in (entry.name, *entry.variants):
        key = normalize(variant)
        if key and key not in keys:
            keys.append(key)
    return keys


def build_gazetteer(
    catalog: Iterable[BrandCatalogEntry],
    org_name: str | None = None,
    known_competitors: Iterable[KnownCompetitor] = (),
) -> Gazetteer:
    """
    Build a gazetteer from catalog entries.

    Pure: the catalog is only read. An empty catalog (and no org name) yields
    a gazetteer that resolves nothing.

    Collision priority when several entries share a normalized key:
    1. Org-brand entries (from the catalog, or synthesized from org_name)
    2. Catalog competitor entries
    3. Known competitors
    Among equals the first entry seen keeps the key.

    Args:
        catalog: Caller-supplied catalog entries
        org_name: Organization name. Added as a synthetic org entry when it
            does not already resolve to an org-brand catalog entry.
        known_competitors: Well-known competitors not necessarily in the catalog

    Returns:
        Read-only Gazetteer

    Example:
        >>> catalog = [
        ...     BrandCatalogEntry(name="Acme", is_org_brand=False),
        ...     BrandCatalogEntry(name="Acme Corp", is_org_brand=True, variants=["Acme"]),
        ... ]
        >>> gazetteer = build_gazetteer(catalog)
        >>> gazetteer.resolve("acme").is_org_brand
        True
        >>> gazetteer.collisions[0].dropped
        'Acme'
    """
    entries: dict[str, BrandCatalogEntry] = {}
    origins: dict[str, str] = {}
    priorities: dict[str, int] = {}
    collisions: list[CatalogCollision] = []
    catalog_entries: set[BrandCatalogEntry] = set()

    def add(entry: BrandCatalogEntry, origin: str, priority: int) -> None:
        for key in entry_keys(entry):
            existing = entries.get(key)
            if existing is None:
                entries[key] = entry
                origins[key] = origin
                priorities[key] = priority
                continue
            if existing == entry:
                continue

            if priority < priorities[key]:
                kept, dropped = entry, existing
                entries[key] = entry
                origins[key] = origin
                priorities[key] = priority
            else:
                kept, dropped = existing, entry

            if origin == ORIGIN_KNOWN:
                # A known competitor shadowed by the catalog is expected
                logger.debug(
                    f"Known competitor '{entry.name}' shadowed by '{kept.name}' on key '{key}'"
                )
                continue

            collisions.append(CatalogCollision(key=key, kept=kept.name, dropped=dropped.name))
            logger.warning(
                f"Catalog collision on '{key}': '{kept.name}' kept, "
                f"'{dropped.name}' dropped"
            )

    for entry in catalog:
        catalog_entries.add(entry)
        add(entry, ORIGIN_CATALOG, _PRIORITY_ORG if entry.is_org_brand else _PRIORITY_CATALOG)

    if org_name and org_name.strip():
        org_key = normalize(org_name)
        resolved = entries.get(org_key)
        if org_key and (resolved is None or not resolved.is_org_brand):
            add(
                BrandCatalogEntry(name=org_name.strip(), is_org_brand=True),
                ORIGIN_ORG_NAME,
                _PRIORITY_ORG,
            )

    for competitor in known_competitors:
        add(competitor.to_catalog_entry(), ORIGIN_KNOWN, _PRIORITY_KNOWN)

    max_key_tokens = max((key.count(" ") + 1 for key in entries), default=0)

    logger.debug(
        f"Built gazetteer: {len(entries)} keys, {len(catalog_entries)} catalog entries, "
        f"{len(collisions)} collisions"
    )

    return Gazetteer(
        entries=MappingProxyType(entries),
        origins=MappingProxyType(origins),
        catalog_entries=frozenset(catalog_entries),
        collisions=tuple(collisions),
        max_key_tokens=max_key_tokens,
    )


@dataclass
class GazetteerCache:
    """
    Thread-safe cache of built gazetteers keyed by caller key and catalog version.

    A cached gazetteer is returned only for the exact catalog_version it was
    built from; any other version triggers a rebuild that replaces the slot.
    Gazetteers themselves are read-only, so the lock only guards the slot map.

    Example:
        >>> cache = GazetteerCache()
        >>> g1 = cache.get_or_build("org-1", 7, catalog, org_name="Acme Corp")
        >>> g2 = cache.get_or_build("org-1", 7, catalog, org_name="Acme Corp")
        >>> g1 is g2
        True
    """

    max_size: int = 256
    _slots: dict[Hashable, tuple[Hashable, Gazetteer]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def get_or_build(
        self,
        cache_key: Hashable,
        catalog_version: Hashable,
        catalog: Iterable[BrandCatalogEntry],
        org_name: str | None = None,
        known_competitors: Iterable[KnownCompetitor] = (),
    ) -> Gazetteer:
        """
        Return the cached gazetteer for (cache_key, catalog_version), building it if needed.

        Args:
            cache_key: Caller key, e.g. the org id
            catalog_version: Any hashable that changes whenever the catalog changes
            catalog: Catalog entries (only read on a miss)
            org_name: Organization name
            known_competitors: Well-known competitors

        Returns:
            Gazetteer for this catalog version
        """
        with self._lock:
            slot = self._slots.get(cache_key)
            if slot is not None and slot[0] == catalog_version:
                return slot[1]

        # Build outside the lock; concurrent misses may build twice, the last write wins
        gazetteer = build_gazetteer(catalog, org_name=org_name, known_competitors=known_competitors)

        with self._lock:
            if cache_key not in self._slots and len(self._slots) >= self.max_size:
                # Evict the oldest slot (dicts keep insertion order)
                self._slots.pop(next(iter(self._slots)))
            self._slots[cache_key] = (catalog_version, gazetteer)

        return gazetteer

    def invalidate(self, cache_key: Hashable) -> None:
        """Drop the cached gazetteer for cache_key, if any."""
        with self._lock:
            self._slots.pop(cache_key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)


def find_near_duplicates(
    catalog: Iterable[BrandCatalogEntry],
    threshold: float = NEAR_DUPLICATE_THRESHOLD,
) -> list[tuple[str, str, float]]:
    """
    Flag catalog names that are probably the same entity.

    Advisory lint for catalog cleanup; never used for matching. Pairs whose
    normalized names are identical are reported by build_gazetteer() as
    collisions instead and are skipped here.

    Args:
        catalog: Catalog entries
        threshold: Minimum rapidfuzz ratio (0-100) to report a pair

    Returns:
        List of (first name, second name, score) in catalog order

    Example:
        >>> find_near_duplicates([BrandCatalogEntry(name="HubSpot"),
        ...                       BrandCatalogEntry(name="Hubspott")])
        [('HubSpot', 'Hubspott', 93.33)]
    """
    names = [(entry.name, normalize(entry.name)) for entry in catalog]
    findings: list[tuple[str, str, float]] = []

    for i, (first_name, first_key) in enumerate(names):
        for second_name, second_key in names[i + 1 :]:
            if first_key == second_key:
                continue
            score = fuzz.ratio(first_key, second_key)
            if score >= threshold:
                findings.append((first_name, second_name, round(score, 2)))

    return findings
