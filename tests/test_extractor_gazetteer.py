"""
Tests for extractor.gazetteer module.

Tests cover:
- Resolution of names and variants on normalized equality
- Org-brand priority on collisions (CRITICAL: org never becomes a competitor)
- Collision recording and logging (never raised)
- Synthetic org entry from org_name
- Known competitors as lowest-priority entries
- Read-only gazetteer and GazetteerCache versioning
- Near-duplicate catalog lint (rapidfuzz)
"""

import logging
import threading

import pytest

from brand_visibility.config.schema import BrandCatalogEntry, KnownCompetitor
from brand_visibility.extractor.gazetteer import (
    ORIGIN_CATALOG,
    ORIGIN_KNOWN,
    ORIGIN_ORG_NAME,
    GazetteerCache,
    build_gazetteer,
    entry_keys,
    find_near_duplicates,
)


@pytest.fixture
def catalog():
    """Catalog with one org brand and two competitors."""
    return [
        BrandCatalogEntry(name="Acme Corp", is_org_brand=True, variants=["Acme", "ACME Inc."]),
        BrandCatalogEntry(name="Zendesk", variants=["Zen Desk"]),
        BrandCatalogEntry(name="Help Scout", variants=["HelpScout"]),
    ]


class TestEntryKeys:
    """Test suite for entry_keys()."""

    def test_name_and_variants_normalized(self):
        """Test keys include the normalized name and variants in order."""
        entry = BrandCatalogEntry(name="Acme Corp", variants=["ACME Inc.", "acme corp"])
        assert entry_keys(entry) == ["acme corp", "acme inc"]

    def test_punctuation_only_variant_skipped(self):
        """Test variants that normalize to nothing are skipped."""
        entry = BrandCatalogEntry(name="Acme", variants=["!!!"])
        assert entry_keys(entry) == ["acme"]


class TestBuildGazetteer:
    """Test suite for build_gazetteer()."""

    def test_resolves_name_and_variants(self, catalog):
        """Test every variant resolves to its canonical entry."""
        gazetteer = build_gazetteer(catalog)

        assert gazetteer.resolve("acme corp").name == "Acme Corp"
        assert gazetteer.resolve("acme").name == "Acme Corp"
        assert gazetteer.resolve("acme inc").name == "Acme Corp"
        assert gazetteer.resolve("zen desk").name == "Zendesk"
        assert gazetteer.resolve("helpscout").name == "Help Scout"

    def test_unknown_returns_none(self, catalog):
        """Test unknown names resolve to None."""
        gazetteer = build_gazetteer(catalog)
        assert gazetteer.resolve("intercom") is None
        assert gazetteer.resolve("") is None

    def test_empty_catalog_resolves_nothing(self):
        """Test an empty catalog yields an empty gazetteer."""
        gazetteer = build_gazetteer([])

        assert len(gazetteer) == 0
        assert gazetteer.max_key_tokens == 0
        assert gazetteer.resolve("acme") is None

    def test_max_key_tokens(self, catalog):
        """Test longest variant length in tokens."""
        gazetteer = build_gazetteer(catalog)
        assert gazetteer.max_key_tokens == 2

    def test_org_priority_when_competitor_listed_first(self):
        """Test org entry wins a shared variant even when seen second."""
        catalog = [
            BrandCatalogEntry(name="Acme", is_org_brand=False),
            BrandCatalogEntry(name="Acme Corp", is_org_brand=True, variants=["Acme"]),
        ]
        gazetteer = build_gazetteer(catalog)

        assert gazetteer.resolve("acme").is_org_brand is True
        assert gazetteer.resolve("acme").name == "Acme Corp"

    def test_org_priority_when_org_listed_first(self):
        """Test org entry keeps a shared variant when seen first."""
        catalog = [
            BrandCatalogEntry(name="Acme Corp", is_org_brand=True, variants=["Acme"]),
            BrandCatalogEntry(name="Acme", is_org_brand=False),
        ]
        gazetteer = build_gazetteer(catalog)

        assert gazetteer.resolve("acme").name == "Acme Corp"

    def test_collision_recorded_and_logged(self, caplog):
        """Test collisions are recorded and logged, never raised."""
        caplog.set_level(logging.WARNING)
        catalog = [
            BrandCatalogEntry(name="Acme", is_org_brand=False),
            BrandCatalogEntry(name="Acme Corp", is_org_brand=True, variants=["Acme"]),
        ]

        gazetteer = build_gazetteer(catalog)

        assert len(gazetteer.collisions) == 1
        collision = gazetteer.collisions[0]
        assert collision.key == "acme"
        assert collision.kept == "Acme Corp"
        assert collision.dropped == "Acme"
        assert "Catalog collision" in caplog.text

    def test_competitor_collision_first_wins(self):
        """Test that among equal-priority entries the first one keeps the key."""
        catalog = [
            BrandCatalogEntry(name="Zendesk", variants=["ZD"]),
            BrandCatalogEntry(name="Zoho Desk", variants=["zd"]),
        ]
        gazetteer = build_gazetteer(catalog)

        assert gazetteer.resolve("zd").name == "Zendesk"
        assert gazetteer.collisions[0].dropped == "Zoho Desk"

    def test_synthetic_org_entry_from_org_name(self):
        """Test org_name resolves as an org entry when absent from the catalog."""
        gazetteer = build_gazetteer([], org_name="Acme Corp")
        entry = gazetteer.resolve("acme corp")

        assert entry is not None
        assert entry.is_org_brand is True
        assert gazetteer.origin("acme corp") == ORIGIN_ORG_NAME
        assert not gazetteer.is_catalog_entry(entry)

    def test_org_name_not_duplicated_when_in_catalog(self, catalog):
        """Test org_name reuses the catalog org entry."""
        gazetteer = build_gazetteer(catalog, org_name="Acme Corp")

        assert gazetteer.origin("acme corp") == ORIGIN_CATALOG
        assert gazetteer.is_catalog_entry(gazetteer.resolve("acme corp"))

    def test_org_name_overrides_stale_competitor_entry(self):
        """Test org_name wins over a catalog competitor with the same name."""
        catalog = [BrandCatalogEntry(name="Acme Corp", is_org_brand=False)]
        gazetteer = build_gazetteer(catalog, org_name="Acme Corp")

        assert gazetteer.resolve("acme corp").is_org_brand is True
        assert len(gazetteer.collisions) == 1

    def test_known_competitors_added(self):
        """Test known competitors resolve with the known origin."""
        known = [KnownCompetitor(name="Freshworks", aliases=("Freshdesk",))]
        gazetteer = build_gazetteer([], known_competitors=known)

        assert gazetteer.resolve("freshdesk").name == "Freshworks"
        assert gazetteer.origin("freshdesk") == ORIGIN_KNOWN
        assert not gazetteer.is_catalog_entry(gazetteer.resolve("freshdesk"))

    def test_catalog_beats_known_competitor_without_collision(self):
        """Test a catalog entry shadows a known competitor silently."""
        catalog = [BrandCatalogEntry(name="Freshdesk")]
        known = [KnownCompetitor(name="Freshworks", aliases=("Freshdesk",))]

        gazetteer = build_gazetteer(catalog, known_competitors=known)

        assert gazetteer.resolve("freshdesk").name == "Freshdesk"
        assert gazetteer.collisions == ()

    def test_catalog_not_mutated(self, catalog):
        """Test building never changes the caller's catalog."""
        before = [entry.model_dump() for entry in catalog]
        build_gazetteer(catalog, org_name="Other Org")
        assert [entry.model_dump() for entry in catalog] == before

    def test_gazetteer_is_read_only(self, catalog):
        """Test the entries map cannot be modified."""
        gazetteer = build_gazetteer(catalog)

        with pytest.raises(TypeError):
            gazetteer.entries["new"] = catalog[0]

    def test_contains(self, catalog):
        """Test membership on normalized keys."""
        gazetteer = build_gazetteer(catalog)
        assert "zendesk" in gazetteer
        assert "Zendesk" not in gazetteer


class TestGazetteerCache:
    """Test suite for GazetteerCache."""

    def test_same_version_returns_cached(self, catalog):
        """Test a second lookup with the same version reuses the gazetteer."""
        cache = GazetteerCache()

        first = cache.get_or_build("org-1", 1, catalog, org_name="Acme Corp")
        second = cache.get_or_build("org-1", 1, [], org_name="Acme Corp")

        assert first is second
        assert len(cache) == 1

    def test_new_version_rebuilds(self, catalog):
        """Test a version change triggers a rebuild."""
        cache = GazetteerCache()

        first = cache.get_or_build("org-1", 1, catalog)
        second = cache.get_or_build("org-1", 2, catalog[:1])

        assert first is not second
        assert second.resolve("zendesk") is None
        assert first.resolve("zendesk") is not None

    def test_invalidate(self, catalog):
        """Test invalidate drops the slot."""
        cache = GazetteerCache()
        cache.get_or_build("org-1", 1, catalog)

        cache.invalidate("org-1")
        cache.invalidate("missing")

        assert len(cache) == 0

    def test_evicts_oldest_when_full(self, catalog):
        """Test the oldest slot is evicted at max_size."""
        cache = GazetteerCache(max_size=2)
        cache.get_or_build("a", 1, catalog)
        cache.get_or_build("b", 1, catalog)
        cache.get_or_build("c", 1, catalog)

        assert len(cache) == 2

    def test_concurrent_reads(self, catalog):
        """Test concurrent lookups all get a working gazetteer."""
        cache = GazetteerCache()
        results = []

        def worker():
            gazetteer = cache.get_or_build("org-1", 1, catalog)
            results.append(gazetteer.resolve("acme").name)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == ["Acme Corp"] * 8


class TestFindNearDuplicates:
    """Test suite for find_near_duplicates()."""

    def test_flags_misspelling(self):
        """Test a one-letter misspelling is flagged."""
        catalog = [BrandCatalogEntry(name="HubSpot"), BrandCatalogEntry(name="Hubspott")]

        findings = find_near_duplicates(catalog)

        assert len(findings) == 1
        first, second, score = findings[0]
        assert (first, second) == ("HubSpot", "Hubspott")
        assert score >= 90

    def test_distinct_names_not_flagged(self, catalog):
        """Test unrelated names are not flagged."""
        assert find_near_duplicates(catalog) == []

    def test_identical_keys_skipped(self):
        """Test exact normalized duplicates are left to collision handling."""
        catalog = [BrandCatalogEntry(name="Zendesk"), BrandCatalogEntry(name="ZENDESK")]
        assert find_near_duplicates(catalog) == []

    def test_threshold(self):
        """Test a high threshold suppresses findings."""
        catalog = [BrandCatalogEntry(name="HubSpot"), BrandCatalogEntry(name="Hubspott")]
        assert find_near_duplicates(catalog, threshold=99.0) == []
