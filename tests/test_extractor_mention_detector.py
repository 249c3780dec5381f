"""
Tests for extractor.mention_detector module.

Tests cover:
- Mention validation and derived properties
- Gazetteer scan on normalized text (CRITICAL: no substring false positives)
- Longest-match preference and possessive handling
- Known competitors only match capitalized text
- Overlap resolution between sources (org matches are never replaced)
- DeterministicExtractor ordering, discovery and strict mode
"""

import pytest

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
from brand_visibility.extractor.gazetteer import build_gazetteer
from brand_visibility.extractor.mention_detector import (
    SOURCE_ASSISTED,
    SOURCE_GAZETTEER,
    SOURCE_PATTERN,
    DeterministicExtractor,
    Mention,
    find_gazetteer_mentions,
    remove_overlapping_mentions,
)
from brand_visibility.extractor.normalizer import normalize


@pytest.fixture
def catalog():
    """Catalog with the org and one known competitor."""
    return [
        BrandCatalogEntry(name="Acme Corp", is_org_brand=True, variants=["Acme"]),
        BrandCatalogEntry(name="Zendesk"),
        BrandCatalogEntry(name="Notion"),
    ]


class TestMention:
    """Test suite for Mention dataclass."""

    def test_mention_creation(self):
        """Test creating a valid Mention."""
        mention = Mention(raw_text="Zendesk", normalized_text="zendesk", start_offset=4)

        assert mention.end_offset == 11
        assert mention.canonical_name == "Zendesk"
        assert mention.canonical_key == "zendesk"
        assert mention.source == SOURCE_GAZETTEER

    def test_invalid_source(self):
        """Test that an unknown source raises ValueError."""
        with pytest.raises(ValueError, match="source must be one of"):
            Mention(raw_text="X", normalized_text="x", start_offset=0, source="ner")

    def test_negative_offset(self):
        """Test that negative offsets raise ValueError."""
        with pytest.raises(ValueError, match="start_offset"):
            Mention(raw_text="X", normalized_text="x", start_offset=-1)

    def test_canonical_name_from_entry(self):
        """Test resolved mentions use the entry name."""
        entry = BrandCatalogEntry(name="Acme Corp")
        mention = Mention(
            raw_text="acme", normalized_text="acme", start_offset=0, matched_entry=entry
        )

        assert mention.canonical_name == "Acme Corp"
        assert mention.canonical_key == "acme corp"

    def test_confidence_levels(self):
        """Test confidence by resolution and source."""
        entry = BrandCatalogEntry(name="Zendesk")
        catalog_hit = Mention("Zendesk", "zendesk", 0, entry, SOURCE_GAZETTEER, True)
        known_hit = Mention("Zendesk", "zendesk", 0, entry, SOURCE_GAZETTEER, False)
        discovered = Mention("Kayako", "kayako", 0, None, SOURCE_PATTERN)
        assisted = Mention("Kayako", "kayako", 0, None, SOURCE_ASSISTED)

        assert catalog_hit.confidence == CONFIDENCE_CATALOG
        assert known_hit.confidence == CONFIDENCE_KNOWN
        assert discovered.confidence == CONFIDENCE_DISCOVERED
        assert assisted.confidence == CONFIDENCE_ASSISTED

    def test_to_dict(self):
        """Test dict form names the matched entry."""
        entry = BrandCatalogEntry(name="Zendesk")
        mention = Mention("zendesk", "zendesk", 3, entry, SOURCE_GAZETTEER, True)

        assert mention.to_dict() == {
            "raw_text": "zendesk",
            "normalized_text": "zendesk",
            "start_offset": 3,
            "matched_entry": "Zendesk",
            "source": "gazetteer",
            "in_catalog": True,
        }


class TestFindGazetteerMentions:
    """Test suite for find_gazetteer_mentions()."""

    def test_finds_catalog_names(self, catalog):
        """Test catalog names are found with raw offsets."""
        text = "We like Acme Corp and Zendesk."
        mentions = find_gazetteer_mentions(text, build_gazetteer(catalog))

        assert [m.raw_text for m in mentions] == ["Acme Corp", "Zendesk"]
        assert [m.start_offset for m in mentions] == [8, 22]
        assert all(m.in_catalog for m in mentions)

    def test_longest_match_wins(self, catalog):
        """Test 'Acme Corp' is preferred over the 'Acme' variant."""
        mentions = find_gazetteer_mentions("Acme Corp rocks", build_gazetteer(catalog))

        assert len(mentions) == 1
        assert mentions[0].raw_text == "Acme Corp"

    def test_case_and_possessive_insensitive(self, catalog):
        """Test lowercase and possessive spellings still match."""
        mentions = find_gazetteer_mentions("acme corp's plans", build_gazetteer(catalog))

        assert mentions[0].raw_text == "acme corp"
        assert mentions[0].matched_entry.name == "Acme Corp"

    def test_no_substring_false_positive(self, catalog):
        """Test CRITICAL feature: 'Notion' does not match inside 'notional'."""
        mentions = find_gazetteer_mentions("a notional budget", build_gazetteer(catalog))
        assert mentions == []

    def test_punctuated_variant(self):
        """Test punctuation differences do not block a match."""
        catalog = [BrandCatalogEntry(name="Monday.com")]
        mentions = find_gazetteer_mentions("Try monday com today", build_gazetteer(catalog))

        assert [m.raw_text for m in mentions] == ["monday com"]

    def test_raw_text_normalizes_to_key(self, catalog):
        """Test every mention's raw text normalizes to its normalized text."""
        text = "ACME, Acme Corp's, zendesk!"
        for mention in find_gazetteer_mentions(text, build_gazetteer(catalog)):
            assert normalize(mention.raw_text) == mention.normalized_text
            assert text[mention.start_offset : mention.end_offset] == mention.raw_text

    def test_known_competitor_requires_capitalization(self):
        """Test dictionary-word known competitors only match capitalized text."""
        gazetteer = build_gazetteer([], known_competitors=[KnownCompetitor(name="Notion")])

        assert find_gazetteer_mentions("a notion of quality", gazetteer) == []
        mentions = find_gazetteer_mentions("Notion is popular", gazetteer)
        assert [m.raw_text for m in mentions] == ["Notion"]
        assert mentions[0].in_catalog is False

    def test_empty_gazetteer(self):
        """Test an empty gazetteer finds nothing."""
        assert find_gazetteer_mentions("Zendesk", build_gazetteer([])) == []


class TestRemoveOverlappingMentions:
    """Test suite for remove_overlapping_mentions()."""

    def test_longer_wins(self):
        """Test the longer of two overlapping mentions is kept."""
        short = Mention("Help", "help", 0, source=SOURCE_ASSISTED)
        long = Mention("Help Scout", "help scout", 0, source=SOURCE_ASSISTED)

        assert remove_overlapping_mentions([short, long]) == [long]

    def test_gazetteer_beats_assisted_on_tie(self):
        """Test gazetteer source wins an equal-length overlap."""
        entry = BrandCatalogEntry(name="Zendesk")
        assisted = Mention("Zendesk", "zendesk", 5, source=SOURCE_ASSISTED)
        gazetteer = Mention("Zendesk", "zendesk", 5, entry, SOURCE_GAZETTEER, True)

        assert remove_overlapping_mentions([assisted, gazetteer]) == [gazetteer]

    def test_sorted_by_offset(self):
        """Test output is sorted by start offset."""
        later = Mention("Zendesk", "zendesk", 20)
        earlier = Mention("Intercom", "intercom", 0)

        assert remove_overlapping_mentions([later, earlier]) == [earlier, later]

    def test_org_match_beats_longer_span(self):
        """Test an org gazetteer match is never replaced by a longer span."""
        org = BrandCatalogEntry(name="Acme Corp", is_org_brand=True)
        gazetteer = Mention("Acme Corp", "acme corp", 0, org, SOURCE_GAZETTEER)
        assisted = Mention("Acme Corp Helpdesk", "acme corp helpdesk", 0, source=SOURCE_ASSISTED)
        zendesk = Mention("Zendesk", "zendesk", 23, source=SOURCE_ASSISTED)

        assert remove_overlapping_mentions([assisted, zendesk, gazetteer]) == [gazetteer, zendesk]

    def test_competitor_match_still_loses_to_longer_span(self):
        """Test only org matches are protected from longer spans."""
        entry = BrandCatalogEntry(name="Zendesk")
        gazetteer = Mention("Zendesk", "zendesk", 0, entry, SOURCE_GAZETTEER, True)
        longer = Mention("Zendesk Suite", "zendesk suite", 0, source=SOURCE_ASSISTED)

        assert remove_overlapping_mentions([gazetteer, longer]) == [longer]


class TestDeterministicExtractor:
    """Test suite for DeterministicExtractor."""

    def test_gazetteer_and_discovered(self, catalog):
        """Test catalog hits and discovered names in order of appearance."""
        mentions = DeterministicExtractor().extract(
            "Try Intercom, Acme Corp or Zendesk.", catalog, "Acme Corp", "help desk"
        )

        assert [(m.raw_text, m.source) for m in mentions] == [
            ("Intercom", SOURCE_PATTERN),
            ("Acme Corp", SOURCE_GAZETTEER),
            ("Zendesk", SOURCE_GAZETTEER),
        ]
        assert mentions[0].matched_entry is None

    def test_ordering_is_stable(self, catalog):
        """Test output is sorted by start offset."""
        mentions = DeterministicExtractor().extract(
            "Zendesk, Kayako, Acme, Freshdesk", catalog, "Acme Corp"
        )
        offsets = [m.start_offset for m in mentions]
        assert offsets == sorted(offsets)

    def test_outcome_bookkeeping(self, catalog):
        """Test method and candidate counts on the outcome."""
        outcome = DeterministicExtractor().extract_outcome(
            "Acme Corp beats Kayako and X.", catalog, "Acme Corp"
        )

        assert outcome.method == "deterministic"
        assert outcome.candidates_considered == 3
        assert outcome.rejected_candidates == ("X",)

    def test_strict_mode_rejects_unresolved(self, catalog):
        """Test discover_new_names=False only reports gazetteer names."""
        settings = ExtractionSettings(discover_new_names=False)
        outcome = DeterministicExtractor(settings=settings).extract_outcome(
            "Acme Corp, Zendesk and Kayako.", catalog, "Acme Corp"
        )

        assert [m.raw_text for m in outcome.mentions] == ["Acme Corp", "Zendesk"]
        assert "Kayako" in outcome.rejected_candidates

    def test_name_attached_to_org_rejected(self, catalog):
        """Test a capitalized word right after the org is not a competitor."""
        outcome = DeterministicExtractor().extract_outcome(
            "Acme Corp Helpdesk and Zendesk are both solid.", catalog, "Acme Corp"
        )

        assert [m.raw_text for m in outcome.mentions] == ["Acme Corp", "Zendesk"]
        assert outcome.rejected_candidates == ("Helpdesk",)

    def test_extra_stopwords(self, catalog):
        """Test configured stopwords suppress discovery."""
        settings = ExtractionSettings(extra_stopwords=("Kayako",))
        mentions = DeterministicExtractor(settings=settings).extract(
            "Kayako is old.", catalog, "Acme Corp"
        )
        assert mentions == []

    def test_uses_prebuilt_gazetteer(self, catalog):
        """Test a supplied gazetteer is used instead of the catalog."""
        gazetteer = build_gazetteer([BrandCatalogEntry(name="Kayako")])
        outcome = DeterministicExtractor().extract_outcome(
            "kayako rocks", catalog, "Acme Corp", gazetteer=gazetteer
        )

        assert [m.canonical_name for m in outcome.mentions] == ["Kayako"]

    def test_empty_catalog_discovers_everything(self):
        """Test with no catalog every name is newly discovered."""
        mentions = DeterministicExtractor().extract("Zendesk and Freshdesk.", [], "")

        assert [m.raw_text for m in mentions] == ["Zendesk", "Freshdesk"]
        assert all(m.matched_entry is None for m in mentions)
