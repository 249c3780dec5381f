"""
Tests for extractor.scoring module.

Tests cover:
- Default table worked examples
- Bounds: score always within [min_score, max_score]
- Monotonicity in presence, rank and competitor count (CRITICAL)
- Rank bonuses and custom penalty tiers
- Prominence rank over distinct entities
"""

import pytest

from brand_visibility.config.schema import PenaltyTier, ScoringTable
from brand_visibility.extractor.classifier import CompetitorMention
from brand_visibility.extractor.mention_detector import Mention
from brand_visibility.extractor.scoring import (
    DEFAULT_SCORING,
    competitor_penalty,
    prominence_bonus,
    prominence_rank,
    score,
)

RANKED = ScoringTable(rank_bonuses=(3, 2, 1))
HARSH = ScoringTable(
    base_presence=2,
    presence_bonus=0,
    competitor_penalties=(
        PenaltyTier(min_competitors=1, penalty=2),
        PenaltyTier(min_competitors=3, penalty=5),
    ),
)
TABLES = [DEFAULT_SCORING, RANKED, HARSH]


def _competitor(name, first_offset):
    return CompetitorMention(
        name=name,
        normalized_name=name.lower(),
        occurrences=1,
        first_offset=first_offset,
        in_catalog=False,
    )


class TestCompetitorPenalty:
    """Test suite for competitor_penalty()."""

    @pytest.mark.parametrize(
        "count,expected",
        [(0, 0), (1, 0), (2, 1), (3, 1), (4, 2), (10, 2), (-1, 0)],
    )
    def test_default_tiers(self, count, expected):
        """Test the default step function."""
        assert competitor_penalty(count) == expected

    def test_custom_tiers(self):
        """Test a custom table."""
        assert competitor_penalty(0, HARSH) == 0
        assert competitor_penalty(1, HARSH) == 2
        assert competitor_penalty(3, HARSH) == 5


class TestProminenceBonus:
    """Test suite for prominence_bonus()."""

    def test_flat_bonus(self):
        """Test every rank earns presence_bonus without rank_bonuses."""
        assert prominence_bonus(0) == 3
        assert prominence_bonus(7) == 3
        assert prominence_bonus(None) == 3

    def test_rank_bonuses(self):
        """Test per-rank bonuses with the last value reused."""
        assert [prominence_bonus(rank, RANKED) for rank in range(5)] == [3, 2, 1, 1, 1]

    def test_unknown_rank_uses_last_bonus(self):
        """Test a None rank earns the lowest bonus."""
        assert prominence_bonus(None, RANKED) == 1


class TestScore:
    """Test suite for score()."""

    def test_worked_examples(self):
        """Test the documented default examples."""
        assert score(True, 0, 0) == 8
        assert score(True, 1, 3) == 7
        assert score(True, 0, 4) == 6
        assert score(False, None, 3) == 1
        assert score(False, None, 0) == 1

    def test_ranked_examples(self):
        """Test rank bonuses lower later mentions."""
        assert score(True, 0, 1, RANKED) == 8
        assert score(True, 1, 1, RANKED) == 7
        assert score(True, 2, 2, RANKED) == 5

    def test_clamped_to_min(self):
        """Test a heavy penalty never goes below min_score."""
        assert score(True, 0, 5, HARSH) == 1

    def test_clamped_to_max(self):
        """Test a large bonus never exceeds max_score."""
        table = ScoringTable(base_presence=9, presence_bonus=5)
        assert score(True, 0, 0, table) == 10

    @pytest.mark.parametrize("table", TABLES)
    def test_bounds(self, table):
        """Test every combination stays within bounds."""
        for present in (True, False):
            for rank in (None, -3, 0, 1, 2, 5, 50):
                for count in (-2, 0, 1, 2, 3, 4, 5, 100):
                    value = score(present, rank, count, table)
                    assert table.min_score <= value <= table.max_score

    @pytest.mark.parametrize("table", TABLES)
    def test_presence_never_lowers_score(self, table):
        """Test present >= absent for every rank and count."""
        for rank in range(6):
            for count in range(8):
                assert score(True, rank, count, table) >= score(False, None, count, table)

    @pytest.mark.parametrize("table", TABLES)
    def test_more_competitors_never_raise_score(self, table):
        """Test score is non-increasing in competitor count."""
        for rank in range(6):
            values = [score(True, rank, count, table) for count in range(10)]
            assert values == sorted(values, reverse=True)

    @pytest.mark.parametrize("table", TABLES)
    def test_earlier_rank_never_lowers_score(self, table):
        """Test score is non-increasing in rank."""
        for count in range(8):
            values = [score(True, rank, count, table) for rank in range(8)]
            assert values == sorted(values, reverse=True)


class TestProminenceRank:
    """Test suite for prominence_rank()."""

    def test_org_absent(self):
        """Test None when the org is not mentioned."""
        assert prominence_rank([], [_competitor("Zendesk", 0)]) is None

    def test_org_first(self):
        """Test rank 0 when the org comes first."""
        org = [Mention("Acme", "acme", 0)]
        assert prominence_rank(org, [_competitor("Zendesk", 10)]) == 0

    def test_counts_distinct_entities_before_org(self):
        """Test only distinct competitors before the org count."""
        org = [Mention("Acme", "acme", 40), Mention("Acme", "acme", 80)]
        competitors = [
            _competitor("Zendesk", 0),
            _competitor("Intercom", 20),
            _competitor("Kayako", 60),
        ]

        assert prominence_rank(org, competitors) == 2

    def test_uses_earliest_org_mention(self):
        """Test the org's first mention sets the rank."""
        org = [Mention("Acme", "acme", 50), Mention("Acme", "acme", 5)]
        assert prominence_rank(org, [_competitor("Zendesk", 10)]) == 0

    def test_unmentioned_competitors_ignored(self):
        """Test merged competitors without offsets never count."""
        org = [Mention("Acme", "acme", 30)]
        assert prominence_rank(org, [_competitor("Salesforce", None)]) == 0
