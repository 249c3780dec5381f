"""
Prominence and visibility scoring.

The score is a pure function of three signals: whether the org appears, how
early it appears among the distinct entities in the answer, and how many
distinct competitors share the answer with it.

Formula (constants from ScoringTable, defaults in brackets):
    absent:  min_score [1]
    present: clamp(base_presence [5] + bonus(rank) - penalty(competitors),
                   min_score [1], max_score [10])

    bonus(rank)        = presence_bonus [3], or rank_bonuses[rank] when set
                         (ranks beyond the list use its last value)
    penalty(n)         = penalty of the highest tier with min_competitors <= n
                         [0-1 -> 0, 2-3 -> 1, 4+ -> 2]

Worked examples with the default table:
    org only                         -> 5 + 3 - 0 = 8
    org + 3 competitors              -> 5 + 3 - 1 = 7
    3 competitors, org absent        -> 1

Monotonicity holds because bonuses are non-increasing in rank and penalties
are non-decreasing in competitor count (both enforced by ScoringTable).
"""

from collections.abc import Sequence

from brand_visibility.config.schema import ScoringTable
from brand_visibility.extractor.classifier import CompetitorMention
from brand_visibility.extractor.mention_detector import Mention

DEFAULT_SCORING = ScoringTable()


def competitor_penalty(competitor_count: int, table: ScoringTable = DEFAULT_SCORING) -> int:
    """Penalty for sharing the answer with competitor_count competitors."""
    count = max(0, competitor_count)
    penalty = 0
    for tier in table.competitor_penalties:
        if count >= tier.min_competitors:
            penalty = tier.penalty
    return penalty


def prominence_bonus(org_first_rank: int | None, table: ScoringTable = DEFAULT_SCORING) -> int:
    """
    Bonus for being present at the given rank.

    Without rank_bonuses every rank earns presence_bonus. An unknown rank
    (None) earns the flat bonus, or the last rank bonus when ranks are scored.
    """
    if table.rank_bonuses is None:
        return table.presence_bonus
    if org_first_rank is None:
        return table.rank_bonuses[-1]
    rank = min(max(0, org_first_rank), len(table.rank_bonuses) - 1)
    return table.rank_bonuses[rank]


def score(
    org_present: bool,
    org_first_rank: int | None,
    competitor_count: int,
    table: ScoringTable = DEFAULT_SCORING,
) -> int:
    """
    Compute the visibility score.

    Total over all inputs: negative ranks and counts clamp to 0 and the
    result always lies in [table.min_score, table.max_score].

    Args:
        org_present: True if the org brand was mentioned
        org_first_rank: 0-based rank of the org's first mention, or None
        competitor_count: Distinct competitors in the answer
        table: Scoring constants

    Returns:
        Integer score in [min_score, max_score]

    Example:
        >>> score(True, 0, 0)
        8
        >>> score(True, 1, 3)
        7
        >>> score(False, None, 2)
        1
    """
    if not org_present:
        return table.min_score

    raw = (
        table.base_presence
        + prominence_bonus(org_first_rank, table)
        - competitor_penalty(competitor_count, table)
    )
    return max(table.min_score, min(table.max_score, raw))


def prominence_rank(
    org_mentions: Sequence[Mention],
    competitors: Sequence[CompetitorMention],
) -> int | None:
    """
    0-based rank of the org among distinct entities by first appearance.

    Only competitors that appear before the org's first mention count, so
    repeated competitor mentions never push the org further down.

    Returns:
        Rank, or None when the org is not mentioned

    Example:
        "Zendesk, Zendesk and Acme" -> 1 (one distinct entity before Acme)
    """
    if not org_mentions:
        return None
    org_first = min(m.start_offset for m in org_mentions)
    return sum(
        1
        for competitor in competitors
        if competitor.first_offset is not None and competitor.first_offset < org_first
    )
