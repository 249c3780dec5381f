"""
Evaluation metrics for the Brand Visibility Engine evaluation framework.

This module provides functions to compute metrics that measure the accuracy
of competitor detection, org-brand detection and scoring. Names are compared
after normalize(), so "Help Scout" and "help-scout" count as the same name.
"""

from ..extractor.normalizer import normalize
from ..extractor.parser import AnalysisResult
from .schema import EvalMetricScore, EvalTestCase

# Minimum precision/recall/F1 for a case to pass
DETECTION_THRESHOLD = 0.8


def compute_competitor_metrics(
    test_case: EvalTestCase, actual_competitors: list[str]
) -> list[EvalMetricScore]:
    """
    Compute competitor detection metrics (precision, recall, F1).

    An empty expectation met by an empty detection scores 1.0 on all three.

    Args:
        test_case: The test case with expected competitors
        actual_competitors: Competitor names reported by the engine

    Returns:
        List of metric scores for competitor detection
    """
    expected = {normalize(name) for name in test_case.expected_competitors}
    actual = {normalize(name) for name in actual_competitors}

    true_positives = expected & actual
    false_positives = actual - expected
    false_negatives = expected - actual

    if actual:
        precision = len(true_positives) / len(actual)
    else:
        precision = 1.0 if not expected else 0.0
    recall = len(true_positives) / len(expected) if expected else 1.0
    f1 = (
        (2 * precision * recall) / (precision + recall)
        if (precision + recall) > 0
        else 0.0
    )

    return [
        EvalMetricScore(
            name="competitor_precision",
            value=precision,
            passed=precision >= DETECTION_THRESHOLD,
            details={
                "true_positives": len(true_positives),
                "false_positives": sorted(false_positives),
            },
        ),
        EvalMetricScore(
            name="competitor_recall",
            value=recall,
            passed=recall >= DETECTION_THRESHOLD,
            details={
                "true_positives": len(true_positives),
                "false_negatives": sorted(false_negatives),
            },
        ),
        EvalMetricScore(
            name="competitor_f1",
            value=f1,
            passed=f1 >= DETECTION_THRESHOLD,
            details={"precision": precision, "recall": recall},
        ),
    ]


def compute_org_presence_metric(
    test_case: EvalTestCase, result: AnalysisResult
) -> EvalMetricScore:
    """Exact match of org_brand_present against the expectation."""
    matched = result.org_brand_present == test_case.expected_org_present
    return EvalMetricScore(
        name="org_presence_accuracy",
        value=1.0 if matched else 0.0,
        passed=matched,
        details={
            "expected": test_case.expected_org_present,
            "actual": result.org_brand_present,
        },
    )


def compute_score_metric(
    test_case: EvalTestCase, result: AnalysisResult
) -> EvalMetricScore | None:
    """Exact match of the visibility score; None when no score is expected."""
    if test_case.expected_score is None:
        return None

    matched = result.score == test_case.expected_score
    return EvalMetricScore(
        name="score_match",
        value=1.0 if matched else 0.0,
        passed=matched,
        details={"expected": test_case.expected_score, "actual": result.score},
    )
