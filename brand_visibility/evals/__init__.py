"""
Evaluation framework for the Brand Visibility Engine.

Runs YAML-defined responses through the full analysis pipeline and scores
competitor detection, org-brand detection and the visibility score against
ground truth, to catch extraction regressions.
"""

from .metrics import (
    compute_competitor_metrics,
    compute_org_presence_metric,
    compute_score_metric,
)
from .runner import DEFAULT_FIXTURES_PATH, load_test_cases, run_eval_suite
from .schema import EvalMetricScore, EvalResult, EvalTestCase

__all__ = [
    "DEFAULT_FIXTURES_PATH",
    "EvalMetricScore",
    "EvalResult",
    "EvalTestCase",
    "compute_competitor_metrics",
    "compute_org_presence_metric",
    "compute_score_metric",
    "load_test_cases",
    "run_eval_suite",
]
