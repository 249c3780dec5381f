"""
Evaluation runner for the Brand Visibility Engine evaluation framework.

This module provides the main orchestrator function `run_eval_suite()` that
loads test cases, runs each through analyze_response(), and returns results.
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from ..completion.mock_client import MockCompletionClient
from ..exceptions import BrandVisibilityError
from ..extractor.parser import analyze_response
from .metrics import (
    compute_competitor_metrics,
    compute_org_presence_metric,
    compute_score_metric,
)
from .schema import EvalResult, EvalTestCase

logger = logging.getLogger(__name__)

# Bundled cases covering the documented scenarios
DEFAULT_FIXTURES_PATH = Path(__file__).parent / "fixtures" / "detection_cases.yaml"

CRITICAL_METRICS = frozenset(
    {
        "competitor_precision",
        "competitor_recall",
        "competitor_f1",
        "org_presence_accuracy",
        "score_match",
    }
)


def load_test_cases(fixtures_path: str | Path) -> list[EvalTestCase]:
    """
    Load test cases from a YAML fixtures file.

    Args:
        fixtures_path: Path to the YAML file containing test cases

    Returns:
        List of EvalTestCase objects loaded from the file

    Raises:
        FileNotFoundError: If the fixtures file doesn't exist
        yaml.YAMLError: If the YAML file is malformed
        ValueError: If test case validation fails
    """
    fixtures_path = Path(fixtures_path)

    if not fixtures_path.exists():
        raise FileNotFoundError(f"Test fixtures file not found: {fixtures_path}")

    with open(fixtures_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict) or "test_cases" not in data:
        raise ValueError("Invalid fixtures file: must contain 'test_cases' key")

    test_cases = []
    for i, case_data in enumerate(data["test_cases"] or []):
        try:
            test_cases.append(EvalTestCase(**case_data))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid test case at index {i}: {e}") from e

    return test_cases


def evaluate_single_test_case(test_case: EvalTestCase) -> EvalResult:
    """
    Evaluate a single test case through the full analysis pipeline.

    Args:
        test_case: The test case to evaluate

    Returns:
        EvalResult containing all computed metrics for this test case

    Raises:
        BrandVisibilityError: If the engine rejects the case input
    """
    settings = test_case.settings
    client = None
    if test_case.assist_output is not None:
        extraction = settings.extraction.model_copy(update={"strategy": "assisted"})
        settings = settings.model_copy(update={"extraction": extraction})
        client = MockCompletionClient(output=test_case.assist_output)

    result = analyze_response(
        response_text=test_case.response_text,
        prompt_text=test_case.prompt_text,
        org_name=test_case.org_name,
        brand_catalog=test_case.brand_catalog,
        settings=settings,
        client=client,
    )

    metrics = compute_competitor_metrics(test_case, result.competitor_names)
    metrics.append(compute_org_presence_metric(test_case, result))
    score_metric = compute_score_metric(test_case, result)
    if score_metric is not None:
        metrics.append(score_metric)

    overall_passed = all(m.passed for m in metrics if m.name in CRITICAL_METRICS)

    return EvalResult(
        test_description=test_case.description,
        metrics=metrics,
        overall_passed=overall_passed,
    )


def run_eval_suite(
    fixtures_path: str | Path = DEFAULT_FIXTURES_PATH,
) -> dict[str, Any]:
    """
    Run the complete evaluation suite on all test cases.

    Args:
        fixtures_path: Path to YAML file containing test cases

    Returns:
        Dictionary containing:
        - 'results': List of EvalResult objects for each test case
        - 'summary': Overall statistics (pass rate, average scores, etc.)
        - 'total_test_cases': Number of test cases evaluated
        - 'total_passed': Number of test cases that passed overall
    """
    test_cases = load_test_cases(fixtures_path)

    results = []
    for test_case in test_cases:
        try:
            results.append(evaluate_single_test_case(test_case))
        except BrandVisibilityError as e:
            logger.warning(f"Eval case '{test_case.description}' failed: {e}")
            results.append(
                EvalResult(
                    test_description=test_case.description,
                    metrics=[],
                    overall_passed=False,
                    error=str(e),
                )
            )

    total_test_cases = len(results)
    total_passed = sum(1 for r in results if r.overall_passed)
    pass_rate = total_passed / total_test_cases if total_test_cases > 0 else 0.0

    metric_scores: dict[str, float] = {}
    metric_counts: dict[str, int] = {}

    for result in results:
        for metric in result.metrics:
            metric_scores[metric.name] = metric_scores.get(metric.name, 0.0) + metric.value
            metric_counts[metric.name] = metric_counts.get(metric.name, 0) + 1

    average_scores = {
        name: metric_scores[name] / metric_counts[name] for name in metric_scores
    }

    summary = {
        "pass_rate": pass_rate,
        "average_scores": average_scores,
        "total_test_cases": total_test_cases,
        "total_passed": total_passed,
        "total_failed": total_test_cases - total_passed,
    }

    return {
        "results": results,
        "summary": summary,
        "total_test_cases": total_test_cases,
        "total_passed": total_passed,
    }
