"""
Pydantic schema models for the evaluation framework.

This module defines the core data structures used throughout the evaluation system:
- EvalTestCase: A response with its catalog and the expected analysis outcome
- EvalMetricScore: A single metric with score and pass/fail status
- EvalResult: Complete result for a test case with all metrics
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..config.schema import BrandCatalogEntry, EngineSettings


class EvalTestCase(BaseModel):
    """
    A single evaluation test case.

    Contains the provider response, the org and catalog it is analyzed
    against, and the ground truth expected from the engine. When
    assist_output is set the case runs the assisted strategy against a mock
    completion client returning that text.
    """

    description: str = Field(
        ..., description="Human-readable description of the test case"
    )
    prompt_text: str = Field(
        default="best tools for this use case",
        description="Tracked prompt that elicited the response",
    )
    response_text: str = Field(..., description="Raw provider response to analyze")
    org_name: str = Field(..., description="Organization name")
    brand_catalog: list[BrandCatalogEntry] = Field(
        default_factory=list, description="Catalog entries known for the org"
    )
    settings: EngineSettings = Field(default_factory=EngineSettings)
    assist_output: str | None = Field(
        None, description="Canned completion output; enables the assisted strategy"
    )

    # Ground truth expected outputs
    expected_org_present: bool = Field(
        ..., description="Whether the org brand should be detected"
    )
    expected_competitors: list[str] = Field(
        default_factory=list, description="Expected competitor names, any order"
    )
    expected_score: int | None = Field(
        None, description="Expected visibility score (skipped when omitted)"
    )

    @field_validator("description", "org_name")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Ensure required text fields are not empty."""
        if not v or v.strip() == "":
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator("response_text")
    @classmethod
    def validate_response_text(cls, v: str) -> str:
        """Ensure response text is not empty."""
        if not v or v.strip() == "":
            raise ValueError("Response text cannot be empty")
        return v

    @field_validator("expected_competitors")
    @classmethod
    def validate_expected_competitors(cls, v: list[str]) -> list[str]:
        """Strip expected names and drop empty ones."""
        return [name.strip() for name in v if name and name.strip()]


class EvalMetricScore(BaseModel):
    """
    A single evaluation metric with score and pass/fail determination.

    Represents one aspect of evaluation (e.g., competitor precision) with
    its computed value and whether it meets the passing threshold.
    """

    name: str = Field(..., description="Name of the metric (e.g., 'competitor_precision')")
    value: float = Field(
        ..., ge=0.0, le=1.0, description="Metric value between 0.0 and 1.0"
    )
    passed: bool = Field(..., description="Whether the metric meets passing criteria")
    details: dict[str, Any] | None = Field(
        None, description="Additional details about the metric computation"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Ensure metric name is not empty."""
        if not v or v.strip() == "":
            raise ValueError("Metric name cannot be empty")
        return v.strip()


class EvalResult(BaseModel):
    """
    Complete evaluation result for a single test case.

    overall_passed is True only when every critical metric passes.
    error holds the exception message when the case could not be analyzed.
    """

    test_description: str = Field(
        ..., description="Description of the test case evaluated"
    )
    metrics: list[EvalMetricScore] = Field(
        ..., description="All computed metrics for this test"
    )
    overall_passed: bool = Field(
        ..., description="Whether the test case passed overall"
    )
    error: str | None = Field(None, description="Error raised while analyzing")

    def get_metric_by_name(self, name: str) -> EvalMetricScore | None:
        """Get a specific metric by name."""
        for metric in self.metrics:
            if metric.name == name:
                return metric
        return None

    def to_summary_dict(self) -> dict[str, Any]:
        """Compact dict for console output."""
        return {
            "description": self.test_description,
            "overall_passed": self.overall_passed,
            "error": self.error,
            "metrics": [
                {"name": m.name, "value": m.value, "passed": m.passed} for m in self.metrics
            ],
        }
