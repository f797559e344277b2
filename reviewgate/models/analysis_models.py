"""
Analysis Data Models — Issues, category scores, and analysis results.

These models are the output of the rule detectors and the aggregator, and
the input to the decision, verdict, and review cost engines. All of them
serialize to plain JSON.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, SerializeAsAny


MAX_CATEGORY_SCORE = 25

# Category keys, in the order every report lists them
CATEGORIES: tuple[str, ...] = ("readability", "complexity", "edge_cases", "security")


class Severity(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"


class Issue(BaseModel):
    """A single penalty emitted by one rule detector."""

    rule_id: str = Field(..., description="Detector rule that produced this issue, e.g. 'eval_usage'")
    penalty: int = Field(..., ge=0, description="Points deducted from the category")
    comment: str = Field(..., description="Human-readable finding")
    severity: Severity | None = Field(
        default=None, description="Only set for security issues; CRITICAL drives overrides"
    )
    line: int | None = Field(default=None, description="1-based source line of the finding")


class CriticalIssue(Issue):
    """A CRITICAL issue annotated with the file it came from (batch analysis)."""

    filename: str = "unknown"


class CategoryScore(BaseModel):
    """Bounded score for one category: max(0, max_score - Σ penalties)."""

    score: int = Field(..., ge=0, le=MAX_CATEGORY_SCORE)
    comments: list[str] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    """Scores for a single source text."""

    filename: str = "code.js"
    readability: CategoryScore
    complexity: CategoryScore
    edge_cases: CategoryScore
    security: CategoryScore
    total_score: int = Field(..., ge=0, le=4 * MAX_CATEGORY_SCORE)
    # Batch aggregates hold CriticalIssue entries; keep their filename on output
    critical_issues: list[SerializeAsAny[Issue]] = Field(default_factory=list)
    error: str | None = Field(
        default=None, description="Parser message when the source could not be analyzed"
    )

    def category_scores(self) -> dict[str, int]:
        """Per-category scores keyed by category name, in report order."""
        return {name: getattr(self, name).score for name in CATEGORIES}


class StructuralMetrics(BaseModel):
    """Raw structural metrics, independent of penalty scoring."""

    max_nesting_depth: int = Field(default=0, ge=0)
    max_cyclomatic_complexity: int = Field(default=0, ge=0)
    max_function_length: int = Field(default=0, ge=0)
    total_functions: int = Field(default=0, ge=0)


class BatchAnalysis(BaseModel):
    """Per-file results plus an averaged aggregate."""

    files: list[AnalysisResult] = Field(default_factory=list)
    aggregated: AnalysisResult
    critical_issues: list[CriticalIssue] = Field(default_factory=list)
