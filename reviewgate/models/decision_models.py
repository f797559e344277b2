"""
Decision Data Models — Review decisions, PR verdicts, and the Review Cost Index.

Every model here is derived fresh from an AnalysisResult; none is cached or
mutated after construction.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class Decision(str, Enum):
    NOT_READY_FOR_REVIEW = "NOT_READY_FOR_REVIEW"
    NEEDS_REFACTOR = "NEEDS_REFACTOR"
    READY_FOR_HUMAN_REVIEW = "READY_FOR_HUMAN_REVIEW"


class DecisionDetails(BaseModel):
    total_score: int
    category_scores: dict[str, int] = Field(default_factory=dict)
    failed_categories: list[str] = Field(default_factory=list)
    has_critical_deductions: bool = False
    override_mode: str = "severity"


class DecisionResult(BaseModel):
    """Three-state readiness decision with its explanation."""

    decision: Decision
    reason: str
    details: DecisionDetails


class Verdict(str, Enum):
    APPROVE = "APPROVE"
    APPROVE_WITH_NITS = "APPROVE_WITH_NITS"
    REQUEST_CHANGES = "REQUEST_CHANGES"
    BLOCK_MERGE = "BLOCK_MERGE"


class CriticalIssueSummary(BaseModel):
    file: str
    issue: str


class VerdictDetails(BaseModel):
    score_based_verdict: Verdict
    was_overridden: bool = False
    critical_issue_count: int = 0
    critical_issues: list[CriticalIssueSummary] = Field(default_factory=list)
    thresholds: dict[str, int] = Field(default_factory=dict)


class VerdictResult(BaseModel):
    """Four-state PR verdict; critical issues always force BLOCK_MERGE."""

    verdict: Verdict
    explanation: str
    override_reason: str | None = None
    details: VerdictDetails


class VerdictBadge(BaseModel):
    """Display summary of a verdict."""

    label: str
    icon: str
    color: str
    text: str


class RCILevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class RCIFactor(BaseModel):
    """How a single structural factor contributes to the Review Cost Index."""

    raw_value: int
    normalized: int = Field(..., ge=0, le=100)
    weight: float
    contribution: int = Field(..., ge=0)


class RCIResult(BaseModel):
    """Review Cost Index: estimated human review effort, 0-100."""

    level: RCILevel
    score: int = Field(..., ge=0, le=100)
    factors: dict[str, RCIFactor] = Field(default_factory=dict)
    human_explanation: str = ""
    formula: str = Field(
        default="rci = Σ round(normalize(raw, band) × weight), clamped to 0-100",
        description="Human-readable formula used",
    )
