"""
Review Request/Response Models — Report bundles and API contract schemas.

ReviewReport is the final output of the pipeline. Review is the append-only
entity owned by the review store.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from reviewgate.models.analysis_models import (
    AnalysisResult,
    CriticalIssue,
    StructuralMetrics,
)
from reviewgate.models.decision_models import (
    DecisionResult,
    RCIResult,
    VerdictBadge,
    VerdictResult,
)


class FileInput(BaseModel):
    """A single file submitted for batch analysis."""

    filename: str = Field(..., description="File name used to label findings")
    content: str = Field(..., description="File source content")


class AnalyzeRequest(BaseModel):
    """Request body for POST /analyze."""

    code: str = Field(..., description="JavaScript or TypeScript source code")
    filename: str = Field(default="code.js", description="Optional label; '.ts' selects the TypeScript grammar")


class AnalyzeFilesRequest(BaseModel):
    """Request body for POST /analyze/files."""

    files: list[FileInput] = Field(default_factory=list)


class ReviewReport(BaseModel):
    """Complete single-file result bundle."""

    filename: str
    analysis: AnalysisResult
    metrics: StructuralMetrics | None = None
    decision: DecisionResult
    review_cost: RCIResult
    verdict: VerdictResult
    badge: VerdictBadge
    proof_hash: str = Field(..., description="SHA-256 of the analyzed source")
    analysis_time_ms: float = 0.0


class BatchReviewReport(BaseModel):
    """Complete multi-file result bundle."""

    files: list[AnalysisResult] = Field(default_factory=list)
    aggregated: AnalysisResult
    critical_issues: list[CriticalIssue] = Field(default_factory=list)
    decision: DecisionResult
    verdict: VerdictResult
    badge: VerdictBadge
    proof_hash: str
    file_count: int = 0
    analysis_time_ms: float = 0.0


class Review(BaseModel):
    """A stored review: code plus a snapshot of its scores. Never updated."""

    id: str
    code: str
    scores: AnalysisResult
    report: ReviewReport | None = None
    created_at: datetime


class ReviewSummary(BaseModel):
    """Summary projection returned by the review listing."""

    id: str
    total_score: int
    created_at: datetime
