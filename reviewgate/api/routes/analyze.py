"""
ReviewGate — POST /analyze and POST /analyze/files endpoints.

Single-file reviews are stored and returned as a Review (201). Code that
fails to parse is not stored: the zero-score report comes back with 422.
Batch reviews are computed on the fly and never stored.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from reviewgate.api.dependencies import get_pipeline, get_review_store
from reviewgate.config import settings
from reviewgate.core.aggregator import validate_source
from reviewgate.core.pipeline import ReviewPipeline
from reviewgate.errors import SourceTooLargeError, SourceValidationError
from reviewgate.models.review_models import (
    AnalyzeFilesRequest,
    AnalyzeRequest,
    BatchReviewReport,
    Review,
)
from reviewgate.store.review_store import ReviewStore

logger = logging.getLogger("reviewgate.api.analyze")
router = APIRouter()


def _check_size(code: str, label: str) -> None:
    validate_source(code)
    size = len(code.encode("utf-8"))
    if size > settings.max_code_bytes:
        raise SourceTooLargeError(
            f"{label} is {size} bytes; the maximum is {settings.max_code_bytes} bytes"
        )


@router.post(
    "/analyze",
    response_model=Review,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"description": "Code has syntax errors and cannot be analyzed"}},
)
def analyze_code(
    req: AnalyzeRequest,
    pipeline: ReviewPipeline = Depends(get_pipeline),
    store: ReviewStore = Depends(get_review_store),
):
    """Review JavaScript/TypeScript code and store the result."""
    _check_size(req.code, req.filename)

    report = pipeline.review(req.code, req.filename)

    if report.analysis.error:
        logger.info(f"Rejected {req.filename}: {report.analysis.error}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": report.analysis.error,
                "scores": report.analysis.model_dump(mode="json"),
                "report": report.model_dump(mode="json"),
            },
        )

    review = store.save(req.code, report.analysis, report)
    logger.info(f"Stored review {review.id} ({report.analysis.total_score}/100)")
    return review


@router.post("/analyze/files", response_model=BatchReviewReport)
def analyze_files(
    req: AnalyzeFilesRequest,
    pipeline: ReviewPipeline = Depends(get_pipeline),
):
    """Review several files as one change set. Nothing is stored."""
    if len(req.files) > settings.max_files:
        raise SourceValidationError(
            f"Too many files: {len(req.files)} submitted, the maximum is {settings.max_files}"
        )
    for f in req.files:
        _check_size(f.content, f.filename)

    return pipeline.review_files(req.files)
