"""
Review History Routes — GET /reviews and GET /reviews/{review_id}
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from reviewgate.api.dependencies import get_review_store
from reviewgate.config import settings
from reviewgate.errors import ReviewNotFoundError
from reviewgate.models.review_models import Review, ReviewSummary
from reviewgate.store.review_store import ReviewStore

router = APIRouter()


@router.get("/reviews", response_model=list[ReviewSummary])
def list_reviews(store: ReviewStore = Depends(get_review_store)):
    """Most recent reviews first."""
    return store.list_recent(settings.reviews_list_limit)


@router.get("/reviews/{review_id}", response_model=Review)
def get_review(review_id: str, store: ReviewStore = Depends(get_review_store)):
    review = store.get(review_id)
    if review is None:
        raise ReviewNotFoundError()
    return review
