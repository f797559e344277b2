"""
FastAPI Dependencies — Shared singletons injected via Depends().
"""

from __future__ import annotations

from functools import lru_cache

from reviewgate.config import settings
from reviewgate.core.pipeline import ReviewPipeline
from reviewgate.store.review_store import ReviewStore


@lru_cache
def get_review_store() -> ReviewStore:
    """Shared review store singleton, connected on first use."""
    store = ReviewStore()
    if not store.is_connected:
        store.connect()
    return store


@lru_cache
def get_pipeline() -> ReviewPipeline:
    """Shared review pipeline singleton."""
    return ReviewPipeline(override_mode=settings.decision_override_mode)
