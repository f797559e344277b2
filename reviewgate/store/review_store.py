"""
Review Store — Append-only JSON-lines persistence for reviews.

Each line is one stored Review. Reviews are never updated or deleted; the
newest record for an id wins if a file was ever hand-edited.
"""

from __future__ import annotations

import json
import logging
import re
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from reviewgate.config import settings
from reviewgate.errors import InvalidReviewIdError
from reviewgate.models.analysis_models import AnalysisResult
from reviewgate.models.review_models import Review, ReviewReport, ReviewSummary

logger = logging.getLogger("reviewgate.store")

REVIEW_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


class ReviewStore:
    """Writes reviews to a JSON-lines file and reads them back."""

    def __init__(self, path: str | None = None) -> None:
        self.path = Path(path or settings.reviews_path)
        self._lock = threading.Lock()
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    def connect(self) -> None:
        """Make sure the backing file exists. Safe to call more than once."""
        if self._connected:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(exist_ok=True)
        self._connected = True
        logger.info(f"Review store connected: {self.path}")

    def save(self, code: str, scores: AnalysisResult, report: ReviewReport | None = None) -> Review:
        """Append a new review and return it."""
        review = Review(
            id=uuid.uuid4().hex,
            code=code,
            scores=scores,
            report=report,
            created_at=datetime.now(timezone.utc),
        )

        with self._lock:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(review.model_dump_json() + "\n")

        logger.debug(f"Stored review {review.id}")
        return review

    def get(self, review_id: str) -> Review | None:
        """
        Look up a review by id.

        Raises InvalidReviewIdError if the id is not a 32-char hex string.
        """
        if not REVIEW_ID_PATTERN.match(review_id):
            raise InvalidReviewIdError()

        found: Review | None = None
        for review in self._read_all():
            if review.id == review_id:
                found = review
        return found

    def list_recent(self, limit: int | None = None) -> list[ReviewSummary]:
        """Most recent reviews first, as summaries."""
        limit = limit if limit is not None else settings.reviews_list_limit
        if limit <= 0:
            return []

        recent = self._read_all()[-limit:]
        return [
            ReviewSummary(id=r.id, total_score=r.scores.total_score, created_at=r.created_at)
            for r in reversed(recent)
        ]

    def _read_all(self) -> list[Review]:
        if not self.path.exists():
            return []

        reviews: list[Review] = []
        with self._lock:
            with open(self.path, encoding="utf-8") as f:
                lines = f.readlines()

        for number, line in enumerate(lines, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                reviews.append(Review.model_validate(json.loads(line)))
            except (json.JSONDecodeError, ValidationError) as e:
                logger.warning(f"Skipping unreadable review record at {self.path}:{number}: {e}")
        return reviews
