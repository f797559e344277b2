"""
Proof Hash — SHA-256 fingerprint of exactly what was analyzed.

Multi-file content is bundled as ``// <filename>`` headed blocks joined by
a blank line, so the same files in the same order always hash the same.
"""

from __future__ import annotations

import hashlib
from typing import Sequence

from reviewgate.models.review_models import FileInput


def proof_hash(content: str) -> str:
    """Compute SHA-256 hash of content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def bundle_content(files: Sequence[FileInput]) -> str:
    return "\n\n".join(f"// {f.filename}\n{f.content}" for f in files)
