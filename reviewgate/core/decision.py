"""
Review Decision Engine — Is this code ready for a human reviewer?

Ordered rules, first match wins:
  1. total < 65 or any category < 10      → NOT_READY_FOR_REVIEW
  2. total ≤ 80                           → NEEDS_REFACTOR
  3. total > 80 with a security override  → NEEDS_REFACTOR
     otherwise                            → READY_FOR_HUMAN_REVIEW

Recomputed from scratch on every call; nothing is stored between calls.
"""

from __future__ import annotations

from typing import Literal

from reviewgate.models.analysis_models import AnalysisResult, MAX_CATEGORY_SCORE, Severity
from reviewgate.models.decision_models import Decision, DecisionDetails, DecisionResult

OverrideMode = Literal["severity", "comment"]

REJECT_TOTAL = 65
REJECT_CATEGORY = 10
REFACTOR_MAX = 80
ATTENTION_CATEGORY = 20

# Substrings that mark a security comment as critical in "comment" mode
CRITICAL_COMMENT_PATTERNS = ("eval", "Function()", "child_process", "hardcoded secret")

SYNTAX_ERROR_REASON = "Code has syntax errors and cannot be analyzed."


def has_critical_deductions(result: AnalysisResult, override_mode: OverrideMode = "severity") -> bool:
    """Whether the security findings should hold back a READY decision.

    ``severity`` mode looks at CRITICAL-tagged issues, the same signal the
    verdict engine uses. ``comment`` mode matches security comments against
    CRITICAL_COMMENT_PATTERNS, case-insensitively; it also catches hardcoded
    secrets, which are only HIGH severity.
    """
    if override_mode == "comment":
        comments = [c.lower() for c in result.security.comments]
        return any(p.lower() in c for p in CRITICAL_COMMENT_PATTERNS for c in comments)
    return any(issue.severity == Severity.CRITICAL for issue in result.critical_issues)


def determine_decision(result: AnalysisResult, override_mode: OverrideMode = "severity") -> DecisionResult:
    category_scores = result.category_scores()
    total = result.total_score
    failed = [name for name, score in category_scores.items() if score < REJECT_CATEGORY]
    critical = has_critical_deductions(result, override_mode)

    details = DecisionDetails(
        total_score=total,
        category_scores=category_scores,
        failed_categories=failed,
        has_critical_deductions=critical,
        override_mode=override_mode,
    )

    if total < REJECT_TOTAL or failed:
        return DecisionResult(
            decision=Decision.NOT_READY_FOR_REVIEW,
            reason=_reject_reason(total, failed, category_scores),
            details=details,
        )

    if total <= REFACTOR_MAX:
        gap = REFACTOR_MAX - total
        return DecisionResult(
            decision=Decision.NEEDS_REFACTOR,
            reason=(
                f"Total score {total} indicates code needs refactoring ({gap} points below optimal). "
                f"Address flagged issues to improve maintainability before human review."
            ),
            details=details,
        )

    if critical:
        return DecisionResult(
            decision=Decision.NEEDS_REFACTOR,
            reason=(
                f"Total score {total} is good, but critical security issues detected. "
                f"Address security concerns before human review."
            ),
            details=details,
        )

    return DecisionResult(
        decision=Decision.READY_FOR_HUMAN_REVIEW,
        reason=_ready_reason(total, category_scores),
        details=details,
    )


def syntax_error_decision(result: AnalysisResult, override_mode: OverrideMode = "severity") -> DecisionResult:
    """NOT_READY decision for a result whose source failed to parse."""
    return DecisionResult(
        decision=Decision.NOT_READY_FOR_REVIEW,
        reason=SYNTAX_ERROR_REASON,
        details=DecisionDetails(
            total_score=0,
            category_scores=result.category_scores(),
            failed_categories=list(result.category_scores()),
            override_mode=override_mode,
        ),
    )


def _reject_reason(total: int, failed: list[str], category_scores: dict[str, int]) -> str:
    reasons = []
    if total < REJECT_TOTAL:
        reasons.append(f"Total score {total} is below minimum threshold ({REJECT_TOTAL})")
    if failed:
        failed_details = ", ".join(f"{name}: {category_scores[name]}" for name in failed)
        reasons.append(f"Critical deficiencies in: {failed_details} (minimum: {REJECT_CATEGORY})")
    return ". ".join(reasons) + ". Code requires significant improvements before review."


def _ready_reason(total: int, category_scores: dict[str, int]) -> str:
    weakest = min(category_scores, key=lambda name: category_scores[name])
    message = f"Code quality score {total}/100 meets standards for human review."
    if category_scores[weakest] < ATTENTION_CATEGORY:
        message += f" Reviewer should pay attention to {weakest} ({category_scores[weakest]}/{MAX_CATEGORY_SCORE})."
    return message
