"""
Verdict Engine — PR-style verdict with a zero-trust security override.

Any CRITICAL issue forces BLOCK_MERGE, whatever the score (including 100).
Otherwise the verdict follows the total score:

    ≥ 85     APPROVE
    75-84    APPROVE_WITH_NITS
    65-74    REQUEST_CHANGES
    < 65     BLOCK_MERGE
"""

from __future__ import annotations

from typing import Sequence

from reviewgate.models.analysis_models import (
    AnalysisResult,
    CATEGORIES,
    CriticalIssue,
    Issue,
    MAX_CATEGORY_SCORE,
)
from reviewgate.models.decision_models import (
    CriticalIssueSummary,
    Verdict,
    VerdictBadge,
    VerdictDetails,
    VerdictResult,
)

THRESHOLDS: dict[str, int] = {
    "approve_min": 85,
    "approve_with_nits_min": 75,
    "request_changes_min": 65,
}

SIGNIFICANT_CATEGORY = 15

VERDICT_CONFIG: dict[Verdict, dict[str, str]] = {
    Verdict.APPROVE: {
        "label": "Approve",
        "icon": "✅",
        "color": "#22c55e",
        "description": "Code quality meets standards. Ready to merge.",
    },
    Verdict.APPROVE_WITH_NITS: {
        "label": "Approve with Nits",
        "icon": "🟡",
        "color": "#eab308",
        "description": "Minor issues found. Can proceed but consider addressing.",
    },
    Verdict.REQUEST_CHANGES: {
        "label": "Request Changes",
        "icon": "🟠",
        "color": "#f97316",
        "description": "Issues need attention before merging.",
    },
    Verdict.BLOCK_MERGE: {
        "label": "Block Merge",
        "icon": "🛑",
        "color": "#ef4444",
        "description": "Critical issues detected. Must be resolved.",
    },
}

# Override reason label per critical rule
CRITICAL_LABELS = {
    "eval_usage": "eval() usage",
    "function_constructor": "Function() constructor",
    "child_process_exec": "child_process usage",
}
DEFAULT_CRITICAL_LABEL = "critical security issue"

# Display names used in REQUEST_CHANGES explanations
CATEGORY_FOCUS_NAMES = {
    "readability": "readability",
    "complexity": "complexity",
    "edge_cases": "edge case handling",
    "security": "security",
}


def score_based_verdict(total_score: int) -> Verdict:
    if total_score >= THRESHOLDS["approve_min"]:
        return Verdict.APPROVE
    if total_score >= THRESHOLDS["approve_with_nits_min"]:
        return Verdict.APPROVE_WITH_NITS
    if total_score >= THRESHOLDS["request_changes_min"]:
        return Verdict.REQUEST_CHANGES
    return Verdict.BLOCK_MERGE


def determine_verdict(
    total_score: int,
    critical_issues: Sequence[Issue],
    aggregated: AnalysisResult | None = None,
    filename: str = "unknown",
) -> VerdictResult:
    """
    Derive the verdict for a single file or a batch.

    Args:
        total_score: Total (or averaged batch total) score, 0-100.
        critical_issues: CRITICAL issues; batch issues carry a ``filename``.
        aggregated: Optional scores used to name weak categories.
        filename: File the issues belong to when they do not carry one.
    """
    scored = score_based_verdict(total_score)

    if critical_issues:
        labels = list(dict.fromkeys(
            CRITICAL_LABELS.get(issue.rule_id, DEFAULT_CRITICAL_LABEL) for issue in critical_issues
        ))
        return VerdictResult(
            verdict=Verdict.BLOCK_MERGE,
            explanation=f"Score: {total_score}/100 - Verdict: {Verdict.BLOCK_MERGE.value}",
            override_reason=f"Critical security issues detected: {', '.join(labels)}",
            details=VerdictDetails(
                score_based_verdict=scored,
                was_overridden=True,
                critical_issue_count=len(critical_issues),
                critical_issues=[
                    CriticalIssueSummary(
                        file=issue.filename if isinstance(issue, CriticalIssue) else filename,
                        issue=issue.comment,
                    )
                    for issue in critical_issues
                ],
            ),
        )

    return VerdictResult(
        verdict=scored,
        explanation=_explain(scored, total_score, aggregated),
        details=VerdictDetails(
            score_based_verdict=scored,
            was_overridden=False,
            thresholds=dict(THRESHOLDS),
        ),
    )


def verdict_badge(verdict: Verdict, total_score: int) -> VerdictBadge:
    config = VERDICT_CONFIG[verdict]
    return VerdictBadge(
        label=config["label"],
        icon=config["icon"],
        color=config["color"],
        text=f"{config['icon']} {config['label']} ({total_score}/100)",
    )


def _explain(verdict: Verdict, total_score: int, aggregated: AnalysisResult | None) -> str:
    description = VERDICT_CONFIG[verdict]["description"]
    explanation = f"Score: {total_score}/100 - Verdict: {verdict.value}"

    if verdict == Verdict.BLOCK_MERGE:
        return (
            f"{explanation}. Score is below minimum threshold "
            f"({THRESHOLDS['request_changes_min']}). {description}"
        )

    explanation += f". {description}"
    if aggregated is None:
        return explanation

    scores = aggregated.category_scores()
    if verdict == Verdict.APPROVE_WITH_NITS:
        weakest = min(CATEGORIES, key=lambda name: scores[name])
        explanation += f" Pay attention to {weakest} ({scores[weakest]}/{MAX_CATEGORY_SCORE})."
    elif verdict == Verdict.REQUEST_CHANGES:
        focus = [CATEGORY_FOCUS_NAMES[name] for name in CATEGORIES if scores[name] < SIGNIFICANT_CATEGORY]
        if focus:
            explanation += f" Focus on: {', '.join(focus)}."

    return explanation
