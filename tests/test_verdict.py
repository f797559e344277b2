"""
Tests for the verdict engine — score bands, critical override, badges.
"""

import pytest

from reviewgate.core.verdict import determine_verdict, verdict_badge
from reviewgate.models.analysis_models import CriticalIssue, Issue, Severity
from reviewgate.models.decision_models import Verdict


def _critical(rule_id, comment="critical finding"):
    return Issue(rule_id=rule_id, penalty=8, comment=comment, severity=Severity.CRITICAL)


@pytest.mark.parametrize(
    "score,verdict",
    [
        (100, Verdict.APPROVE),
        (85, Verdict.APPROVE),
        (84, Verdict.APPROVE_WITH_NITS),
        (75, Verdict.APPROVE_WITH_NITS),
        (74, Verdict.REQUEST_CHANGES),
        (65, Verdict.REQUEST_CHANGES),
        (64, Verdict.BLOCK_MERGE),
        (0, Verdict.BLOCK_MERGE),
    ],
)
def test_score_bands(score, verdict):
    result = determine_verdict(score, [])
    assert result.verdict == verdict
    assert result.details.was_overridden is False
    assert result.override_reason is None


def test_critical_issue_blocks_perfect_score():
    result = determine_verdict(100, [_critical("eval_usage")])
    assert result.verdict == Verdict.BLOCK_MERGE
    assert result.details.was_overridden is True
    assert result.details.score_based_verdict == Verdict.APPROVE
    assert result.override_reason == "Critical security issues detected: eval() usage"


def test_override_reason_distinct_labels():
    issues = [
        _critical("eval_usage"),
        _critical("child_process_exec"),
        _critical("eval_usage"),
        _critical("function_constructor"),
        _critical("something_new"),
    ]
    result = determine_verdict(90, issues)
    assert result.override_reason == (
        "Critical security issues detected: eval() usage, child_process usage, "
        "Function() constructor, critical security issue"
    )
    assert result.details.critical_issue_count == 5


def test_critical_issue_summaries_carry_filename():
    issue = CriticalIssue(
        rule_id="eval_usage",
        penalty=8,
        comment="Dangerous eval() usage detected at line 3.",
        severity=Severity.CRITICAL,
        filename="src/app.js",
    )
    result = determine_verdict(80, [issue, _critical("eval_usage", "plain")])
    summaries = result.details.critical_issues
    assert summaries[0].file == "src/app.js"
    assert summaries[0].issue == "Dangerous eval() usage detected at line 3."
    assert summaries[1].file == "unknown"


def test_critical_issue_summaries_use_report_filename():
    result = determine_verdict(100, [_critical("eval_usage")], filename="src/app.js")
    assert [s.file for s in result.details.critical_issues] == ["src/app.js"]


def test_explanations(result_factory):
    assert determine_verdict(92, []).explanation.startswith("Score: 92/100 - Verdict: APPROVE.")

    nits = determine_verdict(80, [], result_factory(25, 15, 20, 20))
    assert "Pay attention to complexity (15/25)." in nits.explanation

    changes = determine_verdict(70, [], result_factory(25, 14, 12, 19))
    assert "Focus on: complexity, edge case handling." in changes.explanation

    blocked = determine_verdict(40, [])
    assert "Score is below minimum threshold (65)." in blocked.explanation


def test_thresholds_reported():
    details = determine_verdict(90, []).details
    assert details.thresholds == {
        "approve_min": 85,
        "approve_with_nits_min": 75,
        "request_changes_min": 65,
    }


def test_badge():
    badge = verdict_badge(Verdict.APPROVE, 90)
    assert badge.label == "Approve"
    assert badge.color == "#22c55e"
    assert badge.text == f"{badge.icon} Approve (90/100)"
    assert verdict_badge(Verdict.BLOCK_MERGE, 10).label == "Block Merge"
