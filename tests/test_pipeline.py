"""
Tests for the review pipeline — full reports, determinism, failure handling.
"""

import hashlib
import time

import pytest

from reviewgate.core.pipeline import ReviewPipeline, review, review_files
from reviewgate.core.proof import bundle_content, proof_hash
from reviewgate.core.rule_engine import RULE_REGISTRY, CategoryRule, RuleEngine
from reviewgate.errors import InternalAnalysisError, SourceValidationError
from reviewgate.models.decision_models import Decision, RCILevel, Verdict
from reviewgate.models.review_models import FileInput


def test_clean_code_report(clean_js_code):
    report = review(clean_js_code, "math.js")
    assert report.filename == "math.js"
    assert report.analysis.total_score == 100
    assert report.decision.decision == Decision.READY_FOR_HUMAN_REVIEW
    assert report.verdict.verdict == Verdict.APPROVE
    assert report.review_cost.level == RCILevel.LOW
    assert report.metrics.total_functions == 1
    assert report.badge.label == "Approve"
    assert report.proof_hash == hashlib.sha256(clean_js_code.encode("utf-8")).hexdigest()
    assert report.analysis_time_ms >= 0


def test_eval_blocks_merge(eval_js_code):
    report = review(eval_js_code)
    assert report.analysis.security.score == 17
    assert report.verdict.verdict == Verdict.BLOCK_MERGE
    assert report.verdict.details.score_based_verdict == Verdict.APPROVE
    assert report.decision.decision == Decision.NEEDS_REFACTOR
    assert report.review_cost.factors["security_deductions"].raw_value == 8
    assert report.verdict.details.critical_issues[0].file == "code.js"


def test_api_key_approved(api_key_js_code):
    report = review(api_key_js_code)
    assert report.analysis.total_score == 95
    assert report.verdict.verdict == Verdict.APPROVE
    assert report.decision.decision == Decision.READY_FOR_HUMAN_REVIEW


def test_api_key_comment_override(api_key_js_code):
    report = review(api_key_js_code, override_mode="comment")
    assert report.decision.decision == Decision.NEEDS_REFACTOR
    assert report.verdict.verdict == Verdict.APPROVE


def test_syntax_error_report(broken_js_code):
    report = review(broken_js_code)
    assert report.analysis.total_score == 0
    assert report.analysis.error is not None
    assert report.metrics is None
    assert report.decision.decision == Decision.NOT_READY_FOR_REVIEW
    assert report.decision.reason == "Code has syntax errors and cannot be analyzed."
    assert report.review_cost.level == RCILevel.HIGH
    assert report.review_cost.score == 100
    assert report.review_cost.factors == {}
    assert report.verdict.verdict == Verdict.BLOCK_MERGE


@pytest.mark.parametrize("source", ["", "  \n"])
def test_blank_source_rejected(source):
    with pytest.raises(SourceValidationError):
        review(source)


def test_idempotent(express_handler_code):
    first = review(express_handler_code).model_dump(exclude={"analysis_time_ms"})
    second = review(express_handler_code).model_dump(exclude={"analysis_time_ms"})
    assert first == second


def test_deep_logical_chain_reviewed_in_linear_time():
    source = "const value = " + " || ".join(["flag"] * 8000) + ";\n"

    start = time.monotonic()
    report = review(source)
    elapsed = time.monotonic() - start

    assert report.analysis.complexity.score == 10
    assert report.metrics.max_cyclomatic_complexity == 8000
    assert elapsed < 3.0


def test_adding_a_finding_never_raises_the_score(clean_js_code):
    before = review(clean_js_code).analysis
    after = review(clean_js_code + "const ab = 1;\n").analysis
    assert after.readability.score < before.readability.score
    assert after.total_score < before.total_score
    for name, score in after.category_scores().items():
        assert score <= before.category_scores()[name]


def test_unexpected_failure_is_internal_error(clean_js_code):
    def explode(tree):
        raise RuntimeError("boom")

    rules = dict(RULE_REGISTRY)
    rules["complexity"] = CategoryRule(explode, 25)
    pipeline = ReviewPipeline(engine=RuleEngine(rules))

    with pytest.raises(InternalAnalysisError) as exc_info:
        pipeline.review(clean_js_code)
    assert "boom" not in exc_info.value.message
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_batch_report(clean_js_code, eval_js_code):
    files = [
        FileInput(filename="clean.js", content=clean_js_code),
        FileInput(filename="danger.js", content=eval_js_code),
    ]
    report = review_files(files)
    assert report.file_count == 2
    assert report.aggregated.security.score == 21
    assert report.verdict.verdict == Verdict.BLOCK_MERGE
    assert report.verdict.details.critical_issues[0].file == "danger.js"
    assert report.proof_hash == proof_hash(bundle_content(files))


def test_batch_without_files_rejected():
    with pytest.raises(SourceValidationError):
        review_files([])


def test_bundle_content():
    files = [FileInput(filename="a.js", content="x();"), FileInput(filename="b.js", content="y();")]
    assert bundle_content(files) == "// a.js\nx();\n\n// b.js\ny();"
