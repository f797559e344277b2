"""
Tests for the aggregator — bounded scores, parse failures, batch averaging.
"""

import pytest

from reviewgate.core.aggregator import aggregate, analyze, analyze_files
from reviewgate.errors import SourceValidationError
from reviewgate.models.analysis_models import CATEGORIES, Issue
from reviewgate.models.review_models import FileInput


def _issue(penalty):
    return Issue(rule_id="test", penalty=penalty, comment=f"penalty {penalty}")


def test_aggregate_subtracts_penalties():
    score = aggregate([_issue(3), _issue(2)], 25)
    assert score.score == 20
    assert score.comments == ["penalty 3", "penalty 2"]


def test_aggregate_floor_clamped():
    assert aggregate([_issue(15), _issue(15)], 25).score == 0


def test_aggregate_no_issues():
    score = aggregate([], 25)
    assert score.score == 25
    assert score.comments == []


def test_clean_code_scores_100(clean_js_code):
    result = analyze(clean_js_code)
    assert result.total_score == 100
    assert result.error is None
    assert result.critical_issues == []


def test_api_key_scenario(api_key_js_code):
    result = analyze(api_key_js_code)
    assert result.security.score == 20
    assert result.readability.score == 25
    assert result.complexity.score == 25
    assert result.edge_cases.score == 25
    assert result.total_score == 95
    assert result.critical_issues == []


def test_eval_scenario(eval_js_code):
    result = analyze(eval_js_code)
    assert result.security.score == 17
    assert len(result.critical_issues) == 1
    assert result.critical_issues[0].rule_id == "eval_usage"


@pytest.mark.parametrize("source", ["", "   \n\t", None, 42])
def test_invalid_source_rejected(source):
    with pytest.raises(SourceValidationError):
        analyze(source)


def test_lone_surrogate_rejected():
    with pytest.raises(SourceValidationError, match="valid UTF-8"):
        analyze("const a = '\ud800';\n")


def test_syntax_error_zero_result(broken_js_code):
    result = analyze(broken_js_code, "broken.js")
    assert result.total_score == 0
    assert result.filename == "broken.js"
    assert result.error.startswith("Syntax Error")
    assert result.critical_issues == []
    for category in CATEGORIES:
        score = getattr(result, category)
        assert score.score == 0
        assert score.comments == [f"Unable to analyze: {result.error}"]


def test_total_is_sum_of_categories(express_handler_code):
    result = analyze(express_handler_code)
    assert result.total_score == sum(result.category_scores().values())
    for score in result.category_scores().values():
        assert 0 <= score <= 25


def test_critical_issues_independent_of_score(clean_js_code):
    result = analyze(clean_js_code + 'eval("1");\n')
    assert result.total_score == 92
    assert len(result.critical_issues) == 1


def test_batch_averages_round_half_up(clean_js_code, api_key_js_code):
    batch = analyze_files([
        FileInput(filename="a.js", content=clean_js_code),
        FileInput(filename="b.js", content=api_key_js_code),
    ])
    assert len(batch.files) == 2
    # (25 + 20) / 2 = 22.5
    assert batch.aggregated.security.score == 23
    assert batch.aggregated.total_score == 98
    assert batch.aggregated.security.comments[0].startswith("[b.js] Potential hardcoded secret")


def test_batch_critical_issues_carry_filename(clean_js_code, eval_js_code):
    batch = analyze_files([
        FileInput(filename="clean.js", content=clean_js_code),
        FileInput(filename="danger.js", content=eval_js_code),
    ])
    assert [issue.filename for issue in batch.critical_issues] == ["danger.js"]
    assert batch.critical_issues[0].rule_id == "eval_usage"

    dumped = batch.aggregated.model_dump(mode="json")
    assert dumped["critical_issues"][0]["filename"] == "danger.js"


def test_batch_with_unparseable_file(clean_js_code, broken_js_code):
    batch = analyze_files([
        FileInput(filename="ok.js", content=clean_js_code),
        FileInput(filename="broken.js", content=broken_js_code),
    ])
    assert batch.files[1].error is not None
    assert batch.aggregated.total_score == 52  # 13 per category
    assert batch.aggregated.readability.comments[0].startswith("[broken.js] Unable to analyze")


def test_empty_batch_rejected():
    with pytest.raises(SourceValidationError):
        analyze_files([])
