"""
Tests for the Review Cost Index — normalization, weights, levels, explanation.
"""

import pytest

from reviewgate.core.review_cost import RCI_WEIGHTS, calculate_rci, normalize
from reviewgate.models.analysis_models import StructuralMetrics
from reviewgate.models.decision_models import RCILevel


def _metrics(nesting=0, complexity=1, length=0):
    return StructuralMetrics(
        max_nesting_depth=nesting,
        max_cyclomatic_complexity=complexity,
        max_function_length=length,
        total_functions=1,
    )


def test_weights_sum_to_one():
    assert sum(RCI_WEIGHTS.values()) == pytest.approx(1.0)


@pytest.mark.parametrize(
    "value,low,high,expected",
    [(0, 0, 8, 0), (-3, 0, 8, 0), (8, 0, 8, 100), (12, 0, 8, 100), (4, 0, 8, 50), (3, 0, 8, 38), (13, 1, 25, 50)],
)
def test_normalize(value, low, high, expected):
    assert normalize(value, low, high) == expected


def test_pristine_code_is_low():
    rci = calculate_rci(_metrics(), 25)
    assert rci.score == 0
    assert rci.level == RCILevel.LOW
    assert "straightforward" in rci.human_explanation


def test_low_explanation_names_top_factor():
    rci = calculate_rci(_metrics(nesting=2), 25)
    assert rci.level == RCILevel.LOW
    assert "Largest contributor: deep nesting (6 points)" in rci.human_explanation


def test_worst_case_is_high_100():
    rci = calculate_rci(_metrics(nesting=8, complexity=25, length=100), 0)
    assert rci.score == 100
    assert rci.level == RCILevel.HIGH
    assert [f.contribution for f in rci.factors.values()] == [25, 30, 20, 25]


def test_contribution_rounds_half_up():
    # nesting 3 → 38 normalized → 9.5 → 10
    rci = calculate_rci(_metrics(nesting=3), 25)
    assert rci.factors["nesting_depth"].normalized == 38
    assert rci.factors["nesting_depth"].contribution == 10
    assert rci.score == 10


def test_factor_trace():
    rci = calculate_rci(_metrics(nesting=2, complexity=7, length=30), 17)
    security = rci.factors["security_deductions"]
    assert security.raw_value == 8
    assert security.normalized == 32
    assert security.contribution == 8
    assert rci.score == sum(f.contribution for f in rci.factors.values())


def test_level_boundaries():
    # nesting 8 + security deductions 25 → 25 + 25
    medium = calculate_rci(_metrics(nesting=8), 0)
    assert medium.score == 50
    assert medium.level == RCILevel.MEDIUM
    # ties go to the first factor in weight order
    assert "Main contributor: deep nesting" in medium.human_explanation


def test_high_explanation_names_top_factor():
    rci = calculate_rci(_metrics(nesting=8, complexity=25, length=50), 25)
    assert rci.score == 65
    rci = calculate_rci(_metrics(nesting=8, complexity=25, length=100), 25)
    assert rci.level == RCILevel.HIGH
    assert "Primary concern: high cyclomatic complexity (30 points)" in rci.human_explanation


@pytest.mark.parametrize("security_score", [0, 5, 17, 25])
def test_score_bounds(security_score):
    rci = calculate_rci(_metrics(nesting=20, complexity=80, length=500), security_score)
    assert 0 <= rci.score <= 100
