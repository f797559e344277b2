"""
Review Cost Index — Estimates human review effort from structural metrics.

RCI = Σ round(normalize(raw, band) × weight), clamped to 0-100

Each factor's contribution is individually traced for explainability.
"""

from __future__ import annotations

from reviewgate.core.rounding import round_half_up
from reviewgate.models.analysis_models import MAX_CATEGORY_SCORE, StructuralMetrics
from reviewgate.models.decision_models import RCIFactor, RCILevel, RCIResult

# Factor weights, must sum to 1.0. Order breaks ties for the top factor.
RCI_WEIGHTS: dict[str, float] = {
    "nesting_depth": 0.25,
    "cyclomatic_complexity": 0.30,
    "function_length": 0.20,
    "security_deductions": 0.25,
}

# (min, max) band each raw metric is normalized over
NORMALIZATION: dict[str, tuple[int, int]] = {
    "nesting_depth": (0, 8),
    "cyclomatic_complexity": (1, 25),
    "function_length": (0, 100),
    "security_deductions": (0, MAX_CATEGORY_SCORE),
}

LOW_MAX = 33
MEDIUM_MAX = 66

FACTOR_NAMES = {
    "nesting_depth": "deep nesting",
    "cyclomatic_complexity": "high cyclomatic complexity",
    "function_length": "long functions",
    "security_deductions": "security concerns",
}


def normalize(value: int, low: int, high: int) -> int:
    """Map ``value`` linearly from [low, high] onto [0, 100], clamped."""
    if value <= low:
        return 0
    if value >= high:
        return 100
    return round_half_up((value - low) / (high - low) * 100)


def level_for(score: int) -> RCILevel:
    if score <= LOW_MAX:
        return RCILevel.LOW
    if score <= MEDIUM_MAX:
        return RCILevel.MEDIUM
    return RCILevel.HIGH


def calculate_rci(metrics: StructuralMetrics, security_score: int) -> RCIResult:
    """
    Compute the Review Cost Index.

    Args:
        metrics: Output of extract_metrics().
        security_score: Security category score; deductions = 25 - score.

    Returns:
        RCIResult with per-factor contributions and a one-line explanation.
    """
    raw_values = {
        "nesting_depth": metrics.max_nesting_depth,
        "cyclomatic_complexity": metrics.max_cyclomatic_complexity,
        "function_length": metrics.max_function_length,
        "security_deductions": MAX_CATEGORY_SCORE - security_score,
    }

    factors: dict[str, RCIFactor] = {}
    total = 0
    for name, weight in RCI_WEIGHTS.items():
        low, high = NORMALIZATION[name]
        normalized = normalize(raw_values[name], low, high)
        contribution = round_half_up(normalized * weight)
        total += contribution
        factors[name] = RCIFactor(
            raw_value=raw_values[name],
            normalized=normalized,
            weight=weight,
            contribution=contribution,
        )

    score = min(100, max(0, total))
    level = level_for(score)

    return RCIResult(
        level=level,
        score=score,
        factors=factors,
        human_explanation=_explain(level, score, factors),
    )


def syntax_error_rci() -> RCIResult:
    """Fixed worst-case RCI for code that could not be parsed."""
    return RCIResult(
        level=RCILevel.HIGH,
        score=100,
        factors={},
        human_explanation="Code cannot be parsed due to syntax errors.",
    )


def _explain(level: RCILevel, score: int, factors: dict[str, RCIFactor]) -> str:
    # max() keeps the first of equal contributions, i.e. weight-table order
    top_name = max(factors, key=lambda name: factors[name].contribution)
    top = FACTOR_NAMES[top_name]

    if level == RCILevel.LOW:
        return (
            f"This code is straightforward to review (RCI: {score}). "
            f"Largest contributor: {top} ({factors[top_name].contribution} points). "
            f"Clear structure and manageable complexity allow single-pass review."
        )
    if level == RCILevel.MEDIUM:
        return (
            f"This code requires moderate review effort (RCI: {score}). "
            f"Main contributor: {top}. "
            f"Reviewer may need to re-read sections for full understanding."
        )
    return (
        f"This code demands significant review effort (RCI: {score}). "
        f"Primary concern: {top} ({factors[top_name].contribution} points). "
        f"Expect detailed commenting or potential rejection."
    )
