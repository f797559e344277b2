"""
Aggregator — Turns detector issues into bounded category scores.

score = max(0, max_score - Σ penalties) per category, with no borrowing
between categories. A file that cannot be parsed scores zero everywhere and
carries the parser message in every category; callers must check ``error``
before trusting the numbers.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from reviewgate.core.parser import parse_file
from reviewgate.core.rounding import round_half_up
from reviewgate.core.rule_engine import RuleEngine
from reviewgate.core.syntax import SyntaxTree
from reviewgate.errors import CodeSyntaxError, SourceValidationError
from reviewgate.models.analysis_models import (
    CATEGORIES,
    AnalysisResult,
    BatchAnalysis,
    CategoryScore,
    CriticalIssue,
    Issue,
    Severity,
)
from reviewgate.models.review_models import FileInput

logger = logging.getLogger("reviewgate.aggregator")

AGGREGATED_FILENAME = "aggregated"


def validate_source(source: Any) -> str:
    """Reject non-string, blank or non-UTF-8 source before it reaches the parser."""
    if not isinstance(source, str):
        raise SourceValidationError('Invalid input: "code" must be a string')
    if not source.strip():
        raise SourceValidationError('Invalid input: "code" cannot be empty')
    try:
        source.encode("utf-8")
    except UnicodeEncodeError as e:
        raise SourceValidationError('Invalid input: "code" must be valid UTF-8 text') from e
    return source


def aggregate(issues: list[Issue], max_score: int) -> CategoryScore:
    """Subtract penalties from ``max_score``, floor-clamped at 0."""
    total_penalty = sum(issue.penalty for issue in issues)
    return CategoryScore(
        score=max(0, max_score - total_penalty),
        comments=[issue.comment for issue in issues],
    )


def score_tree(tree: SyntaxTree, filename: str = "code.js", engine: RuleEngine | None = None) -> AnalysisResult:
    """Run every detector over a parsed tree and aggregate the results."""
    engine = engine or RuleEngine()
    issues = engine.run(tree)

    categories = {
        category: aggregate(issues[category], engine.max_score(category))
        for category in CATEGORIES
    }
    critical = [issue for issue in issues["security"] if issue.severity == Severity.CRITICAL]

    return AnalysisResult(
        filename=filename,
        **categories,
        total_score=sum(score.score for score in categories.values()),
        critical_issues=critical,
    )


def failed_analysis(filename: str, error: str) -> AnalysisResult:
    """All-zero result for source that could not be parsed."""
    comment = f"Unable to analyze: {error}"
    return AnalysisResult(
        filename=filename,
        **{category: CategoryScore(score=0, comments=[comment]) for category in CATEGORIES},
        total_score=0,
        critical_issues=[],
        error=error,
    )


def analyze(source: Any, filename: str = "code.js") -> AnalysisResult:
    """
    Analyze one source text.

    Raises:
        SourceValidationError: source is not a string, is blank or is not valid UTF-8.
    """
    code = validate_source(source)

    try:
        tree = parse_file(code, filename)
    except CodeSyntaxError as e:
        logger.info(f"{filename}: {e.message}")
        return failed_analysis(filename, e.message)

    return score_tree(tree, filename)


def analyze_files(files: Sequence[FileInput]) -> BatchAnalysis:
    """
    Analyze several files and average their category scores.

    Each category average is rounded half-up and the aggregate total is the
    sum of the rounded categories. Comments are prefixed with their filename.
    """
    if not files:
        raise SourceValidationError("Invalid input: at least one file is required")

    results = [analyze(f.content, f.filename) for f in files]

    aggregated_categories: dict[str, CategoryScore] = {}
    for category in CATEGORIES:
        scores = [getattr(r, category) for r in results]
        aggregated_categories[category] = CategoryScore(
            score=round_half_up(sum(s.score for s in scores) / len(results)),
            comments=[
                f"[{r.filename}] {comment}"
                for r, s in zip(results, scores)
                for comment in s.comments
            ],
        )

    critical_issues = [
        CriticalIssue(**issue.model_dump(), filename=r.filename)
        for r in results
        for issue in r.critical_issues
    ]

    aggregated = AnalysisResult(
        filename=AGGREGATED_FILENAME,
        **aggregated_categories,
        total_score=sum(s.score for s in aggregated_categories.values()),
        critical_issues=critical_issues,
    )

    logger.debug(f"Aggregated {len(results)} files: total {aggregated.total_score}")
    return BatchAnalysis(files=results, aggregated=aggregated, critical_issues=critical_issues)
