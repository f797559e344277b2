"""
Rule Engine — Runs the four category detectors over one syntax tree.

Detectors are pure functions of the tree: no shared state, no ordering
dependency between categories, and no exception handling here. A detector
that raises is a bug, and the pipeline reports it as an internal error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from reviewgate.core.rules import complexity, edge_cases, readability, security
from reviewgate.core.syntax import SyntaxTree
from reviewgate.models.analysis_models import Issue

# Type for a category detector
DetectFn = Callable[[SyntaxTree], list[Issue]]


@dataclass(frozen=True)
class CategoryRule:
    detect: DetectFn
    max_score: int


# Registry of all category detectors, in report order
RULE_REGISTRY: dict[str, CategoryRule] = {
    readability.CATEGORY: CategoryRule(readability.detect, readability.MAX_SCORE),
    complexity.CATEGORY: CategoryRule(complexity.detect, complexity.MAX_SCORE),
    edge_cases.CATEGORY: CategoryRule(edge_cases.detect, edge_cases.MAX_SCORE),
    security.CATEGORY: CategoryRule(security.detect, security.MAX_SCORE),
}


class RuleEngine:
    """
    Deterministic rule engine.

    Runs every registered category detector against a SyntaxTree.
    """

    def __init__(self, rules: dict[str, CategoryRule] | None = None) -> None:
        self.rules = rules or RULE_REGISTRY

    def run(self, tree: SyntaxTree) -> dict[str, list[Issue]]:
        """Run all detectors. Returns category -> issues, in registry order."""
        return {category: rule.detect(tree) for category, rule in self.rules.items()}

    def run_category(self, category: str, tree: SyntaxTree) -> list[Issue]:
        """Run a single category detector."""
        if category not in self.rules:
            raise ValueError(f"Unknown category: {category}")
        return self.rules[category].detect(tree)

    def max_score(self, category: str) -> int:
        return self.rules[category].max_score
