"""
Complexity Rule — Cyclomatic complexity per function.

Complexity starts at 1 and adds one for every if, loop, non-default case,
ternary, logical operator (&&, ||, ??) and catch clause. Nested functions
count toward their enclosing function as well as themselves. When a file
has no functions, module-level control flow is scored instead.
"""

from __future__ import annotations

from tree_sitter import Node

from reviewgate.core.syntax import (
    BRANCH_KINDS,
    FUNCTION_KINDS,
    LOGICAL_OPERATORS,
    SyntaxTree,
    descendants,
    function_name,
    line,
    operator,
    postorder,
)
from reviewgate.models.analysis_models import Issue


CATEGORY = "complexity"
MAX_SCORE = 25

# (inclusive upper bound, penalty); anything above the last bound costs 15
PENALTY_TIERS: tuple[tuple[int, int], ...] = (
    (5, 0),
    (10, 3),
    (15, 6),
    (20, 10),
)
MAX_PENALTY = 15


def penalty_for(complexity: int) -> int:
    """Penalty for the highest tier a complexity value reaches."""
    for upper, penalty in PENALTY_TIERS:
        if complexity <= upper:
            return penalty
    return MAX_PENALTY


def branch_weight(node: Node) -> int:
    """How much a single node adds to cyclomatic complexity."""
    if node.type in BRANCH_KINDS:
        return 1
    if node.type == "binary_expression" and operator(node) in LOGICAL_OPERATORS:
        return 1
    return 0


def function_complexity(node: Node) -> int:
    return 1 + sum(branch_weight(child) for child in descendants(node))


def function_complexities(root: Node) -> dict[int, int]:
    """Complexity of every function under ``root``, keyed by node id.

    Subtree branch totals are summed bottom-up in one pass, so nested
    functions are not rescanned for each enclosing function.
    """
    totals: dict[int, int] = {}
    complexities: dict[int, int] = {}
    for node in postorder(root):
        total = branch_weight(node) + sum(totals.pop(child.id) for child in node.named_children)
        totals[node.id] = total
        if node.type in FUNCTION_KINDS:
            complexities[node.id] = 1 + total - branch_weight(node)
    return complexities


def global_complexity(root: Node) -> int:
    """Complexity of module-level code, excluding everything inside functions."""
    return 1 + sum(branch_weight(child) for child in descendants(root, skip=FUNCTION_KINDS))


def detect(tree: SyntaxTree) -> list[Issue]:
    """Detect functions (or module code) with excessive cyclomatic complexity."""
    issues: list[Issue] = []
    function_count = 0
    complexities = function_complexities(tree.root)

    for node, parent in tree.walk():
        if node.type not in FUNCTION_KINDS:
            continue
        function_count += 1

        complexity = complexities[node.id]
        penalty = penalty_for(complexity)
        if penalty:
            issues.append(
                Issue(
                    rule_id="cyclomatic_complexity",
                    penalty=penalty,
                    comment=(
                        f"Function {function_name(tree, node, parent)} has cyclomatic complexity of "
                        f"{complexity}. Consider simplifying control flow."
                    ),
                    line=line(node),
                )
            )

    if function_count == 0:
        complexity = global_complexity(tree.root)
        penalty = penalty_for(complexity)
        if penalty:
            issues.append(
                Issue(
                    rule_id="global_complexity",
                    penalty=penalty,
                    comment=(
                        f"Global code has cyclomatic complexity of {complexity}. "
                        f"Consider organizing into functions."
                    ),
                    line=1,
                )
            )

    return issues

