"""
Metrics Extractor — Raw structural metrics for the Review Cost Index.

Uses the same nesting contributors and complexity counting as the
readability and complexity detectors, but reports maxima instead of
penalties.
"""

from __future__ import annotations

from reviewgate.core.rules.complexity import function_complexities, global_complexity
from reviewgate.core.syntax import BLOCK, FUNCTION_KINDS, SyntaxTree, deeper, span_lines, walk_with
from reviewgate.models.analysis_models import StructuralMetrics


def extract_metrics(tree: SyntaxTree) -> StructuralMetrics:
    """
    Walk the tree and collect maximum nesting depth, maximum
    cyclomatic complexity, longest function and function count.

    With no functions, max complexity is the module-level complexity.
    """
    max_nesting = 0
    max_complexity = 0
    max_length = 0
    total_functions = 0
    complexities = function_complexities(tree.root)

    for node, depth in walk_with(tree.root, 0, deeper):
        if node.type == BLOCK:
            max_nesting = max(max_nesting, depth)
        elif node.type in FUNCTION_KINDS:
            total_functions += 1
            max_length = max(max_length, span_lines(node))
            max_complexity = max(max_complexity, complexities[node.id])

    if total_functions == 0:
        max_complexity = global_complexity(tree.root)

    return StructuralMetrics(
        max_nesting_depth=max_nesting,
        max_cyclomatic_complexity=max_complexity,
        max_function_length=max_length,
        total_functions=total_functions,
    )
