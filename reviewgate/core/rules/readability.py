"""
Readability Rule — Long functions, deep nesting, short names, crowded bodies.

Function and naming issues are emitted in pre-order traversal order;
nesting issues follow in a second pass, one per offending source line.
"""

from __future__ import annotations

from tree_sitter import Node

from reviewgate.core.syntax import (
    BLOCK,
    COMMENT,
    FUNCTION_KINDS,
    IDENTIFIER,
    SyntaxTree,
    deeper,
    field,
    function_name,
    line,
    same,
    span_lines,
    walk_with,
)
from reviewgate.models.analysis_models import Issue


CATEGORY = "readability"
MAX_SCORE = 25

PENALTIES = {
    "long_function": 3,
    "deep_nesting": 3,
    "poor_naming": 2,
    "too_many_statements": 2,
}

MAX_FUNCTION_LINES = 40
MAX_NESTING_DEPTH = 4
MIN_IDENTIFIER_LENGTH = 3
MAX_STATEMENTS_PER_FUNCTION = 5

ALLOWED_SHORT_NAMES = frozenset({
    "i", "j", "k", "n", "x", "y", "z",  # loop/math variables
    "id", "fn", "cb", "db", "fs", "os",  # common abbreviations
    "e", "ex", "err",  # error handlers
    "_", "__",  # intentionally ignored
})

_PARAMETER_WRAPPERS = frozenset({"required_parameter", "optional_parameter"})


def detect(tree: SyntaxTree) -> list[Issue]:
    """Detect readability issues."""
    issues: list[Issue] = []

    for node, parent in tree.walk():
        if node.type in FUNCTION_KINDS:
            _check_function(tree, node, parent, issues)
        elif node.type == IDENTIFIER and parent is not None:
            _check_name(tree, node, parent, issues)

    _check_nesting(tree, issues)
    return issues


def _check_function(tree: SyntaxTree, node: Node, parent: Node | None, issues: list[Issue]) -> None:
    lines = span_lines(node)
    if lines > MAX_FUNCTION_LINES:
        issues.append(
            Issue(
                rule_id="long_function",
                penalty=PENALTIES["long_function"],
                comment=(
                    f"Function {function_name(tree, node, parent)} is {lines} lines long "
                    f"(max: {MAX_FUNCTION_LINES}). Consider breaking it into smaller functions."
                ),
                line=line(node),
            )
        )

    body = field(node, "body")
    if body is None or body.type != BLOCK:
        return

    statement_count = sum(1 for child in body.named_children if child.type != COMMENT)
    if statement_count > MAX_STATEMENTS_PER_FUNCTION:
        issues.append(
            Issue(
                rule_id="too_many_statements",
                penalty=PENALTIES["too_many_statements"],
                comment=(
                    f"Function {function_name(tree, node, parent)} has {statement_count} top-level "
                    f"statements (max: {MAX_STATEMENTS_PER_FUNCTION}). "
                    f"This may indicate too many responsibilities."
                ),
                line=line(node),
            )
        )


def _check_name(tree: SyntaxTree, node: Node, parent: Node, issues: list[Issue]) -> None:
    if not _is_declared_name(node, parent):
        return

    name = tree.text(node)
    if len(name) >= MIN_IDENTIFIER_LENGTH or name in ALLOWED_SHORT_NAMES:
        return

    issues.append(
        Issue(
            rule_id="poor_naming",
            penalty=PENALTIES["poor_naming"],
            comment=(
                f"Variable '{name}' has a non-descriptive name ({len(name)} chars). "
                f"Use meaningful names."
            ),
            line=line(node),
        )
    )


def _is_declared_name(node: Node, parent: Node) -> bool:
    """Variable declarators, function names, and parameters."""
    if parent.type == "variable_declarator":
        return same(field(parent, "name"), node)
    if parent.type in FUNCTION_KINDS:
        return same(field(parent, "name"), node) or same(field(parent, "parameter"), node)
    if parent.type in _PARAMETER_WRAPPERS:
        return same(field(parent, "pattern"), node)
    return parent.type == "formal_parameters"


def _check_nesting(tree: SyntaxTree, issues: list[Issue]) -> None:
    reported_lines: set[int] = set()

    for node, depth in walk_with(tree.root, 0, deeper):
        if node.type != BLOCK:
            continue

        if depth <= MAX_NESTING_DEPTH:
            continue

        block_line = line(node)
        if block_line in reported_lines:
            continue
        reported_lines.add(block_line)

        issues.append(
            Issue(
                rule_id="deep_nesting",
                penalty=PENALTIES["deep_nesting"],
                comment=(
                    f"Deep nesting detected at line {block_line} (depth: {depth}, "
                    f"max: {MAX_NESTING_DEPTH}). Consider extracting logic or using early returns."
                ),
                line=block_line,
            )
        )
