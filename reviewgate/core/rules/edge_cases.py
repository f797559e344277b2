"""
Edge Case Rule — Unguarded async code, array access, and request input.

All three checks are shallow, single-pass heuristics: a guard seen anywhere
in the file clears every access of that identifier, regardless of control
flow reachability.
"""

from __future__ import annotations

import re

from tree_sitter import Node

from reviewgate.core.syntax import (
    CONDITION_KINDS,
    EQUALITY_OPERATORS,
    FUNCTION_KINDS,
    IDENTIFIER,
    LOGICAL_OPERATORS,
    LOOP_KINDS,
    SyntaxTree,
    descendants,
    field,
    function_name,
    has_optional_chain,
    is_async,
    is_nullish,
    line,
    operator,
    same,
    walk_with,
)
from reviewgate.models.analysis_models import Issue


CATEGORY = "edge_cases"
MAX_SCORE = 25

PENALTIES = {
    "async_without_try": 4,
    "unchecked_array_access": 3,
    "unchecked_external_input": 3,
}

REQUEST_INPUT_PROPERTIES = frozenset({"body", "query", "params"})
VALIDATOR_NAME = re.compile(r"^(validate|check|verify|sanitize|parse)", re.IGNORECASE)

_CHAIN_KINDS = frozenset({"member_expression", "subscript_expression", "call_expression"})


def detect(tree: SyntaxTree) -> list[Issue]:
    """Detect missing edge case handling."""
    issues: list[Issue] = []
    _check_async_without_try(tree, issues)
    _check_unchecked_array_access(tree, issues)
    _check_unchecked_external_input(tree, issues)
    return issues


# ── Async functions without try/catch ──

def _check_async_without_try(tree: SyntaxTree, issues: list[Issue]) -> None:
    for node, parent in tree.walk():
        if node.type not in FUNCTION_KINDS or not is_async(node):
            continue

        body = field(node, "body")
        if body is None:
            continue

        has_await = False
        has_try = False
        # The body itself may be a bare await expression (async arrow)
        own_nodes = [body]
        if body.type not in FUNCTION_KINDS:
            own_nodes.extend(descendants(body, skip=FUNCTION_KINDS))
        for child in own_nodes:
            if child.type == "await_expression":
                has_await = True
            elif child.type == "for_in_statement" and any(c.type == "await" for c in child.children):
                has_await = True
            elif child.type == "try_statement":
                has_try = True

        if has_await and not has_try:
            issues.append(
                Issue(
                    rule_id="async_without_try",
                    penalty=PENALTIES["async_without_try"],
                    comment=(
                        f"Async function {function_name(tree, node, parent)} at line {line(node)} "
                        f"contains await expressions without try/catch error handling."
                    ),
                    line=line(node),
                )
            )


# ── Array access without length/null checks ──

def _check_unchecked_array_access(tree: SyntaxTree, issues: list[Issue]) -> None:
    checked = _checked_identifiers(tree)
    reported_lines: set[int] = set()

    for node, guarded in walk_with(tree.root, False, _safe_access_step):
        if node.type != "subscript_expression":
            continue

        target = field(node, "object")
        if target is None or target.type != IDENTIFIER:
            continue

        name = tree.text(target)
        if name in checked or guarded or has_optional_chain(node):
            continue

        access_line = line(node)
        if access_line in reported_lines:
            continue
        reported_lines.add(access_line)

        issues.append(
            Issue(
                rule_id="unchecked_array_access",
                penalty=PENALTIES["unchecked_array_access"],
                comment=(
                    f"Array '{name}' accessed at line {access_line} "
                    f"without prior length or null check."
                ),
                line=access_line,
            )
        )


def _checked_identifiers(tree: SyntaxTree) -> set[str]:
    """Identifiers guarded by .length, Array.isArray, or a nullish comparison."""
    checked: set[str] = set()

    for node, in_condition in walk_with(tree.root, False, _condition_step):
        if node.type == "member_expression":
            target = field(node, "object")
            if (
                target is not None
                and target.type == IDENTIFIER
                and tree.text(field(node, "property")) == "length"
                and in_condition
            ):
                checked.add(tree.text(target))

        elif node.type == "call_expression":
            callee = field(node, "function")
            if callee is None or callee.type != "member_expression":
                continue
            owner = field(callee, "object")
            if owner is None or owner.type != IDENTIFIER or tree.text(owner) != "Array":
                continue
            if tree.text(field(callee, "property")) != "isArray":
                continue
            args = field(node, "arguments")
            first = args.named_children[0] if args is not None and args.named_children else None
            if first is not None and first.type == IDENTIFIER and in_condition:
                checked.add(tree.text(first))

        elif node.type == "binary_expression" and operator(node) in EQUALITY_OPERATORS:
            left, right = field(node, "left"), field(node, "right")
            if left is None or right is None or not in_condition:
                continue
            if left.type == IDENTIFIER and is_nullish(tree, right):
                checked.add(tree.text(left))
            elif right.type == IDENTIFIER and is_nullish(tree, left):
                checked.add(tree.text(right))

    return checked


def _condition_step(parent: Node, child: Node, inside: bool) -> bool:
    """Inside an if/while/do/ternary test or a logical operand, within one function."""
    if parent.type in FUNCTION_KINDS:
        return False
    if parent.type in CONDITION_KINDS and same(child, field(parent, "condition")):
        return True
    if parent.type == "binary_expression" and operator(parent) in LOGICAL_OPERATORS:
        return True
    return inside


def _safe_access_step(parent: Node, child: Node, inside: bool) -> bool:
    """Inside a for/for-in/for-of loop, or the object of an optional chain."""
    if inside or parent.type in LOOP_KINDS:
        return True
    if parent.type in _CHAIN_KINDS and has_optional_chain(parent):
        return same(child, field(parent, "object") or field(parent, "function"))
    return False


# ── Request input without validation ──

def _check_unchecked_external_input(tree: SyntaxTree, issues: list[Issue]) -> None:
    uses: list[tuple[str, Node]] = []
    validated: set[str] = set()

    def validation_step(parent: Node, child: Node, inside: bool) -> bool:
        return inside or _validates(tree, parent, child)

    for node, being_validated in walk_with(tree.root, False, validation_step):
        input_path = _request_input_path(tree, node)
        if input_path is None:
            continue
        if being_validated:
            validated.add(input_path)
        else:
            uses.append((input_path, node))

    reported_lines: set[int] = set()
    for input_path, node in uses:
        if input_path in validated:
            continue

        use_line = line(node)
        if use_line in reported_lines:
            continue
        reported_lines.add(use_line)

        issues.append(
            Issue(
                rule_id="unchecked_external_input",
                penalty=PENALTIES["unchecked_external_input"],
                comment=f"External input '{input_path}' used at line {use_line} without apparent validation.",
                line=use_line,
            )
        )


def _request_input_path(tree: SyntaxTree, node: Node) -> str | None:
    """'req.body' for req.body/req.query/req.params, 'request.<prop>' for any request property."""
    if node.type != "member_expression":
        return None

    target = field(node, "object")
    if target is None or target.type != IDENTIFIER:
        return None

    owner = tree.text(target)
    prop = tree.text(field(node, "property"))
    if owner == "req" and prop in REQUEST_INPUT_PROPERTIES:
        return f"{owner}.{prop}"
    if owner == "request" and prop:
        return f"{owner}.{prop}"
    return None


def _validates(tree: SyntaxTree, parent: Node, child: Node) -> bool:
    """An if test, a typeof operand, or an argument to a validate*/check*/... call."""
    if parent.type == "if_statement":
        return same(child, field(parent, "condition"))
    if parent.type == "unary_expression":
        return operator(parent) == "typeof"
    if parent.type == "call_expression" and same(child, field(parent, "arguments")):
        return bool(VALIDATOR_NAME.match(_callee_name(tree, field(parent, "function"))))
    return False


def _callee_name(tree: SyntaxTree, callee: Node | None) -> str:
    if callee is None:
        return ""
    if callee.type == IDENTIFIER:
        return tree.text(callee)
    if callee.type == "member_expression":
        return tree.text(field(callee, "property"))
    return ""
