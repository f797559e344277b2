"""
Syntax Tree — Immutable parse result and the closed set of node kinds the
rule detectors match on.

Detectors never probe nodes for optional attributes: they compare
``node.type`` against the kind sets below and read children through
tree-sitter field names.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, TypeVar

from tree_sitter import Node, Tree


# ── Node kinds ──

FUNCTION_KINDS = frozenset({
    "function_declaration",
    "function_expression",
    "function",  # older grammars name function expressions "function"
    "generator_function_declaration",
    "generator_function",
    "arrow_function",
    "method_definition",
})

# Statements that add a nesting level to every block beneath them
NESTING_KINDS = frozenset({
    "if_statement",
    "for_statement",
    "for_in_statement",  # for-in and for-of
    "while_statement",
    "do_statement",
    "switch_statement",
    "try_statement",
    "catch_clause",
})

LOOP_KINDS = frozenset({"for_statement", "for_in_statement"})

# Nodes that add one independent path regardless of their contents
BRANCH_KINDS = frozenset({
    "if_statement",
    "for_statement",
    "for_in_statement",
    "while_statement",
    "do_statement",
    "switch_case",  # switch_default is a separate kind and never counts
    "ternary_expression",
    "catch_clause",
})

CONDITION_KINDS = frozenset({"if_statement", "while_statement", "do_statement", "ternary_expression"})

BLOCK = "statement_block"
IDENTIFIER = "identifier"
STRING = "string"
TEMPLATE = "template_string"
COMMENT = "comment"

LOGICAL_OPERATORS = frozenset({"&&", "||", "??"})
EQUALITY_OPERATORS = frozenset({"==", "===", "!=", "!=="})


@dataclass(frozen=True)
class SyntaxTree:
    """A parsed source file. Owned by one analysis pass and discarded after."""

    tree: Tree
    source: bytes
    language: str = "tsx"

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node | None) -> str:
        """Source text for a node ('' for None)."""
        if node is None:
            return ""
        return self.source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def walk(self) -> Iterator[tuple[Node, Node | None]]:
        """Pre-order walk of the whole tree, see ``walk``."""
        return walk(self.root)


# ── Traversal ──

State = TypeVar("State")


def walk(root: Node, skip: frozenset[str] = frozenset()) -> Iterator[tuple[Node, Node | None]]:
    """Pre-order walk over named nodes, yielding (node, parent).

    ``parent`` is None for ``root``. Nodes whose kind is in ``skip`` are
    neither yielded nor descended into, except the root itself. Iterative,
    so deep trees cannot exhaust the recursion limit.
    """
    stack: list[tuple[Node, Node | None]] = [(root, None)]
    while stack:
        node, parent = stack.pop()
        yield node, parent
        for child in reversed(node.named_children):
            if child.type in skip:
                continue
            stack.append((child, node))


def walk_with(
    root: Node,
    initial: State,
    step: Callable[[Node, Node, State], State],
    skip: frozenset[str] = frozenset(),
) -> Iterator[tuple[Node, State]]:
    """Pre-order walk carrying state down the tree, yielding (node, state).

    ``root`` gets ``initial`` and every child gets ``step(parent, child,
    parent_state)``. Facts about a node's ancestors are folded in one edge
    at a time, so the walk stays linear in the number of nodes.
    """
    stack: list[tuple[Node, State]] = [(root, initial)]
    while stack:
        node, state = stack.pop()
        yield node, state
        for child in reversed(node.named_children):
            if child.type in skip:
                continue
            stack.append((child, step(node, child, state)))


def postorder(root: Node) -> Iterator[Node]:
    """Named nodes with every child before its parent."""
    stack: list[tuple[Node, bool]] = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            yield node
            continue
        stack.append((node, True))
        for child in reversed(node.named_children):
            stack.append((child, False))


def descendants(root: Node, skip: frozenset[str] = frozenset()) -> Iterator[Node]:
    """Named descendants of ``root`` (excluding root), pruning ``skip`` kinds."""
    nodes = walk(root, skip)
    next(nodes)
    for node, _ in nodes:
        yield node


def deeper(parent: Node, child: Node, depth: int) -> int:
    """``walk_with`` step counting the nesting statements above a node."""
    return depth + 1 if parent.type in NESTING_KINDS else depth


# ── Node helpers ──

def line(node: Node) -> int:
    """1-based start line."""
    return node.start_point[0] + 1


def span_lines(node: Node) -> int:
    """Number of source lines a node covers."""
    return node.end_point[0] - node.start_point[0] + 1


def same(a: Node | None, b: Node | None) -> bool:
    return a is not None and b is not None and a.id == b.id


def field(node: Node, name: str) -> Node | None:
    return node.child_by_field_name(name)


def operator(node: Node) -> str:
    """Operator token of a binary/unary/assignment expression."""
    op = node.child_by_field_name("operator")
    return op.type if op is not None else ""


def is_async(node: Node) -> bool:
    return any(child.type == "async" for child in node.children)


def has_optional_chain(node: Node) -> bool:
    return any(child.type in ("optional_chain", "?.") for child in node.children)


def string_value(tree: SyntaxTree, node: Node) -> str:
    """Literal value of a string node, quotes stripped, escapes left as written."""
    raw = tree.text(node)
    return raw[1:-1] if len(raw) >= 2 else ""


def template_text(tree: SyntaxTree, node: Node) -> str:
    """Literal parts of a template string with every ${...} substitution removed."""
    parts: list[str] = []
    cursor = node.start_byte + 1
    for child in node.named_children:
        if child.type == "template_substitution":
            parts.append(tree.source[cursor:child.start_byte].decode("utf-8", errors="replace"))
            cursor = child.end_byte
    parts.append(tree.source[cursor:max(cursor, node.end_byte - 1)].decode("utf-8", errors="replace"))
    return "".join(parts)


def is_nullish(tree: SyntaxTree, node: Node) -> bool:
    if node.type in ("null", "undefined"):
        return True
    return node.type == IDENTIFIER and tree.text(node) == "undefined"


def function_name(tree: SyntaxTree, node: Node, parent: Node | None) -> str:
    """Human-readable, quoted function name, e.g. "'fetchData'".

    Anonymous functions take the name they are bound to through ``parent``.
    """
    name = field(node, "name")
    if name is not None:
        return f"'{tree.text(name)}'"

    if parent is not None:
        if parent.type == "variable_declarator":
            target = field(parent, "name")
            if target is not None and target.type == IDENTIFIER:
                return f"'{tree.text(target)}'"
        if parent.type in ("pair", "public_field_definition", "field_definition"):
            key = field(parent, "key") or field(parent, "name") or field(parent, "property")
            if key is not None:
                key_text = tree.text(key)
                if key.type == STRING:
                    key_text = string_value(tree, key)
                return f"'{key_text}'"

    return f"anonymous at line {line(node)}"
