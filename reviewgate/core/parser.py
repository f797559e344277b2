"""
ReviewGate — JavaScript/TypeScript source parser using tree-sitter.

The TSX grammar is a superset covering JSX, type annotations, optional
chaining, nullish coalescing, dynamic import(), async generators, object
rest/spread and private class members. tree-sitter recovers from errors, so
any ERROR or MISSING node fails the parse: callers never see a partial tree.
"""

from __future__ import annotations

import logging

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser

from reviewgate.core.syntax import SyntaxTree
from reviewgate.errors import CodeSyntaxError

logger = logging.getLogger("reviewgate.parser")

TSX_LANGUAGE = Language(tstypescript.language_tsx())
TS_LANGUAGE = Language(tstypescript.language_typescript())

_LANGUAGES = {
    "tsx": TSX_LANGUAGE,
    "typescript": TS_LANGUAGE,
}


class SourceParser:
    """Thin wrapper around tree-sitter for JS/TS source code."""

    def __init__(self, language: str = "tsx") -> None:
        if language not in _LANGUAGES:
            raise ValueError(f"Unsupported language: {language}")
        self.language = language
        self._parser = Parser(_LANGUAGES[language])

    def parse(self, code: str) -> SyntaxTree:
        """Parse source and return an immutable SyntaxTree.

        Raises CodeSyntaxError if the code cannot be parsed cleanly.
        """
        source_bytes = code.encode("utf-8")
        tree = self._parser.parse(source_bytes)
        if tree.root_node.has_error:
            raise CodeSyntaxError(_describe_error(tree.root_node, source_bytes))
        return SyntaxTree(tree=tree, source=source_bytes, language=self.language)


def language_for(filename: str) -> str:
    """Pick a grammar from the file extension.

    Plain .ts files use the TypeScript grammar because the TSX grammar
    rejects angle-bracket casts; everything else goes through TSX.
    """
    if filename.endswith((".ts", ".mts", ".cts")) and not filename.endswith(".d.ts"):
        return "typescript"
    return "tsx"


def parse(code: str, language: str = "tsx") -> SyntaxTree:
    """Parse source text. A fresh parser per call keeps concurrent calls independent."""
    return SourceParser(language).parse(code)


def parse_file(code: str, filename: str = "code.js") -> SyntaxTree:
    """Parse source text with the grammar implied by ``filename``."""
    language = language_for(filename)
    logger.debug(f"Parsing {filename} as {language} ({len(code)} chars)")
    return parse(code, language)


def _describe_error(root: Node, source: bytes) -> str:
    """Build a parser message for the first ERROR or MISSING node."""
    node = _first_error(root)
    if node is None:
        return "Syntax Error: Unexpected token"

    row, column = node.start_point[0] + 1, node.start_point[1]
    if node.is_missing:
        return f"Syntax Error: Missing '{node.type}' ({row}:{column})"

    snippet = source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")
    snippet = snippet.strip().splitlines()[0][:20] if snippet.strip() else ""
    if snippet:
        return f"Syntax Error: Unexpected token '{snippet}' ({row}:{column})"
    return f"Syntax Error: Unexpected token ({row}:{column})"


def _first_error(root: Node) -> Node | None:
    """Depth-first search for the earliest error node, pruning clean subtrees."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_error or node.is_missing:
            return node
        # reversed so the leftmost child is examined first
        for child in reversed(node.children):
            if child.has_error or child.is_missing:
                stack.append(child)
    return None
