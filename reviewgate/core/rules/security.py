"""
Security Rule — eval, shell execution, hardcoded secrets, unsanitized input.

Each check keeps its own set of reported lines, so a line can be penalized
once per check. Only eval/Function and child_process findings are CRITICAL;
those are the ones that force a blocking verdict.
"""

from __future__ import annotations

import re

from tree_sitter import Node

from reviewgate.core.syntax import (
    IDENTIFIER,
    STRING,
    TEMPLATE,
    SyntaxTree,
    field,
    line,
    operator,
    postorder,
    string_value,
    template_text,
)
from reviewgate.models.analysis_models import Issue, Severity


CATEGORY = "security"
MAX_SCORE = 25

PENALTIES = {
    "eval_usage": 8,
    "child_process_exec": 6,
    "hardcoded_secret": 5,
    "unsanitized_input": 4,
}

DYNAMIC_CODE_NAMES = frozenset({"eval", "Function"})

CHILD_PROCESS_MODULES = frozenset({"child_process", "node:child_process"})
CHILD_PROCESS_NAMES = frozenset({"child_process", "cp"})
SHELL_METHODS = frozenset({"exec", "execSync", "spawn", "spawnSync", "fork"})

MIN_SECRET_LENGTH = 8
MIN_KEY_SHAPE_LENGTH = 20

SECRET_NAME_PATTERNS = [
    re.compile(r"api[_-]?key", re.IGNORECASE),
    re.compile(r"secret", re.IGNORECASE),
    re.compile(r"password", re.IGNORECASE),
    re.compile(r"passwd", re.IGNORECASE),
    re.compile(r"token", re.IGNORECASE),
    re.compile(r"auth", re.IGNORECASE),
    re.compile(r"credential", re.IGNORECASE),
    re.compile(r"private[_-]?key", re.IGNORECASE),
]

KEY_SHAPE_PATTERNS = [
    re.compile(r"^[A-Za-z0-9]{32,}$"),                     # long opaque alphanumerics
    re.compile(r"^[sp]k_(?:live_|test_)?[A-Za-z0-9]+$"),   # Stripe
    re.compile(r"^ghp_[A-Za-z0-9]+$"),                     # GitHub
    re.compile(r"^xox[baprs]-[A-Za-z0-9-]+$"),             # Slack
    re.compile(r"^AKIA[A-Z0-9]{16}$"),                     # AWS access key id
    re.compile(r"^AIza[0-9A-Za-z_-]{35}$"),                # Google
    re.compile(r"Bearer\s+[A-Za-z0-9._~+/-]+=*", re.IGNORECASE),
]

SQL_PATTERN = re.compile(r"\b(select|insert|update|delete|from|where)\b", re.IGNORECASE)
HTML_PATTERN = re.compile(r"<[a-z]+", re.IGNORECASE)

USER_INPUT_ROOTS = frozenset({"req", "request"})
DOM_SINKS = frozenset({"innerHTML", "outerHTML", "textContent"})

_ASSIGNMENT_KINDS = frozenset({"assignment_expression", "augmented_assignment_expression"})
_ACCESS_KINDS = frozenset({"member_expression", "subscript_expression"})


def detect(tree: SyntaxTree) -> list[Issue]:
    """Detect security smells."""
    issues: list[Issue] = []
    _check_dynamic_code(tree, issues)
    _check_child_process(tree, issues)
    _check_hardcoded_secrets(tree, issues)
    _check_unsanitized_input(tree, issues)
    return issues


# ── eval() / Function() ──

def _check_dynamic_code(tree: SyntaxTree, issues: list[Issue]) -> None:
    reported_lines: set[int] = set()

    for node, _ in tree.walk():
        if node.type == "call_expression":
            name = _dynamic_code_name(tree, field(node, "function"))
            constructed = False
        elif node.type == "new_expression":
            name = _dynamic_code_name(tree, field(node, "constructor"))
            constructed = True
        else:
            continue
        if name is None or (constructed and name != "Function"):
            continue

        call_line = line(node)
        if call_line in reported_lines:
            continue
        reported_lines.add(call_line)

        if constructed:
            comment = (
                f"Dangerous 'new Function()' usage detected at line {call_line}. "
                f"This is equivalent to eval() and can execute arbitrary code."
            )
        else:
            comment = (
                f"Dangerous {name}() usage detected at line {call_line}. "
                f"This can execute arbitrary code and is a major security risk."
            )

        issues.append(
            Issue(
                rule_id="eval_usage" if name == "eval" else "function_constructor",
                penalty=PENALTIES["eval_usage"],
                comment=comment,
                severity=Severity.CRITICAL,
                line=call_line,
            )
        )


def _dynamic_code_name(tree: SyntaxTree, callee: Node | None) -> str | None:
    """'eval' or 'Function' for eval/Function/x.eval/x.Function, else None."""
    if callee is None:
        return None
    if callee.type == IDENTIFIER:
        name = tree.text(callee)
    elif callee.type == "member_expression":
        name = tree.text(field(callee, "property"))
    else:
        return None
    return name if name in DYNAMIC_CODE_NAMES else None


# ── child_process ──

def _check_child_process(tree: SyntaxTree, issues: list[Issue]) -> None:
    module_aliases, method_aliases = _child_process_bindings(tree)
    module_aliases |= CHILD_PROCESS_NAMES
    reported_lines: set[int] = set()

    for node, _ in tree.walk():
        if node.type != "call_expression":
            continue

        method = _shell_method(tree, field(node, "function"), module_aliases, method_aliases)
        if method is None:
            continue

        call_line = line(node)
        if call_line in reported_lines:
            continue
        reported_lines.add(call_line)

        issues.append(
            Issue(
                rule_id="child_process_exec",
                penalty=PENALTIES["child_process_exec"],
                comment=(
                    f"Shell command execution via child_process.{method}() at line {call_line}. "
                    f"Ensure input is sanitized to prevent command injection."
                ),
                severity=Severity.CRITICAL,
                line=call_line,
            )
        )


def _child_process_bindings(tree: SyntaxTree) -> tuple[set[str], dict[str, str]]:
    """Names bound to the child_process module, and local names bound to its methods.

    Covers ``const cp = require(...)``, ``const { exec, spawn: run } = require(...)``,
    default, namespace and named imports.
    """
    modules: set[str] = set()
    methods: dict[str, str] = {}

    for node, _ in tree.walk():
        if node.type == "variable_declarator":
            if not _is_child_process_require(tree, field(node, "value")):
                continue
            target = field(node, "name")
            if target is None:
                continue
            if target.type == IDENTIFIER:
                modules.add(tree.text(target))
            elif target.type == "object_pattern":
                _bind_destructured(tree, target, methods)

        elif node.type == "import_statement":
            source = field(node, "source")
            if source is None or string_value(tree, source) not in CHILD_PROCESS_MODULES:
                continue
            for clause in node.named_children:
                if clause.type == "import_clause":
                    _bind_import_clause(tree, clause, modules, methods)

    return modules, methods


def _is_child_process_require(tree: SyntaxTree, node: Node | None) -> bool:
    if node is None or node.type != "call_expression":
        return False
    callee = field(node, "function")
    if callee is None or callee.type != IDENTIFIER or tree.text(callee) != "require":
        return False
    args = field(node, "arguments")
    if args is None or not args.named_children:
        return False
    first = args.named_children[0]
    return first.type == STRING and string_value(tree, first) in CHILD_PROCESS_MODULES


def _bind_destructured(tree: SyntaxTree, pattern: Node, methods: dict[str, str]) -> None:
    for prop in pattern.named_children:
        if prop.type == "shorthand_property_identifier_pattern":
            name = tree.text(prop)
            if name in SHELL_METHODS:
                methods[name] = name
        elif prop.type == "pair_pattern":
            key, value = field(prop, "key"), field(prop, "value")
            if key is None or value is None or value.type != IDENTIFIER:
                continue
            original = tree.text(key)
            if original in SHELL_METHODS:
                methods[tree.text(value)] = original


def _bind_import_clause(
    tree: SyntaxTree, clause: Node, modules: set[str], methods: dict[str, str]
) -> None:
    for child in clause.named_children:
        if child.type == IDENTIFIER:
            modules.add(tree.text(child))
        elif child.type == "namespace_import":
            for alias in child.named_children:
                if alias.type == IDENTIFIER:
                    modules.add(tree.text(alias))
        elif child.type == "named_imports":
            for specifier in child.named_children:
                if specifier.type != "import_specifier":
                    continue
                original = tree.text(field(specifier, "name"))
                local = tree.text(field(specifier, "alias")) or original
                if original in SHELL_METHODS:
                    methods[local] = original


def _shell_method(
    tree: SyntaxTree,
    callee: Node | None,
    module_aliases: set[str],
    method_aliases: dict[str, str],
) -> str | None:
    if callee is None:
        return None

    if callee.type == IDENTIFIER:
        return method_aliases.get(tree.text(callee))

    if callee.type != "member_expression":
        return None

    method = tree.text(field(callee, "property"))
    if method not in SHELL_METHODS:
        return None

    owner = field(callee, "object")
    if owner is None:
        return None
    if owner.type == IDENTIFIER and tree.text(owner) in module_aliases:
        return method
    if _is_child_process_require(tree, owner):
        return method
    return None


# ── Hardcoded secrets ──

def _check_hardcoded_secrets(tree: SyntaxTree, issues: list[Issue]) -> None:
    reported_lines: set[int] = set()

    for node, _ in tree.walk():
        if node.type == "variable_declarator":
            target, value = field(node, "name"), field(node, "value")
        elif node.type == "assignment_expression":
            target, value = field(node, "left"), field(node, "right")
        elif node.type == STRING:
            _check_key_shape(tree, node, reported_lines, issues)
            continue
        else:
            continue

        if target is None or value is None or value.type != STRING:
            continue

        name = _assigned_name(tree, target)
        if not name or not any(p.search(name) for p in SECRET_NAME_PATTERNS):
            continue
        if len(string_value(tree, value)) < MIN_SECRET_LENGTH:
            continue

        secret_line = line(node)
        if secret_line in reported_lines:
            continue
        reported_lines.add(secret_line)

        issues.append(
            Issue(
                rule_id="hardcoded_secret",
                penalty=PENALTIES["hardcoded_secret"],
                comment=(
                    f"Potential hardcoded secret in variable '{name}' at line {secret_line}. "
                    f"Use environment variables instead."
                ),
                severity=Severity.HIGH,
                line=secret_line,
            )
        )


def _assigned_name(tree: SyntaxTree, target: Node) -> str:
    if target.type == IDENTIFIER:
        return tree.text(target)
    if target.type == "member_expression":
        return tree.text(field(target, "property"))
    return ""


def _check_key_shape(
    tree: SyntaxTree, node: Node, reported_lines: set[int], issues: list[Issue]
) -> None:
    value = string_value(tree, node)
    if len(value) < MIN_KEY_SHAPE_LENGTH:
        return
    if not any(p.search(value) for p in KEY_SHAPE_PATTERNS):
        return

    key_line = line(node)
    if key_line in reported_lines:
        return
    reported_lines.add(key_line)

    issues.append(
        Issue(
            rule_id="hardcoded_secret",
            penalty=PENALTIES["hardcoded_secret"],
            comment=(
                f"Potential hardcoded API key or token detected at line {key_line}. "
                f"Use environment variables instead."
            ),
            severity=Severity.HIGH,
            line=key_line,
        )
    )


# ── Unsanitized user input ──

def _check_unsanitized_input(tree: SyntaxTree, issues: list[Issue]) -> None:
    reported_lines: set[int] = set()

    def report(node: Node, severity: Severity, comment: str) -> None:
        node_line = line(node)
        if node_line in reported_lines:
            return
        reported_lines.add(node_line)
        issues.append(
            Issue(
                rule_id="unsanitized_input",
                penalty=PENALTIES["unsanitized_input"],
                comment=comment.format(line=node_line),
                severity=severity,
                line=node_line,
            )
        )

    user_input = _user_input_nodes(tree)

    for node, parent in tree.walk():
        if node.type in _ASSIGNMENT_KINDS:
            target, value = field(node, "left"), field(node, "right")
            if target is None or value is None or target.type != "member_expression":
                continue
            sink = tree.text(field(target, "property"))
            if sink in DOM_SINKS and _is_mixed_expression(value, user_input):
                report(
                    node,
                    Severity.HIGH,
                    f"Potential XSS: user input assigned to {sink} at line {{line}}. "
                    f"Sanitize output before writing to the DOM.",
                )

        elif node.type == "binary_expression" and operator(node) == "+":
            # Only the outermost link of a + chain is inspected
            if parent is not None and parent.type == "binary_expression" and operator(parent) == "+":
                continue
            operands = _concat_operands(node)
            if not any(op.id in user_input for op in operands):
                continue
            literal = " ".join(
                string_value(tree, op) if op.type == STRING else template_text(tree, op)
                for op in operands
                if op.type in (STRING, TEMPLATE)
            )
            if SQL_PATTERN.search(literal):
                report(
                    node,
                    Severity.HIGH,
                    "Potential SQL injection: user input concatenated with SQL at line {line}. "
                    "Use parameterized queries.",
                )
            elif HTML_PATTERN.search(literal):
                report(
                    node,
                    Severity.MEDIUM,
                    "Potential XSS: user input concatenated with HTML at line {line}. Sanitize output.",
                )

        elif node.type == TEMPLATE:
            substitutions = [c for c in node.named_children if c.type == "template_substitution"]
            if not any(sub.id in user_input for sub in substitutions):
                continue
            literal = template_text(tree, node)
            if SQL_PATTERN.search(literal):
                report(
                    node,
                    Severity.HIGH,
                    "Potential SQL injection: user input interpolated in template at line {line}. "
                    "Use parameterized queries.",
                )
            elif HTML_PATTERN.search(literal):
                report(
                    node,
                    Severity.MEDIUM,
                    "Potential XSS: user input interpolated in HTML template at line {line}. "
                    "Sanitize output.",
                )


def _concat_operands(node: Node) -> list[Node]:
    """Flatten a left-leaning chain of ``+`` into its operands, left to right."""
    operands: list[Node] = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "binary_expression" and operator(current) == "+":
            right, left = field(current, "right"), field(current, "left")
            if right is not None:
                stack.append(right)
            if left is not None:
                stack.append(left)
        elif current.type == "parenthesized_expression" and current.named_children:
            stack.append(current.named_children[0])
        else:
            operands.append(current)
    return operands


def _is_mixed_expression(node: Node, user_input: set[int]) -> bool:
    """A concatenation or template that pulls in user input."""
    if node.type == TEMPLATE:
        return any(
            c.type == "template_substitution" and c.id in user_input
            for c in node.named_children
        )
    if node.type == "binary_expression" and operator(node) == "+":
        return any(op.id in user_input for op in _concat_operands(node))
    return False


def _user_input_nodes(tree: SyntaxTree) -> set[int]:
    """Ids of every node whose subtree reads user input.

    User input is a member/subscript chain rooted at ``req`` or ``request``,
    e.g. req.query.id. Computed bottom-up in a single pass.
    """
    rooted: set[int] = set()
    contains: set[int] = set()

    for node in postorder(tree.root):
        if node.type in _ACCESS_KINDS:
            target = field(node, "object")
            if target is not None and (
                target.id in rooted
                or (target.type == IDENTIFIER and tree.text(target) in USER_INPUT_ROOTS)
            ):
                rooted.add(node.id)
        if node.id in rooted or any(child.id in contains for child in node.named_children):
            contains.add(node.id)

    return contains
