"""
Tests for the complexity rule — cyclomatic complexity tiers.
"""

import pytest

from reviewgate.core.rules import complexity


def _or_chain_function(operands):
    params = ", ".join(f"flag{n}" for n in range(operands))
    condition = " || ".join(f"flag{n}" for n in range(operands))
    return f"function pick({params}) {{\n  if ({condition}) {{\n    return 1;\n  }}\n  return 0;\n}}\n"


@pytest.mark.parametrize(
    "value,penalty",
    [(1, 0), (5, 0), (6, 3), (10, 3), (11, 6), (15, 6), (16, 10), (20, 10), (21, 15), (60, 15)],
)
def test_penalty_tiers(value, penalty):
    assert complexity.penalty_for(value) == penalty


def test_complexity_21_costs_15(tree_of):
    # 20 operands joined by 19 ||, plus the if, plus the base
    issues = complexity.detect(tree_of(_or_chain_function(20)))
    assert len(issues) == 1
    assert issues[0].penalty == 15
    assert "complexity of 21" in issues[0].comment


def test_complexity_20_costs_10(tree_of):
    issues = complexity.detect(tree_of(_or_chain_function(19)))
    assert [issue.penalty for issue in issues] == [10]


def test_simple_function_no_issues(tree_of, clean_js_code):
    assert complexity.detect(tree_of(clean_js_code)) == []


def test_counted_constructs(tree_of):
    code = '''
function busy(items, mode) {
  for (let i = 0; i < 3; i++) {}
  for (const item of items) {}
  while (mode) {}
  do {} while (mode);
  switch (mode) {
    case 1: break;
    case 2: break;
    default: break;
  }
  try {} catch (err) {}
  const value = mode ? 1 : 2;
  return (value && mode) ?? items;
}
'''
    node = next(n for n, _ in tree_of(code).walk() if n.type == "function_declaration")
    # 1 + for + for-of + while + do + 2 cases + catch + ternary + && + ??
    assert complexity.function_complexity(node) == 11


def test_nested_functions_count_twice(tree_of):
    code = '''
function outer(value) {
  const inner = () => {
    if (value) {}
    if (value) {}
    if (value) {}
    if (value) {}
    if (value) {}
  };
  return inner;
}
'''
    issues = complexity.detect(tree_of(code))
    assert [issue.penalty for issue in issues] == [3, 3]
    assert "'outer'" in issues[0].comment
    assert "'inner'" in issues[1].comment


def test_global_complexity_without_functions(tree_of):
    code = "".join(f"if (flag{n}) {{ run(); }}\n" for n in range(6))
    issues = complexity.detect(tree_of(code))
    assert len(issues) == 1
    assert issues[0].rule_id == "global_complexity"
    assert issues[0].penalty == 3
    assert "Global code has cyclomatic complexity of 7" in issues[0].comment


def test_global_complexity_ignored_when_functions_exist(tree_of):
    code = "".join(f"if (flag{n}) {{ run(); }}\n" for n in range(6)) + "function run() {}\n"
    assert complexity.detect(tree_of(code)) == []
