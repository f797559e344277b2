"""
Tests for the metrics extractor.
"""

from reviewgate.core.metrics import extract_metrics


def test_function_metrics(tree_of):
    code = '''
function check(value) {
  if (value > 0) {
    for (const item of value.items) {
      console.log(item);
    }
  }
  return value;
}
'''
    metrics = extract_metrics(tree_of(code))
    assert metrics.max_nesting_depth == 2
    assert metrics.max_cyclomatic_complexity == 3
    assert metrics.max_function_length == 8
    assert metrics.total_functions == 1


def test_global_code_metrics(tree_of):
    metrics = extract_metrics(tree_of("if (ready) { start(); }\nconst mode = ready ? 1 : 2;\n"))
    assert metrics.total_functions == 0
    assert metrics.max_function_length == 0
    assert metrics.max_cyclomatic_complexity == 3
    assert metrics.max_nesting_depth == 1


def test_max_over_functions(tree_of):
    code = '''
const small = () => 1;
function larger(flag) {
  if (flag && flag.ready) {
    return 1;
  }
  return 0;
}
'''
    metrics = extract_metrics(tree_of(code))
    assert metrics.total_functions == 2
    assert metrics.max_cyclomatic_complexity == 3
    assert metrics.max_function_length == 6
