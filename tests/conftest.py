"""
Test fixtures shared across all ReviewGate tests.
"""

import pytest

from reviewgate.core.parser import parse
from reviewgate.models.analysis_models import AnalysisResult, CategoryScore


@pytest.fixture
def clean_js_code():
    """Small, well-formed code with no findings in any category."""
    return '''
function addNumbers(first, second) {
  return first + second;
}

const total = addNumbers(2, 3);
'''


@pytest.fixture
def eval_js_code():
    """A single eval() call in otherwise pristine code."""
    return 'eval("1+1");\n'


@pytest.fixture
def api_key_js_code():
    """A hardcoded Stripe-style key assigned to a secret-looking name."""
    return 'const apiKey = "sk_live_abcdefghij1234567890";\n'


@pytest.fixture
def broken_js_code():
    """Mismatched brace."""
    return '''
function broken(value) {
  if (value) {
    return value;
'''


@pytest.fixture
def express_handler_code():
    """Route handler with several edge-case and security findings."""
    return '''
const { exec } = require("child_process");

async function handleRequest(req, res) {
  const rows = await db.query("SELECT * FROM users WHERE id = " + req.query.id);
  exec("ls " + req.body.path);
  res.send(rows[0]);
}
'''


@pytest.fixture
def tree_of():
    """Parse JS source into a SyntaxTree."""
    return parse


def make_result(readability=25, complexity=25, edge_cases=25, security=25,
                critical_issues=None, security_comments=None):
    """Build an AnalysisResult directly from category scores."""
    return AnalysisResult(
        readability=CategoryScore(score=readability),
        complexity=CategoryScore(score=complexity),
        edge_cases=CategoryScore(score=edge_cases),
        security=CategoryScore(score=security, comments=security_comments or []),
        total_score=readability + complexity + edge_cases + security,
        critical_issues=critical_issues or [],
    )


@pytest.fixture
def result_factory():
    return make_result
