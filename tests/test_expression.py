import pytest

from openapi_includer.errors import ExpressionError
from openapi_includer.filters.expression import LiquidEvaluator, to_python

CONTEXT = {
    "method": "GET",
    "path": "/pets/{petId}",
    "tags": ["pets", "public"],
    "deprecated": False,
    "summary": None,
    "vars": {"audience": "external", "level": 3},
}


@pytest.fixture
def evaluator():
    return LiquidEvaluator()


class TestToPython:
    def test_rewrites_operators_outside_strings(self):
        assert to_python("a && !b || c") == "a  and   not b  or  c"

    def test_leaves_string_literals_alone(self):
        assert to_python("name == 'a && b'") == "name == 'a && b'"

    def test_not_equal_is_kept(self):
        assert to_python("a != 'x'") == "a != 'x'"


class TestLiquidEvaluator:
    @pytest.mark.parametrize("expression, expected", [
        ("method == 'GET'", True),
        ("method == 'GET' && path == '/a'", False),
        ("method == 'GET' and path contains 'pets'", True),
        ("tags contains 'public'", True),
        ("tags contains 'private'", False),
        ("vars.audience == 'external'", True),
        ("vars['audience'] != 'external'", False),
        ("vars.level >= 3", True),
        ("!deprecated", True),
        ("deprecated || method == 'POST'", False),
        ("summary == nil", True),
        ("unknown", False),
        ("tags.size == 2", True),
        ("tags.first == 'pets'", True),
        ("(method == 'POST' or method == 'GET') and vars.audience", True),
    ])
    def test_evaluate(self, evaluator, expression, expected):
        assert evaluator.evaluate(expression, CONTEXT) is expected

    def test_mismatched_types_compare_false(self, evaluator):
        assert evaluator.evaluate("summary > 3", CONTEXT) is False

    def test_syntax_error(self, evaluator):
        with pytest.raises(ExpressionError, match="invalid filter expression"):
            evaluator.evaluate("method ==", CONTEXT)

    def test_calls_are_rejected(self, evaluator):
        with pytest.raises(ExpressionError, match="unsupported construct"):
            evaluator.evaluate("__import__('os')", CONTEXT)

    def test_arithmetic_is_rejected(self, evaluator):
        with pytest.raises(ExpressionError, match="arithmetic"):
            evaluator.evaluate("vars.level + 1 == 4", CONTEXT)


class TestContainsPrecedence:
    def test_contains_is_a_comparison(self, evaluator):
        assert to_python("tags contains 'a'") == "tags  is  'a'"
        assert evaluator.evaluate("tags contains 'pets' == 'pets'", CONTEXT) is True

    def test_parenthesized_comparison_of_contains(self, evaluator):
        assert evaluator.evaluate("(tags contains 'private') == false", CONTEXT) is True
        assert evaluator.evaluate("!(tags contains 'pets')", CONTEXT) is False
