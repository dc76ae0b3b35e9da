"""Boolean expressions for endpoint/tag filters.

Filters are written in the Liquid condition style used in toc files::

    method == 'GET' and path contains '/users'
    vars.audience != 'internal' && !deprecated

The expression is rewritten into a Python expression and evaluated by
walking its AST against a context mapping. Only literals, names, member
access, comparisons and boolean operators are allowed.

``contains`` becomes Python's ``is`` so it binds like the other
comparison operators, as in Liquid. Unlike Liquid, adjacent comparisons
chain the Python way: ``tags contains 'a' == false`` reads as
``(tags contains 'a') and ('a' == false)``. Group with parentheses to
compare the result of a comparison.
"""

import ast
import re
from collections.abc import Mapping
from typing import Any, Protocol

from openapi_includer.errors import ExpressionError

_STRING_LITERAL = re.compile(r"""('(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")""")

_REWRITES = [
    (re.compile(r"&&"), " and "),
    (re.compile(r"\|\|"), " or "),
    (re.compile(r"!(?!=)"), " not "),
    (re.compile(r"\bcontains\b"), " is "),
    (re.compile(r"\b(?:nil|null)\b"), "None"),
    (re.compile(r"\btrue\b"), "True"),
    (re.compile(r"\bfalse\b"), "False"),
]

_COMPARE = {
    ast.Eq: lambda a, b: a == b,
    ast.NotEq: lambda a, b: a != b,
    ast.Lt: lambda a, b: a < b,
    ast.LtE: lambda a, b: a <= b,
    ast.Gt: lambda a, b: a > b,
    ast.GtE: lambda a, b: a >= b,
    ast.Is: lambda a, b: _contains(a, b),
    ast.In: lambda a, b: _contains(b, a),
    ast.NotIn: lambda a, b: not _contains(b, a),
}


class ExpressionEvaluator(Protocol):
    def evaluate(self, expression: str, context: Mapping[str, Any]) -> bool: ...


class LiquidEvaluator:
    """Default :class:`ExpressionEvaluator`.

    Undefined names evaluate to ``nil``; as in Liquid, only ``nil`` and
    ``false`` are falsy.
    """

    def __init__(self):
        self._cache: dict[str, ast.Expression] = {}

    def evaluate(self, expression: str, context: Mapping[str, Any]) -> bool:
        tree = self._compile(expression)
        return _truthy(_Walker(context, expression).visit(tree.body))

    def _compile(self, expression: str) -> ast.Expression:
        if expression not in self._cache:
            try:
                self._cache[expression] = ast.parse(to_python(expression), mode="eval")
            except SyntaxError as e:
                raise ExpressionError(f"invalid filter expression {expression!r}: {e.msg}") from e
        return self._cache[expression]


def to_python(expression: str) -> str:
    """Rewrite Liquid operators outside string literals into Python ones."""
    parts = _STRING_LITERAL.split(expression)
    for i in range(0, len(parts), 2):
        for pattern, replacement in _REWRITES:
            parts[i] = pattern.sub(replacement, parts[i])
    return "".join(parts).strip()


class _Walker:
    def __init__(self, context: Mapping[str, Any], expression: str):
        self.context = context
        self.expression = expression

    def visit(self, node: ast.AST) -> Any:
        method = getattr(self, f"visit_{type(node).__name__}", None)
        if method is None:
            raise ExpressionError(
                f"unsupported construct {type(node).__name__} in filter expression {self.expression!r}"
            )
        return method(node)

    def visit_Constant(self, node: ast.Constant) -> Any:
        return node.value

    def visit_Name(self, node: ast.Name) -> Any:
        return self.context.get(node.id)

    def visit_Attribute(self, node: ast.Attribute) -> Any:
        return _member(self.visit(node.value), node.attr)

    def visit_Subscript(self, node: ast.Subscript) -> Any:
        return _member(self.visit(node.value), self.visit(node.slice))

    def visit_BoolOp(self, node: ast.BoolOp) -> Any:
        if isinstance(node.op, ast.And):
            return all(_truthy(self.visit(v)) for v in node.values)
        return any(_truthy(self.visit(v)) for v in node.values)

    def visit_UnaryOp(self, node: ast.UnaryOp) -> Any:
        if isinstance(node.op, ast.Not):
            return not _truthy(self.visit(node.operand))
        if isinstance(node.op, ast.USub):
            return -self.visit(node.operand)
        raise ExpressionError(f"unsupported operator in filter expression {self.expression!r}")

    def visit_BinOp(self, node: ast.BinOp) -> Any:
        raise ExpressionError(f"arithmetic is not allowed in filter expression {self.expression!r}")

    def visit_Compare(self, node: ast.Compare) -> bool:
        left = self.visit(node.left)
        for op, comparator in zip(node.ops, node.comparators):
            right = self.visit(comparator)
            compare = _COMPARE.get(type(op))
            if compare is None:
                raise ExpressionError(f"unsupported comparison in filter expression {self.expression!r}")
            try:
                if not compare(left, right):
                    return False
            except TypeError:
                return False
            left = right
        return True

    def visit_List(self, node: ast.List) -> list:
        return [self.visit(e) for e in node.elts]

    visit_Tuple = visit_List


def _truthy(value: Any) -> bool:
    return value is not None and value is not False


def _contains(container: Any, item: Any) -> bool:
    if isinstance(container, str):
        return item is not None and str(item) in container
    if isinstance(container, (list, tuple, set, dict)):
        return item in container
    return False


def _member(value: Any, key: Any) -> Any:
    if isinstance(value, Mapping):
        return value.get(key)
    if isinstance(value, (list, tuple, str)):
        if key == "size":
            return len(value)
        if key == "first":
            return value[0] if value else None
        if key == "last":
            return value[-1] if value else None
        if isinstance(key, int) and -len(value) <= key < len(value):
            return value[key]
    return None
