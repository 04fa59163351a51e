"""
Arithmetic expression evaluator.

Expressions are checked once with SymPy's parser, which decides what is
valid syntax and rejects relations. The numeric function is then compiled
from the written source with the ``ast`` module. Operators keep the nesting
they were written with, so ``R1/R2/R3`` evaluates as ``(R1/R2)/R3``, and each
evaluation against new variable bindings costs a single function call.

Supported syntax: + - * / % ^ (or **), parentheses, numeric literals,
the constants pi and e, and the functions listed in ``FUNCTIONS``.
"""

import ast
import math
from typing import Callable, Dict, FrozenSet, Mapping, Tuple

import sympy as sp
from sympy.parsing.sympy_parser import (
    convert_xor,
    parse_expr,
    standard_transformations,
)

from rcalc.errors import ExpressionEvaluationError, ExpressionSyntaxError

_TRANSFORMATIONS = standard_transformations + (convert_xor,)


def _signum(x):
    return math.copysign(1.0, x)


def _round(x):
    """Round half away from zero."""
    return math.copysign(math.floor(abs(x) + 0.5), x)


# name: (sympy function used for checking, numeric function used for evaluation)
FUNCTIONS: Dict[str, Tuple[Callable, Callable]] = {
    'sqrt': (sp.sqrt, math.sqrt),
    'abs': (sp.Abs, abs),
    'exp': (sp.exp, math.exp),
    'ln': (sp.log, math.log),
    'log': (sp.log, math.log),
    'log10': (sp.Function('log10'), math.log10),
    'sin': (sp.sin, math.sin),
    'cos': (sp.cos, math.cos),
    'tan': (sp.tan, math.tan),
    'asin': (sp.asin, math.asin),
    'acos': (sp.acos, math.acos),
    'atan': (sp.atan, math.atan),
    'atan2': (sp.atan2, math.atan2),
    'sinh': (sp.sinh, math.sinh),
    'cosh': (sp.cosh, math.cosh),
    'tanh': (sp.tanh, math.tanh),
    'asinh': (sp.asinh, math.asinh),
    'acosh': (sp.acosh, math.acosh),
    'atanh': (sp.atanh, math.atanh),
    'floor': (sp.floor, math.floor),
    'ceil': (sp.ceiling, math.ceil),
    'round': (sp.Function('round'), _round),
    'signum': (sp.Function('signum'), _signum),
    'min': (sp.Min, min),
    'max': (sp.Max, max),
}

CONSTANTS = {
    'pi': (sp.pi, math.pi),
    'e': (sp.E, math.e),
}

_CHECK_LOCALS = {name: pair[0] for name, pair in {**FUNCTIONS, **CONSTANTS}.items()}

_MOD = '_mod'
_NAMESPACE = {name: pair[1] for name, pair in {**FUNCTIONS, **CONSTANTS}.items()}
_NAMESPACE[_MOD] = math.fmod
_NAMESPACE['__builtins__'] = {}

_BIN_OPS = (ast.Add, ast.Sub, ast.Mult, ast.Div, ast.Pow)
_UNARY_OPS = (ast.UAdd, ast.USub)


class _Rewriter(ast.NodeTransformer):
    """
    Check a Python expression tree against the supported syntax.

    Integer literals become floats so powers stay in floating point, and
    ``%`` becomes ``fmod`` (the result takes the sign of the dividend).
    Anything else outside the whitelist raises ExpressionSyntaxError.
    """

    def __init__(self, source: str):
        self.source = source
        self.names = set()

    def _reject(self, what: str):
        raise ExpressionSyntaxError(
            f"Expected an arithmetic expression, '{self.source}' uses unsupported {what}"
        )

    def generic_visit(self, node):
        self._reject(type(node).__name__)

    def visit_Expression(self, node):
        node.body = self.visit(node.body)
        return node

    def visit_BinOp(self, node):
        left = self.visit(node.left)
        right = self.visit(node.right)
        if isinstance(node.op, ast.Mod):
            call = ast.Call(func=ast.Name(id=_MOD, ctx=ast.Load()), args=[left, right], keywords=[])
            return ast.copy_location(call, node)
        if not isinstance(node.op, _BIN_OPS):
            self._reject(f'operator {type(node.op).__name__}')
        node.left, node.right = left, right
        return node

    def visit_UnaryOp(self, node):
        if not isinstance(node.op, _UNARY_OPS):
            self._reject(f'operator {type(node.op).__name__}')
        node.operand = self.visit(node.operand)
        return node

    def visit_Call(self, node):
        if not isinstance(node.func, ast.Name) or node.func.id not in FUNCTIONS:
            self._reject('function call')
        if node.keywords or not node.args:
            self._reject(f'arguments to {node.func.id}')
        node.args = [self.visit(arg) for arg in node.args]
        return node

    def visit_Name(self, node):
        if node.id in FUNCTIONS or node.id.startswith('_'):
            self._reject(f"name '{node.id}'")
        if node.id not in CONSTANTS:
            self.names.add(node.id)
        return node

    def visit_Constant(self, node):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            self._reject(f'literal {node.value!r}')
        try:
            node.value = float(node.value)
        except OverflowError:
            self._reject(f'literal {node.value!r}')
        return node


def _compile(source: str) -> Tuple[Tuple[str, ...], Callable]:
    """Compile checked source into ``lambda <names>: <source>`` over the math functions."""
    try:
        tree = ast.parse(source.replace('^', '**'), mode='eval')
    except SyntaxError as exc:
        raise ExpressionSyntaxError(
            f"Expected an arithmetic expression, could not parse '{source}': {exc.msg}"
        ) from exc

    rewriter = _Rewriter(source)
    tree = ast.fix_missing_locations(rewriter.visit(tree))
    names = tuple(sorted(rewriter.names))
    code = f"lambda {', '.join(names)}: {ast.unparse(tree.body)}"
    fn = eval(compile(code, '<expression>', 'eval'), dict(_NAMESPACE))
    return names, fn


class Expression:
    """A parsed expression, ready to be evaluated many times."""

    __slots__ = ('text', '_names', '_fn')

    def __init__(self, text: str):
        self.text = text
        self._names, self._fn = _compile(text)

    @classmethod
    def parse(cls, text: str) -> 'Expression':
        """
        Parse ``text`` into an Expression.

        Raises:
            ExpressionSyntaxError: if the text is empty, malformed, calls an
                unknown function, or is not an arithmetic expression (e.g. a
                comparison).
        """
        source = text.strip()
        if not source:
            raise ExpressionSyntaxError('Expected an arithmetic expression, got empty text')
        try:
            expr = parse_expr(
                source,
                local_dict=dict(_CHECK_LOCALS),
                transformations=_TRANSFORMATIONS,
                evaluate=False,
            )
        except Exception as exc:
            raise ExpressionSyntaxError(
                f"Expected an arithmetic expression, could not parse '{source}': {exc}"
            ) from exc

        if not isinstance(expr, sp.Expr):
            raise ExpressionSyntaxError(
                f"Expected an arithmetic expression, '{source}' is a {type(expr).__name__}"
            )
        return cls(source)

    @property
    def variables(self) -> FrozenSet[str]:
        """Names of the free variables the expression needs bound."""
        return frozenset(self._names)

    def evaluate(self, context: Mapping[str, float]) -> float:
        """
        Evaluate against a variable binding.

        Raises:
            ExpressionEvaluationError: on a missing binding, a math error
                (division by zero, domain, overflow) or a non-real result.
        """
        try:
            args = [context[name] for name in self._names]
        except KeyError as exc:
            raise ExpressionEvaluationError(
                f"Unbound variable {exc.args[0]} in '{self.text}'"
            ) from exc

        try:
            value = float(self._fn(*args))
        except (ArithmeticError, ValueError, TypeError) as exc:
            raise ExpressionEvaluationError(f"Could not evaluate '{self.text}': {exc}") from exc

        if not math.isfinite(value):
            raise ExpressionEvaluationError(f"'{self.text}' evaluated to {value}")
        return value

    def __repr__(self) -> str:
        return f'Expression({self.text!r})'
