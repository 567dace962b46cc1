"""
Execution stage for generated code.

Construction (cgkit.once_only and friends) only builds Expression trees.
This module runs them.

Environment keys:
    - str for free logical names (Name nodes left by the template)
    - Identifier for hygienic bindings (Ref nodes, Let bindings)
"""

import operator
from collections import ChainMap
from typing import Any, Mapping, Optional, Union

from cgkit.errors import UnboundNameError
from cgkit.expressions import (
    BinaryExpression,
    BinaryOperator,
    Block,
    Call,
    Expression,
    Let,
    Literal,
    Name,
    Ref,
    UnaryExpression,
    UnaryOperator,
)
from cgkit.identifiers import Identifier

Environment = Mapping[Union[str, Identifier], Any]

_BINARY = {
    BinaryOperator.ADD: operator.add,
    BinaryOperator.SUBTRACT: operator.sub,
    BinaryOperator.MULTIPLY: operator.mul,
    BinaryOperator.DIVIDE: operator.truediv,
    BinaryOperator.EQUALS: operator.eq,
    BinaryOperator.NOT_EQUALS: operator.ne,
    BinaryOperator.GREATER_THAN: operator.gt,
    BinaryOperator.GREATER_EQUAL: operator.ge,
    BinaryOperator.LESS_THAN: operator.lt,
    BinaryOperator.LESS_EQUAL: operator.le,
}

_UNARY = {
    UnaryOperator.NOT: operator.not_,
    UnaryOperator.NEGATE: operator.neg,
}


def _lookup(env: Environment, key: Union[str, Identifier]) -> Any:
    try:
        return env[key]
    except KeyError:
        raise UnboundNameError(key) from None


def evaluate(expr: Expression, env: Optional[Environment] = None) -> Any:
    """
    Run generated code.

    Args:
        expr: Expression tree to execute
        env: Values for free names and identifiers (optional)

    Returns:
        The value of expr

    Raises:
        UnboundNameError: If a Name or Ref has no value in scope
        TypeError: If expr is not a known Expression node
    """
    return _eval(expr, ChainMap(dict(env or {})))


def _eval(expr: Expression, env: ChainMap) -> Any:
    if isinstance(expr, Literal):
        return expr.value

    if isinstance(expr, Ref):
        return _lookup(env, expr.identifier)

    if isinstance(expr, Name):
        return _lookup(env, expr.name)

    if isinstance(expr, BinaryExpression):
        left = _eval(expr.left, env)
        if expr.operator == BinaryOperator.AND:
            return _eval(expr.right, env) if left else left
        if expr.operator == BinaryOperator.OR:
            return left if left else _eval(expr.right, env)
        return _BINARY[expr.operator](left, _eval(expr.right, env))

    if isinstance(expr, UnaryExpression):
        return _UNARY[expr.operator](_eval(expr.operand, env))

    if isinstance(expr, Call):
        function = _eval(expr.function, env)
        args = [_eval(arg, env) for arg in expr.args]
        return function(*args)

    if isinstance(expr, Let):
        scope = env.new_child()
        for ident, value in expr.bindings:
            scope[ident] = _eval(value, scope)
        return _eval(expr.body, scope)

    if isinstance(expr, Block):
        result = None
        for e in expr.expressions:
            result = _eval(e, env)
        return result

    raise TypeError(f"Unsupported Expression type: {type(expr)}")
