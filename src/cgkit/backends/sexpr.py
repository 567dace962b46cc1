"""
S-expression renderer for generated-code trees.

For diagnostics only: the output is meant for people reading logs
and test failures, not for parsing back.

    (let* ((x#3 (+ 1 2))) (* x#3 x#3))
"""

from cgkit.expressions import (
    BinaryExpression,
    Block,
    Call,
    Expression,
    Let,
    Literal,
    Name,
    Ref,
    UnaryExpression,
)


def _literal(value: object) -> str:
    if isinstance(value, str):
        return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "t" if value else "nil"
    if callable(value):
        return f"#'{getattr(value, '__name__', repr(value))}"
    return repr(value)


def to_sexpr(expr: Expression) -> str:
    """Render expr as a one-line s-expression."""
    if isinstance(expr, Literal):
        return _literal(expr.value)
    if isinstance(expr, Name):
        return expr.name
    if isinstance(expr, Ref):
        return str(expr.identifier)
    if isinstance(expr, BinaryExpression):
        return f"({expr.operator.value} {to_sexpr(expr.left)} {to_sexpr(expr.right)})"
    if isinstance(expr, UnaryExpression):
        return f"({expr.operator.value} {to_sexpr(expr.operand)})"
    if isinstance(expr, Call):
        parts = [to_sexpr(expr.function)] + [to_sexpr(a) for a in expr.args]
        return f"(funcall {' '.join(parts)})"
    if isinstance(expr, Let):
        bindings = " ".join(f"({ident} {to_sexpr(value)})" for ident, value in expr.bindings)
        return f"(let* ({bindings}) {to_sexpr(expr.body)})"
    if isinstance(expr, Block):
        return "(progn" + "".join(" " + to_sexpr(e) for e in expr.expressions) + ")"
    return "?"


__all__ = ["to_sexpr"]
