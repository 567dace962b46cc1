"""
Once-only evaluation guard.

Wraps a template body so that each caller-supplied expression is
evaluated exactly once, in the order listed, before the body runs,
no matter how many times the body refers to it.

Construction happens in two phases:

    Phase A (generation time):
        For each logical name, mint a binding identifier (the name used
        by the generated code) and a holder identifier (the generation-time
        slot pairing that binding with the original expression).
        This happens before the body is looked at.

    Phase B (code construction):
        Emit a Let that binds each binding identifier to the single
        evaluation of its expression, and use as its body the template
        with every bound Name rewritten to a Ref of its identifier.

The result is an Expression: code to run later. Nothing is evaluated here.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterable, Mapping, Tuple, Union

from cgkit.errors import DuplicateNameError
from cgkit.expressions import (
    BinaryExpression,
    Block,
    Call,
    Expression,
    Let,
    Name,
    Ref,
    UnaryExpression,
)
from cgkit.identifiers import Identifier, fresh

logger = logging.getLogger(__name__)

BindingsLike = Union[Mapping[str, Expression], Iterable[Tuple[str, Expression]]]
TemplateBody = Union[Expression, Callable[[Dict[str, Ref]], Expression]]


@dataclass(frozen=True)
class OnceBinding:
    """
    One entry of a binding set.

    Properties:
        name: Logical name used by the template author
        expression: The caller's original expression (kept as data)
        binding: Fresh identifier holding the evaluated value
        holder: Fresh identifier naming the generation-time pairing
    """

    name: str
    expression: Expression
    binding: Identifier
    holder: Identifier


def _pairs(bindings: BindingsLike) -> Tuple[Tuple[str, Expression], ...]:
    items = bindings.items() if isinstance(bindings, Mapping) else bindings
    pairs = []
    seen = set()
    for name, expression in items:
        if not isinstance(name, str):
            raise TypeError(f"Binding name must be a string, got {type(name).__name__}")
        if not isinstance(expression, Expression):
            raise TypeError(f"Binding {name!r} must be an Expression, got {type(expression).__name__}")
        if name in seen:
            raise DuplicateNameError(name, where="binding set")
        seen.add(name)
        pairs.append((name, expression))
    return tuple(pairs)


@dataclass(frozen=True)
class BindingSet:
    """
    Ordered, duplicate-free set of once-only bindings.

    Order is the caller's order and is also the evaluation order.
    Owned by the single expansion that builds it.
    """

    entries: Tuple[OnceBinding, ...]

    @classmethod
    def build(cls, bindings: BindingsLike) -> "BindingSet":
        """
        Phase A: validate names and mint identifiers.

        Raises:
            DuplicateNameError: If a name is listed more than once
            TypeError: If a name is not a string or an expression is not an Expression
        """
        entries = tuple(
            OnceBinding(
                name=name,
                expression=expression,
                binding=fresh(name),
                holder=fresh(f"{name}-holder"),
            )
            for name, expression in _pairs(bindings)
        )
        return cls(entries=entries)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(entry.name for entry in self.entries)

    def refs(self) -> Dict[str, Ref]:
        """Logical name -> Ref of its binding identifier."""
        return {entry.name: Ref(entry.binding) for entry in self.entries}

    def holders(self) -> Dict[Identifier, Tuple[Identifier, Expression]]:
        """Generation-time environment: holder -> (binding, original expression)."""
        return {entry.holder: (entry.binding, entry.expression) for entry in self.entries}

    def wrap(self, body: TemplateBody) -> Let:
        """
        Phase B: build the Let around the rewritten body.

        Args:
            body: Expression referencing logical names via Name nodes,
                or a callable receiving the name -> Ref mapping

        Returns:
            Let evaluating each original expression once, then the body
        """
        refs = self.refs()
        if not isinstance(body, Expression) and callable(body):
            body = body(refs)
        if not isinstance(body, Expression):
            raise TypeError(f"Template body must be an Expression, got {type(body).__name__}")

        bindings = tuple(self.holders().values())
        return Let(bindings=bindings, body=substitute(body, refs))


def substitute(expr: Expression, refs: Mapping[str, Expression]) -> Expression:
    """
    Rewrite every Name found in refs; leave other names untouched.

    Identifiers are never rewritten, so substitution cannot capture
    anything introduced by another expansion.
    """
    if isinstance(expr, Name):
        return refs.get(expr.name, expr)
    if isinstance(expr, BinaryExpression):
        return replace(expr, left=substitute(expr.left, refs), right=substitute(expr.right, refs))
    if isinstance(expr, UnaryExpression):
        return replace(expr, operand=substitute(expr.operand, refs))
    if isinstance(expr, Call):
        return Call(
            function=substitute(expr.function, refs),
            args=tuple(substitute(arg, refs) for arg in expr.args),
        )
    if isinstance(expr, Let):
        return Let(
            bindings=tuple((ident, substitute(value, refs)) for ident, value in expr.bindings),
            body=substitute(expr.body, refs),
        )
    if isinstance(expr, Block):
        return Block(expressions=tuple(substitute(e, refs) for e in expr.expressions))
    # Literal, Ref: leaves
    return expr


class OnceOnly:
    """
    Reusable once-only wrapper.

    Names are checked when the wrapper is created. Identifiers are
    minted afresh on every wrap(), so two expansions produced by the
    same wrapper never share binding names.

    Example:
        square = OnceOnly([("x", call(next_value))])
        code = square.wrap(BinaryExpression(BinaryOperator.MULTIPLY, Name("x"), Name("x")))
    """

    def __init__(self, bindings: BindingsLike):
        self.pairs = _pairs(bindings)

    def wrap(self, body: TemplateBody) -> Let:
        binding_set = BindingSet.build(self.pairs)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "once-only expansion binding %s",
                ", ".join(f"{e.name}->{e.binding}" for e in binding_set.entries) or "(nothing)",
            )
        return binding_set.wrap(body)

    __call__ = wrap


def once_only(bindings: BindingsLike, body: TemplateBody) -> Let:
    """
    Wrap body so each bound expression is evaluated exactly once.

    Args:
        bindings: Ordered (name, expression) pairs, or a mapping
        body: Template body (Expression or builder callable)

    Returns:
        New generated code; nothing is executed

    Raises:
        DuplicateNameError: If a name is listed more than once
    """
    return OnceOnly(bindings).wrap(body)
