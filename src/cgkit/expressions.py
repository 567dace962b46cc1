"""
Expression System for generated code

Generated code is represented as an Abstract Syntax Tree (AST),
never as source text.

This ensures:
    - Hygienic substitution (identifiers, not strings)
    - A clean split between construction and execution
    - Serialization capability
    - Composability between generators

ARCHITECTURAL RULE:
    Nodes are structure only.
    Evaluation belongs in cgkit.interpreter.
    Rendering belongs in cgkit.backends.
"""

from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple

from cgkit.identifiers import Identifier


class Expression(ABC):
    """
    Root of the generated-code node hierarchy.

    Generators build trees of these; substitution (once_only) rewrites
    them; the interpreter runs them. Subclasses are frozen dataclasses,
    so a tree can be shared between expansions without copying.

    Keep behavior out of the nodes: running code lives in
    cgkit.interpreter, printing it in cgkit.backends.
    """
    pass


class BinaryOperator(Enum):
    """Binary operators supported in generated code."""

    # Arithmetic
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"

    # Logical operators (short-circuit)
    AND = "and"
    OR = "or"

    # Comparison operators
    EQUALS = "=="
    NOT_EQUALS = "!="
    GREATER_THAN = ">"
    GREATER_EQUAL = ">="
    LESS_THAN = "<"
    LESS_EQUAL = "<="


class UnaryOperator(Enum):
    NOT = "not"
    NEGATE = "-"


@dataclass(frozen=True)
class Literal(Expression):
    """
    A constant value embedded in generated code.

    IMPORTANT:
        Any Python value is allowed here, including callables.
        Only JSON scalars survive serialization.
    """

    value: Any


@dataclass(frozen=True)
class Name(Expression):
    """
    A logical name written by a template author.

    Names are resolved by substitution (see cgkit.once_only).
    A Name left unresolved is NOT an error at construction time;
    it fails when the code is executed.
    """

    name: str


@dataclass(frozen=True)
class Ref(Expression):
    """
    A hygienic reference to a fresh Identifier.

    Because identifiers are unique, a Ref can never capture
    or be captured by a name elsewhere in the program.
    """

    identifier: Identifier


@dataclass(frozen=True)
class BinaryExpression(Expression):
    """
    Example:
        x#4 * x#4

    Becomes:
        BinaryExpression(
            operator=BinaryOperator.MULTIPLY,
            left=Ref(x4),
            right=Ref(x4),
        )
    """

    operator: BinaryOperator
    left: "Expression"
    right: "Expression"


@dataclass(frozen=True)
class UnaryExpression(Expression):
    operator: UnaryOperator
    operand: Expression


@dataclass(frozen=True)
class Call(Expression):
    """
    Applies a function to arguments, evaluated left to right.

    Properties:
        function: Expression producing a callable (usually a Literal)
        args: Argument expressions
    """

    function: Expression
    args: Tuple[Expression, ...] = ()


@dataclass(frozen=True)
class Let(Expression):
    """
    Binds identifiers to values, then evaluates a body.

    Bindings run sequentially, in order, each exactly once.
    Later bindings may refer to earlier ones.

    Properties:
        bindings: ((Identifier, Expression), ...)
        body: Expression evaluated with all bindings in scope
    """

    bindings: Tuple[Tuple[Identifier, Expression], ...]
    body: Expression


@dataclass(frozen=True)
class Block(Expression):
    """Evaluates expressions in order; the value is the last one (None if empty)."""

    expressions: Tuple[Expression, ...] = ()


def call(function: Any, *args: Expression) -> Call:
    """Shorthand for Call(Literal(function), args)."""
    if not isinstance(function, Expression):
        function = Literal(function)
    return Call(function=function, args=tuple(args))
