"""
Serialization helpers for generated-code trees.

Provides JSON/YAML round-trip via an intermediate dict representation.

Identifiers are written as {"hint", "serial"}. On load, every identifier
bound by a Let inside the loaded tree is re-minted with fresh(),
consistently within one load, so the tree keeps its internal sharing but
its own bindings can never capture an identifier live in this process.
Free Refs (bound outside the tree) keep their serial and still resolve
against the environment they came from.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

import yaml

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
from cgkit.identifiers import Identifier, fresh

_SCALARS = (type(None), bool, int, float, str)


def identifier_to_dict(ident: Identifier) -> Dict[str, Any]:
    return {"hint": ident.hint, "serial": ident.serial}


def identifier_from_dict(d: Dict[str, Any], minted: Dict[int, Identifier]) -> Identifier:
    serial = d["serial"]
    if serial in minted:
        return minted[serial]
    return Identifier(hint=d.get("hint", ""), serial=serial)


def _mint_bound(d: Any, minted: Dict[int, Identifier]) -> None:
    """Re-mint every identifier bound by a Let anywhere under d."""
    if isinstance(d, list):
        for item in d:
            _mint_bound(item, minted)
    elif isinstance(d, dict):
        if d.get("type") == "let":
            for b in d.get("bindings", []):
                ident = b["identifier"]
                if ident["serial"] not in minted:
                    minted[ident["serial"]] = fresh(ident.get("hint", ""))
        for value in d.values():
            _mint_bound(value, minted)


def expr_to_dict(expr: Expression) -> Dict[str, Any]:
    if isinstance(expr, Literal):
        if not isinstance(expr.value, _SCALARS):
            raise TypeError(f"Cannot serialize literal of type {type(expr.value).__name__}")
        return {"type": "lit", "value": expr.value}
    if isinstance(expr, Name):
        return {"type": "name", "name": expr.name}
    if isinstance(expr, Ref):
        return {"type": "ref", "identifier": identifier_to_dict(expr.identifier)}
    if isinstance(expr, BinaryExpression):
        return {
            "type": "binary",
            "operator": expr.operator.value,
            "left": expr_to_dict(expr.left),
            "right": expr_to_dict(expr.right),
        }
    if isinstance(expr, UnaryExpression):
        return {
            "type": "unary",
            "operator": expr.operator.value,
            "operand": expr_to_dict(expr.operand),
        }
    if isinstance(expr, Call):
        return {
            "type": "call",
            "function": expr_to_dict(expr.function),
            "args": [expr_to_dict(a) for a in expr.args],
        }
    if isinstance(expr, Let):
        return {
            "type": "let",
            "bindings": [
                {"identifier": identifier_to_dict(ident), "value": expr_to_dict(value)}
                for ident, value in expr.bindings
            ],
            "body": expr_to_dict(expr.body),
        }
    if isinstance(expr, Block):
        return {"type": "block", "expressions": [expr_to_dict(e) for e in expr.expressions]}
    raise TypeError(f"Unsupported Expression type: {type(expr)}")


def expr_from_dict(d: Dict[str, Any], minted: Optional[Dict[int, Identifier]] = None) -> Expression:
    if minted is None:
        minted = {}
        _mint_bound(d, minted)
    t = d.get("type")
    if t == "lit":
        return Literal(d["value"])
    if t == "name":
        return Name(d["name"])
    if t == "ref":
        return Ref(identifier_from_dict(d["identifier"], minted))
    if t == "binary":
        return BinaryExpression(
            operator=BinaryOperator(d["operator"]),
            left=expr_from_dict(d["left"], minted),
            right=expr_from_dict(d["right"], minted),
        )
    if t == "unary":
        return UnaryExpression(
            operator=UnaryOperator(d["operator"]),
            operand=expr_from_dict(d["operand"], minted),
        )
    if t == "call":
        return Call(
            function=expr_from_dict(d["function"], minted),
            args=tuple(expr_from_dict(a, minted) for a in d.get("args", [])),
        )
    if t == "let":
        bindings = tuple(
            (identifier_from_dict(b["identifier"], minted), expr_from_dict(b["value"], minted))
            for b in d.get("bindings", [])
        )
        return Let(bindings=bindings, body=expr_from_dict(d["body"], minted))
    if t == "block":
        return Block(expressions=tuple(expr_from_dict(e, minted) for e in d.get("expressions", [])))
    raise TypeError(f"Unsupported expression dict type: {t}")


def expr_to_json(expr: Expression) -> str:
    return json.dumps(expr_to_dict(expr), sort_keys=True)


def expr_from_json(s: str) -> Expression:
    return expr_from_dict(json.loads(s))


def expr_to_yaml(expr: Expression) -> str:
    return yaml.safe_dump(expr_to_dict(expr))


def expr_from_yaml(s: str) -> Expression:
    return expr_from_dict(yaml.safe_load(s))
