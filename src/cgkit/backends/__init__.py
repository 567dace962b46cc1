"""Backends for rendering generated-code trees."""

from .sexpr import to_sexpr

__all__ = ["to_sexpr"]
