"""
Error kinds raised by cgkit.

All of these indicate a programming error in the code generator using
the toolkit. They are raised synchronously at the call site and are never
retried or suppressed internally.
"""

from typing import Any


class CodegenError(Exception):
    """Base class for every error raised by cgkit."""


class DuplicateNameError(CodegenError, ValueError):
    """A logical name was repeated within one binding set or collector scope."""

    def __init__(self, name: str, where: str = "scope"):
        self.name = name
        self.where = where
        super().__init__(f"Duplicate name {name!r} in {where}")


class RangeError(CodegenError, IndexError):
    """A traversal bound is negative or lies beyond the target's extent."""


class UnsupportedTargetError(CodegenError, TypeError):
    """A traversal target is neither index-addressable nor link-sequential."""

    def __init__(self, target: Any):
        self.target_type = type(target)
        super().__init__(
            f"Cannot traverse {self.target_type.__name__}: "
            "expected an index-addressable or link-sequential container"
        )


class UnboundNameError(CodegenError, NameError):
    """
    Generated code referenced a name with no binding.

    Raised by the execution stage only. Construction never checks
    references, so an unresolved name surfaces here, when the code runs.
    """

    def __init__(self, name: Any):
        self.unbound = name
        super().__init__(f"Unbound name in generated code: {name}")
