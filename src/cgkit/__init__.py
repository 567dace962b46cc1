"""
cgkit: hygienic code-construction toolkit

Small, composable primitives for code generators:

    - fresh identifiers that never collide (identifiers)
    - once-only evaluation of caller expressions (once_only)
    - incremental collectors for generated code at run time (collector)
    - bounded traversal over indexable and linked containers (traversal)

ARCHITECTURAL GUARANTEE:
------------------------
Construction and execution are separate stages.
    - Construction builds Expression trees (code to run later).
    - Execution (cgkit.interpreter) runs them.
Nothing in the construction layer evaluates caller expressions.
"""

from cgkit.errors import (
    CodegenError,
    DuplicateNameError,
    RangeError,
    UnboundNameError,
    UnsupportedTargetError,
)
from cgkit.identifiers import Identifier, fresh, fresh_many
from cgkit.once_only import BindingSet, OnceBinding, OnceOnly, once_only
from cgkit.interpreter import evaluate
from cgkit.collector import (
    Collector,
    CollectorScope,
    collecting,
    new_collector,
    new_collector_scope,
)
from cgkit.traversal import Cons, iter_range, traverse

__version__ = "0.1.0"

__all__ = [
    "BindingSet",
    "CodegenError",
    "Collector",
    "CollectorScope",
    "Cons",
    "DuplicateNameError",
    "Identifier",
    "OnceBinding",
    "OnceOnly",
    "RangeError",
    "UnboundNameError",
    "UnsupportedTargetError",
    "collecting",
    "evaluate",
    "fresh",
    "fresh_many",
    "iter_range",
    "new_collector",
    "new_collector_scope",
    "once_only",
    "traverse",
]
