"""
Fresh identifier generation.

Every Identifier returned by fresh() is distinct from every other
Identifier minted in this process. Identity is the serial number;
the hint is for humans only.

The serial counter is process-wide state:
    - created once, at import
    - advanced by a single locked increment
    - never reset, never exposed
"""

import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Tuple

logger = logging.getLogger(__name__)

DEFAULT_HINT = "g"

_serials = itertools.count(1)
_serial_lock = threading.Lock()


def _next_serial() -> int:
    with _serial_lock:
        return next(_serials)


@dataclass(frozen=True)
class Identifier:
    """
    An opaque, globally unique name for generated code.

    Properties:
        hint: Human-readable base name (diagnostics only)
        serial: Uniqueness counter value (the identity)

    IMPORTANT:
        Two identifiers with the same hint are never equal.
        Do not construct these directly; use fresh().
    """

    hint: str = field(compare=False)
    serial: int

    def __str__(self) -> str:
        return f"{self.hint or DEFAULT_HINT}#{self.serial}"


def fresh(hint: str = DEFAULT_HINT) -> Identifier:
    """
    Mint a new identifier.

    Args:
        hint: Display name; may be empty or repeated

    Returns:
        An Identifier never returned before in this process
    """
    return Identifier(hint=hint, serial=_next_serial())


def fresh_many(*hints: str) -> Tuple[Identifier, ...]:
    """Mint one fresh identifier per hint, in order."""
    minted = tuple(fresh(hint) for hint in hints)
    if minted and logger.isEnabledFor(logging.DEBUG):
        logger.debug("Minted identifiers %s", ", ".join(str(i) for i in minted))
    return minted
