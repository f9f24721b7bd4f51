"""Value types consumed by the non-emptiness checks.

Client code reports strings, numbers and 3-component vectors. Only the
vector needs a dedicated type here; it stands in for the host platform's
vector and exposes the two things the engine relies on: component
equality and a zero sentinel.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Self

logger = logging.getLogger(__name__)


def format_number(value: int | float) -> str:
    """Format a number without a trailing ``.0`` for whole floats."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ---------------------------------------------------------------------------
# Vec3
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Vec3:
    """Immutable 3-component vector."""

    x: float
    y: float
    z: float

    @classmethod
    def zero(cls) -> Self:
        """The ``Vec3(0, 0, 0)`` sentinel."""
        return cls(0.0, 0.0, 0.0)

    def is_zero(self) -> bool:
        return (self.x, self.y, self.z) == (0, 0, 0)

    def __str__(self) -> str:
        return (
            f"Vec3({format_number(self.x)}, {format_number(self.y)}, "
            f"{format_number(self.z)})"
        )

    def to_list(self) -> list[float]:
        """Serialize to ``[x, y, z]``."""
        return [self.x, self.y, self.z]

    @classmethod
    def from_list(cls, raw: object) -> Self:
        """Parse ``[x, y, z]``.

        Raises:
            ValueError: If ``raw`` is not a 3-element list of numbers.
        """
        if not isinstance(raw, (list, tuple)) or len(raw) != 3:
            raise ValueError(f"Vec3 expects 3 components, got {raw!r}")
        try:
            return cls(float(raw[0]), float(raw[1]), float(raw[2]))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Vec3 components must be numbers: {raw!r}") from exc


# ---------------------------------------------------------------------------
# Non-emptiness
# ---------------------------------------------------------------------------

NotEmptyValue = str | int | float | Vec3


def is_not_empty(value: object) -> bool:
    """Evaluate the "not empty" rule for a reported value.

    - numbers pass when they are not ``0``
    - strings pass unless they are ``""`` or ``"0"``
    - vectors pass unless they equal the zero vector

    Any other type is reported as a diagnostic and treated as empty.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value not in ("", "0")
    if isinstance(value, Vec3):
        return not value.is_zero()
    logger.warning(
        "expect_not_empty received unsupported value type %s; treating it as empty",
        type(value).__name__,
    )
    return False


def format_value(value: object) -> str:
    """Render a reported value the way it appears in transcripts."""
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return format_number(value)
    return str(value)
