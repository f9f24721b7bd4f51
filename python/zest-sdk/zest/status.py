"""Result status and transcript line model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Self


# ---------------------------------------------------------------------------
# PassStatus / ZestStatus
# ---------------------------------------------------------------------------

class PassStatus(Enum):
    """Pass status of a test, both while running and once done."""
    RUNNING = "RUNNING"
    PASS = "PASS"
    FAIL = "FAIL"
    WARN = "WARN"
    INVALID = "INVALID"
    CANCEL = "CANCEL"


_RUNNING_STATUSES = frozenset({PassStatus.RUNNING, PassStatus.FAIL, PassStatus.WARN})
_DONE_STATUSES = frozenset({
    PassStatus.PASS,
    PassStatus.FAIL,
    PassStatus.WARN,
    PassStatus.INVALID,
    PassStatus.CANCEL,
})


@dataclass(frozen=True)
class ZestStatus:
    """Status of a test.

    A running test is ``RUNNING``, ``FAIL`` or ``WARN``. A done test is
    ``PASS``, ``FAIL``, ``WARN``, ``INVALID`` or ``CANCEL``. Any other
    combination is rejected.
    """
    done: bool
    pass_status: PassStatus

    def __post_init__(self) -> None:
        allowed = _DONE_STATUSES if self.done else _RUNNING_STATUSES
        if self.pass_status not in allowed:
            state = "done" if self.done else "running"
            msg = f"{self.pass_status.value} is not a valid {state} status"
            raise ValueError(msg)

    @classmethod
    def running(cls) -> Self:
        return cls(done=False, pass_status=PassStatus.RUNNING)

    def escalate(self, *, warn_only: bool) -> ZestStatus:
        """Fold a failed check into the status.

        WARN never overrides FAIL, and a done status never changes.
        """
        if self.done:
            return self
        if warn_only:
            if self.pass_status == PassStatus.FAIL:
                return self
            return ZestStatus(done=False, pass_status=PassStatus.WARN)
        return ZestStatus(done=False, pass_status=PassStatus.FAIL)

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dict for JSON storage."""
        return {"done": self.done, "pass_status": self.pass_status.value}

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> Self:
        """Deserialize from a plain dict.

        Raises:
            ValueError: If a field is missing or the combination is invalid.
        """
        try:
            return cls(
                done=bool(data["done"]),
                pass_status=PassStatus(str(data["pass_status"])),
            )
        except KeyError as exc:
            raise ValueError(f"status missing required field: {exc}") from exc

    def __str__(self) -> str:
        return self.pass_status.value


# ---------------------------------------------------------------------------
# LineColor / Line
# ---------------------------------------------------------------------------

class LineColor(Enum):
    """Colors a transcript line can carry. Tags are chosen by a Markup."""
    DEFAULT = "default"
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    GREY = "grey"


@dataclass(frozen=True)
class Line:
    """One rendered transcript line."""
    text: str
    color: LineColor = LineColor.DEFAULT

    def to_dict(self) -> dict[str, object]:
        return {"text": self.text, "color": self.color.value}

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> Self:
        return cls(
            text=str(data.get("text", "")),
            color=LineColor(str(data.get("color", LineColor.DEFAULT.value))),
        )


def color_for_status(status: ZestStatus) -> LineColor:
    """Color of the ``TEST STATUS`` header for a status."""
    if status.pass_status == PassStatus.PASS:
        return LineColor.GREEN
    if status.pass_status == PassStatus.FAIL:
        return LineColor.RED
    if status.pass_status == PassStatus.WARN:
        return LineColor.YELLOW
    return LineColor.GREY
