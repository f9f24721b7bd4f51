"""Instruction records and the append-only instruction log.

Every call made on a test is recorded as an :class:`Instruction` stamped
with the frame that was current at record time. The ordered log of a
test is its complete history and the only input to result derivation.

All types are JSON-serializable so a log can be stored and replayed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Self, overload

from zest.values import Vec3, format_number, format_value

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# InstructionKind
# ---------------------------------------------------------------------------

class InstructionKind(Enum):
    """Operations that can be recorded on a test."""
    START_TEST = "start_test"
    EXPECT_EVENT = "expect_event"
    DETECT_EVENT = "detect_event"
    APPEND_DATA = "append_data"
    EXPECT_EQUAL = "expect_equal"
    EXPECT_NOT_EQUAL = "expect_not_equal"
    EXPECT_NOT_EMPTY = "expect_not_empty"
    FINISH_TEST = "finish_test"
    FINISH_TEST_WITH_DELAY = "finish_test_with_delay"
    FINISH_TEST_WITH_DELAY_FIRED = "finish_test_with_delay_fired"
    CANCEL_TEST = "cancel_test"
    INVALIDATE_TEST = "invalidate_test"


_REQUIRED_PARAMS: dict[InstructionKind, tuple[str, ...]] = {
    InstructionKind.START_TEST: ("test_name",),
    InstructionKind.EXPECT_EVENT: ("event_name", "warn_only"),
    InstructionKind.DETECT_EVENT: ("event_name", "warn_only"),
    InstructionKind.APPEND_DATA: ("str1",),
    InstructionKind.EXPECT_EQUAL: ("key", "actual", "expected", "warn_only"),
    InstructionKind.EXPECT_NOT_EQUAL: ("key", "actual", "expected", "warn_only"),
    InstructionKind.EXPECT_NOT_EMPTY: ("key", "value", "warn_only"),
    InstructionKind.FINISH_TEST: (),
    InstructionKind.FINISH_TEST_WITH_DELAY: ("seconds",),
    InstructionKind.FINISH_TEST_WITH_DELAY_FIRED: ("seconds",),
    InstructionKind.CANCEL_TEST: (),
    InstructionKind.INVALIDATE_TEST: ("message",),
}

# Kinds that close a test and trigger finish-time reconciliation.
TERMINAL_KINDS = frozenset({
    InstructionKind.FINISH_TEST,
    InstructionKind.FINISH_TEST_WITH_DELAY_FIRED,
    InstructionKind.CANCEL_TEST,
    InstructionKind.INVALIDATE_TEST,
})


def _encode_param(value: object) -> object:
    if isinstance(value, Vec3):
        return {"vec3": value.to_list()}
    return value


def _decode_param(value: object) -> object:
    if isinstance(value, dict) and "vec3" in value:
        return Vec3.from_list(value["vec3"])
    return value


# ---------------------------------------------------------------------------
# Instruction
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Instruction:
    """A single recorded operation.

    Attributes:
        kind: Which operation was invoked.
        frame: Frame number current when the operation was recorded.
        params: Kind-specific payload (see ``_REQUIRED_PARAMS``).
    """
    kind: InstructionKind
    frame: int
    params: dict[str, object] = field(default_factory=dict)

    # -- Payload accessors --------------------------------------------------

    @property
    def event_name(self) -> str:
        return str(self.params.get("event_name", ""))

    @property
    def warn_only(self) -> bool:
        return bool(self.params.get("warn_only", False))

    @property
    def is_terminal(self) -> bool:
        """True for instructions that close the test."""
        return self.kind in TERMINAL_KINDS

    def call_text(self) -> str:
        """Render the instruction as the call that recorded it."""
        p = self.params
        suffix = "_warn" if self.warn_only else ""
        kind = self.kind

        if kind == InstructionKind.START_TEST:
            return f'start_test("{p["test_name"]}")'
        if kind in (InstructionKind.EXPECT_EVENT, InstructionKind.DETECT_EVENT):
            return f'{kind.value}{suffix}("{self.event_name}")'
        if kind == InstructionKind.APPEND_DATA:
            fields = [p.get("str1"), p.get("str2"), p.get("str3")]
            # Trailing empty fields are dropped.
            while len(fields) > 1 and not fields[-1]:
                fields.pop()
            return "append_data(" + ", ".join(f'"{f or ""}"' for f in fields) + ")"
        if kind in (InstructionKind.EXPECT_EQUAL, InstructionKind.EXPECT_NOT_EQUAL):
            return (
                f'{kind.value}{suffix}("{p["key"]}", '
                f'{format_value(p["actual"])}, {format_value(p["expected"])})'
            )
        if kind == InstructionKind.EXPECT_NOT_EMPTY:
            return f'{kind.value}{suffix}("{p["key"]}", {format_value(p["value"])})'
        if kind == InstructionKind.FINISH_TEST_WITH_DELAY:
            return f"finish_test_with_delay({format_number(p['seconds'])})"  # type: ignore[arg-type]
        if kind == InstructionKind.FINISH_TEST_WITH_DELAY_FIRED:
            return (
                f"finish_test_with_delay({format_number(p['seconds'])})"  # type: ignore[arg-type]
                " --> Delay Done"
            )
        if kind == InstructionKind.INVALIDATE_TEST:
            return f'invalidate_test("{p["message"]}")'
        return f"{kind.value}()"

    # -- Serialization ------------------------------------------------------

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dict for JSON storage."""
        return {
            "kind": self.kind.value,
            "frame": self.frame,
            "params": {k: _encode_param(v) for k, v in self.params.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> Self:
        """Deserialize from a plain dict (inverse of to_dict).

        Raises:
            ValueError: On an unknown kind, a bad frame or a missing payload field.
        """
        try:
            kind = InstructionKind(str(data["kind"]))
            frame = int(data["frame"])  # type: ignore[call-overload]
        except KeyError as exc:
            raise ValueError(f"instruction missing required field: {exc}") from exc
        except TypeError as exc:
            raise ValueError(f"instruction frame must be an integer: {data.get('frame')!r}") from exc

        raw_params = data.get("params", {})
        if not isinstance(raw_params, dict):
            raise ValueError(f"instruction params must be a dict, got {type(raw_params).__name__}")
        params = {str(k): _decode_param(v) for k, v in raw_params.items()}

        missing = [name for name in _REQUIRED_PARAMS[kind] if name not in params]
        if missing:
            raise ValueError(f"{kind.value} instruction missing params: {', '.join(missing)}")
        return cls(kind=kind, frame=frame, params=params)


# -- Instruction constructor functions ---------------------------------------

def start_test(test_name: str, *, frame: int = 0) -> Instruction:
    """Record the start of a test."""
    return Instruction(InstructionKind.START_TEST, frame, {"test_name": test_name})


def expect_event(event_name: str, *, frame: int, warn_only: bool = False) -> Instruction:
    """Declare that an event is expected to be detected."""
    return Instruction(
        InstructionKind.EXPECT_EVENT,
        frame,
        {"event_name": event_name, "warn_only": warn_only},
    )


def detect_event(event_name: str, *, frame: int, warn_only: bool = False) -> Instruction:
    """Report that an event occurred."""
    return Instruction(
        InstructionKind.DETECT_EVENT,
        frame,
        {"event_name": event_name, "warn_only": warn_only},
    )


def append_data(
    str1: str,
    str2: str | None = None,
    str3: str | None = None,
    *,
    frame: int,
) -> Instruction:
    """Attach up to three free-form strings to the transcript."""
    return Instruction(
        InstructionKind.APPEND_DATA,
        frame,
        {"str1": str1, "str2": str2, "str3": str3},
    )


def expect_equal(
    key: str,
    actual: str,
    expected: str,
    *,
    frame: int,
    warn_only: bool = False,
) -> Instruction:
    """Check that ``actual`` is exactly ``expected``."""
    return Instruction(
        InstructionKind.EXPECT_EQUAL,
        frame,
        {"key": key, "actual": actual, "expected": expected, "warn_only": warn_only},
    )


def expect_not_equal(
    key: str,
    actual: str,
    expected: str,
    *,
    frame: int,
    warn_only: bool = False,
) -> Instruction:
    """Check that ``actual`` differs from ``expected``."""
    return Instruction(
        InstructionKind.EXPECT_NOT_EQUAL,
        frame,
        {"key": key, "actual": actual, "expected": expected, "warn_only": warn_only},
    )


def expect_not_empty(
    key: str,
    value: object,
    *,
    frame: int,
    warn_only: bool = False,
) -> Instruction:
    """Check that a string, number or vector is not empty/zero."""
    return Instruction(
        InstructionKind.EXPECT_NOT_EMPTY,
        frame,
        {"key": key, "value": value, "warn_only": warn_only},
    )


def finish_test(*, frame: int) -> Instruction:
    return Instruction(InstructionKind.FINISH_TEST, frame)


def finish_test_with_delay(seconds: float, *, frame: int) -> Instruction:
    return Instruction(InstructionKind.FINISH_TEST_WITH_DELAY, frame, {"seconds": seconds})


def finish_test_with_delay_fired(seconds: float, *, frame: int) -> Instruction:
    return Instruction(InstructionKind.FINISH_TEST_WITH_DELAY_FIRED, frame, {"seconds": seconds})


def cancel_test(*, frame: int) -> Instruction:
    return Instruction(InstructionKind.CANCEL_TEST, frame)


def invalidate_test(message: str, *, frame: int) -> Instruction:
    return Instruction(InstructionKind.INVALIDATE_TEST, frame, {"message": message})


# ---------------------------------------------------------------------------
# InstructionLog
# ---------------------------------------------------------------------------

class InstructionLog:
    """Append-only, frame-ordered sequence of instructions.

    Past entries are never mutated or removed. Frames must be
    non-decreasing; an out-of-order append is logged and rejected.
    """

    def __init__(self, instructions: Iterable[Instruction] = ()) -> None:
        self._instructions: list[Instruction] = []
        for instruction in instructions:
            self.append(instruction)

    def append(self, instruction: Instruction) -> bool:
        """Append an instruction. Returns False if it was rejected."""
        if self._instructions and instruction.frame < self._instructions[-1].frame:
            logger.error(
                "Rejected %s at frame %d: log is already at frame %d",
                instruction.kind.value,
                instruction.frame,
                self._instructions[-1].frame,
            )
            return False
        self._instructions.append(instruction)
        return True

    @property
    def last_frame(self) -> int | None:
        """Frame of the most recent instruction, or None for an empty log."""
        return self._instructions[-1].frame if self._instructions else None

    def snapshot(self) -> tuple[Instruction, ...]:
        """Immutable view of the log as it is now."""
        return tuple(self._instructions)

    def __len__(self) -> int:
        return len(self._instructions)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self._instructions)

    @overload
    def __getitem__(self, index: int) -> Instruction: ...

    @overload
    def __getitem__(self, index: slice) -> list[Instruction]: ...

    def __getitem__(self, index: int | slice) -> Instruction | list[Instruction]:
        return self._instructions[index]

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dict for JSON storage."""
        return {"instructions": [i.to_dict() for i in self._instructions]}

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> Self:
        """Deserialize from a plain dict (inverse of to_dict)."""
        raw = data.get("instructions", [])
        if not isinstance(raw, list):
            raise ValueError("instruction log 'instructions' must be a list")
        return cls(Instruction.from_dict(item) for item in raw)
