"""Result snapshots produced by replaying a test."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Self

from zest.markup import HORIZON_MARKUP, Markup, render_lines
from zest.status import Line, ZestStatus


@dataclass(frozen=True)
class ZestResult:
    """Immutable snapshot of a test after one replay.

    Attributes:
        test_name: Name the test was started with.
        test_id: Identity of the test instance; restarting a test by name
            produces a new id.
        status: Derived status.
        lines: Colored transcript lines.
        text: Transcript rendered with the test's markup.
    """
    test_name: str
    test_id: str
    status: ZestStatus
    lines: tuple[Line, ...]
    text: str

    @classmethod
    def from_lines(
        cls,
        test_name: str,
        test_id: str,
        status: ZestStatus,
        lines: tuple[Line, ...],
        markup: Markup = HORIZON_MARKUP,
    ) -> Self:
        """Build a result, rendering ``text`` with ``markup``."""
        return cls(
            test_name=test_name,
            test_id=test_id,
            status=status,
            lines=lines,
            text=render_lines(lines, markup),
        )

    @property
    def done(self) -> bool:
        return self.status.done

    def render(self, markup: Markup) -> str:
        """Render the transcript with another markup style."""
        return render_lines(self.lines, markup)

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dict for JSON storage."""
        return {
            "test_name": self.test_name,
            "test_id": self.test_id,
            "status": self.status.to_dict(),
            "lines": [line.to_dict() for line in self.lines],
            "text": self.text,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> Self:
        """Deserialize from a plain dict (inverse of to_dict).

        Raises:
            ValueError: If the status is missing or malformed.
        """
        raw_status = data.get("status")
        if not isinstance(raw_status, dict):
            raise ValueError("result JSON missing required field: 'status'")
        raw_lines = data.get("lines", [])
        lines: tuple[Line, ...] = ()
        if isinstance(raw_lines, list):
            lines = tuple(Line.from_dict(item) for item in raw_lines)  # type: ignore[arg-type]
        return cls(
            test_name=str(data.get("test_name", "")),
            test_id=str(data.get("test_id", "")),
            status=ZestStatus.from_dict(raw_status),
            lines=lines,
            text=str(data.get("text", "")),
        )

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> Self:
        """Deserialize from a JSON string.

        Raises:
            ValueError: If the JSON is invalid or missing required fields.
        """
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid result JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError("result JSON must be an object")
        return cls.from_dict(data)
