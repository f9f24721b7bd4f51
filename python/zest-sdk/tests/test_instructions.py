"""Tests for zest.instructions -- instruction records and the log."""

from __future__ import annotations

import json
import logging

import pytest

from zest import instructions as instr
from zest.instructions import Instruction, InstructionKind, InstructionLog
from zest.reconcile import replay_log
from zest.values import Vec3


class TestCallText:
    """Instructions render as the call that recorded them."""

    def test_event_calls(self) -> None:
        assert instr.expect_event("A", frame=0).call_text() == 'expect_event("A")'
        assert instr.detect_event("A", frame=0, warn_only=True).call_text() == 'detect_event_warn("A")'

    def test_append_data_drops_trailing_empty_fields(self) -> None:
        assert instr.append_data("String1", frame=0).call_text() == 'append_data("String1")'
        assert instr.append_data("k", "", frame=0).call_text() == 'append_data("k")'
        assert instr.append_data("a", "b", "c", frame=0).call_text() == 'append_data("a", "b", "c")'

    def test_value_checks(self) -> None:
        assert (
            instr.expect_equal("myKey", "A", "B", frame=0).call_text()
            == 'expect_equal("myKey", "A", "B")'
        )
        assert (
            instr.expect_not_empty("v", Vec3(1, 0, 2.5), frame=0, warn_only=True).call_text()
            == 'expect_not_empty_warn("v", Vec3(1, 0, 2.5))'
        )

    def test_lifecycle_calls(self) -> None:
        assert instr.start_test("T").call_text() == 'start_test("T")'
        assert instr.finish_test(frame=0).call_text() == "finish_test()"
        assert instr.finish_test_with_delay(1, frame=0).call_text() == "finish_test_with_delay(1)"
        assert instr.cancel_test(frame=0).call_text() == "cancel_test()"
        assert instr.invalidate_test("why", frame=0).call_text() == 'invalidate_test("why")'

    def test_terminal_kinds(self) -> None:
        assert instr.finish_test(frame=0).is_terminal
        assert instr.cancel_test(frame=0).is_terminal
        assert not instr.finish_test_with_delay(0.5, frame=0).is_terminal


class TestInstructionSerialization:
    """to_dict / from_dict."""

    def test_vec3_payload_survives_json(self) -> None:
        original = instr.expect_not_empty("v", Vec3(8, 2, 1), frame=4)

        restored = Instruction.from_dict(json.loads(json.dumps(original.to_dict())))

        assert restored.kind == InstructionKind.EXPECT_NOT_EMPTY
        assert restored.frame == 4
        assert restored.params["value"] == Vec3(8.0, 2.0, 1.0)

    def test_unknown_kind_raises(self) -> None:
        with pytest.raises(ValueError):
            Instruction.from_dict({"kind": "explode", "frame": 0})

    def test_missing_frame_raises(self) -> None:
        with pytest.raises(ValueError, match="missing required field"):
            Instruction.from_dict({"kind": "finish_test"})

    def test_missing_param_raises(self) -> None:
        with pytest.raises(ValueError, match="missing params: event_name"):
            Instruction.from_dict({"kind": "expect_event", "frame": 0, "params": {"warn_only": False}})

    def test_stored_log_replays_identically(self) -> None:
        log = InstructionLog([
            instr.start_test("stored"),
            instr.expect_event("A", frame=0),
            instr.expect_event("B", frame=0),
            instr.detect_event("B", frame=1),
            instr.detect_event("A", frame=2),
            instr.finish_test(frame=2),
        ])

        restored = InstructionLog.from_dict(json.loads(json.dumps(log.to_dict())))

        assert replay_log(restored.snapshot()) == replay_log(log.snapshot())


class TestInstructionLog:
    """Append-only, frame-ordered log."""

    def test_rejects_decreasing_frames(self, caplog: pytest.LogCaptureFixture) -> None:
        log = InstructionLog([instr.start_test("t", frame=3)])

        with caplog.at_level(logging.ERROR, logger="zest.instructions"):
            accepted = log.append(instr.expect_event("A", frame=2))

        assert not accepted
        assert len(log) == 1
        assert "already at frame 3" in caplog.text

    def test_snapshot_is_independent(self) -> None:
        log = InstructionLog([instr.start_test("t")])
        snapshot = log.snapshot()

        log.append(instr.finish_test(frame=0))

        assert len(snapshot) == 1
        assert len(log) == 2
        assert log.last_frame == 0
        assert log[-1].kind == InstructionKind.FINISH_TEST
