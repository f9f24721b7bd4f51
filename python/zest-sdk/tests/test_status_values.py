"""Tests for zest.status and zest.values."""

from __future__ import annotations

import logging

import pytest

from zest.status import PassStatus, ZestStatus
from zest.values import Vec3, format_value, is_not_empty


class TestZestStatus:

    def test_invalid_combinations_raise(self) -> None:
        with pytest.raises(ValueError):
            ZestStatus(done=True, pass_status=PassStatus.RUNNING)
        with pytest.raises(ValueError):
            ZestStatus(done=False, pass_status=PassStatus.CANCEL)
        with pytest.raises(ValueError):
            ZestStatus(done=False, pass_status=PassStatus.PASS)

    def test_escalate_precedence(self) -> None:
        running = ZestStatus.running()

        warned = running.escalate(warn_only=True)
        failed = warned.escalate(warn_only=False)

        assert warned.pass_status == PassStatus.WARN
        assert failed.pass_status == PassStatus.FAIL
        assert failed.escalate(warn_only=True).pass_status == PassStatus.FAIL

    def test_done_status_never_escalates(self) -> None:
        done = ZestStatus(done=True, pass_status=PassStatus.PASS)

        assert done.escalate(warn_only=False) is done

    def test_dict_round_trip(self) -> None:
        status = ZestStatus(done=True, pass_status=PassStatus.INVALID)

        assert ZestStatus.from_dict(status.to_dict()) == status

    def test_from_dict_missing_field(self) -> None:
        with pytest.raises(ValueError, match="missing required field"):
            ZestStatus.from_dict({"done": True})


class TestValues:

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (7, True),
            (-0.5, True),
            (0, False),
            (0.0, False),
            ("", False),
            ("0", False),
            ("00", True),
            ("notZeroStr", True),
            (Vec3(8, 2, 1), True),
            (Vec3(0, 0, 0), False),
            (Vec3.zero(), False),
        ],
    )
    def test_is_not_empty(self, value: object, expected: bool) -> None:
        assert is_not_empty(value) is expected

    def test_unsupported_type_is_empty(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="zest.values"):
            assert is_not_empty([1, 2, 3]) is False

        assert "unsupported value type list" in caplog.text

    def test_format_value(self) -> None:
        assert format_value("x") == '"x"'
        assert format_value(3.0) == "3"
        assert format_value(0.8) == "0.8"
        assert str(Vec3(1.5, 0, -2)) == "Vec3(1.5, 0, -2)"

    def test_vec3_from_list_rejects_bad_input(self) -> None:
        with pytest.raises(ValueError):
            Vec3.from_list([1, 2])
        with pytest.raises(ValueError):
            Vec3.from_list(["a", 2, 3])
