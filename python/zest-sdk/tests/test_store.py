"""Tests for zest.store -- multi-test orchestration and listener fan-out."""

from __future__ import annotations

import logging

import pytest

from zest.result import ZestResult
from zest.status import PassStatus, ZestStatus
from zest.store import ZestStore


class _Counter:
    """Counts listener invocations."""

    def __init__(self) -> None:
        self.count = 0
        self.results: list[ZestResult] = []
        self.flags: list[bool] = []

    def on_result(self, result: ZestResult) -> None:
        self.count += 1
        self.results.append(result)

    def on_tagged_result(self, result: ZestResult, is_current: bool) -> None:
        self.count += 1
        self.results.append(result)
        self.flags.append(is_current)


# ---------------------------------------------------------------------------
# Frame advancement through the store
# ---------------------------------------------------------------------------

class TestStoreAdvanceFrame:
    """advance_frame() at store level."""

    def test_only_changed_frames_return_results(self) -> None:
        store = ZestStore()
        test = store.start_test("NewTestA")
        test.expect_event("OnTriggerEnter")
        test.expect_event("OnTriggerExit")

        assert store.advance_frame() is not None
        assert store.advance_frame() is None
        assert store.advance_frame() is None

        test.detect_event("OnTriggerEnter")
        assert store.advance_frame() is not None

        test.detect_event("OnTriggerExit")
        assert store.advance_frame() is not None
        assert store.advance_frame() is None

    def test_returns_current_result_only(self) -> None:
        store = ZestStore()
        store.start_test("TestA")
        test_b = store.start_test("TestB")
        store.advance_frame()

        test_b.expect_event("OnCollision")

        assert store.advance_frame() is None
        assert test_b.get_test_result().status == ZestStatus.running()

    def test_advances_every_test_once(self) -> None:
        store = ZestStore()
        test_a = store.start_test("TestA")
        test_b = store.start_test("TestB")

        store.advance_frame()
        store.advance_frame()

        assert test_a.current_frame == 2
        assert test_b.current_frame == 2


# ---------------------------------------------------------------------------
# Listener fan-out
# ---------------------------------------------------------------------------

class TestStoreListeners:
    """Per-test, all-results and current-only listeners."""

    def test_listeners_update_once_per_frame_as_needed(self) -> None:
        store = ZestStore()
        test_a = store.start_test("TestA")
        test_b = store.start_test("TestB")
        count_a, count_b, current, all_results = _Counter(), _Counter(), _Counter(), _Counter()
        store.add_current_result_listener(current.on_result)
        store.add_result_listener(all_results.on_tagged_result)
        test_a.add_result_listener(count_a.on_result)
        test_a.expect_event("OnTriggerEnter")
        test_a.expect_event("OnTriggerExit")
        test_b.add_result_listener(count_b.on_result)
        test_b.expect_event("OnCollision")

        store.advance_frame()
        assert (count_a.count, count_b.count, current.count, all_results.count) == (1, 1, 1, 2)

        test_b.expect_event("OnCollision")
        store.advance_frame()
        assert (count_a.count, count_b.count, current.count, all_results.count) == (1, 2, 1, 3)
        assert all_results.flags[-1] is False

        test_a.expect_event("OnTriggerEnter")
        store.advance_frame()
        assert (count_a.count, count_b.count, current.count, all_results.count) == (2, 2, 2, 4)
        assert all_results.flags[-1] is True

        store.set_current_test("TestB")
        test_b.expect_event("OnCollision")
        store.advance_frame()
        assert (count_a.count, count_b.count, current.count, all_results.count) == (2, 3, 3, 5)
        assert current.results[-1].test_name == "TestB"

    def test_finish_outside_frame_is_forwarded(self) -> None:
        store = ZestStore()
        test = store.start_test("TestA")
        current = _Counter()
        store.add_current_result_listener(current.on_result)

        test.finish_test()

        assert current.count == 1
        assert current.results[0].status == ZestStatus(done=True, pass_status=PassStatus.PASS)


# ---------------------------------------------------------------------------
# Test registry
# ---------------------------------------------------------------------------

class TestStoreRegistry:
    """start_test / get_test / set_current_test."""

    def test_first_started_test_is_current(self) -> None:
        store = ZestStore()
        test_a = store.start_test("TestA")
        store.start_test("TestB")

        assert store.current_test_name == "TestA"
        assert store.get_current_test() is test_a
        assert store.test_names == ["TestA", "TestB"]

    def test_restart_cancels_previous_instance(self) -> None:
        store = ZestStore()
        old = store.start_test("TestA")
        old_results = _Counter()
        old.add_result_listener(old_results.on_result)
        old.expect_event("A")

        new = store.start_test("TestA")

        assert new is not old
        assert new.test_id != old.test_id
        assert store.get_test("TestA") is new
        assert old_results.results[-1].status == ZestStatus(done=True, pass_status=PassStatus.CANCEL)
        assert new.get_test_result().status == ZestStatus.running()

    def test_restart_of_current_test_needs_set_current(self) -> None:
        """A restarted instance is not current until selected again."""
        store = ZestStore()
        store.start_test("TestA")
        store.start_test("TestB")
        all_results = _Counter()
        current = _Counter()
        store.add_result_listener(all_results.on_tagged_result)
        store.add_current_result_listener(current.on_result)

        new_a = store.start_test("TestA")
        new_a.expect_event("A")
        store.advance_frame()

        assert store.current_test_name == "TestA"
        assert store.get_current_test() is None
        new_flags = [
            flag for result, flag in zip(all_results.results, all_results.flags)
            if result.test_id == new_a.test_id
        ]
        assert new_flags == [False]
        assert all(result.test_id != new_a.test_id for result in current.results)

        assert store.set_current_test("TestA") is new_a
        new_a.detect_event("A")
        store.advance_frame()

        assert all_results.flags[-1] is True
        assert current.results[-1].test_id == new_a.test_id

    def test_restart_of_other_test_keeps_current(self) -> None:
        store = ZestStore()
        test_a = store.start_test("TestA")
        store.start_test("TestB")

        store.start_test("TestB")

        assert store.get_current_test() is test_a

    def test_set_current_unknown_test_logs_error(self, caplog: pytest.LogCaptureFixture) -> None:
        store = ZestStore()
        test_a = store.start_test("TestA")

        with caplog.at_level(logging.ERROR, logger="zest.store"):
            assert store.set_current_test("Missing") is None

        assert "non-existent test: Missing" in caplog.text
        assert store.get_current_test() is test_a

    def test_lookup_of_unknown_test(self) -> None:
        store = ZestStore()

        assert store.get_test("Nope") is None
        assert store.get_test_result("Nope") is None
        assert store.get_current_test() is None
        assert store.advance_frame() is None

    def test_get_test_result_for_each_test(self) -> None:
        store = ZestStore()
        store.start_test("NewTestA")
        store.start_test("NewTestB")
        store.get_test("NewTestB").append_data("keyKKK", "valueKKK")  # type: ignore[union-attr]
        store.advance_frame()

        result_b = store.get_test_result("NewTestB")

        assert result_b is not None
        assert result_b.test_name == "NewTestB"
        assert 'append_data("keyKKK", "valueKKK")' in result_b.text


# ---------------------------------------------------------------------------
# Legacy keyed detections
# ---------------------------------------------------------------------------

class TestDetectEventByKey:

    def test_routes_to_named_test(self) -> None:
        store = ZestStore()
        test = store.start_test("TestA")
        test.expect_event("Collision")

        routed = store.detect_event_by_key("TestA###Collision")

        assert routed is test
        result = test.finish_test()
        assert result.status.pass_status == PassStatus.PASS

    def test_malformed_key_is_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        store = ZestStore()
        test = store.start_test("TestA")
        before = len(test.instructions)

        with caplog.at_level(logging.ERROR):
            assert store.detect_event_by_key("TestA##Collision") is None
            assert store.detect_event_by_key("Unknown###Collision") is None

        assert len(test.instructions) == before
        assert "detect_event_by_key expected first param" in caplog.text
        assert "non-existent test: Unknown" in caplog.text
