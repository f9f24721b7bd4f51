"""Catalog of example Zest scenarios.

Each scenario drives a :class:`~zest.lifecycle.ZestTest` the way client
code under test would, and states the pass status it should end with
once every pending delayed finish has fired. The demo script runs the
whole catalog; the test suite uses it as a regression set.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from zest.lifecycle import ZestTest
from zest.scheduling import Scheduler
from zest.status import PassStatus
from zest.values import Vec3


@dataclass(frozen=True)
class ExampleScenario:
    """A runnable example.

    Attributes:
        description: What the scenario exercises.
        expected_status: Pass status after all delayed finishes fired.
        run: Drives the test; receives the scheduler for delayed finishes.
    """
    description: str
    expected_status: PassStatus
    run: Callable[[ZestTest, Scheduler], None]


# ---------------------------------------------------------------------------
# Trigger enter / exit
# ---------------------------------------------------------------------------

def _trigger_enter_exit_happy_path(test: ZestTest, scheduler: Scheduler) -> None:
    test.finish_test_with_delay(0.8, scheduler)
    test.expect_event("TriggerEnter")
    test.expect_event("TriggerExit")
    test.advance_frame()

    test.detect_event("TriggerEnter")
    test.detect_event("TriggerExit")
    test.advance_frame()


def _trigger_enter_exit_missing_enter(test: ZestTest, scheduler: Scheduler) -> None:
    test.finish_test_with_delay(0.8, scheduler)
    test.expect_event("TriggerEnter")
    test.expect_event("TriggerExit")
    test.advance_frame()

    test.detect_event("TriggerExit")
    test.advance_frame()
    test.advance_frame()


def _trigger_enter_exit_missing_exit(test: ZestTest, scheduler: Scheduler) -> None:
    test.finish_test_with_delay(0.8, scheduler)
    test.expect_event("TriggerEnter")
    test.expect_event("TriggerExit")
    for _ in range(3):
        test.advance_frame()

    test.detect_event("TriggerEnter")
    test.advance_frame()


# ---------------------------------------------------------------------------
# Data and value expectations
# ---------------------------------------------------------------------------

def _append_data(test: ZestTest, scheduler: Scheduler) -> None:
    test.expect_event("A")
    test.append_data("myKey1", "myValue1")
    test.detect_event("A")
    test.append_data_key_value("myKey2", "myValue2")
    test.advance_frame()

    test.append_data("String1")
    test.append_data("String1", "String2", "String3")
    test.advance_frame()
    test.finish_test()


def _string_equality(test: ZestTest, scheduler: Scheduler) -> None:
    test.advance_frame()

    test.expect_equal("myKey", "A", "A")
    test.expect_equal("myKey", "A", "B")
    test.advance_frame()

    test.expect_not_equal("myKey", "A", "A")
    test.expect_not_equal("myKey", "A", "B")
    test.advance_frame()

    test.expect_equal_warn("myKey", "C", "C")
    test.expect_equal_warn("myKey", "C", "D")
    test.advance_frame()

    test.expect_not_equal_warn("myKey", "C", "C")
    test.expect_not_equal_warn("myKey", "C", "D")
    test.advance_frame()


def _not_empty(test: ZestTest, scheduler: Scheduler) -> None:
    test.advance_frame()

    test.expect_not_empty("notZeroNumKey", 99)
    test.expect_not_empty("zeroNumKey", 0)
    test.expect_not_empty_warn("notZeroNumKey", 99)
    test.expect_not_empty_warn("zeroNumKey", 0)
    test.advance_frame()

    test.expect_not_empty("notZeroVecKey", Vec3(8, 2, 1))
    test.expect_not_empty("zeroVecKey", Vec3.zero())
    test.expect_not_empty_warn("notZeroVecKey", Vec3(8, 2, 1))
    test.expect_not_empty_warn("zeroVecKey", Vec3.zero())
    test.advance_frame()

    test.expect_not_empty("notZeroKey", "notZeroStr")
    test.expect_not_empty("zeroStrKey", "0")
    test.expect_not_empty("emptyStrKey", "")
    test.expect_not_empty_warn("notZeroKey", "notZeroStr")
    test.expect_not_empty_warn("zeroStrKey", "0")
    test.expect_not_empty_warn("emptyStrKey", "")
    test.advance_frame()


def _warns_only(test: ZestTest, scheduler: Scheduler) -> None:
    test.advance_frame()

    test.expect_not_empty_warn("notZeroNumKey", 99)
    test.expect_not_empty_warn("zeroNumKey", 0)
    test.advance_frame()

    test.expect_not_empty_warn("notZeroVecKey", Vec3(8, 2, 1))
    test.expect_not_empty_warn("zeroVecKey", Vec3.zero())
    test.advance_frame()

    test.expect_not_empty_warn("notZeroKey", "notZeroStr")
    test.expect_not_empty_warn("zeroStrKey", "0")
    test.expect_not_empty_warn("emptyStrKey", "")
    test.advance_frame()


# ---------------------------------------------------------------------------
# Event matching
# ---------------------------------------------------------------------------

def _events(expected: str, detected: str, *, finish: bool = True) -> Callable[[ZestTest, Scheduler], None]:
    """Expect each letter of ``expected``, then detect each of ``detected``."""

    def run(test: ZestTest, scheduler: Scheduler) -> None:
        for name in expected:
            test.expect_event(name)
        for name in detected:
            test.detect_event(name)
        if finish:
            test.finish_test()
        else:
            test.advance_frame()

    return run


def _expect_abc_detect_ac_interleaved(test: ZestTest, scheduler: Scheduler) -> None:
    test.expect_event("A")
    test.expect_event("B")
    test.detect_event("A")
    test.expect_event("C")
    test.detect_event("C")
    test.finish_test()


def _detect_ab_expect_ac(test: ZestTest, scheduler: Scheduler) -> None:
    test.detect_event("A")
    test.detect_event("B")
    test.expect_event("A")
    test.expect_event("C")
    test.finish_test()


# ---------------------------------------------------------------------------
# Collisions
# ---------------------------------------------------------------------------

def _collisions_pass(test: ZestTest, scheduler: Scheduler) -> None:
    test.finish_test_with_delay(0.8, scheduler)
    test.expect_event("Collision")
    test.detect_event("Collision")
    test.advance_frame()


def _collisions_multiple_events(test: ZestTest, scheduler: Scheduler) -> None:
    test.finish_test_with_delay(0.8, scheduler)
    test.expect_event("Collision")
    for _ in range(4):
        test.detect_event("Collision")
    for _ in range(3):
        test.advance_frame()

    for _ in range(3):
        test.detect_event("CollisionInfo")
    for _ in range(3):
        test.expect_event("CollisionInfo")
    test.advance_frame()

    test.expect_event("CollisionInfo")
    test.expect_event("CollisionInfo")
    test.advance_frame()


def _collisions_multiple_events_warn(test: ZestTest, scheduler: Scheduler) -> None:
    test.finish_test_with_delay(0.8, scheduler)
    test.expect_event_warn("Collision")
    for _ in range(4):
        test.detect_event_warn("Collision")
    for _ in range(3):
        test.advance_frame()

    for _ in range(3):
        test.detect_event_warn("CollisionInfo")
    for _ in range(3):
        test.expect_event_warn("CollisionInfo")
    test.advance_frame()

    test.expect_event_warn("CollisionInfo")
    test.advance_frame()

    test.expect_event_warn("Collision")
    for _ in range(4):
        test.detect_event_warn("Collision")
    test.advance_frame()


def _waiting_on_expect_events(test: ZestTest, scheduler: Scheduler) -> None:
    test.finish_test_with_delay(0.8, scheduler)
    for name in ["Collision"] * 3 + ["CollisionInfo"] * 2 + ["Collision"] * 4:
        test.expect_event(name)
    test.advance_frame()


# ---------------------------------------------------------------------------
# Cancel / invalidate / empty
# ---------------------------------------------------------------------------

def _cancel_test(test: ZestTest, scheduler: Scheduler) -> None:
    test.finish_test_with_delay(1, scheduler)
    test.expect_event("TriggerEnter")
    test.advance_frame()

    test.cancel_test()
    test.advance_frame()

    test.expect_event("TriggerExit")
    test.advance_frame()


def _invalidate_test(test: ZestTest, scheduler: Scheduler) -> None:
    test.finish_test_with_delay(1, scheduler)
    test.expect_event("TriggerEnter")
    test.advance_frame()

    test.invalidate_test("Reason for invalidation")
    test.advance_frame()

    test.expect_event("TriggerExit")
    test.advance_frame()


def _empty_test(test: ZestTest, scheduler: Scheduler) -> None:
    test.advance_frame()


EXAMPLES: dict[str, ExampleScenario] = {
    "trigger_enter_exit_happy_path": ExampleScenario(
        "Trigger enter then exit, finished with a delay",
        PassStatus.PASS,
        _trigger_enter_exit_happy_path,
    ),
    "trigger_enter_exit_missing_enter": ExampleScenario(
        "Only the trigger exit is detected",
        PassStatus.FAIL,
        _trigger_enter_exit_missing_enter,
    ),
    "trigger_enter_exit_missing_exit": ExampleScenario(
        "Only the trigger enter is detected",
        PassStatus.FAIL,
        _trigger_enter_exit_missing_exit,
    ),
    "append_data": ExampleScenario(
        "Free-form data is shown in the transcript",
        PassStatus.PASS,
        _append_data,
    ),
    "string_equality": ExampleScenario(
        "Equality checks, hard and warn-only",
        PassStatus.FAIL,
        _string_equality,
    ),
    "not_empty": ExampleScenario(
        "Non-emptiness of numbers, vectors and strings",
        PassStatus.FAIL,
        _not_empty,
    ),
    "warns_only": ExampleScenario(
        "Only warn-level checks fail",
        PassStatus.WARN,
        _warns_only,
    ),
    "expect_nothing_detect_abc": ExampleScenario(
        "Three detections without expectations",
        PassStatus.FAIL,
        _events("", "ABC", finish=False),
    ),
    "expect_abc_detect_nothing": ExampleScenario(
        "Three expectations, never detected",
        PassStatus.FAIL,
        _events("ABC", ""),
    ),
    "expect_a_detect_ab": ExampleScenario(
        "An extra detection fails",
        PassStatus.FAIL,
        _events("A", "AB", finish=False),
    ),
    "expect_ab_detect_ab": ExampleScenario(
        "Detections arrive in declaration order",
        PassStatus.PASS,
        _events("AB", "AB"),
    ),
    "expect_ab_detect_ba": ExampleScenario(
        "Detections arrive out of order",
        PassStatus.FAIL,
        _events("AB", "BA"),
    ),
    "expect_ab_detect_abb": ExampleScenario(
        "A duplicate detection fails",
        PassStatus.FAIL,
        _events("AB", "ABB"),
    ),
    "expect_aa_detect_aa": ExampleScenario(
        "Repeated expectations of one event",
        PassStatus.PASS,
        _events("AA", "AA"),
    ),
    "expect_ab_detect_cd": ExampleScenario(
        "Unrelated detections",
        PassStatus.FAIL,
        _events("AB", "CD"),
    ),
    "expect_abc_detect_ab": ExampleScenario(
        "The last expectation is never detected",
        PassStatus.FAIL,
        _events("ABC", "AB"),
    ),
    "expect_abc_detect_ac": ExampleScenario(
        "A middle expectation is skipped",
        PassStatus.FAIL,
        _events("ABC", "AC"),
    ),
    "expect_abc_detect_ac_interleaved": ExampleScenario(
        "A middle expectation is skipped, with interleaved declarations",
        PassStatus.FAIL,
        _expect_abc_detect_ac_interleaved,
    ),
    "detect_ab_expect_ac": ExampleScenario(
        "Detections before expectations",
        PassStatus.FAIL,
        _detect_ab_expect_ac,
    ),
    "collisions_pass": ExampleScenario(
        "A single expected collision",
        PassStatus.PASS,
        _collisions_pass,
    ),
    "collisions_multiple_events": ExampleScenario(
        "More collisions than expected, repeated lines are compressed",
        PassStatus.FAIL,
        _collisions_multiple_events,
    ),
    "collisions_multiple_events_warn": ExampleScenario(
        "Same as above with warn-only expectations and detections",
        PassStatus.WARN,
        _collisions_multiple_events_warn,
    ),
    "waiting_on_expect_events": ExampleScenario(
        "Many expectations still waiting when the delay fires",
        PassStatus.FAIL,
        _waiting_on_expect_events,
    ),
    "cancel_test": ExampleScenario(
        "Cancelled before the delayed finish fires",
        PassStatus.CANCEL,
        _cancel_test,
    ),
    "invalidate_test": ExampleScenario(
        "Invalidated before the delayed finish fires",
        PassStatus.INVALID,
        _invalidate_test,
    ),
    "empty_test": ExampleScenario(
        "No client calls at all",
        PassStatus.RUNNING,
        _empty_test,
    ),
}
