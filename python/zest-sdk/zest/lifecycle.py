"""Per-test lifecycle: recording, frame advancement and notification.

A :class:`ZestTest` records every call as an instruction stamped with the
current frame. Results are derived lazily: a mutating call only marks the
test dirty, and the next :meth:`ZestTest.advance_frame` replays the whole
log and notifies listeners once. Finishing, cancelling and invalidating
replay and notify immediately.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable

from zest import instructions as instr
from zest.instructions import Instruction, InstructionLog
from zest.markup import HORIZON_MARKUP, Markup
from zest.reconcile import Reconciler
from zest.result import ZestResult
from zest.scheduling import Scheduler
from zest.values import NotEmptyValue

logger = logging.getLogger(__name__)

ResultListener = Callable[[ZestResult], None]


class ZestTest:
    """A single test: an instruction log advanced by an external clock.

    Usage::

        test = ZestTest("trigger_enter_exit")
        test.expect_event("TriggerEnter")
        test.expect_event("TriggerExit")
        test.advance_frame()

        test.detect_event("TriggerEnter")
        test.detect_event("TriggerExit")
        result = test.finish_test()
        assert result.status.pass_status == PassStatus.PASS
    """

    def __init__(
        self,
        test_name: str,
        *,
        markup: Markup = HORIZON_MARKUP,
        compress_repeats: bool = True,
    ) -> None:
        self.test_id = uuid.uuid4().hex
        self.markup = markup
        self._reconciler = Reconciler(compress_repeats=compress_repeats)
        self._test_name = test_name
        self._log = InstructionLog()
        self._current_frame = 0
        self._needs_update = True
        self._is_cancelled = False
        self._listeners: list[ResultListener] = []
        self._log.append(instr.start_test(test_name, frame=self._current_frame))

    # -- Properties -----------------------------------------------------------

    @property
    def test_name(self) -> str:
        return self._test_name

    @property
    def current_frame(self) -> int:
        return self._current_frame

    @property
    def is_cancelled(self) -> bool:
        return self._is_cancelled

    @property
    def needs_update(self) -> bool:
        """True when the log changed since the last notification."""
        return self._needs_update

    @property
    def instructions(self) -> tuple[Instruction, ...]:
        """Read-only snapshot of the recorded instructions."""
        return self._log.snapshot()

    def _record(self, instruction: Instruction) -> None:
        self._needs_update = True
        self._log.append(instruction)

    # -- Event expectations ---------------------------------------------------

    def expect_event(self, event_name: str) -> None:
        """Declare that ``event_name`` must be detected."""
        self._record(instr.expect_event(event_name, frame=self._current_frame))

    def expect_event_warn(self, event_name: str) -> None:
        """Like :meth:`expect_event`, but a miss only warns."""
        self._record(instr.expect_event(event_name, frame=self._current_frame, warn_only=True))

    def detect_event(self, event_name: str) -> None:
        """Report that ``event_name`` occurred."""
        self._record(instr.detect_event(event_name, frame=self._current_frame))

    def detect_event_warn(self, event_name: str) -> None:
        """Like :meth:`detect_event`, but an unmatched detection only warns."""
        self._record(instr.detect_event(event_name, frame=self._current_frame, warn_only=True))

    # -- Append data ----------------------------------------------------------

    def append_data(self, str1: str, str2: str | None = None, str3: str | None = None) -> None:
        self._record(instr.append_data(str1, str2, str3, frame=self._current_frame))

    def append_data_key_value(self, key: str, value: str) -> None:
        self._record(instr.append_data(key, value, frame=self._current_frame))

    # -- Value expectations ---------------------------------------------------

    def expect_equal(self, key: str, actual: str, expected: str) -> None:
        self._record(instr.expect_equal(key, actual, expected, frame=self._current_frame))

    def expect_equal_warn(self, key: str, actual: str, expected: str) -> None:
        self._record(instr.expect_equal(
            key, actual, expected, frame=self._current_frame, warn_only=True,
        ))

    def expect_not_equal(self, key: str, actual: str, expected: str) -> None:
        self._record(instr.expect_not_equal(key, actual, expected, frame=self._current_frame))

    def expect_not_equal_warn(self, key: str, actual: str, expected: str) -> None:
        self._record(instr.expect_not_equal(
            key, actual, expected, frame=self._current_frame, warn_only=True,
        ))

    def expect_not_empty(self, key: str, value: NotEmptyValue) -> None:
        """Check that a number is non-zero, a string is not ``""``/``"0"``,
        or a vector is not the zero vector."""
        self._record(instr.expect_not_empty(key, value, frame=self._current_frame))

    def expect_not_empty_warn(self, key: str, value: NotEmptyValue) -> None:
        self._record(instr.expect_not_empty(
            key, value, frame=self._current_frame, warn_only=True,
        ))

    # -- Lifecycle ------------------------------------------------------------

    def advance_frame(self) -> ZestResult | None:
        """Close the current frame.

        Returns the new result if anything changed since the last
        notification, otherwise ``None``.
        """
        self._current_frame += 1
        if self._needs_update:
            return self._send_result_to_listeners()
        return None

    def finish_test(self) -> ZestResult:
        """Finish now and return the final result."""
        self._record(instr.finish_test(frame=self._current_frame))
        return self._send_result_to_listeners()

    def finish_test_with_delay(self, seconds: float, scheduler: Scheduler) -> None:
        """Finish the test ``seconds`` from now using the host scheduler.

        The request is recorded immediately. When the callback fires, a
        cancelled test ignores it.
        """
        self._record(instr.finish_test_with_delay(seconds, frame=self._current_frame))

        def on_delay_done() -> None:
            if self._is_cancelled:
                logger.debug("Ignoring delayed finish of cancelled test %s", self._test_name)
                return
            self._record(instr.finish_test_with_delay_fired(seconds, frame=self._current_frame))
            self._send_result_to_listeners()

        scheduler(on_delay_done, seconds)

    def cancel_test(self) -> ZestResult:
        """Cancel the test. Pending delayed finishes become no-ops."""
        self._is_cancelled = True
        self._record(instr.cancel_test(frame=self._current_frame))
        return self._send_result_to_listeners()

    def invalidate_test(self, message: str) -> ZestResult:
        """Mark the test INVALID, recording ``message`` in the transcript."""
        self._record(instr.invalidate_test(message, frame=self._current_frame))
        return self._send_result_to_listeners()

    # -- Results ----------------------------------------------------------------

    def get_test_result(self) -> ZestResult:
        """Replay the log without notifying listeners."""
        replay = self._reconciler.replay(self._log.snapshot())
        return ZestResult.from_lines(
            self._test_name,
            self.test_id,
            replay.status,
            replay.lines,
            self.markup,
        )

    def add_result_listener(self, listener: ResultListener) -> None:
        """Register a listener; it receives the next result."""
        self._needs_update = True
        self._listeners.append(listener)

    def _send_result_to_listeners(self) -> ZestResult:
        result = self.get_test_result()
        self._needs_update = False
        if result.status.done:
            logger.info("Test %s is done: %s", self._test_name, result.status.pass_status.value)
        for listener in list(self._listeners):
            listener(result)
        return result

    def __repr__(self) -> str:
        return (
            f"ZestTest(test_name={self._test_name!r}, test_id={self.test_id!r}, "
            f"frame={self._current_frame})"
        )
