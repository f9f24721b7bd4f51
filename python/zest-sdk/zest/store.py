"""Multi-test store: named tests, the current test and result fan-out."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from zest.keys import split_test_key
from zest.lifecycle import ResultListener, ZestTest
from zest.markup import HORIZON_MARKUP, Markup
from zest.result import ZestResult

logger = logging.getLogger(__name__)

StoreResultListener = Callable[[ZestResult, bool], None]


@dataclass(frozen=True)
class _CurrentTest:
    """Identity of the current test. The id detects stale references."""
    test_name: str
    test_id: str


class ZestStore:
    """Owns many named tests and tracks which one is current.

    Results from every registered test are forwarded to all-results
    listeners together with an ``is_current`` flag; current-only
    listeners see just the current test's results.

    Usage::

        store = ZestStore()
        test = store.start_test("collisions")
        store.add_current_result_listener(display)
        test.expect_event("Collision")
        store.advance_frame()
    """

    def __init__(
        self,
        *,
        markup: Markup = HORIZON_MARKUP,
        compress_repeats: bool = True,
    ) -> None:
        self.markup = markup
        self.compress_repeats = compress_repeats
        self._tests: dict[str, ZestTest] = {}
        self._current: _CurrentTest | None = None
        self._result_listeners: list[StoreResultListener] = []
        self._current_result_listeners: list[ResultListener] = []

    # -- Choose which test ------------------------------------------------------

    def start_test(self, test_name: str) -> ZestTest:
        """Start a new test, cancelling any previous test of the same name."""
        previous = self._tests.get(test_name)
        if previous is not None:
            logger.info("Restarting test %s; cancelling instance %s", test_name, previous.test_id)
            previous.cancel_test()

        test = ZestTest(test_name, markup=self.markup, compress_repeats=self.compress_repeats)
        test.add_result_listener(self._update_result_listeners)
        self._tests[test_name] = test

        if self._current is None:
            self._current = _CurrentTest(test_name, test.test_id)
        logger.debug("Started test %s (%s)", test_name, test.test_id)
        return test

    def get_test(self, test_name: str) -> ZestTest | None:
        return self._tests.get(test_name)

    def set_current_test(self, test_name: str) -> ZestTest | None:
        """Make ``test_name`` current. Unknown names are logged and ignored."""
        test = self.get_test(test_name)
        if test is None:
            logger.error("set_current_test called on non-existent test: %s", test_name)
            return None
        self._current = _CurrentTest(test_name, test.test_id)
        return test

    def get_current_test(self) -> ZestTest | None:
        if self._current is None:
            return None
        test = self._tests.get(self._current.test_name)
        if test is None or test.test_id != self._current.test_id:
            return None
        return test

    def detect_event_by_key(self, test_name_plus_key: str) -> ZestTest | None:
        """Route a legacy ``"testName###eventName"`` detection to its test.

        Malformed keys and unknown tests are logged and ignored.
        """
        split = split_test_key(test_name_plus_key, "detect_event_by_key")
        if split is None:
            return None
        test_name, event_name = split
        test = self.get_test(test_name)
        if test is None:
            logger.error("detect_event_by_key called on non-existent test: %s", test_name)
            return None
        test.detect_event(event_name)
        return test

    @property
    def current_test_name(self) -> str | None:
        return self._current.test_name if self._current else None

    @property
    def test_names(self) -> list[str]:
        """Registered test names in start order."""
        return list(self._tests)

    # -- Lifecycle ----------------------------------------------------------------

    def advance_frame(self) -> ZestResult | None:
        """Advance every registered test once.

        Returns the current test's result if it produced one this frame.
        """
        current_result: ZestResult | None = None
        for test in list(self._tests.values()):
            result = test.advance_frame()
            if result is not None and self._is_current(result):
                current_result = result
        return current_result

    # -- Test results -------------------------------------------------------------

    def get_test_result(self, test_name: str) -> ZestResult | None:
        test = self._tests.get(test_name)
        return test.get_test_result() if test is not None else None

    def add_result_listener(self, listener: StoreResultListener) -> None:
        """Listen to every test's results, tagged with ``is_current``."""
        self._result_listeners.append(listener)

    def add_current_result_listener(self, listener: ResultListener) -> None:
        """Listen only to the current test's results."""
        self._current_result_listeners.append(listener)

    def _is_current(self, result: ZestResult) -> bool:
        return self._current is not None and self._current.test_id == result.test_id

    def _update_result_listeners(self, result: ZestResult) -> None:
        is_current = self._is_current(result)
        for listener in list(self._result_listeners):
            listener(result, is_current)
        if is_current:
            for current_listener in list(self._current_result_listeners):
                current_listener(result)
