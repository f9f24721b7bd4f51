#!/usr/bin/env python3
"""Zest Demo -- run the example catalog through a test store.

Every scenario in :data:`zest.examples.EXAMPLES` is started in one
:class:`~zest.store.ZestStore`, driven frame by frame, then any delayed
finishes are fired with a :class:`~zest.scheduling.ManualScheduler`. The
transcript of each test is printed, followed by a summary table comparing
each final status to the one the scenario expects.

Design notes:
  - Uses print() for the transcripts and summary (not logging) because this
    is a user-facing CLI demo.
  - Only the first started test is "current"; the current-only listener
    counts how many snapshots it saw to show the fan-out filtering.
"""

from __future__ import annotations

import argparse
import logging
import sys

from zest.examples import EXAMPLES
from zest.markup import ANSI_MARKUP, PLAIN_MARKUP
from zest.result import ZestResult
from zest.scheduling import ManualScheduler
from zest.store import ZestStore

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Zest example scenarios.")
    parser.add_argument("--plain", action="store_true", help="disable terminal colors")
    parser.add_argument(
        "--only",
        action="append",
        metavar="NAME",
        choices=sorted(EXAMPLES),
        help="run only this scenario (repeatable)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser.parse_args(argv)


def run_examples(names: list[str]) -> tuple[ZestStore, dict[str, ZestResult], int]:
    """Run the named scenarios and return the final result of each."""
    store = ZestStore()
    scheduler = ManualScheduler()
    current_updates = 0

    def on_current_result(result: ZestResult) -> None:
        nonlocal current_updates
        current_updates += 1

    store.add_current_result_listener(on_current_result)

    for name in names:
        test = store.start_test(name)
        EXAMPLES[name].run(test, scheduler)

    fired = scheduler.run_all()
    logger.info("Fired %d delayed finish(es)", fired)
    store.advance_frame()

    results: dict[str, ZestResult] = {}
    for name in names:
        result = store.get_test_result(name)
        if result is not None:
            results[name] = result
    return store, results, current_updates


def print_summary(results: dict[str, ZestResult]) -> int:
    """Print the summary table. Returns the number of mismatches."""
    print("\n" + "=" * 70)
    print("SUMMARY")
    print("=" * 70)
    print(f"\n  {'Scenario':<36} {'Expected':>9} {'Actual':>9}")
    print(f"  {'-' * 36} {'-' * 9} {'-' * 9}")

    mismatches = 0
    for name, result in results.items():
        expected = EXAMPLES[name].expected_status.value
        actual = result.status.pass_status.value
        marker = "" if expected == actual else " <-- MISMATCH"
        if marker:
            mismatches += 1
        print(f"  {name:<36} {expected:>9} {actual:>9}{marker}")
    return mismatches


def main(argv: list[str] | None = None) -> int:
    """Run the demo."""
    args = parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    markup = PLAIN_MARKUP if args.plain else ANSI_MARKUP
    names = args.only or list(EXAMPLES)

    print("=" * 70)
    print("  ZEST -- Frame-stepped test assertions")
    print("=" * 70)

    store, results, current_updates = run_examples(names)
    for name, result in results.items():
        print(f"\n--- {name}: {EXAMPLES[name].description}")
        print(result.render(markup))

    mismatches = print_summary(results)
    print(f"\n  Current test: {store.current_test_name} "
          f"({current_updates} snapshot(s) delivered to the current-only listener)")

    if mismatches:
        print(f"  EXIT: {mismatches} scenario(s) ended with an unexpected status.")
        return 1
    print("  All scenarios ended with their expected status.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
