"""Reconciliation engine: replays an instruction log into a transcript.

Given the complete, ordered instruction log of one test, the engine
produces the colored transcript lines and the derived
:class:`~zest.status.ZestStatus`. Replay is a pure function of the log:
nothing survives between two replays, so replaying the same log always
yields the same lines and status.

Event matching
--------------
Expectations and detections for an event name are paired in
first-unpaired-expectation order. Expectations may be declared before or
after the detection that fulfils them, as long as the test is still open.
Across different event names the declaration order is enforced: a
detection whose expectation was declared after another, still
outstanding, expectation is an ordering violation::

    expect_event("A")
    expect_event("B")
    detect_event("B")   # FAIL: expect_event("A") has not been detected yet
    detect_event("A")   # OK
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from zest.instructions import Instruction, InstructionKind
from zest.status import Line, LineColor, PassStatus, ZestStatus, color_for_status
from zest.values import is_not_empty

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Replay:
    """Output of one replay.

    Attributes:
        lines: Transcript lines, starting with the ``TEST STATUS`` header.
        status: Status derived from the whole log.
    """
    lines: tuple[Line, ...]
    status: ZestStatus


# ---------------------------------------------------------------------------
# Replay accumulator
# ---------------------------------------------------------------------------

@dataclass
class _ReplayState:
    """Scratch state built up by a single replay pass."""
    instructions: Sequence[Instruction]
    status: ZestStatus = field(default_factory=ZestStatus.running)
    expectations: list[int] = field(default_factory=list)
    paired: set[int] = field(default_factory=set)
    hard_failures: int = 0
    warn_failures: int = 0

    def __post_init__(self) -> None:
        # Expectations recorded after the test closed never take part in
        # matching or finish reconciliation.
        closed_at = next(
            (index for index, instr in enumerate(self.instructions) if instr.is_terminal),
            len(self.instructions),
        )
        self.expectations = [
            index for index, instr in enumerate(self.instructions[:closed_at])
            if instr.kind == InstructionKind.EXPECT_EVENT
        ]

    def record_failure(self, *, warn_only: bool) -> None:
        """Count a failed check and fold it into the running status."""
        if self.status.done:
            return
        if warn_only:
            self.warn_failures += 1
        else:
            self.hard_failures += 1
        self.status = self.status.escalate(warn_only=warn_only)

    def unpaired(self) -> list[int]:
        return [i for i in self.expectations if i not in self.paired]


def _failure_color(warn_only: bool) -> LineColor:
    return LineColor.YELLOW if warn_only else LineColor.RED


def _check_line(is_expected: bool, warn_only: bool, text: str) -> Line:
    """Line for an equality or non-emptiness check."""
    if is_expected:
        return Line(f"{text} | OK", LineColor.GREEN)
    if warn_only:
        return Line(f"{text} | WARN", LineColor.YELLOW)
    return Line(f"{text} | FAIL", LineColor.RED)


# ---------------------------------------------------------------------------
# Repeat compression
# ---------------------------------------------------------------------------

def compress_repeats(lines: Sequence[Line]) -> list[Line]:
    """Collapse runs of identical lines into a ``Repeated N×:`` marker.

    The marker is followed by one instance of the repeated line.
    """
    compressed: list[Line] = []
    index = 0
    while index < len(lines):
        line = lines[index]
        run_end = index + 1
        while run_end < len(lines) and lines[run_end] == line:
            run_end += 1
        count = run_end - index
        if count > 1:
            compressed.append(Line(f"Repeated {count}×:", LineColor.GREY))
        compressed.append(line)
        index = run_end
    return compressed


# ---------------------------------------------------------------------------
# Reconciler
# ---------------------------------------------------------------------------

class Reconciler:
    """Replays instruction logs into transcripts and statuses.

    Usage::

        reconciler = Reconciler()
        replay = reconciler.replay(log.snapshot())
        print(replay.status, len(replay.lines))
    """

    def __init__(self, *, compress_repeats: bool = True) -> None:
        self.compress_repeats = compress_repeats

    def replay(self, instructions: Sequence[Instruction]) -> Replay:
        """Replay ``instructions`` from scratch."""
        state = _ReplayState(instructions)
        lines: list[Line] = []
        frame: int | None = None

        for index, instr in enumerate(instructions):
            if instr.frame != frame:
                frame = instr.frame
                lines.append(Line(f"--- FRAME {frame} ---", LineColor.GREY))
            lines.extend(self._lines_for_instruction(index, instr, state))

        if self.compress_repeats:
            lines = compress_repeats(lines)

        header = Line(f"TEST STATUS: {state.status.pass_status.value}", color_for_status(state.status))
        logger.debug(
            "Replayed %d instructions -> %s (done=%s)",
            len(instructions),
            state.status.pass_status.value,
            state.status.done,
        )
        return Replay(lines=(header, *lines), status=state.status)

    # -- Per-instruction handling ---------------------------------------------

    def _lines_for_instruction(
        self,
        index: int,
        instr: Instruction,
        state: _ReplayState,
    ) -> list[Line]:
        kind = instr.kind

        if kind in (
            InstructionKind.START_TEST,
            InstructionKind.EXPECT_EVENT,
            InstructionKind.APPEND_DATA,
            InstructionKind.FINISH_TEST_WITH_DELAY,
        ):
            return [Line(instr.call_text())]
        if kind == InstructionKind.DETECT_EVENT:
            return [self._match_detection(index, instr, state)]
        if kind in (InstructionKind.EXPECT_EQUAL, InstructionKind.EXPECT_NOT_EQUAL):
            return [self._evaluate_equality(instr, state)]
        if kind == InstructionKind.EXPECT_NOT_EMPTY:
            return [self._evaluate_not_empty(instr, state)]
        if kind in (InstructionKind.FINISH_TEST, InstructionKind.FINISH_TEST_WITH_DELAY_FIRED):
            lines = [Line(instr.call_text())]
            lines.extend(self._finish(state, PassStatus.PASS))
            return lines
        if kind == InstructionKind.CANCEL_TEST:
            lines = [Line(instr.call_text())]
            lines.extend(self._finish(state, PassStatus.CANCEL))
            return lines
        if kind == InstructionKind.INVALIDATE_TEST:
            lines = [Line(instr.call_text())]
            lines.extend(self._finish(state, PassStatus.INVALID))
            lines.append(Line(f"Invalidated: {instr.params.get('message', '')}", LineColor.GREY))
            return lines

        logger.error("No reconciliation rule for instruction kind %s", kind)
        return [Line(f"{instr.call_text()} | UNKNOWN INSTRUCTION", LineColor.RED)]

    def _match_detection(
        self,
        index: int,
        detection: Instruction,
        state: _ReplayState,
    ) -> Line:
        """Pair a detection with the first unpaired expectation of its name."""
        call = detection.call_text()
        name = detection.event_name
        candidates = [
            i for i in state.unpaired()
            if state.instructions[i].event_name == name
        ]

        if not candidates:
            state.record_failure(warn_only=detection.warn_only)
            return Line(
                f'{call} | FAIL: no matching expect_event("{name}") before this detection',
                _failure_color(detection.warn_only),
            )

        matched_index = candidates[0]
        matched = state.instructions[matched_index]
        state.paired.add(matched_index)

        # An earlier-declared expectation that is still outstanding must be
        # detected first.
        blocking = next(
            (i for i in state.expectations if i < matched_index and i not in state.paired),
            None,
        )
        if blocking is not None:
            warn_only = detection.warn_only or matched.warn_only
            state.record_failure(warn_only=warn_only)
            return Line(
                f"{call} | FAIL: out of order, expected "
                f"{state.instructions[blocking].call_text()} to be detected first",
                _failure_color(warn_only),
            )

        logger.debug("Paired detection %d with expectation %d (%s)", index, matched_index, name)
        return Line(f"{call} | OK: {matched.call_text()}", LineColor.GREEN)

    def _evaluate_equality(self, instr: Instruction, state: _ReplayState) -> Line:
        same = instr.params["actual"] == instr.params["expected"]
        is_expected = same if instr.kind == InstructionKind.EXPECT_EQUAL else not same
        if not is_expected:
            state.record_failure(warn_only=instr.warn_only)
        return _check_line(is_expected, instr.warn_only, instr.call_text())

    def _evaluate_not_empty(self, instr: Instruction, state: _ReplayState) -> Line:
        is_expected = is_not_empty(instr.params["value"])
        if not is_expected:
            state.record_failure(warn_only=instr.warn_only)
        return _check_line(is_expected, instr.warn_only, instr.call_text())

    def _finish(self, state: _ReplayState, outcome: PassStatus) -> list[Line]:
        """Report unpaired expectations and move the status to done.

        ``outcome`` is PASS for a regular finish, in which case the final
        status is derived from the failures seen so far. CANCEL and INVALID
        override everything. A test that is already done is left untouched.
        """
        if state.status.done:
            return []

        lines: list[Line] = []
        unpaired = state.unpaired()
        if unpaired:
            lines.append(Line("Finished with unfulfilled expects:", LineColor.GREY))
        for i in unpaired:
            expectation = state.instructions[i]
            state.record_failure(warn_only=expectation.warn_only)
            lines.append(Line(
                f"{expectation.call_text()} | FAIL: still waiting on detection of "
                f'"{expectation.event_name}"',
                _failure_color(expectation.warn_only),
            ))
        # Consumed so a later terminal instruction does not report them again.
        state.paired.update(unpaired)

        if outcome == PassStatus.PASS:
            if state.hard_failures:
                outcome = PassStatus.FAIL
            elif state.warn_failures:
                outcome = PassStatus.WARN
        state.status = ZestStatus(done=True, pass_status=outcome)
        return lines


_DEFAULT_RECONCILER = Reconciler()


def replay_log(instructions: Sequence[Instruction]) -> Replay:
    """Replay a log with the default (compressing) reconciler."""
    return _DEFAULT_RECONCILER.replay(instructions)
