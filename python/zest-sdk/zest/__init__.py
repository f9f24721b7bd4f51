"""Zest SDK -- declarative, frame-stepped test assertions.

Client code reports detected events, data and checks to a test; test
authors declare expectations. Each frame the test's instruction log is
replayed into a status and a colorized transcript.
"""

__version__ = "0.1.0"

# Re-export key types for convenience.
from zest.instructions import Instruction, InstructionKind, InstructionLog
from zest.lifecycle import ZestTest
from zest.markup import (
    ANSI_MARKUP,
    HORIZON_MARKUP,
    HTML_MARKUP,
    PLAIN_MARKUP,
    Markup,
    render_lines,
)
from zest.reconcile import Reconciler, Replay, replay_log
from zest.result import ZestResult
from zest.scheduling import ManualScheduler, Scheduler, loop_scheduler
from zest.status import Line, LineColor, PassStatus, ZestStatus
from zest.store import ZestStore
from zest.values import Vec3

__all__ = [
    "ANSI_MARKUP",
    "HORIZON_MARKUP",
    "HTML_MARKUP",
    "PLAIN_MARKUP",
    "Instruction",
    "InstructionKind",
    "InstructionLog",
    "Line",
    "LineColor",
    "ManualScheduler",
    "Markup",
    "PassStatus",
    "Reconciler",
    "Replay",
    "Scheduler",
    "Vec3",
    "ZestResult",
    "ZestStatus",
    "ZestStore",
    "ZestTest",
    "loop_scheduler",
    "render_lines",
    "replay_log",
]
