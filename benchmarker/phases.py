"""Warmup and timed execution phases of a benchmark session."""

import logging
import sys
import time
from typing import Iterator, List, Optional, TextIO

from benchmarker.cancellation import CancellationGate
from benchmarker.channel import DurationSender
from benchmarker.invoker import ProcessInvoker

LOGGER = logging.getLogger(__name__)


def chunk_ranges(runs: int, chunk_size: int) -> Iterator[range]:
    """Split 0..runs into consecutive ranges of at most chunk_size indices."""
    for start in range(0, runs, chunk_size):
        yield range(start, min(start + chunk_size, runs))


def _echo(stream: TextIO, data: bytes) -> None:
    stream.write(data.decode(errors="replace"))
    stream.flush()


class WarmupPhase:
    """Untimed runs that prime caches before measurement.

    The first non-success exit ends the whole session: a broken target is
    not worth timing.
    """

    def __init__(
        self,
        invoker: ProcessInvoker,
        warmup: int,
        print_initial: bool = False,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ):
        self.invoker = invoker
        self.warmup = warmup
        self.print_initial = print_initial
        self.stdout = stdout
        self.stderr = stderr
        self.failed_at: Optional[int] = None

    def run(self) -> bool:
        """Run every warmup iteration in order.

        Returns:
            True if all iterations succeeded (or there were none)

        Raises:
            SpawnError: If the target could not be started
        """
        stdout = self.stdout or sys.stdout
        stderr = self.stderr or sys.stderr
        for i in range(self.warmup):
            outcome = self.invoker.invoke()
            if i == 0 and self.print_initial and outcome.stdout:
                _echo(stdout, outcome.stdout)
            if outcome.stderr:
                _echo(stderr, outcome.stderr)
            if not outcome.success:
                self.failed_at = i
                LOGGER.warning(
                    "Warmup run %d exited with status %d, not timing %s",
                    i,
                    outcome.returncode,
                    self.invoker.command[0],
                )
                return False
        return True


class TimedExecutionPhase:
    """Timed runs, checked for cancellation once per chunk."""

    def __init__(
        self,
        invoker: ProcessInvoker,
        runs: int,
        sender: DurationSender,
        gate: CancellationGate,
        chunk_size: int,
    ):
        self.invoker = invoker
        self.runs = runs
        self.sender = sender
        self.gate = gate
        self.chunk_size = chunk_size
        self.failed_runs: List[int] = []
        self.cancelled = False

    def run(self) -> None:
        """Time each run and push its duration in invocation order.

        A run that exits non-success is logged and still timed. Stops early,
        without error, when the gate says so at a chunk boundary.

        Raises:
            SpawnError: If the target could not be started
            ChannelClosedError: If every receiver was dropped
        """
        for chunk in chunk_ranges(self.runs, self.chunk_size):
            if not self.gate.should_continue():
                LOGGER.debug("Stopping before run %d of %d", chunk.start, self.runs)
                self.cancelled = True
                return
            for index in chunk:
                start = time.perf_counter_ns()
                outcome = self.invoker.invoke()
                elapsed = time.perf_counter_ns() - start
                if not outcome.success:
                    self.failed_runs.append(index)
                    LOGGER.warning(
                        "Timed run %d exited with status %d", index, outcome.returncode
                    )
                self.sender.send(elapsed)
