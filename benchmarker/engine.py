"""Benchmark session engine.

``start`` hands a RunConfig to a dedicated worker thread and returns at
once. The worker runs the warmup phase, then the timed phase, pushing one
duration per timed run onto the ResultChannel. The caller drains the
channel while the session runs and joins the ExecutionHandle for the
terminal outcome.

Example usage:
    handle, channel = start(RunConfig("/usr/bin/true", runs=100, warmup=2))
    durations, outcome = collect_durations(handle, channel)
"""

import itertools
import logging
import threading
from typing import Callable, List, Optional, Tuple

from benchmarker.cancellation import CancellationGate
from benchmarker.channel import Duration, DurationSender, ResultChannel, open_channel
from benchmarker.config import RunConfig
from benchmarker.errors import ChannelClosedError, ConfigError, SpawnError
from benchmarker.handle import ExecutionHandle, ExecutionOutcome, OutcomeStatus, StopReason
from benchmarker.invoker import ProcessInvoker
from benchmarker.phases import TimedExecutionPhase, WarmupPhase

LOGGER = logging.getLogger(__name__)

_session_ids = itertools.count(1)


def _run_session(
    config: RunConfig,
    gate: CancellationGate,
    sender: DurationSender,
    handle: ExecutionHandle,
) -> None:
    """Worker body: warmup, timed runs, then resolve the handle.

    The handle is resolved on every exit path, including a BaseException
    escaping from a user stop callable, which is re-raised afterwards.
    """
    timed: Optional[TimedExecutionPhase] = None
    outcome: Optional[ExecutionOutcome] = None
    try:
        invoker = ProcessInvoker(config.binary, config.args, capture=True)
        warmup = WarmupPhase(invoker, config.warmup, print_initial=config.print_initial)
        if not warmup.run():
            outcome = ExecutionOutcome(OutcomeStatus.COMPLETED, StopReason.WARMUP_FAILED)
        else:
            invoker.silence()
            timed = TimedExecutionPhase(invoker, config.runs, sender, gate, config.chunk_size)
            timed.run()
            outcome = ExecutionOutcome(
                OutcomeStatus.COMPLETED,
                StopReason.CANCELLED if timed.cancelled else StopReason.FINISHED,
            )
    except (SpawnError, ChannelClosedError) as e:
        LOGGER.error("Session %s aborted: %s", handle.name, e)
        outcome = ExecutionOutcome(OutcomeStatus.FAILED, error=e)
    except Exception as e:
        LOGGER.exception("Unexpected error in session %s", handle.name)
        outcome = ExecutionOutcome(OutcomeStatus.FAILED, error=e)
    except BaseException as e:
        LOGGER.error("Session %s interrupted by %s", handle.name, type(e).__name__)
        outcome = ExecutionOutcome(OutcomeStatus.FAILED, error=e)
        raise
    finally:
        sender.close()
        _finish_session(handle, sender, timed, outcome)


def _finish_session(
    handle: ExecutionHandle,
    sender: DurationSender,
    timed: Optional[TimedExecutionPhase],
    outcome: Optional[ExecutionOutcome],
) -> None:
    """Fill in the run counters, log the end of the session and resolve the handle."""
    if outcome is None:
        outcome = ExecutionOutcome(OutcomeStatus.FAILED)
    outcome.durations_emitted = sender.sent
    if timed is not None:
        outcome.failed_runs = list(timed.failed_runs)
    LOGGER.info(
        "Session %s ended: %s (%s), %d durations",
        handle.name,
        outcome.status.value,
        outcome.stop_reason.value if outcome.stop_reason else outcome.error,
        outcome.durations_emitted,
    )
    handle._resolve(outcome)


def start(config: RunConfig) -> Tuple[ExecutionHandle, ResultChannel]:
    """Start a benchmark session in the background.

    The session takes ownership of ``config``; starting the same config
    twice raises ConfigError. An invalid binary is not checked here and
    surfaces as a FAILED outcome from the first invocation.

    Args:
        config: Session description

    Returns:
        Tuple of (handle, channel) for the running session

    Raises:
        ConfigError: If the config was already consumed or its stop signal
            is of an unsupported type
        SpawnError: If the worker thread could not be started
    """
    try:
        gate = CancellationGate.wrap(config.stop_signal)
    except TypeError as e:
        raise ConfigError(str(e)) from e
    config.claim()

    sender, channel = open_channel()
    session_name = f"benchmarker-session-{next(_session_ids)}"
    thread = threading.Thread(
        target=lambda: _run_session(config, gate, sender, handle),
        name=session_name,
        daemon=True,
    )
    handle = ExecutionHandle(thread)

    LOGGER.info(
        "Starting %s: %s %s, %d runs, %d warmup",
        session_name,
        config.binary,
        " ".join(config.args),
        config.runs,
        config.warmup,
    )
    try:
        thread.start()
    except RuntimeError as e:
        sender.close()
        channel.close()
        raise SpawnError(f"Could not start worker thread: {e}") from e
    return handle, channel


def collect_durations(
    handle: ExecutionHandle,
    channel: ResultChannel,
    on_batch: Optional[Callable[[List[Duration]], None]] = None,
    poll_interval: float = 0.01,
) -> Tuple[List[Duration], ExecutionOutcome]:
    """Drain a session's durations until it ends.

    Args:
        handle: Handle returned by start()
        channel: Channel returned by start()
        on_batch: Called with each non-empty batch, e.g. to advance a progress bar
        poll_interval: Seconds to wait for a duration before re-checking the handle

    Returns:
        Tuple of (durations in run order, terminal outcome)
    """
    durations: List[Duration] = []

    def take(batch: List[Duration]) -> None:
        if batch:
            durations.extend(batch)
            if on_batch:
                on_batch(batch)

    while not handle.is_finished():
        try:
            first = channel.recv(timeout=poll_interval)
        except TimeoutError:
            continue
        except ChannelClosedError:
            break
        take([first, *channel.drain()])

    outcome = handle.join()
    if not channel.closed:
        take(channel.drain())
    return durations, outcome
