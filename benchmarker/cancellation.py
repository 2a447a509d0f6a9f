"""Cooperative cancellation for benchmark sessions.

The worker never blocks on the stop source: it asks a CancellationGate
once per chunk whether to continue. Any primitive can back the gate as
long as it can be polled without waiting.

Example usage:
    signal = StopSignal()
    handle, channel = start(RunConfig("/bin/true", runs=500, stop_signal=signal.source))
    ...
    signal.stop()  # takes effect at the next chunk boundary
"""

import logging
import queue
import threading
from enum import Enum
from typing import Any, Callable, Optional, Protocol, runtime_checkable

LOGGER = logging.getLogger(__name__)


class PollState(Enum):
    """What a non-blocking poll of a stop source observed."""

    PENDING = "pending"
    SIGNALLED = "signalled"
    CLOSED = "closed"


# Put on a stop queue to mark that no more stop messages will ever be sent.
CLOSED_SENTINEL = object()

# queue.ShutDown exists on Python 3.13+; a shut-down queue is a closed source.
_QUEUE_SHUTDOWN = tuple(e for e in (getattr(queue, "ShutDown", None),) if e is not None)


@runtime_checkable
class CancellationSource(Protocol):
    """Protocol for receive-only stop sources."""

    def poll(self) -> PollState:
        """Check for a stop message without blocking."""


class EventSource:
    """Stop source backed by a threading.Event."""

    def __init__(self, event: threading.Event):
        self.event = event

    def poll(self) -> PollState:
        return PollState.SIGNALLED if self.event.is_set() else PollState.PENDING


class QueueSource:
    """Stop source backed by a queue.Queue of stop messages."""

    def __init__(self, stop_queue: "queue.Queue[Any]"):
        self.queue = stop_queue

    def poll(self) -> PollState:
        try:
            message = self.queue.get_nowait()
        except queue.Empty:
            return PollState.PENDING
        except _QUEUE_SHUTDOWN:
            return PollState.CLOSED
        if message is CLOSED_SENTINEL:
            return PollState.CLOSED
        return PollState.SIGNALLED


class CallableSource:
    """Stop source backed by a zero-argument callable; truthy means stop."""

    def __init__(self, func: Callable[[], Any]):
        self.func = func

    def poll(self) -> PollState:
        return PollState.SIGNALLED if self.func() else PollState.PENDING


class StopSignal:
    """Caller-side stop sender paired with its receive-only source.

    The caller keeps the StopSignal and hands ``source`` to the RunConfig,
    so the worker can only observe the signal, never send it.
    """

    def __init__(self) -> None:
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self.source = QueueSource(self._queue)

    def stop(self) -> None:
        """Ask the session to stop at its next chunk boundary."""
        LOGGER.info("Sending stop signal")
        self._queue.put(None)

    def close(self) -> None:
        """Drop the sender; the session treats this like a stop."""
        self._queue.put(CLOSED_SENTINEL)


class CancellationGate:
    """Non-blocking check deciding whether to run the next chunk.

    Without a source it always allows continuing. With one, a pending
    poll continues; a received stop or a closed source stops for good.
    """

    def __init__(self, source: Optional[CancellationSource] = None):
        self.source = source
        self._stopped = False

    @classmethod
    def wrap(cls, stop_signal: Any) -> "CancellationGate":
        """Build a gate from any supported stop primitive.

        Accepts None, a CancellationSource, a StopSignal, a threading.Event,
        a queue.Queue, or a zero-argument callable.
        """
        if stop_signal is None or isinstance(stop_signal, CancellationSource):
            return cls(stop_signal)
        if isinstance(stop_signal, StopSignal):
            return cls(stop_signal.source)
        if isinstance(stop_signal, threading.Event):
            return cls(EventSource(stop_signal))
        if isinstance(stop_signal, queue.Queue):
            return cls(QueueSource(stop_signal))
        if callable(stop_signal):
            return cls(CallableSource(stop_signal))
        raise TypeError(f"Unsupported stop signal type: {type(stop_signal).__name__}")

    def should_continue(self) -> bool:
        """Return False once a stop was received or the source closed.

        Raises:
            TypeError: If the source's poll() does not return a PollState
        """
        if self.source is None:
            return True
        if self._stopped:
            return False
        state = self.source.poll()
        if not isinstance(state, PollState):
            raise TypeError(
                f"{type(self.source).__name__}.poll() returned {state!r}, expected a PollState"
            )
        if state is PollState.PENDING:
            return True
        LOGGER.debug("Cancellation source reported %s", state.value)
        self._stopped = True
        return False
