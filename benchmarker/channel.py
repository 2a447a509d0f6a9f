"""Duration stream between the benchmark worker and its consumers.

The stream is unbounded, so the worker never waits on a slow consumer.
Memory held by an undrained stream is bounded by the session's run count.
Each duration is delivered to exactly one receiver, in the order sent.
"""

import threading
import time
from collections import deque
from typing import Deque, Iterator, List, Optional, Tuple

from benchmarker.errors import ChannelClosedError

# Durations are whole nanoseconds from a monotonic clock.
Duration = int


def to_micros(duration: Duration) -> int:
    """Convert a nanosecond duration to whole microseconds."""
    return duration // 1_000


class _ChannelState:
    """Queue and bookkeeping shared by one sender and its receivers."""

    def __init__(self) -> None:
        self.items: Deque[Duration] = deque()
        self.cond = threading.Condition()
        self.receivers = 0
        self.sender_closed = False
        self.sent = 0


class DurationSender:
    """Producer end of the stream, owned by the worker."""

    def __init__(self, state: _ChannelState):
        self._state = state

    @property
    def sent(self) -> int:
        """Number of durations pushed so far."""
        return self._state.sent

    def send(self, duration: Duration) -> None:
        """Push a duration without blocking.

        Raises:
            ChannelClosedError: If every receiver has been dropped, or the
                sender was already closed
        """
        state = self._state
        with state.cond:
            if state.sender_closed:
                raise ChannelClosedError("Sender already closed")
            if state.receivers == 0:
                raise ChannelClosedError("All receivers dropped")
            state.items.append(duration)
            state.sent += 1
            state.cond.notify()

    def close(self) -> None:
        """Mark the end of the stream and wake any waiting receivers."""
        state = self._state
        with state.cond:
            state.sender_closed = True
            state.cond.notify_all()


class ResultChannel:
    """Consumer end of the stream.

    Example usage:
        for duration in channel:
            progress.update(1)
    """

    def __init__(self, state: _ChannelState):
        self._state = state
        self._closed = False
        with state.cond:
            state.receivers += 1

    def clone(self) -> "ResultChannel":
        """Create another receiver sharing the same stream."""
        if self._closed:
            raise ChannelClosedError("Cannot clone a closed receiver")
        return ResultChannel(self._state)

    def close(self) -> None:
        """Drop this receiver. Idempotent."""
        if self._closed:
            return
        self._closed = True
        with self._state.cond:
            self._state.receivers -= 1

    def __del__(self):
        # Dropping the last reference drops the receiver.
        try:
            self.close()
        except AttributeError:
            pass

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise ChannelClosedError("Receiver is closed")

    def recv(self, timeout: Optional[float] = None) -> Duration:
        """Wait for the next duration.

        Args:
            timeout: Seconds to wait; None waits until a value or end of stream

        Returns:
            Next duration in send order

        Raises:
            ChannelClosedError: If the stream ended and is empty
            TimeoutError: If no duration arrived within timeout
        """
        self._check_open()
        state = self._state
        deadline = None if timeout is None else time.monotonic() + timeout
        with state.cond:
            while not state.items:
                if state.sender_closed:
                    raise ChannelClosedError("Stream ended")
                if deadline is None:
                    state.cond.wait()
                else:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise TimeoutError("No duration received before timeout")
                    state.cond.wait(remaining)
            return state.items.popleft()

    def try_recv(self) -> Optional[Duration]:
        """Return the next duration if one is queued, else None."""
        self._check_open()
        with self._state.cond:
            if self._state.items:
                return self._state.items.popleft()
        return None

    def drain(self) -> List[Duration]:
        """Take every currently queued duration without blocking."""
        self._check_open()
        with self._state.cond:
            batch = list(self._state.items)
            self._state.items.clear()
        return batch

    @property
    def finished(self) -> bool:
        """True when the sender closed and nothing is left to receive."""
        with self._state.cond:
            return self._state.sender_closed and not self._state.items

    def __iter__(self) -> Iterator[Duration]:
        while True:
            try:
                yield self.recv()
            except ChannelClosedError:
                return


def open_channel() -> Tuple[DurationSender, ResultChannel]:
    """Create a connected sender/receiver pair."""
    state = _ChannelState()
    return DurationSender(state), ResultChannel(state)
