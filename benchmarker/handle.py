"""Completion token for a background benchmark session."""

import asyncio
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class OutcomeStatus(Enum):
    """Terminal state of a session."""

    COMPLETED = "completed"
    FAILED = "failed"


class StopReason(Enum):
    """Why a completed session stopped."""

    FINISHED = "finished"
    CANCELLED = "cancelled"
    WARMUP_FAILED = "warmup_failed"


@dataclass
class ExecutionOutcome:
    """Terminal outcome of a session.

    Cancelled and warmup-failed sessions are still COMPLETED; only spawn
    failures and a dropped result channel end as FAILED.

    Attributes:
        status: COMPLETED or FAILED
        stop_reason: Why a COMPLETED session stopped (None if FAILED)
        durations_emitted: Number of durations pushed to the channel
        failed_runs: Indices of timed runs that exited non-success
        error: Exception that failed the session
    """

    status: OutcomeStatus
    stop_reason: Optional[StopReason] = None
    durations_emitted: int = 0
    failed_runs: List[int] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        """True for any COMPLETED outcome, however many durations it produced."""
        return self.status == OutcomeStatus.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        """Convert outcome to dictionary format."""
        return {
            "status": self.status.value,
            "stop_reason": self.stop_reason.value if self.stop_reason else None,
            "durations_emitted": self.durations_emitted,
            "failed_runs": list(self.failed_runs),
            "error": str(self.error) if self.error else None,
        }


class ExecutionHandle:
    """One-shot join point for the worker thread of a session."""

    def __init__(self, thread: threading.Thread):
        self._thread = thread
        self._done = threading.Event()
        self._outcome: Optional[ExecutionOutcome] = None

    def _resolve(self, outcome: ExecutionOutcome) -> None:
        """Record the terminal outcome. Called once by the worker."""
        if self._done.is_set():
            raise RuntimeError("ExecutionHandle already resolved")
        self._outcome = outcome
        self._done.set()

    @property
    def name(self) -> str:
        return self._thread.name

    @property
    def outcome(self) -> Optional[ExecutionOutcome]:
        """Terminal outcome, or None while the session is running."""
        return self._outcome

    def is_finished(self) -> bool:
        """True once the worker has resolved its outcome."""
        return self._done.is_set()

    def join(self, timeout: Optional[float] = None) -> ExecutionOutcome:
        """Block until the session ends and return its outcome.

        Args:
            timeout: Seconds to wait; None waits indefinitely

        Raises:
            TimeoutError: If the session is still running after timeout
        """
        if not self._done.wait(timeout):
            raise TimeoutError(f"Session {self.name} still running after {timeout}s")
        self._thread.join()
        return self._outcome

    async def wait(self) -> ExecutionOutcome:
        """Await the session from asyncio code without blocking the event loop."""
        return await asyncio.to_thread(self.join)
