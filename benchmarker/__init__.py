"""benchmarker - time repeated runs of an external program.

Provides:
- config (RunConfig, load_run_config, defaults)
- cancellation (CancellationGate, StopSignal and stop-source adapters)
- channel (ResultChannel duration stream)
- handle (ExecutionHandle, ExecutionOutcome)
- engine (start, collect_durations)
"""

__version__ = "0.1.0"

from benchmarker.cancellation import (
    CLOSED_SENTINEL,
    CallableSource,
    CancellationGate,
    CancellationSource,
    EventSource,
    PollState,
    QueueSource,
    StopSignal,
)
from benchmarker.channel import Duration, DurationSender, ResultChannel, open_channel, to_micros
from benchmarker.config import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_RUNS,
    DEFAULT_WARMUP_RUNS,
    RunConfig,
    load_run_config,
)
from benchmarker.engine import collect_durations, start
from benchmarker.errors import BenchmarkerError, ChannelClosedError, ConfigError, SpawnError
from benchmarker.handle import ExecutionHandle, ExecutionOutcome, OutcomeStatus, StopReason
from benchmarker.invoker import InvocationOutcome, ProcessInvoker

__all__ = [
    "CLOSED_SENTINEL",
    "CallableSource",
    "CancellationGate",
    "CancellationSource",
    "EventSource",
    "PollState",
    "QueueSource",
    "StopSignal",
    "Duration",
    "DurationSender",
    "ResultChannel",
    "open_channel",
    "to_micros",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_RUNS",
    "DEFAULT_WARMUP_RUNS",
    "RunConfig",
    "load_run_config",
    "collect_durations",
    "start",
    "BenchmarkerError",
    "ChannelClosedError",
    "ConfigError",
    "SpawnError",
    "ExecutionHandle",
    "ExecutionOutcome",
    "OutcomeStatus",
    "StopReason",
    "InvocationOutcome",
    "ProcessInvoker",
]
