"""Custom exceptions for benchmarker.

Callers can tell configuration mistakes, spawn failures and a dropped
result channel apart without inspecting messages.
"""


class BenchmarkerError(Exception):
    """Base exception for all benchmarker errors."""

    pass


class ConfigError(BenchmarkerError):
    """Raised when a run configuration is invalid, unreadable or already consumed."""

    pass


class SpawnError(BenchmarkerError, OSError):
    """Raised when the target program or the worker thread cannot be started."""

    pass


class ChannelClosedError(BenchmarkerError):
    """Raised when a duration channel has no peer left on the other side."""

    pass
