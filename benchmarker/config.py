"""Run configuration for benchmarker.

Defines the RunConfig dataclass describing one benchmark session, plus
helpers to build it from a mapping or a YAML/JSON file.
"""

import logging
import os
import threading
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from benchmarker.config_io import load_config_file
from benchmarker.errors import ConfigError

LOGGER = logging.getLogger(__name__)

DEFAULT_RUNS = 1000
DEFAULT_WARMUP_RUNS = 1
# Trades cancellation latency against the cost of polling the stop source.
DEFAULT_CHUNK_SIZE = 25

# Key under which a config file may nest its run settings.
CONFIG_SECTION = "benchmark"

_CLAIM_LOCK = threading.Lock()


def split_cli_args(args: Union[str, Sequence[str], None]) -> Tuple[str, ...]:
    """Normalize target arguments to a tuple of strings.

    A single string is split on spaces, the same way the command-line
    front-ends accept it; an empty string gives no arguments.
    """
    if args is None:
        return ()
    if isinstance(args, str):
        return tuple(part for part in args.split(" ") if part)
    return tuple(str(a) for a in args)


@dataclass(frozen=True)
class RunConfig:
    """Immutable description of one benchmark session.

    Attributes:
        binary: Path to the executable (existence is not checked up front)
        args: Arguments passed verbatim to the executable
        runs: Number of timed invocations
        warmup: Number of untimed invocations before timing starts
        print_initial: Echo the first warmup's stdout to the console
        stop_signal: Optional cancellation source; None means never cancelled
        chunk_size: Timed runs between two cancellation checks
    """

    binary: Union[str, "os.PathLike[str]"]
    args: Tuple[str, ...] = ()
    runs: int = DEFAULT_RUNS
    warmup: int = DEFAULT_WARMUP_RUNS
    print_initial: bool = False
    stop_signal: Optional[Any] = field(default=None, compare=False, repr=False)
    chunk_size: int = DEFAULT_CHUNK_SIZE
    _claimed: bool = field(default=False, init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", split_cli_args(self.args))
        for name in ("runs", "warmup"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigError(f"{name} must be a non-negative integer, got {value!r}")
        if isinstance(self.chunk_size, bool) or not isinstance(self.chunk_size, int) or self.chunk_size < 1:
            raise ConfigError(f"chunk_size must be a positive integer, got {self.chunk_size!r}")

    @property
    def claimed(self) -> bool:
        """True once a session has taken ownership of this config."""
        return self._claimed

    def claim(self) -> "RunConfig":
        """Take ownership of this config for a single session.

        Raises:
            ConfigError: If another session already claimed it
        """
        with _CLAIM_LOCK:
            if self._claimed:
                raise ConfigError("RunConfig already consumed by another session")
            object.__setattr__(self, "_claimed", True)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Export the plain settings (without the stop signal) for logs and UI."""
        return {
            "binary": os.fspath(self.binary),
            "args": list(self.args),
            "runs": self.runs,
            "warmup": self.warmup,
            "print_initial": self.print_initial,
            "chunk_size": self.chunk_size,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], stop_signal: Optional[Any] = None) -> "RunConfig":
        """Build a RunConfig from a mapping such as a parsed config file.

        Args:
            data: Mapping with a required "binary" key and optional settings
            stop_signal: Cancellation source to attach

        Raises:
            ConfigError: On a missing binary or unknown keys
        """
        allowed = {f.name for f in fields(cls) if f.init and f.name != "stop_signal"}
        unknown = sorted(set(data) - allowed)
        if unknown:
            raise ConfigError(f"Unknown run config keys: {', '.join(unknown)}")
        if not data.get("binary"):
            raise ConfigError("Run config requires a 'binary'")
        return cls(stop_signal=stop_signal, **data)


def load_run_config(
    filepath: str,
    overrides: Optional[Dict[str, Any]] = None,
    stop_signal: Optional[Any] = None,
) -> RunConfig:
    """Load a RunConfig from a YAML or JSON file.

    Settings may sit at the top level or under a ``benchmark:`` section.

    Args:
        filepath: Path to the config file
        overrides: Values that replace those read from the file
        stop_signal: Cancellation source to attach

    Returns:
        RunConfig built from the file
    """
    data = load_config_file(filepath)
    section = data.get(CONFIG_SECTION, data)
    if not isinstance(section, dict):
        raise ConfigError(f"'{CONFIG_SECTION}' section in {filepath} must be a mapping")
    merged = {**section, **(overrides or {})}
    LOGGER.debug("Loaded run config from %s: %s", filepath, merged)
    return RunConfig.from_dict(merged, stop_signal=stop_signal)
