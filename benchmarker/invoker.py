"""Single invocation of the target program.

The invoker has two modes. Capturing mode collects stdout/stderr and is
used during warmup. Silent mode sends both streams to the null device so
output handling never shows up in timed measurements.
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence

from benchmarker.errors import SpawnError

LOGGER = logging.getLogger(__name__)


@dataclass
class InvocationOutcome:
    """Result of one process run.

    Attributes:
        success: True if the process exited with status 0
        returncode: Raw exit status (negative for signals on POSIX)
        stdout: Captured standard output (empty in silent mode)
        stderr: Captured standard error (empty in silent mode)
    """

    success: bool
    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""


def resolve_working_dir() -> Optional[str]:
    """Return the caller's working directory, or None if it is unavailable.

    A deleted or unreadable current directory is tolerated; the process is
    then started without an explicit working directory.
    """
    try:
        cwd = os.getcwd()
    except OSError as e:
        LOGGER.debug("Current directory unavailable, launching without cwd: %s", e)
        return None
    if not os.access(cwd, os.R_OK | os.X_OK):
        LOGGER.debug("Current directory %s not accessible, launching without cwd", cwd)
        return None
    return cwd


class ProcessInvoker:
    """Launch the target program once per call, blocking until it exits."""

    def __init__(self, binary, args: Sequence[str] = (), capture: bool = True):
        """Initialize invoker.

        Args:
            binary: Path to the executable
            args: Arguments passed verbatim
            capture: Start in capturing mode (True) or silent mode (False)
        """
        self.command = [os.fspath(binary), *args]
        self.capture = capture
        self.cwd = resolve_working_dir()

    def silence(self) -> None:
        """Switch to silent mode for all subsequent calls."""
        if self.capture:
            LOGGER.debug("Switching invoker for %s to silent mode", self.command[0])
        self.capture = False

    def invoke(self) -> InvocationOutcome:
        """Run the program once.

        Returns:
            InvocationOutcome with exit status and, in capturing mode, output

        Raises:
            SpawnError: If the program could not be started at all
        """
        sink = subprocess.PIPE if self.capture else subprocess.DEVNULL
        try:
            completed = subprocess.run(
                self.command,
                stdin=subprocess.DEVNULL,
                stdout=sink,
                stderr=sink,
                cwd=self.cwd,
                check=False,
            )
        except OSError as e:
            raise SpawnError(f"Could not spawn {self.command[0]}: {e}") from e

        return InvocationOutcome(
            success=completed.returncode == 0,
            returncode=completed.returncode,
            stdout=completed.stdout or b"",
            stderr=completed.stderr or b"",
        )
