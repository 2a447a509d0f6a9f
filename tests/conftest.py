"""Pytest configuration and fixtures."""

import sys

import pytest

from benchmarker.invoker import InvocationOutcome

# Exits with status 1 on the invocation numbers listed after the counter path.
COUNTING_TARGET = (
    "import pathlib, sys\n"
    "p = pathlib.Path(sys.argv[1])\n"
    "n = int(p.read_text()) if p.exists() else 0\n"
    "p.write_text(str(n + 1))\n"
    "sys.exit(1 if str(n) in sys.argv[2:] else 0)\n"
)


@pytest.fixture
def python_binary():
    """Interpreter used as a portable target program."""
    return sys.executable


@pytest.fixture
def counting_target(tmp_path):
    """Build args for a target that fails on chosen invocation numbers.

    Invocations are numbered from 0 across warmup and timed runs.
    """

    def _make(*failing):
        counter = tmp_path / "counter.txt"
        return ("-c", COUNTING_TARGET, str(counter), *[str(i) for i in failing])

    return _make


class FakeInvoker:
    """In-process stand-in for ProcessInvoker with scripted exit codes.

    Each call advances ``clock_ns`` by ``step_ns * (call index + 1)``, so a
    patched perf_counter_ns reading it gives every run a distinct duration.
    """

    def __init__(self, returncodes=None, stdout=b"", stderr=b"", step_ns=0):
        self.returncodes = list(returncodes or [])
        self.step_ns = step_ns
        self.clock_ns = 0
        self.stdout = stdout
        self.stderr = stderr
        self.command = ["fake-target"]
        self.capture = True
        self.calls = 0

    def silence(self):
        self.capture = False

    def invoke(self):
        code = self.returncodes[self.calls] if self.calls < len(self.returncodes) else 0
        self.calls += 1
        self.clock_ns += self.step_ns * self.calls
        if not self.capture:
            return InvocationOutcome(success=code == 0, returncode=code)
        return InvocationOutcome(
            success=code == 0, returncode=code, stdout=self.stdout, stderr=self.stderr
        )


@pytest.fixture
def fake_invoker():
    """Factory for FakeInvoker instances."""
    return FakeInvoker
