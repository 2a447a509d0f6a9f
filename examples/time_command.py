#!/usr/bin/env python3
"""
Example: Time repeated runs of a command.

Demonstrates starting a session, draining durations while it runs,
and stopping early with Ctrl+C.
"""

import logging
import shutil

from benchmarker import RunConfig, StopSignal, collect_durations, start, to_micros


def main():
    """Time 200 runs of `sleep 0`."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    binary = shutil.which("sleep") or "/bin/sleep"
    signal = StopSignal()
    config = RunConfig(binary, args=["0"], runs=200, warmup=2, stop_signal=signal.source)

    print(f"⏱️  Timing {binary} 0 for {config.runs} runs (Ctrl+C stops after the current chunk)")
    print("=" * 70)

    handle, channel = start(config)
    seen = 0

    def progress(batch):
        nonlocal seen
        seen += len(batch)
        print(f"[{seen:4d}/{config.runs}] last run: {to_micros(batch[-1]):8d}µs")

    try:
        _, outcome = collect_durations(handle, channel, on_batch=progress, poll_interval=0.25)
    except KeyboardInterrupt:
        print("\n⏹️  Stopping early")
        signal.stop()
        _, outcome = collect_durations(handle, channel, on_batch=progress)

    print(f"\n{'=' * 70}")
    print(f"  Outcome: {outcome.status.value} ({outcome.stop_reason.value if outcome.stop_reason else outcome.error})")
    print(f"  Durations received: {seen}")
    print(f"  Failed runs: {len(outcome.failed_runs)}")


if __name__ == "__main__":
    main()
