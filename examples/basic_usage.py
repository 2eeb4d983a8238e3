#!/usr/bin/env python3
"""
Basic Usage Examples for the Event Log Transformer

This file demonstrates simple, common usage patterns for transforming
Windows Event Log (.evtx) records with an XSLT stylesheet.

Requirements:
    - Python 3.8+
    - evt_transform package installed (pulls in lxml and python-evtx)
"""

from pathlib import Path

from evt_transform import (
    EventTransformRunner,
    RunConfig,
    RunState,
    can_read,
    can_write,
    run_event_transform,
)

EXAMPLES_DIR = Path(__file__).parent


def example_1_simple_run() -> None:
    """
    Example 1: Transform a log with the bundled summary stylesheet.

    Each record becomes one CSV-like line in the output file; the run log
    records every stage of the run.
    """
    print("=" * 70)
    print("Example 1: Simple Run")
    print("=" * 70)

    outcome = run_event_transform(
        "Security.evtx",
        EXAMPLES_DIR / "event_summary.xslt",
        "security_summary.csv",
        "security_summary.log",
    )

    if outcome.success:
        print(f"Success! Processed {outcome.records_processed} records")
    else:
        print(f"Run failed at {outcome.failed_stage.name}: {outcome.error_message}")
        print("See security_summary.log for details")

    print()


def example_2_inspect_stages() -> None:
    """
    Example 2: Drive the runner directly and inspect the visited stages.

    The runner is a context manager; leaving the block releases the event
    source, the output file and the run log.
    """
    print("=" * 70)
    print("Example 2: Inspect Run Stages")
    print("=" * 70)

    config = RunConfig.from_paths(
        "System.evtx",
        EXAMPLES_DIR / "event_summary.xslt",
        "system_summary.csv",
        "system_summary.log",
    )

    with EventTransformRunner(config) as runner:
        outcome = runner.run()

    print(" -> ".join(state.name for state in runner.history))
    if RunState.CHECK_FILE_ERROR in runner.history:
        print(f"File check failed: {outcome.error_message}")
    else:
        print(f"Records processed: {outcome.records_processed}")

    print()


def example_3_probe_files() -> None:
    """
    Example 3: Probe files before starting a run.

    Note that can_write() creates or truncates the file it probes.
    """
    print("=" * 70)
    print("Example 3: Probe Files")
    print("=" * 70)

    for path in ("Security.evtx", EXAMPLES_DIR / "event_summary.xslt"):
        print(f"Readable {path}: {can_read(path)}")
    print(f"Writable out.csv: {can_write('out.csv')}")

    print()


if __name__ == "__main__":
    example_1_simple_run()
    example_2_inspect_stages()
    example_3_probe_files()
