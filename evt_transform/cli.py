"""Command-line interface for the event log transformer.

Takes the four files of a run as positional arguments and hands them to
the run controller. Progress and diagnostics of the run itself go to the
run log; the console only shows a one-line summary.
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from .exceptions import ConfigurationError, EvtTransformError
from .runner import RunConfig, run_event_transform
from . import __version__


# Progress symbols
SYMBOL_SUCCESS = "[+]"
SYMBOL_FAILURE = "[X]"


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging based on verbosity level.

    Args:
        verbose: If True, enable DEBUG level logging.
        quiet: If True, suppress all logging except errors.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level, format="%(levelname)s: %(message)s", stream=sys.stderr
    )


def transform_single(config: RunConfig, quiet: bool) -> int:
    """Run a transformation and report the outcome.

    Args:
        config: The four files of the run.
        quiet: Whether to suppress the success summary.

    Returns:
        Exit code: 0 for success, 1 for failure.
    """
    logger = logging.getLogger(__name__)

    try:
        outcome = run_event_transform(config)
    except EvtTransformError as e:
        print(f"{SYMBOL_FAILURE} Error: {e}", file=sys.stderr)
        logger.error(f"Run error: {e}")
        return 1
    except Exception as e:
        print(f"{SYMBOL_FAILURE} Unexpected error: {e}", file=sys.stderr)
        logger.exception("Unexpected error during transformation")
        return 1

    if outcome.success:
        if not quiet:
            print(
                f"{SYMBOL_SUCCESS} Processed {outcome.records_processed} records "
                f"to {config.output_file}"
            )
        return 0

    if isinstance(outcome.error, ConfigurationError):
        # the run log is unavailable, so this is the only report
        print(f"{SYMBOL_FAILURE} {outcome.error_message}", file=sys.stderr)
    else:
        stage = outcome.failed_stage.name if outcome.failed_stage else "UNKNOWN"
        print(
            f"{SYMBOL_FAILURE} Run failed at {stage} after "
            f"{outcome.records_processed} records, see {config.log_file}",
            file=sys.stderr,
        )
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the CLI tool.

    Args:
        argv: Optional argument list to parse instead of sys.argv.

    Returns:
        Exit code: 0 for success, 1 for failure.
    """
    parser = argparse.ArgumentParser(
        prog="evt-transform",
        description="Transform Windows Event Log (.evtx) records with an XSLT stylesheet",
        epilog="""
Parameters required:
  - Event log file
  - XSLT file
  - Output file
  - Log filename

Examples:
  %(prog)s Security.evtx events.xslt events.txt run.log
  %(prog)s -v System.evtx to-csv.xslt C:\\Output\\system.csv C:\\Output\\run.log
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    parser.add_argument("event_file", help="Windows Event Log (.evtx) file to read")
    parser.add_argument("xslt_file", help="XSLT stylesheet applied to every record")
    parser.add_argument("output_file", help="Output file (truncated)")
    parser.add_argument("log_file", help="Run log file (truncated)")

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose output"
    )

    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Suppress the summary line"
    )

    args = parser.parse_args(argv)

    if args.verbose and args.quiet:
        print("Error: Cannot use --verbose and --quiet together", file=sys.stderr)
        return 1

    setup_logging(verbose=args.verbose, quiet=args.quiet)

    config = RunConfig.from_paths(
        args.event_file, args.xslt_file, args.output_file, args.log_file
    )
    return transform_single(config, quiet=args.quiet)


if __name__ == "__main__":
    sys.exit(main())
