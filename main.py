"""Entry point for the Fingrid wind power terminal dashboard."""

from __future__ import annotations

import argparse
import os
import sys
import traceback
from typing import List, Optional, TextIO

from config import API_KEY_ENV, load_config
from console_log import LOG_PREFIX_SYSTEM, LOG_PREFIX_WARN, log, set_debug
from table_renderer import RED, RESET, SHOW_CURSOR
from text_dashboard import run_dashboard


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse user-friendly command-line arguments."""

    parser = argparse.ArgumentParser(
        description="Live terminal gauge of Finnish wind power generation (Fingrid open data)",
    )
    parser.add_argument(
        "--api-key",
        metavar="KEY",
        help=f"Fingrid open data API key (defaults to ${API_KEY_ENV}).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        metavar="SECONDS",
        help="Give up on a single HTTP request after this many seconds.",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        metavar="COUNT",
        help="Stop after COUNT one-second redraws (handy for scripted runs).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print DEBUG log lines to stderr.",
    )
    return parser.parse_args(argv)


def print_fatal(exc: BaseException, stream: TextIO | None = None) -> None:
    """Report an unhandled error in red, with its traceback."""

    stream = stream or sys.stderr
    trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    stream.write(SHOW_CURSOR)
    stream.write(f"{RED}Unhandled error: {exc}\n{trace}{RESET}")
    stream.flush()


def main(argv: Optional[List[str]] = None) -> int:
    """Script entry point; returns the process exit status."""

    args = parse_args(argv)
    try:
        config = load_config(args)
    except ValueError as exc:
        log(LOG_PREFIX_WARN, str(exc))
        return 2

    set_debug(config.debug)
    if os.name == "nt":
        os.system("")  # Enable ANSI sequences in the Windows console
    log(LOG_PREFIX_SYSTEM, "===== Starting wind power dashboard =====")
    if not config.api_key:
        log(LOG_PREFIX_WARN, f"No API key given; set ${API_KEY_ENV} or pass --api-key.")

    try:
        run_dashboard(config)
    except KeyboardInterrupt:
        log(LOG_PREFIX_SYSTEM, "KeyboardInterrupt caught; stopping dashboard.")
    except Exception as exc:
        print_fatal(exc)
        return 1
    finally:
        log(LOG_PREFIX_SYSTEM, "===== Shutdown complete =====")
    return 0


if __name__ == "__main__":
    sys.exit(main())
