#!/usr/bin/env python3
"""
Pick Risk - Main CLI Entry Point
================================

Reads a pick-list CSV export, projects staffing risk per stage-by wave and
prints the waves table.  Optionally writes an Excel report or launches the
Streamlit dashboard.

Configuration is loaded from the JSON config store before the run.  Values
passed with --avg-pl-min / --shift-end / --show-safe are coerced against the
stored ones and saved back, so the next run starts from them.

Usage:
    python run.py --file picklists.csv
    python run.py --file picklists.csv --output risk.xlsx
    python run.py --file picklists.csv --avg-pl-min 14 --show-safe
    python run.py --file picklists.csv --now 07:30
    python run.py --dashboard
"""

import logging
import sys
import argparse
import time
from datetime import datetime
from pathlib import Path

from pick_risk.core.config import ConfigError, ConfigStore
from pick_risk.classification import HeaderError
from pick_risk.ingest import NotTabularDataError, parse_instant
from pick_risk.pipeline import PickRiskPipeline
from pick_risk.reports import format_console_report, generate_report

logger = logging.getLogger(__name__)


# ==========================================
# LOGGING SETUP
# ==========================================
# Dual-output logging: a DEBUG-level log file per run and a quieter console
# handler (WARNING by default, INFO with --verbose).

def setup_logging(verbose: bool = False, log_dir: Path = None):
    """
    Configure the root logger with file and console handlers.

    Args:
        verbose: When True, lower the console handler to INFO level.
        log_dir: Directory for log files (default: logs/ in the working
            directory).

    Returns:
        Path: Path to the newly created log file.
    """
    log_dir = Path(log_dir) if log_dir else Path.cwd() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = time.strftime('%Y%m%d_%H%M%S')
    log_file = log_dir / f"pick_risk_{timestamp}.log"

    file_formatter = logging.Formatter(
        '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_formatter = logging.Formatter(
        '%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S'
    )

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(file_formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO if verbose else logging.WARNING)
    console_handler.setFormatter(console_formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicate log lines
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)
    return log_file


# ==========================================
# ARGUMENTS
# ==========================================

def parse_args(argv=None):
    """
    Parse and return command-line arguments.

    Returns:
        argparse.Namespace with the parsed flags.
    """
    parser = argparse.ArgumentParser(
        description='Pick Risk - staffing risk per stage-by wave',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py --file picklists.csv                 Print the waves table
  python run.py --file picklists.csv -o risk.xlsx    Also write an Excel report
  python run.py --file picklists.csv --show-safe     Include Safe waves
  python run.py --dashboard                          Launch the dashboard
        """
    )

    parser.add_argument(
        '--file', '-f',
        type=str,
        help='Pick-list CSV export'
    )
    parser.add_argument(
        '--output', '-o',
        type=str,
        help='Excel report path (.xlsx)'
    )

    # Settings (persisted to the config store)
    parser.add_argument(
        '--avg-pl-min',
        type=str,
        help='Average minutes per pick-list'
    )
    parser.add_argument(
        '--shift-end',
        type=str,
        help='Shift end shown in the summary (HH:MM)'
    )
    safe_group = parser.add_mutually_exclusive_group()
    safe_group.add_argument(
        '--show-safe',
        dest='show_safe',
        action='store_true',
        default=None,
        help='Show Safe waves'
    )
    safe_group.add_argument(
        '--hide-safe',
        dest='show_safe',
        action='store_false',
        help='Hide Safe waves'
    )
    parser.add_argument(
        '--config',
        type=str,
        help='Config store path (JSON)'
    )

    parser.add_argument(
        '--now',
        type=str,
        help='Reference time (HH:MM[:SS] today, or a full date-time)'
    )

    parser.add_argument(
        '--dashboard',
        action='store_true',
        help='Launch the Streamlit dashboard'
    )
    parser.add_argument(
        '--port',
        type=int,
        default=8501,
        help='Port for Streamlit dashboard (default: 8501)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show detailed logging output'
    )

    return parser.parse_args(argv)


def resolve_now(value):
    """Reference time from --now, or None for the current time.

    Raises:
        ValueError: if the value is not a recognisable time.
    """
    if not value:
        return None
    now = parse_instant(value, datetime.now())
    if now is None:
        raise ValueError(f"Invalid --now value: {value!r}")
    return now


# ==========================================
# RUN
# ==========================================

def run_pipeline(args) -> int:
    """
    Compute and print the report for ``args.file``.

    Returns:
        Process exit code (0 on success).
    """
    store = ConfigStore(args.config) if args.config else ConfigStore()
    pipe = PickRiskPipeline(store=store, show_progress=args.verbose)

    if any(v is not None for v in (args.avg_pl_min, args.shift_end, args.show_safe)):
        pipe.update_config(
            avg_pl_min=args.avg_pl_min,
            shift_end=args.shift_end,
            show_safe=args.show_safe,
        )

    try:
        now = resolve_now(args.now)
        report = pipe.run_file(args.file, now=now)
    except FileNotFoundError:
        print(f"File not found: {args.file}", file=sys.stderr)
        return 1
    except NotTabularDataError as e:
        print(f"Not tabular data: {e}", file=sys.stderr)
        return 1
    except HeaderError as e:
        print(f"Could not read header: {e}", file=sys.stderr)
        return 1
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1

    print(format_console_report(report, pipe.config.show_safe_rows))

    if args.output:
        generate_report(report, args.output, show_safe=pipe.config.show_safe_rows)
        print(f"\nReport saved to {args.output}")
    return 0


def main(argv=None):
    """
    Top-level entry point: parse CLI args and dispatch.

    --dashboard launches Streamlit; otherwise --file is required.
    """
    args = parse_args(argv)
    setup_logging(verbose=args.verbose)

    if args.dashboard:
        from pick_risk.dashboard.app import run_dashboard
        run_dashboard(port=args.port)
        return 0

    if not args.file:
        print("No input file. Use --file picklists.csv or --dashboard.", file=sys.stderr)
        return 2

    try:
        return run_pipeline(args)
    except KeyboardInterrupt:
        print("\nCancelled by user.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
