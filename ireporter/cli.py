from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from .commands import register_all
from .core import IReporterError, setup_logging


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser for the ireporter CLI."""
    parser = argparse.ArgumentParser(prog="ireporter", description="iReporter ConMas API client")
    subparsers = parser.add_subparsers(dest="command", required=True)
    register_all(subparsers)
    return parser


def run_cli(argv: Optional[list[str]] = None) -> int:
    """Run the ireporter command-line interface."""
    parser = build_parser()
    args = parser.parse_args(argv)

    verbose = bool(getattr(args, "verbose", False))
    setup_logging(logging.INFO if verbose else logging.WARNING)

    if not hasattr(args, "func"):
        parser.error("No handler registered for the selected command")

    try:
        return int(args.func(args))
    except IReporterError as e:
        logging.getLogger("ireporter.cli").error("%s", e)
        return 1


def main() -> None:
    sys.exit(run_cli())
