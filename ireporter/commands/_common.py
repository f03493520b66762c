from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from ..responses import CommandResponse


def add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--env",
        dest="env_file",
        type=Path,
        default=None,
        help="Path to .env file that overrides environment variables",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")


def load_json_arg(value: str) -> Any:
    """Load JSON from an inline string or a file path."""
    if value.lstrip().startswith(("[", "{")):
        return json.loads(value)
    return json.loads(Path(value).read_text(encoding="utf-8"))


def print_response(response: CommandResponse) -> int:
    json.dump(response.data, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0
