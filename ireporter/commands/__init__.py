from __future__ import annotations

import argparse

from .documents import register as register_documents
from .reports import register as register_reports


def register_all(subparsers: argparse._SubParsersAction) -> None:
    """Register all CLI command groups."""
    register_reports(subparsers)
    register_documents(subparsers)


__all__ = ["register_all"]
