from __future__ import annotations

import argparse

from ..config import load_config
from ..payloads import NewDocument, SheetData, SimpleClusterUpdate
from ..services import DocumentService, IReporterConnection
from ._common import add_common_args, load_json_arg, print_response


def _load_updates(value: str) -> list[SimpleClusterUpdate]:
    """Parse cluster updates given as a JSON list of camelCase objects."""
    data = load_json_arg(value)
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list) or not all(isinstance(d, dict) for d in data):
        raise ValueError("updates JSON must be an object or a list of objects")
    return [SimpleClusterUpdate.from_mapping(d) for d in data]


def _load_sheets(value: str) -> list[SheetData]:
    data = load_json_arg(value)
    if not isinstance(data, list):
        raise ValueError("sheets JSON must be a list of {sheetNo, clusters} objects")
    return [SheetData.from_mapping(d) for d in data]


def register(subparsers: argparse._SubParsersAction) -> None:
    update = subparsers.add_parser(
        "update-report",
        help="Update clusters of an existing report",
    )
    update.add_argument("top_id", help="Report ID (topId)")
    update.add_argument(
        "updates",
        help=(
            "Cluster updates as JSON (inline or file path), e.g. "
            '\'[{"clusterId": "369", "value": "4", "approver": "user01"}]\''
        ),
    )
    update.add_argument("--top-name", default=None, help="Report name (sets systemKey5)")
    update.add_argument("--update-user", default=None, help="User recorded as the updater")
    update.add_argument(
        "--force",
        action="store_true",
        help="Force the update (mode=1)",
    )
    add_common_args(update)

    def handle_update_report(
        args: argparse.Namespace, parser: argparse.ArgumentParser = update
    ) -> int:
        try:
            updates = _load_updates(args.updates)
        except (OSError, ValueError, KeyError) as e:
            parser.error(f"Invalid updates JSON: {e}")

        conn = IReporterConnection.from_config(load_config(args.env_file))
        response = DocumentService(conn).update_report(
            updates,
            top_id=args.top_id,
            top_name=args.top_name,
            update_user=args.update_user,
            mode=1 if args.force else 0,
        )
        return print_response(response)

    update.set_defaults(func=handle_update_report)

    create = subparsers.add_parser(
        "create-document",
        help="Create a report from a form definition",
    )
    create.add_argument("def_top_id", help="Form definition ID (defTopId)")
    create.add_argument("--name", dest="rep_top_name", default=None, help="Report name")
    create.add_argument("--create-user", default=None, help="User recorded as the creator")
    create.add_argument(
        "--sheets",
        default=None,
        help="Initial cluster values as JSON (inline or file path)",
    )
    create.add_argument(
        "--type",
        dest="payload_type",
        choices=("xml", "xmlZip"),
        default="xml",
        help="Upload the XML as is or zipped",
    )
    add_common_args(create)

    def handle_create_document(
        args: argparse.Namespace, parser: argparse.ArgumentParser = create
    ) -> int:
        sheets: list[SheetData] = []
        if args.sheets:
            try:
                sheets = _load_sheets(args.sheets)
            except (OSError, ValueError, KeyError) as e:
                parser.error(f"Invalid sheets JSON: {e}")

        document = NewDocument(
            def_top_id=args.def_top_id,
            rep_top_name=args.rep_top_name,
            create_user_id=args.create_user,
            sheets=sheets,
        )
        conn = IReporterConnection.from_config(load_config(args.env_file))
        response = DocumentService(conn).create_document(
            document, payload_type=args.payload_type
        )
        return print_response(response)

    create.set_defaults(func=handle_create_document)
