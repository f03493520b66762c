from __future__ import annotations

import argparse

from ..config import load_config
from ..services import DefinitionService, IReporterConnection, MasterService, ReportService
from ._common import add_common_args, print_response


def register(subparsers: argparse._SubParsersAction) -> None:
    list_reports = subparsers.add_parser(
        "list-reports",
        help="List reports visible to the API user",
    )
    add_common_args(list_reports)

    def handle_list_reports(args: argparse.Namespace) -> int:
        conn = IReporterConnection.from_config(load_config(args.env_file))
        return print_response(ReportService(conn).get_report_list())

    list_reports.set_defaults(func=handle_list_reports)

    detail = subparsers.add_parser(
        "get-detail",
        help="Print one report with all of its clusters",
    )
    detail.add_argument("top_id", help="Report ID (topId)")
    add_common_args(detail)

    def handle_get_detail(args: argparse.Namespace) -> int:
        conn = IReporterConnection.from_config(load_config(args.env_file))
        return print_response(ReportService(conn).get_document_detail(args.top_id))

    detail.set_defaults(func=handle_get_detail)

    masters = subparsers.add_parser(
        "list-master-records",
        help="List the records of a master table",
    )
    masters.add_argument("master_id", help="Master table ID")
    masters.add_argument("--master-key", default=None, help="Select the master by key")
    masters.add_argument("--record-id", default=None, help="Only this record ID")
    masters.add_argument("--record-key", default=None, help="Only the record with this key")
    masters.add_argument("--field-search", default=None, help="Server-side field filter")
    add_common_args(masters)

    def handle_list_master_records(args: argparse.Namespace) -> int:
        conn = IReporterConnection.from_config(load_config(args.env_file))
        response = MasterService(conn).get_master_record_list(
            args.master_id,
            master_key=args.master_key,
            record_id=args.record_id,
            record_key=args.record_key,
            field_search=args.field_search,
        )
        return print_response(response)

    masters.set_defaults(func=handle_list_master_records)

    forms = subparsers.add_parser(
        "list-forms",
        help="List form definitions",
    )
    forms.add_argument("--label-id", default=None, help="Label ID (-9 for all labels)")
    forms.add_argument("--word", default=None, help="Search word")
    forms.add_argument(
        "--in-name",
        dest="word_target_name",
        action="store_true",
        default=None,
        help="Match --word against definition names",
    )
    forms.add_argument(
        "--in-remarks",
        dest="word_target_remarks",
        action="store_true",
        default=None,
        help="Match --word against definition remarks",
    )
    forms.add_argument(
        "--public-status",
        type=int,
        choices=(1, 2),
        default=None,
        help="1 for test definitions, 2 for published ones",
    )
    forms.add_argument(
        "--history",
        action="store_true",
        default=None,
        help="Include past revisions",
    )
    add_common_args(forms)

    def handle_list_forms(args: argparse.Namespace) -> int:
        conn = IReporterConnection.from_config(load_config(args.env_file))
        response = DefinitionService(conn).get_form_list(
            label_id=args.label_id,
            word=args.word,
            word_target_name=args.word_target_name,
            word_target_remarks=args.word_target_remarks,
            public_status=args.public_status,
            history=args.history,
        )
        return print_response(response)

    forms.set_defaults(func=handle_list_forms)
