"""Command-line entrypoint to assign HCT orders and write lab notes without the web form.

Usage examples:
  python -m labnote.cli check-table --table randomization_list.csv
  python -m labnote.cli lookup 7
  python -m labnote.cli generate 7 --lab-number A-101 --experimenter Sugiura --editable
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable

from labnote.core.config import Settings, get_settings
from labnote.core.errors import LabNoteError
from labnote.core.logging import configure_logging
from labnote.services.assignments import NotFound, resolve
from labnote.services.clock import format_timestamp, now_in
from labnote.services.counterbalance import CounterbalanceTable, load_table_file
from labnote.services.identifiers import canonicalize
from labnote.services.labnotes import prepare_labnote, write_labnote
from labnote.services.reports import ReportMetadata
from labnote.services.templates import read_template

logger = logging.getLogger("labnote.cli")

EXIT_ERROR = 1
EXIT_NOT_FOUND = 2


def _load_table(args, settings: Settings) -> CounterbalanceTable:
    result = load_table_file(args.table or settings.table_path)
    if isinstance(result, LabNoteError):
        raise result
    return result


def _run_check_table(args, settings: Settings) -> int:
    table = _load_table(args, settings)
    print(f"{len(table)} entries")
    return 0


def _run_lookup(args, settings: Settings) -> int:
    subject_id = canonicalize(args.subject_id)
    if isinstance(subject_id, LabNoteError):
        raise subject_id
    assignment = resolve(_load_table(args, settings), subject_id)
    if isinstance(assignment, NotFound):
        print(assignment.message, file=sys.stderr)
        return EXIT_NOT_FOUND
    print(f"{subject_id}: {assignment.format(settings.hct_unit)}")
    return 0


def _run_generate(args, settings: Settings) -> int:
    table = _load_table(args, settings)
    template_text = None
    if args.editable:
        template_text = read_template(args.template or settings.template_path)

    now = now_in(settings.timezone)
    metadata = ReportMetadata(
        lab_number=args.lab_number,
        experimenter_name=args.experimenter,
        start_time=args.start or format_timestamp(now),
        end_time=args.end or format_timestamp(now),
    )
    outputs = prepare_labnote(
        args.subject_id,
        table,
        metadata,
        now,
        template_text=template_text,
        experiment_order=settings.experiment_order,
        unit=settings.hct_unit,
    )
    if isinstance(outputs, NotFound):
        print(outputs.message, file=sys.stderr)
        return EXIT_NOT_FOUND
    if isinstance(outputs, LabNoteError):
        raise outputs

    for path in write_labnote(outputs, args.output_dir or settings.output_dir):
        print(path)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Assign counterbalanced HCT orders and write lab notes."
    )
    parser.add_argument(
        "--table",
        help="Counterbalancing CSV (defaults to RANDOMIZATION_LIST or ./randomization_list.csv).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("check-table", help="Validate the counterbalancing table.")

    lookup = subparsers.add_parser("lookup", help="Show the HCT order assigned to a participant.")
    lookup.add_argument("subject_id", help="Participant ID; the first number in it is used.")

    generate = subparsers.add_parser("generate", help="Write the lab-note CSV and template output.")
    generate.add_argument("subject_id", help="Participant ID; the first number in it is used.")
    generate.add_argument("--lab-number", help="Lab or room number, e.g. A-101.")
    generate.add_argument("--experimenter", help="Experimenter name shown in the lab note.")
    generate.add_argument(
        "--start",
        help="Session start as YYYY-MM-DD HH:MM. Defaults to the current time.",
    )
    generate.add_argument(
        "--end",
        help="Session end as YYYY-MM-DD HH:MM. Defaults to the current time.",
    )
    generate.add_argument(
        "--editable",
        action="store_true",
        help="Write an editable .Rmd instead of the renderer parameter JSON.",
    )
    generate.add_argument(
        "--template",
        help="R Markdown template (defaults to LABNOTE_TEMPLATE or ./labnote_template.Rmd).",
    )
    generate.add_argument(
        "--output-dir",
        help="Directory for generated files (defaults to OUTPUT_DIR or ./outputs).",
    )

    return parser


def main(argv: Iterable[str] | None = None) -> None:
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    commands = {
        "check-table": _run_check_table,
        "lookup": _run_lookup,
        "generate": _run_generate,
    }
    try:
        status = commands[args.command](args, settings)
    except (LabNoteError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(EXIT_ERROR)
    sys.exit(status)


if __name__ == "__main__":
    main()
