from __future__ import annotations

import argparse
import logging
from pathlib import Path

from payroll_compare.core import ColumnMapping
from payroll_compare.ingest import CsvParseError, ParseResult, parse_csv_file
from payroll_compare.mapping import mapping_to_dict, validate_mapping


def add_dataset_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("csv", type=Path, help="Payroll CSV file.")
    parser.add_argument("--employee-col", required=True, help="Column holding the employee name.")
    parser.add_argument("--amount-col", required=True, help="Column holding the amount.")
    parser.add_argument("--period-col", required=True, help="Column holding the pay period label.")
    parser.add_argument("--department-col", default=None, help="Optional department column.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def load_dataset(args: argparse.Namespace) -> tuple[ParseResult, ColumnMapping]:
    if not args.csv.exists():
        raise SystemExit(f"File not found: {args.csv}")
    try:
        parsed = parse_csv_file(args.csv)
    except CsvParseError as e:
        raise SystemExit(f"Could not read {args.csv}: {e}") from e

    mapping = ColumnMapping(
        employee_name=args.employee_col,
        amount=args.amount_col,
        pay_period=args.period_col,
        department=args.department_col,
    )
    errors = validate_mapping(mapping_to_dict(mapping), parsed.headers)
    if errors:
        raise SystemExit("Invalid column mapping:\n  " + "\n  ".join(errors))
    return parsed, mapping
