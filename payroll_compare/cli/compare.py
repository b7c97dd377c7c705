"""
CLI Entry Point: payroll-compare

Compare two pay periods per employee with delta, delta % and year-to-date.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from payroll_compare.cli.common import add_dataset_arguments, configure_logging, load_dataset
from payroll_compare.comparison import ComparisonRow, build_comparison_rows, comparison_totals, default_period_pair
from payroll_compare.core import format_delta, format_money, format_percent, unique_periods
from payroll_compare.export import export_filename, write_comparison_csv
from payroll_compare.insights import InsightsError, generate_insights
from payroll_compare.snapshots import SnapshotStore, create_snapshot
from payroll_compare.utils import console


def read_notes(path: Path) -> dict[str, str]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError as e:
        raise SystemExit(f"Notes file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise SystemExit(f"Notes file is not valid JSON: {path} ({e})") from e
    if not isinstance(data, dict):
        raise SystemExit(f"Notes file must contain a JSON object of employee -> note: {path}")
    return {str(key): str(value) for key, value in data.items()}


def comparison_to_json(
    rows: list[ComparisonRow],
    prior_period: str,
    current_period: str,
    insights: str | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "prior_period": prior_period,
        "current_period": current_period,
        "summary": comparison_totals(rows),
        "rows": [row.to_dict() for row in rows],
    }
    if insights is not None:
        payload["insights"] = insights
    return payload


def output_human(rows: list[ComparisonRow], prior_period: str, current_period: str) -> None:
    table_rows = [
        [
            row.employee_name,
            format_money(row.prior_amount),
            format_money(row.current_amount),
            format_delta(row.delta),
            format_percent(row.delta_percent),
            format_money(row.year_to_date),
            row.note,
        ]
        for row in rows
    ]
    console.print_table(
        f"PP{prior_period} vs PP{current_period}",
        ["Employee", "Prior", "Current", "Delta", "Delta %", "YTD", "Notes"],
        table_rows,
        numeric_columns=["Prior", "Current", "Delta", "Delta %", "YTD"],
    )
    totals = comparison_totals(rows)
    console.print_text(
        f"Employees: {totals['employee_count']}  Changed: {totals['changed_count']}  "
        f"Prior total: {format_money(float(totals['prior_total']))}  "
        f"Current total: {format_money(float(totals['current_total']))}"
    )


def resolve_periods(args: argparse.Namespace, periods: list[str]) -> tuple[str, str]:
    default_pair = default_period_pair(periods)
    if default_pair is None:
        raise SystemExit("No pay periods found in the period column.")

    prior = args.prior or console.ask_input("Prior pay period", default=default_pair[0])
    current = args.current or console.ask_input("Current pay period", default=default_pair[1])

    unknown = [period for period in (prior, current) if period not in periods]
    if unknown:
        raise SystemExit(f"Unknown pay period(s): {', '.join(unknown)}. Known periods: {', '.join(periods)}")
    return prior, current


def main() -> None:
    parser = argparse.ArgumentParser(description="Compare payroll amounts per employee between two pay periods.")
    add_dataset_arguments(parser)
    parser.add_argument("--prior", default=None, help="Prior pay period (default: second to last period).")
    parser.add_argument("--current", default=None, help="Current pay period (default: last period).")
    parser.add_argument("--notes-json", type=Path, default=None, help="JSON object of employee -> note to merge in.")
    parser.add_argument("--json", action="store_true", help="Output machine-readable JSON.")
    parser.add_argument(
        "--csv-out",
        type=Path,
        default=None,
        help="Write the comparison CSV here. A directory gets the default file name.",
    )
    parser.add_argument("--save-snapshot", action="store_true", help="Persist the comparison as a named snapshot.")
    parser.add_argument("--snapshot-name", default=None, help="Snapshot name (default: 'PP<prior> vs PP<current> - <date>').")
    parser.add_argument("--data-dir", type=Path, default=None, help="Storage directory for snapshots.")
    parser.add_argument("--insights", action="store_true", help="Ask the AI service for a short narrative.")
    args = parser.parse_args()
    configure_logging(args.verbose)

    parsed, mapping = load_dataset(args)
    periods = unique_periods(parsed.rows, mapping)
    prior, current = resolve_periods(args, periods)

    notes = read_notes(args.notes_json) if args.notes_json else {}
    rows = build_comparison_rows(parsed.rows, mapping, prior, current, notes)

    insights = None
    if args.insights:
        try:
            insights = generate_insights(rows, prior, current)
        except InsightsError as e:
            console.print_error(str(e), exit_code=2)

    if args.csv_out:
        csv_path = args.csv_out
        if csv_path.is_dir():
            csv_path = csv_path / export_filename(prior, current)
        write_comparison_csv(csv_path, rows)
        if not args.json:
            console.print_success(f"Wrote {csv_path}")

    if args.save_snapshot:
        store = SnapshotStore(args.data_dir)
        snapshot = create_snapshot(rows, prior, current, name=args.snapshot_name, ai_insight=insights)
        store.save_snapshot(snapshot)
        if not args.json:
            console.print_success(f"Saved snapshot {snapshot.id} ({snapshot.name})")

    if args.json:
        json.dump(comparison_to_json(rows, prior, current, insights), sys.stdout, indent=2)
        sys.stdout.write("\n")
        return

    output_human(rows, prior, current)
    if insights:
        console.print_step("AI Insights")
        console.print_text(insights)


if __name__ == "__main__":
    main()
