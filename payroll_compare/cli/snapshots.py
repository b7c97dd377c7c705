"""
CLI Entry Point: payroll-snapshots

List, show, export and delete saved comparisons.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from payroll_compare.core import format_delta, format_money, format_percent
from payroll_compare.export import export_filename, write_comparison_csv
from payroll_compare.snapshots import SnapshotNotFoundError, SnapshotStore
from payroll_compare.utils import console


def cmd_list(store: SnapshotStore, args: argparse.Namespace) -> None:
    snapshots = store.load_snapshots()
    if args.json:
        print(
            json.dumps(
                [
                    {
                        "id": item.id,
                        "name": item.name,
                        "prior_period": item.prior_period,
                        "current_period": item.current_period,
                        "saved_at": item.saved_at,
                        "employee_count": len(item.rows),
                        "has_ai_insight": bool(item.ai_insight),
                    }
                    for item in snapshots
                ],
                indent=2,
            )
        )
        return
    console.print_table(
        "Saved Comparisons",
        ["ID", "Name", "Prior", "Current", "Employees", "Saved At"],
        [
            [item.id, item.name, item.prior_period, item.current_period, str(len(item.rows)), item.saved_at]
            for item in snapshots
        ],
    )


def cmd_show(store: SnapshotStore, args: argparse.Namespace) -> None:
    snapshot = store.get_snapshot(args.snapshot_id)
    if args.json:
        print(json.dumps(snapshot.to_dict(), indent=2))
        return
    console.print_table(
        snapshot.name,
        ["Employee", "Prior", "Current", "Delta", "Delta %", "YTD", "Notes"],
        [
            [
                row.employee_name,
                format_money(row.prior_amount),
                format_money(row.current_amount),
                format_delta(row.delta),
                format_percent(row.delta_percent),
                format_money(row.year_to_date),
                row.note,
            ]
            for row in snapshot.rows
        ],
        numeric_columns=["Prior", "Current", "Delta", "Delta %", "YTD"],
    )
    if snapshot.ai_insight:
        console.print_step("AI Insights")
        console.print_text(snapshot.ai_insight)


def cmd_export(store: SnapshotStore, args: argparse.Namespace) -> None:
    snapshot = store.get_snapshot(args.snapshot_id)
    out = args.out or Path(export_filename(snapshot.prior_period, snapshot.current_period))
    write_comparison_csv(out, snapshot.rows)
    console.print_success(f"Wrote {out}")


def cmd_delete(store: SnapshotStore, args: argparse.Namespace) -> None:
    if not args.yes and not console.ask_confirm(f"Delete snapshot {args.snapshot_id}?", default=False):
        console.print_warning("Nothing deleted.")
        return
    if store.delete_snapshot(args.snapshot_id):
        console.print_success(f"Deleted snapshot {args.snapshot_id}")
    else:
        console.print_error(f"Snapshot not found: {args.snapshot_id}", exit_code=1)


def main() -> None:
    parser = argparse.ArgumentParser(description="Manage saved payroll comparisons.")
    parser.add_argument("--data-dir", type=Path, default=None, help="Storage directory for snapshots.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List saved comparisons, newest first.")
    list_parser.add_argument("--json", action="store_true")
    list_parser.set_defaults(handler=cmd_list)

    show_parser = subparsers.add_parser("show", help="Show one saved comparison.")
    show_parser.add_argument("snapshot_id")
    show_parser.add_argument("--json", action="store_true")
    show_parser.set_defaults(handler=cmd_show)

    export_parser = subparsers.add_parser("export", help="Export a saved comparison to CSV.")
    export_parser.add_argument("snapshot_id")
    export_parser.add_argument("--out", type=Path, default=None)
    export_parser.set_defaults(handler=cmd_export)

    delete_parser = subparsers.add_parser("delete", help="Delete a saved comparison.")
    delete_parser.add_argument("snapshot_id")
    delete_parser.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation.")
    delete_parser.set_defaults(handler=cmd_delete)

    args = parser.parse_args()
    store = SnapshotStore(args.data_dir)
    try:
        args.handler(store, args)
    except SnapshotNotFoundError:
        console.print_error(f"Snapshot not found: {args.snapshot_id}", exit_code=1)


if __name__ == "__main__":
    main()
