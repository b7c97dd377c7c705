"""
CLI Entry Point: payroll-dashboard

Totals by pay period and department plus summary statistics.
"""

from __future__ import annotations

import argparse
import json

from payroll_compare.cli.common import add_dataset_arguments, configure_logging, load_dataset
from payroll_compare.core import format_money
from payroll_compare.dashboard import dashboard_payload, dashboard_stats, department_totals, period_totals
from payroll_compare.utils import console


def main() -> None:
    parser = argparse.ArgumentParser(description="Summarize a payroll CSV by pay period and department.")
    add_dataset_arguments(parser)
    parser.add_argument("--json", action="store_true", help="Output machine-readable JSON.")
    args = parser.parse_args()
    configure_logging(args.verbose)

    parsed, mapping = load_dataset(args)

    if args.json:
        print(json.dumps(dashboard_payload(parsed.rows, mapping), indent=2))
        return

    stats = dashboard_stats(parsed.rows, mapping)
    console.print_table(
        "Summary",
        ["Total Payroll", "Employees", "Pay Periods", "Departments", "Average per Period"],
        [
            [
                format_money(stats.total_payroll),
                str(stats.employee_count),
                str(stats.period_count),
                str(stats.department_count),
                format_money(stats.average_payroll),
            ]
        ],
    )
    console.print_table(
        "Payroll by Pay Period",
        ["Pay Period", "Total"],
        [[item.period, format_money(item.total)] for item in period_totals(parsed.rows, mapping)],
        numeric_columns=["Total"],
    )
    console.print_table(
        "Payroll by Department",
        ["Department", "Total"],
        [[item.department, format_money(item.total)] for item in department_totals(parsed.rows, mapping)],
        numeric_columns=["Total"],
    )


if __name__ == "__main__":
    main()
