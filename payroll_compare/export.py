from __future__ import annotations

import csv
import io
import math
from datetime import date
from pathlib import Path
from typing import Sequence

from payroll_compare.comparison import ComparisonRow

EXPORT_FIELDNAMES = [
    "Employee",
    "Prior Amount",
    "Current Amount",
    "Delta",
    "Delta %",
    "Year to Date",
    "Notes",
]


def plain_number(value: float) -> float | int:
    # Raw values, no currency formatting; 1200.0 exports as 1200.
    if math.isfinite(value) and float(value).is_integer():
        return int(value)
    return value


def export_records(rows: Sequence[ComparisonRow]) -> list[dict[str, str | float | int]]:
    records: list[dict[str, str | float | int]] = []
    for row in rows:
        records.append(
            {
                "Employee": row.employee_name,
                "Prior Amount": plain_number(row.prior_amount),
                "Current Amount": plain_number(row.current_amount),
                "Delta": plain_number(row.delta),
                "Delta %": plain_number(row.delta_percent) if math.isfinite(row.delta_percent) else "N/A",
                "Year to Date": plain_number(row.year_to_date),
                "Notes": row.note,
            }
        )
    return records


def export_filename(prior_period: str, current_period: str, today: date | None = None) -> str:
    stamp = (today or date.today()).isoformat()
    return f"comparison-{prior_period}-vs-{current_period}-{stamp}.csv"


def comparison_csv_text(rows: Sequence[ComparisonRow]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_FIELDNAMES, lineterminator="\r\n")
    writer.writeheader()
    for record in export_records(rows):
        writer.writerow(record)
    return buffer.getvalue()


def write_comparison_csv(path: Path, rows: Sequence[ComparisonRow]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as handle:
        handle.write(comparison_csv_text(rows))
