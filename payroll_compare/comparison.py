#!/usr/bin/env python3

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Mapping, Sequence

from payroll_compare.core import (
    ColumnMapping,
    RawRow,
    sum_by_employee,
    unique_employees,
    unique_periods,
    year_to_date_by_employee,
)

logger = logging.getLogger(__name__)

DELTA_PERCENT_FINITE = "finite"
DELTA_PERCENT_INFINITE_GROWTH = "infinite_growth"


@dataclass(frozen=True)
class ComparisonRow:
    employee_key: str
    employee_name: str
    prior_amount: float
    current_amount: float
    delta: float
    delta_percent: float
    year_to_date: float
    note: str = ""

    @property
    def is_infinite_growth(self) -> bool:
        return not math.isfinite(self.delta_percent)

    def with_note(self, note: str) -> ComparisonRow:
        return replace(self, note=note)

    def to_dict(self) -> dict[str, Any]:
        finite = math.isfinite(self.delta_percent)
        return {
            "employee_key": self.employee_key,
            "employee_name": self.employee_name,
            "prior_amount": self.prior_amount,
            "current_amount": self.current_amount,
            "delta": self.delta,
            "delta_percent": self.delta_percent if finite else None,
            "delta_percent_kind": DELTA_PERCENT_FINITE if finite else DELTA_PERCENT_INFINITE_GROWTH,
            "year_to_date": self.year_to_date,
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ComparisonRow:
        kind = data.get("delta_percent_kind", DELTA_PERCENT_FINITE)
        raw_percent = data.get("delta_percent")
        if kind == DELTA_PERCENT_INFINITE_GROWTH or raw_percent is None:
            delta_percent = math.inf
        else:
            delta_percent = float(raw_percent)
        return cls(
            employee_key=str(data["employee_key"]),
            employee_name=str(data.get("employee_name") or data["employee_key"]),
            prior_amount=float(data["prior_amount"]),
            current_amount=float(data["current_amount"]),
            delta=float(data["delta"]),
            delta_percent=delta_percent,
            year_to_date=float(data["year_to_date"]),
            note=str(data.get("note") or ""),
        )


def delta_percent(prior_amount: float, current_amount: float) -> float:
    """
    Percentage change from prior to current.

    A zero prior with a non-zero current is infinite growth (``math.inf``);
    zero to zero is no change.
    """
    if prior_amount != 0:
        return ((current_amount - prior_amount) / prior_amount) * 100
    if current_amount != 0:
        return math.inf
    return 0.0


def build_comparison_rows(
    rows: Sequence[RawRow],
    mapping: ColumnMapping,
    prior_period: str,
    current_period: str,
    existing_notes: Mapping[str, str] | None = None,
) -> list[ComparisonRow]:
    notes = existing_notes or {}
    sorted_periods = unique_periods(rows, mapping)
    employees = unique_employees(rows, mapping)

    prior_sums = sum_by_employee(rows, mapping, prior_period)
    current_sums = sum_by_employee(rows, mapping, current_period)
    ytd_sums = year_to_date_by_employee(rows, mapping, current_period, sorted_periods)

    if current_period not in sorted_periods:
        logger.warning("Current period %r is not present in the dataset; YTD defaults to 0.", current_period)

    result: list[ComparisonRow] = []
    for employee in employees:
        prior_amount = prior_sums.get(employee, 0.0)
        current_amount = current_sums.get(employee, 0.0)
        result.append(
            ComparisonRow(
                employee_key=employee,
                employee_name=employee,
                prior_amount=prior_amount,
                current_amount=current_amount,
                delta=current_amount - prior_amount,
                delta_percent=delta_percent(prior_amount, current_amount),
                year_to_date=ytd_sums.get(employee, 0.0),
                note=notes.get(employee) or "",
            )
        )

    logger.debug(
        "Built %d comparison rows for %r vs %r from %d source rows.",
        len(result),
        prior_period,
        current_period,
        len(rows),
    )
    return result


def comparison_totals(rows: Sequence[ComparisonRow]) -> dict[str, float | int]:
    prior_total = 0.0
    current_total = 0.0
    changed = 0
    for row in rows:
        prior_total += row.prior_amount
        current_total += row.current_amount
        if row.delta != 0:
            changed += 1
    return {
        "employee_count": len(rows),
        "changed_count": changed,
        "prior_total": prior_total,
        "current_total": current_total,
        "delta_total": current_total - prior_total,
    }


def default_period_pair(sorted_periods: Sequence[str]) -> tuple[str, str] | None:
    """Latest two periods as (prior, current); a single period is compared with itself."""
    if not sorted_periods:
        return None
    if len(sorted_periods) == 1:
        return sorted_periods[0], sorted_periods[0]
    return sorted_periods[-2], sorted_periods[-1]
