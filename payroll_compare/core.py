#!/usr/bin/env python3

from __future__ import annotations

import functools
import math
import re
import unicodedata
from dataclasses import dataclass
from typing import Iterable, Mapping, NamedTuple, NewType

UNKNOWN_DEPARTMENT = "Unknown"

# Longest numeric prefix accepted by loose parsing ("12.5abc" -> 12.5, ".5" -> 0.5, "1e3x" -> 1000).
LEADING_NUMBER_RE = re.compile(r"[+-]?(?:Infinity|(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")
CURRENCY_DECORATION_RE = re.compile(r"[$,\s]")

RawRow = Mapping[str, "str | None"]
EmployeeKey = NewType("EmployeeKey", str)


@dataclass(frozen=True)
class ColumnMapping:
    employee_name: str
    amount: str
    pay_period: str
    department: str | None = None


class PeriodTotal(NamedTuple):
    period: str
    total: float


class DepartmentTotal(NamedTuple):
    department: str
    total: float


def loose_float(text: str | None) -> float | None:
    """Parse the leading numeric prefix of ``text``; ``None`` when there is none."""
    if text is None:
        return None
    match = LEADING_NUMBER_RE.match(text.lstrip())
    if match is None:
        return None
    token = match.group(0)
    if token.endswith("Infinity"):
        return -math.inf if token.startswith("-") else math.inf
    return float(token)


def parse_amount(raw: str | None) -> float:
    """
    Parse a payroll amount cell, ignoring $, commas and whitespace.

    Missing, unparsable and non-finite values (including "Infinity") all count as 0.
    """
    if not raw:
        return 0.0
    parsed = loose_float(CURRENCY_DECORATION_RE.sub("", raw))
    if parsed is None or not math.isfinite(parsed):
        return 0.0
    return parsed


def collation_key(label: str) -> tuple[str, str]:
    # Case- and accent-insensitive primary order, raw string as tie-breaker.
    folded = unicodedata.normalize("NFKD", label)
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch)).casefold()
    return (folded, label)


def compare_periods(a: str, b: str) -> int:
    num_a = loose_float(a)
    num_b = loose_float(b)
    if num_a is not None and num_b is not None:
        if num_a < num_b:
            return -1
        if num_a > num_b:
            return 1
        return 0

    key_a = collation_key(a)
    key_b = collation_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0


period_sort_key = functools.cmp_to_key(compare_periods)


def sort_periods(periods: Iterable[str]) -> list[str]:
    return sorted(periods, key=period_sort_key)


def cell(row: RawRow, column: str | None) -> str | None:
    """Trimmed cell value, or ``None`` when the column is unmapped, absent or blank."""
    if not column:
        return None
    value = row.get(column)
    if value is None:
        return None
    value = value.strip()
    return value or None


def employee_key(value: str | None) -> EmployeeKey | None:
    """
    Identity policy for employees.

    Two rows belong to the same employee when their trimmed name strings are equal.
    Every aggregation derives identity through this function only.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    return EmployeeKey(value)


def row_employee(row: RawRow, mapping: ColumnMapping) -> EmployeeKey | None:
    return employee_key(cell(row, mapping.employee_name))


def row_period(row: RawRow, mapping: ColumnMapping) -> str | None:
    return cell(row, mapping.pay_period)


def row_amount(row: RawRow, mapping: ColumnMapping) -> float:
    return parse_amount(row.get(mapping.amount))


def row_department(row: RawRow, mapping: ColumnMapping) -> str | None:
    return cell(row, mapping.department)


def unique_periods(rows: Iterable[RawRow], mapping: ColumnMapping) -> list[str]:
    seen: dict[str, None] = {}
    for row in rows:
        period = row_period(row, mapping)
        if period is not None:
            seen.setdefault(period, None)
    return sort_periods(seen)


def unique_employees(rows: Iterable[RawRow], mapping: ColumnMapping) -> list[EmployeeKey]:
    seen: set[EmployeeKey] = set()
    for row in rows:
        employee = row_employee(row, mapping)
        if employee is not None:
            seen.add(employee)
    return sorted(seen)


def sum_by_employee(rows: Iterable[RawRow], mapping: ColumnMapping, period: str) -> dict[EmployeeKey, float]:
    totals: dict[EmployeeKey, float] = {}
    for row in rows:
        if row_period(row, mapping) != period:
            continue
        employee = row_employee(row, mapping)
        if employee is None:
            continue
        totals[employee] = totals.get(employee, 0.0) + row_amount(row, mapping)
    return totals


def sum_by_period(rows: Iterable[RawRow], mapping: ColumnMapping) -> list[PeriodTotal]:
    totals: dict[str, float] = {}
    for row in rows:
        period = row_period(row, mapping)
        if period is None:
            continue
        totals[period] = totals.get(period, 0.0) + row_amount(row, mapping)
    return [PeriodTotal(period, totals[period]) for period in sort_periods(totals)]


def sum_by_department(rows: Iterable[RawRow], mapping: ColumnMapping) -> list[DepartmentTotal]:
    totals: dict[str, float] = {}
    for row in rows:
        department = row_department(row, mapping) or UNKNOWN_DEPARTMENT
        totals[department] = totals.get(department, 0.0) + row_amount(row, mapping)
    # sorted() is stable, so equal totals keep first-seen order.
    ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [DepartmentTotal(department, total) for department, total in ordered]


def ytd_window(through_period: str, sorted_periods: list[str]) -> set[str] | None:
    try:
        through_index = sorted_periods.index(through_period)
    except ValueError:
        return None
    return set(sorted_periods[: through_index + 1])


def year_to_date(
    rows: Iterable[RawRow],
    mapping: ColumnMapping,
    employee: str,
    through_period: str,
    sorted_periods: list[str],
) -> float:
    window = ytd_window(through_period, sorted_periods)
    if window is None:
        return 0.0

    total = 0.0
    for row in rows:
        if row_employee(row, mapping) != employee:
            continue
        period = row_period(row, mapping)
        if period is None or period not in window:
            continue
        total += row_amount(row, mapping)
    return total


def year_to_date_by_employee(
    rows: Iterable[RawRow],
    mapping: ColumnMapping,
    through_period: str,
    sorted_periods: list[str],
) -> dict[EmployeeKey, float]:
    """
    YTD for every employee in one pass.

    Each employee's additions happen in row order, exactly as in ``year_to_date``,
    so the per-employee results are bit-identical to calling it one at a time.
    """
    window = ytd_window(through_period, sorted_periods)
    if window is None:
        return {}

    totals: dict[EmployeeKey, float] = {}
    for row in rows:
        employee = row_employee(row, mapping)
        if employee is None:
            continue
        period = row_period(row, mapping)
        if period is None or period not in window:
            continue
        totals[employee] = totals.get(employee, 0.0) + row_amount(row, mapping)
    return totals


def format_money(value: float) -> str:
    if value < 0:
        return f"-${abs(value):,.2f}"
    return f"${value:,.2f}"


def format_percent(value: float) -> str:
    if not math.isfinite(value):
        return "N/A"
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.2f}%"


def format_delta(value: float) -> str:
    sign = "+" if value > 0 else ""
    return f"{sign}{format_money(value)}"
