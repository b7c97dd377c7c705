from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable

from payroll_compare.core import (
    ColumnMapping,
    DepartmentTotal,
    PeriodTotal,
    RawRow,
    row_amount,
    row_department,
    row_employee,
    row_period,
    sum_by_department,
    sum_by_period,
)


@dataclass(frozen=True)
class DashboardStats:
    total_payroll: float
    employee_count: int
    period_count: int
    department_count: int
    average_payroll: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def period_totals(rows: Iterable[RawRow], mapping: ColumnMapping) -> list[PeriodTotal]:
    return sum_by_period(rows, mapping)


def department_totals(rows: Iterable[RawRow], mapping: ColumnMapping) -> list[DepartmentTotal]:
    return sum_by_department(rows, mapping)


def dashboard_stats(rows: Iterable[RawRow], mapping: ColumnMapping) -> DashboardStats:
    """
    Summary statistics in a single pass.

    Unlike ``department_totals``, blank departments are not counted as "Unknown":
    only non-empty department values contribute to ``department_count``.
    """
    total = 0.0
    employees: set[str] = set()
    periods: set[str] = set()
    departments: set[str] = set()

    for row in rows:
        total += row_amount(row, mapping)
        employee = row_employee(row, mapping)
        if employee is not None:
            employees.add(employee)
        period = row_period(row, mapping)
        if period is not None:
            periods.add(period)
        department = row_department(row, mapping)
        if department is not None:
            departments.add(department)

    period_count = len(periods)
    return DashboardStats(
        total_payroll=total,
        employee_count=len(employees),
        period_count=period_count,
        department_count=len(departments),
        average_payroll=total / period_count if period_count > 0 else 0.0,
    )


def dashboard_payload(rows: list[RawRow], mapping: ColumnMapping) -> dict[str, Any]:
    return {
        "stats": dashboard_stats(rows, mapping).to_dict(),
        "period_totals": [{"period": item.period, "total": item.total} for item in period_totals(rows, mapping)],
        "department_totals": [
            {"department": item.department, "total": item.total} for item in department_totals(rows, mapping)
        ],
    }
