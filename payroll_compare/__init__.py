from payroll_compare.core import (
    UNKNOWN_DEPARTMENT,
    ColumnMapping,
    DepartmentTotal,
    EmployeeKey,
    PeriodTotal,
    compare_periods,
    employee_key,
    loose_float,
    parse_amount,
    sort_periods,
    sum_by_department,
    sum_by_employee,
    sum_by_period,
    unique_employees,
    unique_periods,
    year_to_date,
    year_to_date_by_employee,
)
from payroll_compare.comparison import (
    ComparisonRow,
    build_comparison_rows,
    comparison_totals,
    default_period_pair,
    delta_percent,
)
from payroll_compare.dashboard import DashboardStats, dashboard_stats, department_totals, period_totals

__version__ = "0.2.0"

__all__ = [
    "UNKNOWN_DEPARTMENT",
    "ColumnMapping",
    "ComparisonRow",
    "DashboardStats",
    "DepartmentTotal",
    "EmployeeKey",
    "PeriodTotal",
    "build_comparison_rows",
    "compare_periods",
    "comparison_totals",
    "dashboard_stats",
    "default_period_pair",
    "delta_percent",
    "department_totals",
    "employee_key",
    "loose_float",
    "parse_amount",
    "period_totals",
    "sort_periods",
    "sum_by_department",
    "sum_by_employee",
    "sum_by_period",
    "unique_employees",
    "unique_periods",
    "year_to_date",
    "year_to_date_by_employee",
]
