from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from payroll_compare.core import ColumnMapping

REQUIRED_ROLES = ("employee_name", "amount", "pay_period")
OPTIONAL_ROLES = ("department",)
ROLE_LABELS = {
    "employee_name": "Employee Name",
    "amount": "Amount",
    "pay_period": "Pay Period",
    "department": "Department",
}


@dataclass(frozen=True)
class ColumnPreferences:
    employee_name: str | None
    amount: str | None
    pay_period: str | None
    department: str | None
    saved_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "employee_name": self.employee_name,
            "amount": self.amount,
            "pay_period": self.pay_period,
            "department": self.department,
            "saved_at": self.saved_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ColumnPreferences:
        return cls(
            employee_name=data.get("employee_name"),
            amount=data.get("amount"),
            pay_period=data.get("pay_period"),
            department=data.get("department"),
            saved_at=str(data.get("saved_at", "")),
        )


def mapping_to_dict(mapping: ColumnMapping) -> dict[str, str | None]:
    return {
        "employee_name": mapping.employee_name,
        "amount": mapping.amount,
        "pay_period": mapping.pay_period,
        "department": mapping.department,
    }


def mapping_from_dict(data: Mapping[str, Any]) -> ColumnMapping:
    return ColumnMapping(
        employee_name=str(data["employee_name"]),
        amount=str(data["amount"]),
        pay_period=str(data["pay_period"]),
        department=data.get("department") or None,
    )


def validate_mapping(mapping: Mapping[str, str | None], headers: list[str]) -> list[str]:
    """
    Check a role -> column selection before it is used.

    Returns a list of human readable problems; an empty list means the mapping is usable.
    """
    errors: list[str] = []
    known = set(headers)

    for role in REQUIRED_ROLES:
        column = mapping.get(role)
        if not column:
            errors.append(f"{ROLE_LABELS[role]} column is required.")
        elif column not in known:
            errors.append(f"{ROLE_LABELS[role]} column '{column}' is not in the uploaded file.")

    for role in OPTIONAL_ROLES:
        column = mapping.get(role)
        if column and column not in known:
            errors.append(f"{ROLE_LABELS[role]} column '{column}' is not in the uploaded file.")

    used: dict[str, str] = {}
    for role in REQUIRED_ROLES + OPTIONAL_ROLES:
        column = mapping.get(role)
        if not column:
            continue
        if column in used:
            errors.append(f"Column '{column}' is assigned to both {ROLE_LABELS[used[column]]} and {ROLE_LABELS[role]}.")
        else:
            used[column] = role

    return errors


def preferences_from_mapping(mapping: ColumnMapping, now: datetime | None = None) -> ColumnPreferences:
    saved_at = (now or datetime.now(timezone.utc)).isoformat()
    return ColumnPreferences(
        employee_name=mapping.employee_name,
        amount=mapping.amount,
        pay_period=mapping.pay_period,
        department=mapping.department,
        saved_at=saved_at,
    )


def suggest_mapping(headers: list[str], preferences: ColumnPreferences | None) -> dict[str, str | None]:
    # Only headers present in this upload are preselected.
    suggestion: dict[str, str | None] = {role: None for role in REQUIRED_ROLES + OPTIONAL_ROLES}
    if preferences is None:
        return suggestion

    known = set(headers)
    for role in suggestion:
        remembered = getattr(preferences, role)
        if remembered and remembered in known:
            suggestion[role] = remembered
    return suggestion
