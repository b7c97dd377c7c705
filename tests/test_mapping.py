from datetime import datetime, timezone

import pytest

from payroll_compare.core import ColumnMapping
from payroll_compare.mapping import (
    ColumnPreferences,
    mapping_from_dict,
    mapping_to_dict,
    preferences_from_mapping,
    suggest_mapping,
    validate_mapping,
)

HEADERS = ["Employee", "Amount", "Pay Period", "DAC"]


@pytest.mark.unit
def test_complete_mapping_is_valid():
    mapping = {"employee_name": "Employee", "amount": "Amount", "pay_period": "Pay Period", "department": "DAC"}
    assert validate_mapping(mapping, HEADERS) == []


@pytest.mark.unit
def test_department_is_optional():
    mapping = {"employee_name": "Employee", "amount": "Amount", "pay_period": "Pay Period", "department": None}
    assert validate_mapping(mapping, HEADERS) == []


@pytest.mark.unit
def test_missing_required_roles():
    errors = validate_mapping({"employee_name": "Employee"}, HEADERS)
    assert errors == ["Amount column is required.", "Pay Period column is required."]


@pytest.mark.unit
def test_unknown_columns():
    mapping = {"employee_name": "Name", "amount": "Amount", "pay_period": "Pay Period", "department": "Dept"}
    assert validate_mapping(mapping, HEADERS) == [
        "Employee Name column 'Name' is not in the uploaded file.",
        "Department column 'Dept' is not in the uploaded file.",
    ]


@pytest.mark.unit
def test_column_assigned_twice():
    mapping = {"employee_name": "Employee", "amount": "Employee", "pay_period": "Pay Period"}
    assert validate_mapping(mapping, HEADERS) == ["Column 'Employee' is assigned to both Employee Name and Amount."]


@pytest.mark.unit
def test_mapping_dict_round_trip():
    mapping = ColumnMapping("Employee", "Amount", "Pay Period")
    data = mapping_to_dict(mapping)
    assert data["department"] is None
    assert mapping_from_dict(data) == mapping
    assert mapping_from_dict({**data, "department": ""}).department is None


@pytest.mark.unit
def test_preferences_from_mapping():
    now = datetime(2026, 1, 12, 14, 30, tzinfo=timezone.utc)
    prefs = preferences_from_mapping(ColumnMapping("Employee", "Amount", "Pay Period", "DAC"), now=now)
    assert prefs.saved_at == "2026-01-12T14:30:00+00:00"
    assert ColumnPreferences.from_dict(prefs.to_dict()) == prefs


@pytest.mark.unit
def test_suggest_mapping_only_preselects_present_headers():
    prefs = ColumnPreferences("Employee", "Gross", "Pay Period", "DAC", "2026-01-12T00:00:00+00:00")
    assert suggest_mapping(["Employee", "Net", "Pay Period"], prefs) == {
        "employee_name": "Employee",
        "amount": None,
        "pay_period": "Pay Period",
        "department": None,
    }


@pytest.mark.unit
def test_suggest_mapping_without_preferences():
    assert set(suggest_mapping(HEADERS, None).values()) == {None}
