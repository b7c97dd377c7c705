from unittest.mock import patch

import pytest

from payroll_compare.comparison import build_comparison_rows
from payroll_compare.core import ColumnMapping, unique_periods
from payroll_compare.ingest import parse_csv_file
from payroll_compare.testing.fixtures import HEADERS, generate_rows, main_gen

MAPPING = ColumnMapping(employee_name="Employee", amount="Amount", pay_period="Pay Period", department="DAC")


@pytest.mark.unit
def test_generate_rows_is_deterministic():
    assert generate_rows(5, 4, seed=3) == generate_rows(5, 4, seed=3)


@pytest.mark.unit
def test_generated_ledger_has_new_hire_and_departure():
    rows = generate_rows(6, 4)
    assert unique_periods(rows, MAPPING) == ["1", "2", "3", "4"]

    by_key = {r.employee_key: r for r in build_comparison_rows(rows, MAPPING, "3", "4")}
    # First generated employee leaves after period 3, the last one is hired in period 4.
    assert by_key["Alice Nguyen"].current_amount == 0.0
    assert by_key["Alice Nguyen"].delta_percent == -100.0
    assert by_key["Farah Nguyen"].prior_amount == 0.0
    assert by_key["Farah Nguyen"].is_infinite_growth


@pytest.mark.integration
def test_main_gen_writes_parsable_csv(tmp_path, capsys):
    out = tmp_path / "fixtures" / "payroll.csv"
    with patch("sys.argv", ["payroll-generate-fixture", str(out), "--employees", "3", "--periods", "2"]):
        main_gen()

    parsed = parse_csv_file(out)
    assert parsed.headers == HEADERS
    assert "Generated payroll CSV" in capsys.readouterr().out
