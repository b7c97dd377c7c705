import pytest

from payroll_compare.core import ColumnMapping


@pytest.fixture
def mapping() -> ColumnMapping:
    """Mapping for the small name/amt/period/dept fixtures below."""
    return ColumnMapping(employee_name="name", amount="amt", pay_period="period", department="dept")


@pytest.fixture
def basic_rows() -> list[dict[str, str]]:
    """Two-period scenario: Alice in both periods, Bob only in the current one."""
    return [
        {"name": "Alice", "amt": "$1,000.00", "period": "1", "dept": "Instruction"},
        {"name": "Alice", "amt": "$1,200.00", "period": "2", "dept": "Instruction"},
        {"name": "Bob", "amt": "500", "period": "2", "dept": ""},
    ]


@pytest.fixture
def ledger_rows() -> list[dict[str, str]]:
    """Multi-line ledger with split pay components, blanks and junk amounts."""
    return [
        {"name": " Carol ", "amt": "100.50", "period": "10", "dept": "Transport"},
        {"name": "Alice", "amt": "200", "period": "2", "dept": "Instruction"},
        {"name": "Alice", "amt": "50", "period": "2", "dept": "Instruction"},
        {"name": "Bob", "amt": "N/A", "period": "2", "dept": ""},
        {"name": "Carol", "amt": "$ 99.50", "period": "2", "dept": "Transport"},
        {"name": "", "amt": "999", "period": "2", "dept": "Ghost"},
        {"name": "Alice", "amt": "300", "period": "", "dept": "Instruction"},
        {"name": "Bob", "amt": "75", "period": "1", "dept": "Food Service"},
        {"name": "Alice", "amt": "1,000", "period": "1", "dept": "Instruction"},
    ]


@pytest.fixture
def payroll_csv_text() -> str:
    return (
        "Employee,Amount,Pay Period,DAC\n"
        'Alice,"$1,000.00",1,Instruction\n'
        'Alice,"$1,200.00",2,Instruction\n'
        "Bob,500,2,\n"
    )
