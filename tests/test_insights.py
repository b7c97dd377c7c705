import math
from types import SimpleNamespace
from unittest.mock import MagicMock

import anthropic
import httpx
import pytest

from payroll_compare.comparison import ComparisonRow
from payroll_compare.insights import (
    DEFAULT_MODEL,
    SYSTEM_PROMPT,
    InsightsError,
    build_user_prompt,
    format_comparison_table,
    generate_insights,
    make_client,
    resolve_model,
    response_text,
)

REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")

ROWS = [
    ComparisonRow("Alice", "Alice", 1000.0, 1200.0, 200.0, 20.0, 2200.0),
    ComparisonRow("Bob", "Bob", 0.0, 500.0, 500.0, math.inf, 500.0, "new hire"),
]


def text_response(*texts):
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=t) for t in texts])


def status_error(cls, status, message):
    return cls(message, response=httpx.Response(status, request=REQUEST), body=None)


@pytest.fixture
def client():
    mock = MagicMock()
    mock.messages.create.return_value = text_response("Bob is a new hire. ", "Alice got a raise.")
    return mock


@pytest.mark.unit
def test_comparison_table():
    table = format_comparison_table(ROWS)
    lines = table.splitlines()
    assert lines[0] == "Employee Name | Prior Amount | Current Amount | Delta | Delta % | YTD"
    assert lines[2] == "Alice | $1,000.00 | $1,200.00 | $200.00 | 20.0% | $2,200.00"
    assert lines[3] == "Bob | $0.00 | $500.00 | $500.00 | N/A | $500.00"


@pytest.mark.unit
def test_user_prompt_summary():
    prompt = build_user_prompt(ROWS, "1", "2")
    assert 'pay period "1" (prior) and "2" (current)' in prompt
    assert "- Total employees: 2" in prompt
    assert "- Employees with changes: 2" in prompt
    assert "- Total prior period: $1,000.00" in prompt
    assert "- Total current period: $1,700.00" in prompt


@pytest.mark.unit
def test_generate_insights_calls_messages_api(client):
    text = generate_insights(ROWS, "1", "2", client=client, model="test-model")
    assert text == "Bob is a new hire. Alice got a raise."

    kwargs = client.messages.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["max_tokens"] == 500
    assert kwargs["temperature"] == 0.3
    assert kwargs["system"] == SYSTEM_PROMPT
    assert kwargs["messages"][0]["role"] == "user"
    assert "Bob | $0.00" in kwargs["messages"][0]["content"]


@pytest.mark.unit
def test_input_validation(client):
    with pytest.raises(InsightsError) as excinfo:
        generate_insights([], "1", "2", client=client)
    assert excinfo.value.status == 400
    assert str(excinfo.value) == "No comparison data provided"

    with pytest.raises(InsightsError, match="Missing period information"):
        generate_insights(ROWS, "", "2", client=client)
    client.messages.create.assert_not_called()


@pytest.mark.unit
def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    with pytest.raises(InsightsError) as excinfo:
        make_client()
    assert excinfo.value.status == 503
    assert "ANTHROPIC_API_KEY" in str(excinfo.value)


@pytest.mark.unit
def test_make_client_from_env(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    assert isinstance(make_client(), anthropic.Anthropic)


@pytest.mark.unit
def test_resolve_model(monkeypatch):
    monkeypatch.delenv("PAYROLL_COMPARE_MODEL", raising=False)
    assert resolve_model() == DEFAULT_MODEL
    monkeypatch.setenv("PAYROLL_COMPARE_MODEL", "env-model")
    assert resolve_model() == "env-model"
    assert resolve_model("explicit") == "explicit"


@pytest.mark.unit
@pytest.mark.parametrize(
    "error,status,message",
    [
        (status_error(anthropic.RateLimitError, 429, "slow down"), 429, "Service busy. Please try again in a moment."),
        (
            status_error(anthropic.AuthenticationError, 401, "bad key"),
            503,
            "AI service authentication failed. Contact administrator.",
        ),
        (status_error(anthropic.InternalServerError, 500, "Overloaded"), 500, "AI service error: Overloaded"),
        (anthropic.APIConnectionError(request=REQUEST), 500, "Failed to generate insights. Please try again."),
    ],
)
def test_api_errors_are_mapped(client, error, status, message):
    client.messages.create.side_effect = error
    with pytest.raises(InsightsError) as excinfo:
        generate_insights(ROWS, "1", "2", client=client)
    assert excinfo.value.status == status
    assert str(excinfo.value) == message


@pytest.mark.unit
def test_empty_response(client):
    client.messages.create.return_value = SimpleNamespace(content=[SimpleNamespace(type="tool_use")])
    with pytest.raises(InsightsError, match="No insights generated"):
        generate_insights(ROWS, "1", "2", client=client)


@pytest.mark.unit
def test_response_text_strips_and_ignores_non_text():
    response = SimpleNamespace(content=[SimpleNamespace(type="thinking"), SimpleNamespace(type="text", text="  ok ")])
    assert response_text(response) == "ok"
    assert response_text(SimpleNamespace(content=None)) == ""
