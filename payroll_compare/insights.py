"""
AI narrative for a comparison.

Formats comparison rows into a prompt and asks the Anthropic Messages API for a
short auditor-style summary. The comparison rows and the two period labels are
the only input.
"""

from __future__ import annotations

import logging
import math
import os
from typing import Any, Sequence

import anthropic

from payroll_compare.comparison import ComparisonRow, comparison_totals

logger = logging.getLogger(__name__)

API_KEY_ENV = "ANTHROPIC_API_KEY"
MODEL_ENV = "PAYROLL_COMPARE_MODEL"
DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
DEFAULT_MAX_TOKENS = 500
DEFAULT_TEMPERATURE = 0.3

SYSTEM_PROMPT = """You are a senior payroll auditor analyzing pay period comparison data.
Your job is to identify anomalies, significant changes, and items that require attention.
Be specific with employee names and dollar amounts.
Flag any patterns that could indicate errors, fraud, or items needing review.
Keep your response to 1-2 concise paragraphs.
Focus on the most important findings that would matter to a CFO or payroll manager."""


class InsightsError(RuntimeError):
    """Raised when a narrative cannot be produced. ``status`` mirrors an HTTP status class."""

    def __init__(self, message: str, status: int = 500) -> None:
        super().__init__(message)
        self.status = status


def money(value: float) -> str:
    return f"${value:,.2f}"


def format_comparison_table(rows: Sequence[ComparisonRow]) -> str:
    lines = [
        "Employee Name | Prior Amount | Current Amount | Delta | Delta % | YTD",
        "---|---|---|---|---|---",
    ]
    for row in rows:
        percent = f"{row.delta_percent:.1f}%" if math.isfinite(row.delta_percent) else "N/A"
        lines.append(
            f"{row.employee_name} | {money(row.prior_amount)} | {money(row.current_amount)} | "
            f"{money(row.delta)} | {percent} | {money(row.year_to_date)}"
        )
    return "\n".join(lines)


def build_user_prompt(rows: Sequence[ComparisonRow], prior_period: str, current_period: str) -> str:
    totals = comparison_totals(rows)
    return (
        f'Analyze this payroll comparison between pay period "{prior_period}" (prior) '
        f'and "{current_period}" (current).\n'
        "\n"
        f"{format_comparison_table(rows)}\n"
        "\n"
        "Summary:\n"
        f"- Total employees: {totals['employee_count']}\n"
        f"- Employees with changes: {totals['changed_count']}\n"
        f"- Total prior period: {money(float(totals['prior_total']))}\n"
        f"- Total current period: {money(float(totals['current_total']))}\n"
        "\n"
        "Identify anomalies, significant changes, and items needing review. Be specific with names and amounts."
    )


def resolve_model(model: str | None = None) -> str:
    return model or os.environ.get(MODEL_ENV) or DEFAULT_MODEL


def make_client(api_key: str | None = None) -> anthropic.Anthropic:
    key = api_key or os.environ.get(API_KEY_ENV)
    if not key:
        raise InsightsError("AI Insights not configured. Set ANTHROPIC_API_KEY.", status=503)
    return anthropic.Anthropic(api_key=key)


def response_text(response: Any) -> str:
    parts = []
    for block in getattr(response, "content", None) or []:
        if getattr(block, "type", None) == "text":
            parts.append(block.text)
    return "".join(parts).strip()


def generate_insights(
    rows: Sequence[ComparisonRow],
    prior_period: str,
    current_period: str,
    client: anthropic.Anthropic | None = None,
    model: str | None = None,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    temperature: float = DEFAULT_TEMPERATURE,
) -> str:
    if not rows:
        raise InsightsError("No comparison data provided", status=400)
    if not prior_period or not current_period:
        raise InsightsError("Missing period information", status=400)

    client = client or make_client()
    model_name = resolve_model(model)
    logger.info("Requesting insights for %d rows (%s vs %s) from %s.", len(rows), prior_period, current_period, model_name)

    try:
        response = client.messages.create(
            model=model_name,
            max_tokens=max_tokens,
            temperature=temperature,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": build_user_prompt(rows, prior_period, current_period)}],
        )
    except anthropic.RateLimitError as e:
        raise InsightsError("Service busy. Please try again in a moment.", status=429) from e
    except anthropic.AuthenticationError as e:
        raise InsightsError("AI service authentication failed. Contact administrator.", status=503) from e
    except anthropic.APIStatusError as e:
        raise InsightsError(f"AI service error: {e.message}", status=500) from e
    except anthropic.APIError as e:
        logger.error("AI insights request failed: %s", e)
        raise InsightsError("Failed to generate insights. Please try again.", status=500) from e

    text = response_text(response)
    if not text:
        raise InsightsError("No insights generated", status=500)
    return text
