#!/usr/bin/env python3
"""
Generates synthetic payroll CSV fixtures for demos and end-to-end tests.
"""

import argparse
import csv
import random
from pathlib import Path

HEADERS = ["Employee", "Pay Period", "Pay Code", "Amount", "DAC"]
DEPARTMENTS = ["Instruction", "Transportation", "Food Service", "Administration", ""]
PAY_CODES = ["REG", "OT", "STIPEND"]
FIRST_NAMES = ["Alice", "Bob", "Carmen", "Deepak", "Elena", "Farah", "Gus", "Hana", "Ivan", "June"]
LAST_NAMES = ["Nguyen", "Smith", "Okafor", "Garcia", "Kowalski", "Chen", "Haddad", "Novak"]


def generate_rows(employees: int, periods: int, seed: int = 7) -> list[dict[str, str]]:
    """
    Build payroll ledger lines: one regular line per employee per period, plus
    occasional overtime/stipend lines, a late hire and a departure.
    """
    rng = random.Random(seed)
    names = [f"{first} {last}" for last in LAST_NAMES for first in FIRST_NAMES][:employees]
    rows: list[dict[str, str]] = []
    for index, name in enumerate(names):
        base = rng.randrange(1500, 4500)
        department = DEPARTMENTS[index % len(DEPARTMENTS)]
        start = periods if index == len(names) - 1 and periods > 1 else 1
        end = periods - 1 if index == 0 and periods > 1 else periods
        for period in range(start, end + 1):
            rows.append(
                {
                    "Employee": name,
                    "Pay Period": str(period),
                    "Pay Code": "REG",
                    "Amount": f"${base:,.2f}",
                    "DAC": department,
                }
            )
            if rng.random() < 0.3:
                code = rng.choice(PAY_CODES[1:])
                rows.append(
                    {
                        "Employee": name,
                        "Pay Period": str(period),
                        "Pay Code": code,
                        "Amount": f"{rng.randrange(50, 600)}.{rng.randrange(0, 100):02d}",
                        "DAC": department,
                    }
                )
    return rows


def write_csv(path: Path, rows: list[dict[str, str]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=HEADERS)
        writer.writeheader()
        writer.writerows(rows)


def main_gen() -> None:
    parser = argparse.ArgumentParser(description="Generate a synthetic payroll CSV.")
    parser.add_argument("output", type=Path, help="Output CSV path.")
    parser.add_argument("--employees", type=int, default=12)
    parser.add_argument("--periods", type=int, default=6)
    parser.add_argument("--seed", type=int, default=7)
    args = parser.parse_args()

    rows = generate_rows(args.employees, args.periods, seed=args.seed)
    write_csv(args.output, rows)
    print(f"Generated payroll CSV: {args.output} ({len(rows)} rows)")


if __name__ == "__main__":
    main_gen()
