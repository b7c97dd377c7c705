from typing import Mapping, Sequence

from payroll_compare.comparison import ComparisonRow


def notes_from_rows(rows: Sequence[ComparisonRow]) -> dict[str, str]:
    """Collect the non-empty notes of a row set, keyed by employee."""
    return {row.employee_key: row.note for row in rows if row.note}


def merge_notes(rows: Sequence[ComparisonRow], notes: Mapping[str, str]) -> tuple[list[ComparisonRow], list[str]]:
    """
    Left-join previously entered notes onto freshly built rows.

    Args:
        rows: Comparison rows, usually straight from build_comparison_rows.
        notes: employee key -> note text (e.g. {"Alice": "reviewed"}). An empty string clears the note.

    Returns:
        (merged_rows, audit_log)
        merged_rows: New list; rows without a matching note are returned unchanged.
        audit_log: One line per changed note, plus one per note whose employee is not in the rows.
    """
    merged: list[ComparisonRow] = []
    audit_log: list[str] = []

    if not notes:
        return list(rows), audit_log

    known = set()
    for row in rows:
        known.add(row.employee_key)
        new_note = notes.get(row.employee_key)
        if new_note is None or new_note == row.note:
            merged.append(row)
            continue
        merged.append(row.with_note(new_note))
        if not new_note:
            audit_log.append(f"NOTE: {row.employee_key} cleared (was {row.note!r})")
        elif row.note:
            audit_log.append(f"NOTE: {row.employee_key} changed from {row.note!r} to {new_note!r}")
        else:
            audit_log.append(f"NOTE: {row.employee_key} set to {new_note!r}")

    for employee in notes:
        if employee not in known:
            audit_log.append(f"WARNING: Note for unknown employee {employee!r} was not applied.")

    return merged, audit_log


def set_note(rows: Sequence[ComparisonRow], employee: str, text: str) -> list[ComparisonRow]:
    updated: list[ComparisonRow] = []
    found = False
    for row in rows:
        if row.employee_key == employee:
            updated.append(row.with_note(text))
            found = True
        else:
            updated.append(row)
    if not found:
        raise KeyError(f"No comparison row for employee: {employee}")
    return updated
