from __future__ import annotations

import logging
import math
from typing import Any

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = "0.2.0"

LEGACY_MAPPING_KEYS = {
    "employeeName": "employee_name",
    "amount": "amount",
    "payPeriod": "pay_period",
    "dac": "department",
}

LEGACY_ROW_KEYS = {
    "employeeKey": "employee_key",
    "employeeName": "employee_name",
    "priorAmount": "prior_amount",
    "currentAmount": "current_amount",
    "delta": "delta",
    "deltaPercent": "delta_percent",
    "yearToDate": "year_to_date",
    "note": "note",
}


def is_legacy_record(record: dict[str, Any]) -> bool:
    """Records written by the 0.1.x browser build carry camelCase keys and no schema_version."""
    version = record.get("schema_version", "")
    return not version or version.startswith("0.1.")


def migrate_mapping_v0_1(mapping: dict[str, Any] | None) -> dict[str, Any] | None:
    if mapping is None:
        return None
    migrated: dict[str, Any] = {"department": None}
    for legacy_key, key in LEGACY_MAPPING_KEYS.items():
        if legacy_key in mapping:
            migrated[key] = mapping[legacy_key] or None
        elif key in mapping:
            migrated[key] = mapping[key]
    return migrated


def migrate_row_v0_1(row: dict[str, Any]) -> dict[str, Any]:
    migrated = {key: row.get(legacy_key, row.get(key)) for legacy_key, key in LEGACY_ROW_KEYS.items()}
    migrated["employee_name"] = migrated["employee_name"] or migrated["employee_key"]
    migrated["note"] = migrated["note"] or ""

    # The browser build serialized Infinity as null.
    percent = migrated["delta_percent"]
    if percent is None or (isinstance(percent, float) and not math.isfinite(percent)):
        migrated["delta_percent"] = None
        migrated["delta_percent_kind"] = "infinite_growth"
    else:
        migrated["delta_percent_kind"] = "finite"
    return migrated


def migrate_snapshot_v0_1_to_v0_2(record: dict[str, Any]) -> dict[str, Any]:
    """
    Migrate a 0.1.x comparison snapshot to 0.2.0.

    Changes:
    - camelCase keys become snake_case (priorPeriod -> prior_period, data -> rows).
    - A null deltaPercent becomes an explicit infinite-growth marker.
    """
    logger.warning(
        f"Migrating comparison snapshot {record.get('id', '<unknown>')} from "
        f"{record.get('schema_version') or '0.1.x'} to {CURRENT_SCHEMA_VERSION}."
    )
    return {
        "schema_version": CURRENT_SCHEMA_VERSION,
        "id": record.get("id"),
        "name": record.get("name"),
        "prior_period": record.get("priorPeriod", record.get("prior_period")),
        "current_period": record.get("currentPeriod", record.get("current_period")),
        "saved_at": record.get("savedAt", record.get("saved_at")),
        "ai_insight": record.get("aiInsight", record.get("ai_insight")),
        "rows": [migrate_row_v0_1(row) for row in record.get("data", record.get("rows", []))],
    }


def migrate_dataset_v0_1_to_v0_2(record: dict[str, Any]) -> dict[str, Any]:
    """
    Migrate a 0.1.x stored dataset to 0.2.0.

    Changes:
    - csvData -> rows, uploadedAt -> uploaded_at.
    - Mapping roles renamed; the old 'dac' role becomes 'department'.
    """
    logger.warning(f"Migrating stored dataset from 0.1.x to {CURRENT_SCHEMA_VERSION}.")
    return {
        "schema_version": CURRENT_SCHEMA_VERSION,
        "rows": record.get("csvData", record.get("rows", [])),
        "headers": record.get("headers", []),
        "mapping": migrate_mapping_v0_1(record.get("mapping")),
        "uploaded_at": record.get("uploadedAt", record.get("uploaded_at")),
    }


def migrate_preferences(record: dict[str, Any]) -> dict[str, Any]:
    if "savedAt" not in record:
        return record
    migrated = migrate_mapping_v0_1(record) or {}
    migrated["saved_at"] = record["savedAt"]
    return migrated


def migrate_snapshot(record: dict[str, Any]) -> dict[str, Any]:
    """Run all sequential migrations to bring a snapshot record to the current version."""
    if is_legacy_record(record):
        record = migrate_snapshot_v0_1_to_v0_2(record)
    return record


def migrate_dataset(record: dict[str, Any]) -> dict[str, Any]:
    if is_legacy_record(record):
        record = migrate_dataset_v0_1_to_v0_2(record)
    return record
