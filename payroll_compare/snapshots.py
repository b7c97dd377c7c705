#!/usr/bin/env python3

from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

from payroll_compare.comparison import ComparisonRow
from payroll_compare.core import ColumnMapping
from payroll_compare.mapping import ColumnPreferences, mapping_from_dict, mapping_to_dict
from payroll_compare.utils.contracts import ContractError, validate_output
from payroll_compare.utils.migration import (
    CURRENT_SCHEMA_VERSION,
    migrate_dataset,
    migrate_preferences,
    migrate_snapshot,
)

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = ".payroll_compare"
DATA_DIR_ENV = "PAYROLL_COMPARE_DATA_DIR"
DATASET_FILE = "dataset.json"
PREFERENCES_FILE = "column_preferences.json"
SNAPSHOTS_DIR = "snapshots"


class SnapshotNotFoundError(KeyError):
    pass


@dataclass(frozen=True)
class ComparisonSnapshot:
    id: str
    name: str
    prior_period: str
    current_period: str
    rows: list[ComparisonRow]
    saved_at: str
    ai_insight: str | None = None
    schema_version: str = CURRENT_SCHEMA_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "id": self.id,
            "name": self.name,
            "prior_period": self.prior_period,
            "current_period": self.current_period,
            "saved_at": self.saved_at,
            "ai_insight": self.ai_insight,
            "rows": [row.to_dict() for row in self.rows],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ComparisonSnapshot:
        return cls(
            id=data["id"],
            name=data["name"],
            prior_period=data["prior_period"],
            current_period=data["current_period"],
            rows=[ComparisonRow.from_dict(row) for row in data["rows"]],
            saved_at=data["saved_at"],
            ai_insight=data.get("ai_insight"),
            schema_version=data.get("schema_version", CURRENT_SCHEMA_VERSION),
        )


@dataclass(frozen=True)
class StoredDataset:
    rows: list[dict[str, str]]
    headers: list[str]
    mapping: ColumnMapping | None
    uploaded_at: str
    schema_version: str = CURRENT_SCHEMA_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "rows": self.rows,
            "headers": self.headers,
            "mapping": mapping_to_dict(self.mapping) if self.mapping else None,
            "uploaded_at": self.uploaded_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StoredDataset:
        mapping = data.get("mapping")
        return cls(
            rows=data["rows"],
            headers=data["headers"],
            mapping=mapping_from_dict(mapping) if mapping else None,
            uploaded_at=data["uploaded_at"],
            schema_version=data.get("schema_version", CURRENT_SCHEMA_VERSION),
        )


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_snapshot_date(when: datetime) -> str:
    # e.g. "Jan 12, 2026 14:30"
    return f"{when.strftime('%b')} {when.day}, {when.year} {when.strftime('%H:%M')}"


def generate_snapshot_name(prior_period: str, current_period: str, when: datetime | None = None) -> str:
    return f"PP{prior_period} vs PP{current_period} - {format_snapshot_date(when or utc_now())}"


def create_snapshot(
    rows: Sequence[ComparisonRow],
    prior_period: str,
    current_period: str,
    name: str | None = None,
    now: datetime | None = None,
    ai_insight: str | None = None,
) -> ComparisonSnapshot:
    when = now or utc_now()
    return ComparisonSnapshot(
        id=uuid.uuid4().hex,
        name=name or generate_snapshot_name(prior_period, current_period, when),
        prior_period=prior_period,
        current_period=current_period,
        rows=list(rows),
        saved_at=when.isoformat(),
        ai_insight=ai_insight,
    )


def default_data_dir() -> Path:
    return Path(os.environ.get(DATA_DIR_ENV, DEFAULT_DATA_DIR)).expanduser()


def write_json_atomic(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, allow_nan=False)
        os.replace(temp_name, path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise


def read_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {path.name}")
    return data


class SnapshotStore:
    """
    Local persistence for the uploaded dataset, saved comparisons and column preferences.

    Layout under ``root``:
        dataset.json                 the single current dataset (replaced on upload)
        column_preferences.json      last used header per role
        snapshots/<id>.json          one file per saved comparison
    """

    def __init__(self, root: Path | None = None) -> None:
        self.root = root or default_data_dir()

    @property
    def dataset_path(self) -> Path:
        return self.root / DATASET_FILE

    @property
    def preferences_path(self) -> Path:
        return self.root / PREFERENCES_FILE

    @property
    def snapshots_dir(self) -> Path:
        return self.root / SNAPSHOTS_DIR

    def snapshot_path(self, snapshot_id: str) -> Path:
        if not snapshot_id or "/" in snapshot_id or "\\" in snapshot_id or snapshot_id.startswith("."):
            raise SnapshotNotFoundError(snapshot_id)
        return self.snapshots_dir / f"{snapshot_id}.json"

    # Dataset

    def save_dataset(
        self,
        rows: list[dict[str, str]],
        headers: list[str],
        mapping: ColumnMapping | None,
        now: datetime | None = None,
    ) -> StoredDataset:
        dataset = StoredDataset(rows=rows, headers=headers, mapping=mapping, uploaded_at=(now or utc_now()).isoformat())
        payload = dataset.to_dict()
        validate_output(payload, "stored_dataset")
        write_json_atomic(self.dataset_path, payload)
        logger.info("Saved dataset with %d rows and %d columns.", len(rows), len(headers))
        return dataset

    def load_dataset(self) -> StoredDataset | None:
        if not self.dataset_path.exists():
            return None
        try:
            payload = migrate_dataset(read_json(self.dataset_path))
            validate_output(payload, "stored_dataset")
        except (OSError, ValueError, ContractError) as e:
            logger.error("Failed to load stored dataset: %s", e)
            return None
        return StoredDataset.from_dict(payload)

    def has_dataset(self) -> bool:
        return self.load_dataset() is not None

    def clear_dataset(self) -> None:
        self.dataset_path.unlink(missing_ok=True)

    def update_mapping(self, mapping: ColumnMapping) -> StoredDataset | None:
        dataset = self.load_dataset()
        if dataset is None:
            return None
        updated = replace(dataset, mapping=mapping)
        payload = updated.to_dict()
        validate_output(payload, "stored_dataset")
        write_json_atomic(self.dataset_path, payload)
        return updated

    # Snapshots

    def save_snapshot(self, snapshot: ComparisonSnapshot) -> None:
        payload = snapshot.to_dict()
        validate_output(payload, "comparison_snapshot")
        write_json_atomic(self.snapshot_path(snapshot.id), payload)
        logger.info("Saved snapshot %s (%s).", snapshot.id, snapshot.name)

    def _read_snapshot(self, path: Path) -> ComparisonSnapshot | None:
        try:
            payload = migrate_snapshot(read_json(path))
            validate_output(payload, "comparison_snapshot")
        except (OSError, ValueError, ContractError) as e:
            logger.error("Skipping unreadable snapshot %s: %s", path.name, e)
            return None
        return ComparisonSnapshot.from_dict(payload)

    def load_snapshots(self) -> list[ComparisonSnapshot]:
        """All readable snapshots, newest first."""
        if not self.snapshots_dir.exists():
            return []
        snapshots = []
        for path in sorted(self.snapshots_dir.glob("*.json")):
            snapshot = self._read_snapshot(path)
            if snapshot is not None:
                snapshots.append(snapshot)
        snapshots.sort(key=lambda item: (item.saved_at, item.id), reverse=True)
        return snapshots

    def get_snapshot(self, snapshot_id: str) -> ComparisonSnapshot:
        path = self.snapshot_path(snapshot_id)
        if not path.exists():
            raise SnapshotNotFoundError(snapshot_id)
        snapshot = self._read_snapshot(path)
        if snapshot is None:
            raise SnapshotNotFoundError(snapshot_id)
        return snapshot

    def delete_snapshot(self, snapshot_id: str) -> bool:
        path = self.snapshot_path(snapshot_id)
        if not path.exists():
            return False
        path.unlink()
        return True

    def update_snapshot_ai_insight(self, snapshot_id: str, ai_insight: str | None) -> ComparisonSnapshot:
        snapshot = replace(self.get_snapshot(snapshot_id), ai_insight=ai_insight)
        self.save_snapshot(snapshot)
        return snapshot

    # Column preferences

    def save_preferences(self, preferences: ColumnPreferences) -> None:
        payload = preferences.to_dict()
        validate_output(payload, "column_preferences")
        write_json_atomic(self.preferences_path, payload)

    def load_preferences(self) -> ColumnPreferences | None:
        if not self.preferences_path.exists():
            return None
        try:
            payload = migrate_preferences(read_json(self.preferences_path))
            validate_output(payload, "column_preferences")
        except (OSError, ValueError, ContractError) as e:
            logger.error("Failed to load column preferences: %s", e)
            return None
        return ColumnPreferences.from_dict(payload)
