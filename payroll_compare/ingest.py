"""
CSV ingestion.

Turns uploaded CSV content into raw rows (column name -> string cell) plus the
header list. Aggregation never sees files, only the rows produced here.
"""

from __future__ import annotations

import csv
import io
import logging
import math
from pathlib import Path
from typing import NamedTuple

logger = logging.getLogger(__name__)

VALID_EXTENSIONS = (".csv",)
VALID_MIME_TYPES = ("text/csv", "application/csv", "text/plain")
SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


class CsvParseError(ValueError):
    """Raised when an upload cannot be turned into rows."""


class ParseResult(NamedTuple):
    rows: list[dict[str, str]]
    headers: list[str]


def parse_csv_text(text: str) -> ParseResult:
    if text.startswith("\ufeff"):
        text = text[1:]

    try:
        reader = csv.reader(io.StringIO(text))
        raw_header = next(reader, None)
        headers = [header.strip() for header in raw_header or []]
        if not any(headers):
            raise CsvParseError("No headers found in CSV file")

        rows: list[dict[str, str]] = []
        short_rows = 0
        long_rows = 0
        for record in reader:
            if not record:
                continue
            if len(record) < len(headers):
                short_rows += 1
            elif len(record) > len(headers):
                long_rows += 1
            padded = list(record[: len(headers)]) + [""] * (len(headers) - len(record))
            rows.append(dict(zip(headers, padded)))
    except csv.Error as e:
        raise CsvParseError(f"Failed to parse CSV: {e}") from e

    if short_rows or long_rows:
        logger.warning(
            "CSV parsing warnings: %d row(s) with missing fields, %d row(s) with extra fields.",
            short_rows,
            long_rows,
        )

    if not rows:
        raise CsvParseError("No data rows found in CSV file")

    return ParseResult(rows=rows, headers=headers)


def parse_csv_bytes(data: bytes) -> ParseResult:
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise CsvParseError(f"Failed to parse CSV: {e}") from e
    return parse_csv_text(text)


def parse_csv_file(path: Path) -> ParseResult:
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")
    return parse_csv_bytes(path.read_bytes())


def is_valid_csv_file(filename: str, mime_type: str = "") -> bool:
    has_valid_extension = filename.lower().endswith(VALID_EXTENSIONS)
    has_valid_mime_type = mime_type in VALID_MIME_TYPES or mime_type == ""
    return has_valid_extension and has_valid_mime_type


def format_file_size(num_bytes: int) -> str:
    if num_bytes == 0:
        return "0 Bytes"
    index = 0
    while num_bytes >= math.pow(1024, index + 1) and index < len(SIZE_UNITS) - 1:
        index += 1
    value = round(num_bytes / math.pow(1024, index), 2)
    return f"{value:g} {SIZE_UNITS[index]}"
