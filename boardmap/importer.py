"""
Record Import Module

Reads inspection records from CSV or Excel sheets exported in the field
and merges them into the record store.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from .constants import (
    IMPORT_HEADER_KEYWORDS,
    IMPORT_SHEET_KEYWORD,
    LOAD_CONNECTED_TOKEN,
    NEVER_INSPECTED,
    InspectionStatus,
)
from .models.records import InspectionRecord, Loads, Position, normalize_record_id
from .stores.interfaces import RecordRepository

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = [".xlsx", ".xlsm", ".xls"]
CSV_SUFFIXES = [".csv", ".txt"]


class ImportFormatError(Exception):
    """Raised when an import file has no usable records."""
    pass


def _cell(row: Sequence[Any], index: Optional[int]) -> str:
    if index is None or index >= len(row):
        return ""
    value = row[index]
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip()


def read_sheet_rows(filepath: str) -> List[List[Any]]:
    """
    Read all rows (header included) of a CSV file or the inspection
    sheet of a workbook.

    Raises:
        ImportFormatError: If the file type is not supported
    """
    path = Path(filepath)
    suffix = path.suffix.lower()

    if suffix in CSV_SUFFIXES:
        frame = pd.read_csv(path, header=None, dtype=str, keep_default_na=False)
    elif suffix in EXCEL_SUFFIXES:
        sheets = pd.read_excel(path, sheet_name=None, header=None, dtype=str)
        if not sheets:
            raise ImportFormatError(f"Workbook has no sheets: {filepath}")
        names = list(sheets.keys())
        sheet_name = next((n for n in names if IMPORT_SHEET_KEYWORD in str(n)), names[0])
        logger.debug(f"Importing sheet '{sheet_name}' from {filepath}")
        frame = sheets[sheet_name]
    else:
        raise ImportFormatError(f"Unsupported import file type: {path.suffix}")

    return frame.values.tolist()


def find_columns(headers: Sequence[str]) -> Dict[str, int]:
    """
    Locate columns by header keywords.

    Each field takes the first unclaimed header containing one of its
    keywords; fields are matched in IMPORT_HEADER_KEYWORDS order.

    Returns:
        Dict of field name -> column index (missing fields are absent)
    """
    columns: Dict[str, int] = {}
    claimed = set()

    for field_name, keywords in IMPORT_HEADER_KEYWORDS.items():
        for index, header in enumerate(headers):
            if index in claimed:
                continue
            if any(keyword in header for keyword in keywords):
                columns[field_name] = index
                claimed.add(index)
                break

    return columns


def _parse_percent(text: str) -> Optional[float]:
    try:
        return float(text.replace("%", "").strip())
    except ValueError:
        return None


def parse_rows(rows: Sequence[Sequence[Any]]) -> List[InspectionRecord]:
    """
    Convert sheet rows into inspection records.

    Raises:
        ImportFormatError: If there are no data rows or no id column
    """
    if len(rows) < 2:
        raise ImportFormatError("Import sheet has no data rows")

    headers = [_cell(rows[0], i) for i in range(len(rows[0]))]
    columns = find_columns(headers)
    if "id" not in columns:
        raise ImportFormatError("Import sheet has no ID column")

    records = []
    for row in rows[1:]:
        record_id = _cell(row, columns["id"])
        if not record_id:
            continue

        status = _cell(row, columns.get("status")) or InspectionStatus.PENDING
        if status not in InspectionStatus.ALL:
            status = InspectionStatus.PENDING

        loads = Loads(**{
            name: LOAD_CONNECTED_TOKEN in _cell(row, columns.get(name)).lower()
            for name in ("welder", "grinder", "light", "pump")
        })

        position = Position.default()
        x = _parse_percent(_cell(row, columns.get("x")))
        y = _parse_percent(_cell(row, columns.get("y")))
        if x is not None and y is not None:
            position = Position(x, y).clamped()

        records.append(InspectionRecord(
            id=normalize_record_id(record_id),
            status=status,
            last_inspection_date=_cell(row, columns.get("date")) or NEVER_INSPECTED,
            loads=loads,
            position=position,
            memo=_cell(row, columns.get("memo")),
        ))

    return records


def import_records(filepath: str) -> List[InspectionRecord]:
    """Read inspection records from a CSV or Excel file."""
    if not Path(filepath).is_file():
        raise ImportFormatError(f"Import file not found: {filepath}")

    records = parse_rows(read_sheet_rows(filepath))
    logger.info(f"Read {len(records)} records from {filepath}")
    return records


def merge_records(
    existing: Sequence[InspectionRecord],
    imported: Sequence[InspectionRecord],
) -> List[InspectionRecord]:
    """
    Merge imported records into existing ones by id.

    Existing records are updated in place (their photo is kept); new ids
    are appended in import order.
    """
    merged = list(existing)
    index_by_id = {record.id: i for i, record in enumerate(merged)}

    for record in imported:
        if record.id in index_by_id:
            i = index_by_id[record.id]
            merged[i] = replace(record, photo_url=merged[i].photo_url)
        else:
            index_by_id[record.id] = len(merged)
            merged.append(record)

    return merged


def import_into_store(filepath: str, record_store: RecordRepository) -> int:
    """
    Import a sheet and write the merged list to the store.

    Returns:
        Number of imported rows
    """
    imported = import_records(filepath)
    record_store.update(merge_records(record_store.list(), imported))
    return len(imported)
