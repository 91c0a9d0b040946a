"""
Inspection Record Store Module

Whole-list repository of inspection records over the document store.
"""

import logging
from typing import List, Optional

from ..constants import RECORDS_KEY
from ..models.records import InspectionRecord
from .document_store import JsonDocumentStore, StoreReadError, StoreWriteError

logger = logging.getLogger(__name__)


class InspectionRecordStore:
    """Reads and replaces the full list of inspection records."""

    def __init__(self, store: JsonDocumentStore, key: str = RECORDS_KEY):
        self.store = store
        self.key = key

    def list(self) -> List[InspectionRecord]:
        """
        Load all records.

        Entries without an id are skipped; legacy floor codes in ids are
        normalized on the way in. When two stored ids collapse into one
        after normalization, the first entry is kept.

        Raises:
            StoreReadError: If the store holds something other than a list
        """
        raw = self.store.get(self.key, [])
        if not isinstance(raw, list):
            raise StoreReadError(f"Store key '{self.key}' must hold a list")

        records = []
        seen = set()
        for entry in raw:
            if not isinstance(entry, dict) or not entry.get("id"):
                logger.warning(f"Skipping malformed inspection entry: {entry!r}")
                continue
            record = InspectionRecord.from_dict(entry)
            if record.id in seen:
                logger.warning(f"Skipping inspection entry {entry['id']!r}: duplicates {record.id}")
                continue
            seen.add(record.id)
            records.append(record)
        return records

    def get(self, record_id: str) -> Optional[InspectionRecord]:
        for record in self.list():
            if record.id == record_id:
                return record
        return None

    def update(self, records: List[InspectionRecord]) -> None:
        """
        Replace the stored list with the given records.

        Raises:
            StoreWriteError: If two records share an id or the write is rejected
        """
        seen = set()
        for record in records:
            if record.id in seen:
                raise StoreWriteError(f"Duplicate inspection record id: {record.id}")
            seen.add(record.id)

        self.store.set(self.key, [record.to_dict() for record in records])
        logger.debug(f"Stored {len(records)} inspection records")
