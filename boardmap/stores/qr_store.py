"""
QR Registry Store Module

Read-only access to the two QR location sources: the single primary
mapping slot and the list-valued registry of scanned codes.
"""

import logging
from typing import Any, Dict, List, Optional

from ..constants import PRIMARY_MAPPING_KEY, QR_REGISTRY_KEY
from .document_store import JsonDocumentStore

logger = logging.getLogger(__name__)


class QRRegistryStore:
    """Both QR sources of one document store, as raw JSON entries."""

    def __init__(
        self,
        store: JsonDocumentStore,
        mapping_key: str = PRIMARY_MAPPING_KEY,
        registry_key: str = QR_REGISTRY_KEY,
    ):
        self.store = store
        self.mapping_key = mapping_key
        self.registry_key = registry_key

    def current_mapping(self) -> Optional[Dict[str, Any]]:
        """The primary mapping entry {qrId, qrData, location, floor}, if any."""
        entry = self.store.get(self.mapping_key)
        if entry is None:
            return None
        if not isinstance(entry, dict):
            logger.debug(f"Ignoring non-object primary mapping: {entry!r}")
            return None
        return entry

    def registry(self) -> List[Dict[str, Any]]:
        """All registry entries {id, qrData, location, floor}."""
        entries = self.store.get(self.registry_key, [])
        if not isinstance(entries, list):
            logger.debug(f"Ignoring non-list QR registry under '{self.registry_key}'")
            return []
        return [entry for entry in entries if isinstance(entry, dict)]

    def revision(self):
        return self.store.revision()

    def subscribe(self, callback):
        return self.store.subscribe(callback)
