"""
Collaborator Interfaces Module

Contracts of the two stores the placement engine reads and writes. The
controller, reconciler and refresher accept anything with these shapes;
the JSON-backed stores in this package are the default implementations.
"""

from typing import Any, Dict, List, Optional, Protocol

from ..models.records import InspectionRecord


class RecordRepository(Protocol):
    """Whole-list inspection record store."""

    def list(self) -> List[InspectionRecord]:
        ...

    def update(self, records: List[InspectionRecord]) -> None:
        ...


class QRRegistryRepository(Protocol):
    """Read-only view of the primary QR mapping and the QR registry."""

    def current_mapping(self) -> Optional[Dict[str, Any]]:
        ...

    def registry(self) -> List[Dict[str, Any]]:
        ...
