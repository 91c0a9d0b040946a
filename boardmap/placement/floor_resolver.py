"""
Floor Resolver Module

Assigns a floor label to an inspection record. Strategies are tried in
order and the first one that returns a label wins:

1. floor of the QR location matched to the record
2. floor of the first registry entry whose payload names the record
3. floor code embedded in the record id (PREFIX-FLOORCODE-SEQ)
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from ..constants import (
    FLOOR_TOKEN_MAP,
    RECORD_ID_SEPARATOR,
    MIN_ID_SEGMENTS_FOR_FLOOR,
)
from ..models.records import InspectionRecord, QRLocationRecord
from ..qr.payload import RegistryEntry

logger = logging.getLogger(__name__)


@dataclass
class FloorQuery:
    """Everything a floor strategy may look at."""
    record: InspectionRecord
    qr_location: Optional[QRLocationRecord] = None
    registry: Sequence[RegistryEntry] = field(default_factory=list)


FloorStrategy = Callable[[FloorQuery], Optional[str]]


def normalize_floor_token(token: str) -> Optional[str]:
    """
    Map a raw floor token to a floor label.

    Examples:
        "B" -> "B1", "1st" -> "F1", "xyz" -> "XYZ", "" -> None
    """
    token = token.strip().upper()
    if not token:
        return None
    return FLOOR_TOKEN_MAP.get(token, token)


def floor_from_qr_location(query: FloorQuery) -> Optional[str]:
    """Floor carried by the matched QR location, used verbatim."""
    if query.qr_location and query.qr_location.floor:
        return query.qr_location.floor
    return None


def floor_from_registry(query: FloorQuery) -> Optional[str]:
    """Floor of the first registry entry whose payload id is the record id."""
    for entry in query.registry:
        if entry.record_id == query.record.id:
            return entry.floor or None
    return None


def floor_from_record_id(query: FloorQuery) -> Optional[str]:
    """Floor code from the second segment of a PREFIX-FLOORCODE-SEQ id."""
    parts = query.record.id.split(RECORD_ID_SEPARATOR)
    if len(parts) < MIN_ID_SEGMENTS_FOR_FLOOR:
        return None
    return normalize_floor_token(parts[1])


DEFAULT_STRATEGIES: List[FloorStrategy] = [
    floor_from_qr_location,
    floor_from_registry,
    floor_from_record_id,
]


class FloorResolver:
    """Runs floor strategies in precedence order."""

    def __init__(self, strategies: Optional[List[FloorStrategy]] = None):
        self.strategies = list(strategies) if strategies is not None else list(DEFAULT_STRATEGIES)

    def resolve(
        self,
        record: InspectionRecord,
        qr_location: Optional[QRLocationRecord] = None,
        registry: Sequence[RegistryEntry] = (),
    ) -> Optional[str]:
        """
        Resolve the floor of a record.

        Returns:
            Floor label, or None if no strategy applies
        """
        query = FloorQuery(record=record, qr_location=qr_location, registry=registry)
        for strategy in self.strategies:
            floor = strategy(query)
            if floor:
                return floor

        logger.debug(f"No floor resolved for {record.id}")
        return None


def resolve_floor(
    record: InspectionRecord,
    qr_location: Optional[QRLocationRecord] = None,
    registry: Sequence[RegistryEntry] = (),
) -> Optional[str]:
    """Convenience wrapper around the default FloorResolver."""
    return FloorResolver().resolve(record, qr_location, registry)
