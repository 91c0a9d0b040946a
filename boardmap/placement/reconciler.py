"""
Location Reconciler Module

Merges QR locations from the primary mapping slot and the QR registry
into one deduplicated list, and indexes them by inspection record id.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..constants import QR_LOCATION_ID_PREFIX
from ..models.records import Position, QRLocationRecord
from ..qr.payload import RegistryEntry, ValidPayload, parse_registry_entry
from ..stores.interfaces import QRRegistryRepository

logger = logging.getLogger(__name__)

RawOrParsed = Union[Dict[str, Any], RegistryEntry]


@dataclass(frozen=True)
class ReconciliationSnapshot:
    """One fully computed reconciliation of both QR sources."""
    locations: Tuple[QRLocationRecord, ...] = ()
    index: Dict[str, QRLocationRecord] = field(default_factory=dict)
    registry: Tuple[RegistryEntry, ...] = ()

    def location_for(self, record_id: str) -> Optional[QRLocationRecord]:
        return self.index.get(record_id)


def _as_entry(entry: RawOrParsed) -> Optional[RegistryEntry]:
    if isinstance(entry, RegistryEntry):
        return entry
    if isinstance(entry, dict):
        return parse_registry_entry(entry)
    return None


def _to_location(entry: RegistryEntry, position: Position) -> QRLocationRecord:
    record_id = entry.payload.record_id if isinstance(entry.payload, ValidPayload) else None
    return QRLocationRecord(
        id=f"{QR_LOCATION_ID_PREFIX}{entry.qr_id}",
        qr_id=entry.qr_id,
        location=entry.location,
        floor=entry.floor,
        position=position,
        record_id=record_id,
    )


def location_from_primary(primary_slot: Optional[RawOrParsed]) -> Optional[QRLocationRecord]:
    """
    Build the primary slot's location.

    Its position falls back to the default when the payload is missing,
    malformed or carries no parseable position; the slot is always kept.
    """
    if primary_slot is None:
        return None

    entry = _as_entry(primary_slot)
    if entry is None or not entry.qr_id:
        logger.debug(f"Primary QR mapping has no tag id: {primary_slot!r}")
        return None

    position = Position.default()
    if isinstance(entry.payload, ValidPayload):
        if entry.payload.position is not None:
            position = entry.payload.position
    else:
        logger.debug(f"Primary QR payload unreadable ({entry.payload.reason}), using default position")

    return _to_location(entry, position)


def location_from_registry(entry: RawOrParsed) -> Optional[QRLocationRecord]:
    """
    Build a registry entry's location.

    Entries are dropped when their payload is unreadable or their position
    falls outside [0, 100]. A missing or unparseable position means the
    default, which is always in range.
    """
    parsed = _as_entry(entry)
    if parsed is None or not parsed.qr_id:
        return None

    if not isinstance(parsed.payload, ValidPayload):
        logger.debug(f"Dropping QR {parsed.qr_id}: {parsed.payload.reason}")
        return None

    position = parsed.payload.position or Position.default()
    if not position.in_range():
        logger.debug(f"Dropping QR {parsed.qr_id}: position ({position.x}, {position.y}) out of range")
        return None

    return _to_location(parsed, position)


def load_locations(
    primary_slot: Optional[RawOrParsed],
    registry_list: Sequence[RawOrParsed],
) -> List[QRLocationRecord]:
    """
    Merge both QR sources into one list, deduplicated by QR tag id.

    The primary slot goes first and is never overwritten; among registry
    entries the first one seen for a tag id wins.

    Args:
        primary_slot: The single primary mapping entry, or None
        registry_list: All registry entries

    Returns:
        List of QRLocationRecord in merge order
    """
    merged: List[QRLocationRecord] = []
    seen = set()

    primary = location_from_primary(primary_slot)
    if primary is not None:
        merged.append(primary)
        seen.add(primary.qr_id)

    for entry in registry_list:
        location = location_from_registry(entry)
        if location is None or location.qr_id in seen:
            continue
        merged.append(location)
        seen.add(location.qr_id)

    return merged


def build_identifier_index(
    locations: Sequence[QRLocationRecord],
    registry_list: Sequence[RawOrParsed],
) -> Dict[str, QRLocationRecord]:
    """
    Index locations by the inspection record id their registry payload names.

    Each location is looked up in the registry by QR tag id; only the
    registry entry's payload is consulted, so a primary-slot location is
    indexed only if the registry also holds its tag. Unreadable entries
    are treated as no match.

    Returns:
        Dict of record id -> QRLocationRecord
    """
    entries_by_qr_id: Dict[str, RegistryEntry] = {}
    for raw in registry_list:
        entry = _as_entry(raw)
        if entry is None or not entry.qr_id:
            continue
        entries_by_qr_id.setdefault(entry.qr_id, entry)

    index: Dict[str, QRLocationRecord] = {}
    for location in locations:
        entry = entries_by_qr_id.get(location.qr_id)
        if entry is None:
            continue
        record_id = entry.record_id
        if record_id:
            index[record_id] = location

    return index


def reconcile(qr_store: QRRegistryRepository) -> ReconciliationSnapshot:
    """
    Re-read both QR sources and compute a fresh snapshot.

    Nothing is cached between calls.

    Raises:
        StoreReadError: If the underlying store cannot be read
    """
    registry = tuple(parse_registry_entry(raw) for raw in qr_store.registry())
    locations = load_locations(qr_store.current_mapping(), registry)
    index = build_identifier_index(locations, registry)

    logger.debug(
        f"Reconciled {len(locations)} QR locations "
        f"({len(index)} linked to records) from {len(registry)} registry entries"
    )
    return ReconciliationSnapshot(
        locations=tuple(locations),
        index=index,
        registry=registry,
    )
