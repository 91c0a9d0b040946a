"""
Marker Set Module

Joins inspection records with reconciled QR locations into floor plan
markers and filters them by floor.
"""

import logging
from typing import List, Optional, Sequence

from ..constants import STATUS_COLORS, DEFAULT_STATUS_COLOR
from ..models.records import InspectionRecord, Marker
from .floor_resolver import FloorResolver
from .reconciler import ReconciliationSnapshot

logger = logging.getLogger(__name__)


def status_color(status: str) -> str:
    """Marker color for an inspection status."""
    return STATUS_COLORS.get(status, DEFAULT_STATUS_COLOR)


def build_markers(
    records: Sequence[InspectionRecord],
    snapshot: ReconciliationSnapshot,
    resolver: Optional[FloorResolver] = None,
) -> List[Marker]:
    """
    Build a marker for every positioned record.

    The marker keeps the record's own position; the matched QR location
    only feeds floor resolution.
    """
    resolver = resolver or FloorResolver()
    markers = []

    for record in records:
        if record.position is None:
            continue
        qr_location = snapshot.location_for(record.id)
        floor = resolver.resolve(record, qr_location, snapshot.registry)
        markers.append(Marker(
            id=record.id,
            position=record.position,
            record=record,
            floor=floor,
            qr_location=qr_location,
        ))

    return markers


def markers_for_floor(markers: Sequence[Marker], floor: str) -> List[Marker]:
    """Markers whose resolved floor equals the selected floor."""
    visible = [m for m in markers if m.floor is not None and m.floor == floor]
    logger.debug(f"Floor {floor}: {len(visible)} of {len(markers)} markers visible")
    return visible
