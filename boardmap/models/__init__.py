# Record and marker data structures

from .records import (
    Position,
    Loads,
    InspectionRecord,
    QRLocationRecord,
    Marker,
    clamp_percent,
    is_percent,
    normalize_record_id,
)

__all__ = [
    "Position",
    "Loads",
    "InspectionRecord",
    "QRLocationRecord",
    "Marker",
    "clamp_percent",
    "is_percent",
    "normalize_record_id",
]
