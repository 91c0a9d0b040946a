"""
Record Data Structures Module

Defines inspection records, QR locations and derived floor plan markers.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Dict, Any

from ..constants import (
    PERCENT_MIN,
    PERCENT_MAX,
    DEFAULT_POSITION_X,
    DEFAULT_POSITION_Y,
    RECORD_ID_SEPARATOR,
    LEGACY_FLOOR_CODE,
    NORMALIZED_FLOOR_CODE,
    NEVER_INSPECTED,
    InspectionStatus,
)

logger = logging.getLogger(__name__)


def clamp_percent(value: float) -> float:
    """Clamp a coordinate to the [0, 100] percentage range."""
    return max(PERCENT_MIN, min(PERCENT_MAX, value))


def is_percent(value: float) -> bool:
    """Check if a coordinate lies inside the [0, 100] percentage range."""
    return PERCENT_MIN <= value <= PERCENT_MAX


def normalize_record_id(record_id: str) -> str:
    """
    Rewrite the legacy floor code in a record id.

    Examples:
        "DB-1st-001" -> "DB-F1-001"
        "DB-F1-001" -> "DB-F1-001"
    """
    parts = record_id.split(RECORD_ID_SEPARATOR)
    if len(parts) >= 3 and parts[1] == LEGACY_FLOOR_CODE:
        parts[1] = NORMALIZED_FLOOR_CODE
        return RECORD_ID_SEPARATOR.join(parts)
    return record_id


@dataclass(frozen=True)
class Position:
    """Percentage coordinates on a floor plan image."""
    x: float
    y: float

    @classmethod
    def default(cls) -> "Position":
        return cls(DEFAULT_POSITION_X, DEFAULT_POSITION_Y)

    def clamped(self) -> "Position":
        return Position(clamp_percent(self.x), clamp_percent(self.y))

    def in_range(self) -> bool:
        return is_percent(self.x) and is_percent(self.y)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Position"]:
        """Build a position from {"x": .., "y": ..}; None if unusable."""
        if not isinstance(data, dict):
            return None
        try:
            return cls(float(data["x"]), float(data["y"]))
        except (KeyError, TypeError, ValueError):
            return None


@dataclass
class Loads:
    """Connected-load checklist for a distribution board."""
    welder: bool = False
    grinder: bool = False
    light: bool = False
    pump: bool = False

    def connected(self) -> List[str]:
        names = []
        if self.welder:
            names.append("Welder")
        if self.grinder:
            names.append("Grinder")
        if self.light:
            names.append("Light")
        if self.pump:
            names.append("Pump")
        return names

    def connected_count(self) -> int:
        return len(self.connected())

    def connected_text(self) -> str:
        names = self.connected()
        return ", ".join(names) if names else "None"

    def to_dict(self) -> Dict[str, bool]:
        return {
            "welder": self.welder,
            "grinder": self.grinder,
            "light": self.light,
            "pump": self.pump,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Loads":
        if not isinstance(data, dict):
            return cls()
        return cls(
            welder=bool(data.get("welder", False)),
            grinder=bool(data.get("grinder", False)),
            light=bool(data.get("light", False)),
            pump=bool(data.get("pump", False)),
        )


@dataclass
class InspectionRecord:
    """
    Inspection state of one distribution board.

    The id follows PREFIX-FLOORCODE-SEQ (e.g. DB-F1-001); the floor code
    segment is what floor resolution falls back on.
    """
    id: str
    status: str = InspectionStatus.PENDING
    last_inspection_date: str = NEVER_INSPECTED
    loads: Loads = field(default_factory=Loads)
    position: Optional[Position] = None
    memo: str = ""
    photo_url: Optional[str] = None

    @property
    def is_placed(self) -> bool:
        return self.position is not None

    def with_position(self, position: Position) -> "InspectionRecord":
        """Copy of this record moved to a clamped position."""
        return replace(self, position=position.clamped())

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to the store's JSON shape."""
        data = {
            "id": self.id,
            "status": self.status,
            "lastInspectionDate": self.last_inspection_date,
            "loads": self.loads.to_dict(),
            "photoUrl": self.photo_url,
            "memo": self.memo,
        }
        if self.position is not None:
            data["position"] = self.position.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InspectionRecord":
        """Build a record from the store's JSON shape."""
        status = data.get("status", InspectionStatus.PENDING)
        if status not in InspectionStatus.ALL:
            logger.debug(f"Unknown status {status!r} for {data.get('id')}, using Pending")
            status = InspectionStatus.PENDING

        return cls(
            id=normalize_record_id(str(data["id"])),
            status=status,
            last_inspection_date=str(data.get("lastInspectionDate") or NEVER_INSPECTED),
            loads=Loads.from_dict(data.get("loads")),
            position=Position.from_dict(data.get("position")),
            memo=str(data.get("memo") or ""),
            photo_url=data.get("photoUrl"),
        )


@dataclass(frozen=True)
class QRLocationRecord:
    """A QR tag location merged from the primary mapping or the registry."""
    id: str
    qr_id: str
    location: str
    floor: str
    position: Position
    record_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "qrId": self.qr_id,
            "location": self.location,
            "floor": self.floor,
            "position": self.position.to_dict(),
            "recordId": self.record_id,
        }


@dataclass
class Marker:
    """A positioned inspection record resolved to a floor."""
    id: str
    position: Position
    record: InspectionRecord
    floor: Optional[str] = None
    qr_location: Optional[QRLocationRecord] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert marker to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "floor": self.floor,
            "position": self.position.to_dict(),
            "status": self.record.status,
            "loads": self.record.loads.connected_text(),
            "qrLocation": self.qr_location.to_dict() if self.qr_location else None,
        }
