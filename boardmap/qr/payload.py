"""
QR Payload Module

Parse-and-validate boundary for the JSON payload carried by a QR tag.
Everything past this module works with ValidPayload fields and never
re-parses raw strings.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from ..constants import QR_POSITION_PATTERN
from ..models.records import Position, normalize_record_id

logger = logging.getLogger(__name__)

_POSITION_RE = re.compile(QR_POSITION_PATTERN, re.IGNORECASE)


@dataclass(frozen=True)
class ValidPayload:
    """A QR payload that decoded to a JSON object."""
    record_id: Optional[str] = None
    location: Optional[str] = None
    floor: Optional[str] = None
    position: Optional[Position] = None
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return True


@dataclass(frozen=True)
class InvalidPayload:
    """A QR payload that could not be decoded."""
    reason: str

    @property
    def is_valid(self) -> bool:
        return False


ParsedPayload = Union[ValidPayload, InvalidPayload]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def extract_position(raw_position: Any) -> Optional[Position]:
    """
    Extract a position from the payload's position field.

    Accepts an object with numeric x/y, or free text like "x: 40, y: 60".

    Args:
        raw_position: Value of the payload's "position" key

    Returns:
        Position, or None if absent or unparseable (no clamping applied)
    """
    if isinstance(raw_position, dict):
        x = raw_position.get("x")
        y = raw_position.get("y")
        if _is_number(x) and _is_number(y):
            return Position(float(x), float(y))
        return None

    if isinstance(raw_position, str):
        match = _POSITION_RE.search(raw_position)
        if match:
            return Position(float(match.group(1)), float(match.group(2)))
        logger.debug(f"Unparseable QR position text: {raw_position!r}")

    return None


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def parse_qr_payload(qr_data: Any) -> ParsedPayload:
    """
    Decode a QR payload into its validated fields.

    Args:
        qr_data: JSON string from the store (an already decoded dict is
            also accepted)

    Returns:
        ValidPayload or InvalidPayload; never raises
    """
    if isinstance(qr_data, dict):
        data = qr_data
    elif isinstance(qr_data, (str, bytes, bytearray)):
        try:
            data = json.loads(qr_data)
        except (ValueError, TypeError) as e:
            return InvalidPayload(reason=f"not JSON: {e}")
    else:
        return InvalidPayload(reason=f"unsupported payload type {type(qr_data).__name__}")

    if not isinstance(data, dict):
        return InvalidPayload(reason="payload is not a JSON object")

    # Same legacy floor code rewrite as records read from the store
    record_id = _optional_text(data.get("id"))
    if record_id is not None:
        record_id = normalize_record_id(record_id)

    return ValidPayload(
        record_id=record_id,
        location=_optional_text(data.get("location")),
        floor=_optional_text(data.get("floor")),
        position=extract_position(data.get("position")),
        fields=dict(data),
    )


@dataclass(frozen=True)
class RegistryEntry:
    """A raw QR store entry with its payload decoded once at ingestion."""
    qr_id: Optional[str]
    location: str
    floor: str
    payload: ParsedPayload
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def record_id(self) -> Optional[str]:
        if isinstance(self.payload, ValidPayload):
            return self.payload.record_id
        return None


def parse_registry_entry(entry: Dict[str, Any]) -> RegistryEntry:
    """
    Decode one QR store entry.

    The primary mapping names its tag "qrId"; registry entries use "id".
    """
    qr_id = entry.get("qrId", entry.get("id"))
    return RegistryEntry(
        qr_id=str(qr_id) if qr_id is not None else None,
        location=str(entry.get("location") or ""),
        floor=str(entry.get("floor") or ""),
        payload=parse_qr_payload(entry.get("qrData")),
        raw=dict(entry),
    )
