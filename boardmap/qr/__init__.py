# QR payload parsing module

from .payload import (
    ValidPayload,
    InvalidPayload,
    ParsedPayload,
    RegistryEntry,
    extract_position,
    parse_qr_payload,
    parse_registry_entry,
)

__all__ = [
    "ValidPayload",
    "InvalidPayload",
    "ParsedPayload",
    "RegistryEntry",
    "extract_position",
    "parse_qr_payload",
    "parse_registry_entry",
]
