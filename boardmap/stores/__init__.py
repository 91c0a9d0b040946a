# Local stores and collaborator interfaces

from .document_store import (
    JsonDocumentStore,
    StoreError,
    StoreReadError,
    StoreWriteError,
)

from .record_store import InspectionRecordStore

from .qr_store import QRRegistryStore

from .interfaces import (
    RecordRepository,
    QRRegistryRepository,
)

__all__ = [
    # Document store
    "JsonDocumentStore",
    "StoreError",
    "StoreReadError",
    "StoreWriteError",
    # Repositories
    "InspectionRecordStore",
    "QRRegistryStore",
    # Interfaces
    "RecordRepository",
    "QRRegistryRepository",
]
