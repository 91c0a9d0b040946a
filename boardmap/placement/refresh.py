"""
Location Refresh Module

Keeps the reconciled QR locations current. Writes made through the store
arrive as change notifications; anything else is caught by polling the
store revision on the caller's timer tick. Every refresh is a full
re-read, and the new snapshot replaces the old one in a single assignment.
"""

import logging
import time
from typing import Callable, List, Optional

from ..constants import DEFAULT_POLL_INTERVAL_SECONDS
from ..stores.document_store import StoreReadError
from ..stores.interfaces import QRRegistryRepository
from .reconciler import ReconciliationSnapshot, reconcile

logger = logging.getLogger(__name__)


class LocationRefresher:
    """Owns the current ReconciliationSnapshot of one QR store."""

    def __init__(
        self,
        qr_store: QRRegistryRepository,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.qr_store = qr_store
        self.poll_interval = poll_interval
        self.clock = clock
        self.snapshot = ReconciliationSnapshot()
        self._listeners: List[Callable[[ReconciliationSnapshot], None]] = []
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._pending = False
        self._last_revision = None
        self._last_refresh: Optional[float] = None

    @property
    def uses_notifications(self) -> bool:
        return self._unsubscribe is not None

    def add_listener(self, callback: Callable[[ReconciliationSnapshot], None]) -> None:
        self._listeners.append(callback)

    def start(self) -> ReconciliationSnapshot:
        """Subscribe to store changes where supported and load the first snapshot."""
        subscribe = getattr(self.qr_store, "subscribe", None)
        if callable(subscribe) and self._unsubscribe is None:
            self._unsubscribe = subscribe(self._on_store_change)
        return self.refresh()

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_store_change(self, key: str) -> None:
        self._pending = True

    def _revision(self):
        revision = getattr(self.qr_store, "revision", None)
        if callable(revision):
            return revision()
        return None

    def refresh(self) -> ReconciliationSnapshot:
        """
        Re-read both QR sources and swap in the new snapshot.

        A store that cannot be read leaves the previous snapshot in place.
        """
        self._pending = False
        self._last_refresh = self.clock()

        try:
            revision = self._revision()
            snapshot = reconcile(self.qr_store)
        except StoreReadError as e:
            logger.warning(f"QR store unreadable, keeping previous locations: {e}")
            return self.snapshot

        self._last_revision = revision
        self.snapshot = snapshot

        for callback in list(self._listeners):
            callback(snapshot)
        return snapshot

    def tick(self) -> bool:
        """
        Timer callback; refreshes when a change is known or suspected.

        Returns:
            True if a refresh ran
        """
        if self._pending:
            self.refresh()
            return True

        now = self.clock()
        if self._last_refresh is not None and now - self._last_refresh < self.poll_interval:
            return False

        revision = self._revision()
        if revision is not None and revision == self._last_revision:
            self._last_refresh = now
            return False

        self.refresh()
        return True
