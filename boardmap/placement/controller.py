"""
Marker Placement Controller Module

Interactive state of one floor plan view: selection, hover, numeric
position editing, direct placement by clicking the plan, and dragging the
detail panel. Position changes are written back through the record store.

States:
    IDLE -> SELECTED            marker click or select(id)
    SELECTED -> EDITING_POSITION begin_edit()
    EDITING_POSITION -> SELECTED save_edit() / cancel_edit()
    SELECTED -> IDLE            close() or a pointer down outside the panel
    DRAGGING                    while the detail panel is being moved
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..constants import (
    DEFAULT_FLOOR,
    FLOOR_LABELS,
    NEAREST_MARKER_TOLERANCE,
    PANEL_WIDTH,
    PANEL_HEIGHT,
    DEFAULT_VIEWPORT_WIDTH,
    DEFAULT_VIEWPORT_HEIGHT,
    PlacementState,
)
from ..models.records import InspectionRecord, Marker, Position
from ..stores.document_store import StoreError
from ..stores.interfaces import RecordRepository
from .coordinate_mapper import map_click_to_percent
from .floor_resolver import FloorResolver
from .markers import build_markers, markers_for_floor
from .reconciler import ReconciliationSnapshot

logger = logging.getLogger(__name__)

POINTER_MOVE = "pointermove"
POINTER_UP = "pointerup"


@dataclass(frozen=True)
class Notice:
    """User-visible message raised by the controller."""
    level: str
    message: str


class PointerEventHub:
    """Window-level pointer listeners (move/up) shared by the view."""

    def __init__(self):
        self._listeners: Dict[str, List[Callable[[float, float], None]]] = {}

    def add_listener(self, event_type: str, callback: Callable[[float, float], None]) -> None:
        self._listeners.setdefault(event_type, []).append(callback)

    def remove_listener(self, event_type: str, callback: Callable[[float, float], None]) -> None:
        callbacks = self._listeners.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def listener_count(self, event_type: Optional[str] = None) -> int:
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        return sum(len(callbacks) for callbacks in self._listeners.values())

    def dispatch(self, event_type: str, x: float, y: float) -> None:
        for callback in list(self._listeners.get(event_type, [])):
            callback(x, y)


def find_nearest_marker(
    markers: Sequence[Marker],
    point: Position,
    tolerance: float = NEAREST_MARKER_TOLERANCE,
) -> Optional[Marker]:
    """
    Find the marker closest to a point inside the tolerance window.

    Both axes must be strictly within tolerance percentage points; among
    candidates the smallest euclidean distance wins, ties go to the
    earlier marker.
    """
    if not markers:
        return None

    coords = np.array([[m.position.x, m.position.y] for m in markers], dtype=float)
    deltas = np.abs(coords - np.array([point.x, point.y]))
    in_window = np.all(deltas < tolerance, axis=1)
    if not in_window.any():
        return None

    distances = np.hypot(deltas[:, 0], deltas[:, 1])
    distances[~in_window] = np.inf
    return markers[int(np.argmin(distances))]


def _is_coordinate(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


class MarkerPlacementController:
    """
    Owns selection and placement state for one floor plan view.

    At most one record is active at a time; selecting another record
    discards any uncommitted edit of the previous one.
    """

    def __init__(
        self,
        record_store: RecordRepository,
        snapshot: Optional[ReconciliationSnapshot] = None,
        resolver: Optional[FloorResolver] = None,
        floors: Sequence[str] = FLOOR_LABELS,
        floor: str = DEFAULT_FLOOR,
        on_floor_change: Optional[Callable[[str], None]] = None,
        events: Optional[PointerEventHub] = None,
        viewport: Tuple[float, float] = (DEFAULT_VIEWPORT_WIDTH, DEFAULT_VIEWPORT_HEIGHT),
        tolerance: float = NEAREST_MARKER_TOLERANCE,
    ):
        self.record_store = record_store
        self.snapshot = snapshot or ReconciliationSnapshot()
        self.resolver = resolver or FloorResolver()
        self.floors = list(floors)
        self.on_floor_change = on_floor_change
        self.events = events or PointerEventHub()
        self.viewport = viewport
        self.tolerance = tolerance

        if floor not in self.floors:
            raise ValueError(f"Unknown floor {floor!r}; expected one of {self.floors}")
        self._internal_floor = floor
        self._external_floor: Optional[str] = None

        self.records: List[InspectionRecord] = []
        self.selected_id: Optional[str] = None
        self.hovered_id: Optional[str] = None
        self.scratch: Optional[Position] = None
        self.notices: List[Notice] = []

        self.panel_offset: Tuple[float, float] = (0.0, 0.0)
        self._drag_origin: Optional[Tuple[float, float]] = None
        self._base_state = PlacementState.IDLE

        self._selection_listeners: List[Callable[[Optional[str]], None]] = []
        self._notice_listeners: List[Callable[[Notice], None]] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> str:
        if self._drag_origin is not None:
            return PlacementState.DRAGGING
        return self._base_state

    @property
    def is_editing(self) -> bool:
        return self._base_state == PlacementState.EDITING_POSITION

    @property
    def selected_record(self) -> Optional[InspectionRecord]:
        if self.selected_id is None:
            return None
        return self._find_record(self.selected_id)

    def _find_record(self, record_id: str) -> Optional[InspectionRecord]:
        for record in self.records:
            if record.id == record_id:
                return record
        return None

    # ------------------------------------------------------------------
    # Records, locations and floors
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Read the records from the store."""
        self.set_records(self.record_store.list())

    def set_records(self, records: Sequence[InspectionRecord]) -> None:
        """Replace the view's records; a vanished selection is closed."""
        self.records = list(records)
        if self.selected_id is not None and self.selected_record is None:
            logger.debug(f"Selected record {self.selected_id} no longer exists")
            self.close()

    def apply_snapshot(self, snapshot: ReconciliationSnapshot) -> None:
        """Swap in a newly reconciled set of QR locations."""
        self.snapshot = snapshot

    @property
    def floor(self) -> str:
        return self._external_floor or self._internal_floor

    def set_floor(self, floor: str) -> None:
        """
        Request a floor. With an on_floor_change handler the caller owns the
        floor and is expected to push it back through sync_floor().
        """
        if floor not in self.floors:
            raise ValueError(f"Unknown floor {floor!r}; expected one of {self.floors}")
        if self.on_floor_change is not None:
            self.on_floor_change(floor)
        else:
            self._internal_floor = floor

    def sync_floor(self, floor: Optional[str]) -> None:
        """Externally controlled floor; None hands control back to the view."""
        if floor is not None and floor not in self.floors:
            raise ValueError(f"Unknown floor {floor!r}; expected one of {self.floors}")
        self._external_floor = floor

    def markers(self) -> List[Marker]:
        """Markers for every positioned record, with resolved floors."""
        return build_markers(self.records, self.snapshot, self.resolver)

    def visible_markers(self) -> List[Marker]:
        """Markers on the selected floor."""
        return markers_for_floor(self.markers(), self.floor)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def on_selection_change(self, callback: Callable[[Optional[str]], None]) -> None:
        self._selection_listeners.append(callback)

    def on_notice(self, callback: Callable[[Notice], None]) -> None:
        self._notice_listeners.append(callback)

    def _emit_selection(self) -> None:
        for callback in list(self._selection_listeners):
            callback(self.selected_id)

    def _notify(self, level: str, message: str) -> None:
        notice = Notice(level, message)
        self.notices.append(notice)
        for callback in list(self._notice_listeners):
            callback(notice)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, record_id: Optional[str], notify: bool = True) -> bool:
        """
        Make a record the active one.

        Args:
            record_id: Record to select; None closes the panel
            notify: Emit a selection change (False when the request came
                from the sibling list view)

        Returns:
            True if the record is now selected
        """
        if record_id is None:
            self.close(notify=notify)
            return False

        record = self._find_record(record_id)
        if record is None:
            logger.debug(f"Selection ignored: unknown record {record_id}")
            return False

        changed = record_id != self.selected_id
        if changed:
            self._end_drag_listeners()
            self.panel_offset = (0.0, 0.0)

        self.selected_id = record_id
        self._base_state = PlacementState.SELECTED
        self.scratch = record.position

        if changed and notify:
            self._emit_selection()
        return True

    def sync_selection(self, record_id: Optional[str]) -> bool:
        """Selection pushed from outside; no change notification is echoed."""
        return self.select(record_id, notify=False)

    def click_marker(self, record_id: str) -> bool:
        return self.select(record_id)

    def hover(self, record_id: Optional[str]) -> None:
        self.hovered_id = record_id

    def close(self, notify: bool = True) -> None:
        """Clear the selection; an uncommitted edit is dropped."""
        had_selection = self.selected_id is not None
        self._end_drag_listeners()
        self.selected_id = None
        self.scratch = None
        self._base_state = PlacementState.IDLE
        if had_selection and notify:
            self._emit_selection()

    def pointer_down(self, in_panel: bool = False, on_marker: bool = False, on_plan: bool = False) -> None:
        """
        Pointer pressed somewhere in the view.

        Presses outside the detail panel close it, except on a marker or on
        the floor plan surface (handled by click_marker / click_image).
        """
        if self.selected_id is None:
            return
        if in_panel or on_marker or on_plan:
            return
        self.close()

    # ------------------------------------------------------------------
    # Numeric position editing
    # ------------------------------------------------------------------

    def begin_edit(self) -> bool:
        """Enter edit mode, seeding the scratch buffer from the record."""
        record = self.selected_record
        if record is None:
            return False
        self.scratch = record.position or Position.default()
        self._base_state = PlacementState.EDITING_POSITION
        return True

    def set_scratch(self, x: Any, y: Any) -> None:
        """Store edit-form values; validated on save."""
        if not self.is_editing:
            return
        if _is_coordinate(x) and _is_coordinate(y):
            self.scratch = Position(float(x), float(y))
        else:
            self.scratch = None

    def save_edit(self) -> bool:
        """
        Commit the scratch position to the selected record.

        On failure the controller stays in edit mode with the buffer kept.

        Returns:
            True if the position was written
        """
        if not self.is_editing or self.selected_id is None:
            return False

        if self.scratch is None or not (_is_coordinate(self.scratch.x) and _is_coordinate(self.scratch.y)):
            self._notify("error", "Position must be numeric.")
            return False

        committed = self._commit_position(self.selected_id, self.scratch)
        if committed is None:
            return False

        self.scratch = committed
        self._base_state = PlacementState.SELECTED
        self._notify("info", "Position saved.")
        return True

    def cancel_edit(self) -> None:
        """Leave edit mode and restore the committed position."""
        if not self.is_editing:
            return
        record = self.selected_record
        self.scratch = record.position if record else None
        self._base_state = PlacementState.SELECTED

    # ------------------------------------------------------------------
    # Direct placement
    # ------------------------------------------------------------------

    def click_image(
        self,
        container_size: Tuple[float, float],
        image_size: Optional[Tuple[float, float]],
        click_point: Tuple[float, float],
    ) -> Optional[str]:
        """
        Click on the floor plan outside any marker.

        With a selection, the record moves to the click at once. Without
        one, the nearest positioned record within tolerance is selected and
        moved, whatever floor it resolves to; otherwise nothing happens.

        Returns:
            Id of the record that was moved, or None
        """
        position = map_click_to_percent(container_size, image_size, click_point)
        if position is None:
            return None

        if self.selected_id is not None:
            target_id = self.selected_id
        else:
            nearest = find_nearest_marker(self.markers(), position, self.tolerance)
            if nearest is None:
                return None
            self.select(nearest.id)
            target_id = nearest.id

        committed = self._commit_position(target_id, position)
        if committed is None:
            return None

        self.scratch = committed
        return target_id

    # ------------------------------------------------------------------
    # Store writes
    # ------------------------------------------------------------------

    def _commit_position(self, record_id: str, position: Position) -> Optional[Position]:
        """Write one record's position through the store; None on failure."""
        try:
            records = self.record_store.list()
            if not any(r.id == record_id for r in records):
                raise StoreError(f"Record {record_id} not found in store")
            updated = [
                r.with_position(position) if r.id == record_id else r
                for r in records
            ]
            self.record_store.update(updated)
        except StoreError as e:
            logger.warning(f"Failed to save position of {record_id}: {e}")
            self._notify("error", f"Failed to save position: {e}")
            return None

        self.records = updated
        committed = self._find_record(record_id).position
        logger.info(f"Moved {record_id} to ({committed.x:.1f}%, {committed.y:.1f}%)")
        return committed

    # ------------------------------------------------------------------
    # Detail panel dragging
    # ------------------------------------------------------------------

    def begin_drag(self, pointer_x: float, pointer_y: float, on_control: bool = False) -> bool:
        """
        Start moving the detail panel. Presses on buttons or inputs
        (on_control) do not start a drag.
        """
        if self.selected_id is None or on_control or self._drag_origin is not None:
            return False

        self._drag_origin = (
            pointer_x - self.panel_offset[0],
            pointer_y - self.panel_offset[1],
        )
        self.events.add_listener(POINTER_MOVE, self.drag_to)
        self.events.add_listener(POINTER_UP, self._on_pointer_up)
        return True

    def drag_to(self, pointer_x: float, pointer_y: float) -> None:
        if self._drag_origin is None:
            return
        max_x = max(0.0, self.viewport[0] - PANEL_WIDTH)
        max_y = max(0.0, self.viewport[1] - PANEL_HEIGHT)
        new_x = pointer_x - self._drag_origin[0]
        new_y = pointer_y - self._drag_origin[1]
        self.panel_offset = (
            max(0.0, min(new_x, max_x)),
            max(0.0, min(new_y, max_y)),
        )

    def _on_pointer_up(self, pointer_x: float, pointer_y: float) -> None:
        self.end_drag()

    def end_drag(self) -> None:
        self._end_drag_listeners()

    def _end_drag_listeners(self) -> None:
        if self._drag_origin is None:
            return
        self.events.remove_listener(POINTER_MOVE, self.drag_to)
        self.events.remove_listener(POINTER_UP, self._on_pointer_up)
        self._drag_origin = None
