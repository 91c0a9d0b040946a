# Floor plan placement and positional matching module

from .coordinate_mapper import (
    DisplayBox,
    compute_display_box,
    map_click_to_percent,
    percent_to_container_point,
)

from .floor_resolver import (
    FloorQuery,
    FloorResolver,
    normalize_floor_token,
    floor_from_qr_location,
    floor_from_registry,
    floor_from_record_id,
    resolve_floor,
)

from .reconciler import (
    ReconciliationSnapshot,
    load_locations,
    build_identifier_index,
    reconcile,
)

from .markers import (
    build_markers,
    markers_for_floor,
    status_color,
)

from .refresh import LocationRefresher

from .controller import (
    MarkerPlacementController,
    PointerEventHub,
    Notice,
    find_nearest_marker,
)

__all__ = [
    # Coordinate mapper
    "DisplayBox",
    "compute_display_box",
    "map_click_to_percent",
    "percent_to_container_point",
    # Floor resolver
    "FloorQuery",
    "FloorResolver",
    "normalize_floor_token",
    "floor_from_qr_location",
    "floor_from_registry",
    "floor_from_record_id",
    "resolve_floor",
    # Reconciler
    "ReconciliationSnapshot",
    "load_locations",
    "build_identifier_index",
    "reconcile",
    # Markers
    "build_markers",
    "markers_for_floor",
    "status_color",
    # Refresh
    "LocationRefresher",
    # Controller
    "MarkerPlacementController",
    "PointerEventHub",
    "Notice",
    "find_nearest_marker",
]
