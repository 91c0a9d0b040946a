"""
Board Map - Master Constants Reference

Fixed values for floor resolution, placement, store layout and rendering.
Runtime-tunable values (paths, poll interval) live in config/settings.yaml.
"""

# =============================================================================
# COORDINATE CONSTANTS
# =============================================================================

# Percentage coordinate range on a floor plan image
PERCENT_MIN = 0.0
PERCENT_MAX = 100.0

# Position given to records created without one, and to QR payloads
# whose position cannot be parsed
DEFAULT_POSITION_X = 50.0
DEFAULT_POSITION_Y = 50.0

# Click-to-select window: both axes must be strictly within this many
# percentage points of an existing marker
NEAREST_MARKER_TOLERANCE = 5.0

# =============================================================================
# FLOOR CONSTANTS
# =============================================================================

# Floor labels offered by the floor selector
FLOOR_LABELS = ["F1", "B1"]

DEFAULT_FLOOR = "F1"

# Raw floor tokens found in record ids (second id segment, uppercased)
FLOOR_TOKEN_MAP = {
    "A": "F1",
    "B": "B1",
    "1": "F1",
    "1ST": "F1",
    "F1": "F1",
    "B1": "B1",
}

# Record id separator and minimum segment count for id-derived floors
RECORD_ID_SEPARATOR = "-"
MIN_ID_SEGMENTS_FOR_FLOOR = 3

# Legacy floor code rewritten when records are read
LEGACY_FLOOR_CODE = "1st"
NORMALIZED_FLOOR_CODE = "F1"

# =============================================================================
# QR PAYLOAD CONSTANTS
# =============================================================================

# Free-text position such as "x: 40, y: 60" or "X40 Y60"
QR_POSITION_PATTERN = r"x[:\s]*(\d+)[,\s]*y[:\s]*(\d+)"

# Prefix for derived QR location ids
QR_LOCATION_ID_PREFIX = "qr-"

# =============================================================================
# STORE CONSTANTS
# =============================================================================

# Keys in the local document store
RECORDS_KEY = "inspections"
PRIMARY_MAPPING_KEY = "dashboard_qr_mapping"
QR_REGISTRY_KEY = "safetyguard_qrcodes"

DEFAULT_STORE_FILENAME = "boardmap_store.json"

# Refresh interval when the store offers no change notification
DEFAULT_POLL_INTERVAL_SECONDS = 2.0

# =============================================================================
# DETAIL PANEL CONSTANTS
# =============================================================================

# Panel footprint subtracted from the viewport when clamping a drag
PANEL_WIDTH = 400
PANEL_HEIGHT = 400

DEFAULT_VIEWPORT_WIDTH = 1280
DEFAULT_VIEWPORT_HEIGHT = 800

# =============================================================================
# RENDER CONSTANTS
# =============================================================================

DEFAULT_RENDER_DPI = 150

MARKER_RADIUS_PX = 12
MARKER_OUTLINE_PX = 3
MARKER_LABEL_OFFSET_PX = 18

# Floor plan image per floor, relative to the data directory
DEFAULT_FLOOR_PLANS = {
    "F1": "1st Floor.jpg",
    "B1": "Basement.jpg",
}

# Source formats accepted for floor plans
RASTER_PLAN_SUFFIXES = [".jpg", ".jpeg", ".png", ".bmp", ".gif", ".tif", ".tiff"]
PDF_PLAN_SUFFIX = ".pdf"

# =============================================================================
# IMPORT CONSTANTS
# =============================================================================

# Header substrings used to find columns in an imported sheet
IMPORT_HEADER_KEYWORDS = {
    "id": ["ID", "id"],
    "status": ["검사", "상황", "status", "Status"],
    "date": ["점검일", "date", "Date"],
    "welder": ["용접", "welder", "Welder"],
    "grinder": ["연삭", "grinder", "Grinder"],
    "light": ["조명", "light", "Light"],
    "pump": ["펌프", "pump", "Pump"],
    "memo": ["조치", "사항", "memo", "Memo"],
    "x": ["X", "x"],
    "y": ["Y", "y"],
}

# Sheet preferred when a workbook holds several
IMPORT_SHEET_KEYWORD = "검사"

# Cell text marking a connected load
LOAD_CONNECTED_TOKEN = "yes"

NEVER_INSPECTED = "-"


# =============================================================================
# ENUMS / CONSTANTS CLASSES
# =============================================================================

class InspectionStatus:
    """Inspection status values."""
    COMPLETE = "Complete"
    IN_PROGRESS = "In Progress"
    PENDING = "Pending"

    ALL = [COMPLETE, IN_PROGRESS, PENDING]


class PlacementState:
    """Interactive states of a floor plan view."""
    IDLE = "IDLE"
    SELECTED = "SELECTED"
    EDITING_POSITION = "EDITING_POSITION"
    DRAGGING = "DRAGGING"


# Marker colors by status
STATUS_COLORS = {
    InspectionStatus.COMPLETE: "#10b981",
    InspectionStatus.IN_PROGRESS: "#3b82f6",
    InspectionStatus.PENDING: "#94a3b8",
}

DEFAULT_STATUS_COLOR = "#94a3b8"
