"""
Settings Module

Loads runtime settings from config/settings.yaml.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .constants import (
    DEFAULT_STORE_FILENAME,
    RECORDS_KEY,
    PRIMARY_MAPPING_KEY,
    QR_REGISTRY_KEY,
    DEFAULT_POLL_INTERVAL_SECONDS,
    NEAREST_MARKER_TOLERANCE,
    DEFAULT_FLOOR,
    DEFAULT_FLOOR_PLANS,
    DEFAULT_RENDER_DPI,
)

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path(__file__).parent.parent / "config" / "settings.yaml"


class SettingsError(Exception):
    """Raised when the settings file is malformed."""
    pass


@dataclass
class Settings:
    """Runtime settings."""
    data_dir: str = "data"
    store_filename: str = DEFAULT_STORE_FILENAME
    records_key: str = RECORDS_KEY
    primary_mapping_key: str = PRIMARY_MAPPING_KEY
    qr_registry_key: str = QR_REGISTRY_KEY
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS
    tolerance: float = NEAREST_MARKER_TOLERANCE
    default_floor: str = DEFAULT_FLOOR
    floor_plans: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_FLOOR_PLANS))
    render_dpi: int = DEFAULT_RENDER_DPI

    @property
    def store_path(self) -> Path:
        return Path(self.data_dir) / self.store_filename

    @property
    def floors(self):
        return list(self.floor_plans.keys())

    def floor_plan_path(self, floor: str) -> Optional[Path]:
        name = self.floor_plans.get(floor)
        if not name:
            return None
        return Path(self.data_dir) / name


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise SettingsError(f"Settings section '{name}' must be a mapping")
    return value


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Load settings from a YAML file.

    Missing file or missing keys fall back to the built-in defaults.

    Args:
        path: Settings file (default: config/settings.yaml)

    Returns:
        Settings

    Raises:
        SettingsError: If the file is not valid YAML or has the wrong shape
    """
    settings_path = Path(path) if path else DEFAULT_SETTINGS_PATH
    if not settings_path.exists():
        logger.debug(f"No settings file at {settings_path}, using defaults")
        return Settings()

    try:
        with open(settings_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise SettingsError(f"Cannot parse settings file {settings_path}: {e}")

    if not isinstance(data, dict):
        raise SettingsError(f"Settings file must hold a mapping: {settings_path}")

    defaults = Settings()
    store = _section(data, "store")
    keys = _section(store, "keys")
    refresh = _section(data, "refresh")
    placement = _section(data, "placement")
    render = _section(data, "render")
    floors = _section(data, "floors")

    settings = Settings(
        data_dir=str(store.get("data_dir", defaults.data_dir)),
        store_filename=str(store.get("filename", defaults.store_filename)),
        records_key=str(keys.get("records", defaults.records_key)),
        primary_mapping_key=str(keys.get("primary_mapping", defaults.primary_mapping_key)),
        qr_registry_key=str(keys.get("qr_registry", defaults.qr_registry_key)),
        poll_interval=float(refresh.get("poll_interval", defaults.poll_interval)),
        tolerance=float(placement.get("tolerance", defaults.tolerance)),
        default_floor=str(placement.get("default_floor", defaults.default_floor)),
        floor_plans={str(k): str(v) for k, v in floors.items()} or defaults.floor_plans,
        render_dpi=int(render.get("dpi", defaults.render_dpi)),
    )

    if settings.default_floor not in settings.floor_plans:
        raise SettingsError(
            f"Default floor {settings.default_floor!r} is not one of {settings.floors}"
        )

    logger.debug(f"Loaded settings from {settings_path}")
    return settings
