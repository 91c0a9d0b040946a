"""
Coordinate Mapper Module

Converts pointer positions over a "contain"-fitted floor plan image into
percentage coordinates of the image itself, skipping the letterbox bars.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from shapely.geometry import Point, box

from ..models.records import Position, clamp_percent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DisplayBox:
    """Area actually covered by the image inside its container (pixels)."""
    offset_x: float
    offset_y: float
    width: float
    height: float

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        return (
            self.offset_x,
            self.offset_y,
            self.offset_x + self.width,
            self.offset_y + self.height,
        )

    def contains(self, point: Tuple[float, float]) -> bool:
        """Check if a container-local point lands on the image (edges included)."""
        return box(*self.bounds).covers(Point(point))


def compute_display_box(
    container_size: Tuple[float, float],
    image_size: Optional[Tuple[float, float]],
) -> Optional[DisplayBox]:
    """
    Compute where a contain-fitted image is drawn inside its container.

    Args:
        container_size: (width, height) of the container in pixels
        image_size: Natural (width, height) of the image; None if not loaded

    Returns:
        DisplayBox, or None if the image is not loaded or sizes are degenerate
    """
    if not image_size:
        return None

    container_width, container_height = container_size
    natural_width, natural_height = image_size

    if natural_width <= 0 or natural_height <= 0:
        return None
    if container_width <= 0 or container_height <= 0:
        return None

    container_aspect = container_width / container_height
    image_aspect = natural_width / natural_height

    if image_aspect > container_aspect:
        # Wider than the container: bars above and below
        display_width = container_width
        display_height = container_width / image_aspect
        offset_x = 0.0
        offset_y = (container_height - display_height) / 2
    else:
        # Taller than the container: bars left and right
        display_width = container_height * image_aspect
        display_height = container_height
        offset_x = (container_width - display_width) / 2
        offset_y = 0.0

    return DisplayBox(offset_x, offset_y, display_width, display_height)


def map_click_to_percent(
    container_size: Tuple[float, float],
    image_size: Optional[Tuple[float, float]],
    click_point: Tuple[float, float],
) -> Optional[Position]:
    """
    Map a click inside the container to image percentage coordinates.

    Args:
        container_size: (width, height) of the container in pixels
        image_size: Natural (width, height) of the image; None if not loaded
        click_point: (x, y) of the click relative to the container

    Returns:
        Clamped Position, or None for letterbox clicks and unloaded images
    """
    display = compute_display_box(container_size, image_size)
    if display is None:
        logger.debug("Click ignored: floor plan image not loaded")
        return None

    if not display.contains(click_point):
        return None

    local_x = click_point[0] - display.offset_x
    local_y = click_point[1] - display.offset_y

    x = local_x / display.width * 100
    y = local_y / display.height * 100

    return Position(clamp_percent(x), clamp_percent(y))


def percent_to_container_point(
    container_size: Tuple[float, float],
    image_size: Optional[Tuple[float, float]],
    position: Position,
) -> Optional[Tuple[float, float]]:
    """
    Inverse of map_click_to_percent: where a position is drawn in the container.

    Returns:
        (x, y) in container pixels, or None if the image is not loaded
    """
    display = compute_display_box(container_size, image_size)
    if display is None:
        return None

    return (
        display.offset_x + position.x / 100 * display.width,
        display.offset_y + position.y / 100 * display.height,
    )
