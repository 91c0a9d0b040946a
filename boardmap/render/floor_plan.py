"""
Floor Plan Renderer Module

Loads floor plan images (raster files or PDF sheets) and paints
inspection markers on them.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Tuple

import pymupdf
from PIL import Image, ImageColor, ImageDraw

from ..constants import (
    DEFAULT_RENDER_DPI,
    MARKER_RADIUS_PX,
    MARKER_OUTLINE_PX,
    MARKER_LABEL_OFFSET_PX,
    RASTER_PLAN_SUFFIXES,
    PDF_PLAN_SUFFIX,
)
from ..models.records import Marker
from ..placement.markers import status_color

logger = logging.getLogger(__name__)


class FloorPlanError(Exception):
    """Raised when a floor plan cannot be loaded."""
    pass


def render_pdf_sheet(filepath: str, dpi: int = DEFAULT_RENDER_DPI, page_number: int = 0) -> Image.Image:
    """
    Render one page of a PDF floor plan to an RGB image.

    Args:
        filepath: Path to the PDF
        dpi: Resolution in dots per inch
        page_number: 0-indexed page

    Returns:
        PIL image

    Raises:
        FloorPlanError: If the PDF cannot be opened or has no such page
    """
    try:
        doc = pymupdf.open(filepath)
    except Exception as e:
        raise FloorPlanError(f"Cannot open floor plan PDF: {filepath}. Error: {e}")

    try:
        if page_number < 0 or page_number >= doc.page_count:
            raise FloorPlanError(
                f"Invalid page number: {page_number}. "
                f"Floor plan has {doc.page_count} pages."
            )
        page = doc.load_page(page_number)

        # 72 points per inch is the PDF standard
        zoom = dpi / 72.0
        pix = page.get_pixmap(matrix=pymupdf.Matrix(zoom, zoom), alpha=False)
        image = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
    finally:
        doc.close()

    logger.debug(f"Rendered floor plan sheet {filepath} at {dpi} DPI: {image.size}")
    return image


def load_floor_plan(filepath: str, dpi: int = DEFAULT_RENDER_DPI) -> Image.Image:
    """
    Load a floor plan as an RGB image.

    Raises:
        FloorPlanError: If the file is missing, unsupported or unreadable
    """
    path = Path(filepath)
    if not path.is_file():
        raise FloorPlanError(f"Floor plan not found: {filepath}")

    suffix = path.suffix.lower()
    if suffix == PDF_PLAN_SUFFIX:
        return render_pdf_sheet(str(path), dpi)

    if suffix not in RASTER_PLAN_SUFFIXES:
        raise FloorPlanError(f"Unsupported floor plan format: {path.suffix}")

    try:
        with Image.open(path) as img:
            return img.convert("RGB")
    except OSError as e:
        raise FloorPlanError(f"Cannot read floor plan image: {filepath}. Error: {e}")


def image_natural_size(filepath: str, dpi: int = DEFAULT_RENDER_DPI) -> Optional[Tuple[int, int]]:
    """Natural (width, height) of a floor plan; None while it cannot be loaded."""
    try:
        return load_floor_plan(filepath, dpi).size
    except FloorPlanError as e:
        logger.debug(f"Floor plan size unavailable: {e}")
        return None


class FloorPlanRenderer:
    """Paints status-colored markers onto a floor plan image."""

    def __init__(self, radius: int = MARKER_RADIUS_PX, show_labels: bool = True):
        self.radius = radius
        self.show_labels = show_labels

    def marker_center(self, image_size: Tuple[int, int], marker: Marker) -> Tuple[float, float]:
        width, height = image_size
        return (marker.position.x / 100 * width, marker.position.y / 100 * height)

    def render(
        self,
        image: Image.Image,
        markers: Sequence[Marker],
        selected_id: Optional[str] = None,
    ) -> Image.Image:
        """
        Draw markers on a copy of the floor plan.

        Args:
            image: Floor plan image
            markers: Markers to draw (already filtered to the floor)
            selected_id: Marker drawn enlarged

        Returns:
            New annotated image
        """
        annotated = image.convert("RGB").copy()
        draw = ImageDraw.Draw(annotated)

        for marker in markers:
            cx, cy = self.marker_center(annotated.size, marker)
            radius = self.radius * 1.3 if marker.id == selected_id else self.radius
            color = ImageColor.getrgb(status_color(marker.record.status))

            draw.ellipse(
                [cx - radius, cy - radius, cx + radius, cy + radius],
                fill=color,
                outline=(255, 255, 255),
                width=MARKER_OUTLINE_PX,
            )
            # Crosshair
            draw.line([cx - 2 * radius, cy, cx + 2 * radius, cy], fill=color, width=1)
            draw.line([cx, cy - 2 * radius, cx, cy + 2 * radius], fill=color, width=1)

            if self.show_labels:
                draw.text(
                    (cx - radius, cy - radius - MARKER_LABEL_OFFSET_PX),
                    marker.id,
                    fill=color,
                )

        return annotated

    def render_to_file(
        self,
        plan_path: str,
        markers: Sequence[Marker],
        output_path: str,
        dpi: int = DEFAULT_RENDER_DPI,
    ) -> str:
        """Load a floor plan, draw markers and save as PNG."""
        image = load_floor_plan(plan_path, dpi)
        annotated = self.render(image, markers)

        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)
        annotated.save(output, format="PNG")
        logger.info(f"Annotated floor plan written: {output} ({len(markers)} markers)")
        return str(output)
