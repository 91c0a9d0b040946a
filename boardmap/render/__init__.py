# Floor plan rendering module

from .floor_plan import (
    FloorPlanRenderer,
    FloorPlanError,
    load_floor_plan,
    render_pdf_sheet,
    image_natural_size,
)

__all__ = [
    "FloorPlanRenderer",
    "FloorPlanError",
    "load_floor_plan",
    "render_pdf_sheet",
    "image_natural_size",
]
