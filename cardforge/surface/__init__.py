from cardforge.surface.base import (
    CollectorField,
    FrameGroup,
    FramePlacement,
    Half,
    RenderSurface,
    Tab,
    TextField,
)
from cardforge.surface.preflight import check_surface_available

__all__ = [
    "CollectorField",
    "FrameGroup",
    "FramePlacement",
    "Half",
    "RenderSurface",
    "Tab",
    "TextField",
    "check_surface_available",
]
