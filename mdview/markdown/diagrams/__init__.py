from .exceptions import DiagramError, DiagramRenderError, RasterizeError
from .source import detect_diagram_type, normalize_diagram_source

__all__ = (
    "DiagramError",
    "DiagramRenderError",
    "RasterizeError",
    "detect_diagram_type",
    "normalize_diagram_source",
)
