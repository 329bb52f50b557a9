class DiagramError(Exception):
    """Base class for failures while turning a diagram block into an image."""


class DiagramRenderError(DiagramError):
    """The external diagram renderer failed, timed out, or is not installed."""


class RasterizeError(DiagramError):
    """The vector document could not be rasterized."""
