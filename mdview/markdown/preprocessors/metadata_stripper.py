"""
Preprocessor that removes inline metadata tags from the display text.

The tags are read separately by ``extract_metadata`` and shown outside the
document body, so they must never reach the renderer.
"""

from ..metadata import strip_metadata_tags


def metadata_stripper_default(text: str, context: dict) -> str:
    """
    Default configuration for metadata_stripper.

    Register this in PREPROCESSORS.
    """
    return strip_metadata_tags(text)
