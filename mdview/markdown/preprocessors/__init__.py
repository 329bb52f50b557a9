# mdview/markdown/preprocessors/__init__.py

from .bold_links import bold_links_default
from .image_paths import image_paths_default
from .mermaid import mermaid_default
from .metadata_stripper import metadata_stripper_default

PREPROCESSORS = [
    metadata_stripper_default,  # Metadata is shown separately, never rendered
    bold_links_default,  # Before image paths so link targets are still raw
    image_paths_default,  # Resolve relative images against the document base
    mermaid_default,  # Last: its image references are already absolute
    # Order matters - they run sequentially
]


def apply_preprocessors(text, context):
    """Apply all preprocessors in order"""
    for processor in PREPROCESSORS:
        text = processor(text, context)
    return text
