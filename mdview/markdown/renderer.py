# mdview/markdown/renderer.py

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Optional

from .config import get_asset_root
from .metadata import DocumentMetadata, extract_metadata
from .preprocessors import apply_preprocessors
from .preprocessors.image_paths import NO_IMAGE_BASE, ImageBase
from .preprocessors.mermaid import DiagramRun, default_asset_directory
from .toc_extractor import HeadingItem, extract_headings

logger = logging.getLogger(__name__)


def process_markdown(text, context=None):
    """
    Turn raw markdown into display markdown.

    Args:
        text: Raw markdown text
        context: Optional dict for processors (image_base, dark_mode,
            asset_directory, diagram_renderer, rasterizer). It is copied,
            never modified, so one dict can serve many documents.
    """
    context = dict(context or {})
    context.setdefault("image_base", NO_IMAGE_BASE)
    context.setdefault("dark_mode", False)
    context["diagram_run"] = DiagramRun(context.get("asset_directory") or default_asset_directory())

    text = apply_preprocessors(text or "", context)
    return text.strip()


def count_words(text: str) -> int:
    return len(text.split()) if text else 0


class DocumentProcessor:
    """
    Host-facing facade over the pipeline.

    Holds the display configuration (image base, dark mode) and a temp
    directory created once per instance. Every ``process`` call snapshots the
    configuration into a fresh context, so calls for different documents may
    run concurrently on one instance.
    """

    def __init__(self, dark_mode: bool = False, diagram_renderer=None, rasterizer=None, asset_root=None):
        self.dark_mode = dark_mode
        self.image_base = NO_IMAGE_BASE
        self.diagram_renderer = diagram_renderer
        self.rasterizer = rasterizer
        root = Path(asset_root) if asset_root else get_asset_root()
        root.mkdir(parents=True, exist_ok=True)
        self.temp_directory = Path(tempfile.mkdtemp(prefix="mdview-", dir=root))
        logger.info(f"Diagram assets will be written to {self.temp_directory}")

    def set_base_path(self, path) -> None:
        self.image_base = ImageBase.from_path(path)

    def set_base_url(self, url: Optional[str]) -> None:
        self.image_base = ImageBase.from_url(url)

    def set_image_base(self, image_base: ImageBase) -> None:
        self.image_base = image_base

    def set_dark_mode(self, dark_mode: bool) -> None:
        self.dark_mode = dark_mode

    def build_context(self) -> dict:
        return {
            "image_base": self.image_base,
            "dark_mode": self.dark_mode,
            "asset_directory": self.temp_directory,
            "diagram_renderer": self.diagram_renderer,
            "rasterizer": self.rasterizer,
        }

    def extract_metadata(self, text: str) -> DocumentMetadata:
        return extract_metadata(text)

    def extract_headings(self, text: str) -> list[HeadingItem]:
        return extract_headings(text)

    def process(self, text: str) -> str:
        return process_markdown(text, self.build_context())
