"""
Preprocessor that resolves relative image references for display.

A document is displayed either from a local directory or from a remote
origin, never both. Relative image paths are resolved against that base:

    ![Alt](img/a.png)   base path /docs              → ![Alt](file:///docs/img/a.png)
    ![Alt](./img/a.png) base URL https://host/posts  → ![Alt](https://host/posts/img/a.png)

Absolute URLs (any scheme, including the file: URIs produced here) and
absolute local paths are never rewritten.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

IMAGE_PATTERN = re.compile(r"!\[(.*?)\]\(([^)]+)\)")


@dataclass(frozen=True)
class ImageBase:
    """
    Where relative image paths are resolved from.

    At most one of ``base_path`` and ``base_url`` is set; build instances with
    ``from_path``/``from_url`` to keep the two modes exclusive.
    """

    base_path: Optional[str] = None
    base_url: Optional[str] = None

    @classmethod
    def from_path(cls, path) -> "ImageBase":
        return cls(base_path=os.fspath(path) if path else None)

    @classmethod
    def from_url(cls, url: Optional[str]) -> "ImageBase":
        return cls(base_url=url.rstrip("/") if url else None)

    @property
    def is_configured(self) -> bool:
        return bool(self.base_path or self.base_url)


NO_IMAGE_BASE = ImageBase()


def _has_scheme(path: str) -> bool:
    # Single letters are drive names (C:\img.png), not schemes.
    return len(urlparse(path).scheme) > 1


def resolve_image_path(path: str, image_base: ImageBase) -> Optional[str]:
    """Return the resolved target for ``path``, or None when it stays unchanged."""
    # Absolute targets are checked first so they are never prefixed twice.
    if _has_scheme(path) or os.path.isabs(path):
        return None

    if image_base.base_url:
        clean_path = path.lstrip("./")
        return f"{image_base.base_url}/{clean_path}"

    if image_base.base_path:
        resolved = os.path.abspath(os.path.join(image_base.base_path, path))
        return Path(resolved).as_uri()

    return None


def resolve_image_paths(text: str, image_base: ImageBase) -> str:
    """
    Rewrite every relative markdown image reference against ``image_base``.

    Args:
        text: Markdown text with image references
        image_base: Resolution mode for relative paths

    Returns:
        Markdown with resolved image targets
    """
    if not image_base.is_configured:
        return text

    def replace_image_ref(match):
        alt_text = match.group(1)
        resolved = resolve_image_path(match.group(2), image_base)
        if resolved is None:
            return match.group(0)
        return f"![{alt_text}]({resolved})"

    return IMAGE_PATTERN.sub(replace_image_ref, text)


def image_paths_default(text: str, context: dict) -> str:
    """
    Default configuration for image_paths.

    Register this in PREPROCESSORS.
    """
    return resolve_image_paths(text, context.get("image_base") or NO_IMAGE_BASE)
