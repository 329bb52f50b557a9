"""
Loading markdown documents from disk or over HTTP.

The loader also works out where relative images live: the file's directory
for local documents, the URL's directory for remote ones.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import requests

from . import __version__
from .markdown.config import get_http_timeout
from .markdown.preprocessors.image_paths import ImageBase

logger = logging.getLogger(__name__)

USER_AGENT = f"mdview/{__version__}"


class DocumentLoadError(Exception):
    """The document could not be read or downloaded."""


@dataclass(frozen=True)
class LoadedDocument:
    content: str
    source: str
    image_base: ImageBase


def is_remote_source(source: str) -> bool:
    return urlparse(source).scheme.lower() in ("http", "https")


def base_url_for(url: str) -> str:
    """
    Directory URL of a document URL.

        https://host/posts/2024/article.md -> https://host/posts/2024/
    """
    parsed = urlparse(url)
    directory = parsed.path.rsplit("/", 1)[0] + "/" if "/" in parsed.path else "/"
    return f"{parsed.scheme}://{parsed.netloc}{directory}"


def _fetch(url: str, timeout: float) -> str:
    try:
        response = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise DocumentLoadError(f"Could not download {url}: {exc}") from exc
    return response.text


def load_document(source, timeout: Optional[float] = None) -> LoadedDocument:
    """Read ``source`` (a path or an http(s) URL) and derive its image base."""
    source = str(source)
    if is_remote_source(source):
        content = _fetch(source, timeout if timeout is not None else get_http_timeout())
        logger.info(f"Loaded remote document {source} ({len(content)} chars)")
        return LoadedDocument(content, source, ImageBase.from_url(base_url_for(source)))

    path = Path(source).expanduser()
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DocumentLoadError(f"Could not read {path}: {exc}") from exc
    logger.info(f"Loaded document {path} ({len(content)} chars)")
    return LoadedDocument(content, str(path), ImageBase.from_path(path.resolve().parent))
