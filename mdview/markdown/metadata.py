"""
Inline document metadata embedded in markdown as custom tags.

Recognised tags:
    <!--category-- ASP.NET, PostgreSQL, Search -->
    <datetime class="hidden">2026-01-14T12:00</datetime>

Only the first occurrence of each tag is honoured when extracting. The
pipeline removes every occurrence before rendering so the tags never reach
the display surface.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

CATEGORY_PATTERN = re.compile(r"<!--\s*category\s*--\s*(.+?)\s*-->", re.IGNORECASE)
DATETIME_PATTERN = re.compile(r"<datetime[^>]*>([^<]+)</datetime>", re.IGNORECASE)


@dataclass(frozen=True)
class DocumentMetadata:
    """Metadata found in a document: ordered categories and an optional publication date."""

    categories: tuple[str, ...] = field(default_factory=tuple)
    publication_date: Optional[datetime] = None

    @property
    def has_metadata(self) -> bool:
        return bool(self.categories) or self.publication_date is not None

    def to_dict(self) -> dict:
        return {
            "categories": list(self.categories),
            "publication_date": self.publication_date.isoformat() if self.publication_date else None,
        }


def _match_categories(text: str) -> Optional[list[str]]:
    match = CATEGORY_PATTERN.search(text)
    if not match:
        return None
    return [piece.strip() for piece in match.group(1).split(",") if piece.strip()]


# Two leap-year defaults with 31-day months; a date that parses differently
# against each one was missing its year, month or day.
_FILL_DEFAULTS = (datetime(2000, 1, 1), datetime(2004, 3, 3))


def _parse_date(value: str) -> Optional[datetime]:
    value = value.strip()
    try:
        parsed = [date_parser.parse(value, default=default) for default in _FILL_DEFAULTS]
    except (ValueError, OverflowError, TypeError):
        logger.debug(f"Ignoring unparsable publication date: {value!r}")
        return None
    if parsed[0] != parsed[1]:
        logger.debug(f"Ignoring incomplete publication date: {value!r}")
        return None
    return parsed[0]


def _match_publication_date(text: str) -> Optional[datetime]:
    match = DATETIME_PATTERN.search(text)
    if not match:
        return None
    return _parse_date(match.group(1))


def extract_metadata(text: str) -> DocumentMetadata:
    """
    Extract categories and publication date from raw markdown.

    Never raises: missing tags or an unparsable date simply leave the
    corresponding field empty.
    """
    if not text:
        return DocumentMetadata()

    categories = _match_categories(text) or []
    return DocumentMetadata(
        categories=tuple(categories),
        publication_date=_match_publication_date(text),
    )


def strip_metadata_tags(text: str) -> str:
    """Remove every category and datetime tag from the text."""
    text = CATEGORY_PATTERN.sub("", text)
    return DATETIME_PATTERN.sub("", text)
