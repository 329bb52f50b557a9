from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

ATX_HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")
EMPHASIS_PATTERN = re.compile(r"\*\*\*(.+?)\*\*\*|\*\*(.+?)\*\*|\*(.+?)\*|___(.+?)___|__(.+?)__|_(.+?)_")
LINK_PATTERN = re.compile(r"(?<!!)\[([^\]]+)\]\([^)]+\)")
CODE_PATTERN = re.compile(r"`([^`]+)`")
IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\([^)]+\)")
SLUG_INVALID_CHARS_PATTERN = re.compile(r"[^\w\s-]|_")
SLUG_SPACES_PATTERN = re.compile(r"\s+")


@dataclass
class HeadingItem:
    level: int
    text: str
    line: int
    slug: str
    children: list["HeadingItem"] = field(default_factory=list)

    @property
    def display_text(self) -> str:
        """Heading text indented two spaces per level below 1, for flat navigation lists."""
        return " " * ((self.level - 1) * 2) + self.text

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "text": self.text,
            "line": self.line,
            "slug": self.slug,
            "children": [child.to_dict() for child in self.children],
        }


def _first_group(match: re.Match) -> str:
    return next(group for group in match.groups() if group is not None)


def clean_heading_text(text: str) -> str:
    """
    Strip inline markdown so only the human-facing heading text remains.

    Emphasis first, then links (label kept), inline code (content kept) and
    images (alt text kept).
    """
    text = EMPHASIS_PATTERN.sub(_first_group, text)
    text = LINK_PATTERN.sub(r"\1", text)
    text = CODE_PATTERN.sub(r"\1", text)
    text = IMAGE_PATTERN.sub(r"\1", text)
    return text.strip()


def generate_slug(text: str) -> str:
    """GitHub-style anchor: "What's New in .NET 10?" -> "whats-new-in-net-10"."""
    slug = SLUG_INVALID_CHARS_PATTERN.sub("", text.lower())
    slug = SLUG_SPACES_PATTERN.sub("-", slug)
    return slug.strip("-")


def _parse_heading(line: str, line_number: int) -> Optional[HeadingItem]:
    match = ATX_HEADING_PATTERN.match(line.rstrip())
    if not match:
        return None

    text = clean_heading_text(match.group(2))
    if not text:
        return None

    return HeadingItem(
        level=len(match.group(1)),
        text=text,
        line=line_number,
        slug=generate_slug(text),
    )


def build_hierarchy(headings: Iterable[HeadingItem]) -> list[HeadingItem]:
    """
    Nest a flat, document-ordered heading list.

    A heading becomes the last child of the nearest preceding heading with a
    strictly lower level, or a root when there is none. Skipped levels are
    allowed: an H3 directly after an H1 nests under the H1.
    """
    toc: list[HeadingItem] = []
    stack: list[HeadingItem] = []
    for heading in headings:
        while stack and stack[-1].level >= heading.level:
            stack.pop()

        if stack:
            stack[-1].children.append(heading)
        else:
            toc.append(heading)

        stack.append(heading)

    return toc


def extract_headings(markdown: str) -> list[HeadingItem]:
    """
    Given raw markdown, return a hierarchical list of ATX headings.

    Lines are scanned independently, so heading-like lines inside fenced code
    blocks are included. Setext headings are not recognised.
    """
    if not markdown:
        return []

    flat = []
    for line_number, line in enumerate(markdown.split("\n")):
        heading = _parse_heading(line, line_number)
        if heading is not None:
            flat.append(heading)

    return build_hierarchy(flat)


def flatten_headings(headings: Iterable[HeadingItem]) -> list[HeadingItem]:
    """Pre-order walk of a heading tree, as shown in a navigation list."""
    result: list[HeadingItem] = []
    for heading in headings:
        result.append(heading)
        result.extend(flatten_headings(heading.children))
    return result
