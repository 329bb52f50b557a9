"""
Post-processing of Mermaid SVG output for the Qt SVG renderer.

Qt renders the SVG Tiny profile and ignores ``<foreignObject>``, which is
where Mermaid puts its HTML node labels. Each such node is replaced by a
plain ``<text>`` element centred on the same box. Mermaid's default pastel
backgrounds are made transparent so diagrams read on light and dark themes.
"""

from __future__ import annotations

import re
from typing import Optional

from bs4 import BeautifulSoup, Tag

DARK_TEXT_COLOR = "#e6edf3"
LIGHT_TEXT_COLOR = "#1f2328"
TEXT_BASELINE_OFFSET = 5.0
LABEL_FONT_FAMILY = "sans-serif"
LABEL_FONT_SIZE = "14px"

# Node, cluster and edge-label backgrounds of the default Mermaid theme.
DEFAULT_FILL_COLORS = (
    r"#ececff",
    r"#ffffde",
    r"#e8e8e8",
    r"rgba\(\s*232\s*,\s*232\s*,\s*232\s*,\s*0?\.8\s*\)",
)
DEFAULT_FILL_PATTERN = re.compile("|".join(DEFAULT_FILL_COLORS), re.IGNORECASE)


def _to_float(value) -> float:
    try:
        return float(str(value).strip().rstrip("px"))
    except (TypeError, ValueError):
        return 0.0


def _format_number(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _first_label_text(node: Tag) -> str:
    """First meaningful text in embedded HTML: a paragraph, else the first leaf tag."""
    paragraph = node.find("p")
    if paragraph is not None:
        text = paragraph.get_text(" ", strip=True)
        if text:
            return text

    for child in node.find_all(True):
        if child.find(True) is not None:
            continue
        text = child.get_text(" ", strip=True)
        if text:
            return text
    return ""


def make_defaults_transparent(svg_text: str) -> str:
    return DEFAULT_FILL_PATTERN.sub("transparent", svg_text)


def replace_foreign_objects(soup: BeautifulSoup, text_color: str) -> int:
    """
    Rewrite every foreignObject into a centred text element.

    Nodes without any label text are removed. Returns the number of nodes
    rewritten or removed.
    """
    count = 0
    for node in soup.find_all("foreignObject"):
        count += 1
        label = _first_label_text(node)
        if not label:
            node.decompose()
            continue

        x = _to_float(node.get("x", 0))
        y = _to_float(node.get("y", 0))
        width = _to_float(node.get("width", 0))
        height = _to_float(node.get("height", 0))

        text = soup.new_tag(
            "text",
            attrs={
                "x": _format_number(x + width / 2),
                "y": _format_number(y + height / 2 + TEXT_BASELINE_OFFSET),
                "text-anchor": "middle",
                "fill": text_color,
                "font-family": LABEL_FONT_FAMILY,
                "font-size": LABEL_FONT_SIZE,
            },
        )
        text.string = label
        node.replace_with(text)
    return count


def fix_svg_for_host(svg_text: str, dark_mode: bool = False, text_color: Optional[str] = None) -> str:
    """Return SVG text the Qt renderer can draw faithfully."""
    color = text_color or (DARK_TEXT_COLOR if dark_mode else LIGHT_TEXT_COLOR)
    soup = BeautifulSoup(make_defaults_transparent(svg_text), "xml")
    replace_foreign_objects(soup, color)
    return str(soup)
