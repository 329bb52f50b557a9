"""Inspection and normalization of Mermaid diagram source text."""

from __future__ import annotations

import re

# Ordered: longer keywords that share a prefix must come first.
DIAGRAM_TYPES = (
    ("flowchart", "flowchart"),
    ("graph", "graph"),
    ("sequencediagram", "sequence diagram"),
    ("classdiagram", "class diagram"),
    ("statediagram", "state diagram"),
    ("erdiagram", "entity-relationship diagram"),
    ("journey", "user journey"),
    ("gantt", "gantt chart"),
    ("pie", "pie chart"),
    ("gitgraph", "git graph"),
    ("mindmap", "mindmap"),
    ("timeline", "timeline"),
    ("sankey", "sankey diagram"),
    ("xychart", "xy chart"),
    ("block", "block diagram"),
)

LINE_BREAK_PATTERN = re.compile(r"<br\s*/?>", re.IGNORECASE)
INDENT = "    "


def _first_content_line(source: str) -> str:
    for line in source.splitlines():
        if line.strip():
            return line.strip()
    return ""


def detect_diagram_type(source: str) -> str:
    """
    Return a human-readable label for the diagram type.

    Unknown declarations fall back to their first token, or "unknown" for an
    empty block.
    """
    first_line = _first_content_line(source).lower()
    for keyword, label in DIAGRAM_TYPES:
        if first_line.startswith(keyword):
            return label

    tokens = first_line.split()
    return tokens[0] if tokens else "unknown"


def normalize_diagram_source(source: str) -> str:
    """
    Prepare diagram source for the external renderer.

    Line-break markup is replaced by a space. The declaration line is moved to
    column zero and every following non-blank line gets exactly four spaces of
    indentation, whatever it had before.
    """
    source = LINE_BREAK_PATTERN.sub(" ", source.replace("\r\n", "\n"))

    lines: list[str] = []
    seen_declaration = False
    for line in source.split("\n"):
        stripped = line.strip()
        if not stripped:
            # Leading blank lines are dropped; inner ones are kept empty.
            if seen_declaration:
                lines.append("")
            continue
        if not seen_declaration:
            lines.append(stripped)
            seen_declaration = True
        else:
            lines.append(INDENT + stripped)

    return "\n".join(lines).rstrip("\n") + "\n"
