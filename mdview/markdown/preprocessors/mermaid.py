"""
Preprocessor that turns ```mermaid fences into rendered images.

Each block is rendered to SVG by the external renderer, adjusted for the Qt
SVG renderer, rasterized to PNG and replaced by a markdown image reference:

    ```mermaid
    flowchart TD
        A --> B
    ```
                    → ![flowchart](/tmp/mdview-x/run-y/mermaid_0.png)

A block that fails at any step is replaced by a block-quoted warning followed
by its original source, and the rest of the document is still rendered.
"""

from __future__ import annotations

import logging
import re
import tempfile
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Callable, Optional

from ..config import get_asset_root
from ..diagrams.exceptions import DiagramError
from ..diagrams.mermaid_cli import MermaidCli
from ..diagrams.rasterizer import SUPERSAMPLE_SCALE, rasterize_svg
from ..diagrams.source import detect_diagram_type, normalize_diagram_source
from ..diagrams.svg_fixer import fix_svg_for_host

logger = logging.getLogger(__name__)

DIAGRAM_LANGUAGE = "mermaid"
MERMAID_BLOCK_PATTERN = re.compile(r"```mermaid[ \t]*\r?\n(.*?)```", re.DOTALL)
PARSE_ERROR_PATTERN = re.compile(r"parse|unexpected|expecting|lexical error", re.IGNORECASE)
UNSUPPORTED_NOTE = (
    "_Line breaks inside labels (`<br/>`) and nested subgraphs are not supported "
    "by the diagram renderer._"
)

DiagramRenderer = Callable[[str], str]
Rasterizer = Callable[[str, float], bytes]


@lru_cache(maxsize=None)
def default_asset_directory() -> Path:
    """Process-lifetime directory for diagram images, created on first use."""
    root = get_asset_root()
    root.mkdir(parents=True, exist_ok=True)
    directory = Path(tempfile.mkdtemp(prefix="mdview-", dir=root))
    logger.info(f"Diagram assets will be written to {directory}")
    return directory


@dataclass
class DiagramRun:
    """
    Per-render state: the image counter and the directory images go to.

    One instance is created for every full-document render, so the counter
    always starts at 0 and two renders never share file names.
    """

    asset_root: Path
    counter: int = 0
    _run_dir: Optional[Path] = field(default=None, repr=False)

    @property
    def output_dir(self) -> Path:
        if self._run_dir is None:
            self._run_dir = Path(tempfile.mkdtemp(prefix="run-", dir=self.asset_root))
        return self._run_dir

    def next_asset_path(self) -> Path:
        path = self.output_dir / f"{DIAGRAM_LANGUAGE}_{self.counter}.png"
        self.counter += 1
        return path


def classify_failure(message: str) -> str:
    return "parse error" if PARSE_ERROR_PATTERN.search(message or "") else "cannot render"


def build_diagnostic_block(source: str, diagram_type: str, message: str) -> str:
    """Block-quoted warning followed by the untouched diagram source."""
    kind = classify_failure(message)
    quoted_message = "\n".join(f"> {line}" if line else ">" for line in message.splitlines()) or "> (no details)"
    fenced_source = source.rstrip("\n")
    return (
        f"\n\n> **Mermaid diagram ({diagram_type}): {kind}**\n"
        f">\n"
        f"{quoted_message}\n"
        f">\n"
        f"> {UNSUPPORTED_NOTE}\n"
        f"\n```{DIAGRAM_LANGUAGE}\n{fenced_source}\n```\n\n"
    )


def render_diagram_block(
    source: str,
    index: int,
    dark_mode: bool,
    run: DiagramRun,
    renderer: DiagramRenderer,
    rasterizer: Rasterizer,
) -> str:
    """Render one diagram block to an image reference, or a diagnostic block on failure."""
    diagram_type = detect_diagram_type(source)
    logger.debug(f"Rendering diagram {index} ({diagram_type})")
    try:
        svg_text = renderer(normalize_diagram_source(source))
        svg_text = fix_svg_for_host(svg_text, dark_mode=dark_mode)
        png_bytes = rasterizer(svg_text, SUPERSAMPLE_SCALE)
        asset_path = run.next_asset_path()
        asset_path.write_bytes(png_bytes)
    except Exception as exc:
        # Failures are per block; the rest of the document still renders.
        message = str(exc) or exc.__class__.__name__
        logger.warning(
            f"Diagram {index} ({diagram_type}) failed: {message}",
            exc_info=not isinstance(exc, DiagramError),
        )
        return build_diagnostic_block(source, diagram_type, message)

    logger.debug(f"Diagram {index} written to {asset_path}")
    return f"\n\n![{diagram_type}]({asset_path.as_posix()})\n\n"


def render_diagrams(
    text: str,
    dark_mode: bool = False,
    run: Optional[DiagramRun] = None,
    renderer: Optional[DiagramRenderer] = None,
    rasterizer: Optional[Rasterizer] = None,
) -> str:
    """
    Replace every mermaid fence in ``text``, in document order.

    Args:
        text: Markdown text
        dark_mode: Selects the label text color
        run: Counter and output directory for this render; a fresh one is used when omitted
        renderer: Source-to-SVG collaborator (Mermaid CLI by default)
        rasterizer: SVG-to-PNG collaborator (Qt by default)
    """
    if "```mermaid" not in text:
        return text

    run = run or DiagramRun(default_asset_directory())
    renderer = renderer or MermaidCli()
    rasterizer = rasterizer or rasterize_svg
    index = 0

    def replace_block(match):
        nonlocal index
        replacement = render_diagram_block(match.group(1), index, dark_mode, run, renderer, rasterizer)
        index += 1
        return replacement

    return MERMAID_BLOCK_PATTERN.sub(replace_block, text)


def mermaid_default(text: str, context: dict) -> str:
    """
    Default configuration for mermaid.

    Register this in PREPROCESSORS. The context supplies ``dark_mode``,
    ``diagram_run`` and optionally the ``diagram_renderer``/``rasterizer``
    collaborators. Without a ``diagram_run`` a fresh one is used for this
    call only.
    """
    run = context.get("diagram_run")
    if run is None:
        run = DiagramRun(context.get("asset_directory") or default_asset_directory())
    return render_diagrams(
        text,
        dark_mode=bool(context.get("dark_mode")),
        run=run,
        renderer=context.get("diagram_renderer"),
        rasterizer=context.get("rasterizer"),
    )
