"""
External vector renderer backed by the Mermaid CLI (mmdc).

Source text goes in, an SVG document comes out. Every failure mode of the
subprocess (missing binary, non-zero exit, timeout, missing output) is raised
as ``DiagramRenderError`` so the caller can fall back per diagram block.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from ..config import get_diagram_config
from .exceptions import DiagramRenderError

logger = logging.getLogger(__name__)


def _extract_cli_error_details(stderr_text: str, limit: int = 8) -> str:
    """Condense mmdc stderr into a readable message."""
    raw = (stderr_text or "").replace("\r\n", "\n").replace("\r", "\n")
    lines = [line.strip() for line in raw.split("\n") if line.strip()]
    if not lines:
        return "unknown error"
    # Node stack frames add nothing for the reader.
    lines = [line for line in lines if not line.startswith("at ")] or lines
    return "\n".join(lines[:limit])


class MermaidCli:
    """Callable wrapper around one configured Mermaid CLI command."""

    def __init__(
        self,
        command: Optional[str] = None,
        timeout: Optional[float] = None,
        puppeteer_config: Optional[Path] = None,
    ):
        config = get_diagram_config()
        self.command = command or config["mermaid_cli"]
        self.timeout = timeout if timeout is not None else config["timeout"]
        self.puppeteer_config = puppeteer_config or config["puppeteer_config"]

    def build_command(self, in_file: Path, out_file: Path) -> list[str]:
        # Multi-word commands such as "npx --yes @mermaid-js/mermaid-cli" are split, never run through a shell.
        args = shlex.split(self.command) if any(c.isspace() for c in self.command) else [self.command]
        args += ["-i", str(in_file), "-o", str(out_file), "-b", "transparent"]
        if self.puppeteer_config and self.puppeteer_config.exists():
            args += ["-p", str(self.puppeteer_config)]
        return args

    def __call__(self, source: str) -> str:
        return self.render(source)

    def render(self, source: str) -> str:
        """Render Mermaid source to SVG text."""
        with tempfile.TemporaryDirectory(prefix="mmd_") as tdir:
            in_file = Path(tdir) / "diagram.mmd"
            out_file = Path(tdir) / "diagram.svg"
            in_file.write_text(source, encoding="utf-8")

            cmd = self.build_command(in_file, out_file)
            logger.debug(f"Running Mermaid CLI: {' '.join(shlex.quote(c) for c in cmd)}")
            try:
                result = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    check=False,
                    timeout=self.timeout,
                )
            except subprocess.TimeoutExpired as exc:
                raise DiagramRenderError(f"Mermaid CLI timed out after {self.timeout:g}s") from exc
            except OSError as exc:
                raise DiagramRenderError(f"Mermaid CLI could not be started: {exc}") from exc

            if result.returncode != 0:
                details = _extract_cli_error_details(result.stderr or result.stdout)
                raise DiagramRenderError(details)

            try:
                svg_text = out_file.read_text(encoding="utf-8")
            except OSError as exc:
                raise DiagramRenderError("Mermaid CLI did not produce SVG output") from exc

        if "<svg" not in svg_text.casefold():
            raise DiagramRenderError("Mermaid CLI did not return SVG output")
        return svg_text
