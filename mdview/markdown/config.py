import os
import shutil
import tempfile
from pathlib import Path

from django.conf import settings

DEFAULT_MERMAID_CLI = "npx --yes @mermaid-js/mermaid-cli"
DEFAULT_DIAGRAM_TIMEOUT = 30
DEFAULT_HTTP_TIMEOUT = 15


def _setting(name, default):
    """Read a Django setting, falling back to ``default`` outside a configured project."""
    if not settings.configured:
        return default
    return getattr(settings, name, default)


def discover_mermaid_cli():
    """
    Locate the Mermaid CLI command.

    Order: the MERMAID_CLI environment variable (used as-is, may contain
    spaces), ``mmdc`` on PATH, then ``npx`` with the published CLI package.
    """
    env_value = os.environ.get("MERMAID_CLI", "").strip()
    if env_value:
        return env_value
    mmdc_path = shutil.which("mmdc")
    if mmdc_path:
        return mmdc_path
    return DEFAULT_MERMAID_CLI


def get_diagram_config():
    """
    Configuration for the diagram sub-pipeline.

    Every value can be overridden from Django settings with the MDVIEW_ prefix.
    """
    puppeteer_config = _setting("MDVIEW_PUPPETEER_CONFIG", None)
    return {
        "mermaid_cli": _setting("MDVIEW_MERMAID_CLI", None) or discover_mermaid_cli(),
        "timeout": float(_setting("MDVIEW_DIAGRAM_TIMEOUT", DEFAULT_DIAGRAM_TIMEOUT)),
        "puppeteer_config": Path(puppeteer_config) if puppeteer_config else None,
    }


def get_asset_root():
    """Parent directory for process-lifetime diagram asset directories."""
    root = _setting("MDVIEW_ASSET_ROOT", None)
    return Path(root) if root else Path(tempfile.gettempdir())


def get_http_timeout():
    return float(_setting("MDVIEW_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT))
