"""
Preprocessor that moves bold emphasis inside links.

Converts:
    **[Label](https://example.com)**   → [**Label**](https://example.com)
"""

import re

BOLD_LINK_PATTERN = re.compile(r"\*\*\[([^\]]+)\]\(([^)]+)\)\*\*")


def fix_bold_links(text: str) -> str:
    """Rewrite every bold-wrapped link so the emphasis sits inside the label."""
    return BOLD_LINK_PATTERN.sub(r"[**\1**](\2)", text)


def bold_links_default(text: str, context: dict) -> str:
    """
    Default configuration for bold_links.

    Register this in PREPROCESSORS.
    """
    return fix_bold_links(text)
