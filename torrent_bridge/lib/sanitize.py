"""Text sanitizers for filenames and Telegram Markdown."""

import re

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._\-]")

# Characters that break legacy Telegram Markdown inside inline code
_MARKDOWN_BREAKERS = ("`", "_", "*")


def safe_filename(name: str) -> str:
    """Replace every character outside [A-Za-z0-9._-] with an underscore.

    Args:
        name: Original filename as reported by Telegram

    Returns:
        Filename safe to create in the staging directory
    """
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", name)
    # "." and ".." survive the regex but are not files
    if cleaned in ("", ".", ".."):
        return "file"
    return cleaned


def strip_markdown(text: str) -> str:
    """Remove characters that would break Markdown formatting of a status line."""
    for char in _MARKDOWN_BREAKERS:
        text = text.replace(char, "")
    return text
