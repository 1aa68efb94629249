"""Human readable names for documentation nodes."""

import re
from typing import Optional

from bs4 import BeautifulSoup

_WORD_SEPARATORS = re.compile(r"[-_\s]+")


def humanize(name: str) -> str:
    """
    Turn a file or directory name into a display name.

    Examples:
        getting-started -> Getting Started
        api_reference -> Api Reference
    """
    words = [w for w in _WORD_SEPARATORS.split(name) if w]
    return " ".join(w[:1].upper() + w[1:].lower() for w in words)


def heading_text(html: str) -> Optional[str]:
    """Text of the first <h1>, else of the first <h2>, else None."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in ("h1", "h2"):
        heading = soup.find(tag)
        if heading is not None:
            text = heading.get_text().strip()
            if text:
                return text
    return None


def page_title(filename: str, html: str) -> str:
    """Title of a rendered page, falling back to its humanized filename."""
    return heading_text(html) or humanize(filename)
