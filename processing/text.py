from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from bs4 import BeautifulSoup

_WS = re.compile(r"\s+")
_HIDDEN = ("script", "style", "noscript", "head")


def field_text(value: Any, *, html: bool = False) -> str:
    """Plain text of one record field, whitespace collapsed.

    ``None`` is an empty field. With ``html=True`` the value is parsed as
    markup and only visible text is kept, so tag names and inline scripts
    never become features.
    """
    if value is None:
        return ""
    text = value if isinstance(value, str) else str(value)
    if html:
        soup = BeautifulSoup(text, "html.parser")
        for tag in soup(list(_HIDDEN)):
            tag.decompose()
        text = soup.get_text(" ")
    return _WS.sub(" ", text).strip()


def record_text(data: Mapping[str, Any], fields: list[str], *, html: bool = False) -> str:
    """Join the configured fields of a record into one text, skipping empty ones."""
    parts = (field_text(data.get(name), html=html) for name in fields)
    return " ".join(p for p in parts if p)
