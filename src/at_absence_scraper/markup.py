"""Text and embedded-data helpers shared by the HTML parsers."""

import json
import re
from typing import Any, Iterator

from bs4 import BeautifulSoup, Tag

_PROPS_RE = re.compile(r"props:\s*(?={)")
_DECODER = json.JSONDecoder()


def normalize_text(text: str) -> str:
    """Replace non-breaking spaces, collapse whitespace runs and trim."""
    return " ".join(text.replace("\u00a0", " ").split())


def clean_text(element: Tag) -> str:
    """Element text with its original whitespace, normalized (see normalize_text)."""
    return normalize_text(element.get_text())


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def iter_embedded_props(soup: BeautifulSoup, *markers: str) -> Iterator[dict[str, Any]]:
    """Yield every JSON object assigned to ``props:`` inside an inline script.

    The site renders its pages from a data object embedded as
    ``...({ props: {...} });`` in a <script> tag.  Only scripts containing all
    ``markers`` are decoded; objects that are not valid JSON are skipped.
    """
    for script in soup.find_all("script"):
        content = script.string or script.get_text()
        if not content or not all(marker in content for marker in markers):
            continue
        for match in _PROPS_RE.finditer(content):
            try:
                data, _ = _DECODER.raw_decode(content, match.end())
            except json.JSONDecodeError:
                continue
            if isinstance(data, dict):
                yield data


def find_lists(data: Any, key: str) -> Iterator[list]:
    """Yield every list stored under ``key`` anywhere inside a decoded JSON value."""
    if isinstance(data, dict):
        for k, value in data.items():
            if k == key and isinstance(value, list):
                yield value
            yield from find_lists(value, key)
    elif isinstance(data, list):
        for item in data:
            yield from find_lists(item, key)
