"""Locate the stenographic protocol document(s) of a session landing page.

A session's record of proceedings is published either as one full
stenographic protocol, or (for recent sittings, before the full protocol is
finalized) as a series of section documents, of which the "Präsidium"
sections carry the absence announcements.  Three strategies are tried in
order; the first one that finds something wins.
"""

from collections.abc import Callable
from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from at_absence_scraper.config import SECTION_WARNING_THRESHOLD
from at_absence_scraper.markup import clean_text, find_lists, iter_embedded_props, parse_html
from at_absence_scraper.models import ProtocolKind, ProtocolRef

FULL_PROTOCOL_LABEL = "Stenographisches Protokoll"
PRESIDIUM_LABEL = "Präsidium"
ORIGINAL_DOCUMENT_MARKER = "fnameorig_"  # naming convention of original documents
MAX_ANCESTOR_LEVELS = 5


def _dedupe(urls: list[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(urls))


def _nearest_container(element: Tag, *names: str) -> Optional[Tag]:
    for name in names:
        container = element.find_parent(name)
        if container is not None:
            return container
    return element.parent


def find_full_protocol(soup: BeautifulSoup, base_url: str) -> Optional[ProtocolRef]:
    """Original-document link inside a block labelled "Stenographisches Protokoll"."""
    for link in soup.find_all("a", href=True):
        href = link["href"]
        if ORIGINAL_DOCUMENT_MARKER not in href or ".html" not in href:
            continue
        container = _nearest_container(link, "li", "div")
        for _ in range(MAX_ANCESTOR_LEVELS):
            if container is None:
                break
            if FULL_PROTOCOL_LABEL in container.get_text():
                url = urljoin(base_url, href)
                print(f"  Found full stenographic protocol: {url}")
                return ProtocolRef(kind=ProtocolKind.FULL, urls=(url,))
            container = container.parent
    return None


def _html_document_links(item: dict) -> list[str]:
    """``protocol.data.links[*].documents[*].link`` of HTML documents.

    Entries still being prepared carry placeholders (e.g. a string instead of
    the ``protocol`` object); anything not shaped as expected is skipped.
    """
    protocol = item.get("protocol")
    data = protocol.get("data") if isinstance(protocol, dict) else None
    groups = data.get("links") if isinstance(data, dict) else None
    if not isinstance(groups, list):
        return []

    links = []
    for group in groups:
        documents = group.get("documents") if isinstance(group, dict) else None
        if not isinstance(documents, list):
            continue
        for doc in documents:
            if not isinstance(doc, dict) or doc.get("type") != "HTML":
                continue
            link = doc.get("link")
            if isinstance(link, str) and link:
                links.append(link)
    return links


def find_presidium_sections_in_data(soup: BeautifulSoup, base_url: str) -> Optional[ProtocolRef]:
    """HTML documents of "Präsidium" entries in the embedded ``progress`` data."""
    urls: list[str] = []
    for props in iter_embedded_props(soup, "progress", PRESIDIUM_LABEL):
        for progress in find_lists(props, "progress"):
            for item in progress:
                if not isinstance(item, dict) or item.get("text") != PRESIDIUM_LABEL:
                    continue
                urls.extend(urljoin(base_url, link) for link in _html_document_links(item))

    if not urls:
        return None
    urls = list(_dedupe(urls))
    print(f"  Found {len(urls)} Präsidium sections from embedded data")
    return ProtocolRef(kind=ProtocolKind.SECTIONED, urls=tuple(urls))


def find_presidium_sections_in_markup(soup: BeautifulSoup, base_url: str) -> Optional[ProtocolRef]:
    """HTML links next to a paragraph reading exactly "Präsidium"."""
    urls: list[str] = []
    for p in soup.find_all("p"):
        if clean_text(p) != PRESIDIUM_LABEL:
            continue
        container = _nearest_container(p, "td", "div")
        if container is None:
            continue
        for link in container.find_all("a", href=True):
            if ".html" in link["href"]:
                urls.append(urljoin(base_url, link["href"]))

    if not urls:
        return None
    urls = list(_dedupe(urls))
    print(f"  Found {len(urls)} Präsidium sections from HTML")
    if len(urls) > SECTION_WARNING_THRESHOLD:
        print(
            f"  WARNING: {len(urls)} sections is too many for Präsidium"
            f" (first: {', '.join(urls[:3])})"
        )
    return ProtocolRef(kind=ProtocolKind.SECTIONED, urls=tuple(urls))


PROTOCOL_STRATEGIES: tuple[Callable[[BeautifulSoup, str], Optional[ProtocolRef]], ...] = (
    find_full_protocol,
    find_presidium_sections_in_data,
    find_presidium_sections_in_markup,
)


def locate_protocol(html: str, base_url: str) -> Optional[ProtocolRef]:
    """Return where the protocol of a session lives, or None if none is published."""
    soup = parse_html(html)
    for strategy in PROTOCOL_STRATEGIES:
        ref = strategy(soup, base_url)
        if ref is not None:
            return ref
    return None
