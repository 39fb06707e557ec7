"""Club/party resolution from member profile pages and member-list API rows."""

import re
from collections.abc import Callable
from typing import Optional

from bs4 import BeautifulSoup

from at_absence_scraper.fetcher import Fetcher
from at_absence_scraper.markup import clean_text, iter_embedded_props, parse_html
from at_absence_scraper.models import PARTY_UNBEKANNT

# Keyword (lowercase substring) -> canonical label, checked in order
_PARTY_KEYWORDS = (
    (("freiheitlich", "fpö"), "FPÖ"),
    (("sozialdemokrat", "spö"), "SPÖ"),
    (("volkspartei", "övp"), "ÖVP"),
    (("neos",), "NEOS"),
    (("grüne", "grün"), "Grüne"),
)

CHAMBER = "NR"

_KLUB_RE = re.compile(r"Klub:\s*(.+)")
_MANDATE_SECTION = "Politische Mandate/Funktionen"
_NR_MANDATE_RE = re.compile(r"Abgeordnete[r]? zum Nationalrat[^,]*,\s*([A-ZÄÖÜ]+)")


def normalize_party(label: str) -> str:
    """Map a raw club/party label to its canonical short form.

    "Freiheitlicher Parlamentsklub" -> "FPÖ", "SPÖ-Parlamentsklub" -> "SPÖ".
    Labels matching no keyword pass through (trimmed).
    """
    lowered = label.lower()
    for keywords, canonical in _PARTY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return canonical
    return label.strip()


# -- Profile strategies --------------------------------------------------------


def party_from_embedded_data(soup: BeautifulSoup) -> Optional[str]:
    """Club of the member's Nationalrat mandate from the embedded page data.

    Prefers an active mandate, then any Nationalrat mandate with a club, then
    the electoral party of a Nationalrat mandate.
    """
    for props in iter_embedded_props(soup, "props:", "mandate"):
        try:
            mandates = props["data"]["content"]["biografie"]["mandatefunktionen"]["mandate"]
        except (KeyError, TypeError):
            continue
        if not isinstance(mandates, list):
            continue
        nr_mandates = [
            m for m in mandates if isinstance(m, dict) and m.get("gremium") == CHAMBER
        ]
        for m in nr_mandates:
            if _label(m.get("klub")) and m.get("aktiv") is not False:
                return _label(m["klub"])
        for m in nr_mandates:
            if _label(m.get("klub")):
                return _label(m["klub"])
        for m in nr_mandates:
            if _label(m.get("wahlpartei")):
                return _label(m["wahlpartei"])
    return None


def _label(value: object) -> Optional[str]:
    """Non-blank string values only; structured or empty entries are skipped."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def party_from_klub_label(soup: BeautifulSoup) -> Optional[str]:
    """Text following a literal "Klub:" label."""
    for p in soup.find_all("p"):
        match = _KLUB_RE.search(clean_text(p))
        if match:
            return match.group(1).strip()
    return None


def party_from_mandate_list(soup: BeautifulSoup) -> Optional[str]:
    """Acronym after an "Abgeordnete(r) zum Nationalrat" entry in the functions list."""
    for section in soup.find_all("section"):
        heading = section.find("h3")
        if not heading or _MANDATE_SECTION not in heading.get_text():
            continue
        for li in section.find_all("li"):
            match = _NR_MANDATE_RE.search(clean_text(li))
            if match:
                return match.group(1)
    return None


PARTY_STRATEGIES: tuple[Callable[[BeautifulSoup], Optional[str]], ...] = (
    party_from_embedded_data,
    party_from_klub_label,
    party_from_mandate_list,
)


def resolve_party(html: str) -> str:
    """Resolve the normalized party of a member profile page, or "Unbekannt"."""
    soup = parse_html(html)
    for strategy in PARTY_STRATEGIES:
        label = _label(strategy(soup))
        if label:
            return normalize_party(label)
    return PARTY_UNBEKANNT


# -- Member list API -----------------------------------------------------------


def party_from_member_row(row: object) -> Optional[str]:
    """Party of one row of the member filter API.

    Rows are arrays like ``[name_html, party_html, constituency, state, ...]``;
    the party is the text of the <span> in the second element.
    """
    if not isinstance(row, list) or len(row) < 2 or not row[1]:
        return None
    span = BeautifulSoup(str(row[1]), "lxml").find("span")
    if span is None:
        return None
    label = span.get_text(strip=True)
    return normalize_party(label) if label else None


class ProfilePartyLookup:
    """Party-lookup collaborator: fetches a profile page and resolves its party.

    FetchError from the fetcher propagates; the caller decides the fallback.
    """

    def __init__(self, fetcher: Fetcher):
        self.fetcher = fetcher

    def __call__(self, profile_url: str) -> str:
        return resolve_party(self.fetcher.get(profile_url))
