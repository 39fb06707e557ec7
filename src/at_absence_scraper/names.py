"""Member name normalization and resolution for absence statements.

Absence paragraphs come in two shapes:

  * with profile links:  ``... die Abgeordneten <a href="/person/1234">Mag. Anna Muster</a>
    und <a href="/person/5678">Dr. Bernd Beispiel</a>.``
  * plain text:          ``Als verhindert gemeldet ist heute Abgeordneter Bernd Beispiel.``

Linked names are resolved to a profile URL and a club/party (cached per
profile); plain-text names stay unresolved until the backfill pass matches
them against names seen with a link.
"""

import re
from collections.abc import Callable
from typing import Optional
from urllib.parse import urljoin

from bs4 import Tag

from at_absence_scraper.config import BASE_URL
from at_absence_scraper.fetcher import FetchError
from at_absence_scraper.markup import clean_text, normalize_text
from at_absence_scraper.models import (
    NOBODY_PHRASE,
    PARTY_UNKNOWN,
    PARTY_UNRESOLVED,
    Mention,
    PersonCacheEntry,
)

PROFILE_PATH = "/person/"

# Academic and professional titles as used on parlament.gv.at (longest first).
TITLES = (
    "MMMag",
    "MMag",
    "Mag",
    "DDr",
    "Dr",
    "Dipl.-Ing",
    "Dipl-Ing",
    "Ing",
    "DI",
    "Prof",
    "Priv.-Doz",
    "Priv-Doz",
    "Komm.-Rat",
    "Komm-Rat",
    "LL.M",
    "BSc",
    "MSc",
    "MBA",
    "MAS",
    "PhD",
    "BA",
    "MA",
    "MR",
    "KR",
    "Bgm",
)

# A whole title token: optional feminine suffix (Mag.a, Dr.in) and optional period.
_TITLE_TOKEN = (
    r"(?:" + "|".join(re.escape(t) for t in TITLES) + r")(?:\.(?:in|a)\b|\.)?"
)
_TITLE_RE = re.compile(r"(?<!\S)" + _TITLE_TOKEN + r"(?=[\s,]|$)")
_TITLE_ONLY_RE = re.compile(r"^" + _TITLE_TOKEN + r"$")
_SPACE_BEFORE_COMMA_RE = re.compile(r"\s+,")
_NAME_SPLIT_RE = re.compile(r",\s*|\s+und\s+")

# Sentence templates naming absent members; the "names" group holds the list.
ABSENCE_TEMPLATES = (
    re.compile(
        r"Als verhindert gemeldet sind (?:heute )?(?:die )?Abgeordneten (?P<names>.+)\."
    ),
    re.compile(
        r"Als verhindert gemeldet ist (?:heute )?(?:Herr |Frau )?(?:der |die )?"
        r"Abgeordnete[r]? (?P<names>.+)\."
    ),
)


def strip_titles(name: str) -> str:
    """Remove academic/professional titles and a trailing comma from a name.

    "Mag. Anna Muster, BA" -> "Anna Muster", "Dr.in Eva Beispiel," -> "Eva Beispiel"
    """
    text = normalize_text(_TITLE_RE.sub(" ", name))
    text = _SPACE_BEFORE_COMMA_RE.sub(",", text)
    return text.rstrip(",").strip()


def surname_of(name: str) -> str:
    parts = name.split()
    return parts[-1] if parts else ""


def parse_plain_names(text: str) -> list[str]:
    """Extract member names from an absence sentence without profile links."""
    if NOBODY_PHRASE in text:
        return []

    for template in ABSENCE_TEMPLATES:
        match = template.search(text)
        if match:
            break
    else:
        return []

    names = []
    for token in _NAME_SPLIT_RE.split(strip_titles(match.group("names"))):
        token = token.strip()
        if token and not _TITLE_ONLY_RE.match(token):
            names.append(token)
    return names


class NameIndex:
    """Normalized display name (and surname) -> most recently seen cache entry.

    Only used to backfill mentions that lack a profile link.  Two different
    members sharing a surname overwrite each other; last write wins.
    """

    def __init__(self) -> None:
        self._entries: dict[str, PersonCacheEntry] = {}

    def add(self, entry: PersonCacheEntry) -> None:
        self._entries[entry.display_name] = entry
        surname = surname_of(entry.display_name)
        if surname and surname != entry.display_name:
            self._entries[surname] = entry

    def lookup(self, name: str) -> Optional[PersonCacheEntry]:
        entry = self._entries.get(name)
        if entry is None:
            surname = surname_of(name)
            if surname:
                entry = self._entries.get(surname)
        return entry

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: str) -> bool:
        return name in self._entries


class NameResolver:
    """Turns an absence paragraph into Mentions, memoizing party lookups per profile.

    ``party_lookup`` maps an absolute profile URL to a party label and may raise
    FetchError.  The caches are owned by the caller and may be pre-seeded.
    """

    def __init__(
        self,
        party_lookup: Callable[[str], str],
        base_url: str = BASE_URL,
        person_cache: dict[str, PersonCacheEntry] | None = None,
        name_index: NameIndex | None = None,
    ):
        self.party_lookup = party_lookup
        self.base_url = base_url
        self.person_cache = person_cache if person_cache is not None else {}
        self.name_index = name_index if name_index is not None else NameIndex()

    def resolve_mentions(self, paragraph: Tag, raw_text: str) -> list[Mention]:
        if NOBODY_PHRASE in raw_text:
            return []

        links = [a for a in paragraph.find_all("a", href=True) if PROFILE_PATH in a["href"]]
        if not links:
            return [
                Mention(display_name=name, profile_id=None, party=PARTY_UNRESOLVED)
                for name in parse_plain_names(raw_text)
            ]

        mentions = []
        for link in links:
            raw_name = clean_text(link)
            if not raw_name:
                continue
            profile_id = urljoin(self.base_url, link["href"])
            mentions.append(self._resolve_linked(strip_titles(raw_name), profile_id))
        return mentions

    def _resolve_linked(self, name: str, profile_id: str) -> Mention:
        cached = self.person_cache.get(profile_id)
        if cached is not None:
            return Mention(display_name=name, profile_id=profile_id, party=cached.party)

        try:
            party = self.party_lookup(profile_id)
        except FetchError as e:
            print(f"  Could not fetch club for {name}: {e}")
            party = PARTY_UNKNOWN

        entry = PersonCacheEntry(profile_id=profile_id, display_name=name, party=party)
        self.person_cache[profile_id] = entry
        self.name_index.add(entry)
        return Mention(display_name=name, profile_id=profile_id, party=party)
