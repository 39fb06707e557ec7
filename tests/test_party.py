"""
Tests for club/party resolution in party.py.

Run: uv run pytest tests/test_party.py -v
"""

import json

import pytest
from bs4 import BeautifulSoup

from at_absence_scraper.fetcher import FetchError
from at_absence_scraper.models import PARTY_UNBEKANNT
from at_absence_scraper.party import (
    ProfilePartyLookup,
    normalize_party,
    party_from_embedded_data,
    party_from_klub_label,
    party_from_mandate_list,
    party_from_member_row,
    resolve_party,
)

# ── Helpers ──────────────────────────────────────────────────────────────────


def _profile_with_mandates(mandates: list) -> str:
    props = {"data": {"content": {"biografie": {"mandatefunktionen": {"mandate": mandates}}}}}
    return (
        "<html><body><script>new Vue({ props: "
        + json.dumps(props, ensure_ascii=False)
        + " });</script></body></html>"
    )


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


KLUB_PROFILE = "<html><body><p>Klub:  Freiheitlicher Parlamentsklub </p></body></html>"

MANDATE_LIST_PROFILE = """
<html><body>
  <section>
    <h3>Politische Mandate/Funktionen</h3>
    <ul>
      <li>Mitglied des Bundesrates, 2010-2013</li>
      <li>Abgeordnete zum Nationalrat (XXVII.-XXVIII. GP), SPÖ</li>
    </ul>
  </section>
</body></html>
"""


# ── normalize_party() ────────────────────────────────────────────────────────


class TestNormalizeParty:
    """Raw club labels map to canonical acronyms."""

    @pytest.mark.parametrize(
        "label, expected",
        [
            ("Freiheitlicher Parlamentsklub", "FPÖ"),
            ("FPÖ", "FPÖ"),
            ("SPÖ-Parlamentsklub", "SPÖ"),
            ("Sozialdemokratische Partei Österreichs", "SPÖ"),
            ("Parlamentsklub der Österreichischen Volkspartei", "ÖVP"),
            ("ÖVP", "ÖVP"),
            ("NEOS Parlamentsklub", "NEOS"),
            ("Grüner Klub im Parlament", "Grüne"),
            ("Die Grünen", "Grüne"),
        ],
    )
    def test_known(self, label, expected):
        assert normalize_party(label) == expected

    def test_unknown_passes_through_trimmed(self):
        assert normalize_party("  ohne Klubzugehörigkeit ") == "ohne Klubzugehörigkeit"


# ── Profile strategies ───────────────────────────────────────────────────────


class TestEmbeddedData:
    """Nationalrat mandate from the profile's embedded data."""

    def test_active_mandate_preferred(self):
        html = _profile_with_mandates(
            [
                {"gremium": "NR", "klub": "SPÖ", "aktiv": False},
                {"gremium": "BR", "klub": "NEOS", "aktiv": True},
                {"gremium": "NR", "klub": "ÖVP", "aktiv": True},
            ]
        )
        assert party_from_embedded_data(_soup(html)) == "ÖVP"

    def test_any_club_when_none_active(self):
        html = _profile_with_mandates(
            [
                {"gremium": "NR", "aktiv": False},
                {"gremium": "NR", "klub": "Grüne", "aktiv": False},
            ]
        )
        assert party_from_embedded_data(_soup(html)) == "Grüne"

    def test_electoral_party_last(self):
        html = _profile_with_mandates([{"gremium": "NR", "wahlpartei": "FPÖ", "aktiv": False}])
        assert party_from_embedded_data(_soup(html)) == "FPÖ"

    def test_other_chamber_only(self):
        html = _profile_with_mandates([{"gremium": "BR", "klub": "SPÖ"}])
        assert party_from_embedded_data(_soup(html)) is None

    def test_no_script(self):
        assert party_from_embedded_data(_soup(KLUB_PROFILE)) is None

    def test_structured_club_skipped(self):
        """A club given as an object is ignored; the electoral party still counts."""
        html = _profile_with_mandates(
            [
                {"gremium": "NR", "aktiv": True, "klub": {"kurz": "SPÖ"}},
                {"gremium": "NR", "aktiv": True, "wahlpartei": "SPÖ"},
            ]
        )
        assert party_from_embedded_data(_soup(html)) == "SPÖ"

    @pytest.mark.parametrize("klub", [{"kurz": "SPÖ"}, ["SPÖ"], 7, "   "])
    def test_malformed_club_only(self, klub):
        html = _profile_with_mandates([{"gremium": "NR", "aktiv": True, "klub": klub}])
        assert party_from_embedded_data(_soup(html)) is None
        assert resolve_party(html) == PARTY_UNBEKANNT


def test_klub_label():
    assert party_from_klub_label(_soup(KLUB_PROFILE)) == "Freiheitlicher Parlamentsklub"


def test_mandate_list():
    assert party_from_mandate_list(_soup(MANDATE_LIST_PROFILE)) == "SPÖ"


def test_mandate_list_requires_section_heading():
    html = MANDATE_LIST_PROFILE.replace("Politische Mandate/Funktionen", "Ausbildung")
    assert party_from_mandate_list(_soup(html)) is None


# ── resolve_party() ──────────────────────────────────────────────────────────


class TestResolveParty:
    """Strategies are tried in order and the result is normalized."""

    def test_embedded_data_wins(self):
        html = _profile_with_mandates(
            [{"gremium": "NR", "klub": "NEOS Parlamentsklub", "aktiv": True}]
        ).replace("<body>", "<body>" + KLUB_PROFILE)
        assert resolve_party(html) == "NEOS"

    def test_klub_label_normalized(self):
        assert resolve_party(KLUB_PROFILE) == "FPÖ"

    def test_mandate_list(self):
        assert resolve_party(MANDATE_LIST_PROFILE) == "SPÖ"

    def test_nothing_found(self):
        assert resolve_party("<html><body><h1>Anna Muster</h1></body></html>") == PARTY_UNBEKANNT


# ── party_from_member_row() ──────────────────────────────────────────────────


class TestMemberRow:
    """Party column of the member filter API."""

    def test_span_text(self):
        row = ['<a href="/person/1">Muster Anna</a>', '<span title="SPÖ">SPÖ</span>', "Wien"]
        assert party_from_member_row(row) == "SPÖ"

    def test_normalized(self):
        row = ["x", "<span>Freiheitlicher Parlamentsklub</span>"]
        assert party_from_member_row(row) == "FPÖ"

    @pytest.mark.parametrize("row", [None, [], ["only"], ["x", ""], ["x", "no span"]])
    def test_malformed(self, row):
        assert party_from_member_row(row) is None


# ── ProfilePartyLookup ───────────────────────────────────────────────────────


class TestProfilePartyLookup:
    """Fetches the profile and resolves its party."""

    def test_fetches_and_resolves(self):
        class FakeFetcher:
            def __init__(self):
                self.urls = []

            def get(self, url):
                self.urls.append(url)
                return KLUB_PROFILE

        fetcher = FakeFetcher()
        assert ProfilePartyLookup(fetcher)("https://example.com/person/1") == "FPÖ"
        assert fetcher.urls == ["https://example.com/person/1"]

    def test_fetch_error_propagates(self):
        class FailingFetcher:
            def get(self, url):
                raise FetchError(url, "timed out", None, "timeout")

        with pytest.raises(FetchError):
            ProfilePartyLookup(FailingFetcher())("https://example.com/person/1")
