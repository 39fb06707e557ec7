"""
Tests for legislative period handling in period.py.

Run: uv run pytest tests/test_period.py -v
"""

from pathlib import Path

import pytest

from at_absence_scraper.period import LegislativePeriod


class TestLegislativePeriod:
    """Roman-numeral periods and the URLs derived from them."""

    def test_default(self):
        assert LegislativePeriod().numeral == "XXVIII"

    @pytest.mark.parametrize("numeral", ["XXVIII", "XXVII", "XIV", "IX"])
    def test_valid(self, numeral):
        assert LegislativePeriod(numeral).numeral == numeral

    def test_label_and_output_name(self):
        period = LegislativePeriod("XXVII")
        assert period.label == "XXVII. GP"
        assert period.output_name == "parliament_absences_XXVII"

    def test_session_url(self):
        period = LegislativePeriod("XXVIII")
        assert period.session_path(12) == "/gegenstand/XXVIII/NRSITZ/12?selectedStage=111"
        assert (
            period.session_url(12)
            == "https://www.parlament.gv.at/gegenstand/XXVIII/NRSITZ/12?selectedStage=111"
        )

    def test_custom_base_url(self):
        assert LegislativePeriod().session_url(1, "http://localhost").startswith("http://localhost/gegenstand/")

    @pytest.mark.parametrize("bad", ["", "28", "xxviii", "XXVIIII", "ABC"])
    def test_invalid(self, bad):
        with pytest.raises(ValueError):
            LegislativePeriod(bad)


class TestFromString:
    """CLI-style period strings."""

    @pytest.mark.parametrize("raw", ["XXVIII", "xxviii", " XXVIII. GP", "XXVIII GP"])
    def test_variants(self, raw):
        assert LegislativePeriod.from_string(raw).numeral == "XXVIII"

    def test_data_dir(self):
        assert LegislativePeriod.data_dir_for_period("xxvii") == Path("data/XXVII")
