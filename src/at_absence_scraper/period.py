"""Nationalrat legislative period (Gesetzgebungsperiode) URL resolution.

The parliament website addresses every sitting by its period, written as a
roman numeral, and the sitting number within that period:

  Landing page:  /gegenstand/XXVIII/NRSITZ/12?selectedStage=111

This module encapsulates that logic so the scraper can target any period.
"""

import re
from dataclasses import dataclass
from pathlib import Path

from at_absence_scraper.config import BASE_URL, DEFAULT_PERIOD

_ROMAN_RE = re.compile(r"^M{0,3}(CM|CD|D?C{0,3})(XC|XL|L?X{0,3})(IX|IV|V?I{0,3})$")


@dataclass(frozen=True)
class LegislativePeriod:
    """Represents one Nationalrat legislative period and its URL patterns."""

    numeral: str = DEFAULT_PERIOD

    def __post_init__(self) -> None:
        if not self.numeral or not _ROMAN_RE.match(self.numeral):
            raise ValueError(
                f"Period must be a roman numeral (e.g. XXVIII), got {self.numeral!r}"
            )

    @property
    def label(self) -> str:
        """Human-readable label, e.g., 'XXVIII. GP'"""
        return f"{self.numeral}. GP"

    @property
    def output_name(self) -> str:
        """Filesystem-safe name for output files, e.g., 'parliament_absences_XXVIII'"""
        return f"parliament_absences_{self.numeral}"

    def session_path(self, session_number: int) -> str:
        return f"/gegenstand/{self.numeral}/NRSITZ/{session_number}?selectedStage=111"

    def session_url(self, session_number: int, base_url: str = BASE_URL) -> str:
        return base_url + self.session_path(session_number)

    @classmethod
    def from_string(cls, period: str) -> "LegislativePeriod":
        """Create a period from a CLI-style string like 'xxviii' or 'XXVIII. GP'."""
        normalized = period.strip().upper()
        normalized = re.sub(r"\.?\s*GP$", "", normalized)
        return cls(numeral=normalized)

    @staticmethod
    def data_dir_for_period(period: str) -> Path:
        """Convert a CLI-style period string to the data directory Path.

        Examples:
            "XXVIII" -> Path("data/XXVIII")
        """
        return Path("data") / LegislativePeriod.from_string(period).numeral
