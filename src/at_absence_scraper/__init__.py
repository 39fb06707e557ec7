"""Nationalrat Absence Scraper - collect members reported absent from parlament.gv.at protocols."""

__version__ = "0.1.0"

from at_absence_scraper.models import AbsenceStatement as AbsenceStatement
from at_absence_scraper.models import Mention as Mention
from at_absence_scraper.models import ScrapeResult as ScrapeResult
from at_absence_scraper.models import SessionRecord as SessionRecord
from at_absence_scraper.period import LegislativePeriod as LegislativePeriod
from at_absence_scraper.scraper import AbsenceScraper as AbsenceScraper
