"""Find absence announcements in a protocol document."""

from at_absence_scraper.markup import clean_text, parse_html
from at_absence_scraper.models import AbsenceStatement
from at_absence_scraper.names import NameResolver

ABSENCE_MARKER = "verhindert gemeldet"


class AbsenceExtractor:
    """Turns protocol markup into AbsenceStatements.

    Every paragraph whose normalized text contains "verhindert gemeldet" is a
    statement, including "Es ist niemand als verhindert gemeldet." (which has
    no mentions).  A document without such a paragraph yields an empty list;
    telling "no protocol" apart from "no absences" is the caller's job.
    """

    def __init__(self, resolver: NameResolver):
        self.resolver = resolver

    def extract(self, html: str, document_url: str = "") -> list[AbsenceStatement]:
        soup = parse_html(html)
        statements = []
        for p in soup.find_all("p"):
            text = clean_text(p)
            if ABSENCE_MARKER not in text:
                continue
            statements.append(
                AbsenceStatement(
                    raw_text=text,
                    mentions=self.resolver.resolve_mentions(p, text),
                    protocol_document_url=document_url,
                )
            )
        return statements
