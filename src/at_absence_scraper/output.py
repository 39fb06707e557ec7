"""JSON and CSV output for scraped absence data."""

import csv
import json
from pathlib import Path

from at_absence_scraper.models import (
    AbsenceStatement,
    Mention,
    PartyAggregate,
    PersonAggregate,
    ScrapeResult,
    SessionRecord,
)

PEOPLE_FIELDS = ["name", "party", "profile_id", "total_absences", "sessions"]
PARTY_FIELDS = [
    "party",
    "member_count",
    "total_absences",
    "average_absences_per_member",
    "active_member_count",
    "absence_percentage",
]


def mention_to_dict(mention: Mention) -> dict:
    return {
        "displayName": mention.display_name,
        "profileId": mention.profile_id,
        "party": mention.party,
    }


def statement_to_dict(statement: AbsenceStatement) -> dict:
    return {
        "rawText": statement.raw_text,
        "mentions": [mention_to_dict(m) for m in statement.mentions],
        "protocolDocumentUrl": statement.protocol_document_url,
    }


def session_to_dict(record: SessionRecord) -> dict:
    return {
        "sessionNumber": record.session_number,
        "sourceUrl": record.source_url,
        "protocolKind": record.protocol_kind.value,
        "absences": [statement_to_dict(s) for s in record.absences],
        "scrapedAt": record.scraped_at,
    }


def result_to_dict(result: ScrapeResult) -> dict:
    """The persisted schema consumed by report rendering."""
    return {
        "sessions": [session_to_dict(r) for r in result.sessions],
        "activeMembersByParty": result.active_members_by_party,
        "scrapedAt": result.scraped_at,
    }


def _write_json(path: Path, data: object) -> None:
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def save_results(path: Path, result: ScrapeResult) -> Path:
    """Write the final results file."""
    _write_json(path, result_to_dict(result))
    print(f"  {path} ({len(result.sessions)} sessions)")
    return path


def save_intermediate(path: Path, sessions: list[SessionRecord]) -> None:
    """Overwrite the partial-results file with every session scraped so far."""
    _write_json(path, [session_to_dict(r) for r in sessions])


def save_csvs(
    output_dir: Path,
    output_name: str,
    people: list[PersonAggregate],
    parties: list[PartyAggregate],
) -> None:
    """Save the per-member and per-party aggregates to CSV files."""
    print("\n" + "=" * 60)
    print("Saving CSV files...")
    print("=" * 60)

    # Members
    people_file = output_dir / f"{output_name}_people.csv"
    with open(people_file, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=PEOPLE_FIELDS)
        writer.writeheader()
        for person in people:
            writer.writerow(
                {
                    "name": person.name,
                    "party": person.party,
                    "profile_id": person.profile_id or "",
                    "total_absences": person.total_absences,
                    "sessions": " ".join(str(e.session) for e in person.absence_events),
                }
            )
    print(f"  {people_file} ({len(people)} rows)")

    # Parties
    parties_file = output_dir / f"{output_name}_parties.csv"
    with open(parties_file, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=PARTY_FIELDS)
        writer.writeheader()
        for party in parties:
            average = party.average_absences_per_member
            percentage = party.absence_percentage
            writer.writerow(
                {
                    "party": party.party,
                    "member_count": len(party.members),
                    "total_absences": party.total_absences,
                    "average_absences_per_member": "" if average is None else f"{average:.2f}",
                    "active_member_count": (
                        "" if party.active_member_count is None else party.active_member_count
                    ),
                    "absence_percentage": "" if percentage is None else f"{percentage:.1f}",
                }
            )
    print(f"  {parties_file} ({len(parties)} rows)")
