"""Per-member and per-party absence statistics over a finished run."""

from dataclasses import dataclass
from typing import Optional

from at_absence_scraper.models import (
    AbsenceEvent,
    PartyAggregate,
    PersonAggregate,
    SessionRecord,
)


@dataclass(frozen=True)
class SessionSummary:
    total_sessions: int
    sessions_with_absences: int
    total_absences: int


def aggregate_people(sessions: list[SessionRecord]) -> list[PersonAggregate]:
    """One entry per member (keyed by profile URL, else name), most absences first.

    Ties keep the order in which members were first encountered.
    """
    people: dict[str, PersonAggregate] = {}
    for record in sessions:
        for statement in record.absences:
            for mention in statement.mentions:
                key = mention.profile_id or mention.display_name
                person = people.get(key)
                if person is None:
                    person = people[key] = PersonAggregate(
                        name=mention.display_name,
                        party=mention.party,
                        profile_id=mention.profile_id,
                    )
                person.absence_events.append(
                    AbsenceEvent(
                        session=record.session_number,
                        protocol_url=statement.protocol_document_url,
                    )
                )
                person.total_absences += 1

    return sorted(people.values(), key=lambda p: p.total_absences, reverse=True)


def aggregate_parties(
    sessions: list[SessionRecord],
    active_members_by_party: Optional[dict[str, int]] = None,
) -> list[PartyAggregate]:
    """One entry per club/party, most absences first (ties in encounter order).

    With active member counts, parties missing from the counts get 0 (no
    percentage); without them active_member_count stays None.
    """
    parties: dict[str, PartyAggregate] = {}
    for record in sessions:
        for mention in record.iter_mentions():
            party = parties.get(mention.party)
            if party is None:
                party = parties[mention.party] = PartyAggregate(party=mention.party)
            name = mention.display_name
            party.members.add(name)
            party.total_absences += 1
            party.absences_by_member[name] = party.absences_by_member.get(name, 0) + 1

    if active_members_by_party is not None:
        for party in parties.values():
            party.active_member_count = active_members_by_party.get(party.party, 0)

    return sorted(parties.values(), key=lambda p: p.total_absences, reverse=True)


def summarize_sessions(sessions: list[SessionRecord]) -> SessionSummary:
    with_absences = 0
    total = 0
    for record in sessions:
        count = sum(1 for _ in record.iter_mentions())
        if count:
            with_absences += 1
        total += count
    return SessionSummary(
        total_sessions=len(sessions),
        sessions_with_absences=with_absences,
        total_absences=total,
    )
