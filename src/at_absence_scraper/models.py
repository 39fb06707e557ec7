"""Data classes for absence records."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

NOBODY_PHRASE = "niemand als verhindert gemeldet"

# Party markers. Kept distinct: they mean different things downstream.
PARTY_UNRESOLVED = "Unresolved"  # mention had no profile link
PARTY_UNKNOWN = "Unknown"  # profile link present but the profile could not be fetched
PARTY_UNBEKANNT = "Unbekannt"  # profile fetched, no strategy found a party


class ProtocolKind(str, Enum):
    FULL = "full"
    SECTIONED = "sections"


@dataclass(frozen=True)
class ProtocolRef:
    """Where the record of proceedings for one session lives."""

    kind: ProtocolKind
    urls: tuple[str, ...]

    @property
    def url(self) -> str:
        """The single document URL of a full protocol."""
        return self.urls[0]


@dataclass
class Mention:
    """One named member within an absence statement."""

    display_name: str
    profile_id: Optional[str] = None  # absolute profile URL
    party: str = PARTY_UNKNOWN


@dataclass
class AbsenceStatement:
    """One "als verhindert gemeldet" paragraph of a protocol document."""

    raw_text: str
    mentions: list[Mention] = field(default_factory=list)
    protocol_document_url: str = ""

    @property
    def is_nobody(self) -> bool:
        return NOBODY_PHRASE in self.raw_text


@dataclass
class SessionRecord:
    """Absences recorded for one sitting of the Nationalrat."""

    session_number: int
    source_url: str
    protocol_kind: ProtocolKind
    absences: list[AbsenceStatement]
    scraped_at: str  # ISO 8601

    def iter_mentions(self):
        for statement in self.absences:
            yield from statement.mentions


@dataclass(frozen=True)
class PersonCacheEntry:
    """Resolved identity of a member, keyed by profile URL."""

    profile_id: str
    display_name: str
    party: str


@dataclass(frozen=True)
class SessionFailure:
    """Record of a session that could not be processed."""

    session_number: int
    url: str
    reason: str  # no_protocol, fetch
    status_code: int | None
    error_type: str
    error_message: str
    timestamp: str


@dataclass(frozen=True)
class AbsenceEvent:
    session: int
    protocol_url: str


@dataclass
class PersonAggregate:
    """All absences of one member across a run."""

    name: str
    party: str
    profile_id: Optional[str]
    absence_events: list[AbsenceEvent] = field(default_factory=list)
    total_absences: int = 0


@dataclass
class PartyAggregate:
    """All absences of one club/party across a run."""

    party: str
    members: set[str] = field(default_factory=set)
    total_absences: int = 0
    absences_by_member: dict[str, int] = field(default_factory=dict)
    active_member_count: Optional[int] = None

    @property
    def average_absences_per_member(self) -> Optional[float]:
        if not self.members:
            return None
        return self.total_absences / len(self.members)

    @property
    def absence_percentage(self) -> Optional[float]:
        """Share of the party's active members who were absent at least once."""
        if not self.active_member_count:
            return None
        return len(self.members) / self.active_member_count * 100


@dataclass
class ScrapeResult:
    """Everything handed to report rendering: sessions plus active member counts."""

    sessions: list[SessionRecord]
    active_members_by_party: Optional[dict[str, int]]
    scraped_at: str
