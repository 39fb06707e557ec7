"""Core scraper class for Nationalrat absence announcements."""

import json
import time
from datetime import datetime, timezone
from pathlib import Path

from tqdm import tqdm

from at_absence_scraper.aggregate import aggregate_parties, aggregate_people, summarize_sessions
from at_absence_scraper.config import (
    BASE_URL,
    MAX_CONSECUTIVE_FAILURES,
    MEMBER_API_FILTER,
    MEMBER_API_PATH,
    MEMBER_PAGE_SIZE,
    REQUEST_DELAY,
)
from at_absence_scraper.extractor import AbsenceExtractor
from at_absence_scraper.fetcher import Fetcher, FetchError
from at_absence_scraper.locator import locate_protocol
from at_absence_scraper.models import (
    PARTY_UNKNOWN,
    PARTY_UNRESOLVED,
    PersonCacheEntry,
    ScrapeResult,
    SessionFailure,
    SessionRecord,
)
from at_absence_scraper.names import NameIndex, NameResolver
from at_absence_scraper.output import save_csvs, save_intermediate, save_results
from at_absence_scraper.party import ProfilePartyLookup, party_from_member_row
from at_absence_scraper.period import LegislativePeriod


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class AbsenceScraper:
    """Scrapes "als verhindert gemeldet" announcements for one legislative period.

    Sessions are processed one at a time in increasing order.  The person cache
    and name index live on the instance and may be injected pre-seeded.
    """

    def __init__(
        self,
        period: LegislativePeriod,
        output_dir: Path | None = None,
        delay: float = REQUEST_DELAY,
        fetcher: Fetcher | None = None,
        person_cache: dict[str, PersonCacheEntry] | None = None,
        name_index: NameIndex | None = None,
        base_url: str = BASE_URL,
    ):
        self.period = period
        self.output_dir = output_dir or LegislativePeriod.data_dir_for_period(period.numeral)
        self.base_url = base_url
        self.fetcher = fetcher or Fetcher(delay=delay)

        self.person_cache: dict[str, PersonCacheEntry] = (
            person_cache if person_cache is not None else {}
        )
        self.name_index = name_index if name_index is not None else NameIndex()
        self.resolver = NameResolver(
            party_lookup=ProfilePartyLookup(self.fetcher),
            base_url=base_url,
            person_cache=self.person_cache,
            name_index=self.name_index,
        )
        self.extractor = AbsenceExtractor(self.resolver)

        self.results: list[SessionRecord] = []
        self.failures: list[SessionFailure] = []
        self.active_members_by_party: dict[str, int] | None = None

        self.output_dir.mkdir(parents=True, exist_ok=True)

    @property
    def intermediate_path(self) -> Path:
        return self.output_dir / f"{self.period.output_name}_partial.json"

    @property
    def results_path(self) -> Path:
        return self.output_dir / f"{self.period.output_name}.json"

    # -- Step 1: Sessions ------------------------------------------------------

    def scrape_session(self, session_number: int) -> SessionRecord | None:
        """Scrape one session. Returns None (and records a failure) if it yields nothing."""
        print(f"Scraping session {session_number}...")
        session_url = self.period.session_url(session_number, self.base_url)

        try:
            session_html = self.fetcher.get(session_url)
        except FetchError as e:
            self._record_failure(session_number, session_url, "fetch", e)
            return None

        protocol = locate_protocol(session_html, self.base_url)
        if protocol is None:
            print(f"  No stenographic protocol found for session {session_number}")
            self._record_failure(session_number, session_url, "no_protocol")
            return None
        print(f"  Protocol type: {protocol.kind.value}")

        absences = []
        fetched = 0
        for document_url in protocol.urls:
            try:
                document_html = self.fetcher.get(document_url)
            except FetchError as e:
                self._record_failure(session_number, document_url, "fetch", e)
                continue
            fetched += 1
            for statement in self.extractor.extract(document_html, document_url):
                # "niemand als verhindert gemeldet" names nobody to attribute
                if statement.is_nobody:
                    continue
                absences.append(statement)

        if not fetched:
            return None

        record = SessionRecord(
            session_number=session_number,
            source_url=session_url,
            protocol_kind=protocol.kind,
            absences=absences,
            scraped_at=_now_iso(),
        )
        self.results.append(record)
        print(f"  Session {session_number}: {len(absences)} absence entries found")
        self._save_intermediate()
        return record

    def scrape_sessions(self, start: int = 1, end: int | None = None) -> list[SessionRecord]:
        """Scrape sessions from ``start`` until ``end`` or until sessions stop existing.

        Without ``end``, scanning stops after MAX_CONSECUTIVE_FAILURES failed
        sessions in a row: the site errors for session numbers that do not exist yet.
        """
        print("=" * 60)
        print(
            f"Step 1: Scraping sessions {start}-{end if end is not None else 'end'}"
            f" of the {self.period.label}..."
        )
        print("=" * 60)

        session_number = start
        consecutive_failures = 0
        total = end - start + 1 if end is not None and end >= start else None

        with tqdm(total=total, desc="Sessions", unit="session") as progress:
            while True:
                record = self.scrape_session(session_number)
                progress.update(1)

                if record is None:
                    consecutive_failures += 1
                    print(
                        f"  Session {session_number} failed"
                        f" ({consecutive_failures} consecutive failures)"
                    )
                    if consecutive_failures >= MAX_CONSECUTIVE_FAILURES:
                        print(f"  Stopping after {consecutive_failures} consecutive failures")
                        break
                else:
                    consecutive_failures = 0

                if end is not None and session_number >= end:
                    break
                session_number += 1

        print(f"  Scraped {len(self.results)} sessions")
        return self.results

    # -- Step 2: Backfill ------------------------------------------------------

    def backfill_mentions(self) -> int:
        """Resolve unlinked or unknown mentions from names identified elsewhere in the run."""
        print("\n" + "=" * 60)
        print("Step 2: Backfilling unresolved members...")
        print("=" * 60)

        backfilled = 0
        for record in self.results:
            for mention in record.iter_mentions():
                if mention.profile_id and mention.party not in (PARTY_UNRESOLVED, PARTY_UNKNOWN):
                    continue
                entry = self.name_index.lookup(mention.display_name)
                if entry is None:
                    continue
                if (mention.display_name, mention.profile_id, mention.party) == (
                    entry.display_name,
                    entry.profile_id,
                    entry.party,
                ):
                    continue
                mention.display_name = entry.display_name
                mention.profile_id = entry.profile_id
                mention.party = entry.party
                backfilled += 1
                print(f"  Backfilled {entry.display_name} -> {entry.party}")

        print(f"  Backfilled {backfilled} member entries")
        return backfilled

    # -- Step 3: Active members ------------------------------------------------

    def fetch_active_member_counts(self) -> dict[str, int] | None:
        """Count the active Nationalrat members per party via the member filter API.

        Returns None when the counts are unavailable; percentages are then
        left unset rather than aborting the run.
        """
        print("\n" + "=" * 60)
        print("Step 3: Fetching active member counts...")
        print("=" * 60)

        api_url = self.base_url + MEMBER_API_PATH
        counts: dict[str, int] = {}
        total = 0
        page_number = 1

        try:
            while True:
                params = {
                    "jsMode": "EVAL",
                    "FBEZ": "WFW_002",
                    "listeId": "undefined",
                    "pageNumber": page_number,
                    "pagesize": MEMBER_PAGE_SIZE,
                    "feldRnr": 1,
                    "ascDesc": "ASC",
                }
                data = json.loads(self.fetcher.post_json(api_url, params, MEMBER_API_FILTER))
                rows = data.get("rows") if isinstance(data, dict) else None
                if not isinstance(rows, list) or not rows:
                    break

                for row in rows:
                    party = party_from_member_row(row)
                    if party:
                        counts[party] = counts.get(party, 0) + 1
                        total += 1

                print(f"  Page {page_number}: {len(rows)} members")
                if len(rows) < MEMBER_PAGE_SIZE:
                    break
                page_number += 1
        except (FetchError, json.JSONDecodeError) as e:
            print(f"  Active member counts unavailable ({e}); percentages will be omitted")
            return None

        if not total:
            print("  No members found in API response; percentages will be omitted")
            return None

        print(f"  Found {total} active members")
        for party, count in counts.items():
            print(f"    {party:12s} {count}")
        return counts

    # -- Failure reporting -----------------------------------------------------

    def _record_failure(
        self,
        session_number: int,
        url: str,
        reason: str,
        error: FetchError | None = None,
    ) -> None:
        if error is not None:
            print(f"  FAILED: session {session_number} ({error.error_type}: {error.message})")
        self.failures.append(
            SessionFailure(
                session_number=session_number,
                url=url,
                reason=reason,
                status_code=error.status_code if error else None,
                error_type=error.error_type if error else "none",
                error_message=error.message if error else "No stenographic protocol found",
                timestamp=_now_iso(),
            )
        )

    def _save_intermediate(self) -> None:
        try:
            save_intermediate(self.intermediate_path, self.results)
        except OSError as e:
            print(f"  Failed to save intermediate results: {e}")
            return
        print(f"  Intermediate results saved ({len(self.results)} sessions)")

    def _save_failure_manifest(self) -> Path:
        """Write a JSON manifest of all failed session and document fetches."""
        manifest = {
            "period": self.period.numeral,
            "run_timestamp": _now_iso(),
            "sessions_scraped": len(self.results),
            "failed_count": len(self.failures),
            "failures": [
                {
                    "session_number": f.session_number,
                    "url": f.url,
                    "reason": f.reason,
                    "status_code": f.status_code,
                    "error_type": f.error_type,
                    "error_message": f.error_message,
                    "timestamp": f.timestamp,
                }
                for f in self.failures
            ],
        }
        manifest_path = self.output_dir / "failure_manifest.json"
        manifest_path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
        return manifest_path

    def _print_failure_summary(self) -> None:
        """Print a grouped summary of all failed sessions and documents."""
        if not self.failures:
            return

        print("\n" + "!" * 60)
        print(f"  WARNING: {len(self.failures)} session page(s)/document(s) failed")
        print("!" * 60)

        by_reason: dict[str, list[SessionFailure]] = {}
        for f in self.failures:
            by_reason.setdefault(f.reason, []).append(f)

        for reason, failures in sorted(by_reason.items()):
            print(f"\n  {reason} ({len(failures)}):")
            for f in failures:
                status = f"[HTTP {f.status_code}]" if f.status_code else f"[{f.error_type}]"
                print(f"    session {f.session_number:<5d} {status:14s} {f.url}")

        print(f"\n  Failure manifest: {self.output_dir / 'failure_manifest.json'}")
        print("  The trailing failures are expected: they mark the end of the period.")

    # -- Main runner -----------------------------------------------------------

    @staticmethod
    def _fmt_elapsed(seconds: float) -> str:
        """Format elapsed seconds as 'Xm Ys' or 'X.Xs'."""
        if seconds >= 60:
            return f"{int(seconds // 60)}m {int(seconds % 60)}s"
        return f"{seconds:.1f}s"

    def run(
        self,
        start: int = 1,
        end: int | None = None,
        fetch_members: bool = True,
    ) -> ScrapeResult:
        """Run the full pipeline and return the sessions plus active member counts."""
        run_start = time.time()
        step_times: list[tuple[str, float]] = []
        print("=" * 60)
        print(f"  Nationalrat {self.period.label} Absence Scraper")
        print(f"  Started at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print(f"  Target: {self.period.session_url(start, self.base_url)}")
        print("=" * 60)

        t = time.time()
        self.scrape_sessions(start, end)
        step_times.append(("Scrape sessions", time.time() - t))

        t = time.time()
        self.backfill_mentions()
        step_times.append(("Backfill members", time.time() - t))

        if fetch_members:
            t = time.time()
            self.active_members_by_party = self.fetch_active_member_counts()
            step_times.append(("Active member counts", time.time() - t))

        result = ScrapeResult(
            sessions=self.results,
            active_members_by_party=self.active_members_by_party,
            scraped_at=_now_iso(),
        )

        t = time.time()
        save_results(self.results_path, result)
        save_csvs(
            output_dir=self.output_dir,
            output_name=self.period.output_name,
            people=aggregate_people(self.results),
            parties=aggregate_parties(self.results, self.active_members_by_party),
        )
        if self.failures:
            self._save_failure_manifest()
        step_times.append(("Save output", time.time() - t))

        elapsed = time.time() - run_start
        summary = summarize_sessions(self.results)

        print("\n" + "=" * 60)
        print(f"  Complete! Total elapsed: {self._fmt_elapsed(elapsed)}")
        print(f"  Output directory: {self.output_dir.absolute()}")
        print("=" * 60)
        print("\nScraping report:")
        print(f"  Total sessions scraped:  {summary.total_sessions}")
        print(f"  Sessions with absences:  {summary.sessions_with_absences}")
        print(f"  Total absence entries:   {summary.total_absences}")
        print("\nStep timing:")
        for label, secs in step_times:
            print(f"  {label:30s} {self._fmt_elapsed(secs):>8s}")
        print(f"  {'':30s} {'--------':>8s}")
        print(f"  {'Total':30s} {self._fmt_elapsed(elapsed):>8s}")

        self._print_failure_summary()
        return result
