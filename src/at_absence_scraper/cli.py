"""Command-line interface for the Nationalrat absence scraper."""

import argparse
from pathlib import Path

from at_absence_scraper.config import DEFAULT_PERIOD, REQUEST_DELAY
from at_absence_scraper.period import LegislativePeriod
from at_absence_scraper.scraper import AbsenceScraper


def _period(value: str) -> LegislativePeriod:
    try:
        return LegislativePeriod.from_string(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="at-absence-scraper",
        description="Scrape members reported absent from Nationalrat stenographic protocols.",
        epilog=(
            "Examples: 'XXVIII' scrapes all sessions, 'XXVIII 5' only session 5,"
            " 'XXVIII 5 10' sessions 5-10."
        ),
    )
    parser.add_argument(
        "period",
        nargs="?",
        type=_period,
        default=LegislativePeriod(DEFAULT_PERIOD),
        help=f"Legislative period as roman numeral (default: {DEFAULT_PERIOD})",
    )
    parser.add_argument(
        "start",
        nargs="?",
        type=int,
        default=None,
        help="First session to scrape; alone, the only session to scrape (default: 1)",
    )
    parser.add_argument(
        "end",
        nargs="?",
        type=int,
        default=None,
        help="Last session to scrape (default: until sessions stop existing)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output directory (default: data/{period}/)",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=REQUEST_DELAY,
        help=f"Seconds to wait before every request (default: {REQUEST_DELAY})",
    )
    parser.add_argument(
        "--no-members",
        action="store_true",
        help="Skip fetching active member counts (no absence percentages)",
    )

    args = parser.parse_args(argv)

    if args.start is None:
        start, end = 1, None
    elif args.end is None:
        start, end = args.start, args.start
    else:
        start, end = args.start, args.end

    if start < 1 or (end is not None and end < start):
        parser.error("sessions must be positive and END must not be before START")

    scraper = AbsenceScraper(
        period=args.period,
        output_dir=args.output,
        delay=args.delay,
    )
    scraper.run(start=start, end=end, fetch_members=not args.no_members)
