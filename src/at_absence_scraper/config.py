"""Configuration constants for the Austrian Nationalrat absence scraper."""

BASE_URL = "https://www.parlament.gv.at"

# Legislative period (Gesetzgebungsperiode) scraped when none is given.
DEFAULT_PERIOD = "XXVIII"

REQUEST_DELAY = 0.1  # seconds slept before every request
REQUEST_TIMEOUT = 10  # seconds per attempt
MAX_RETRIES = 3
BASE_BACKOFF = 1.0  # seconds; doubled on every retry

MAX_CONSECUTIVE_FAILURES = 3  # stop scanning after this many failed sessions in a row
SECTION_WARNING_THRESHOLD = 10  # more Präsidium sections than this is suspicious

USER_AGENT = (
    "ATAbsenceScraper/0.1 "
    "(Research project; collecting public Nationalrat attendance data)"
)

# The member filter API rejects requests that do not look like they come from the website.
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/138.0.0.0 Safari/537.36"
)

MEMBER_API_PATH = "/Filter/api/json/post"
MEMBER_API_REFERER = f"{BASE_URL}/recherchieren/personen/nationalrat/index.html"
MEMBER_PAGE_SIZE = 50

# Filter body selecting the active Nationalrat members of the current period.
MEMBER_API_FILTER = {
    "STEP": ["1000"],
    "NRBR": ["NR"],
    "GP": ["AKT"],
    "R_WF": ["FR"],
    "R_PBW": ["WK"],
    "M": ["M"],
    "W": ["W"],
}
