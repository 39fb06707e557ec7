"""HTTP access to parlament.gv.at with rate limiting and bounded retries."""

import json
import time
from typing import Any

import requests

from at_absence_scraper.config import (
    BASE_BACKOFF,
    BASE_URL,
    BROWSER_USER_AGENT,
    MAX_RETRIES,
    MEMBER_API_REFERER,
    REQUEST_DELAY,
    REQUEST_TIMEOUT,
    USER_AGENT,
)


class FetchError(RuntimeError):
    """Raised when a request still fails after all retries."""

    def __init__(
        self,
        url: str,
        message: str,
        status_code: int | None = None,
        error_type: str = "connection",  # http, timeout, connection
    ):
        super().__init__(message)
        self.url = url
        self.message = message
        self.status_code = status_code
        self.error_type = error_type


def backoff_delay(attempt: int, base: float = BASE_BACKOFF) -> float:
    """Seconds to wait before retry number ``attempt`` (1-based): 1s, 2s, 4s, ..."""
    return base * 2 ** (attempt - 1)


class Fetcher:
    """Performs GET and JSON-POST requests against the parliament website.

    Every attempt is preceded by a fixed pause (``delay``).  A failed attempt
    (non-200 status, timeout, connection error) is retried up to
    ``max_retries`` times with exponential backoff; after that a FetchError
    propagates to the caller.
    """

    def __init__(
        self,
        delay: float = REQUEST_DELAY,
        timeout: float = REQUEST_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        base_backoff: float = BASE_BACKOFF,
    ):
        self.delay = delay
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_backoff = base_backoff
        self.http = requests.Session()
        self.http.headers.update({"User-Agent": USER_AGENT})

    # -- public API ------------------------------------------------------------

    def get(self, url: str) -> str:
        """Fetch a page and return its body."""
        return self._request("GET", url)

    def post_json(self, url: str, params: dict[str, Any], payload: Any) -> str:
        """POST ``payload`` as JSON with ``params`` as query string, mimicking the browser."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "*/*",
            "Origin": BASE_URL,
            "Referer": MEMBER_API_REFERER,
            "User-Agent": BROWSER_USER_AGENT,
        }
        return self._request(
            "POST",
            url,
            params=params,
            data=json.dumps(payload).encode("utf-8"),
            headers=headers,
        )

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -- helpers ---------------------------------------------------------------

    def _attempt(self, method: str, url: str, **kwargs: Any) -> str:
        """One network round trip. Raises FetchError on any failure."""
        time.sleep(self.delay)
        try:
            resp = self.http.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            raise FetchError(url, f"Timeout: {url}", error_type="timeout") from e
        except requests.RequestException as e:
            raise FetchError(url, f"{type(e).__name__}: {e}", error_type="connection") from e

        if resp.status_code != 200:
            raise FetchError(
                url,
                f"HTTP {resp.status_code}: {url}",
                status_code=resp.status_code,
                error_type="http",
            )
        return resp.text

    def _request(self, method: str, url: str, **kwargs: Any) -> str:
        attempt = 0
        while True:
            try:
                return self._attempt(method, url, **kwargs)
            except FetchError:
                attempt += 1
                if attempt > self.max_retries:
                    print(f"  Failed after {self.max_retries} retries: {url}")
                    raise
                wait = backoff_delay(attempt, self.base_backoff)
                print(f"  Retry {attempt}/{self.max_retries} after {wait:g}s: {url}")
                time.sleep(wait)
