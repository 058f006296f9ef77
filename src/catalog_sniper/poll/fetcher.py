from __future__ import annotations

import logging
from time import sleep
from typing import Any, Optional

import requests

from ..core.config import FetchSettings

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """A catalog page could not be retrieved (network error or timeout)."""


class HTTPStatusError(FetchError):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP Error: {status_code}")
        self.status_code = status_code


class ParseError(FetchError):
    def __init__(self) -> None:
        super().__init__("JSON parsing error")


def build_page_url(base_url: str, cursor: Optional[str] = None) -> str:
    if cursor:
        return f"{base_url}&Cursor={cursor}"
    return base_url


class CatalogFetcher:
    """GET one catalog page as JSON, retrying with a linearly growing delay.

    Attempt ``n`` that fails is followed by a ``n * retry_delay_sec`` pause.
    Once ``max_attempts`` is reached the last error is raised.
    """

    def __init__(
        self,
        session: requests.Session,
        settings: FetchSettings | None = None,
    ) -> None:
        self.session = session
        self.settings = settings or FetchSettings()

    def fetch(self, base_url: str, cursor: Optional[str] = None) -> Any:
        url = build_page_url(base_url, cursor)
        max_attempts = max(1, self.settings.max_attempts)
        attempt = 1
        while True:
            try:
                return self._fetch_once(url)
            except FetchError as exc:
                if attempt >= max_attempts:
                    raise
                wait = self.settings.retry_delay_sec * attempt
                logger.warning(
                    "Request failed (attempt %d/%d): %s; retrying in %.1fs",
                    attempt,
                    max_attempts,
                    exc,
                    wait,
                )
                sleep(wait)
                attempt += 1

    def _fetch_once(self, url: str) -> Any:
        headers = {"User-Agent": self.settings.user_agent}
        try:
            response = self.session.get(
                url, headers=headers, timeout=self.settings.timeout_sec
            )
        except requests.Timeout as exc:
            raise FetchError("Request timeout") from exc
        except requests.RequestException as exc:
            raise FetchError(str(exc)) from exc

        if response.status_code != 200:
            raise HTTPStatusError(response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise ParseError() from exc

    def close(self) -> None:
        self.session.close()
