"""HTTP fetching with bounded retries and cooperative cancellation."""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional, Tuple

import requests

from .config import AnalysisConfig
from .errors import CancelledError, ExtractionError, FetchError
from .models import CrawlRequest, CrawlResult
from .parser import Parser

logger = logging.getLogger(__name__)


def browser_headers(config: AnalysisConfig) -> dict:
    return {
        "User-Agent": config.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": config.accept_language,
        "Accept-Encoding": "gzip, deflate",
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
    }


class Fetcher:
    """Issues GET requests, retrying server errors and network failures.

    Client errors (4xx) fail on the first attempt. ``config.retry_delay``
    seconds elapse before every retry.
    """

    def __init__(self, config: AnalysisConfig) -> None:
        self._config = config
        self._session = requests.Session()
        self._session.headers.update(browser_headers(config))

    def fetch(
        self,
        request: CrawlRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> Tuple[str, int]:
        """Fetch a URL and return (html_content, status_code).

        Raises FetchError once attempts are exhausted or on a 4xx, and
        CancelledError as soon as ``cancel_event`` is seen set.
        """
        url = request.url
        last_error: Optional[FetchError] = None

        for attempt in range(1 + request.max_retries):
            _check_cancelled(cancel_event, url)
            if attempt > 0:
                self._wait_before_retry(cancel_event, url)

            logger.debug("Fetching %s (attempt %d)", url, attempt + 1)
            try:
                resp = self._session.get(url, timeout=self._config.timeout)
            except requests.RequestException as exc:
                logger.warning("Request failed for %s: %s", url, exc)
                last_error = FetchError(url, str(exc))
                last_error.__cause__ = exc
                continue

            status = resp.status_code
            if 200 <= status < 300:
                html = resp.text
                if not html:
                    raise FetchError(url, "empty response body", status, retryable=False)
                return html, status

            reason = f"HTTP {status}"
            if resp.reason:
                reason += f": {resp.reason}"
            if 400 <= status < 500:
                logger.warning("Client error for %s: %s", url, reason)
                raise FetchError(url, reason, status, retryable=False)

            logger.warning("Server error for %s: %s", url, reason)
            last_error = FetchError(url, reason, status)

        logger.warning(
            "Giving up on %s after %d attempts", url, 1 + request.max_retries,
        )
        if last_error is None:
            last_error = FetchError(url, "no attempt was made")
        raise last_error

    def crawl(
        self,
        request: CrawlRequest,
        extract_tags: Optional[bool] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> CrawlResult:
        """Fetch and extract one page.

        ``extract_tags`` falls back to the config setting when not given.

        A failed fetch is reported as ``success=False`` with status 0;
        cancellation still raises.
        """
        try:
            html, status = self.fetch(request, cancel_event)
            if extract_tags is None:
                extract_tags = self._config.extract_tags
            extracted = Parser.extract(html, extract_tags)
        except (FetchError, ExtractionError) as exc:
            logger.info("Crawl failed for %s: %s", request.url, exc)
            return CrawlResult(url=request.url, status_code=0, success=False)

        return CrawlResult(
            url=request.url,
            status_code=status,
            content=extracted.content,
            tag_counts=extracted.tag_counts,
            success=True,
        )

    def _wait_before_retry(
        self, cancel_event: Optional[threading.Event], url: str,
    ) -> None:
        delay = self._config.retry_delay
        if cancel_event is None:
            time.sleep(delay)
            return
        if cancel_event.wait(delay):
            logger.info("Fetch of %s cancelled during retry delay.", url)
            raise CancelledError(f"fetch of {url} cancelled")

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _check_cancelled(cancel_event: Optional[threading.Event], url: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        logger.info("Fetch of %s cancelled.", url)
        raise CancelledError(f"fetch of {url} cancelled")
