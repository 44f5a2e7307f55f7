"""SERP analysis engine."""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional, Sequence

from .analyzer import SerpAnalyzer
from .config import AnalysisConfig
from .errors import CancelledError, ConfigurationError, EmptyInputError, ExtractionError, FetchError
from .fetcher import Fetcher
from .models import CrawlProgress, CrawlRequest, PageSignals, SearchResultEntry, SerpAnalysis
from .parser import Parser, word_count

logger = logging.getLogger(__name__)

SearchFn = Callable[[str, int], Sequence[SearchResultEntry]]


class AnalysisEngine:
    """Fetches the top results one at a time and aggregates them.

    Only the first ``config.deep_analysis_limit`` results are fetched; the
    rest still feed the title, URL and intent signals.
    """

    def __init__(
        self,
        config: AnalysisConfig,
        progress_callback: Optional[Callable[[CrawlProgress], None]] = None,
        cancel_event: Optional[threading.Event] = None,
        search: Optional[SearchFn] = None,
        search_limit: int = 10,
    ) -> None:
        self._config = config
        self._fetcher = Fetcher(config)
        self._parser = Parser()
        self._analyzer = SerpAnalyzer()
        self._progress_callback = progress_callback
        self._cancel_event = cancel_event
        self._search = search
        self._search_limit = search_limit

    def run(
        self,
        keyword: str,
        results: Optional[Sequence[SearchResultEntry]] = None,
    ) -> SerpAnalysis:
        try:
            if results is None:
                results = self._delegate_search(keyword)
            if not results:
                raise EmptyInputError(f"no search results supplied for '{keyword}'")

            pages = self._collect_pages(results)
            return self._analyzer.analyze(keyword, results, pages)
        finally:
            self._fetcher.close()

    def _delegate_search(self, keyword: str) -> Sequence[SearchResultEntry]:
        if self._search is None:
            raise ConfigurationError("no search results given and no search provider configured")
        self._config.require_search_api_key()
        self._check_cancelled()
        logger.info("Searching for '%s' (limit=%d)", keyword, self._search_limit)
        return list(self._search(keyword, self._search_limit))

    def _collect_pages(self, results: Sequence[SearchResultEntry]) -> List[PageSignals]:
        targets = list(results[: self._config.deep_analysis_limit])
        pages: List[PageSignals] = []

        for index, entry in enumerate(targets, start=1):
            self._check_cancelled()
            try:
                page, status_code = self._analyze_page(entry)
            except (FetchError, ExtractionError, ValueError) as exc:
                logger.warning("Skipping #%d %s: %s", entry.position, entry.link, exc)
                self._report(index, len(targets), entry.link, getattr(exc, "status_code", 0), "failed")
                continue

            pages.append(page)
            logger.info(
                "[%d/%d] %s: %d words, %d headings",
                index,
                len(targets),
                entry.link,
                page.word_count,
                len(page.headings.h1) + len(page.headings.h2) + len(page.headings.h3),
            )
            self._report(index, len(targets), entry.link, status_code, "analyzed")

        if targets and not pages:
            logger.warning("No documents could be analyzed; content metrics will be empty.")
        return pages

    def _analyze_page(self, entry: SearchResultEntry) -> tuple[PageSignals, int]:
        request = CrawlRequest(url=entry.link, max_retries=self._config.max_retries)
        html, status_code = self._fetcher.fetch(request, self._cancel_event)
        extracted = self._parser.extract(html, want_tag_counts=False)
        headings = self._parser.extract_headings(html)
        page = PageSignals(url=entry.link, word_count=word_count(extracted.content), headings=headings)
        return page, status_code

    def _check_cancelled(self) -> None:
        if self._cancel_event and self._cancel_event.is_set():
            logger.info("Analysis cancelled by user.")
            raise CancelledError("analysis cancelled")

    def _report(self, processed: int, total: int, url: str, status_code: int, event_type: str) -> None:
        if self._progress_callback:
            self._progress_callback(CrawlProgress(
                documents_processed=processed,
                max_documents=total,
                current_url=url,
                status_code=status_code,
                event_type=event_type,
            ))
