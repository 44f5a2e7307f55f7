"""Host-facing capabilities: identifier, input schema, permission rule, entry point."""

from __future__ import annotations

import logging
import threading
from typing import Any, ClassVar, Dict, List, Optional, Type
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from .analyzer import SerpAnalyzer
from .config import MAX_DEEP_ANALYZED, AnalysisConfig
from .engine import AnalysisEngine
from .errors import ExtractionError
from .fetcher import Fetcher
from .models import CrawlRequest, CrawlResult, PageSignals, SearchResultEntry, SerpAnalysis
from .parser import Parser, word_count

logger = logging.getLogger(__name__)


# -----------------------------------------
# Input schemas
# -----------------------------------------
class ContentCrawlerInput(BaseModel):
    url: str = Field(..., description="The URL to crawl and extract content from")
    extract_tags: bool = Field(True, description="Whether to extract and count HTML tags")
    max_retries: int = Field(2, ge=0, le=3, description="Maximum number of retry attempts on failure")

    @field_validator("url")
    @classmethod
    def url_must_be_absolute_http(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("url must be an absolute http(s) URL")
        return value


class SearchResultInput(BaseModel):
    title: str
    link: str
    snippet: Optional[str] = None
    position: int = Field(..., ge=1)

    def to_entry(self) -> SearchResultEntry:
        return SearchResultEntry(
            position=self.position, title=self.title, link=self.link, snippet=self.snippet,
        )


class CrawledContentInput(BaseModel):
    url: str
    content: str
    success: bool


class SerpAnalyzerInput(BaseModel):
    keyword: str = Field(..., description="The primary keyword to analyze SERP results for")
    search_results: List[SearchResultInput] = Field(..., description="Search results to analyze")
    crawled_content: Optional[List[CrawledContentInput]] = Field(
        None, description="Crawled pages for the search results",
    )


class SerpPipelineInput(BaseModel):
    keyword: str
    search_results: List[SearchResultInput] = Field(..., min_length=1)
    max_documents: int = Field(MAX_DEEP_ANALYZED, ge=1, le=MAX_DEEP_ANALYZED)


# -----------------------------------------
# Capabilities
# -----------------------------------------
class Capability:
    """Base contract a host runtime drives."""

    identifier: ClassVar[str] = ""
    description: ClassVar[str] = ""
    input_model: ClassVar[Type[BaseModel]] = BaseModel

    def __init__(self, config: Optional[AnalysisConfig] = None) -> None:
        self._config = config or AnalysisConfig()

    def is_read_only(self) -> bool:
        return True

    def needs_permissions(self, params: Optional[BaseModel] = None) -> bool:
        return True

    def validate_input(self, raw: Dict[str, Any]) -> BaseModel:
        """Raises pydantic.ValidationError on bad input."""
        return self.input_model.model_validate(raw)

    def call(self, raw: Dict[str, Any], cancel_event: Optional[threading.Event] = None) -> Any:
        raise NotImplementedError


class ContentCrawlerCapability(Capability):
    identifier = "content_crawler"
    description = "Crawl and extract text content and HTML structure from web pages"
    input_model = ContentCrawlerInput

    def call(
        self, raw: Dict[str, Any], cancel_event: Optional[threading.Event] = None,
    ) -> CrawlResult:
        params = self.validate_input(raw)
        request = CrawlRequest(url=params.url, max_retries=params.max_retries)
        with Fetcher(self._config) as fetcher:
            return fetcher.crawl(request, params.extract_tags, cancel_event)


class SerpAnalyzerCapability(Capability):
    identifier = "serp_analyzer"
    description = (
        "Analyze SERP results to extract SEO insights including headings, "
        "search intent, and content patterns"
    )
    input_model = SerpAnalyzerInput

    def needs_permissions(self, params: Optional[BaseModel] = None) -> bool:
        return False

    def call(
        self, raw: Dict[str, Any], cancel_event: Optional[threading.Event] = None,
    ) -> SerpAnalysis:
        params = self.validate_input(raw)
        results = [r.to_entry() for r in params.search_results]
        pages = _pages_from_crawled(params.crawled_content or [])
        return SerpAnalyzer().analyze(params.keyword, results, pages)


class SerpPipelineCapability(Capability):
    identifier = "serp_pipeline"
    description = "Fetch the top search results and analyze them for SEO patterns"
    input_model = SerpPipelineInput

    def call(
        self, raw: Dict[str, Any], cancel_event: Optional[threading.Event] = None,
    ) -> SerpAnalysis:
        params = self.validate_input(raw)
        config = AnalysisConfig(
            max_retries=self._config.max_retries,
            retry_delay=self._config.retry_delay,
            timeout=self._config.timeout,
            max_documents=params.max_documents,
            user_agent=self._config.user_agent,
            accept_language=self._config.accept_language,
        )
        engine = AnalysisEngine(config, cancel_event=cancel_event)
        return engine.run(params.keyword, [r.to_entry() for r in params.search_results])


def _pages_from_crawled(items: List[CrawledContentInput]) -> List[PageSignals]:
    """Crawled content is treated as markup; plain text passes through unchanged."""
    pages: List[PageSignals] = []
    for item in items:
        if not item.success or not item.content:
            continue
        try:
            text = Parser.extract(item.content, want_tag_counts=False).content
            headings = Parser.extract_headings(item.content)
        except ExtractionError as exc:
            logger.warning("Ignoring crawled content for %s: %s", item.url, exc)
            continue
        pages.append(PageSignals(url=item.url, word_count=word_count(text), headings=headings))
    return pages


CAPABILITIES: Dict[str, Type[Capability]] = {
    cap.identifier: cap
    for cap in (ContentCrawlerCapability, SerpAnalyzerCapability, SerpPipelineCapability)
}
