"""Data models for crawl results and SERP analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Tuple
from urllib.parse import urlparse

INTENT_TYPES = ("informational", "transactional", "navigational", "commercial")


@dataclass(frozen=True)
class CrawlRequest:
    """A single page fetch, validated on construction."""

    url: str
    max_retries: int = 2

    def __post_init__(self) -> None:
        parsed = urlparse(self.url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"URL must be absolute http(s): {self.url!r}")
        if not 0 <= self.max_retries <= 3:
            raise ValueError(f"max_retries must be between 0 and 3, got {self.max_retries}")


@dataclass(frozen=True)
class TagCounts:
    h1: int = 0
    h2: int = 0
    p: int = 0
    div: int = 0
    span: int = 0

    def to_dict(self) -> dict:
        return {"h1": self.h1, "h2": self.h2, "p": self.p, "div": self.div, "span": self.span}


@dataclass(frozen=True)
class CrawlResult:
    """Outcome of fetching and extracting one page."""

    url: str
    status_code: int
    content: str = ""
    tag_counts: Optional[TagCounts] = None
    success: bool = False

    @property
    def content_length(self) -> int:
        return len(self.content)

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "statusCode": self.status_code,
            "content": self.content,
            "contentLength": self.content_length,
            "tagCounts": self.tag_counts.to_dict() if self.tag_counts else None,
            "success": self.success,
        }


@dataclass(frozen=True)
class HeadingStructure:
    """h1/h2/h3 texts of one document, in document order."""

    h1: Tuple[str, ...] = ()
    h2: Tuple[str, ...] = ()
    h3: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {"h1": list(self.h1), "h2": list(self.h2), "h3": list(self.h3)}


@dataclass(frozen=True)
class SearchResultEntry:
    """One ranked result supplied by the search provider."""

    position: int
    title: str
    link: str
    snippet: Optional[str] = None

    def __post_init__(self) -> None:
        if self.position < 1:
            raise ValueError(f"position must be >= 1, got {self.position}")

    @classmethod
    def from_dict(cls, data: dict, default_position: int = 1) -> "SearchResultEntry":
        return cls(
            position=int(data.get("position") or default_position),
            title=data.get("title") or "",
            link=data.get("link") or data.get("url") or "",
            snippet=data.get("snippet"),
        )

    def to_dict(self) -> dict:
        return {
            "position": self.position,
            "title": self.title,
            "link": self.link,
            "snippet": self.snippet,
        }


def parse_search_results(payload: Any) -> List[SearchResultEntry]:
    """Build entries from a list of result dicts or a provider payload.

    Provider payloads keep their results under ``organic``.
    """
    if isinstance(payload, dict):
        payload = payload.get("organic") or []
    if not isinstance(payload, list):
        raise ValueError("search results must be a list or an object with 'organic'")
    for rank, item in enumerate(payload, start=1):
        if not isinstance(item, dict):
            raise ValueError(
                f"search result {rank} must be an object, got {type(item).__name__}"
            )
    return [
        SearchResultEntry.from_dict(item, default_position=rank)
        for rank, item in enumerate(payload, start=1)
    ]


@dataclass(frozen=True)
class PageSignals:
    """Signals collected from one successfully analyzed document."""

    url: str
    word_count: int
    headings: HeadingStructure = field(default_factory=HeadingStructure)


@dataclass(frozen=True)
class SearchIntent:
    type: str = "informational"
    confidence: int = 0
    indicators: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "confidence": self.confidence,
            "indicators": list(self.indicators),
        }


@dataclass(frozen=True)
class UrlPatterns:
    common_paths: Tuple[str, ...] = ()
    avg_path_depth: float = 0.0
    common_extensions: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "commonPaths": list(self.common_paths),
            "avgPathDepth": self.avg_path_depth,
            "commonExtensions": list(self.common_extensions),
        }


@dataclass(frozen=True)
class TitlePatterns:
    common_words: Tuple[str, ...] = ()
    avg_length: int = 0
    common_formats: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "commonWords": list(self.common_words),
            "avgLength": self.avg_length,
            "commonFormats": list(self.common_formats),
        }


@dataclass(frozen=True)
class ContentMetrics:
    avg_word_count: int = 0
    min_word_count: int = 0
    max_word_count: int = 0

    def to_dict(self) -> dict:
        return {
            "avgWordCount": self.avg_word_count,
            "minWordCount": self.min_word_count,
            "maxWordCount": self.max_word_count,
        }


@dataclass(frozen=True)
class SerpAnalysis:
    """Aggregated insights for one keyword."""

    keyword: str
    search_intent: SearchIntent = field(default_factory=SearchIntent)
    common_headings: HeadingStructure = field(default_factory=HeadingStructure)
    url_patterns: UrlPatterns = field(default_factory=UrlPatterns)
    content_metrics: ContentMetrics = field(default_factory=ContentMetrics)
    title_patterns: TitlePatterns = field(default_factory=TitlePatterns)
    documents_analyzed: int = 0

    def to_dict(self) -> dict:
        return {
            "keyword": self.keyword,
            "searchIntent": self.search_intent.to_dict(),
            "commonHeadings": self.common_headings.to_dict(),
            "urlPatterns": self.url_patterns.to_dict(),
            "contentMetrics": self.content_metrics.to_dict(),
            "titlePatterns": self.title_patterns.to_dict(),
            "documentsAnalyzed": self.documents_analyzed,
        }


@dataclass
class CrawlProgress:
    """Progress update from the analysis engine."""

    documents_processed: int
    max_documents: int
    current_url: str
    status_code: int = 0
    event_type: str = "analyzed"  # "analyzed", "failed"


def titles_of(results: Iterable[SearchResultEntry]) -> List[str]:
    return [r.title for r in results]


def links_of(results: Iterable[SearchResultEntry]) -> List[str]:
    return [r.link for r in results]
