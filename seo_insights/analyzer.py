"""Search intent, title/URL pattern mining, and heading aggregation."""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from typing import Iterable, List, Sequence, Tuple
from urllib.parse import urlparse

from .models import (
    ContentMetrics,
    HeadingStructure,
    PageSignals,
    SearchIntent,
    SearchResultEntry,
    SerpAnalysis,
    TitlePatterns,
    UrlPatterns,
    links_of,
    titles_of,
)

logger = logging.getLogger(__name__)

_TRANSACTIONAL = ("buy", "purchase", "order", "shop", "price", "cost", "deal", "discount", "sale")
_NAVIGATIONAL = ("official", "login", "sign in", "homepage")
_COMMERCIAL = ("best", "top", "review", "compare", "vs", "comparison", "alternative")
_INFORMATIONAL = ("what", "how", "why", "when", "guide", "tutorial", "learn", "understand")

_MIN_INTENT_HITS = 2
_MAX_CONFIDENCE = 90

_STOPWORDS_EN = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "is", "are", "was", "were",
})

_EXTENSION_RE = re.compile(r"\.([a-z]+)$", re.IGNORECASE)
_DIGITS_RE = re.compile(r"\d+")

# (substring probe, reported format), checked in this order
_TITLE_FORMATS: Tuple[Tuple[str, str], ...] = (
    ("How to", "How to..."),
    ("Best", "Best X..."),
    ("Guide", "Ultimate/Complete Guide"),
)


def _round_half_up(value: float, ndigits: int = 0) -> float:
    scale = 10 ** ndigits
    return math.floor(value * scale + 0.5) / scale


def _count_hits(text: str, vocabulary: Iterable[str]) -> int:
    return sum(1 for term in vocabulary if term in text)


def _top(counts: Counter, limit: int) -> Tuple[str, ...]:
    # most_common keeps insertion order among equal counts
    return tuple(key for key, _ in counts.most_common(limit))


def classify_intent(
    results: Sequence[SearchResultEntry], keyword: str,
) -> SearchIntent:
    """Classify search intent from result titles and snippets.

    Each vocabulary with at least two hits overrides the type, so the last
    qualifying category wins. Confidence grows with hits across all four
    vocabularies, not only the winning one.
    """
    text = " ".join(f"{r.title} {r.snippet or ''}" for r in results).lower()
    intent_type = "informational"
    indicators: List[str] = []

    transactional = _count_hits(text, _TRANSACTIONAL)
    if transactional >= _MIN_INTENT_HITS:
        intent_type = "transactional"
        indicators.append("Contains transactional keywords")

    navigational = _count_hits(text, _NAVIGATIONAL)
    if navigational >= _MIN_INTENT_HITS or ".com" in keyword or "www" in keyword:
        intent_type = "navigational"
        indicators.append("User searching for specific website")

    commercial = _count_hits(text, _COMMERCIAL)
    if commercial >= _MIN_INTENT_HITS:
        intent_type = "commercial"
        indicators.append("User comparing products/services")

    informational = _count_hits(text, _INFORMATIONAL)
    if informational >= _MIN_INTENT_HITS:
        intent_type = "informational"
        indicators.append("User seeking information")

    total = transactional + navigational + commercial + informational
    confidence = min(total * 10, _MAX_CONFIDENCE)
    logger.debug(
        "Intent hits t=%d n=%d c=%d i=%d -> %s",
        transactional, navigational, commercial, informational, intent_type,
    )
    return SearchIntent(type=intent_type, confidence=confidence, indicators=tuple(indicators))


def _url_path(url: str) -> str:
    try:
        parsed = urlparse(url)
    except ValueError:
        return "/"
    if not parsed.scheme or not parsed.netloc:
        return "/"
    return parsed.path or "/"


def analyze_urls(urls: Sequence[str]) -> UrlPatterns:
    """Mine path depth, recurring path segments and file extensions."""
    if not urls:
        return UrlPatterns()

    paths = [_url_path(url) for url in urls]
    segments_per_path = [[s for s in path.split("/") if s] for path in paths]

    depths = [len(segments) for segments in segments_per_path]
    avg_depth = _round_half_up(sum(depths) / len(depths), 1)

    segment_counts: Counter = Counter()
    for segments in segments_per_path:
        segment_counts.update(segments)
    threshold = len(urls) / 3
    common_paths = tuple(
        segment for segment, count in segment_counts.most_common()
        if count >= threshold
    )[:5]

    extension_counts: Counter = Counter()
    for path in paths:
        match = _EXTENSION_RE.search(path)
        extension_counts[match.group(1) if match else "none"] += 1

    return UrlPatterns(
        common_paths=common_paths,
        avg_path_depth=avg_depth,
        common_extensions=_top(extension_counts, 3),
    )


def analyze_titles(titles: Sequence[str]) -> TitlePatterns:
    """Mine frequent words, average length and recurring title formats."""
    if not titles:
        return TitlePatterns()

    word_counts: Counter = Counter(
        word for word in " ".join(titles).lower().split()
        if len(word) > 2 and word not in _STOPWORDS_EN
    )

    avg_length = int(_round_half_up(sum(len(t) for t in titles) / len(titles)))

    formats: List[str] = [
        name for probe, name in _TITLE_FORMATS
        if any(probe in title for title in titles)
    ]
    if any(_DIGITS_RE.search(title) for title in titles):
        formats.append("Numbered lists (X Ways/Tips)")
    if any("?" in title for title in titles):
        formats.append("Questions")

    return TitlePatterns(
        common_words=_top(word_counts, 10),
        avg_length=avg_length,
        common_formats=tuple(formats),
    )


def aggregate_headings(structures: Sequence[HeadingStructure]) -> HeadingStructure:
    """Most frequent headings per level across documents (5 h1, 10 h2/h3)."""
    h1_counts: Counter = Counter()
    h2_counts: Counter = Counter()
    h3_counts: Counter = Counter()

    for headings in structures:
        h1_counts.update(h.lower().strip() for h in headings.h1)
        h2_counts.update(h.lower().strip() for h in headings.h2)
        h3_counts.update(h.lower().strip() for h in headings.h3)

    return HeadingStructure(
        h1=_top(h1_counts, 5),
        h2=_top(h2_counts, 10),
        h3=_top(h3_counts, 10),
    )


def content_metrics(word_counts: Sequence[int]) -> ContentMetrics:
    if not word_counts:
        return ContentMetrics()
    return ContentMetrics(
        avg_word_count=int(_round_half_up(sum(word_counts) / len(word_counts))),
        min_word_count=min(word_counts),
        max_word_count=max(word_counts),
    )


class SerpAnalyzer:
    """Aggregate search results and per-page signals into one report."""

    def analyze(
        self,
        keyword: str,
        results: Sequence[SearchResultEntry],
        pages: Sequence[PageSignals] = (),
    ) -> SerpAnalysis:
        analysis = SerpAnalysis(
            keyword=keyword,
            search_intent=classify_intent(results, keyword),
            common_headings=aggregate_headings([p.headings for p in pages]),
            url_patterns=analyze_urls(links_of(results)),
            content_metrics=content_metrics([p.word_count for p in pages]),
            title_patterns=analyze_titles(titles_of(results)),
            documents_analyzed=len(pages),
        )
        logger.info(
            "Analyzed '%s': %d results, %d pages, intent=%s (%d%%)",
            keyword,
            len(results),
            len(pages),
            analysis.search_intent.type,
            analysis.search_intent.confidence,
        )
        return analysis
