"""HTML parsing: extract clean text, tag counts, and headings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from .errors import ExtractionError
from .models import HeadingStructure, TagCounts

logger = logging.getLogger(__name__)

# Not textual content; left in place they inflate word counts
_REMOVE_TAGS = ["script", "style", "noscript"]

_COUNTED_TAGS = ("h1", "h2", "p", "div", "span")


@dataclass(frozen=True)
class ExtractedContent:
    content: str
    tag_counts: Optional[TagCounts] = None


class Parser:
    """Parse HTML and extract text and structural signals."""

    @staticmethod
    def extract(html: str, want_tag_counts: bool = True) -> ExtractedContent:
        """Return whitespace-normalized text and, optionally, tag counts.

        Tag counts are taken after script/style/noscript removal.
        """
        soup = Parser._soup(html)
        for tag in soup.find_all(_REMOVE_TAGS):
            tag.decompose()

        content = normalize_whitespace(soup.get_text(separator=" "))

        tag_counts = None
        if want_tag_counts:
            counts = {name: len(soup.find_all(name)) for name in _COUNTED_TAGS}
            tag_counts = TagCounts(**counts)

        return ExtractedContent(content=content, tag_counts=tag_counts)

    @staticmethod
    def extract_headings(html: str) -> HeadingStructure:
        """Collect h1/h2/h3 texts in document order, skipping empty ones."""
        soup = Parser._soup(html)
        levels: dict[str, List[str]] = {"h1": [], "h2": [], "h3": []}
        for tag in soup.find_all(["h1", "h2", "h3"]):
            text = tag.get_text().strip()
            if text:
                levels[tag.name].append(text)
        return HeadingStructure(
            h1=tuple(levels["h1"]),
            h2=tuple(levels["h2"]),
            h3=tuple(levels["h3"]),
        )

    @staticmethod
    def _soup(html: str) -> BeautifulSoup:
        try:
            return BeautifulSoup(html, "html.parser")
        except ParserRejectedMarkup as exc:
            logger.debug("Parser rejected markup: %s", exc)
            raise ExtractionError(f"could not parse markup: {exc}") from exc


def normalize_whitespace(text: str) -> str:
    return " ".join(text.split())


def word_count(text: str) -> int:
    return len(text.split())
