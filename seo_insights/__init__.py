"""Fetch search-result pages and mine them for SEO patterns."""

__version__ = "0.1.0"

from .analyzer import SerpAnalyzer
from .config import AnalysisConfig
from .engine import AnalysisEngine
from .errors import (
    CancelledError,
    ConfigurationError,
    EmptyInputError,
    ExtractionError,
    FetchError,
    SeoInsightsError,
)
from .fetcher import Fetcher
from .models import CrawlRequest, CrawlResult, SearchResultEntry, SerpAnalysis
from .parser import Parser

__all__ = [
    "AnalysisConfig",
    "AnalysisEngine",
    "CancelledError",
    "ConfigurationError",
    "CrawlRequest",
    "CrawlResult",
    "EmptyInputError",
    "ExtractionError",
    "FetchError",
    "Fetcher",
    "Parser",
    "SearchResultEntry",
    "SeoInsightsError",
    "SerpAnalysis",
    "SerpAnalyzer",
]
