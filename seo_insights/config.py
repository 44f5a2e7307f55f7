"""Analysis configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigurationError

SEARCH_API_KEY_ENV = "SERPER_API_KEY"

# Upper bound on documents fetched per run, whatever the caller asks for
MAX_DEEP_ANALYZED = 5

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/116.0.0.0 Safari/537.36"
)


@dataclass
class AnalysisConfig:
    """Configuration for a fetch or analysis session."""

    max_retries: int = 2
    retry_delay: float = 1.0
    timeout: int = 10
    max_documents: int = MAX_DEEP_ANALYZED
    extract_tags: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = "en-US,en;q=0.5"
    search_api_key: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0 <= self.max_retries <= 3:
            raise ConfigurationError(
                f"max_retries must be between 0 and 3, got {self.max_retries}"
            )
        if self.retry_delay < 0:
            raise ConfigurationError(
                f"retry_delay must not be negative, got {self.retry_delay}"
            )
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")
        if self.max_documents < 0:
            raise ConfigurationError(
                f"max_documents must not be negative, got {self.max_documents}"
            )

    @property
    def deep_analysis_limit(self) -> int:
        return min(self.max_documents, MAX_DEEP_ANALYZED)

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides: object,
    ) -> "AnalysisConfig":
        """Build a config, picking the search credential up from the environment."""
        env = os.environ if environ is None else environ
        overrides.setdefault("search_api_key", env.get(SEARCH_API_KEY_ENV) or None)
        return cls(**overrides)  # type: ignore[arg-type]

    def require_search_api_key(self) -> str:
        if not self.search_api_key:
            raise ConfigurationError(
                f"{SEARCH_API_KEY_ENV} is not set; a search API key is required "
                "to fetch search results"
            )
        return self.search_api_key
