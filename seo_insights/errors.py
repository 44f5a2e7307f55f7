"""Exception hierarchy for the analysis pipeline."""

from __future__ import annotations


class SeoInsightsError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(SeoInsightsError):
    """A required setting or credential is missing or invalid."""


class FetchError(SeoInsightsError):
    """A page could not be fetched.

    ``retryable`` is False for client errors (4xx) and empty bodies.
    """

    def __init__(
        self,
        url: str,
        message: str,
        status_code: int = 0,
        retryable: bool = True,
    ) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url
        self.status_code = status_code
        self.retryable = retryable


class ExtractionError(SeoInsightsError):
    """Markup could not be parsed into text."""


class CancelledError(SeoInsightsError):
    """The caller's cancel event was set while work was in progress."""


class EmptyInputError(SeoInsightsError):
    """No search results were supplied, so nothing can be analyzed."""
