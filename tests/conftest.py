"""Shared fixtures: canned HTTP responses and a zero-delay config."""

from typing import List

import pytest
import requests

from seo_insights.config import AnalysisConfig
from seo_insights.models import SearchResultEntry


def make_response(status_code: int, text: str = "", url: str = "https://example.com/") -> requests.Response:
    """Build a real requests.Response carrying ``text`` as UTF-8."""
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = text.encode("utf-8")
    resp.encoding = "utf-8"
    resp.url = url
    resp.reason = {200: "OK", 404: "Not Found", 500: "Internal Server Error"}.get(status_code, "")
    return resp


PAGE_TEMPLATE = """
<html>
  <head><title>{title}</title><style>body {{ color: red; }}</style></head>
  <body>
    <script>var tracking = "ignored words here";</script>
    <h1>{title}</h1>
    {sections}
  </body>
</html>
"""


def make_page(title: str, sections: List[str], words_per_section: int = 10) -> str:
    body = "".join(
        f"<h2>{name}</h2><p>{' '.join(['word'] * words_per_section)}</p>"
        for name in sections
    )
    return PAGE_TEMPLATE.format(title=title, sections=body)


@pytest.fixture
def config() -> AnalysisConfig:
    return AnalysisConfig(retry_delay=0.0, max_retries=2)


@pytest.fixture
def python_results() -> List[SearchResultEntry]:
    return [
        SearchResultEntry(1, "How to Learn Python", "https://a.com/blog/guide", "A tutorial guide to learn Python"),
        SearchResultEntry(2, "Best Python Books", "https://a.com/blog/tips", "Top books for beginners"),
        SearchResultEntry(3, "Python Tutorial for Beginners", "https://a.com/docs/guide", None),
    ]
