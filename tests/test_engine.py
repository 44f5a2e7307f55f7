"""Tests for the analysis engine, with HTTP stubbed at the session level."""

import threading
from typing import Dict, List

import pytest
import requests

from conftest import make_page, make_response
from seo_insights.config import AnalysisConfig
from seo_insights.engine import AnalysisEngine
from seo_insights.errors import CancelledError, ConfigurationError, EmptyInputError
from seo_insights.models import ContentMetrics, CrawlProgress, SearchResultEntry


def _entries(count: int) -> List[SearchResultEntry]:
    return [
        SearchResultEntry(i, f"Python Guide part {i}", f"https://site{i}.com/docs/page{i}")
        for i in range(1, count + 1)
    ]


def _stub_pages(mocker, engine: AnalysisEngine, pages: Dict[str, object]):
    """Route session.get by URL; values are bodies, status codes or exceptions."""

    def fake_get(url, timeout=None):
        value = pages[url]
        if isinstance(value, Exception):
            raise value
        if isinstance(value, int):
            return make_response(value, url=url)
        return make_response(200, value, url=url)

    return mocker.patch.object(engine._fetcher._session, "get", side_effect=fake_get)


def test_all_documents_succeed(mocker, config: AnalysisConfig) -> None:
    results = _entries(3)
    engine = AnalysisEngine(config)
    _stub_pages(mocker, engine, {
        results[0].link: make_page("Python Guide", ["Install", "Usage"], words_per_section=10),
        results[1].link: make_page("Python Guide", ["Install"], words_per_section=20),
        results[2].link: make_page("Learn Python", ["Usage", "FAQ"], words_per_section=5),
    })

    analysis = engine.run("python", results)

    assert analysis.documents_analyzed == 3
    metrics = analysis.content_metrics
    assert 0 < metrics.min_word_count <= metrics.avg_word_count <= metrics.max_word_count
    assert analysis.common_headings.h1 == ("python guide", "learn python")
    assert analysis.common_headings.h2 == ("install", "usage", "faq")


def test_failed_documents_are_skipped(mocker, config: AnalysisConfig) -> None:
    results = _entries(3)
    engine = AnalysisEngine(config)
    get = _stub_pages(mocker, engine, {
        results[0].link: 404,
        results[1].link: requests.ConnectionError("refused"),
        results[2].link: make_page("Only one", ["Section"], words_per_section=3),
    })

    analysis = engine.run("python", results)

    assert analysis.documents_analyzed == 1
    assert analysis.content_metrics.min_word_count == analysis.content_metrics.max_word_count
    # 404 once, connection error 1 + max_retries times, success once
    assert get.call_count == 1 + (1 + config.max_retries) + 1


def test_degraded_report_when_nothing_succeeds(mocker, config: AnalysisConfig) -> None:
    results = _entries(2)
    engine = AnalysisEngine(config)
    _stub_pages(mocker, engine, {r.link: 500 for r in results})

    analysis = engine.run("python guide", results)

    assert analysis.content_metrics == ContentMetrics(0, 0, 0)
    assert analysis.common_headings.h2 == ()
    assert analysis.title_patterns.common_words[:2] == ("python", "guide")
    assert analysis.url_patterns.avg_path_depth == 2.0


def test_only_first_five_results_are_fetched(mocker, config: AnalysisConfig) -> None:
    results = _entries(8)
    engine = AnalysisEngine(AnalysisConfig(retry_delay=0.0, max_documents=10))
    get = _stub_pages(mocker, engine, {r.link: make_page("T", ["S"]) for r in results})

    analysis = engine.run("python", results)

    fetched = [c.args[0] for c in get.call_args_list]
    assert fetched == [r.link for r in results[:5]]
    assert analysis.documents_analyzed == 5
    # titles and URLs still cover all results
    assert analysis.title_patterns.avg_length == round(
        sum(len(r.title) for r in results) / len(results)
    )


def test_max_documents_lowers_the_cap(mocker) -> None:
    results = _entries(4)
    engine = AnalysisEngine(AnalysisConfig(retry_delay=0.0, max_documents=2))
    get = _stub_pages(mocker, engine, {r.link: make_page("T", ["S"]) for r in results})

    engine.run("python", results)

    assert get.call_count == 2


def test_invalid_result_link_is_skipped(mocker, config: AnalysisConfig) -> None:
    results = [
        SearchResultEntry(1, "Broken", "/relative/path"),
        SearchResultEntry(2, "Fine", "https://ok.com/a"),
    ]
    engine = AnalysisEngine(config)
    _stub_pages(mocker, engine, {"https://ok.com/a": make_page("Fine", ["A"])})

    assert engine.run("python", results).documents_analyzed == 1


def test_progress_events(mocker, config: AnalysisConfig) -> None:
    results = _entries(2)
    events: List[CrawlProgress] = []
    engine = AnalysisEngine(config, progress_callback=events.append)
    _stub_pages(mocker, engine, {results[0].link: 404, results[1].link: make_page("T", ["S"])})

    engine.run("python", results)

    assert [(e.documents_processed, e.event_type, e.status_code) for e in events] == [
        (1, "failed", 404),
        (2, "analyzed", 200),
    ]
    assert all(e.max_documents == 2 for e in events)


def test_empty_results_are_fatal(config: AnalysisConfig) -> None:
    with pytest.raises(EmptyInputError):
        AnalysisEngine(config).run("python", [])


def test_cancel_before_start_makes_no_requests(mocker, config: AnalysisConfig) -> None:
    cancel = threading.Event()
    cancel.set()
    engine = AnalysisEngine(config, cancel_event=cancel)
    get = mocker.patch.object(engine._fetcher._session, "get")

    with pytest.raises(CancelledError):
        engine.run("python", _entries(3))

    get.assert_not_called()


def test_cancel_mid_run_propagates_without_report(mocker, config: AnalysisConfig) -> None:
    results = _entries(3)
    cancel = threading.Event()
    engine = AnalysisEngine(config, cancel_event=cancel)

    def fake_get(url, timeout=None):
        cancel.set()
        return make_response(200, make_page("T", ["S"]), url=url)

    get = mocker.patch.object(engine._fetcher._session, "get", side_effect=fake_get)

    with pytest.raises(CancelledError):
        engine.run("python", results)

    assert get.call_count == 1


def test_delegated_search_requires_credential(config: AnalysisConfig) -> None:
    search = lambda keyword, limit: _entries(3)  # noqa: E731
    engine = AnalysisEngine(config, search=search)

    with pytest.raises(ConfigurationError, match="SERPER_API_KEY"):
        engine.run("python")


def test_missing_search_provider_is_a_configuration_error(config: AnalysisConfig) -> None:
    with pytest.raises(ConfigurationError):
        AnalysisEngine(config).run("python")


def test_delegated_search_feeds_the_pipeline(mocker) -> None:
    config = AnalysisConfig(retry_delay=0.0, search_api_key="secret")
    results = _entries(2)
    search = mocker.Mock(return_value=results)
    engine = AnalysisEngine(config, search=search, search_limit=3)
    _stub_pages(mocker, engine, {r.link: make_page("T", ["S"]) for r in results})

    analysis = engine.run("python")

    search.assert_called_once_with("python", 3)
    assert analysis.documents_analyzed == 2


def test_delegated_search_with_no_results_is_fatal(mocker) -> None:
    config = AnalysisConfig(retry_delay=0.0, search_api_key="secret")
    engine = AnalysisEngine(config, search=mocker.Mock(return_value=[]))

    with pytest.raises(EmptyInputError):
        engine.run("python")
