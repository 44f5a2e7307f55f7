"""Command-line interface for SERP analysis."""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
import threading
from typing import List

from . import __version__
from .config import MAX_DEEP_ANALYZED, AnalysisConfig
from .engine import AnalysisEngine
from .errors import SeoInsightsError
from .fetcher import Fetcher
from .models import CrawlProgress, CrawlRequest, SearchResultEntry, parse_search_results
from .report import render_analysis, render_crawl_result

logger = logging.getLogger(__name__)


def _add_fetch_options(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--max-retries", type=int, default=2, choices=range(0, 4), metavar="{0-3}",
        help="Retries after a failed request (default: 2)",
    )
    p.add_argument(
        "--retry-delay", type=float, default=1.0,
        help="Seconds to wait before each retry (default: 1.0)",
    )
    p.add_argument(
        "--timeout", type=int, default=10,
        help="HTTP request timeout in seconds (default: 10)",
    )
    p.add_argument(
        "-f", "--format", choices=["json", "markdown"], default="markdown",
        help="Output format (default: markdown)",
    )
    p.add_argument(
        "-o", "--output",
        help="Write the report to this file instead of stdout",
    )
    p.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable verbose logging",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="seo-insights",
        description="Analyze search results and their pages for SEO patterns",
    )
    p.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    sub = p.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Analyze a keyword's search results")
    analyze.add_argument("keyword", help="Keyword the results were retrieved for")
    analyze.add_argument(
        "-r", "--results", required=True,
        help="JSON file with the ranked search results ('-' for stdin)",
    )
    analyze.add_argument(
        "-n", "--max-documents", type=int, default=MAX_DEEP_ANALYZED,
        help=f"Pages to fetch and analyze, at most {MAX_DEEP_ANALYZED} (default: {MAX_DEEP_ANALYZED})",
    )
    _add_fetch_options(analyze)

    crawl = sub.add_parser("crawl", help="Fetch one page and extract its text")
    crawl.add_argument("url", help="Absolute http(s) URL to crawl")
    crawl.add_argument(
        "--no-tags", action="store_true",
        help="Skip HTML tag counting",
    )
    _add_fetch_options(crawl)
    return p


def load_results(path: str) -> List[SearchResultEntry]:
    if path == "-":
        payload = json.load(sys.stdin)
    else:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    return parse_search_results(payload)


def _log_progress(progress: CrawlProgress) -> None:
    logger.debug(
        "progress %d/%d %s %s (status=%d)",
        progress.documents_processed,
        progress.max_documents,
        progress.event_type,
        progress.current_url,
        progress.status_code,
    )


def _run_analyze(args: argparse.Namespace, config: AnalysisConfig, cancel_event: threading.Event) -> str:
    results = load_results(args.results)
    engine = AnalysisEngine(config, progress_callback=_log_progress, cancel_event=cancel_event)
    analysis = engine.run(args.keyword, results)
    if args.format == "json":
        return json.dumps(analysis.to_dict(), ensure_ascii=False, indent=2)
    return render_analysis(analysis)


def _run_crawl(args: argparse.Namespace, config: AnalysisConfig, cancel_event: threading.Event) -> str:
    request = CrawlRequest(url=args.url, max_retries=config.max_retries)
    with Fetcher(config) as fetcher:
        result = fetcher.crawl(request, cancel_event=cancel_event)
    if args.format == "json":
        return json.dumps(result.to_dict(), ensure_ascii=False, indent=2)
    return render_crawl_result(result)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    cancel_event = threading.Event()
    previous_handler = None
    if threading.current_thread() is threading.main_thread():
        previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: cancel_event.set())

    try:
        config = AnalysisConfig.from_env(
            max_retries=args.max_retries,
            retry_delay=args.retry_delay,
            timeout=args.timeout,
            max_documents=getattr(args, "max_documents", MAX_DEEP_ANALYZED),
            extract_tags=not getattr(args, "no_tags", False),
        )
        if args.command == "analyze":
            output = _run_analyze(args, config, cancel_event)
        else:
            output = _run_crawl(args, config, cancel_event)
    except (SeoInsightsError, OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output)
        logger.info("Saved report → %s", args.output)
    else:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
