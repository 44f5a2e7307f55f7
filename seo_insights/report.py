"""Markdown rendering of crawl results and SERP analyses for the CLI."""

from __future__ import annotations

from typing import List

from .models import CrawlResult, SerpAnalysis

_PREVIEW_CHARS = 500


def render_crawl_result(result: CrawlResult) -> str:
    if not result.success:
        return f"Failed to crawl {result.url}. The content could not be retrieved."

    lines: List[str] = [
        f"Successfully crawled: {result.url}",
        f"Status Code: {result.status_code}",
        f"Content Length: {result.content_length} characters",
        "",
    ]
    if result.tag_counts:
        counts = result.tag_counts
        lines += [
            "HTML Structure:",
            f"- H1 tags: {counts.h1}",
            f"- H2 tags: {counts.h2}",
            f"- Paragraphs: {counts.p}",
            f"- Divs: {counts.div}",
            f"- Spans: {counts.span}",
            "",
        ]
    preview = result.content[:_PREVIEW_CHARS]
    if result.content_length > _PREVIEW_CHARS:
        preview += "..."
    lines += [
        "Content Preview:",
        preview,
        "",
        f"Full Content ({result.content_length} characters):",
        result.content,
    ]
    return "\n".join(lines)


def render_analysis(analysis: SerpAnalysis) -> str:
    intent = analysis.search_intent
    titles = analysis.title_patterns
    urls = analysis.url_patterns
    metrics = analysis.content_metrics
    headings = analysis.common_headings

    out: List[str] = [f'## SERP Analysis for "{analysis.keyword}"', "", "### Search Intent"]
    out.append(f"- **Type**: {intent.type}")
    out.append(f"- **Confidence**: {intent.confidence}%")
    if intent.indicators:
        out.append(f"- **Indicators**: {', '.join(intent.indicators)}")
    out.append("")

    out.append("### Title Patterns")
    out.append(f"- **Average Length**: {titles.avg_length} characters")
    out.append(f"- **Common Words**: {', '.join(titles.common_words)}")
    if titles.common_formats:
        out.append(f"- **Common Formats**: {', '.join(titles.common_formats)}")
    out.append("")

    out.append("### URL Patterns")
    out.append(f"- **Average Path Depth**: {urls.avg_path_depth}")
    if urls.common_paths:
        out.append(f"- **Common Paths**: {', '.join(urls.common_paths)}")
    out.append(f"- **Extensions**: {', '.join(urls.common_extensions)}")
    out.append("")

    if metrics.avg_word_count > 0:
        out.append("### Content Metrics")
        out.append(f"- **Average Word Count**: {metrics.avg_word_count}")
        out.append(f"- **Range**: {metrics.min_word_count} - {metrics.max_word_count} words")
        out.append("")

    if headings.h2:
        out.append("### Common Headings")
        for label, items in (("H1", headings.h1), ("H2", headings.h2), ("H3", headings.h3[:5])):
            if items:
                out.append(f"**{label} Tags**:")
                out.extend(f"- {h}" for h in items)
                out.append("")

    return "\n".join(out).rstrip() + "\n"
