"""
IdeaScope Backend — Validation Summary

Formats a finished validation as a markdown report, and converts that report
to the minimal HTML used for email bodies (headings, line breaks, links).
"""

import html
import re

from ideascope.models import SummaryRequest, SummaryResponse

_HEADING_PATTERNS = [
    (re.compile(r"^### (.*)$", re.MULTILINE), r"<h3>\1</h3>"),
    (re.compile(r"^## (.*)$", re.MULTILINE), r"<h2>\1</h2>"),
    (re.compile(r"^# (.*)$", re.MULTILINE), r"<h1>\1</h1>"),
]
_LINK_PATTERN = re.compile(r"\[(.*?)\]\((.*?)\)")
_SAFE_HREF = re.compile(r"^https?://\S+$", re.IGNORECASE)


def _link(match: re.Match) -> str:
    label, href = match.groups()
    if not _SAFE_HREF.match(href):
        return match.group(0)
    return f'<a href="{href}">{label}</a>'

def build_summary_markdown(summary: SummaryRequest) -> str:
    parts = ["# Idea Validation Summary\n\n"]
    parts.append(f"## Your Idea\n{summary.idea}\n\n")

    parts.append("## Competitors Analysis\n")
    for index, competitor in enumerate(summary.competitors, start=1):
        parts.append(f"### {index}. {competitor.name}\n")
        parts.append(f"- Website: {competitor.website}\n")
        parts.append(f"- Description: {competitor.description}\n\n")

    gaps = [g.strip() for g in summary.market_gaps if g.strip()]
    if gaps:
        parts.append("## Market Gaps\n")
        parts.extend(f"* {gap}\n" for gap in gaps)
        parts.append("\n")

    parts.append(f"## Differentiation Strategy\n{summary.differentiation}\n\n")
    parts.append(f"## Validation Plan\n{summary.validation_plan}\n\n")
    return "".join(parts)


def markdown_to_html(markdown: str) -> str:
    """
    Convert the summary markdown to email HTML.

    Only headings (#, ##, ###), newlines and [text](url) links are translated;
    everything else passes through escaped. Links to anything but http(s) stay
    as plain text.
    """
    text = html.escape(markdown)
    for pattern, replacement in _HEADING_PATTERNS:
        text = pattern.sub(replacement, text)
    text = text.replace("\n", "<br>")
    return _LINK_PATTERN.sub(_link, text)


def render_summary(summary: SummaryRequest) -> SummaryResponse:
    markdown = build_summary_markdown(summary)
    return SummaryResponse(markdown=markdown, html=markdown_to_html(markdown))
