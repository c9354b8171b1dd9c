"""Conversions between HTML and Markdown for book descriptions.

``html_to_markdown`` always removes script-like elements together with their
contents before converting; there is no switch to turn that off.
``markdown_to_html`` does no filtering of its own. Markdown passes inline HTML
through, and entity-escaped markup in the source HTML comes out of
``html_to_markdown`` as literal tags, so stored descriptions are displayed
through ``render_description``, which sanitizes the rendered HTML.
``sanitize_html`` is the allowlist sanitizer for HTML that is displayed
without going through Markdown.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

import markdown as markdown_lib
import nh3
from bs4 import BeautifulSoup
from markdownify import ATX, MarkdownConverter

# Removed with everything inside them.
DANGEROUS_TAGS = ("script", "iframe", "object", "embed", "style")

_converter = MarkdownConverter(heading_style=ATX, bullets="-")


def html_to_markdown(html: Optional[str]) -> str:
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for element in soup.find_all(DANGEROUS_TAGS):
        element.decompose()
    return _converter.convert_soup(soup).strip()


def markdown_to_html(text: Optional[str]) -> str:
    if not text:
        return ""
    return markdown_lib.markdown(text, extensions=["fenced_code", "sane_lists"])


def sanitize_html(html: Optional[str]) -> str:
    if not html:
        return ""
    return nh3.clean(html, clean_content_tags=set(DANGEROUS_TAGS))


def render_description(text: Optional[str]) -> str:
    return sanitize_html(markdown_to_html(text))


class DescriptionStrategy(str, Enum):
    """How an externally fetched description is made safe before review."""

    MARKDOWN = "markdown"
    SANITIZE = "sanitize"

    def apply(self, html: Optional[str]) -> str:
        if self is DescriptionStrategy.SANITIZE:
            return sanitize_html(html)
        return html_to_markdown(html)


__all__ = [
    "DANGEROUS_TAGS",
    "DescriptionStrategy",
    "html_to_markdown",
    "markdown_to_html",
    "render_description",
    "sanitize_html",
]
