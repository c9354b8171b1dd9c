"""Text transforms for user- and upstream-supplied content."""

from .markup import (
    DescriptionStrategy,
    html_to_markdown,
    markdown_to_html,
    render_description,
    sanitize_html,
)

__all__ = [
    "DescriptionStrategy",
    "html_to_markdown",
    "markdown_to_html",
    "render_description",
    "sanitize_html",
]
