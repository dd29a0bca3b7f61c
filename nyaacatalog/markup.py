"""Markdown rendering and escaping for text shown on catalog pages."""

from markdown_it import MarkdownIt
from markupsafe import Markup, escape

# Raw HTML in user input is escaped rather than passed through
_markdown = MarkdownIt("commonmark", {"html": False, "breaks": True})


def markdown_to_html(text: str) -> Markup:
    """Render user-supplied Markdown to markup that is safe to embed."""
    if not text:
        return Markup("")
    return Markup(_markdown.render(text))


def safe_text(text: str) -> Markup:
    """Escape plain text for embedding in markup."""
    return escape(text or "")


def safe_url(url: str) -> str:
    """Mark a configured or stored URL as trusted for output."""
    return url or ""
