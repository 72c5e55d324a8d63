"""
Extractors — Pure functions for content extraction.

No MCP awareness, no network calls. Just transform input → output.
Easily testable with inline HTML.
"""

from .classify import classify_content
from .readable import parse_markup, extract_readable, extract_title
from .paginate import paginate, render_window, continuation_notice, NO_MORE_CONTENT

__all__ = [
    "classify_content",
    "parse_markup",
    "extract_readable",
    "extract_title",
    "paginate",
    "render_window",
    "continuation_notice",
    "NO_MORE_CONTENT",
]
