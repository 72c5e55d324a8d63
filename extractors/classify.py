"""
Content classification — markup or something else.

A heuristic, not a parser-level guarantee. A payload served without any
Content-Type is assumed to be markup so minimal servers still get the
readable path.
"""

from models import ContentKind

__all__ = ["classify_content"]

# How far into the body to look for the document root tag
SNIFF_CHARS = 100

MARKUP_ROOT_TAG = "<html"
MARKUP_MEDIA_TYPE = "text/html"


def classify_content(raw_text: str, content_type: str | None) -> ContentKind:
    """
    Decide how a fetched payload should be treated.

    First match wins:
    1. the first 100 characters contain an opening <html tag (any case)
    2. the declared Content-Type mentions text/html
    3. no Content-Type was declared at all
    """
    if MARKUP_ROOT_TAG in raw_text[:SNIFF_CHARS].lower():
        return ContentKind.MARKUP
    if content_type and MARKUP_MEDIA_TYPE in content_type.lower():
        return ContentKind.MARKUP
    if not content_type:
        return ContentKind.MARKUP
    return ContentKind.OTHER
