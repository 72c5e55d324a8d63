"""
Fetch tool implementation.

Sequences the pipeline for one tool call:

    retrieve → classify → (markup) extract → convert ─┐
                        → (other / raw) passthrough ──┴→ paginate

Retrieval and input failures end the call with a single error outcome.
Thin pages and exhausted windows are not failures: they become inline
markers in an otherwise successful response.
"""

from typing import Any

from adapters.web import fetch_web_content, validate_url
from config import (
    CHAR_THRESHOLD,
    DEFAULT_MAX_LENGTH,
    DEFAULT_USER_AGENT_AUTONOMOUS,
    MAX_ELEMS_TO_PARSE,
    MAX_LENGTH_LIMIT,
    NB_TOP_CANDIDATES,
)
from extractors.classify import classify_content
from extractors.paginate import paginate, render_window
from extractors.readable import extract_readable
from html_convert import convert_html_to_markdown
from logging_config import logger, log_outcome
from models import (
    ContentKind,
    ErrorKind,
    FetchOutcome,
    MiseError,
    PaginationWindow,
    RenderedContent,
    WebData,
)

__all__ = [
    "do_fetch",
    "render_content",
    "validate_window",
    "SIMPLIFY_FAILED_MARKER",
    "EXTRACT_ERROR_MARKER",
]

# Rendered body when the page has no identifiable main content
SIMPLIFY_FAILED_MARKER = "<error>Page failed to be simplified from HTML</error>"
# Rendered body when extraction or conversion blew up
EXTRACT_ERROR_MARKER = "<error>Failed to extract content from HTML</error>"


def _raw_prefix(content_type: str) -> str:
    return (
        f"Content type {content_type} cannot be simplified to markdown, "
        f"but here is the raw content:\n"
    )


def validate_window(start_index: Any, max_length: Any) -> PaginationWindow:
    """
    Enforce the tool contract for the pagination window.

    Raises:
        MiseError: INVALID_INPUT when a value is not an int or is out of range
    """
    for name, value in (("start_index", start_index), ("max_length", max_length)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise MiseError(ErrorKind.INVALID_INPUT, f"{name} must be an integer, got {value!r}")
    if start_index < 0:
        raise MiseError(ErrorKind.INVALID_INPUT, f"start_index must be >= 0, got {start_index}")
    if not 1 <= max_length <= MAX_LENGTH_LIMIT:
        raise MiseError(
            ErrorKind.INVALID_INPUT,
            f"max_length must be between 1 and {MAX_LENGTH_LIMIT}, got {max_length}",
        )
    return PaginationWindow(start_index=start_index, max_length=max_length)


def _simplify_markup(web_data: WebData) -> tuple[str, str]:
    """(readable markdown or an inline marker, page title). Never raises."""
    title = ""
    try:
        extracted = extract_readable(
            web_data.raw_text,
            web_data.final_url,
            max_elems=MAX_ELEMS_TO_PARSE,
            nb_top_candidates=NB_TOP_CANDIDATES,
            char_threshold=CHAR_THRESHOLD,
        )
        title = extracted.title
        if not extracted.extraction_succeeded or extracted.article is None:
            logger.info(f"No readable content block found in {web_data.url}")
            return SIMPLIFY_FAILED_MARKER, title
        return convert_html_to_markdown(extracted.article), title
    except Exception as e:
        logger.error(f"Error extracting content from {web_data.url}: {e}")
        return EXTRACT_ERROR_MARKER, title


def render_content(web_data: WebData, raw: bool = False) -> RenderedContent:
    """
    Turn a fetched resource into the text to paginate.

    prefix is empty unless the content is passed through unsimplified;
    title is only known for simplified markup.
    """
    if not raw and classify_content(web_data.raw_text, web_data.content_type) is ContentKind.MARKUP:
        text, title = _simplify_markup(web_data)
        return RenderedContent(text=text, title=title)
    return RenderedContent(text=web_data.raw_text, prefix=_raw_prefix(web_data.content_type))


def do_fetch(
    url: str,
    max_length: int = DEFAULT_MAX_LENGTH,
    start_index: int = 0,
    raw: bool = False,
    user_agent: str = DEFAULT_USER_AGENT_AUTONOMOUS,
) -> FetchOutcome:
    """
    Fetch a URL and return one window of its readable content.

    Args:
        url: http(s) URL
        max_length: Largest number of characters to return
        start_index: Offset into the rendered text
        raw: Skip simplification and page through the fetched text as-is
        user_agent: User-Agent header for the request

    Returns:
        FetchOutcome. On success the text is
        "{prefix}Contents of {url}:\\n{window}"; on failure is_error is set
        and the text explains why.
    """
    try:
        url = validate_url(url)
        window = validate_window(start_index, max_length)
        web_data = fetch_web_content(url, user_agent=user_agent)
    except MiseError as e:
        logger.warning(f"fetch failed ({e.kind.value}): {e.message}")
        return FetchOutcome(
            text=f"Failed to fetch content: {e.message}",
            is_error=True,
            metadata={"kind": e.kind.value, **e.details},
        )

    rendered = render_content(web_data, raw=raw)
    page = paginate(rendered.text, window.start_index, window.max_length)

    metadata: dict[str, Any] = {
        "final_url": web_data.final_url,
        "content_type": web_data.content_type,
        "total_length": len(rendered.text),
        "next_start_index": page.next_start_index,
    }
    if rendered.title:
        metadata["title"] = rendered.title
    if web_data.warnings:
        metadata["warnings"] = list(web_data.warnings)
    log_outcome(url, len(rendered.text), page.next_start_index)

    return FetchOutcome(
        text=f"{rendered.prefix}Contents of {url}:\n{render_window(page)}",
        metadata=metadata,
    )
