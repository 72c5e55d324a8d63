#!/usr/bin/env python3
"""
Fetch MCP Server

Fetches a URL and returns its readable content as markdown, one window at a
time. Large documents are read in bounded chunks: each truncated response
names the start_index to pass on the next call.

Architecture:
- extractors/: Pure functions (classify, readable, paginate)
- adapters/: HTTP retrieval
- tools/: Tool implementations (pipeline wiring)
- server.py: Thin MCP wrappers (this file)
"""

import os
import signal
from typing import Annotated

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from config import DEFAULT_MAX_LENGTH, LOG_LEVEL, MAX_LENGTH_LIMIT
from logging_config import configure_logging, logger
from tools import do_fetch

# Initialize MCP server
mcp = FastMCP("fetch")


# ============================================================================
# TOOLS
# ============================================================================

@mcp.tool()
def fetch(
    url: Annotated[str, Field(description="The URL to fetch content from")],
    max_length: Annotated[
        int,
        Field(ge=1, le=MAX_LENGTH_LIMIT, description="Maximum number of characters to return"),
    ] = DEFAULT_MAX_LENGTH,
    start_index: Annotated[
        int,
        Field(ge=0, description="Starting character index for content extraction, useful for pagination"),
    ] = 0,
    raw: Annotated[
        bool,
        Field(description="If true, returns raw HTML instead of converted markdown"),
    ] = False,
) -> str:
    """
    Fetches a URL from the internet and extracts its contents as markdown.

    Can handle HTML pages, JSON APIs, and other web content. HTML pages are
    reduced to their main content; other content types come back unmodified.

    When the content is longer than max_length, the response ends with an
    instruction naming the start_index for the next call.
    """
    outcome = do_fetch(url, max_length=max_length, start_index=start_index, raw=raw)
    if outcome.is_error:
        raise ToolError(outcome.text)
    return outcome.text


# ============================================================================
# RESOURCES — Self-documenting MCP capabilities
# ============================================================================

@mcp.resource("pagefetch://docs/fetch")
def docs_fetch() -> str:
    """Detailed documentation for the fetch tool."""
    return f"""# fetch

Fetch a web page and read it as markdown, in windows.

## Arguments

| Argument | Default | Notes |
|----------|---------|-------|
| `url` | required | http or https only |
| `max_length` | {DEFAULT_MAX_LENGTH} | 1 to {MAX_LENGTH_LIMIT:,} characters per call |
| `start_index` | 0 | offset into the rendered text |
| `raw` | false | skip simplification, page through the fetched text as-is |

## What comes back

- HTML pages: main content only (navigation and boilerplate removed), as markdown
- Other content types: the text unmodified, with a note saying so
- `Contents of <url>:` followed by the window

## Reading long pages

If the window was cut short the response ends with:

    <error>Content truncated. Call the fetch tool with a start_index of N to get more content.</error>

Call again with that `start_index`. Past the end you get
`<error>No more content available.</error>`.

## Failures

Invalid URLs, timeouts (30s), connection errors and non-2xx responses come
back as a tool error with a message; nothing is retried.
"""


# ============================================================================
# SERVER ENTRY POINT
# ============================================================================

def _shutdown_handler(signum: int, frame: object) -> None:
    """Handle termination signals by exiting immediately.

    os._exit() is required because sys.exit() raises SystemExit,
    which asyncio's event loop catches and ignores. The server
    would survive SIGTERM until stdin closes.
    """
    os._exit(0)


def main() -> None:
    configure_logging(LOG_LEVEL)
    signal.signal(signal.SIGTERM, _shutdown_handler)
    signal.signal(signal.SIGINT, _shutdown_handler)
    logger.info("Fetch MCP Server running on stdio")
    mcp.run()


if __name__ == "__main__":
    main()
