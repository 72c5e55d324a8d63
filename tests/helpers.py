"""
Shared test helpers for pagefetch.

Centralizes the httpx mocking pattern used by adapter tests.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator
from unittest.mock import patch

import httpx

# Captured before any patching so the factory below can build real clients
_REAL_CLIENT = httpx.Client

ARTICLE_URL = "https://example.com/posts/tide-pools"


@contextmanager
def mock_http(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Iterator[list[httpx.Request]]:
    """Route every httpx.Client built by adapters.web through handler.

    The client is real (redirect following, timeouts config, decoding all
    behave as in production); only the transport is replaced. Yields the
    list of requests the handler saw.

    Usage:
        def handler(request):
            return httpx.Response(200, content=b"<html>...</html>")

        with mock_http(handler) as requests:
            data = fetch_web_content("https://example.com")
        assert len(requests) == 1
    """
    requests: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    def factory(*args: object, **kwargs: object) -> httpx.Client:
        return _REAL_CLIENT(*args, transport=httpx.MockTransport(recording), **kwargs)

    with patch("adapters.web.httpx.Client", side_effect=factory):
        yield requests


def html_response(body: str, content_type: str | None = "text/html; charset=utf-8",
                  status_code: int = 200) -> httpx.Response:
    """Build a response; content_type=None sends no Content-Type header at all."""
    headers = {"content-type": content_type} if content_type is not None else {}
    return httpx.Response(status_code, content=body.encode("utf-8"), headers=headers)
