"""
Web Content Adapter — Fetches web resources for extraction.

One HTTP GET per call, redirects followed transparently, the whole call
bounded by HTTP_TIMEOUT. No retries: a failed fetch is surfaced immediately
and the caller decides whether to call again.

Returns the decoded body and declared Content-Type; deciding what the
payload *is* belongs to extractors/classify.py.
"""

import time
from urllib.parse import urlparse

import httpx

from config import ALLOWED_SCHEMES, DEFAULT_USER_AGENT_AUTONOMOUS, HTTP_TIMEOUT
from logging_config import logger, log_fetch, log_fetch_result
from models import MiseError, ErrorKind, WebData

__all__ = [
    "fetch_web_content",
    "validate_url",
]


def validate_url(url: str) -> str:
    """
    Validate a URL before any network activity.

    Args:
        url: Caller-supplied URL

    Returns:
        The URL with surrounding whitespace removed

    Raises:
        MiseError: INVALID_INPUT for malformed URLs or disallowed schemes
    """
    url = (url or "").strip()
    if not url:
        raise MiseError(ErrorKind.INVALID_INPUT, "URL is required")

    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise MiseError(ErrorKind.INVALID_INPUT, f"Invalid URL: {url} - {e}")

    if not parsed.scheme:
        raise MiseError(ErrorKind.INVALID_INPUT, f"Invalid URL: {url}. Must be an absolute URL")

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise MiseError(
            ErrorKind.INVALID_INPUT,
            "Only HTTP and HTTPS URLs are supported",
            details={"scheme": parsed.scheme},
        )

    if not parsed.netloc:
        raise MiseError(ErrorKind.INVALID_INPUT, f"Invalid URL: {url}. Missing host")

    return url


def _read_body(response: httpx.Response, deadline: float, url: str, timeout: float) -> str:
    """Read and decode the streamed body, giving up once the deadline passes."""
    chunks: list[bytes] = []
    for chunk in response.iter_bytes():
        if time.monotonic() > deadline:
            raise MiseError(ErrorKind.TIMEOUT, f"Request timed out after {timeout}s: {url}")
        chunks.append(chunk)

    encoding = response.charset_encoding or "utf-8"
    try:
        return b"".join(chunks).decode(encoding, errors="replace")
    except LookupError:
        return b"".join(chunks).decode("utf-8", errors="replace")


def fetch_web_content(
    url: str,
    user_agent: str = DEFAULT_USER_AGENT_AUTONOMOUS,
    timeout: float = HTTP_TIMEOUT,
) -> WebData:
    """
    Fetch a URL and return its decoded body.

    timeout bounds the whole call, not each phase: httpx enforces it per
    connect/read, and the body is streamed against a wall-clock deadline
    so a server trickling bytes cannot hold the call open.

    Args:
        url: http(s) URL to fetch
        user_agent: User-Agent header value
        timeout: Seconds to wait before aborting

    Returns:
        WebData with the body and declared Content-Type

    Raises:
        MiseError: INVALID_INPUT (before any request), TIMEOUT, NETWORK_ERROR,
            or HTTP_STATUS (non-2xx, status in details)
    """
    url = validate_url(url)
    warnings: list[str] = []

    log_fetch(url, timeout=timeout)
    deadline = time.monotonic() + timeout
    try:
        with httpx.Client(
            follow_redirects=True,
            timeout=httpx.Timeout(timeout),
        ) as client:
            with client.stream("GET", url, headers={'User-Agent': user_agent}) as response:
                final_url = str(response.url)

                # Track redirect
                if final_url != url:
                    warnings.append(f"Redirected: {url} → {final_url}")
                    logger.info(f"Redirected: {url} → {final_url}")

                if not response.is_success:
                    log_fetch_result(url, response.status_code)
                    raise MiseError(
                        ErrorKind.HTTP_STATUS,
                        f"Failed to fetch {url} - status code {response.status_code}",
                        details={"status_code": response.status_code},
                    )

                raw_text = _read_body(response, deadline, url, timeout)

    except httpx.TimeoutException:
        raise MiseError(ErrorKind.TIMEOUT, f"Request timed out after {timeout}s: {url}")
    except httpx.ConnectError as e:
        raise MiseError(ErrorKind.NETWORK_ERROR, f"Connection failed: {url} - {e}")
    except httpx.RequestError as e:
        raise MiseError(ErrorKind.NETWORK_ERROR, f"Request failed: {url} - {e}")

    content_type = response.headers.get('content-type', '')
    log_fetch_result(url, response.status_code, len(raw_text))

    return WebData(
        url=url,
        raw_text=raw_text,
        final_url=final_url,
        status_code=response.status_code,
        content_type=content_type,
        warnings=tuple(warnings),
    )
