"""
Shared pytest fixtures for pagefetch tests.

HTML fixtures are loaded from the fixtures/ directory at project root.
HTTP is never touched: adapter tests use tests.helpers.mock_http,
tool tests patch the adapter and hand in WebData directly.
"""

from pathlib import Path
from typing import Callable

import pytest

from logging_config import logger
from models import WebData
from tests.helpers import ARTICLE_URL

# Project root for fixture loading
PROJECT_ROOT = Path(__file__).parent.parent
FIXTURES_DIR = PROJECT_ROOT / "fixtures"


def load_fixture(category: str, name: str) -> str:
    """
    Load a text fixture by category and file name.

    Example:
        load_fixture("web", "article.html")  # loads fixtures/web/article.html
    """
    return (FIXTURES_DIR / category / name).read_text(encoding="utf-8")


@pytest.fixture
def article_html() -> str:
    """A blog post with nav, sidebar, footer and a long article body."""
    return load_fixture("web", "article.html")


@pytest.fixture
def thin_html() -> str:
    """A page with no block of text long enough to count as content."""
    return "<html><head><title>Hi</title></head><body><p>Too short to matter.</p></body></html>"


@pytest.fixture
def make_web_data() -> Callable[..., WebData]:
    """
    Factory for WebData as the adapter would return it.

    Example:
        web_data = make_web_data("plain text", content_type="text/plain")
    """
    def _make(
        raw_text: str,
        content_type: str = "text/html; charset=utf-8",
        url: str = ARTICLE_URL,
        final_url: str | None = None,
    ) -> WebData:
        return WebData(
            url=url,
            raw_text=raw_text,
            final_url=final_url or url,
            status_code=200,
            content_type=content_type,
        )

    return _make


@pytest.fixture(autouse=True)
def fresh_logger():
    """Start each test without package handlers, so configure_logging binds
    to that test's stderr rather than a stream captured by an earlier one."""
    handlers, level = list(logger.handlers), logger.level
    logger.handlers.clear()
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
