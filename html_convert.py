"""
HTML to markdown conversion via markdownify.

Fixed output conventions so identical input always yields identical text:
ATX headings, '-' bullets, ``` fenced code, *em* / **strong**, inline links.

Takes either markup or the bs4 Tag the readability pass returns; a Tag goes
straight to the converter without being serialized and parsed again.
"""

import re

from bs4 import Tag
from markdownify import ATX, ASTERISK, MarkdownConverter

__all__ = [
    "convert_html_to_markdown",
    "language_from_tag",
]


# Patterns for extracting a code block's language from its attributes
# Matches: <pre><code class="language-python">, <code class="lang-js">,
#          <pre data-lang="rust">, <pre class="highlight python">, etc.
LANG_PATTERNS = [
    re.compile(r'class="[^"]*(?:language-|lang-)(\w+)', re.IGNORECASE),
    re.compile(r'data-lang="(\w+)"', re.IGNORECASE),
    re.compile(r'class="[^"]*highlight\s+(\w+)', re.IGNORECASE),  # highlight.js
    re.compile(r'class="[^"]*brush:\s*(\w+)', re.IGNORECASE),     # SyntaxHighlighter
]

_BLANK_RUNS = re.compile(r'\n{3,}')


def language_from_tag(tag_html: str) -> str:
    """
    Extract language hint from a pre/code tag's attributes.

    Args:
        tag_html: The opening tag(s), e.g., '<pre><code class="language-python">'

    Returns:
        Language name (lowercase) or empty string if not found
    """
    for pattern in LANG_PATTERNS:
        match = pattern.search(tag_html)
        if match:
            return match.group(1).lower()
    return ""


def _opening_tag(el) -> str:
    """Rebuild the opening tag of a BeautifulSoup element for pattern matching."""
    attrs = []
    for name, value in el.attrs.items():
        if isinstance(value, list):
            value = " ".join(value)
        attrs.append(f'{name}="{value}"')
    return f"<{el.name} {' '.join(attrs)}>"


def _code_language(el) -> str:
    tags = _opening_tag(el)
    code = el.find("code")
    if code is not None:
        tags += _opening_tag(code)
    return language_from_tag(tags)


_CONVERTER_OPTIONS = {
    "heading_style": ATX,
    "bullets": "-",
    "strong_em_symbol": ASTERISK,
    "code_language_callback": _code_language,
    # <a href="u">u</a> stays an inline link, never <u>
    "autolinks": False,
}


def convert_html_to_markdown(content: str | Tag) -> str:
    """
    Convert HTML (or an extracted bs4 subtree) to markdown.

    Pure apart from the converter itself: no timestamps, no generated IDs,
    attribute order taken from the source.

    Args:
        content: HTML string, or the article Tag from extractors.readable

    Returns:
        Markdown text with surrounding blank lines removed
    """
    converter = MarkdownConverter(**_CONVERTER_OPTIONS)
    if isinstance(content, Tag):
        markdown = converter.convert_soup(content)
    elif not content or not content.strip():
        return ''
    else:
        markdown = converter.convert(content)
    markdown = _BLANK_RUNS.sub('\n\n', markdown)
    return markdown.strip()
