"""
Tests for the readable content extractor.

Inline HTML for parser and measure behaviour and for the ranking rules;
the article fixture for end-to-end extraction.
"""

import pytest

from extractors.readable import (
    extract_readable,
    extract_title,
    inner_text,
    link_density,
    parse_markup,
)
from models import ErrorKind, MiseError
from tests.helpers import ARTICLE_URL

PARAGRAPH = (
    "Low water exposes the shelf below the lighthouse for an hour or two, "
    "long enough to walk out and look into the pools without rushing. "
    "Bring a notebook and wear shoes that grip on wet rock."
)


def _page(body: str, title: str = "Field Notes") -> str:
    return f"<html><head><title>{title}</title></head><body>{body}</body></html>"


class TestParseMarkup:
    """Parsing goes through bs4; these pin what the extractor relies on."""

    def test_nested_elements(self) -> None:
        soup = parse_markup("<div><p>One <em>two</em></p></div>")
        div = soup.find("div")
        assert [c.name for c in div.find_all(True, recursive=False)] == ["p"]
        assert inner_text(div) == "One two"

    def test_entities_decoded(self) -> None:
        soup = parse_markup("<p>fish &amp; chips</p>")
        assert inner_text(soup) == "fish & chips"

    def test_comments_are_not_text(self) -> None:
        soup = parse_markup("<p>one <!-- hidden note --> two</p>")
        assert inner_text(soup) == "one two"

    def test_stray_end_tag_ignored(self) -> None:
        soup = parse_markup("<div>text</span></div><p>after</p>")
        assert [c.name for c in soup.find_all(True, recursive=False)] == ["div", "p"]

    def test_serialization_escapes_text(self) -> None:
        soup = parse_markup('<div class="a"><p>x &lt; y</p></div>')
        assert str(soup) == '<div class="a"><p>x &lt; y</p></div>'


class TestMeasures:

    def test_inner_text_collapses_whitespace(self) -> None:
        root = parse_markup("<p>  one \n\n  two   three </p>")
        assert inner_text(root) == "one two three"

    def test_link_density(self) -> None:
        root = parse_markup('<div>abcdefghij<a href="/x">klmnopqrst</a></div>')
        assert link_density(root.find("div")) == pytest.approx(0.5)

    def test_fragment_links_weigh_less(self) -> None:
        root = parse_markup('<div>abcdefghij<a href="#x">klmnopqrst</a></div>')
        assert link_density(root.find("div")) == pytest.approx(0.15)

    def test_link_density_empty(self) -> None:
        root = parse_markup("<div></div>")
        assert link_density(root.find("div")) == 0.0

    def test_extract_title(self) -> None:
        root = parse_markup("<html><head><title>\n  Tide   Pools \n</title></head></html>")
        assert extract_title(root) == "Tide Pools"

    def test_extract_title_missing(self) -> None:
        assert extract_title(parse_markup("<p>no head</p>")) == ""


class TestExtractReadable:
    """End-to-end extraction."""

    def test_article_extracted(self, article_html: str) -> None:
        result = extract_readable(article_html, ARTICLE_URL)

        assert result.extraction_succeeded
        assert result.text_length >= 500
        assert "whole neighbourhood of small creatures" in result.body
        assert "Hermit crabs" in result.body
        assert "the local marine survey" in result.body

    def test_boilerplate_removed(self, article_html: str) -> None:
        result = extract_readable(article_html, ARTICLE_URL)

        assert "Related posts" not in result.body
        assert "Copyright 2024" not in result.body
        assert "Archive" not in result.body
        assert "window.analytics" not in result.body
        assert "font-family" not in result.body

    def test_hidden_nodes_removed(self, article_html: str) -> None:
        result = extract_readable(article_html, ARTICLE_URL)
        assert "Subscribe to our newsletter" not in result.body

    def test_title(self, article_html: str) -> None:
        result = extract_readable(article_html, ARTICLE_URL)
        assert result.title == "Tide Pools of the North Coast | Coastal Notes"

    def test_h1_demoted(self, article_html: str) -> None:
        result = extract_readable(article_html, ARTICLE_URL)
        assert "<h1" not in result.body
        assert "<h2>Tide Pools of the North Coast</h2>" in result.body

    def test_relative_links_absolutized(self, article_html: str) -> None:
        result = extract_readable(article_html, ARTICLE_URL)
        assert 'href="https://example.com/guides/tide-tables"' in result.body

    def test_relative_links_kept_without_url(self, article_html: str) -> None:
        result = extract_readable(article_html)
        assert 'href="/guides/tide-tables"' in result.body

    def test_base_href_respected(self) -> None:
        html = (
            '<html><head><base href="https://cdn.example.org/docs/"></head><body>'
            f'<div><p>{PARAGRAPH}</p><p>{PARAGRAPH} See <a href="page2.html">next</a>.</p>'
            f'<p>{PARAGRAPH}</p></div></body></html>'
        )
        result = extract_readable(html, "https://example.com/start")
        assert 'href="https://cdn.example.org/docs/page2.html"' in result.body

    def test_javascript_links_unwrapped(self) -> None:
        html = _page(
            f'<div><p>{PARAGRAPH}</p>'
            f'<p>{PARAGRAPH} <a href="javascript:void(0)">Show the map</a>.</p>'
            f'<p>{PARAGRAPH}</p></div>'
        )
        result = extract_readable(html, ARTICLE_URL)
        assert result.extraction_succeeded
        assert "Show the map" in result.body
        assert "javascript:" not in result.body

    def test_thin_page_fails_without_raising(self, thin_html: str) -> None:
        result = extract_readable(thin_html, ARTICLE_URL)
        assert not result.extraction_succeeded
        assert result.body == ""
        assert result.title == "Hi"

    def test_empty_document(self) -> None:
        result = extract_readable("")
        assert not result.extraction_succeeded

    def test_char_threshold_applies(self, article_html: str) -> None:
        result = extract_readable(article_html, ARTICLE_URL, char_threshold=100_000)
        assert not result.extraction_succeeded

    def test_max_elems_exceeded(self, article_html: str) -> None:
        with pytest.raises(MiseError) as exc_info:
            extract_readable(article_html, ARTICLE_URL, max_elems=5)
        assert exc_info.value.kind == ErrorKind.EXTRACTION_FAILED
        assert "Aborting parsing document" in exc_info.value.message

    def test_max_elems_zero_is_unlimited(self, article_html: str) -> None:
        assert extract_readable(article_html, ARTICLE_URL, max_elems=0).extraction_succeeded

    def test_relaxed_attempt_recovers_unlikely_container(self) -> None:
        # Only content on the page sits in a container the first pass prunes
        html = _page(
            '<div class="comments">'
            f"<p>{PARAGRAPH}</p><p>{PARAGRAPH}</p><p>{PARAGRAPH}</p><p>{PARAGRAPH}</p>"
            "</div>"
        )
        result = extract_readable(html, ARTICLE_URL)
        assert result.extraction_succeeded
        assert "Bring a notebook" in result.body

    def test_body_less_document(self) -> None:
        html = f"<div><p>{PARAGRAPH}</p><p>{PARAGRAPH}</p><p>{PARAGRAPH}</p></div>"
        result = extract_readable(html)
        assert result.extraction_succeeded
        assert PARAGRAPH in result.body

    def test_deterministic(self, article_html: str) -> None:
        first = extract_readable(article_html, ARTICLE_URL)
        second = extract_readable(article_html, ARTICLE_URL)
        assert first == second


def _entry() -> str:
    return f'<div class="entry"><p>{PARAGRAPH}</p><p>{PARAGRAPH}</p></div>'


class TestCandidateSelection:
    """How the winning block is chosen among the ranked candidates."""

    # Four equally strong entries under one plain container, plus a short
    # heading that only the container carries
    SHARED_PARENT = _page(
        "<div><h2>Chapter heading</h2>"
        + _entry() + _entry() + _entry() + _entry()
        + "</div>"
    )

    def test_near_equal_candidates_promote_shared_ancestor(self) -> None:
        result = extract_readable(self.SHARED_PARENT, nb_top_candidates=5)
        assert result.extraction_succeeded
        assert "Chapter heading" in result.body
        assert result.body.count('class="entry"') == 4

    def test_single_candidate_keeps_the_block(self) -> None:
        result = extract_readable(self.SHARED_PARENT, nb_top_candidates=1)
        assert result.extraction_succeeded
        # Entries come back as scored siblings; the container's own heading does not
        assert "Chapter heading" not in result.body
        assert result.body.count('class="entry"') == 4

    def test_sibling_with_same_class_is_merged(self) -> None:
        long_paragraph = (
            "Tide tables, moon phases, swell height, and wind direction all change "
            "what the shelf looks like at low water. "
        ) * 4
        html = _page(
            '<div class="chunk">' + f"<p>{long_paragraph}</p>" * 6 + "</div>"
            '<div class="chunk"><p>A short note on the harbour steps.</p>'
            "<p>Another short note on the slipway.</p></div>"
            '<div class="note"><p>A short note on the tide gauge.</p>'
            "<p>Another short note on the buoys.</p></div>"
        )
        result = extract_readable(html)
        assert result.extraction_succeeded
        assert "harbour steps" in result.body
        assert "tide gauge" not in result.body

    def test_link_heavy_blocks_cleaned_from_winner(self) -> None:
        html = _page(
            f"<div><p>{PARAGRAPH}</p><p>{PARAGRAPH}</p>"
            '<div><p><a href="/share/mail">Share this story by email</a></p>'
            '<p><a href="/share/print">Print a copy of this story</a></p></div>'
            f"<p>{PARAGRAPH}</p>"
            '<table><tr><td><a href="/prev">Previous low tide report</a></td>'
            '<td><a href="/next">Next low tide report</a></td></tr></table>'
            f"<p>{PARAGRAPH}</p></div>"
        )
        result = extract_readable(html)
        assert result.extraction_succeeded
        assert "Bring a notebook" in result.body
        assert "Share this story" not in result.body
        assert "Print a copy" not in result.body
        assert "low tide report" not in result.body


class TestDeepNesting:
    """Depth of the markup is not limited by the recursion limit."""

    def test_paragraph_inside_deep_wrappers(self) -> None:
        paragraph = "The shelf drains slowly, and the deepest pools stay full all day. " * 14
        depth = 400
        html = _page("<div>" * depth + f"<p>{paragraph}</p>" + "</div>" * depth)

        result = extract_readable(html, ARTICLE_URL)

        assert result.extraction_succeeded
        assert result.text_length >= 900
        assert paragraph.strip() in result.body
        # Single-div wrapper chains are collapsed in the article
        assert result.body.count("<div") <= 2
