"""
Readable Content Extractor — isolate the primary content block of a page.

Pure functions over a BeautifulSoup tree. A readability-style scoring pass:

1. Prune nodes that cannot be content (scripts, hidden nodes, nav-ish class/id)
2. Score paragraph-like nodes by text density, sharing the score with up to
   five ancestors
3. Discount each candidate by its link density, keep the top N
4. Pick the winner (possibly promoted to a better ancestor), merge related
   siblings, clean out leftover boilerplate
5. Accept only if the article carries at least char_threshold characters,
   otherwise retry with relaxed pruning; give up with
   extraction_succeeded=False (never raises for thin pages)

The article comes back as a bs4 Tag, handed as-is to the markdown converter.
Every walk here goes through bs4's iterative traversal (descendants,
find_all, get_text) or an explicit parent loop, so nesting depth is not
bounded by the interpreter's recursion limit.
"""

import math
import re
from dataclasses import dataclass
from urllib.parse import urljoin

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from config import CHAR_THRESHOLD, MAX_ELEMS_TO_PARSE, NB_TOP_CANDIDATES
from models import ErrorKind, ExtractedContent, MiseError

__all__ = [
    "parse_markup",
    "extract_readable",
    "extract_title",
    "inner_text",
    "link_density",
]


# ============================================================================
# TREE
# ============================================================================

# Name bs4 gives the BeautifulSoup object itself
DOCUMENT = "[document]"


def parse_markup(markup: str) -> BeautifulSoup:
    """Parse markup with the stdlib-backed bs4 tree builder."""
    return BeautifulSoup(markup, "html.parser")


def _is_text(node) -> bool:
    """Character data, excluding comments, doctypes and CDATA."""
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def _element_children(node: Tag) -> list[Tag]:
    return [c for c in node.children if isinstance(c, Tag)]


def _has_direct_text(node: Tag) -> bool:
    return any(_is_text(c) and c.strip() for c in node.children)


def _class_name(node: Tag) -> str:
    value = node.get("class", "")
    if isinstance(value, list):
        return " ".join(value)
    return value


def _node_id(node: Tag) -> str:
    return node.get("id", "") or ""


# ============================================================================
# TEXT MEASURES
# ============================================================================

_WHITESPACE_RUN = re.compile(r"\s{2,}")


def inner_text(node: Tag, normalize_spaces: bool = True) -> str:
    text = node.get_text().strip()
    if normalize_spaces:
        return _WHITESPACE_RUN.sub(" ", text)
    return text


def link_density(node: Tag) -> float:
    """Share of the node's text that sits inside links (fragment links count 0.3)."""
    text_length = len(inner_text(node))
    if not text_length:
        return 0.0
    link_length = 0.0
    for a in node.find_all("a"):
        coefficient = 0.3 if (a.get("href") or "").startswith("#") else 1.0
        link_length += len(inner_text(a)) * coefficient
    return link_length / text_length


def extract_title(soup: Tag) -> str:
    """Document <title>, whitespace collapsed; empty string if absent."""
    title = soup.find("title")
    if title is None:
        return ""
    return re.sub(r"\s+", " ", title.get_text()).strip()


# ============================================================================
# SCORING
# ============================================================================

FLAG_STRIP_UNLIKELYS = 0x1
FLAG_WEIGHT_CLASSES = 0x2
FLAG_CLEAN_CONDITIONALLY = 0x4

UNLIKELY_CANDIDATES = re.compile(
    r"-ad-|ai2html|banner|breadcrumbs|combx|comment|community|cover-wrap|disqus|"
    r"extra|footer|gdpr|header|legends|menu|related|remark|replies|rss|shoutbox|"
    r"sidebar|skyscraper|social|sponsor|supplemental|ad-break|agegate|pagination|"
    r"pager|popup|yom-remote",
    re.IGNORECASE,
)
OK_MAYBE_CANDIDATE = re.compile(r"and|article|body|column|content|main|shadow", re.IGNORECASE)
POSITIVE = re.compile(
    r"article|body|content|entry|hentry|h-entry|main|page|pagination|post|text|blog|story",
    re.IGNORECASE,
)
NEGATIVE = re.compile(
    r"-ad-|hidden|^hid$| hid$| hid |^hid |banner|combx|comment|com-|contact|footer|"
    r"gdpr|masthead|media|meta|outbrain|promo|related|scroll|share|shoutbox|sidebar|"
    r"skyscraper|sponsor|shopping|tags|widget",
    re.IGNORECASE,
)
SENTENCE_END = re.compile(r"\.( |$)")
HIDDEN_STYLE = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden", re.IGNORECASE)

UNLIKELY_ROLES = frozenset({
    "menu", "menubar", "complementary", "navigation", "alert", "alertdialog", "dialog",
})
TAGS_TO_SCORE = frozenset({"section", "h2", "h3", "h4", "h5", "h6", "p", "td", "pre"})
DIV_TO_P_ELEMS = ["blockquote", "dl", "div", "img", "ol", "p", "pre", "table", "ul"]
ALTER_TO_DIV_EXCEPTIONS = frozenset({"div", "article", "section", "p"})
HEADINGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
PHRASING_ELEMS = frozenset({
    "abbr", "audio", "b", "bdo", "br", "button", "cite", "code", "data", "datalist",
    "dfn", "em", "embed", "i", "img", "input", "kbd", "label", "mark", "math", "meter",
    "object", "output", "progress", "q", "ruby", "samp", "select", "small", "span",
    "strong", "sub", "sup", "textarea", "time", "var", "wbr",
})
# Phrasing only when everything inside them is
TRANSPARENT_ELEMS = frozenset({"a", "del", "ins"})

# Never content, removed before scoring
UNWANTED_TAGS = ["head", "title", "script", "style", "noscript", "template", "link", "meta"]
# Candidates at or above these are replaced by a synthetic wrapper
TOP_LEVEL_TAGS = frozenset({"body", "html", DOCUMENT})
# Removed from the finished article
ARTICLE_JUNK_TAGS = ["object", "embed", "footer", "aside", "iframe", "input",
                     "textarea", "select", "button"]

TAG_BASE_SCORES = {
    "div": 5,
    "pre": 3, "td": 3, "blockquote": 3,
    "address": -3, "ol": -3, "ul": -3, "dl": -3, "dd": -3, "dt": -3, "li": -3, "form": -3,
    "h1": -5, "h2": -5, "h3": -5, "h4": -5, "h5": -5, "h6": -5, "th": -5,
}

MIN_PARAGRAPH_LENGTH = 25
ANCESTOR_DEPTH = 5
MINIMUM_TOPCANDIDATES = 3


@dataclass
class _Candidate:
    """
    A scored node: the record the ranking works on.

    bs4 compares tags structurally, so records are keyed by id(node) and
    hold the node to keep that id stable for the attempt's lifetime.
    """
    node: Tag
    score: float

    @property
    def tag(self) -> str:
        return self.node.name

    @property
    def text_length(self) -> int:
        return len(inner_text(self.node))

    @property
    def child_count(self) -> int:
        return len(_element_children(self.node))


def _ancestors(node: Tag, max_depth: int = 0) -> list[Tag]:
    result: list[Tag] = []
    parent = node.parent
    while parent is not None and parent.name != DOCUMENT:
        result.append(parent)
        if max_depth and len(result) == max_depth:
            break
        parent = parent.parent
    return result


def _has_ancestor_tag(node: Tag, tag: str, max_depth: int = 3) -> bool:
    depth = 0
    parent = node.parent
    while parent is not None:
        if max_depth > 0 and depth > max_depth:
            return False
        if parent.name == tag:
            return True
        parent = parent.parent
        depth += 1
    return False


def _next_node(node: Tag, root: Tag, skip_children: bool = False) -> Tag | None:
    """Depth-first successor of node within root."""
    if not skip_children:
        child = node.find(True, recursive=False)
        if child is not None:
            return child
    while node is not root and node.parent is not None:
        sibling = node.find_next_sibling(True)
        if sibling is not None:
            return sibling
        node = node.parent
    return None


def _remove_and_get_next(node: Tag, root: Tag) -> Tag | None:
    following = _next_node(node, root, skip_children=True)
    node.extract()
    return following


def _is_probably_visible(node: Tag) -> bool:
    if HIDDEN_STYLE.search(node.get("style") or ""):
        return False
    if node.has_attr("hidden"):
        return False
    if node.get("aria-hidden") == "true" and "fallback-image" not in _class_name(node):
        return False
    return True


def _is_element_without_content(node: Tag) -> bool:
    if node.get_text().strip():
        return False
    return all(child.name in ("br", "hr") for child in _element_children(node))


def _has_child_block_element(node: Tag) -> bool:
    return node.find(DIV_TO_P_ELEMS) is not None


def _has_single_tag_inside(node: Tag, tag: str) -> bool:
    elements = _element_children(node)
    if len(elements) != 1 or elements[0].name != tag:
        return False
    return not _has_direct_text(node)


def _is_phrasing(node) -> bool:
    if not isinstance(node, Tag):
        return True
    if node.name in PHRASING_ELEMS:
        return True
    if node.name in TRANSPARENT_ELEMS:
        return all(
            d.name in PHRASING_ELEMS or d.name in TRANSPARENT_ELEMS
            for d in node.find_all(True)
        )
    return False


def _carries_content(node) -> bool:
    if isinstance(node, Tag):
        return node.name == "img" or bool(node.get_text().strip())
    return _is_text(node) and bool(node.strip())


def _wrap_phrasing_runs(div: Tag, new_tag) -> None:
    """Group loose inline content of a block-bearing div into <p> nodes."""
    run: list = []

    def flush() -> None:
        if any(_carries_content(n) for n in run):
            p = new_tag("p")
            run[0].insert_before(p)
            for n in run:
                p.append(n)
        run.clear()

    for child in list(div.children):
        if _is_phrasing(child):
            run.append(child)
        else:
            flush()
    flush()


def _class_weight(node: Tag, flags: int) -> int:
    if not flags & FLAG_WEIGHT_CLASSES:
        return 0
    weight = 0
    for value in (_class_name(node), _node_id(node)):
        if not value:
            continue
        if NEGATIVE.search(value):
            weight -= 25
        if POSITIVE.search(value):
            weight += 25
    return weight


class _Readability:
    """One extraction attempt over a freshly parsed document."""

    def __init__(self, soup: BeautifulSoup, flags: int, nb_top_candidates: int) -> None:
        self.soup = soup
        self.flags = flags
        self.nb_top_candidates = nb_top_candidates
        self.records: dict[int, _Candidate] = {}

    def _record(self, node: Tag) -> _Candidate | None:
        return self.records.get(id(node))

    def _initialize(self, node: Tag) -> _Candidate:
        record = _Candidate(node, TAG_BASE_SCORES.get(node.name, 0) + _class_weight(node, self.flags))
        self.records[id(node)] = record
        return record

    def _score_of(self, node: Tag) -> float:
        record = self._record(node) or self._initialize(node)
        return record.score

    # --- pruning -----------------------------------------------------------

    def _collect_scorable(self, body: Tag) -> list[Tag]:
        to_score: list[Tag] = []
        strip_unlikelys = bool(self.flags & FLAG_STRIP_UNLIKELYS)

        node: Tag | None = body
        while node is not None:
            match_string = f"{_class_name(node)} {_node_id(node)}"

            if node is not body and not _is_probably_visible(node):
                node = _remove_and_get_next(node, body)
                continue

            if node.get("aria-modal") == "true" and node.get("role") == "dialog":
                node = _remove_and_get_next(node, body)
                continue

            if strip_unlikelys and node is not body:
                if (
                    UNLIKELY_CANDIDATES.search(match_string)
                    and not OK_MAYBE_CANDIDATE.search(match_string)
                    and not _has_ancestor_tag(node, "table")
                    and not _has_ancestor_tag(node, "code")
                    and node.name not in ("body", "a")
                ):
                    node = _remove_and_get_next(node, body)
                    continue
                if node.get("role") in UNLIKELY_ROLES:
                    node = _remove_and_get_next(node, body)
                    continue

            if (
                node.name in ("div", "section", "header", *HEADINGS)
                and _is_element_without_content(node)
            ):
                node = _remove_and_get_next(node, body)
                continue

            if node.name in TAGS_TO_SCORE:
                to_score.append(node)

            if node.name == "div":
                if _has_single_tag_inside(node, "p") and link_density(node) < 0.25:
                    only_p = _element_children(node)[0]
                    node.replace_with(only_p)
                    node = only_p
                    to_score.append(node)
                elif not _has_child_block_element(node):
                    node.name = "p"
                    to_score.append(node)
                else:
                    _wrap_phrasing_runs(node, self.soup.new_tag)

            node = _next_node(node, body)

        return to_score

    # --- scoring -------------------------------------------------------------

    def _score(self, to_score: list[Tag]) -> list[_Candidate]:
        candidates: list[_Candidate] = []
        for element in to_score:
            if element.parent is None:
                continue
            text = inner_text(element)
            if len(text) < MIN_PARAGRAPH_LENGTH:
                continue
            ancestors = _ancestors(element, ANCESTOR_DEPTH)
            if not ancestors:
                continue

            score = 1 + len(text.split(",")) + min(len(text) // 100, 3)

            for level, ancestor in enumerate(ancestors):
                if ancestor.parent is None:
                    continue
                record = self._record(ancestor)
                if record is None:
                    record = self._initialize(ancestor)
                    candidates.append(record)
                divider = 1 if level == 0 else 2 if level == 1 else level * 3
                record.score += score / divider
        return candidates

    def _rank(self, candidates: list[_Candidate]) -> list[_Candidate]:
        for record in candidates:
            record.score *= 1 - link_density(record.node)
        ranked = sorted(candidates, key=lambda r: -r.score)
        return ranked[:self.nb_top_candidates]

    def _choose_top(self, body: Tag, top: list[_Candidate]) -> Tag:
        if not top or top[0].tag in TOP_LEVEL_TAGS:
            wrapper = self.soup.new_tag("div")
            for child in list(body.children):
                wrapper.append(child)
            body.append(wrapper)
            self._initialize(wrapper)
            return wrapper

        winner = top[0].node
        winner_score = top[0].score

        # Several near-equal candidates under one ancestor: prefer the ancestor
        alternatives = [
            {id(a) for a in _ancestors(c.node)} for c in top[1:]
            if winner_score and c.score / winner_score >= 0.75
        ]
        if len(alternatives) >= MINIMUM_TOPCANDIDATES:
            parent = winner.parent
            while parent is not None and parent.name not in TOP_LEVEL_TAGS:
                containing = sum(1 for ancestry in alternatives if id(parent) in ancestry)
                if containing >= MINIMUM_TOPCANDIDATES:
                    winner = parent
                    break
                parent = parent.parent

        # Climb while the parent keeps scoring comparably
        parent = winner.parent
        last_score = self._score_of(winner)
        threshold = last_score / 3
        while parent is not None and parent.name not in TOP_LEVEL_TAGS:
            record = self._record(parent)
            if record is None:
                parent = parent.parent
                continue
            if record.score < threshold:
                break
            if record.score > last_score:
                winner = parent
                break
            last_score = record.score
            parent = parent.parent

        # An only child says nothing its parent doesn't
        parent = winner.parent
        while (
            parent is not None
            and parent.name not in TOP_LEVEL_TAGS
            and len(_element_children(parent)) == 1
        ):
            winner = parent
            parent = winner.parent

        self._score_of(winner)
        return winner

    def _gather_siblings(self, winner: Tag) -> Tag:
        article = self.soup.new_tag("div")
        winner_score = self._score_of(winner)
        threshold = max(10.0, winner_score * 0.2)
        winner_class = _class_name(winner)
        parent = winner.parent
        siblings = _element_children(parent) if parent is not None else [winner]

        for sibling in siblings:
            append = sibling is winner
            if not append:
                bonus = 0.0
                if winner_class and _class_name(sibling) == winner_class:
                    bonus += winner_score * 0.2
                record = self._record(sibling)
                if record is not None and record.score + bonus >= threshold:
                    append = True
                elif sibling.name == "p":
                    density = link_density(sibling)
                    content = inner_text(sibling)
                    length = len(content)
                    if length > 80 and density < 0.25:
                        append = True
                    elif 0 < length < 80 and density == 0 and SENTENCE_END.search(content):
                        append = True
            if append:
                if sibling.name not in ALTER_TO_DIV_EXCEPTIONS:
                    sibling.name = "div"
                article.append(sibling)
        return article

    # --- cleanup -------------------------------------------------------------

    def _is_data_table(self, table: Tag) -> bool:
        if table.get("role") == "presentation":
            return False
        if table.get("summary") or table.find("caption") is not None:
            return True
        if table.find(["th", "thead", "tfoot", "colgroup"]) is not None:
            return True
        rows = len(table.find_all("tr"))
        cells = len(table.find_all("td"))
        return rows >= 10 or cells > 4

    def _inside_data_table(self, node: Tag) -> bool:
        parent = node.parent
        while parent is not None:
            if parent.name == "table" and self._is_data_table(parent):
                return True
            parent = parent.parent
        return False

    def _clean_conditionally(self, article: Tag, tag: str) -> None:
        if not self.flags & FLAG_CLEAN_CONDITIONALLY:
            return
        for node in reversed(article.find_all(tag)):
            if not self._is_attached(node, article):
                continue
            if tag == "table" and self._is_data_table(node):
                continue
            if self._inside_data_table(node) or _has_ancestor_tag(node, "code"):
                continue

            text = inner_text(node)
            content_length = len(text)
            is_list = tag in ("ul", "ol")
            if not is_list and content_length:
                list_length = sum(len(inner_text(lst)) for lst in node.find_all(["ul", "ol"]))
                is_list = list_length / content_length > 0.9

            weight = _class_weight(node, self.flags)
            if weight < 0:
                node.extract()
                continue

            if text.count(",") >= 10:
                continue

            p = len(node.find_all("p"))
            img = len(node.find_all("img"))
            li = len(node.find_all("li")) - 100
            inputs = len(node.find_all("input"))
            heading_length = sum(len(inner_text(h)) for h in node.find_all(HEADINGS))
            heading_density = heading_length / content_length if content_length else 0.0
            embeds = len(node.find_all(["object", "embed", "iframe"]))
            density = link_density(node)
            in_figure = _has_ancestor_tag(node, "figure")

            have_to_remove = (
                (img > 1 and p / img < 0.5 and not in_figure)
                or (not is_list and li > p)
                or (inputs > math.floor(p / 3))
                or (not is_list and heading_density < 0.9 and content_length < 25
                    and (img == 0 or img > 2) and not in_figure)
                or (not is_list and weight < 25 and density > 0.2)
                or (weight >= 25 and density > 0.5)
                or ((embeds == 1 and content_length < 75) or embeds > 1)
            )
            if have_to_remove:
                node.extract()

    @staticmethod
    def _is_attached(node: Tag, root: Tag) -> bool:
        parent = node.parent
        while parent is not None:
            if parent is root:
                return True
            parent = parent.parent
        return False

    def _prep_article(self, article: Tag) -> None:
        for node in article.find_all(ARTICLE_JUNK_TAGS):
            node.extract()

        if self.flags & FLAG_WEIGHT_CLASSES:
            for header in article.find_all(["h1", "h2"]):
                if _class_weight(header, self.flags) < 0:
                    header.extract()

        for tag in ("form", "fieldset", "table", "ul", "div"):
            self._clean_conditionally(article, tag)

        # The page title is rendered separately; body headings start at h2
        for h1 in article.find_all("h1"):
            h1.name = "h2"

        for p in article.find_all("p"):
            has_media = p.find(["img", "embed", "object", "iframe"]) is not None
            if not has_media and not p.get_text().strip():
                p.extract()

        # Chains of single-div wrappers carry no content of their own
        for div in article.find_all("div"):
            children = _element_children(div)
            if len(children) == 1 and children[0].name == "div" and not _has_direct_text(div):
                div.unwrap()

    def run(self, body: Tag) -> tuple[Tag, int]:
        to_score = self._collect_scorable(body)
        candidates = self._score(to_score)
        top = self._rank(candidates)
        winner = self._choose_top(body, top)
        article = self._gather_siblings(winner)
        self._prep_article(article)
        return article, len(inner_text(article))


# ============================================================================
# POST-PROCESSING
# ============================================================================

def _document_base(soup: BeautifulSoup, url: str) -> str:
    base = soup.find("base", href=True)
    if base is not None and base["href"]:
        return urljoin(url, base["href"])
    return url


def _fix_relative_uris(article: Tag, base_url: str) -> None:
    """Absolutize links and media; drop javascript: links but keep their text."""
    for a in article.find_all("a", href=True):
        href = a["href"]
        if href.lower().startswith("javascript:"):
            a.unwrap()
        elif base_url and not href.startswith("#"):
            a["href"] = urljoin(base_url, href)
    if base_url:
        for media in article.find_all(["img", "video", "audio", "source"], src=True):
            media["src"] = urljoin(base_url, media["src"])


def _find_body(soup: BeautifulSoup) -> Tag:
    body = soup.find("body")
    return body if body is not None else soup


def extract_readable(
    markup: str,
    url: str = "",
    *,
    max_elems: int = MAX_ELEMS_TO_PARSE,
    nb_top_candidates: int = NB_TOP_CANDIDATES,
    char_threshold: int = CHAR_THRESHOLD,
) -> ExtractedContent:
    """
    Isolate the primary readable content of an HTML document.

    Pure function. A page with no qualifying block is a normal outcome
    (extraction_succeeded=False), not an exception.

    Args:
        markup: Raw HTML
        url: Page URL, for resolving relative links
        max_elems: Element ceiling, 0 for unlimited
        nb_top_candidates: Candidates kept after ranking
        char_threshold: Minimum article text length to accept

    Returns:
        ExtractedContent with the article subtree (and its HTML)

    Raises:
        MiseError: EXTRACTION_FAILED when max_elems is exceeded
    """
    soup = parse_markup(markup)
    if max_elems > 0:
        count = len(soup.find_all(True))
        if count > max_elems:
            raise MiseError(
                ErrorKind.EXTRACTION_FAILED,
                f"Aborting parsing document; {count} elements found",
                details={"element_count": count},
            )

    title = extract_title(soup)
    base_url = _document_base(soup, url)

    flags = FLAG_STRIP_UNLIKELYS | FLAG_WEIGHT_CLASSES | FLAG_CLEAN_CONDITIONALLY
    relax_order = (FLAG_STRIP_UNLIKELYS, FLAG_WEIGHT_CLASSES, FLAG_CLEAN_CONDITIONALLY)

    for attempt in range(len(relax_order) + 1):
        if attempt:
            # Each attempt starts over from a clean parse
            soup = parse_markup(markup)
            flags &= ~relax_order[attempt - 1]

        for node in soup.find_all(UNWANTED_TAGS):
            node.extract()

        body = _find_body(soup)
        article, text_length = _Readability(soup, flags, nb_top_candidates).run(body)

        if text_length >= char_threshold:
            _fix_relative_uris(article, base_url)
            return ExtractedContent(
                body=str(article),
                extraction_succeeded=True,
                title=title,
                text_length=text_length,
                article=article,
            )

    return ExtractedContent(body="", extraction_succeeded=False, title=title)
