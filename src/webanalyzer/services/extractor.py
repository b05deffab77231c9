"""Title and main-content extraction from untrusted HTML."""

from __future__ import annotations

from typing import List, Protocol, Sequence

from bs4 import BeautifulSoup, Tag

from webanalyzer.models import ExtractedContent
from webanalyzer.services.text import normalize_whitespace

__all__ = [
    "BLOCK_ELEMENTS",
    "CONTENT_SELECTORS",
    "DocumentNode",
    "DocumentTree",
    "NOISE_SELECTORS",
    "SoupDocument",
    "SoupNode",
    "UNTITLED_PAGE",
    "extract_content",
    "extract_list_items",
    "extract_main_text",
    "extract_title",
    "parse_html",
    "strip_noise",
]

UNTITLED_PAGE = "Untitled Page"
NOISE_SELECTORS: Sequence[str] = ("script", "style", "nav", "footer", "header", "aside")
# Semantic containers first, the generic body last.
CONTENT_SELECTORS: Sequence[str] = ("main", "article", ".content", ".post", ".entry", "body")
# Elements whose boundaries separate words. Inline markup such as <a> or <b> does not.
BLOCK_ELEMENTS: Sequence[str] = (
    "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4",
    "h5", "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre", "section",
    "table", "td", "th", "tr", "ul",
)


class DocumentNode(Protocol):
    """A single element of a parsed document."""

    def text(self) -> str:
        ...

    def remove(self) -> None:
        ...


class DocumentTree(Protocol):
    """Query interface the extractor needs from an HTML parser."""

    def select(self, selector: str) -> List[DocumentNode]:
        ...

    def text(self) -> str:
        ...


class SoupNode:
    """:class:`DocumentNode` backed by a BeautifulSoup tag."""

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    def text(self) -> str:
        return self._tag.get_text("")

    def remove(self) -> None:
        # Descendants of an already removed element are decomposed with it.
        if not self._tag.decomposed:
            self._tag.decompose()


class SoupDocument:
    """:class:`DocumentTree` backed by BeautifulSoup with the lxml parser."""

    def __init__(self, soup: BeautifulSoup) -> None:
        self._soup = soup

    @classmethod
    def from_html(cls, html: str | bytes) -> "SoupDocument":
        soup = BeautifulSoup(html, "lxml")
        for tag in soup.find_all(list(BLOCK_ELEMENTS)):
            tag.insert(0, " ")
            tag.append(" ")
        return cls(soup)

    def select(self, selector: str) -> List[DocumentNode]:
        return [SoupNode(tag) for tag in self._soup.select(selector)]

    def text(self) -> str:
        return self._soup.get_text("")


def parse_html(html: str | bytes) -> DocumentTree:
    """Parse ``html`` into a queryable document tree."""

    return SoupDocument.from_html(html)


def _first_text(tree: DocumentTree, selector: str) -> str:
    nodes = tree.select(selector)
    return nodes[0].text().strip() if nodes else ""


def extract_title(tree: DocumentTree) -> str:
    """Return the page title, falling back to the first ``h1`` and then a placeholder."""

    return _first_text(tree, "title") or _first_text(tree, "h1") or UNTITLED_PAGE


def strip_noise(tree: DocumentTree, selectors: Sequence[str] = NOISE_SELECTORS) -> int:
    """Remove navigation, scripts and other non-content elements in place.

    Returns the number of removed elements.
    """

    removed = 0
    for node in tree.select(", ".join(selectors)):
        node.remove()
        removed += 1
    return removed


def extract_main_text(tree: DocumentTree, selectors: Sequence[str] = CONTENT_SELECTORS) -> str:
    """Return the raw text of the first content container found in ``tree``."""

    for selector in selectors:
        nodes = tree.select(selector)
        if nodes:
            return nodes[0].text()

    return tree.text()


def extract_list_items(tree: DocumentTree) -> List[str]:
    """Return the trimmed text of every list item in document order.

    Inner whitespace is kept as found, so length checks see the item as written.
    """

    items = (node.text().strip() for node in tree.select("li"))
    return [item for item in items if item]


def extract_content(html: str | bytes) -> ExtractedContent:
    """Parse ``html`` and return its title, normalized main text and list items."""

    tree = parse_html(html)
    title = extract_title(tree)
    strip_noise(tree)
    body_text = normalize_whitespace(extract_main_text(tree))
    return ExtractedContent(title=title, body_text=body_text, list_items=extract_list_items(tree))
