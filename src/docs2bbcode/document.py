"""Block model for exported rich-text documents.

The export is parsed once with BeautifulSoup and flattened into an
immutable tuple of blocks. Paragraphs and headings keep a reference to
their source element; the tree is never modified after parsing, which lets
any number of formatting passes render from it.
"""

from __future__ import annotations

import re
import warnings
from dataclasses import dataclass
from typing import Iterator, Mapping, Union

from bs4 import BeautifulSoup, NavigableString, Tag

from .styles import StyledNode

COMMENT_ID_RE = re.compile(r"^cmnt", re.IGNORECASE)
_HEADING_RE = re.compile(r"^h([1-6])$")
_CLASS_RULE_RE = re.compile(r"\.(-?[_a-zA-Z][_a-zA-Z0-9-]*)\s*\{([^}]*)\}")
_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_LENGTH_RE = re.compile(r"^(-?\d+(?:\.\d+)?|-?\.\d+)([a-z%]*)$")

_CONTAINER_TAGS = frozenset(
    {
        "html",
        "body",
        "div",
        "section",
        "article",
        "main",
        "ul",
        "ol",
        "table",
        "thead",
        "tbody",
        "tfoot",
        "tr",
        "td",
        "th",
    }
)
PARAGRAPH_TAGS = frozenset({"p", "li", "blockquote", "pre", "dd", "dt", "figcaption", "caption"})
_SKIPPED_TAGS = frozenset({"head", "style", "script", "meta", "link", "title"})
_BLOCK_CHILD_TAGS = frozenset(
    {"p", "li", "hr", "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "div", "table"}
)
_TAG_DEFAULT_STYLES: dict[str, dict[str, str]] = {
    "b": {"font-weight": "700"},
    "strong": {"font-weight": "700"},
    "i": {"font-style": "italic"},
    "em": {"font-style": "italic"},
    "u": {"text-decoration": "underline"},
    "s": {"text-decoration": "line-through"},
    "strike": {"text-decoration": "line-through"},
    "del": {"text-decoration": "line-through"},
    "sup": {"vertical-align": "super"},
    "sub": {"vertical-align": "sub"},
}


@dataclass(eq=False, slots=True)
class Paragraph:
    """A block of inline content."""

    element: Tag

    @property
    def text(self) -> str:
        return self.element.get_text()


@dataclass(eq=False, slots=True)
class Heading:
    """A heading of level 1 to 6.

    Headings compare by identity: two headings with the same text are still
    different chapters.
    """

    element: Tag
    level: int

    @property
    def id(self) -> str | None:
        value = self.element.get("id")
        return value if isinstance(value, str) else None

    @property
    def text(self) -> str:
        return self.element.get_text()


@dataclass(eq=False, slots=True)
class Rule:
    """A horizontal separator."""

    @property
    def text(self) -> str:
        return ""


Block = Union[Paragraph, Heading, Rule]


class Stylesheet:
    """Simple ``.class { ... }`` rules read from the export's ``<style>`` tags."""

    def __init__(self, rules: Mapping[str, Mapping[str, str]] | None = None) -> None:
        self._rules: dict[str, dict[str, str]] = {
            name: dict(declarations) for name, declarations in (rules or {}).items()
        }

    @classmethod
    def from_soup(cls, soup: BeautifulSoup) -> Stylesheet:
        rules: dict[str, dict[str, str]] = {}
        for style_tag in soup.find_all("style"):
            css = _COMMENT_RE.sub("", style_tag.get_text())
            for name, body in _CLASS_RULE_RE.findall(css):
                rules.setdefault(name, {}).update(parse_declarations(body))
        return cls(rules)

    def for_classes(self, classes: list[str]) -> dict[str, str]:
        merged: dict[str, str] = {}
        for name in classes:
            merged.update(self._rules.get(name, {}))
        return merged

    def __len__(self) -> int:
        return len(self._rules)


@dataclass(frozen=True, slots=True)
class Document:
    """Parsed document: the ordered blocks and the stylesheet they use."""

    blocks: tuple[Block, ...]
    stylesheet: Stylesheet

    def computed_style(self, element: Tag) -> dict[str, str]:
        """Return the element's own style; nothing is inherited from parents."""

        style = dict(_TAG_DEFAULT_STYLES.get(element.name, {}))
        classes = element.get("class") or []
        if isinstance(classes, str):
            classes = classes.split()
        style.update(self.stylesheet.for_classes(list(classes)))
        inline = element.get("style")
        if isinstance(inline, str):
            style.update(parse_declarations(inline))
        return style

    def styled(self, element: Tag) -> StyledNode:
        return StyledNode(tag=element, style=self.computed_style(element))

    def is_hidden(self, element: Tag) -> bool:
        display = self.computed_style(element).get("display", "")
        return display.strip().lower() == "none"

    def has_content(self, element: Tag) -> bool:
        """Whether the element renders to anything: text, an image or a rule."""

        if is_comment_anchor(element):
            return False
        if self._renders_alone(element):
            return True
        for node in element.descendants:
            if isinstance(node, Tag):
                if self._renders_alone(node):
                    return True
                continue
            if type(node) is NavigableString and node.strip():
                if not any(is_comment_anchor(parent) for parent in _parents_within(node, element)):
                    return True
        return False

    def _renders_alone(self, element: Tag) -> bool:
        if element.name == "img":
            return bool(element.get("src"))
        if element.name == "hr":
            return not self.is_hidden(element)
        return False

    def paragraphs(self) -> Iterator[Paragraph]:
        for block in self.blocks:
            if isinstance(block, Paragraph):
                yield block


def parse_declarations(css: str) -> dict[str, str]:
    """Parse ``prop: value; ...`` into a dict with lower-case property names."""

    declarations: dict[str, str] = {}
    for part in css.split(";"):
        if ":" not in part:
            continue
        name, value = part.split(":", 1)
        name = name.strip().lower()
        value = value.strip()
        if name and value:
            declarations[name] = value
    return declarations


def parse_length(value: str | None) -> float | None:
    """Return the numeric part of a CSS length such as ``36pt``."""

    if not value:
        return None
    match = _LENGTH_RE.match(value.strip().lower())
    if not match:
        return None
    return float(match.group(1))


def is_comment_anchor(element: Tag) -> bool:
    if element.name != "a":
        return False
    anchor_id = element.get("id")
    return isinstance(anchor_id, str) and bool(COMMENT_ID_RE.match(anchor_id))


def parse_document(html: str) -> Document:
    """Parse an exported HTML string into a ``Document``."""

    soup = BeautifulSoup(html or "", "html.parser")
    stylesheet = Stylesheet.from_soup(soup)
    document = Document(blocks=(), stylesheet=stylesheet)
    blocks = tuple(_collect_blocks(soup, soup, document))
    return Document(blocks=blocks, stylesheet=stylesheet)


def _collect_blocks(
    container: Tag, soup: BeautifulSoup, document: Document
) -> Iterator[Block]:
    for child in list(container.children):
        if isinstance(child, Tag):
            yield from _blocks_for_element(child, soup, document)
        elif type(child) is NavigableString and child.strip():
            wrapper = soup.new_tag("p")
            child.wrap(wrapper)
            yield Paragraph(wrapper)


def _blocks_for_element(
    element: Tag, soup: BeautifulSoup, document: Document
) -> Iterator[Block]:
    name = element.name
    if name in _SKIPPED_TAGS:
        return

    heading_match = _HEADING_RE.match(name)
    if heading_match:
        yield Heading(element, int(heading_match.group(1)))
        return

    if name == "hr":
        if not document.is_hidden(element):
            yield Rule()
        return

    if name in _CONTAINER_TAGS or _wraps_blocks(element):
        if name == "div" and _is_comment_section(element):
            return
        yield from _collect_blocks(element, soup, document)
        return

    _warn_on_missing_image_sources(element)
    yield Paragraph(element)


def _wraps_blocks(element: Tag) -> bool:
    if element.name in PARAGRAPH_TAGS:
        return False
    return element.find(_BLOCK_CHILD_TAGS, recursive=False) is not None


def _is_comment_section(element: Tag) -> bool:
    # Replies follow the first paragraph without an anchor of their own.
    first = element.find("p", recursive=False)
    if first is None:
        return False
    anchor = first.find("a")
    if anchor is None or not is_comment_anchor(anchor):
        return False
    href = anchor.get("href")
    return isinstance(href, str) and href.startswith("#cmnt_ref")


def _warn_on_missing_image_sources(element: Tag) -> None:
    images = [element] if element.name == "img" else element.find_all("img")
    missing = [image for image in images if not image.get("src")]
    if missing:
        warnings.warn(f"Skipped {len(missing)} image(s) without a source.", stacklevel=2)


def _parents_within(node: NavigableString, root: Tag) -> Iterator[Tag]:
    parent = node.parent
    while parent is not None and parent is not root:
        yield parent
        parent = parent.parent
