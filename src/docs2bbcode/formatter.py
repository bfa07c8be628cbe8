"""Convert an exported rich-text document into BBCode.

Processing happens in a fixed order: an optional heading selection narrows
the document to one chapter, the spacing pass decides how many newlines
follow each block, the style pass renders each block's inline markup, and
``format`` joins the result into a single string.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Sequence

from bs4 import NavigableString, Tag

from .document import (
    PARAGRAPH_TAGS,
    Block,
    Heading,
    Paragraph,
    Rule,
    is_comment_anchor,
    parse_document,
    parse_length,
)
from .styles import (
    DEFAULT_POINT_SIZE,
    StyleRule,
    block_align_tag,
    build_style_rules,
    parse_point_size,
    resolve_link_target,
    vertical_align_tag,
)

INDENT = "\t"


class FormatterError(ValueError):
    """Raised when the formatter is used against its contract."""


class InvalidHeadingError(FormatterError):
    def __init__(self) -> None:
        super().__init__("The heading to import must be part of the document.")


class AlreadySelectedError(FormatterError):
    def __init__(self) -> None:
        super().__init__("There is already a heading selected.")


class IndentationMode(str, Enum):
    AS_IS = "as-is"
    INDENT = "indent"
    NONE = "none"


class SpacingMode(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"


@dataclass(slots=True)
class FormatterOptions:
    """Settings consulted by the spacing and style passes."""

    indentation: IndentationMode = IndentationMode.AS_IS
    spacing: SpacingMode = SpacingMode.DOUBLE
    custom_captions: bool = False
    size_auto_scale: bool = False


@dataclass(slots=True)
class SpacedBlock:
    """A block with the whitespace the spacing pass assigned to it."""

    block: Block
    trailing: str
    indent: str = ""
    caption: bool = False


class _CaptionState(Enum):
    NONE = "none"
    SAW_CAPTION = "saw-caption"
    SAW_SUBCAPTION = "saw-subcaption"


class Formatter:
    """Turns one exported HTML document into BBCode."""

    def __init__(
        self,
        html: str,
        *,
        options: FormatterOptions | None = None,
        style_rules: Sequence[StyleRule] | None = None,
    ) -> None:
        self._document = parse_document(html)
        self._start = 0
        self._stop = len(self._document.blocks)
        self._selected: Heading | None = None
        self.options = options if options is not None else FormatterOptions()
        self.style_rules = list(style_rules) if style_rules is not None else None

    @property
    def blocks(self) -> tuple[Block, ...]:
        """The blocks that will be formatted."""

        return self._document.blocks[self._start : self._stop]

    def get_headings(self) -> Iterator[Heading]:
        """Yield the headings of the active blocks in document order."""

        for block in self.blocks:
            if isinstance(block, Heading):
                yield block

    def get_heading_with_name(self, name: str) -> Heading | None:
        """Return the first heading whose text is exactly ``name``."""

        for heading in self.get_headings():
            if heading.text == name:
                return heading
        return None

    def get_selected_heading(self) -> Heading | None:
        return self._selected

    def set_selected_heading(self, heading: Heading | None) -> None:
        """Restrict formatting to the section below ``heading``.

        The section ends at the next heading of the same or a higher level;
        deeper headings stay part of it. ``None`` keeps the whole document.
        """

        if heading is None:
            return
        if self._selected is not None:
            raise AlreadySelectedError()

        blocks = self._document.blocks
        index = next(
            (i for i in range(self._start, self._stop) if blocks[i] is heading),
            None,
        )
        if index is None:
            raise InvalidHeadingError()

        stop = next(
            (
                i
                for i in range(index + 1, self._stop)
                if isinstance(blocks[i], Heading) and blocks[i].level <= heading.level
            ),
            self._stop,
        )
        self._start, self._stop = index + 1, stop
        self._selected = heading

    def find_base_scale(self) -> float:
        """Return the point size that covers the most text in the document.

        Runs without a size count as the 12pt default. A tie for first place
        also resolves to 12pt.
        """

        counts: Counter[float] = Counter()
        for paragraph in self._document.paragraphs():
            for span in paragraph.element.find_all("span"):
                length = sum(
                    len(child) for child in span.children if type(child) is NavigableString
                )
                if not length:
                    continue
                size = parse_point_size(self._document.computed_style(span).get("font-size"))
                counts[size if size is not None else DEFAULT_POINT_SIZE] += length

        ranked = counts.most_common(2)
        if not ranked:
            return DEFAULT_POINT_SIZE
        if len(ranked) > 1 and ranked[0][1] == ranked[1][1]:
            return DEFAULT_POINT_SIZE
        return ranked[0][0]

    def format(self) -> str:
        """Run both passes and return the BBCode for the active blocks."""

        spaced = self._space_paragraphs()
        rules = self._current_style_rules()
        parts = [
            entry.indent + self._style_block(entry.block, rules) + entry.trailing
            for entry in spaced
        ]
        return "".join(parts).rstrip("\n")

    def _space_paragraphs(self) -> list[SpacedBlock]:
        standard = "\n\n" if self.options.spacing == SpacingMode.DOUBLE else "\n"
        custom_captions = self.options.custom_captions

        spaced: list[SpacedBlock] = []
        pending_empty = 0
        state = _CaptionState.NONE

        for block in self.blocks:
            if self._is_empty(block):
                if not spaced:
                    continue
                pending_empty += 1
                if state is _CaptionState.SAW_SUBCAPTION:
                    caption = spaced[-2]
                    caption.trailing = "\n"
                    caption.caption = True
                state = _CaptionState.NONE
                continue

            candidate = not spaced or pending_empty > 0
            if pending_empty:
                spaced[-1].trailing = "\n" * max(len(standard), pending_empty + 1)
                pending_empty = 0

            if not custom_captions or not isinstance(block, Paragraph):
                state = _CaptionState.NONE
            elif candidate:
                state = _CaptionState.SAW_CAPTION
            elif state is _CaptionState.SAW_CAPTION:
                state = _CaptionState.SAW_SUBCAPTION
            else:
                state = _CaptionState.NONE

            spaced.append(SpacedBlock(block=block, trailing=standard))

        if pending_empty:
            spaced[-1].trailing = "\n" * max(len(standard), pending_empty + 1)

        for entry in spaced:
            entry.indent = self._indent_for(entry)
        return spaced

    def _indent_for(self, entry: SpacedBlock) -> str:
        mode = self.options.indentation
        block = entry.block
        if mode == IndentationMode.NONE or not isinstance(block, Paragraph):
            return ""

        style = self._document.computed_style(block.element)
        if block_align_tag(style):
            return ""
        if mode == IndentationMode.INDENT:
            return "" if entry.caption else INDENT

        indent = parse_length(style.get("text-indent"))
        return INDENT if indent is not None and indent > 0 else ""

    def _is_empty(self, block: Block) -> bool:
        if isinstance(block, Rule):
            return False
        return not self._document.has_content(block.element)

    def _style_paragraphs(self) -> list[str]:
        rules = self._current_style_rules()
        return [self._style_block(block, rules) for block in self.blocks]

    def _current_style_rules(self) -> list[StyleRule]:
        if self.style_rules is not None:
            return list(self.style_rules)
        base_scale = self.find_base_scale() if self.options.size_auto_scale else None
        return build_style_rules(base_scale)

    def _style_block(self, block: Block, rules: Sequence[StyleRule]) -> str:
        if isinstance(block, Rule):
            return "[hr]"

        element = block.element
        if isinstance(block, Paragraph) and element.name not in PARAGRAPH_TAGS:
            return self._render_inline(element, rules)

        text = self._render_children(element, rules)
        align = block_align_tag(self._document.computed_style(element))
        if align and text:
            text = f"[{align}]{text}[/{align}]"
        return text

    def _render_children(self, element: Tag, rules: Sequence[StyleRule]) -> str:
        return "".join(self._render_inline(child, rules) for child in element.children)

    def _render_inline(self, node: object, rules: Sequence[StyleRule]) -> str:
        if type(node) is NavigableString:
            return str(node)
        if not isinstance(node, Tag):
            return ""

        name = node.name
        if name in ("script", "style"):
            return ""
        if name == "br":
            return "\n"
        if name == "hr":
            return "" if self._document.is_hidden(node) else "[hr]"
        if name == "img":
            src = node.get("src")
            return f"[img]{src}[/img]" if isinstance(src, str) and src else ""
        if is_comment_anchor(node):
            return ""

        content = self._render_children(node, rules)
        if not content:
            return ""

        styled = self._document.styled(node)
        vertical = vertical_align_tag(styled.style)
        if vertical:
            content = f"[{vertical}]{content}[/{vertical}]"
        for rule in reversed(rules):
            value = rule.test(styled)
            if value:
                content = rule.wrap(value, content)

        href = node.get("href") if name == "a" else None
        if isinstance(href, str) and href:
            content = f"[url={resolve_link_target(href)}]{content}[/url]"
        return content
