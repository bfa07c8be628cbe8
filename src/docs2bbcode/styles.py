"""Style rules that map computed inline CSS to BBCode wraps.

Each rule pairs a test with the markup it emits. A rule either names a
plain ``tag`` (``[b]...[/b]``) or supplies a ``prefix``/``postfix`` pair
for parameterised markup (``[color=#ff0000]...[/color]``). The test
receives a ``StyledNode`` and returns a falsy value when the rule does not
apply; any truthy value is handed to ``prefix``/``postfix``.

Rule order matters: active rules wrap the content in list order, so the
first rule ends up outermost.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping
from urllib.parse import unquote, urlsplit

from bs4 import Tag

DEFAULT_POINT_SIZE = 12.0
_IMPLICIT_DEFAULT_SIZES = (11.0, 12.0)
_RGB_RE = re.compile(r"^rgb\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)$", re.IGNORECASE)
_HEX_RE = re.compile(r"^#([0-9a-f]{3}|[0-9a-f]{6})$", re.IGNORECASE)
_PT_RE = re.compile(r"^(\d+(?:\.\d+)?|\.\d+)pt$", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class StyledNode:
    """An inline element together with its computed style."""

    tag: Tag
    style: Mapping[str, str]

    @property
    def name(self) -> str:
        return self.tag.name

    def get(self, attr: str) -> Any:
        return self.tag.get(attr)


@dataclass(frozen=True, slots=True)
class StyleRule:
    """Configuration for a single test-and-wrap rule."""

    test: Callable[[StyledNode], Any]
    tag: str | None = None
    prefix: Callable[[Any], str] | None = None
    postfix: Callable[[Any], str] | None = None

    def __post_init__(self) -> None:
        if self.tag is None and (self.prefix is None or self.postfix is None):
            raise ValueError("A style rule needs either a tag or a prefix/postfix pair.")

    def wrap(self, value: Any, content: str) -> str:
        """Wrap ``content`` using the value returned by ``test``."""

        if self.tag is None and self.prefix is not None and self.postfix is not None:
            return f"{self.prefix(value)}{content}{self.postfix(value)}"
        return f"[{self.tag}]{content}[/{self.tag}]"


def color_to_hex(color: str | None) -> str | None:
    """Normalise a CSS color to ``#rrggbb``.

    Black is the default text color, so it is reported as no color at all.
    Anything that cannot be parsed resolves to ``None`` too.
    """

    if not color or not isinstance(color, str):
        return None
    value = color.strip()

    match = _RGB_RE.match(value)
    if match:
        channels = [min(int(part), 255) for part in match.groups()]
        hex_color = "#" + "".join(f"{channel:02x}" for channel in channels)
    else:
        match = _HEX_RE.match(value)
        if not match:
            return None
        digits = match.group(1).lower()
        if len(digits) == 3:
            digits = "".join(digit * 2 for digit in digits)
        hex_color = "#" + digits

    return None if hex_color == "#000000" else hex_color


def parse_point_size(size: str | None) -> float | None:
    """Return the numeric value of a ``<n>pt`` font size, if it is one."""

    if not size or not isinstance(size, str):
        return None
    match = _PT_RE.match(size.strip())
    if not match:
        return None
    return float(match.group(1))


def pt_to_em(size: str | None, base: float | None = None) -> str | None:
    """Convert a point size to an em size relative to ``base``.

    Without a base the document default of 11pt/12pt is left alone and the
    conversion is made against 12pt. A result of exactly ``1em`` means no
    explicit size and is suppressed.
    """

    points = parse_point_size(size)
    if points is None:
        return None
    if not base and points in _IMPLICIT_DEFAULT_SIZES:
        return None

    ratio = points / (base or DEFAULT_POINT_SIZE)
    em = f"{ratio:.3f}".rstrip("0").rstrip(".") + "em"
    if em == "1em":
        return None
    return em


def resolve_link_target(href: str) -> str:
    """Strip a referrer redirect wrapper (``...?q=<target>``) from a link."""

    # A literal "+" in the target stays as is; only percent escapes are decoded.
    for pair in urlsplit(href).query.split("&"):
        name, _, value = pair.partition("=")
        if name == "q" and value:
            return unquote(value)
    return href


def _text_decorations(node: StyledNode) -> list[str]:
    return node.style.get("text-decoration", "").lower().split()


def _is_bold(node: StyledNode) -> bool:
    weight = node.style.get("font-weight", "").strip().lower()
    return weight in ("700", "bold")


def _size_test(base_scale: float | None) -> Callable[[StyledNode], str | None]:
    def _test(node: StyledNode) -> str | None:
        if node.name != "span":
            return None
        size = node.style.get("font-size")
        if base_scale is not None and not size:
            size = f"{DEFAULT_POINT_SIZE:g}pt"
        return pt_to_em(size, base_scale)

    return _test


def build_style_rules(base_scale: float | None = None) -> list[StyleRule]:
    """Return the default rule table.

    ``base_scale`` is the point size treated as ``1em``; pass ``None`` to
    measure sizes against the fixed 12pt default instead.
    """

    return [
        StyleRule(test=_is_bold, tag="b"),
        StyleRule(
            test=lambda node: node.style.get("font-style", "").strip().lower() == "italic",
            tag="i",
        ),
        StyleRule(test=lambda node: "underline" in _text_decorations(node), tag="u"),
        StyleRule(test=lambda node: "line-through" in _text_decorations(node), tag="s"),
        StyleRule(
            test=lambda node: color_to_hex(node.style.get("color")),
            prefix=lambda value: f"[color={value}]",
            postfix=lambda value: "[/color]",
        ),
        StyleRule(
            test=_size_test(base_scale),
            prefix=lambda value: f"[size={value}]",
            postfix=lambda value: "[/size]",
        ),
    ]


def vertical_align_tag(style: Mapping[str, str]) -> str | None:
    """Map ``vertical-align`` to ``sup``/``sub``."""

    value = style.get("vertical-align", "").strip().lower()
    if value == "super":
        return "sup"
    if value == "sub":
        return "sub"
    return None


def block_align_tag(style: Mapping[str, str]) -> str | None:
    """Map a block's ``text-align`` to ``center``/``right``."""

    value = style.get("text-align", "").strip().lower()
    if value in ("center", "right"):
        return value
    return None
