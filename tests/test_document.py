from __future__ import annotations

import warnings

from docs2bbcode.document import (
    Heading,
    Paragraph,
    Rule,
    parse_declarations,
    parse_document,
    parse_length,
)


_GOOGLE_EXPORT = """
<html>
  <head>
    <meta content="text/html; charset=UTF-8" http-equiv="content-type">
    <style type="text/css">
      /* export styles */
      .c1{color:#000000;font-weight:400;font-size:11pt;font-family:"Arial"}
      .c2{font-weight:700}
      .c3{text-indent:36pt;text-align:justify}
      .title{font-size:26pt}
    </style>
  </head>
  <body class="doc-content">
    <p class="c3"><span class="c1">Opening.</span></p>
    <h1 class="c4" id="h.abc"><span>Chapter One</span></h1>
    <p class="c3"><span class="c1 c2">Bold.</span><sup><a href="#cmnt1" id="cmnt_ref1">[a]</a></sup></p>
    <hr style="page-break-before:always;display:none;">
    <h2 id="h.def"><span>Scene</span></h2>
    <hr>
    <div><p><a href="#cmnt_ref1" id="cmnt1">[a]</a><span>Reviewer note</span></p></div>
  </body>
</html>
"""


def test_parse_document_builds_blocks() -> None:
    document = parse_document(_GOOGLE_EXPORT)

    kinds = [type(block) for block in document.blocks]

    assert kinds == [Paragraph, Heading, Paragraph, Heading, Rule]
    assert document.blocks[1].text == "Chapter One"
    assert document.blocks[1].id == "h.abc"
    assert document.blocks[1].level == 1
    assert document.blocks[3].level == 2


def test_parse_document_drops_comment_section() -> None:
    document = parse_document(_GOOGLE_EXPORT)

    assert all("Reviewer note" not in block.text for block in document.blocks)


def test_computed_style_merges_classes_and_inline_style() -> None:
    document = parse_document(
        '<style>.c1{font-weight:700;color:#111111}</style>'
        '<p><span class="c1" style="color: #222222">x</span></p>'
    )
    span = document.blocks[0].element.span

    style = document.computed_style(span)

    assert style["font-weight"] == "700"
    assert style["color"] == "#222222"


def test_computed_style_applies_tag_defaults() -> None:
    document = parse_document("<p><strong>a</strong><em>b</em><del>c</del><sup>d</sup></p>")
    paragraph = document.blocks[0].element

    assert document.computed_style(paragraph.strong)["font-weight"] == "700"
    assert document.computed_style(paragraph.em)["font-style"] == "italic"
    assert document.computed_style(paragraph.find("del"))["text-decoration"] == "line-through"
    assert document.computed_style(paragraph.sup)["vertical-align"] == "super"


def test_computed_style_does_not_inherit() -> None:
    document = parse_document('<p style="font-weight: 700"><span>x</span></p>')

    assert "font-weight" not in document.computed_style(document.blocks[0].element.span)


def test_stylesheet_reads_export_classes() -> None:
    document = parse_document(_GOOGLE_EXPORT)

    assert len(document.stylesheet) == 4
    assert document.stylesheet.for_classes(["c1", "c2"])["font-weight"] == "700"


def test_parse_document_flattens_containers() -> None:
    document = parse_document(
        "<div><ul><li>One</li><li>Two</li></ul>"
        "<table><tr><td><p>Cell</p></td></tr></table></div>"
    )

    assert [block.text for block in document.blocks] == ["One", "Two", "Cell"]


def test_parse_document_wraps_stray_text() -> None:
    document = parse_document("Loose text<p>Paragraph</p>")

    assert [block.text for block in document.blocks] == ["Loose text", "Paragraph"]
    assert all(isinstance(block, Paragraph) for block in document.blocks)


def test_parse_document_warns_on_image_without_source() -> None:
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        parse_document('<p><img alt="missing"></p>')

    assert [str(record.message) for record in caught] == [
        "Skipped 1 image(s) without a source."
    ]


def test_has_content_ignores_comment_anchors() -> None:
    document = parse_document(
        '<p><a id="cmnt_ref2" href="#cmnt2">[b]</a></p><p><img src="x.png"></p><p>\xa0</p>'
    )

    assert [document.has_content(block.element) for block in document.blocks] == [
        False,
        True,
        False,
    ]


def test_has_content_ignores_hidden_rules_and_sourceless_images() -> None:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        document = parse_document(
            '<p><hr style="page-break-before:always;display:none;"></p>'
            '<p><img alt="missing"></p>'
            "<p><hr></p>"
        )

    assert [document.has_content(block.element) for block in document.blocks] == [
        False,
        False,
        True,
    ]


def test_parse_document_unwraps_pasted_fragment() -> None:
    document = parse_document(
        '<meta charset="utf-8"><b style="font-weight:normal;" id="docs-internal-guid-1">'
        '<p dir="ltr"><span>One.</span></p><p dir="ltr"><span>Two.</span></p></b>'
    )

    assert [block.text for block in document.blocks] == ["One.", "Two."]


def test_parse_document_keeps_wrapper_around_comment_section() -> None:
    document = parse_document(
        '<div><p><span>Body text.</span><sup><a href="#cmnt1" id="cmnt_ref1">[a]</a></sup></p>'
        '<div><p><a href="#cmnt_ref1" id="cmnt1">[a]</a><span>A comment</span></p>'
        "<p><span>A reply</span></p></div></div>"
    )

    assert [block.text for block in document.blocks] == ["Body text.[a]"]


def test_parse_declarations() -> None:
    assert parse_declarations("Color: red; font-size:12pt;;bogus; margin:") == {
        "color": "red",
        "font-size": "12pt",
    }


def test_parse_length() -> None:
    assert parse_length("36pt") == 36.0
    assert parse_length("0") == 0.0
    assert parse_length("-.5em") == -0.5
    assert parse_length("auto") is None
    assert parse_length(None) is None
