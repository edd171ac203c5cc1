"""Unit tests for core/extract/anchors.py"""

from mdcite.core.models import BlockAnchor, HeaderAnchor


def test_header_anchor_dual_ids(parse):
    """A heading yields id = raw text and url_encoded_id = slug."""
    out = parse("# Getting Started\n")
    anchor = out.anchors[0]
    assert isinstance(anchor, HeaderAnchor)
    assert anchor.id == "Getting Started"
    assert anchor.url_encoded_id == "getting-started"
    assert anchor.raw_text == "Getting Started"
    assert (anchor.line, anchor.column) == (1, 1)


def test_header_anchor_explicit_id(parse):
    """An explicit {#id} suffix sets both ids; raw_text keeps the visible title."""
    anchor = parse("## Setup Guide {#install}\n").anchors[0]
    assert anchor.id == "install"
    assert anchor.url_encoded_id == "install"
    assert anchor.raw_text == "Setup Guide"


def test_block_anchor_caret(parse):
    """A trailing ^id defines a block anchor with no raw text."""
    out = parse("Some paragraph text. ^para-1\n")
    anchor = out.anchors[0]
    assert isinstance(anchor, BlockAnchor)
    assert anchor.id == "para-1"
    assert anchor.raw_text is None
    assert anchor.column == 22


def test_block_anchor_emphasis(parse):
    """==**Text**== defines a block anchor whose id is the inner text."""
    out = parse("==**Component**== handles requests.\n")
    assert [(a.anchor_type, a.id) for a in out.anchors] == [("block", "Component")]


def test_caret_inside_word_not_anchor(parse):
    """A caret glued to a word (x^2) does not define an anchor."""
    assert parse("The value x^2\n").anchors == ()


def test_anchors_header_then_block_order(parse):
    """Header anchors come first in document order, then block anchors."""
    out = parse("Intro line ^first\n\n# Heading\n\nTail ^second\n")
    assert [a.id for a in out.anchors] == ["Heading", "first", "second"]


def test_anchors_in_code_ignored(parse):
    """Block markers inside fenced code are not anchors."""
    assert parse("```\nline ^nope\n```\n").anchors == ()
