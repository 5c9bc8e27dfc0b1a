"""Tests for building the document tree from markdown-it-py tokens."""

from __future__ import annotations

from smartwrap.editor.syntax.markdown import detect_frontmatter_lines, parse_document
from smartwrap.formatting.collector import collect
from smartwrap.formatting.locator import compute_indent
from smartwrap.formatting.tree import DocumentTree, Node, NodeKind


def _only_paragraph(tree: DocumentTree) -> Node:
    paragraphs = list(tree.iter_kind(NodeKind.PARAGRAPH))
    assert len(paragraphs) == 1
    return paragraphs[0]


def _children(tree: DocumentTree, node: Node) -> list[tuple[NodeKind, str]]:
    return [(child.kind, tree.raw(child)) for child in tree.children_of(node)]


def test_empty_text_has_no_tree():
    assert parse_document("") is None


def test_paragraph_offsets_cover_its_lines():
    tree = parse_document("Hello *world*\n\nSecond paragraph\n")

    paragraphs = list(tree.iter_kind(NodeKind.PARAGRAPH))

    assert [tree.raw(node) for node in paragraphs] == ["Hello *world*\n", "Second paragraph\n"]
    assert all(tree.parent_of(node) == tree.root for node in paragraphs)


def test_emphasis_becomes_delimited_span():
    tree = parse_document("Hello *world* and **more**\n")
    paragraph = _only_paragraph(tree)

    children = tree.children_of(paragraph)

    assert [child.kind for child in children] == [
        NodeKind.TEXT,
        NodeKind.DELIMITED,
        NodeKind.TEXT,
        NodeKind.DELIMITED,
    ]
    emphasis, strong = children[1], children[3]
    assert (emphasis.opening_marker, emphasis.closing_marker, tree.raw(emphasis)) == ("*", "*", "*world*")
    assert (strong.opening_marker, tree.raw(strong)) == ("**", "**more**")
    assert _children(tree, emphasis) == [(NodeKind.TEXT, "world")]


def test_strikethrough_is_delimited():
    tree = parse_document("a ~~gone~~ b\n")

    kinds = [child.kind for child in tree.children_of(_only_paragraph(tree))]

    assert NodeKind.DELIMITED in kinds
    assert collect(tree, _only_paragraph(tree)) == "a ~~gone~~ b"


def test_hard_breaks_record_their_spelling():
    tree = parse_document("one\\\ntwo  \nthree\n")
    paragraph = _only_paragraph(tree)

    breaks = [child for child in tree.children_of(paragraph) if child.kind is NodeKind.HARD_BREAK]

    assert [(tree.raw(node), node.backslash) for node in breaks] == [("\\\n", True), ("  \n", False)]


def test_soft_break_is_the_newline():
    tree = parse_document("one\ntwo\n")

    assert _children(tree, _only_paragraph(tree)) == [
        (NodeKind.TEXT, "one"),
        (NodeKind.SOFT_BREAK, "\n"),
        (NodeKind.TEXT, "two"),
    ]


def test_code_span_wraps_its_content_in_backtick_markers():
    tree = parse_document("use ``a ` b`` here\n")
    paragraph = _only_paragraph(tree)

    span = tree.children_of(paragraph)[1]

    assert span.kind is NodeKind.DELIMITED
    assert (span.opening_marker, span.closing_marker) == ("``", "``")
    assert _children(tree, span) == [(NodeKind.TEXT, "a ` b")]


def test_links_and_images_are_verbatim():
    source = 'see [a link](http://x.y "t t") and ![alt text](img.png) or <http://a.b> now\n'
    tree = parse_document(source)

    others = [tree.raw(child) for child in tree.children_of(_only_paragraph(tree)) if child.kind is NodeKind.OTHER]

    assert others == ['[a link](http://x.y "t t")', "![alt text](img.png)", "<http://a.b>"]


def test_reference_links_include_their_label():
    tree = parse_document("[full text][ref] and [ref][] and [ref]\n\n[ref]: http://example.com\n")
    paragraph = tree.node(tree.root.children[0])

    others = [tree.raw(child) for child in tree.children_of(paragraph) if child.kind is NodeKind.OTHER]

    assert others == ["[full text][ref]", "[ref][]", "[ref]"]


def test_inline_html_is_verbatim():
    tree = parse_document('a <span class="x">b</span> c\n')

    others = [tree.raw(child) for child in tree.children_of(_only_paragraph(tree)) if child.kind is NodeKind.OTHER]

    assert others == ['<span class="x">', "</span>"]


def test_escapes_keep_their_source_spelling():
    tree = parse_document("a \\*b\\* &amp; c\n")
    paragraph = _only_paragraph(tree)

    assert all(child.kind is NodeKind.TEXT for child in tree.children_of(paragraph))
    assert collect(tree, paragraph) == "a \\*b\\* &amp; c"


def test_list_item_paragraph_starts_after_marker():
    tree = parse_document("- item text\n- other\n")
    paragraph = next(tree.iter_kind(NodeKind.PARAGRAPH))

    item = tree.parent_of(paragraph)
    assert item.kind is NodeKind.LIST_ITEM
    assert tree.parent_of(item).kind is NodeKind.LIST
    assert paragraph.start == 2
    assert compute_indent(tree, paragraph) == 2


def test_block_constructs_are_opaque_blocks():
    tree = parse_document("# Heading\n\n```\ncode\n```\n\n> quoted\n")

    kinds = [tree.node(index).kind for index in tree.root.children]

    assert kinds == [NodeKind.BLOCK, NodeKind.BLOCK, NodeKind.BLOCK_QUOTE]
    quote = tree.node(tree.root.children[2])
    assert [child.kind for child in tree.children_of(quote)] == [NodeKind.PARAGRAPH]


def test_frontmatter_is_left_out_of_the_tree():
    text = "---\ntitle: x\n---\n\nPara text\n"
    tree = parse_document(text)

    assert tree.source == text
    assert tree.raw(_only_paragraph(tree)) == "Para text\n"


def test_detect_frontmatter_lines():
    assert detect_frontmatter_lines("---\na: 1\n---\nbody") == 3
    assert detect_frontmatter_lines("+++\na = 1\n+++\n") == 3
    assert detect_frontmatter_lines("---\nnever closed\n") == 0
    assert detect_frontmatter_lines("plain text") == 0
