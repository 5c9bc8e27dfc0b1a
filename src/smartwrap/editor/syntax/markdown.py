"""Markdown parsing into the formatter's document tree.

``markdown-it-py`` only records line maps for block tokens, so inline tokens
are aligned back onto the paragraph source with a forward-moving cursor. The
``text_join`` core rule is disabled to keep escapes and entities as separate
``text_special`` tokens whose markup is their literal source spelling.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from markdown_it import MarkdownIt
from markdown_it.common.utils import normalizeReference
from markdown_it.token import Token

from ...formatting.tree import DocumentTree, Node, NodeKind

__all__ = ["parse_document", "detect_frontmatter_lines", "build_parser"]

LOGGER = logging.getLogger(__name__)

_BLOCK_KINDS: Mapping[str, NodeKind] = {
    "paragraph_open": NodeKind.PARAGRAPH,
    "bullet_list_open": NodeKind.LIST,
    "ordered_list_open": NodeKind.LIST,
    "list_item_open": NodeKind.LIST_ITEM,
    "blockquote_open": NodeKind.BLOCK_QUOTE,
}
_DELIMITED_OPEN = frozenset({"em_open", "strong_open", "s_open"})
_DELIMITED_CLOSE = frozenset({"em_close", "strong_close", "s_close"})
_FRONTMATTER_FENCES = {"---", "+++"}

_PARSER: Optional[MarkdownIt] = None


class _AlignmentError(ValueError):
    """Inline tokens could not be mapped back onto the paragraph source."""


def build_parser() -> MarkdownIt:
    """Return the shared CommonMark parser (plus tables and strikethrough)."""

    global _PARSER
    if _PARSER is None:
        parser = MarkdownIt("commonmark", {"html": True})
        parser.enable("table")
        parser.enable("strikethrough")
        parser.disable("text_join")
        _PARSER = parser
    return _PARSER


def detect_frontmatter_lines(text: str) -> int:
    """Return how many leading lines form a fenced frontmatter block (0 if none)."""

    if not text.startswith(("---", "+++")):
        return 0
    lines = text.split("\n")
    fence = lines[0].strip()
    if fence not in _FRONTMATTER_FENCES:
        return 0
    for idx, line in enumerate(lines[1:], start=1):
        if line.strip() == fence:
            return idx + 1
    return 0


def parse_document(text: str) -> DocumentTree | None:
    """Parse ``text`` into a :class:`DocumentTree`; ``None`` when there is nothing to parse."""

    if not text:
        return None

    line_offsets = _line_offsets(text)
    frontmatter_lines = detect_frontmatter_lines(text)
    body = text
    if frontmatter_lines:
        # keep line numbers stable so token maps still index ``line_offsets``
        body = "\n" * frontmatter_lines + text[_line_offset(line_offsets, frontmatter_lines, len(text)) :]

    env: dict[str, Any] = {}
    tokens = build_parser().parse(body, env)
    tree = DocumentTree.create(text)
    _TreeBuilder(tree, line_offsets, env.get("references", {})).build(tokens)
    return tree


class _TreeBuilder:
    def __init__(self, tree: DocumentTree, line_offsets: Sequence[int], references: Mapping[str, Any]) -> None:
        self._tree = tree
        self._line_offsets = line_offsets
        self._references = references

    def build(self, tokens: Sequence[Token]) -> None:
        stack = [self._tree.root.index]
        for token in tokens:
            if token.nesting == 1:
                kind = _BLOCK_KINDS.get(token.type, NodeKind.BLOCK)
                start, end = self._block_range(token)
                node = self._tree.add(kind, start, end, parent=stack[-1])
                stack.append(node.index)
            elif token.nesting == -1:
                stack.pop()
            elif token.type == "inline":
                owner = self._tree.node(stack[-1])
                if owner.kind is NodeKind.PARAGRAPH:
                    self._fill_paragraph(owner, token)
            elif token.map is not None:
                start, end = self._block_range(token)
                self._tree.add(NodeKind.BLOCK, start, end, parent=stack[-1])

    def _block_range(self, token: Token) -> tuple[int, int]:
        if token.map is None:
            return 0, 0
        first, last = token.map
        length = len(self._tree.source)
        return (
            _line_offset(self._line_offsets, first, length),
            _line_offset(self._line_offsets, last, length),
        )

    def _fill_paragraph(self, paragraph: Node, inline: Token) -> None:
        source = self._tree.source
        line_begin = paragraph.start
        line_end = source.find("\n", line_begin)
        if line_end < 0:
            line_end = len(source)
        first_line = inline.content.split("\n", 1)[0]
        start = source.find(first_line, line_begin, line_end) if first_line else -1
        if start < 0:
            start = line_begin + len(source[line_begin:line_end]) - len(source[line_begin:line_end].lstrip())
        paragraph = self._tree.update(paragraph.index, start=start)

        checkpoint = len(self._tree.nodes)
        try:
            _InlineAligner(self._tree, paragraph, self._references).align(inline.children or [])
        except _AlignmentError as exc:
            LOGGER.debug("Keeping paragraph at offset %d verbatim: %s", paragraph.start, exc)
            del self._tree.nodes[checkpoint:]
            self._tree.update(paragraph.index, children=())
            end = paragraph.end - 1 if source.endswith("\n", paragraph.start, paragraph.end) else paragraph.end
            self._tree.add(NodeKind.OTHER, paragraph.start, end, parent=paragraph.index)


class _InlineAligner:
    """Maps inline tokens onto source offsets, appending nodes under a paragraph."""

    def __init__(self, tree: DocumentTree, paragraph: Node, references: Mapping[str, Any]) -> None:
        self._tree = tree
        self._source = tree.source
        self._pos = paragraph.start
        self._limit = paragraph.end
        self._stack = [paragraph.index]
        self._references = references

    def align(self, tokens: Sequence[Token]) -> None:
        index = 0
        while index < len(tokens):
            index = self._align_token(tokens, index)
        if len(self._stack) != 1:
            raise _AlignmentError("unbalanced delimiters")

    def _align_token(self, tokens: Sequence[Token], index: int) -> int:
        token = tokens[index]
        kind = token.type
        if kind == "text":
            if token.content:
                start = self._find(token.content)
                self._add(NodeKind.TEXT, start, start + len(token.content))
        elif kind == "text_special":
            start = self._find(token.markup)
            self._add(NodeKind.TEXT, start, start + len(token.markup))
        elif kind == "softbreak":
            newline = self._find("\n")
            self._add(NodeKind.SOFT_BREAK, newline, newline + 1)
        elif kind == "hardbreak":
            self._add_hard_break()
        elif kind in _DELIMITED_OPEN:
            start = self._find(token.markup)
            node = self._add(NodeKind.DELIMITED, start, start + len(token.markup), opening_marker=token.markup)
            self._stack.append(node.index)
        elif kind in _DELIMITED_CLOSE:
            if len(self._stack) < 2:
                raise _AlignmentError(f"unexpected {kind}")
            start = self._find(token.markup)
            end = start + len(token.markup)
            self._tree.update(self._stack.pop(), end=end, closing_marker=token.markup)
            self._pos = end
        elif kind == "code_inline":
            self._add_code_span(token.markup)
        elif kind == "link_open":
            close_index = _matching_close(tokens, index)
            if token.markup == "autolink":
                start = self._find("<")
                end = self._find(">", start) + 1
            else:
                start = self._find("[")
                end = self._link_end(start)
            self._add(NodeKind.OTHER, start, end)
            return close_index + 1
        elif kind == "image":
            start = self._find("![")
            self._add(NodeKind.OTHER, start, self._link_end(start + 1))
        elif token.content:
            # inline HTML and anything a parser plugin may add
            start = self._find(token.content)
            self._add(NodeKind.OTHER, start, start + len(token.content))
        else:
            raise _AlignmentError(f"cannot place {kind} token")
        return index + 1

    # ------------------------------------------------------------------
    # Node helpers
    # ------------------------------------------------------------------
    def _add(self, kind: NodeKind, start: int, end: int, **fields: Any) -> Node:
        node = self._tree.add(kind, start, end, parent=self._stack[-1], **fields)
        self._pos = end
        return node

    def _add_hard_break(self) -> None:
        newline = self._find("\n")
        if newline > self._pos and self._source[newline - 1] == "\\":
            self._add(NodeKind.HARD_BREAK, newline - 1, newline + 1, backslash=True)
            return
        start = newline
        while start > self._pos and self._source[start - 1] == " ":
            start -= 1
        self._add(NodeKind.HARD_BREAK, start, newline + 1, backslash=False)

    def _add_code_span(self, run: str) -> None:
        start = self._find(run)
        inner = start + len(run)
        close = self._closing_backticks(run, inner)
        node = self._add(
            NodeKind.DELIMITED,
            start,
            close + len(run),
            opening_marker=run,
            closing_marker=run,
        )
        self._tree.add(NodeKind.TEXT, inner, close, parent=node.index)

    # ------------------------------------------------------------------
    # Source scanning
    # ------------------------------------------------------------------
    def _find(self, needle: str, start: int | None = None) -> int:
        origin = self._pos if start is None else start
        found = self._source.find(needle, origin, self._limit)
        if found < 0:
            raise _AlignmentError(f"{needle!r} not found after offset {origin}")
        return found

    def _closing_backticks(self, run: str, start: int) -> int:
        at = start
        while True:
            at = self._find("`", at)
            stop = at
            while stop < self._limit and self._source[stop] == "`":
                stop += 1
            if stop - at == len(run):
                return at
            at = stop

    def _link_end(self, open_bracket: int) -> int:
        close = self._matching(open_bracket, "[", "]")
        after = close + 1
        follower = self._source[after] if after < self._limit else ""
        if follower == "(":
            return self._matching(after, "(", ")") + 1
        if follower == "[":
            label_close = self._matching(after, "[", "]")
            label = self._source[after + 1 : label_close]
            if not label.strip() or normalizeReference(label) in self._references:
                return label_close + 1
        return after

    def _matching(self, start: int, opener: str, closer: str) -> int:
        depth = 0
        quote: str | None = None
        at = start
        while at < self._limit:
            char = self._source[at]
            if char == "\\":
                at += 2
                continue
            if quote is not None:
                if char == quote:
                    quote = None
            elif opener == "(" and char in "\"'" and self._source[at - 1] in " \t\n":
                quote = char
            elif char == opener:
                depth += 1
            elif char == closer:
                depth -= 1
                if depth == 0:
                    return at
            at += 1
        raise _AlignmentError(f"unterminated {opener!r} at offset {start}")


def _matching_close(tokens: Sequence[Token], index: int) -> int:
    depth = 0
    for position in range(index, len(tokens)):
        kind = tokens[position].type
        if kind == "link_open":
            depth += 1
        elif kind == "link_close":
            depth -= 1
            if depth == 0:
                return position
    raise _AlignmentError("link_open without link_close")


def _line_offsets(text: str) -> list[int]:
    offsets = [0]
    newline = text.find("\n")
    while newline >= 0:
        offsets.append(newline + 1)
        newline = text.find("\n", newline + 1)
    return offsets


def _line_offset(offsets: Sequence[int], line: int, length: int) -> int:
    return offsets[line] if line < len(offsets) else length
