"""Tests for applying formatted paragraphs to a buffer as one compound edit."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import pytest

from smartwrap.editor.patches import PatchApplyError
from smartwrap.formatting.applier import apply, build_edits
from smartwrap.formatting.errors import ParagraphRangeError
from smartwrap.formatting.locator import FormattedParagraph
from smartwrap.formatting.tree import DocumentTree, NodeKind

SOURCE = "aa bb\n\ncc dd\n"


def _records(source: str = SOURCE) -> list[FormattedParagraph]:
    tree = DocumentTree.create(source)
    first = tree.add(NodeKind.PARAGRAPH, 0, 6, parent=0)
    second = tree.add(NodeKind.PARAGRAPH, 7, 13, parent=0)
    return [
        FormattedParagraph(node=first, text="aa\nbb"),
        FormattedParagraph(node=second, text="cc\ndd"),
    ]


class _DriftingBuffer:
    """Buffer whose text changes underneath the edit."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.selection: tuple[int, int] | None = None

    def line_start(self, offset: int) -> int:
        return self.text.rfind("\n", 0, offset) + 1

    @contextmanager
    def compound_change(self) -> Iterator[object]:
        yield _NullRecorder()
        raise PatchApplyError("Range patch content mismatch", expected="cc dd", actual="zz zz")

    def set_selection(self, start: int, end: int) -> None:
        self.selection = (start, end)


class _NullRecorder:
    def replace_text(self, start: int, end: int, text: str) -> None:
        return None


def test_build_edits_orders_last_paragraph_first_and_trims_newline():
    edits = build_edits(SOURCE, _records())

    assert [(edit.start, edit.end) for edit in edits] == [(7, 12), (0, 5)]
    assert [edit.match_text for edit in edits] == ["cc dd", "aa bb"]


def test_build_edits_keeps_end_without_trailing_newline():
    source = "aa bb"
    tree = DocumentTree.create(source)
    node = tree.add(NodeKind.PARAGRAPH, 0, 5, parent=0)

    (edit,) = build_edits(source, [FormattedParagraph(node=node, text="aa\nbb")])

    assert (edit.start, edit.end) == (0, 5)


def test_apply_replaces_all_paragraphs_in_one_step(make_buffer):
    buffer = make_buffer(SOURCE)
    notifications: list[str] = []
    buffer.add_text_listener(lambda text, state: notifications.append(text))

    apply(buffer, _records())

    assert buffer.text == "aa\nbb\n\ncc\ndd\n"
    assert notifications == [buffer.text]
    assert buffer.undo() is True
    assert buffer.text == SOURCE
    assert buffer.can_undo is False


def test_apply_resets_selection_to_buffer_start(make_buffer):
    buffer = make_buffer(SOURCE)
    buffer.set_selection(3, 9)

    apply(buffer, _records())

    assert buffer.selection_range().as_tuple() == (0, 0)


def test_apply_without_records_leaves_text_untouched(make_buffer):
    buffer = make_buffer(SOURCE)
    buffer.set_selection(2, 4)

    assert apply(buffer, []) == ()
    assert buffer.text == SOURCE
    assert buffer.can_undo is False
    assert buffer.selection_range().as_tuple() == (0, 0)


def test_range_past_buffer_end_is_fatal(make_buffer):
    buffer = make_buffer("aa bb\n")

    with pytest.raises(ParagraphRangeError) as excinfo:
        apply(buffer, _records())

    assert excinfo.value.reason == "invalid_range"
    assert buffer.text == "aa bb\n"


def test_overlapping_paragraphs_are_rejected():
    tree = DocumentTree.create(SOURCE)
    outer = tree.add(NodeKind.PARAGRAPH, 0, 13, parent=0)
    inner = tree.add(NodeKind.PARAGRAPH, 7, 13, parent=0)
    records = [FormattedParagraph(node=outer, text="x"), FormattedParagraph(node=inner, text="y")]

    with pytest.raises(ParagraphRangeError, match="overlap") as excinfo:
        build_edits(SOURCE, records)

    assert excinfo.value.reason == "range_overlap"


def test_buffer_patch_failures_surface_as_range_errors():
    buffer = _DriftingBuffer(SOURCE)

    with pytest.raises(ParagraphRangeError) as excinfo:
        apply(buffer, _records())

    assert excinfo.value.reason == "range_mismatch"
    assert excinfo.value.details()["actual"] == "zz zz"
    assert isinstance(excinfo.value.__cause__, PatchApplyError)
