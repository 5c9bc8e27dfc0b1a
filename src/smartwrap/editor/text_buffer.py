"""Headless text buffer with undo history and compound edits.

The buffer keeps business logic (documents, selections, batched range edits)
free of any widget toolkit so the formatter can drive it from the command
line and from tests. Every mutation happens under one re-entrant lock; a
compound change holds that lock until all of its replacements are committed.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Protocol

from .document_model import DocumentState, SelectionRange
from .patches import PatchResult, RangePatch, apply_streamed_ranges

__all__ = ["CompoundChange", "EditorBuffer", "SelectionListener", "TextChangeListener"]

LOGGER = logging.getLogger(__name__)


class TextChangeListener(Protocol):
    """Callback signature invoked when the buffer text changes."""

    def __call__(self, text: str, state: DocumentState) -> None:
        ...


class SelectionListener(Protocol):
    """Callback invoked when the active selection or caret moves."""

    def __call__(self, selection: SelectionRange) -> None:
        ...


@dataclass(slots=True)
class _UndoEntry:
    """Represents a text snapshot for undo/redo bookkeeping."""

    text: str


class CompoundChange:
    """Collects replacements against the pre-change text and commits them together."""

    def __init__(self, buffer: EditorBuffer) -> None:
        self._buffer = buffer
        self._patches: list[RangePatch] = []

    def replace_text(self, start: int, end: int, text: str) -> None:
        """Queue a replacement of ``[start:end]``; offsets refer to the text before the change."""

        source = self._buffer.text
        self._patches.append(RangePatch(start=start, end=end, replacement=text, match_text=source[start:end]))

    @property
    def patches(self) -> tuple[RangePatch, ...]:
        return tuple(self._patches)


class EditorBuffer:
    """Mutable text buffer the formatter writes into."""

    MAX_HISTORY = 50

    def __init__(self, document: DocumentState | None = None) -> None:
        self._lock = threading.RLock()
        self._state = document or DocumentState()
        self._text_buffer: str = self._state.text
        self._selection = SelectionRange()
        self._text_listeners: list[TextChangeListener] = []
        self._selection_listeners: list[SelectionListener] = []
        self._undo_stack: list[_UndoEntry] = []
        self._redo_stack: list[_UndoEntry] = []
        self._last_patch: PatchResult | None = None

    # ------------------------------------------------------------------
    # Document accessors
    # ------------------------------------------------------------------
    def load_document(self, document: DocumentState) -> None:
        """Load a new document state, discarding history."""

        with self._lock:
            self._state = document
            self._text_buffer = document.text
            self._selection = SelectionRange()
            self._undo_stack.clear()
            self._redo_stack.clear()
            self._last_patch = None
            self._emit_text_changed()
            self._emit_selection_changed()

    def to_document(self) -> DocumentState:
        """Return the current document representation."""

        self._state.text = self._text_buffer
        return self._state

    @property
    def text(self) -> str:
        return self._text_buffer

    @property
    def line_count(self) -> int:
        return self._text_buffer.count("\n") + 1

    @property
    def last_patch(self) -> PatchResult | None:
        """Result of the most recent compound change, if any."""

        return self._last_patch

    def line_start(self, offset: int) -> int:
        """Return the offset where the line containing ``offset`` begins."""

        offset = max(0, min(offset, len(self._text_buffer)))
        return self._text_buffer.rfind("\n", 0, offset) + 1

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def selection_range(self) -> SelectionRange:
        return SelectionRange(self._selection.start, self._selection.end)

    def set_selection(self, start: int, end: int) -> None:
        """Select ``[start:end]``, clamped to the buffer."""

        with self._lock:
            begin, finish = self._clamp_range(start, end)
            self._selection = SelectionRange(begin, finish)
            self._emit_selection_changed()

    # ------------------------------------------------------------------
    # Editing helpers
    # ------------------------------------------------------------------
    def set_text(self, text: str, *, mark_dirty: bool = True) -> None:
        """Replace the entire buffer content with ``text``."""

        with self._lock:
            if self._text_buffer == text:
                return
            self._commit(text, mark_dirty=mark_dirty)

    def replace_range(self, start: int, end: int, replacement: str) -> None:
        """Replace the slice ``[start:end]`` with ``replacement``."""

        with self._lock:
            begin, finish = self._clamp_range(start, end)
            self.set_text(self._text_buffer[:begin] + replacement + self._text_buffer[finish:])
            self.set_selection(begin, begin + len(replacement))

    @contextmanager
    def compound_change(self) -> Iterator[CompoundChange]:
        """Group replacements into one edit with a single undo step.

        Nothing is applied if the body raises; a patch that no longer matches
        the buffer raises :class:`~smartwrap.editor.patches.PatchApplyError`.
        """

        with self._lock:
            change = CompoundChange(self)
            yield change
            patches = change.patches
            if not patches:
                return
            result = apply_streamed_ranges(self._text_buffer, patches)
            LOGGER.debug("Compound change applied %d range(s): %s", len(patches), result.summary)
            self._last_patch = result
            if result.text != self._text_buffer:
                self._commit(result.text)

    # ------------------------------------------------------------------
    # Undo/redo support
    # ------------------------------------------------------------------
    def undo(self) -> bool:
        """Restore the previous text snapshot if available."""

        with self._lock:
            if not self._undo_stack:
                return False
            entry = self._undo_stack.pop()
            self._redo_stack.append(_UndoEntry(text=self._text_buffer))
            self._restore(entry.text)
            return True

    def redo(self) -> bool:
        """Reapply an undone text snapshot if available."""

        with self._lock:
            if not self._redo_stack:
                return False
            entry = self._redo_stack.pop()
            self._undo_stack.append(_UndoEntry(text=self._text_buffer))
            self._restore(entry.text)
            return True

    @property
    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def add_text_listener(self, listener: TextChangeListener) -> None:
        """Register a callback fired whenever the text buffer mutates."""

        self._text_listeners.append(listener)

    def add_selection_listener(self, listener: SelectionListener) -> None:
        """Register a callback fired when the selection/caret changes."""

        self._selection_listeners.append(listener)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _commit(self, text: str, *, mark_dirty: bool = True) -> None:
        self._push_undo_snapshot(self._text_buffer)
        self._redo_stack.clear()
        self._text_buffer = text
        if mark_dirty:
            self._state.update_text(text)
        else:
            self._state.text = text
        self._clamp_selection()
        self._emit_text_changed()

    def _restore(self, text: str) -> None:
        self._text_buffer = text
        self._state.update_text(text)
        self._clamp_selection()
        self._emit_text_changed()

    def _push_undo_snapshot(self, text: str) -> None:
        self._undo_stack.append(_UndoEntry(text=text))
        if len(self._undo_stack) > self.MAX_HISTORY:
            del self._undo_stack[0]

    def _clamp_range(self, start: int, end: int) -> tuple[int, int]:
        length = len(self._text_buffer)
        begin = max(0, min(start, length))
        finish = max(0, min(end, length))
        if finish < begin:
            begin, finish = finish, begin
        return begin, finish

    def _clamp_selection(self) -> None:
        start, end = self._clamp_range(self._selection.start, self._selection.end)
        self._selection = SelectionRange(start, end)

    def _emit_text_changed(self) -> None:
        for listener in list(self._text_listeners):
            listener(self._text_buffer, self._state)

    def _emit_selection_changed(self) -> None:
        selection = self.selection_range()
        for listener in list(self._selection_listeners):
            listener(selection)
