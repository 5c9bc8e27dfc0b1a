"""Shared pytest fixtures."""

from __future__ import annotations

import logging
from typing import Callable

import pytest

from smartwrap.editor.document_model import DocumentState
from smartwrap.editor.text_buffer import EditorBuffer
from smartwrap.formatting.tree import DocumentTree, Node, NodeKind


@pytest.fixture
def make_buffer() -> Callable[[str], EditorBuffer]:
    def _factory(text: str = "") -> EditorBuffer:
        return EditorBuffer(DocumentState(text=text))

    return _factory


@pytest.fixture
def make_paragraph() -> Callable[..., tuple[DocumentTree, Node]]:
    """Build a tree holding one paragraph made of a single text run.

    With ``marker`` set, the paragraph is nested in a list item and starts
    right after the marker on the first line.
    """

    def _factory(text: str, *, marker: str = "") -> tuple[DocumentTree, Node]:
        source = f"{marker}{text}\n"
        tree = DocumentTree.create(source)
        parent = tree.root.index
        if marker:
            listing = tree.add(NodeKind.LIST, 0, len(source), parent=parent)
            item = tree.add(NodeKind.LIST_ITEM, 0, len(source), parent=listing.index)
            parent = item.index
        paragraph = tree.add(NodeKind.PARAGRAPH, len(marker), len(source), parent=parent)
        tree.add(NodeKind.TEXT, len(marker), len(source) - 1, parent=paragraph.index)
        return tree, tree.node(paragraph.index)

    return _factory


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
