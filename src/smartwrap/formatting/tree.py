"""Arena-backed document tree consumed by the reflow engine.

Nodes live in one flat list owned by :class:`DocumentTree` and refer to each
other by index. The parent index is only ever read for indentation lookups;
the tree is never mutated once a parser adapter has finished building it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator, Sequence

__all__ = ["NodeKind", "Node", "DocumentTree"]


class NodeKind(Enum):
    """Node variants understood by the engine."""

    DOCUMENT = "document"
    PARAGRAPH = "paragraph"
    LIST = "list"
    LIST_ITEM = "list_item"
    BLOCK_QUOTE = "block_quote"
    BLOCK = "block"
    TEXT = "text"
    DELIMITED = "delimited"
    SOFT_BREAK = "soft_break"
    HARD_BREAK = "hard_break"
    OTHER = "other"


@dataclass(slots=True, frozen=True)
class Node:
    """Single tree node addressed by its index inside the arena."""

    index: int
    kind: NodeKind
    start: int
    end: int
    parent: int | None = None
    children: tuple[int, ...] = ()
    opening_marker: str = ""
    closing_marker: str = ""
    backslash: bool = False


@dataclass(slots=True)
class DocumentTree:
    """Flat node arena plus the source text the offsets point into."""

    source: str
    nodes: list[Node] = field(default_factory=list)

    @classmethod
    def create(cls, source: str) -> DocumentTree:
        """Return a tree holding only a ``DOCUMENT`` root spanning ``source``."""

        tree = cls(source=source)
        tree.add(NodeKind.DOCUMENT, 0, len(source))
        return tree

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    def add(
        self,
        kind: NodeKind,
        start: int,
        end: int,
        *,
        parent: int | None = None,
        opening_marker: str = "",
        closing_marker: str = "",
        backslash: bool = False,
    ) -> Node:
        """Append a node and link it as the last child of ``parent``."""

        node = Node(
            index=len(self.nodes),
            kind=kind,
            start=start,
            end=end,
            parent=parent,
            opening_marker=opening_marker,
            closing_marker=closing_marker,
            backslash=backslash,
        )
        self.nodes.append(node)
        if parent is not None:
            owner = self.nodes[parent]
            self.nodes[parent] = replace(owner, children=owner.children + (node.index,))
        return node

    def update(self, index: int, **changes: object) -> Node:
        """Replace fields of node ``index`` while the tree is being built."""

        node = replace(self.nodes[index], **changes)
        self.nodes[index] = node
        return node

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def root(self) -> Node:
        return self.nodes[0]

    def node(self, index: int) -> Node:
        return self.nodes[index]

    def parent_of(self, node: Node) -> Node | None:
        if node.parent is None:
            return None
        return self.nodes[node.parent]

    def children_of(self, node: Node) -> Sequence[Node]:
        return [self.nodes[index] for index in node.children]

    def raw(self, node: Node) -> str:
        """Return the source text covered by ``node``."""

        return self.source[node.start : node.end]

    def line_start(self, offset: int) -> int:
        """Return the offset of the first character of the line holding ``offset``."""

        return self.source.rfind("\n", 0, offset) + 1

    def iter_kind(self, kind: NodeKind) -> Iterator[Node]:
        return (node for node in self.nodes if node.kind is kind)
