"""Hierarchical table of contents.

Nodes own their children and never point back to their parent. The tree is
the arena that owns the top-level nodes; content is resolved by looking up a
node's stored manifest position in the book's registry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from bookpress.errors import InvalidOptionTypeError, TOCItemTitleNotFoundError
from bookpress.package.manifest import ManifestRegistry

from .numbering import DEFAULT_NUMBERING, NumberingScheme

log = logging.getLogger(__name__)


class TOCNode:
    def __init__(self, tree: TOCTree, manifest_index: int, title: str) -> None:
        self._tree = tree
        self.manifest_index = manifest_index
        self.title = title
        self.children: list[TOCNode] = []
        self._numbering: Optional[NumberingScheme] = None

    def __repr__(self) -> str:
        return f"TOCNode(title={self.title!r}, manifest_index={self.manifest_index}, children={len(self.children)})"

    def child_count(self) -> int:
        return len(self.children)

    def child_at(self, n: int) -> Optional[TOCNode]:
        if 0 <= n < len(self.children):
            return self.children[n]
        return None

    @property
    def reference_id(self) -> str:
        """Manifest id of the content this node points at."""
        return self._tree.manifest[self.manifest_index].id

    @property
    def content_path(self) -> str:
        return self._tree.manifest[self.manifest_index].path

    @property
    def numbering(self) -> Optional[NumberingScheme]:
        """Explicit override, or None when inherited from the parent."""
        return self._numbering

    def set_numbering(self, scheme: NumberingScheme) -> None:
        self._numbering = scheme


@dataclass(frozen=True)
class TOCEntry:
    node: TOCNode
    depth: int
    label: str


class TOCTree:
    def __init__(
        self, manifest: ManifestRegistry, numbering: NumberingScheme = DEFAULT_NUMBERING
    ) -> None:
        self.manifest = manifest
        self.children: list[TOCNode] = []
        self.numbering = numbering

    def __len__(self) -> int:
        return len(self.children)

    def child_count(self) -> int:
        return len(self.children)

    def child_at(self, n: int) -> Optional[TOCNode]:
        if 0 <= n < len(self.children):
            return self.children[n]
        return None

    def set_numbering(self, scheme: NumberingScheme) -> None:
        self.numbering = scheme

    def owns(self, node: TOCNode) -> bool:
        return node._tree is self

    def check_parent(self, parent: Optional[TOCNode]) -> None:
        if parent is None:
            return
        if not isinstance(parent, TOCNode) or not self.owns(parent):
            raise InvalidOptionTypeError(
                f"TOC parent must be a node of this book, got {parent!r}"
            )

    def add_section(
        self,
        parent: Optional[TOCNode],
        section_title: str,
        item_title: str,
        manifest_index: int,
    ) -> TOCNode:
        """Attach ``manifest_index`` under ``parent`` (the root when None).

        With both titles a section node is created holding one leaf and the
        section is returned; with only ``item_title`` the leaf is returned.
        """
        self.check_parent(parent)
        if section_title and not item_title:
            raise TOCItemTitleNotFoundError(section_title)

        siblings = parent.children if parent is not None else self.children
        if section_title:
            section = TOCNode(self, manifest_index, section_title)
            section.children.append(TOCNode(self, manifest_index, item_title))
            siblings.append(section)
            log.debug("TOC section %r with item %r", section_title, item_title)
            return section

        leaf = TOCNode(self, manifest_index, item_title)
        siblings.append(leaf)
        log.debug("TOC item %r", item_title)
        return leaf

    def walk(self, full: bool = True, labels: bool = True) -> Iterator[TOCEntry]:
        """Depth-first, pre-order walk with computed labels.

        With ``full=False`` only the top level is visited. With
        ``labels=False`` numbering is not consulted and every label is empty.
        """
        yield from self._walk(
            self.children, self.numbering, self.numbering.prefix, 0, full, labels
        )

    def _walk(
        self,
        nodes: list[TOCNode],
        scheme: NumberingScheme,
        parent_label: str,
        depth: int,
        full: bool,
        labels: bool,
    ) -> Iterator[TOCEntry]:
        for index, node in enumerate(nodes):
            label = scheme.label(parent_label, scheme.position_for(index)) if labels else ""
            yield TOCEntry(node=node, depth=depth, label=label)
            if full and node.children:
                child_scheme = node.numbering or scheme
                yield from self._walk(
                    node.children, child_scheme, label, depth + 1, full, labels
                )
