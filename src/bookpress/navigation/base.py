"""Base interface for navigation document generators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class NavItem:
    title: str
    href: str
    id: Optional[str] = None
    depth: int = 0


class IndexGenerator(ABC):
    """Single-use accumulator for one navigation document.

    Items are rendered in the order they were added; ``depth`` nests an item
    under the closest preceding item one level up.
    """

    MEDIA_TYPE: str = ""
    PATH_NAME: str = ""
    PROPERTY: str = ""
    ID: str = ""

    def __init__(self) -> None:
        self._rendered = False

    def add_item(
        self, title: str, href: str, item_id: Optional[str] = None, *, depth: int = 0
    ) -> None:
        self._check_open()
        self._append(NavItem(title=title, href=href, id=item_id, depth=max(depth, 0)))

    def add_landmark(self, title: str, href: str, kind: str) -> None:
        """Record a landmark; generators without a landmarks section ignore it."""
        self._check_open()

    def get_document(self) -> bytes:
        self._check_open()
        self._rendered = True
        return self._render()

    def get_mime_type(self) -> str:
        return self.MEDIA_TYPE

    def get_path_name(self) -> str:
        return self.PATH_NAME

    def get_property_value(self) -> str:
        return self.PROPERTY

    def get_id(self) -> str:
        return self.ID

    def _check_open(self) -> None:
        if self._rendered:
            raise RuntimeError(f"{type(self).__name__} has already been rendered")

    @abstractmethod
    def _append(self, item: NavItem) -> None:
        """Store one navigation entry."""

    @abstractmethod
    def _render(self) -> bytes:
        """Return the complete document."""
