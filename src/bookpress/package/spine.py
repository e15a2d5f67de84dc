"""Reading order of the book."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from .models import SpineItem

log = logging.getLogger(__name__)

SPINE_ATTRIBUTES = ("id", "toc", "pageprogression")


class SpineSequence:
    """Append-only list of itemrefs; order is registration order."""

    def __init__(self, page_progression: str = "") -> None:
        self._items: list[SpineItem] = []
        self.id = ""
        self.toc = ""
        self.page_progression = page_progression

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[SpineItem]:
        return iter(self._items)

    def append(
        self,
        idref: str,
        linear: Optional[bool] = None,
        properties: Iterable[str] = (),
    ) -> SpineItem:
        item = SpineItem(idref=idref, linear=linear, properties=frozenset(properties))
        self._items.append(item)
        return item

    def set_attr(self, key: str, value: str) -> None:
        """Set a spine attribute. Unknown keys are ignored, never rejected."""
        if key == "id":
            self.id = value
        elif key == "toc":
            self.toc = value
        elif key == "pageprogression":
            self.page_progression = value
        else:
            log.warning("Ignoring unknown spine attribute %r", key)
