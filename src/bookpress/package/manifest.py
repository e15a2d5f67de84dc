"""Append-only registry of manifest entries."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from bookpress.errors import DuplicateIdError, InvalidPathnameError, ReservedIdError

from .models import ManifestEntry

log = logging.getLogger(__name__)

RESERVED_PATHS = frozenset(["", "/", "/index.html", "index.html"])
RESERVED_IDS = frozenset(["cover", "cover-image"])


def normalize_path(path: str) -> str:
    """Manifest hrefs are relative to the root folder."""
    return path.lstrip("/")


class ManifestRegistry:
    """Ordered table of every content entry in a book.

    Positions are stable; TOC nodes keep them instead of references.
    """

    def __init__(self, reserved_paths: Iterable[str] = ()) -> None:
        self._entries: list[ManifestEntry] = []
        self._ids: set[str] = set()
        self._paths: set[str] = set()
        self._reserved_paths = RESERVED_PATHS | frozenset(reserved_paths)
        self._next_seq = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ManifestEntry]:
        return iter(self._entries)

    def __getitem__(self, position: int) -> ManifestEntry:
        return self._entries[position]

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._ids

    def validate(self, path: str, entry_id: str = "", internal: bool = False) -> None:
        """Raise if registering ``path``/``entry_id`` would break an invariant."""
        href = normalize_path(path)
        if path in self._reserved_paths or href in self._reserved_paths:
            raise InvalidPathnameError(path)
        if href in self._paths:
            raise InvalidPathnameError(path, "already registered")
        if entry_id:
            if not internal and entry_id in RESERVED_IDS:
                raise ReservedIdError(entry_id)
            if entry_id in self._ids:
                raise DuplicateIdError(entry_id)

    def register(
        self,
        path: str,
        media_type: str,
        entry_id: str = "",
        properties: Iterable[str] = (),
        internal: bool = False,
    ) -> ManifestEntry:
        self.validate(path, entry_id, internal=internal)
        if not entry_id:
            entry_id = self._generate_id()

        entry = ManifestEntry(
            id=entry_id,
            path=normalize_path(path),
            media_type=media_type,
            properties=frozenset(properties),
        )
        self._entries.append(entry)
        self._ids.add(entry.id)
        self._paths.add(entry.path)
        log.debug("Registered %s as %s (%s)", entry.path, entry.id, media_type)
        return entry

    def position_of(self, entry_id: str) -> Optional[int]:
        for position, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return position
        return None

    def _generate_id(self) -> str:
        while True:
            candidate = f"pg{self._next_seq}"
            self._next_seq += 1
            if candidate not in self._ids:
                return candidate
