"""Exceptions raised while assembling a book."""

from __future__ import annotations

from typing import Optional


class BookError(Exception):
    """Base class for every assembly error."""


class InvalidPathnameError(BookError, ValueError):
    """Reserved, empty or already written path."""

    def __init__(self, path: str, reason: str = "reserved pathname") -> None:
        super().__init__(f"Invalid pathname {path!r}: {reason}")
        self.path = path


class ReservedIdError(BookError, ValueError):
    def __init__(self, entry_id: str) -> None:
        super().__init__(f"Manifest id {entry_id!r} is reserved")
        self.entry_id = entry_id


class DuplicateIdError(BookError, ValueError):
    def __init__(self, entry_id: str) -> None:
        super().__init__(f"Manifest id {entry_id!r} is already registered")
        self.entry_id = entry_id


class InvalidOptionTypeError(BookError, ValueError):
    """Options value does not match what the dialect accepts."""


class TOCItemTitleNotFoundError(BookError, ValueError):
    """A TOC section was requested without a leaf title.

    The content file is already in the manifest when this is raised;
    ``entry_id`` names it so callers can still refer to it.
    """

    def __init__(self, section_title: str, entry_id: Optional[str] = None) -> None:
        super().__init__(f"TOC section {section_title!r} has no item title")
        self.section_title = section_title
        self.entry_id = entry_id


class BookClosedError(BookError, RuntimeError):
    def __init__(self) -> None:
        super().__init__("Book is already closed")
