"""Data models for the package descriptor and the caller-facing options."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from bookpress.toc.tree import TOCNode


class Property(str, enum.Enum):
    """Manifest item properties a caller may request."""

    MATHML = "mathml"
    REMOTE_RESOURCES = "remote-resources"
    SCRIPTED = "scripted"
    SVG = "svg"


# Set internally only
COVER_IMAGE_PROPERTY = "cover-image"


@dataclass(frozen=True)
class ManifestEntry:
    id: str
    path: str  # href relative to the root folder
    media_type: str
    properties: frozenset[str] = frozenset()


@dataclass(frozen=True)
class SpineItem:
    idref: str
    linear: Optional[bool] = None  # None leaves the attribute out
    properties: frozenset[str] = frozenset()


@dataclass(frozen=True)
class Reference:
    """Guide / landmark pointer."""

    href: str
    type: str
    title: str = ""


@dataclass
class Identifier:
    value: str
    scheme: str = ""


@dataclass
class Author:
    name: str
    role: str = ""  # MARC relator code, e.g. "aut"
    file_as: str = ""


@dataclass
class Date:
    value: str
    event: str = ""  # publication, creation, modification


@dataclass
class Metatag:
    name: str = ""
    content: str = ""
    property: str = ""
    value: str = ""
    refines: str = ""


@dataclass
class Metadata:
    """Package-level metadata. Lists keep insertion order."""

    titles: list[str] = field(default_factory=list)
    languages: list[str] = field(default_factory=list)
    identifiers: list[Identifier] = field(default_factory=list)
    creators: list[Author] = field(default_factory=list)
    publishers: list[str] = field(default_factory=list)
    dates: list[Date] = field(default_factory=list)
    metatags: list[Metatag] = field(default_factory=list)
    page_progression: str = ""  # "ltr" or "rtl"

    @property
    def title(self) -> str:
        return self.titles[0] if self.titles else ""

    @property
    def language(self) -> str:
        return self.languages[0] if self.languages else "en"

    @property
    def uid(self) -> str:
        return self.identifiers[0].value if self.identifiers else ""

    @property
    def author(self) -> str:
        return self.creators[0].name if self.creators else ""


@dataclass(frozen=True)
class FileOptions:
    properties: frozenset[Property] = frozenset()


@dataclass(frozen=True)
class PageOptions(FileOptions):
    """Options for a page; TOC fields are optional.

    ``toc_title`` with ``toc_item_title`` creates a section holding one leaf,
    ``toc_item_title`` alone creates a leaf. ``toc_parent`` attaches either
    under an existing node instead of the root.
    """

    toc_title: str = ""
    toc_item_title: str = ""
    toc_parent: Optional[TOCNode] = None
    linear: Optional[bool] = None
    spine_properties: frozenset[str] = frozenset()

    @property
    def wants_toc(self) -> bool:
        return bool(self.toc_title or self.toc_item_title)


class Versioner(Protocol):
    def next(self) -> str:
        """Return a new version string on every call."""


class TimestampVersioner:
    """Version strings from the current local time."""

    def next(self) -> str:
        return time.strftime("%Y%m%d%H%M%S")
