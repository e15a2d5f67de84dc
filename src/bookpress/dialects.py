"""Per-version serialization policies for the book engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from bookpress.navigation.base import IndexGenerator
from bookpress.navigation.nav import LandmarksNavIndexGenerator, NavIndexGenerator
from bookpress.navigation.ncx import NcxIndexGenerator
from bookpress.package.models import Metadata, Property

DCTERMS_NS = "http://purl.org/dc/terms/"
IBOOKS_PREFIX = "ibooks: http://vocabulary.itunes.apple.com/rdf/ibooks/vocabulary-extensions-1.0/"


def _ncx_for(metadata: Metadata) -> IndexGenerator:
    return NcxIndexGenerator(
        uid=metadata.uid,
        title=metadata.title,
        author=metadata.author,
        language=metadata.language,
    )


def _nav_for(metadata: Metadata) -> IndexGenerator:
    return NavIndexGenerator(language=metadata.language)


def _landmarks_nav_for(metadata: Metadata) -> IndexGenerator:
    return LandmarksNavIndexGenerator(language=metadata.language)


@dataclass(frozen=True)
class Dialect:
    version: str
    root_folder: str
    package_file: str
    # Extra xmlns declarations on <package> besides the OPF default
    namespaces: tuple[tuple[str, str], ...] = ()
    prefix: str = ""
    package_lang: bool = False
    cover_linear: bool = False
    manifest_properties: bool = False
    supported_properties: frozenset[Property] = frozenset()
    full_toc_walk: bool = False
    stamp_modified: bool = False
    version_property: str = ""
    html5_cover: bool = False
    refines_metadata: bool = False
    navigation: Callable[[Metadata], IndexGenerator] = _ncx_for

    @property
    def package_path(self) -> str:
        """Archive path of the package descriptor."""
        return f"{self.root_folder}/{self.package_file}"

    def index_generator(self, metadata: Metadata) -> IndexGenerator:
        return self.navigation(metadata)


EPUB20 = Dialect(
    version="2.0",
    root_folder="OEBPS",
    package_file="content.opf",
    cover_linear=False,
    full_toc_walk=True,
    navigation=_ncx_for,
)

EPUB201 = Dialect(
    version="2.0.1",
    root_folder="EPUB",
    package_file="root.opf",
    package_lang=True,
    cover_linear=False,
    navigation=_nav_for,
)

EPUB30 = Dialect(
    version="3.0",
    root_folder="OEBPS",
    package_file="content.opf",
    namespaces=(("dcterms", DCTERMS_NS),),
    prefix=IBOOKS_PREFIX,
    package_lang=True,
    cover_linear=True,
    manifest_properties=True,
    supported_properties=frozenset(Property),
    stamp_modified=True,
    version_property="ibooks:version",
    html5_cover=True,
    refines_metadata=True,
    navigation=_landmarks_nav_for,
)

DIALECTS: dict[str, Dialect] = {d.version: d for d in (EPUB20, EPUB201, EPUB30)}


def get_dialect(version: str) -> Dialect:
    """Return the policy for an EPUB version string."""
    dialect: Optional[Dialect] = DIALECTS.get(version)
    if dialect is None:
        raise ValueError(
            f"Unsupported EPUB version: {version}. Supported: {', '.join(DIALECTS)}"
        )
    return dialect
