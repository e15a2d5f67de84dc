"""Book assembly engine shared by every EPUB dialect."""

from __future__ import annotations

import dataclasses
import logging
import posixpath
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, BinaryIO, Iterable, Optional, Union

from bookpress.container import Content, ContainerWriter
from bookpress.dialects import EPUB30, Dialect, get_dialect
from bookpress.errors import BookClosedError, InvalidOptionTypeError, TOCItemTitleNotFoundError
from bookpress.navigation.base import IndexGenerator
from bookpress.navigation.nav import XHTML_MEDIA_TYPE
from bookpress.navigation.ncx import NCX_MEDIA_TYPE
from bookpress.package.manifest import ManifestRegistry
from bookpress.package.models import (
    COVER_IMAGE_PROPERTY,
    FileOptions,
    Identifier,
    ManifestEntry,
    Metadata,
    Metatag,
    PageOptions,
    Reference,
    Versioner,
)
from bookpress.package.opf import render_package
from bookpress.package.spine import SpineSequence
from bookpress.rendering import render_template
from bookpress.toc.numbering import DEFAULT_NUMBERING, NumberingScheme
from bookpress.toc.tree import TOCNode, TOCTree

log = logging.getLogger(__name__)

COVER_ID = "cover"
COVER_IMAGE_ID = "cover-image"
SVG_MEDIA_TYPE = "image/svg+xml"

_XML_PROLOG_RE = re.compile(r"^\s*(<\?xml[^>]*\?>\s*)?(<!DOCTYPE[^>]*>\s*)?", re.IGNORECASE)

Target = Union[str, Path, BinaryIO]


def _xhtml_path(path: str) -> str:
    return posixpath.splitext(path)[0] + ".xhtml"


def _read_text(content: Content) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, (bytes, bytearray)):
        return bytes(content).decode("utf-8")
    return content.read().decode("utf-8")


class Book:
    """Incrementally assembled EPUB container.

    Every ``add_*`` call registers a manifest entry and writes its archive
    entry immediately; the package descriptor is written by ``close``. The
    dialect decides namespaces, folder layout, cover conventions and the
    navigation document, so one engine serves EPUB 2.0, 2.0.1 and 3.0.

    Not thread-safe: manifest positions are observable, so calls must be
    serialized by the caller.
    """

    def __init__(
        self,
        target: Target,
        metadata: Optional[Metadata] = None,
        dialect: Union[Dialect, str] = EPUB30,
        versioner: Optional[Versioner] = None,
        compress_level: int = 9,
        numbering: NumberingScheme = DEFAULT_NUMBERING,
    ) -> None:
        self.dialect = get_dialect(dialect) if isinstance(dialect, str) else dialect
        self.metadata = metadata or Metadata()
        if not self.metadata.identifiers:
            # package unique-identifier must resolve to a dc:identifier
            self.metadata = dataclasses.replace(
                self.metadata,
                identifiers=[Identifier(f"urn:uuid:{uuid.uuid4()}", "uuid")],
            )
            log.info("No identifier given; generated %s", self.metadata.uid)
        self.manifest = ManifestRegistry(reserved_paths=[self.dialect.package_file])
        self.spine = SpineSequence(page_progression=self.metadata.page_progression)
        self.toc = TOCTree(self.manifest, numbering)
        self.guide: list[Reference] = []
        self._metatags: list[Metatag] = []
        self._closed = False

        if isinstance(target, (str, Path)):
            self._stream: BinaryIO = open(target, "wb")
        else:
            self._stream = target

        try:
            self._container = ContainerWriter(
                self._stream,
                self.dialect.root_folder,
                self.dialect.package_path,
                compress_level=compress_level,
            )
        except Exception:
            self._stream.close()
            raise

        if versioner is not None:
            if self.dialect.version_property:
                self._metatags.append(
                    Metatag(property=self.dialect.version_property, value=versioner.next())
                )
            else:
                log.warning(
                    "EPUB %s has no version vocabulary; ignoring versioner",
                    self.dialect.version,
                )

        log.info("Started EPUB %s book %r", self.dialect.version, self.metadata.title)

    def __enter__(self) -> Book:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._closed:
            return
        if exc_type is None:
            self.close()
        else:
            self._abort()

    @property
    def closed(self) -> bool:
        return self._closed

    # ── Content ────────────────────────────────────────────

    def add_file(
        self,
        path: str,
        media_type: str,
        content: Optional[Content] = None,
        entry_id: str = "",
        options: Optional[FileOptions] = None,
    ) -> tuple[str, Optional[IO[bytes]]]:
        """Store a file without adding it to the spine or the TOC.

        Returns the manifest id and, when ``content`` is None, an open
        handle the caller streams the file into.
        """
        self._check_open()
        opts = self._file_options(options)
        entry, handle = self._add(
            path, media_type, content, entry_id, self._properties(opts)
        )
        return entry.id, handle

    def add_page(
        self,
        path: str,
        media_type: str,
        content: Optional[Content] = None,
        entry_id: str = "",
        options: Optional[FileOptions] = None,
    ) -> tuple[str, Optional[IO[bytes]], Optional[TOCNode]]:
        """Store a file and append it to the spine.

        With ``PageOptions`` carrying TOC titles the page is also attached to
        the TOC and the new node is returned. A section title without an item
        title raises ``TOCItemTitleNotFoundError`` after the file has been
        registered; the page then stays out of the spine and the TOC.
        """
        self._check_open()
        opts = self._file_options(options)
        page_opts = opts if isinstance(opts, PageOptions) else PageOptions()
        self.toc.check_parent(page_opts.toc_parent)

        position = len(self.manifest)
        entry, handle = self._add(
            path, media_type, content, entry_id, self._properties(opts)
        )

        node: Optional[TOCNode] = None
        if page_opts.wants_toc:
            try:
                node = self.toc.add_section(
                    page_opts.toc_parent,
                    page_opts.toc_title,
                    page_opts.toc_item_title,
                    position,
                )
            except TOCItemTitleNotFoundError as exc:
                exc.entry_id = entry.id
                raise

        self.spine.append(
            entry.id, linear=page_opts.linear, properties=page_opts.spine_properties
        )
        return entry.id, handle, node

    def add_cover(
        self,
        path: str,
        media_type: str,
        content: Optional[Content] = None,
        options: Optional[FileOptions] = None,
    ) -> tuple[str, Optional[IO[bytes]]]:
        """Store the cover and make it the first landmark of the book.

        Raster images get an XHTML wrapper page next to them, SVG markup is
        embedded in the wrapper directly, and any other media type is taken
        as the cover page itself. The wrapper page is what enters the spine.
        """
        self._check_open()
        opts = self._file_options(options)
        properties = self._properties(opts)
        self.manifest.validate(path)
        handle: Optional[IO[bytes]] = None

        if media_type == SVG_MEDIA_TYPE:
            if content is None:
                raise ValueError("An SVG cover needs its markup as content")
            page_path = _xhtml_path(path)
            markup = _XML_PROLOG_RE.sub("", _read_text(content), count=1)
            page = render_template(
                "cover_svg.xhtml",
                svg_markup=markup,
                title="Cover",
                html5=self.dialect.html5_cover,
            )
            page_entry, _ = self._add(
                page_path,
                XHTML_MEDIA_TYPE,
                page,
                COVER_ID,
                properties | {"svg"},
                internal=True,
            )
            cover_ref = page_entry.id
        elif media_type.startswith("image/"):
            page_path = _xhtml_path(path)
            self.manifest.validate(path, COVER_IMAGE_ID, internal=True)
            self.manifest.validate(page_path, COVER_ID, internal=True)
            image_entry = self.manifest.register(
                path,
                media_type,
                COVER_IMAGE_ID,
                properties | {COVER_IMAGE_PROPERTY},
                internal=True,
            )
            page_entry = self.manifest.register(
                page_path, XHTML_MEDIA_TYPE, COVER_ID, internal=True
            )
            page = render_template(
                "cover_image.xhtml",
                image_src=posixpath.basename(image_entry.path),
                title="Cover",
                html5=self.dialect.html5_cover,
            )
            self._container.create(page_entry.path, page)
            handle = self._container.create(image_entry.path, content)
            cover_ref = image_entry.id
        else:
            page_entry, handle = self._add(
                path, media_type, content, COVER_ID, properties, internal=True
            )
            cover_ref = page_entry.id

        self.spine.append(page_entry.id, linear=self.dialect.cover_linear)
        self.guide = [Reference(href=page_entry.path, type="cover", title="Cover")]
        self._metatags.append(Metatag(name="cover", content=cover_ref))
        log.info("Cover stored as %s", page_entry.path)
        return page_entry.id, handle

    # ── Navigation ─────────────────────────────────────────

    def index_generator(self) -> IndexGenerator:
        """A navigation generator of this book's dialect, filled from metadata."""
        return self.dialect.index_generator(self.metadata)

    def add_toc(self, generator: Optional[IndexGenerator] = None, entry_id: str = "") -> str:
        """Render the TOC through ``generator`` and store the result.

        Call once per generator, after all content has been added.
        """
        self._check_open()
        gen = generator if generator is not None else self.index_generator()
        if entry_id:
            self.manifest.validate(gen.get_path_name(), entry_id)

        count = 0
        for count, entry in enumerate(
            self.toc.walk(full=self.dialect.full_toc_walk, labels=False), start=1
        ):
            gen.add_item(
                entry.node.title,
                entry.node.content_path,
                f"toc-{count}",
                depth=entry.depth,
            )
        for ref in self.guide:
            gen.add_landmark(ref.title, ref.href, ref.type)

        document = gen.get_document()
        prop = gen.get_property_value()
        entry, _ = self._add(
            gen.get_path_name(),
            gen.get_mime_type(),
            document,
            entry_id or gen.get_id(),
            {prop} if prop else set(),
            internal=not entry_id,
        )

        if entry.media_type == NCX_MEDIA_TYPE:
            self.spine.set_attr("toc", entry.id)
        elif entry.media_type == XHTML_MEDIA_TYPE:
            self.spine.append(entry.id, linear=False)

        log.info("Stored navigation %s with %d entries", entry.path, count)
        return entry.id

    def set_numbering(self, scheme: NumberingScheme) -> None:
        self.toc.set_numbering(scheme)

    def child_count(self) -> int:
        return self.toc.child_count()

    def child_at(self, n: int) -> Optional[TOCNode]:
        return self.toc.child_at(n)

    def spine_attr(self, key: str, value: str) -> None:
        """Set ``id``, ``toc`` or ``pageprogression`` on the spine. Never fails."""
        self.spine.set_attr(key, value)

    # ── Finalize ───────────────────────────────────────────

    def close(self) -> None:
        """Write the package descriptor and close the archive and the stream.

        Stops at the first failing step; the stream is released either way.
        """
        self._check_open()
        self._closed = True
        try:
            self._finalize()
            descriptor = render_package(
                self.dialect,
                self.metadata,
                self.manifest,
                self.spine,
                self.guide,
                self._metatags,
            )
            self._container.write_raw(self.dialect.package_path, descriptor)
            self._container.close()
        finally:
            self._stream.close()
        log.info(
            "Closed book: %d manifest items, %d spine items",
            len(self.manifest),
            len(self.spine),
        )

    def _finalize(self) -> None:
        if self.dialect.stamp_modified:
            stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
            self._metatags.append(Metatag(property="dcterms:modified", value=stamp))

    # ── Internals ──────────────────────────────────────────

    def _abort(self) -> None:
        # Partial archive is left behind without a package descriptor
        self._closed = True
        try:
            self._container.close()
        finally:
            self._stream.close()

    def _check_open(self) -> None:
        if self._closed:
            raise BookClosedError()

    def _file_options(self, options: object) -> FileOptions:
        if options is None:
            return FileOptions()
        if not isinstance(options, FileOptions):
            raise InvalidOptionTypeError(
                f"Expected FileOptions or PageOptions, got {type(options).__name__}"
            )
        unsupported = options.properties - self.dialect.supported_properties
        if unsupported:
            names = ", ".join(sorted(p.value for p in unsupported))
            raise InvalidOptionTypeError(
                f"EPUB {self.dialect.version} does not support properties: {names}"
            )
        return options

    @staticmethod
    def _properties(options: FileOptions) -> set[str]:
        return {p.value for p in options.properties}

    def _add(
        self,
        path: str,
        media_type: str,
        content: Optional[Content],
        entry_id: str,
        properties: Iterable[str],
        internal: bool = False,
    ) -> tuple[ManifestEntry, Optional[IO[bytes]]]:
        entry = self.manifest.register(
            path, media_type, entry_id, properties, internal=internal
        )
        handle = self._container.create(entry.path, content)
        return entry, handle
