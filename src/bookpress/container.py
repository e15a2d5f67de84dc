"""Zip container with the EPUB sentinel entry and root-folder prefixing."""

from __future__ import annotations

import logging
import shutil
import zipfile
from typing import IO, BinaryIO, Optional, Union

from bookpress.errors import InvalidPathnameError
from bookpress.rendering import render_template

log = logging.getLogger(__name__)

MIMETYPE_ENTRY = "mimetype"
EPUB_MIMETYPE = b"application/epub+zip"
CONTAINER_ENTRY = "META-INF/container.xml"

Content = Union[bytes, str, BinaryIO]


class ContainerWriter:
    """Writes archive entries exactly once each, under ``root_folder``.

    A handle returned by ``create`` stays open until the caller closes it,
    the next entry is started, or the writer is closed.
    """

    def __init__(
        self,
        stream: BinaryIO,
        root_folder: str,
        package_path: str,
        compress_level: int = 9,
    ) -> None:
        self.root_folder = root_folder.strip("/")
        self._zip = zipfile.ZipFile(
            stream, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=compress_level
        )
        self._names: set[str] = set()
        self._handle: Optional[IO[bytes]] = None

        self._zip.writestr(MIMETYPE_ENTRY, EPUB_MIMETYPE, compress_type=zipfile.ZIP_STORED)
        self._names.add(MIMETYPE_ENTRY)

        self.write_raw(
            CONTAINER_ENTRY,
            render_template("container.xml", package_path=package_path).encode("utf-8"),
        )

    def entry_name(self, path: str) -> str:
        return f"{self.root_folder}/{path.lstrip('/')}"

    def create(self, path: str, content: Optional[Content] = None) -> Optional[IO[bytes]]:
        """Start the entry for ``path``.

        Writes ``content`` and returns None, or returns an open handle when
        ``content`` is None.
        """
        name = self.entry_name(path)
        handle = self._open(name)
        if content is None:
            self._handle = handle
            return handle

        with handle:
            if isinstance(content, str):
                handle.write(content.encode("utf-8"))
            elif isinstance(content, (bytes, bytearray, memoryview)):
                handle.write(content)
            else:
                shutil.copyfileobj(content, handle)
        return None

    def write_raw(self, name: str, data: bytes) -> None:
        """Write an entry outside the root folder."""
        with self._open(name) as handle:
            handle.write(data)

    def _open(self, name: str) -> IO[bytes]:
        if name in self._names:
            raise InvalidPathnameError(name, "archive entry already written")
        self._release_handle()
        self._names.add(name)
        log.debug("Writing archive entry %s", name)
        return self._zip.open(name, "w")

    def _release_handle(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def close(self) -> None:
        self._release_handle()
        self._zip.close()
