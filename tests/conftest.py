"""Shared fixtures for tests."""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Callable

import pytest
from lxml import etree

from bookpress.book import Book
from bookpress.config import BuildConfig
from bookpress.package.models import Author, Identifier, Metadata

OPF = "{http://www.idpf.org/2007/opf}"
DC = "{http://purl.org/dc/elements/1.1/}"

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00fake-jpeg\xff\xd9"

PAGE = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<html xmlns="http://www.w3.org/1999/xhtml"><head><title>{title}</title></head>'
    "<body><h1>{title}</h1><p>Text.</p></body></html>"
)


def page(title: str) -> str:
    return PAGE.format(title=title)


ENV_KEYS = (
    "BOOKPRESS_DIALECT",
    "BOOKPRESS_LANGUAGE",
    "BOOKPRESS_PAGE_PROGRESSION",
    "BOOKPRESS_COMPRESS_LEVEL",
    "BOOKPRESS_LOG_LEVEL",
    "BOOKPRESS_LOG_PATH",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate config lookup from the real environment and home directory."""
    # load_dotenv writes os.environ directly; registering every key lets
    # monkeypatch remove whatever a test loads
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))


@pytest.fixture
def metadata() -> Metadata:
    return Metadata(
        titles=["Test Book"],
        languages=["en"],
        identifiers=[Identifier("urn:uuid:12345678-1234-5678-1234-567812345678", "uuid")],
        creators=[Author("Jane Doe", role="aut", file_as="Doe, Jane")],
    )


@pytest.fixture
def config(tmp_path: Path) -> BuildConfig:
    return BuildConfig(log_path=tmp_path / "logs" / "bookpress.log")


@pytest.fixture
def epub_path(tmp_path: Path) -> Path:
    return tmp_path / "out.epub"


@pytest.fixture
def make_book(epub_path: Path, metadata: Metadata) -> Callable[..., Book]:
    """Factory for books writing to ``epub_path``; left open books get aborted."""
    books: list[Book] = []

    def factory(dialect: str = "3.0", **kwargs) -> Book:
        book = Book(epub_path, metadata, dialect=dialect, **kwargs)
        books.append(book)
        return book

    yield factory
    for book in books:
        if not book.closed:
            book._abort()


def read_package(epub: Path, package_path: str = "OEBPS/content.opf") -> etree._Element:
    with zipfile.ZipFile(epub) as zf:
        return etree.fromstring(zf.read(package_path))


def manifest_ids(package: etree._Element) -> list[str]:
    return [item.get("id") for item in package.iter(f"{OPF}item")]


def spine_idrefs(package: etree._Element) -> list[str]:
    return [ref.get("idref") for ref in package.iter(f"{OPF}itemref")]
