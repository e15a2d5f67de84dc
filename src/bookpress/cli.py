"""Bookpress - build EPUB files from a directory of pages."""

import logging
import uuid
from pathlib import Path
from typing import Annotated, Optional

import typer
from bs4 import BeautifulSoup
from rich.console import Console
from rich.table import Table

from bookpress.book import Book
from bookpress.config import BuildConfig, load_config
from bookpress.dialects import DIALECTS
from bookpress.errors import BookError
from bookpress.navigation.ncx import NCX_MEDIA_TYPE, NcxIndexGenerator
from bookpress.package.models import (
    Author,
    Identifier,
    Metadata,
    PageOptions,
    TimestampVersioner,
)

log = logging.getLogger(__name__)

app = typer.Typer(
    name="bookpress",
    help="Assemble EPUB 2.0, 2.0.1 and 3.0 books from XHTML pages.",
    add_completion=False,
)

console = Console()

PAGE_SUFFIXES = {".xhtml", ".html", ".htm"}

MEDIA_TYPES = {
    ".xhtml": "application/xhtml+xml",
    ".html": "application/xhtml+xml",
    ".htm": "application/xhtml+xml",
    ".css": "text/css",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".otf": "font/otf",
    ".ttf": "font/ttf",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".js": "application/javascript",
    ".smil": "application/smil+xml",
    ".mp3": "audio/mpeg",
}


def _setup_logging(config: BuildConfig) -> None:
    if config.log_path is not None:
        config.log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(config.log_path, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root = logging.getLogger("bookpress")
    root.setLevel(config.log_level_number)
    root.addHandler(handler)


def _guess_media_type(path: Path) -> str:
    return MEDIA_TYPES.get(path.suffix.lower(), "application/octet-stream")


def _extract_title(html: bytes) -> str:
    """Try to extract a title from heading tags."""
    soup = BeautifulSoup(html, "lxml")
    for level in ["h1", "h2", "h3", "title"]:
        tag = soup.find(level)
        if tag:
            text = tag.get_text(strip=True)
            if text and len(text) < 200:
                return text
    return ""


def _collect(source: Path, skip: Optional[Path]) -> list[Path]:
    files = []
    for path in sorted(source.rglob("*")):
        if not path.is_file() or path.name.startswith("."):
            continue
        if skip is not None and path.resolve() == skip:
            continue
        files.append(path)
    return files


def build_book(
    source: Path,
    output: Path,
    metadata: Metadata,
    config: BuildConfig,
    cover: Optional[Path] = None,
    ncx: bool = False,
    stamp_version: bool = False,
) -> Book:
    """Assemble every file under ``source`` into ``output``.

    Pages become spine items with one TOC leaf each, titled by their first
    heading; everything else is stored as a plain manifest item.
    """
    skip = cover.resolve() if cover is not None else None
    files = _collect(source, skip)

    book = Book(
        output,
        metadata,
        dialect=config.dialect,
        versioner=TimestampVersioner() if stamp_version else None,
        compress_level=config.compress_level,
    )
    with book:
        if cover is not None:
            book.add_cover(
                f"images/{cover.name}", _guess_media_type(cover), cover.read_bytes()
            )

        for path in files:
            rel = path.relative_to(source).as_posix()
            media_type = _guess_media_type(path)
            data = path.read_bytes()
            if path.suffix.lower() in PAGE_SUFFIXES:
                title = _extract_title(data) or path.stem
                book.add_page(rel, media_type, data, options=PageOptions(toc_item_title=title))
            else:
                book.add_file(rel, media_type, data)

        generator = book.index_generator()
        book.add_toc(generator)
        if ncx and generator.get_mime_type() != NCX_MEDIA_TYPE:
            book.add_toc(
                NcxIndexGenerator(
                    uid=metadata.uid,
                    title=metadata.title,
                    author=metadata.author,
                    language=metadata.language,
                )
            )
    return book


@app.callback()
def main() -> None:
    """Assemble EPUB 2.0, 2.0.1 and 3.0 books from XHTML pages."""


@app.command()
def build(
    source: Annotated[
        Path,
        typer.Argument(
            help="Directory holding pages, stylesheets and images",
            exists=True,
            file_okay=False,
            dir_okay=True,
        ),
    ],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="EPUB file to write"),
    ],
    title: Annotated[
        Optional[str],
        typer.Option("--title", "-t", help="Book title (defaults to the directory name)"),
    ] = None,
    author: Annotated[
        Optional[str],
        typer.Option("--author", "-a", help="Author name"),
    ] = None,
    language: Annotated[
        Optional[str],
        typer.Option("--language", "-l", help="BCP 47 language tag"),
    ] = None,
    identifier: Annotated[
        Optional[str],
        typer.Option("--identifier", help="Unique identifier (a UUID URN by default)"),
    ] = None,
    dialect: Annotated[
        Optional[str],
        typer.Option("--dialect", "-d", help="EPUB version: 2.0, 2.0.1 or 3.0"),
    ] = None,
    cover: Annotated[
        Optional[Path],
        typer.Option("--cover", "-c", help="Cover image or SVG", exists=True, dir_okay=False),
    ] = None,
    ncx: Annotated[
        bool,
        typer.Option("--ncx/--no-ncx", help="Also write an NCX for older readers"),
    ] = False,
    stamp_version: Annotated[
        bool,
        typer.Option("--stamp-version", help="Add an ibooks:version timestamp (3.0 only)"),
    ] = False,
    env_file: Annotated[
        Optional[Path],
        typer.Option("--env-file", help="Read BOOKPRESS_* settings from this file"),
    ] = None,
) -> None:
    """Build an EPUB from SOURCE, pages in path order."""
    try:
        config = load_config(env_file)
    except ValueError as e:
        console.print(f"[red]Configuration error: {e}[/]")
        raise typer.Exit(1)
    if dialect:
        config.dialect = dialect
    if config.dialect not in DIALECTS:
        console.print(f"[red]Unsupported EPUB version: {config.dialect}[/]")
        console.print(f"[dim]Supported: {', '.join(DIALECTS)}[/]")
        raise typer.Exit(1)
    _setup_logging(config)

    metadata = Metadata(
        titles=[title or source.name],
        languages=[language or config.language],
        identifiers=[Identifier(identifier or f"urn:uuid:{uuid.uuid4()}", "uuid")],
        creators=[Author(author, role="aut")] if author else [],
        page_progression=config.page_progression,
    )

    try:
        book = build_book(
            source, output, metadata, config, cover=cover, ncx=ncx, stamp_version=stamp_version
        )
    except BookError as e:
        log.error("Build failed: %s", e)
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)

    table = Table(title=f"EPUB {book.dialect.version}: {output}")
    table.add_column("Id", style="cyan")
    table.add_column("Path")
    table.add_column("Media type", style="dim")
    for entry in book.manifest:
        table.add_row(entry.id, entry.path, entry.media_type)
    console.print(table)
    console.print(
        f"[green]Wrote {len(book.manifest)} manifest items, "
        f"{len(book.spine)} spine items, {book.child_count()} TOC entries[/]"
    )


if __name__ == "__main__":
    app()
