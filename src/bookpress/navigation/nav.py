"""XHTML navigation documents built on BeautifulSoup."""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from bookpress.rendering import render_template

from .base import IndexGenerator, NavItem

XHTML_MEDIA_TYPE = "application/xhtml+xml"


class NavIndexGenerator(IndexGenerator):
    """Plain ``<nav epub:type="toc">`` document with nested ordered lists."""

    MEDIA_TYPE = XHTML_MEDIA_TYPE
    PATH_NAME = "nav.xhtml"
    PROPERTY = "nav"
    ID = "nav"
    LANDMARKS = False

    def __init__(self, title: str = "Contents", language: str = "en") -> None:
        super().__init__()
        markup = render_template(
            "nav.xhtml", title=title, language=language, landmarks=self.LANDMARKS
        )
        self._soup = BeautifulSoup(markup, "xml")
        self._root: Tag = self._soup.find("ol", id="toc-root")
        # Last <li> added at each depth
        self._open_items: list[Tag] = []

    def _anchor(self, title: str, href: str, **attrs: str) -> Tag:
        anchor = self._soup.new_tag("a", attrs={"href": href, **attrs})
        anchor.string = title
        return anchor

    def _append(self, item: NavItem) -> None:
        level = min(item.depth, len(self._open_items))
        del self._open_items[level:]

        if level == 0:
            container = self._root
        else:
            parent = self._open_items[level - 1]
            container = parent.find("ol", recursive=False)
            if container is None:
                container = self._soup.new_tag("ol")
                parent.append(container)

        entry = self._soup.new_tag("li")
        attrs = {"id": item.id} if item.id else {}
        entry.append(self._anchor(item.title, item.href, **attrs))
        container.append(entry)
        self._open_items.append(entry)

    def _render(self) -> bytes:
        # An <ol> without <li> children is invalid in a nav document
        if not self._root.find("li"):
            self._root.decompose()
        return self._soup.encode("utf-8")


class LandmarksNavIndexGenerator(NavIndexGenerator):
    """EPUB 3 navigation document with a landmarks section."""

    PATH_NAME = "index.xhtml"
    LANDMARKS = True

    def __init__(self, title: str = "Contents", language: str = "en") -> None:
        super().__init__(title=title, language=language)
        self._landmarks: Tag = self._soup.find("ol", id="landmarks-root")

    def add_landmark(self, title: str, href: str, kind: str) -> None:
        super().add_landmark(title, href, kind)
        entry = self._soup.new_tag("li")
        entry.append(self._anchor(title, href, **{"epub:type": kind}))
        self._landmarks.append(entry)

    def _render(self) -> bytes:
        if not self._landmarks.find("li"):
            self._landmarks.find_parent("nav").decompose()
        return super()._render()
