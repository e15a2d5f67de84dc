"""NCX navigation (EPUB 2)."""

from __future__ import annotations

from lxml import etree

from .base import IndexGenerator, NavItem

NCX_NS = "http://www.daisy.org/z3986/2005/ncx/"
NCX_MEDIA_TYPE = "application/x-dtbncx+xml"
NCX_DOCTYPE = (
    '<!DOCTYPE ncx PUBLIC "-//NISO//DTD ncx 2005-1//EN" '
    '"http://www.daisy.org/z3986/2005/ncx-2005-1.dtd">'
)
XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"


def _q(tag: str) -> str:
    return f"{{{NCX_NS}}}{tag}"


class NcxIndexGenerator(IndexGenerator):
    MEDIA_TYPE = NCX_MEDIA_TYPE
    PATH_NAME = "toc.ncx"
    PROPERTY = ""
    ID = "ncx"

    def __init__(
        self, uid: str = "", title: str = "", author: str = "", language: str = "en"
    ) -> None:
        super().__init__()
        self.uid = uid
        self.title = title
        self.author = author
        self.language = language
        self._items: list[NavItem] = []

    def _append(self, item: NavItem) -> None:
        self._items.append(item)

    def _render(self) -> bytes:
        root = etree.Element(_q("ncx"), nsmap={None: NCX_NS}, version="2005-1")
        root.set(XML_LANG, self.language)

        depth = max((item.depth for item in self._items), default=0) + 1
        head = etree.SubElement(root, _q("head"))
        for name, content in (
            ("dtb:uid", self.uid),
            ("dtb:depth", str(depth)),
            ("dtb:totalPageCount", "0"),
            ("dtb:maxPageNumber", "0"),
        ):
            etree.SubElement(head, _q("meta"), name=name, content=content)

        etree.SubElement(etree.SubElement(root, _q("docTitle")), _q("text")).text = self.title
        if self.author:
            etree.SubElement(
                etree.SubElement(root, _q("docAuthor")), _q("text")
            ).text = self.author

        nav_map = etree.SubElement(root, _q("navMap"))
        open_points: list[etree._Element] = [nav_map]
        for play_order, item in enumerate(self._items, start=1):
            level = min(item.depth, len(open_points) - 1)
            del open_points[level + 1 :]
            point = etree.SubElement(
                open_points[level],
                _q("navPoint"),
                id=item.id or f"navpoint-{play_order}",
                playOrder=str(play_order),
            )
            label = etree.SubElement(point, _q("navLabel"))
            etree.SubElement(label, _q("text")).text = item.title
            etree.SubElement(point, _q("content"), src=item.href)
            open_points.append(point)

        return etree.tostring(
            root,
            xml_declaration=True,
            encoding="UTF-8",
            pretty_print=True,
            doctype=NCX_DOCTYPE,
        )
