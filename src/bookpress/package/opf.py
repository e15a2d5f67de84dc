"""Package descriptor (OPF) serialization."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from lxml import etree

from .manifest import ManifestRegistry
from .models import Metadata, Metatag, Reference
from .spine import SpineSequence

if TYPE_CHECKING:
    from bookpress.dialects import Dialect

OPF_NS = "http://www.idpf.org/2007/opf"
DC_NS = "http://purl.org/dc/elements/1.1/"
XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"
UID_ID = "pub-id"


def _opf(tag: str) -> str:
    return f"{{{OPF_NS}}}{tag}"


def _dc(tag: str) -> str:
    return f"{{{DC_NS}}}{tag}"


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


def _meta(parent: etree._Element, tag: Metatag) -> None:
    attrs = {
        "name": tag.name,
        "content": tag.content,
        "property": tag.property,
        "refines": tag.refines,
    }
    element = etree.SubElement(
        parent, _opf("meta"), {k: v for k, v in attrs.items() if v}
    )
    if tag.value:
        element.text = tag.value


def _identifier_id(index: int) -> str:
    return UID_ID if index == 0 else f"{UID_ID}-{index + 1}"


def _write_metadata(
    root: etree._Element,
    dialect: Dialect,
    metadata: Metadata,
    extra: Iterable[Metatag],
) -> None:
    element = etree.SubElement(root, _opf("metadata"))
    refines: list[Metatag] = []

    for title in metadata.titles:
        etree.SubElement(element, _dc("title")).text = title
    for language in metadata.languages:
        etree.SubElement(element, _dc("language")).text = language

    for index, identifier in enumerate(metadata.identifiers):
        node = etree.SubElement(element, _dc("identifier"), id=_identifier_id(index))
        node.text = identifier.value
        if not identifier.scheme:
            continue
        if dialect.refines_metadata:
            refines.append(
                Metatag(
                    refines=f"#{_identifier_id(index)}",
                    property="identifier-type",
                    value=identifier.scheme,
                )
            )
        else:
            node.set(_opf("scheme"), identifier.scheme)

    for index, creator in enumerate(metadata.creators, start=1):
        node = etree.SubElement(element, _dc("creator"))
        node.text = creator.name
        if dialect.refines_metadata:
            if creator.role or creator.file_as:
                node.set("id", f"creator-{index}")
            if creator.role:
                refines.append(
                    Metatag(refines=f"#creator-{index}", property="role", value=creator.role)
                )
            if creator.file_as:
                refines.append(
                    Metatag(refines=f"#creator-{index}", property="file-as", value=creator.file_as)
                )
        else:
            if creator.role:
                node.set(_opf("role"), creator.role)
            if creator.file_as:
                node.set(_opf("file-as"), creator.file_as)

    for publisher in metadata.publishers:
        etree.SubElement(element, _dc("publisher")).text = publisher

    for date in metadata.dates:
        node = etree.SubElement(element, _dc("date"))
        node.text = date.value
        if date.event and not dialect.refines_metadata:
            node.set(_opf("event"), date.event)

    for tag in [*metadata.metatags, *refines, *extra]:
        _meta(element, tag)


def render_package(
    dialect: Dialect,
    metadata: Metadata,
    manifest: ManifestRegistry,
    spine: SpineSequence,
    guide: Iterable[Reference] = (),
    extra_metatags: Iterable[Metatag] = (),
) -> bytes:
    """Serialize the package descriptor, XML declaration included."""
    nsmap: dict = {None: OPF_NS, "dc": DC_NS}
    if not dialect.refines_metadata:
        nsmap["opf"] = OPF_NS
    nsmap.update(dict(dialect.namespaces))

    root = etree.Element(
        _opf("package"), nsmap=nsmap, version=dialect.version
    )
    root.set("unique-identifier", UID_ID)
    if dialect.prefix:
        root.set("prefix", dialect.prefix)
    if dialect.package_lang:
        root.set(XML_LANG, metadata.language)

    _write_metadata(root, dialect, metadata, extra_metatags)

    manifest_el = etree.SubElement(root, _opf("manifest"))
    for entry in manifest:
        item = etree.SubElement(
            manifest_el,
            _opf("item"),
            id=entry.id,
            href=entry.path,
        )
        item.set("media-type", entry.media_type)
        if dialect.manifest_properties and entry.properties:
            item.set("properties", " ".join(sorted(entry.properties)))

    spine_el = etree.SubElement(root, _opf("spine"))
    if spine.id:
        spine_el.set("id", spine.id)
    if spine.toc:
        spine_el.set("toc", spine.toc)
    if spine.page_progression:
        spine_el.set("page-progression-direction", spine.page_progression)
    for spine_item in spine:
        itemref = etree.SubElement(spine_el, _opf("itemref"), idref=spine_item.idref)
        if spine_item.linear is not None:
            itemref.set("linear", _yes_no(spine_item.linear))
        if dialect.manifest_properties and spine_item.properties:
            itemref.set("properties", " ".join(sorted(spine_item.properties)))

    references = list(guide)
    if references:
        guide_el = etree.SubElement(root, _opf("guide"))
        for ref in references:
            node = etree.SubElement(guide_el, _opf("reference"), type=ref.type, href=ref.href)
            if ref.title:
                node.set("title", ref.title)

    return etree.tostring(
        root, xml_declaration=True, encoding="UTF-8", pretty_print=True
    )
