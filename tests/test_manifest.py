"""Tests for the manifest registry and the spine."""

from __future__ import annotations

import pytest

from bookpress.errors import DuplicateIdError, InvalidPathnameError, ReservedIdError
from bookpress.package.manifest import ManifestRegistry, normalize_path
from bookpress.package.spine import SpineSequence


class TestManifestRegistry:
    @pytest.mark.parametrize("path", ["", "/", "/index.html", "index.html"])
    def test_reserved_paths(self, path: str):
        registry = ManifestRegistry()
        with pytest.raises(InvalidPathnameError):
            registry.register(path, "application/xhtml+xml")
        assert len(registry) == 0

    def test_extra_reserved_path(self):
        registry = ManifestRegistry(reserved_paths=["content.opf"])
        with pytest.raises(InvalidPathnameError):
            registry.register("/content.opf", "text/plain")

    @pytest.mark.parametrize("entry_id", ["cover", "cover-image"])
    def test_reserved_ids(self, entry_id: str):
        registry = ManifestRegistry()
        with pytest.raises(ReservedIdError):
            registry.register("a.xhtml", "application/xhtml+xml", entry_id)
        assert len(registry) == 0

    def test_reserved_id_allowed_internally(self):
        registry = ManifestRegistry()
        entry = registry.register("c.xhtml", "application/xhtml+xml", "cover", internal=True)
        assert entry.id == "cover"

    def test_duplicate_id(self):
        registry = ManifestRegistry()
        registry.register("a.xhtml", "application/xhtml+xml", "intro")
        with pytest.raises(DuplicateIdError):
            registry.register("b.xhtml", "application/xhtml+xml", "intro")
        assert len(registry) == 1

    def test_duplicate_path(self):
        registry = ManifestRegistry()
        registry.register("/text/a.xhtml", "application/xhtml+xml")
        with pytest.raises(InvalidPathnameError):
            registry.register("text/a.xhtml", "application/xhtml+xml")

    def test_generated_ids_unique(self):
        registry = ManifestRegistry()
        registry.register("x.xhtml", "application/xhtml+xml", "pg1")
        ids = [registry.register(f"{i}.xhtml", "application/xhtml+xml").id for i in range(3)]
        assert ids == ["pg0", "pg2", "pg3"]
        assert len({e.id for e in registry}) == len(registry)

    def test_positions_and_lookup(self):
        registry = ManifestRegistry()
        registry.register("a.css", "text/css", "style")
        registry.register("b.xhtml", "application/xhtml+xml", "b")
        assert registry.position_of("b") == 1
        assert registry.position_of("missing") is None
        assert registry[0].path == "a.css"
        assert "style" in registry

    def test_properties_frozen(self):
        registry = ManifestRegistry()
        entry = registry.register("m.xhtml", "application/xhtml+xml", properties=["mathml"])
        assert entry.properties == frozenset({"mathml"})

    def test_normalize_path(self):
        assert normalize_path("/text/ch1.xhtml") == "text/ch1.xhtml"
        assert normalize_path("text/ch1.xhtml") == "text/ch1.xhtml"


class TestSpineSequence:
    def test_append_order(self):
        spine = SpineSequence()
        spine.append("a")
        spine.append("b", linear=False)
        spine.append("c", linear=True, properties=["page-spread-left"])
        items = list(spine)
        assert [i.idref for i in items] == ["a", "b", "c"]
        assert [i.linear for i in items] == [None, False, True]
        assert items[2].properties == frozenset({"page-spread-left"})

    def test_set_attr(self):
        spine = SpineSequence()
        spine.set_attr("id", "spine")
        spine.set_attr("toc", "ncx")
        spine.set_attr("pageprogression", "rtl")
        assert (spine.id, spine.toc, spine.page_progression) == ("spine", "ncx", "rtl")

    def test_unknown_attr_ignored(self, caplog):
        spine = SpineSequence(page_progression="ltr")
        spine.set_attr("bogus", "x")
        assert spine.page_progression == "ltr"
        assert "bogus" in caplog.text
