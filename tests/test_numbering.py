"""Tests for TOC numbering schemes."""

from __future__ import annotations

import pytest

from bookpress.toc.numbering import DEFAULT_NUMBERING, NumberingKind, NumberingScheme


class TestHierarchical:
    @pytest.mark.parametrize(
        "scheme, position, expected",
        [
            (NumberingScheme.arabic("Chapter", True), 1, "Chapter.1"),
            (NumberingScheme.upper_roman("Chapter", True), 1, "Chapter.I"),
            (NumberingScheme.lower_roman("Chapter", True), 2, "chapter.ii"),
            (NumberingScheme.upper_letter("Chapter", True), 0, "Chapter.A"),
            (NumberingScheme.upper_letter("Chapter", True), 25, "Chapter.Z"),
            (NumberingScheme.lower_letter("Chapter", True), 2, "chapter.c"),
        ],
    )
    def test_labels(self, scheme: NumberingScheme, position: int, expected: str):
        assert scheme.label("Chapter", position) == expected

    def test_nested_parent_label(self):
        scheme = NumberingScheme.arabic(hierarchical=True)
        assert scheme.label("Chapter.2", 3) == "Chapter.2.3"


class TestFlat:
    def test_arabic(self):
        assert NumberingScheme.arabic().label("ignored", 3) == "3"

    def test_upper_roman(self):
        assert NumberingScheme.upper_roman().label("ignored", 4) == "IV"

    def test_lower_roman(self):
        assert NumberingScheme.lower_roman().label("", 9) == "ix"

    def test_lower_letter(self):
        assert NumberingScheme.lower_letter().label("", 1) == "b"


class TestLetterRange:
    @pytest.mark.parametrize("position", [-1, 26, 100])
    def test_out_of_range_rejected(self, position: int):
        with pytest.raises(ValueError):
            NumberingScheme.upper_letter().label("", position)


class TestScheme:
    def test_prefix_unchanged(self):
        assert NumberingScheme.lower_roman("Part").prefix == "Part"

    def test_position_for(self):
        assert NumberingScheme.arabic().position_for(0) == 1
        assert NumberingScheme.upper_roman().position_for(1) == 2
        assert NumberingScheme.upper_letter().position_for(0) == 0

    def test_default(self):
        assert DEFAULT_NUMBERING.kind is NumberingKind.ARABIC
        assert DEFAULT_NUMBERING.prefix == "Chapter"
        assert DEFAULT_NUMBERING.hierarchical is True

    def test_immutable(self):
        with pytest.raises(AttributeError):
            DEFAULT_NUMBERING.prefix = "Part"  # type: ignore[misc]
