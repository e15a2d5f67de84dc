"""Numbering schemes for table-of-contents labels."""

from __future__ import annotations

import enum
from dataclasses import dataclass

import roman

LETTER_COUNT = 26


class NumberingKind(str, enum.Enum):
    ARABIC = "arabic"
    ROMAN_UPPER = "roman-upper"
    ROMAN_LOWER = "roman-lower"
    LETTER_UPPER = "letter-upper"
    LETTER_LOWER = "letter-lower"

    @property
    def is_lower(self) -> bool:
        return self in (NumberingKind.ROMAN_LOWER, NumberingKind.LETTER_LOWER)

    @property
    def is_letter(self) -> bool:
        return self in (NumberingKind.LETTER_UPPER, NumberingKind.LETTER_LOWER)


@dataclass(frozen=True)
class NumberingScheme:
    """Maps (parent label, position) to a display label.

    Arabic and roman positions are ordinals (1 is the first child); letter
    positions are offsets from ``A`` (0 is the first child). Lowercase
    kinds lowercase the whole composed label.
    """

    kind: NumberingKind = NumberingKind.ARABIC
    prefix: str = ""
    hierarchical: bool = False

    def label(self, parent_label: str, position: int) -> str:
        number = self._render(position)
        text = f"{parent_label}.{number}" if self.hierarchical else number
        return text.lower() if self.kind.is_lower else text

    def position_for(self, index: int) -> int:
        """Convert a zero-based child index to this scheme's position."""
        return index if self.kind.is_letter else index + 1

    def _render(self, position: int) -> str:
        if self.kind is NumberingKind.ARABIC:
            return str(position)
        if self.kind.is_letter:
            if not 0 <= position < LETTER_COUNT:
                raise ValueError(
                    f"Letter numbering supports positions 0-{LETTER_COUNT - 1}, got {position}"
                )
            return chr(ord("A") + position)
        return roman.toRoman(position)

    # Shorthand constructors

    @classmethod
    def arabic(cls, prefix: str = "", hierarchical: bool = False) -> NumberingScheme:
        return cls(NumberingKind.ARABIC, prefix, hierarchical)

    @classmethod
    def upper_roman(cls, prefix: str = "", hierarchical: bool = False) -> NumberingScheme:
        return cls(NumberingKind.ROMAN_UPPER, prefix, hierarchical)

    @classmethod
    def lower_roman(cls, prefix: str = "", hierarchical: bool = False) -> NumberingScheme:
        return cls(NumberingKind.ROMAN_LOWER, prefix, hierarchical)

    @classmethod
    def upper_letter(cls, prefix: str = "", hierarchical: bool = False) -> NumberingScheme:
        return cls(NumberingKind.LETTER_UPPER, prefix, hierarchical)

    @classmethod
    def lower_letter(cls, prefix: str = "", hierarchical: bool = False) -> NumberingScheme:
        return cls(NumberingKind.LETTER_LOWER, prefix, hierarchical)


DEFAULT_NUMBERING = NumberingScheme.arabic("Chapter", hierarchical=True)
