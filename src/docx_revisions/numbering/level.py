"""
NumberingLevel: formatting for one level (0-8) of a list definition.

A level specifies the number format (bullet, decimal, roman, ...), the level
text template such as "%1.", alignment, indentation and the font used for
the number or bullet.
"""

from dataclasses import dataclass, fields
from typing import Any

from lxml import etree

from ..constants import MAX_NUMBERING_LEVELS, w
from ..errors import InvalidDefinitionError
from ..models.properties import make_element

NUMBER_FORMATS = (
    "bullet",
    "decimal",
    "lowerRoman",
    "upperRoman",
    "lowerLetter",
    "upperLetter",
    "ordinal",
    "cardinalText",
    "ordinalText",
    "hex",
    "chicago",
    "decimalZero",
    "none",
)

DEFAULT_FONT_SIZE = 22  # half-points, 11pt
DEFAULT_HANGING_INDENT = 360  # twips


def default_left_indent(level: int) -> int:
    """Left indent in twips for a level: half an inch per level."""
    return 720 * (level + 1)


@dataclass
class NumberingLevel:
    """One level of an abstract numbering definition.

    Attributes:
        level: Level index, 0 (outermost) to 8
        format: Number format (w:numFmt), e.g. "decimal" or "bullet"
        text: Level text template (w:lvlText), e.g. "%1." or a bullet character
        alignment: Number alignment (w:lvlJc)
        start: Starting value
        left_indent: Left indent in twips (default: 720 per level)
        hanging_indent: Hanging indent in twips
        font: Font for the number or bullet (default: Symbol for bullets, else Calibri)
        font_size: Size in half-points
        color: Hex color of the number, if set
        bold: Bold number
        italic: Italic number
        underline: Underline style, if set
        suffix: What follows the number: "tab", "space" or "nothing"
        is_legal: Legal numbering style (w:isLgl)
        restart_level: Restart after this level (w:lvlRestart), if set

    Example:
        >>> level = NumberingLevel.decimal(0)
        >>> level.text, level.left_indent
        ('%1.', 720)
    """

    level: int
    format: str
    text: str
    alignment: str = "left"
    start: int = 1
    left_indent: int | None = None
    hanging_indent: int = DEFAULT_HANGING_INDENT
    font: str | None = None
    font_size: int = DEFAULT_FONT_SIZE
    color: str | None = None
    bold: bool = False
    italic: bool = False
    underline: str | None = None
    suffix: str = "tab"
    is_legal: bool = False
    restart_level: int | None = None

    def __post_init__(self) -> None:
        if self.left_indent is None:
            self.left_indent = default_left_indent(self.level)
        if self.font is None:
            self.font = "Symbol" if self.format == "bullet" else "Calibri"
        self.validate()

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            InvalidDefinitionError: If the level, indents or start are out of range
        """
        if not 0 <= self.level < MAX_NUMBERING_LEVELS:
            raise InvalidDefinitionError(f"Level must be between 0 and 8, got {self.level}")
        if self.left_indent < 0:
            raise InvalidDefinitionError("Left indent must be non-negative")
        if self.hanging_indent < 0:
            raise InvalidDefinitionError("Hanging indent must be non-negative")
        if self.start < 0:
            raise InvalidDefinitionError("Start value must be non-negative")

    def set_indent(self, left: int, hanging: int | None = None) -> "NumberingLevel":
        """Set the indentation, rejecting negative values."""
        if left < 0 or (hanging is not None and hanging < 0):
            raise InvalidDefinitionError("Indentation must be non-negative")
        self.left_indent = left
        if hanging is not None:
            self.hanging_indent = hanging
        return self

    def properties(self) -> dict[str, Any]:
        """Return all level fields as a mapping."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def to_xml(self) -> etree._Element:
        """Render the w:lvl element with children in CT_Lvl order."""
        lvl = make_element("lvl", {"ilvl": str(self.level)})
        lvl.append(make_element("start", {"val": str(self.start)}))
        lvl.append(make_element("numFmt", {"val": self.format}))
        if self.restart_level is not None:
            lvl.append(make_element("lvlRestart", {"val": str(self.restart_level)}))
        if self.is_legal:
            lvl.append(make_element("isLgl"))
        lvl.append(make_element("suff", {"val": self.suffix}))
        lvl.append(make_element("lvlText", {"val": self.text}))
        lvl.append(make_element("lvlJc", {"val": self.alignment}))

        ppr = make_element("pPr")
        ppr.append(
            make_element(
                "ind", {"left": str(self.left_indent), "hanging": str(self.hanging_indent)}
            )
        )
        lvl.append(ppr)

        rpr = make_element("rPr")
        rpr.append(
            make_element(
                "rFonts",
                {"ascii": self.font, "hAnsi": self.font, "cs": self.font, "hint": "default"},
            )
        )
        if self.bold:
            rpr.append(make_element("b"))
        if self.italic:
            rpr.append(make_element("i"))
        if self.color:
            rpr.append(make_element("color", {"val": self.color}))
        rpr.append(make_element("sz", {"val": str(self.font_size)}))
        rpr.append(make_element("szCs", {"val": str(self.font_size)}))
        if self.underline:
            rpr.append(make_element("u", {"val": self.underline}))
        lvl.append(rpr)
        return lvl

    @classmethod
    def from_xml(cls, element: etree._Element) -> "NumberingLevel":
        """Read a w:lvl element. Missing values fall back to the defaults."""

        def val(tag: str, parent: etree._Element = element) -> str | None:
            child = parent.find(w(tag))
            return child.get(w("val")) if child is not None else None

        level = int(element.get(w("ilvl"), "0"))
        kwargs: dict[str, Any] = {
            "level": level,
            "format": val("numFmt") or "decimal",
            "text": val("lvlText") or "",
            "alignment": val("lvlJc") or "left",
            "start": int(val("start") or 1),
            "suffix": val("suff") or "tab",
            "is_legal": element.find(w("isLgl")) is not None,
        }
        if val("lvlRestart") is not None:
            kwargs["restart_level"] = int(val("lvlRestart"))

        ind = element.find(f"{w('pPr')}/{w('ind')}")
        if ind is not None:
            left = ind.get(w("left")) or ind.get(w("start"))
            if left is not None:
                kwargs["left_indent"] = int(left)
            if ind.get(w("hanging")) is not None:
                kwargs["hanging_indent"] = int(ind.get(w("hanging")))

        rpr = element.find(w("rPr"))
        if rpr is not None:
            fonts = rpr.find(w("rFonts"))
            if fonts is not None and fonts.get(w("ascii")):
                kwargs["font"] = fonts.get(w("ascii"))
            if val("sz", rpr) is not None:
                kwargs["font_size"] = int(val("sz", rpr))
            kwargs["color"] = val("color", rpr)
            kwargs["bold"] = rpr.find(w("b")) is not None
            kwargs["italic"] = rpr.find(w("i")) is not None
            kwargs["underline"] = val("u", rpr)

        return cls(**kwargs)

    # Factories

    @classmethod
    def bullet(cls, level: int, bullet: str = "•") -> "NumberingLevel":
        return cls(level=level, format="bullet", text=bullet, font="Symbol")

    @classmethod
    def decimal(cls, level: int, template: str | None = None) -> "NumberingLevel":
        return cls(level=level, format="decimal", text=template or f"%{level + 1}.")

    @classmethod
    def lower_roman(cls, level: int, template: str | None = None) -> "NumberingLevel":
        return cls(level=level, format="lowerRoman", text=template or f"%{level + 1}.")

    @classmethod
    def upper_roman(cls, level: int, template: str | None = None) -> "NumberingLevel":
        return cls(level=level, format="upperRoman", text=template or f"%{level + 1}.")

    @classmethod
    def lower_letter(cls, level: int, template: str | None = None) -> "NumberingLevel":
        return cls(level=level, format="lowerLetter", text=template or f"%{level + 1}.")

    @classmethod
    def upper_letter(cls, level: int, template: str | None = None) -> "NumberingLevel":
        return cls(level=level, format="upperLetter", text=template or f"%{level + 1}.")
