"""
The two tiers of a numbering part: templates and instances.

An AbstractNumbering (w:abstractNum) is a reusable list template holding up
to nine levels. A NumberingInstance (w:num) binds a numId, which paragraphs
reference, to one template.
"""

from dataclasses import dataclass, field

from lxml import etree

from ..constants import MAX_NUMBERING_LEVELS, w
from ..errors import InvalidDefinitionError
from ..models.properties import make_element
from .level import NumberingLevel

MULTI_LEVEL_TYPES = ("singleLevel", "multilevel", "hybridMultilevel")

DEFAULT_BULLETS = ("•", "○", "▪")
DEFAULT_NUMBER_FORMATS = ("decimal", "lowerLetter", "lowerRoman")


class AbstractNumbering:
    """A list template (w:abstractNum).

    Attributes:
        abstract_num_id: Template id
        name: Optional display name
        multi_level_type: "singleLevel", "multilevel" or "hybridMultilevel"
        style_link: Style this template defines (w:styleLink)
        num_style_link: Numbering style this template refers to (w:numStyleLink)

    Example:
        >>> template = AbstractNumbering.bullet_list(0, levels=2)
        >>> [level.text for level in template.get_levels()]
        ['•', '○']
    """

    def __init__(
        self,
        abstract_num_id: int,
        name: str | None = None,
        levels: list[NumberingLevel] | None = None,
        multi_level_type: str = "multilevel",
        style_link: str | None = None,
        num_style_link: str | None = None,
    ) -> None:
        if abstract_num_id < 0:
            raise InvalidDefinitionError("Abstract numbering ID must be non-negative")
        if multi_level_type not in MULTI_LEVEL_TYPES:
            raise InvalidDefinitionError(f"Unknown multi-level type: {multi_level_type}")
        self.abstract_num_id = abstract_num_id
        self.name = name
        self.multi_level_type = multi_level_type
        self.style_link = style_link
        self.num_style_link = num_style_link
        self._levels: dict[int, NumberingLevel] = {}
        for level in levels or []:
            self.add_level(level)

    @property
    def id(self) -> int:
        return self.abstract_num_id

    def add_level(self, level: NumberingLevel) -> "AbstractNumbering":
        """Add or replace the level at ``level.level``."""
        if not 0 <= level.level < MAX_NUMBERING_LEVELS:
            raise InvalidDefinitionError(f"Level must be between 0 and 8, got {level.level}")
        self._levels[level.level] = level
        return self

    def get_level(self, index: int) -> NumberingLevel | None:
        return self._levels.get(index)

    def get_levels(self) -> list[NumberingLevel]:
        """Return levels sorted by index."""
        return [self._levels[index] for index in sorted(self._levels)]

    def has_level(self, index: int) -> bool:
        return index in self._levels

    def remove_level(self, index: int) -> bool:
        return self._levels.pop(index, None) is not None

    @property
    def level_count(self) -> int:
        return len(self._levels)

    def to_xml(self) -> etree._Element:
        """Render the w:abstractNum element.

        A template without levels gets a default decimal level 0, since Word
        rejects empty templates.
        """
        element = make_element("abstractNum", {"abstractNumId": str(self.abstract_num_id)})
        element.append(make_element("multiLevelType", {"val": self.multi_level_type}))
        if self.name:
            element.append(make_element("name", {"val": self.name}))
        if self.style_link:
            element.append(make_element("styleLink", {"val": self.style_link}))
        if self.num_style_link:
            element.append(make_element("numStyleLink", {"val": self.num_style_link}))

        levels = self.get_levels() or [NumberingLevel.decimal(0)]
        for level in levels:
            element.append(level.to_xml())
        return element

    @classmethod
    def from_xml(cls, element: etree._Element) -> "AbstractNumbering":
        """Read a w:abstractNum element. Children the model does not hold are ignored."""

        def val(tag: str) -> str | None:
            child = element.find(w(tag))
            return child.get(w("val")) if child is not None else None

        multi_level_type = val("multiLevelType") or "multilevel"
        if multi_level_type not in MULTI_LEVEL_TYPES:
            multi_level_type = "multilevel"
        return cls(
            abstract_num_id=int(element.get(w("abstractNumId"), "0")),
            name=val("name"),
            levels=[NumberingLevel.from_xml(lvl) for lvl in element.findall(w("lvl"))],
            multi_level_type=multi_level_type,
            style_link=val("styleLink"),
            num_style_link=val("numStyleLink"),
        )

    # Factories

    @classmethod
    def bullet_list(
        cls,
        abstract_num_id: int,
        levels: int = MAX_NUMBERING_LEVELS,
        bullets: tuple[str, ...] | list[str] = DEFAULT_BULLETS,
    ) -> "AbstractNumbering":
        """Create a bullet list template cycling through ``bullets``."""
        template = cls(abstract_num_id, name="Bullet List")
        for index in range(min(levels, MAX_NUMBERING_LEVELS)):
            template.add_level(NumberingLevel.bullet(index, bullets[index % len(bullets)]))
        return template

    @classmethod
    def numbered_list(
        cls,
        abstract_num_id: int,
        levels: int = MAX_NUMBERING_LEVELS,
        formats: tuple[str, ...] | list[str] = DEFAULT_NUMBER_FORMATS,
    ) -> "AbstractNumbering":
        """Create a numbered list template cycling through ``formats``."""
        factories = {
            "decimal": NumberingLevel.decimal,
            "lowerLetter": NumberingLevel.lower_letter,
            "lowerRoman": NumberingLevel.lower_roman,
            "upperLetter": NumberingLevel.upper_letter,
            "upperRoman": NumberingLevel.upper_roman,
        }
        template = cls(abstract_num_id, name="Numbered List")
        for index in range(min(levels, MAX_NUMBERING_LEVELS)):
            factory = factories.get(formats[index % len(formats)], NumberingLevel.decimal)
            template.add_level(factory(index, f"%{index + 1}."))
        return template

    def __repr__(self) -> str:
        return f"<AbstractNumbering id={self.abstract_num_id} levels={self.level_count}>"


@dataclass
class NumberingInstance:
    """A list instance (w:num) pointing at a template.

    Attributes:
        num_id: Instance id referenced by paragraphs' w:numPr
        abstract_num_id: The template this instance uses
        start_overrides: Level index to restart value (w:lvlOverride/w:startOverride)
    """

    num_id: int
    abstract_num_id: int
    start_overrides: dict[int, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.num_id < 0:
            raise InvalidDefinitionError("Numbering instance ID must be non-negative")
        if self.abstract_num_id < 0:
            raise InvalidDefinitionError("Abstract numbering ID must be non-negative")

    @property
    def id(self) -> int:
        return self.num_id

    def to_xml(self) -> etree._Element:
        element = make_element("num", {"numId": str(self.num_id)})
        element.append(make_element("abstractNumId", {"val": str(self.abstract_num_id)}))
        for level in sorted(self.start_overrides):
            override = make_element("lvlOverride", {"ilvl": str(level)})
            override.append(
                make_element("startOverride", {"val": str(self.start_overrides[level])})
            )
            element.append(override)
        return element

    @classmethod
    def from_xml(cls, element: etree._Element) -> "NumberingInstance":
        abstract = element.find(w("abstractNumId"))
        overrides = {}
        for override in element.findall(w("lvlOverride")):
            start = override.find(w("startOverride"))
            if start is not None:
                overrides[int(override.get(w("ilvl"), "0"))] = int(start.get(w("val"), "1"))
        return cls(
            num_id=int(element.get(w("numId"), "0")),
            abstract_num_id=int(abstract.get(w("val"), "0")) if abstract is not None else 0,
            start_overrides=overrides,
        )
