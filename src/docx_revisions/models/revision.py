"""
Revision model for tracked changes.

A Revision is one attributable change record: an insertion, deletion, move
half, property change or table-cell operation. It wraps the inline content it
affects and, for property changes, the previous property values.

Revisions are built standalone with a placeholder id of 0 and receive their
real id when registered with a RevisionRegistry.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from lxml import etree

from ..constants import REVISION_DATE_FORMAT, w
from ..errors import InvalidRevisionError
from .content import InlineContent, Run
from .properties import (
    build_paragraph_properties,
    build_property_bag,
    build_run_properties,
    make_element,
)


class RevisionType(Enum):
    """Kinds of tracked changes.

    Values are the names used in criteria files and reports; ``element_name``
    gives the OOXML element each kind is written as.
    """

    INSERT = "insert"
    DELETE = "delete"
    RUN_PROPERTY_CHANGE = "runPropertyChange"
    PARAGRAPH_PROPERTY_CHANGE = "paragraphPropertyChange"
    TABLE_PROPERTY_CHANGE = "tablePropertyChange"
    TABLE_EXCEPTION_PROPERTY_CHANGE = "tableExceptionPropertyChange"
    TABLE_ROW_PROPERTY_CHANGE = "tableRowPropertyChange"
    TABLE_CELL_PROPERTY_CHANGE = "tableCellPropertyChange"
    SECTION_PROPERTY_CHANGE = "sectionPropertyChange"
    MOVE_FROM = "moveFrom"
    MOVE_TO = "moveTo"
    TABLE_CELL_INSERT = "tableCellInsert"
    TABLE_CELL_DELETE = "tableCellDelete"
    TABLE_CELL_MERGE = "tableCellMerge"
    NUMBERING_CHANGE = "numberingChange"

    @property
    def element_name(self) -> str:
        """Local name of the w: element this kind serializes as."""
        return _ELEMENT_NAMES[self]

    @property
    def property_element(self) -> str | None:
        """Local name of the property bag a property-change kind carries."""
        return _PROPERTY_ELEMENTS.get(self)

    @property
    def is_property_change(self) -> bool:
        return self in _PROPERTY_ELEMENTS

    @property
    def is_content_change(self) -> bool:
        """Insertions, deletions and both move halves."""
        return self in CONTENT_REVISION_TYPES

    @property
    def is_move(self) -> bool:
        return self in (RevisionType.MOVE_FROM, RevisionType.MOVE_TO)

    @property
    def removes_content(self) -> bool:
        """Kinds whose text is shown as deleted (w:delText)."""
        return self in (RevisionType.DELETE, RevisionType.MOVE_FROM)


_ELEMENT_NAMES = {
    RevisionType.INSERT: "ins",
    RevisionType.DELETE: "del",
    RevisionType.RUN_PROPERTY_CHANGE: "rPrChange",
    RevisionType.PARAGRAPH_PROPERTY_CHANGE: "pPrChange",
    RevisionType.TABLE_PROPERTY_CHANGE: "tblPrChange",
    RevisionType.TABLE_EXCEPTION_PROPERTY_CHANGE: "tblPrExChange",
    RevisionType.TABLE_ROW_PROPERTY_CHANGE: "trPrChange",
    RevisionType.TABLE_CELL_PROPERTY_CHANGE: "tcPrChange",
    RevisionType.SECTION_PROPERTY_CHANGE: "sectPrChange",
    RevisionType.MOVE_FROM: "moveFrom",
    RevisionType.MOVE_TO: "moveTo",
    RevisionType.TABLE_CELL_INSERT: "cellIns",
    RevisionType.TABLE_CELL_DELETE: "cellDel",
    RevisionType.TABLE_CELL_MERGE: "cellMerge",
    RevisionType.NUMBERING_CHANGE: "numberingChange",
}

_PROPERTY_ELEMENTS = {
    RevisionType.RUN_PROPERTY_CHANGE: "rPr",
    RevisionType.PARAGRAPH_PROPERTY_CHANGE: "pPr",
    RevisionType.TABLE_PROPERTY_CHANGE: "tblPr",
    RevisionType.TABLE_EXCEPTION_PROPERTY_CHANGE: "tblPrEx",
    RevisionType.TABLE_ROW_PROPERTY_CHANGE: "trPr",
    RevisionType.TABLE_CELL_PROPERTY_CHANGE: "tcPr",
    RevisionType.SECTION_PROPERTY_CHANGE: "sectPr",
    RevisionType.NUMBERING_CHANGE: "numPr",
}

CONTENT_REVISION_TYPES = frozenset(
    {RevisionType.INSERT, RevisionType.DELETE, RevisionType.MOVE_FROM, RevisionType.MOVE_TO}
)

PROPERTY_REVISION_TYPES = frozenset(_PROPERTY_ELEMENTS)

TABLE_CELL_REVISION_TYPES = frozenset(
    {RevisionType.TABLE_CELL_INSERT, RevisionType.TABLE_CELL_DELETE, RevisionType.TABLE_CELL_MERGE}
)


def format_revision_date(date: datetime) -> str:
    """Format a revision timestamp as ISO 8601 without fractional seconds.

    Naive datetimes are taken to be UTC.

    Example:
        >>> format_revision_date(datetime(2024, 1, 15, 10, 30, 0, 123456))
        '2024-01-15T10:30:00Z'
    """
    return as_utc(date).strftime(REVISION_DATE_FORMAT)


def parse_revision_date(value: str | None) -> datetime | None:
    """Parse a w:date attribute, returning None when it is missing or malformed."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(eq=False)
class Revision:
    """One tracked change.

    Equality is identity: a Revision occupies exactly one position in one
    paragraph and is never shared.

    Attributes:
        revision_type: The kind of change
        author: Who made the change
        content: Affected inline content (runs and hyperlinks)
        date: When the change was made (defaults to now, UTC)
        id: Registry-assigned id; 0 until registered
        previous_properties: Property values before a property change
        new_properties: Property values after a property change
        move_id: Links the moveFrom and moveTo halves of a move
        move_location: Optional name of the move range
        field_instruction: Render deleted text as w:delInstrText

    Example:
        >>> rev = Revision.create_insertion("Alice", Run("new text"))
        >>> rev.get_text()
        'new text'
    """

    revision_type: RevisionType
    author: str
    content: list[InlineContent] = field(default_factory=list)
    date: datetime = field(default_factory=utc_now)
    id: int = 0
    previous_properties: dict[str, Any] | None = None
    new_properties: dict[str, Any] | None = None
    move_id: str | None = None
    move_location: str | None = None
    field_instruction: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.content, list):
            self.content = [self.content]
        if self.date is None:
            self.date = utc_now()
        self._validate()

    def _validate(self) -> None:
        kind = self.revision_type
        if kind.is_content_change and not self.content:
            raise InvalidRevisionError(kind.value, "content must not be empty")
        if kind.is_property_change and not (self.previous_properties or self.new_properties):
            raise InvalidRevisionError(
                kind.value, "previous_properties or new_properties is required"
            )
        if kind.is_move and not self.move_id:
            raise InvalidRevisionError(kind.value, "move_id is required")

    # Factories

    @classmethod
    def create_insertion(
        cls,
        author: str,
        content: InlineContent | list[InlineContent],
        date: datetime | None = None,
    ) -> "Revision":
        return cls(RevisionType.INSERT, author, content, date)

    @classmethod
    def create_deletion(
        cls,
        author: str,
        content: InlineContent | list[InlineContent],
        date: datetime | None = None,
    ) -> "Revision":
        return cls(RevisionType.DELETE, author, content, date)

    @classmethod
    def create_field_instruction_deletion(
        cls,
        author: str,
        content: InlineContent | list[InlineContent],
        date: datetime | None = None,
    ) -> "Revision":
        """Create a deletion of field instruction text (rendered as w:delInstrText)."""
        return cls(RevisionType.DELETE, author, content, date, field_instruction=True)

    @classmethod
    def create_move_from(
        cls,
        author: str,
        content: InlineContent | list[InlineContent],
        move_id: str,
        date: datetime | None = None,
    ) -> "Revision":
        return cls(RevisionType.MOVE_FROM, author, content, date, move_id=move_id)

    @classmethod
    def create_move_to(
        cls,
        author: str,
        content: InlineContent | list[InlineContent],
        move_id: str,
        date: datetime | None = None,
    ) -> "Revision":
        return cls(RevisionType.MOVE_TO, author, content, date, move_id=move_id)

    @classmethod
    def create_property_change(
        cls,
        revision_type: RevisionType,
        author: str,
        content: InlineContent | list[InlineContent],
        previous_properties: dict[str, Any],
        new_properties: dict[str, Any] | None = None,
        date: datetime | None = None,
    ) -> "Revision":
        """Create any property-change revision.

        Args:
            revision_type: A property-change kind
            author: Who made the change
            content: The content whose properties changed
            previous_properties: Values before the change
            new_properties: Values after the change (already applied to content)
            date: When the change was made

        Raises:
            InvalidRevisionError: If ``revision_type`` is not a property-change kind
        """
        if not revision_type.is_property_change:
            raise InvalidRevisionError(revision_type.value, "not a property-change kind")
        return cls(
            revision_type,
            author,
            content,
            date,
            previous_properties=previous_properties,
            new_properties=new_properties,
        )

    @classmethod
    def create_run_property_change(
        cls,
        author: str,
        content: InlineContent | list[InlineContent],
        previous_properties: dict[str, Any],
        date: datetime | None = None,
    ) -> "Revision":
        new_properties = None
        items = content if isinstance(content, list) else [content]
        if items and isinstance(items[0], Run):
            new_properties = dict(items[0].properties) or None
        return cls.create_property_change(
            RevisionType.RUN_PROPERTY_CHANGE,
            author,
            content,
            previous_properties,
            new_properties,
            date,
        )

    @classmethod
    def create_paragraph_property_change(
        cls,
        author: str,
        content: InlineContent | list[InlineContent],
        previous_properties: dict[str, Any],
        date: datetime | None = None,
    ) -> "Revision":
        return cls.create_property_change(
            RevisionType.PARAGRAPH_PROPERTY_CHANGE, author, content, previous_properties, None, date
        )

    @classmethod
    def create_table_property_change(
        cls,
        author: str,
        content: InlineContent | list[InlineContent],
        previous_properties: dict[str, Any],
        date: datetime | None = None,
    ) -> "Revision":
        return cls.create_property_change(
            RevisionType.TABLE_PROPERTY_CHANGE, author, content, previous_properties, None, date
        )

    @classmethod
    def create_table_exception_property_change(
        cls,
        author: str,
        content: InlineContent | list[InlineContent],
        previous_properties: dict[str, Any],
        date: datetime | None = None,
    ) -> "Revision":
        return cls.create_property_change(
            RevisionType.TABLE_EXCEPTION_PROPERTY_CHANGE,
            author,
            content,
            previous_properties,
            None,
            date,
        )

    @classmethod
    def from_text(
        cls,
        revision_type: RevisionType,
        author: str,
        text: str,
        date: datetime | None = None,
        move_id: str | None = None,
    ) -> "Revision":
        """Create a content revision around a single plain run of ``text``."""
        return cls(revision_type, author, [Run(text)], date, move_id=move_id)

    # Accessors

    def get_text(self) -> str:
        return "".join(item.get_text() for item in self.content)

    def get_content(self) -> list[InlineContent]:
        return list(self.content)

    def add_content(self, item: InlineContent) -> "Revision":
        self.content.append(item)
        return self

    @property
    def is_property_change(self) -> bool:
        return self.revision_type.is_property_change

    @property
    def is_move(self) -> bool:
        return self.revision_type.is_move

    # Serialization

    def _attributes(self) -> dict[str, str]:
        attrs = {
            "id": str(self.id),
            "author": self.author,
            "date": format_revision_date(self.date),
        }
        if self.revision_type.is_move and self.move_id:
            attrs["moveId"] = self.move_id
        return attrs

    def _property_bag(self) -> etree._Element:
        kind = self.revision_type
        tag = kind.property_element or "rPr"
        if kind is RevisionType.PARAGRAPH_PROPERTY_CHANGE:
            return build_paragraph_properties(self.previous_properties, tag)
        if kind is RevisionType.RUN_PROPERTY_CHANGE:
            return build_run_properties(self.previous_properties, tag)
        return build_property_bag(tag, self.previous_properties)

    def to_xml(self) -> etree._Element:
        """Render the change element.

        Content kinds wrap their runs (deleted kinds use w:delText, or
        w:delInstrText for field instructions). Property-change kinds hold
        only a property bag with the previous values.

        Returns:
            The change element (w:ins, w:del, w:rPrChange, ...)
        """
        element = make_element(self.revision_type.element_name, self._attributes())

        if self.revision_type.is_property_change:
            element.append(self._property_bag())
            return element

        if self.revision_type.is_content_change:
            deleted = self.revision_type.removes_content
            for item in self.content:
                element.append(
                    item.to_xml(deleted=deleted, field_instruction=self.field_instruction)
                )

        return element

    def render_inline(self) -> list[etree._Element]:
        """Render the elements this revision contributes to a paragraph.

        Content kinds contribute their wrapper element. A run property change
        contributes its runs, each carrying the w:rPrChange record in its
        w:rPr. Other property kinds describe their owning table, row, cell or
        section, so only their content is emitted here.
        """
        kind = self.revision_type
        if kind is RevisionType.RUN_PROPERTY_CHANGE:
            return [item.to_xml(property_change=self.to_xml()) for item in self.content]
        if kind.is_property_change:
            return [item.to_xml() for item in self.content]
        return [self.to_xml()]

    def __repr__(self) -> str:
        text = self.get_text()
        text_preview = text[:30] + "..." if len(text) > 30 else text
        return (
            f"<Revision id={self.id} type={self.revision_type.value} "
            f"author={self.author!r}: {text_preview!r}>"
        )


def element_to_revision_type(element: etree._Element) -> RevisionType | None:
    """Map a change element to its RevisionType, or None when it is not one."""
    for kind, name in _ELEMENT_NAMES.items():
        if element.tag == w(name):
            return kind
    return None


def as_utc(date: datetime) -> datetime:
    """Return ``date`` as an aware UTC datetime; naive values are taken to be UTC."""
    if date.tzinfo is None:
        return date.replace(tzinfo=timezone.utc)
    return date.astimezone(timezone.utc)
