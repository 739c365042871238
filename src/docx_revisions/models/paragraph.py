"""
Paragraph model: an ordered content sequence plus paragraph properties.

Content items are a closed set: Run, Hyperlink and Revision. A paragraph may
also carry a pending paragraph-level property change (w:pPrChange), which
records the properties the paragraph had before a formatting edit.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

from lxml import etree

from .content import Hyperlink, InlineContent, Run
from .properties import build_paragraph_properties, make_element
from .revision import Revision, RevisionType, format_revision_date, utc_now

ParagraphContent = Union[Run, Hyperlink, Revision]


@dataclass
class ParagraphPropertyChange:
    """A pending paragraph property change (w:pPrChange).

    Attributes:
        author: Who changed the formatting
        previous_properties: Paragraph properties before the change
        date: When the change was made
        id: The change id written to w:id
    """

    author: str
    previous_properties: dict[str, Any] = field(default_factory=dict)
    date: datetime = field(default_factory=utc_now)
    id: int = 0

    def to_xml(self) -> etree._Element:
        """Render the w:pPrChange element with previous properties in schema order."""
        change = make_element(
            "pPrChange",
            {"id": str(self.id), "author": self.author, "date": format_revision_date(self.date)},
        )
        change.append(build_paragraph_properties(self.previous_properties))
        return change


class Paragraph:
    """A paragraph's content sequence and formatting.

    Example:
        >>> para = Paragraph([Run("Hello "), Revision.create_insertion("Alice", Run("world"))])
        >>> para.get_text()
        'Hello world'
    """

    def __init__(
        self,
        content: list[ParagraphContent] | None = None,
        properties: dict[str, Any] | None = None,
        property_change: ParagraphPropertyChange | None = None,
    ) -> None:
        self._content: list[ParagraphContent] = list(content or [])
        self.properties: dict[str, Any] = dict(properties or {})
        self.property_change = property_change

    # Content access

    def get_content(self) -> list[ParagraphContent]:
        """Return a copy of the content sequence."""
        return list(self._content)

    def set_content(self, content: list[ParagraphContent]) -> None:
        self._content = list(content)

    def add_run(self, run: Run) -> "Paragraph":
        self._content.append(run)
        return self

    def add_text(self, text: str, properties: dict[str, Any] | None = None) -> "Paragraph":
        return self.add_run(Run(text, dict(properties or {})))

    def add_hyperlink(self, hyperlink: Hyperlink) -> "Paragraph":
        self._content.append(hyperlink)
        return self

    def add_revision(self, revision: Revision) -> "Paragraph":
        self._content.append(revision)
        return self

    def extend(self, items: list[ParagraphContent]) -> "Paragraph":
        self._content.extend(items)
        return self

    def get_revisions(self) -> list[Revision]:
        return [item for item in self._content if isinstance(item, Revision)]

    def has_revisions(self) -> bool:
        return any(isinstance(item, Revision) for item in self._content)

    def get_runs(self) -> list[InlineContent]:
        """Return the non-revision inline items."""
        return [item for item in self._content if not isinstance(item, Revision)]

    def get_text(self) -> str:
        """Get the text as it currently reads, skipping deleted and moved-away content."""
        parts = []
        for item in self._content:
            if isinstance(item, Revision) and item.revision_type.removes_content:
                continue
            parts.append(item.get_text())
        return "".join(parts)

    def get_original_text(self) -> str:
        """Get the text as it read before any tracked insertion or move-in."""
        parts = []
        for item in self._content:
            if isinstance(item, Revision) and item.revision_type in (
                RevisionType.INSERT,
                RevisionType.MOVE_TO,
            ):
                continue
            parts.append(item.get_text())
        return "".join(parts)

    # Formatting

    def set_property(self, key: str, value: Any) -> "Paragraph":
        self.properties[key] = value
        return self

    def track_property_change(
        self,
        author: str,
        new_properties: dict[str, Any],
        date: datetime | None = None,
    ) -> ParagraphPropertyChange:
        """Apply new paragraph properties and record the old ones as a pending change.

        An existing pending change is kept, so the recorded state stays the one
        before the first tracked edit.
        """
        if self.property_change is None:
            self.property_change = ParagraphPropertyChange(
                author=author,
                previous_properties=dict(self.properties),
                date=date or utc_now(),
            )
        self.properties.update(new_properties)
        return self.property_change

    def clear_property_change(self) -> bool:
        """Drop the pending paragraph property change.

        Returns:
            True if there was one to drop
        """
        had_change = self.property_change is not None
        self.property_change = None
        return had_change

    # Serialization

    def to_xml(self) -> etree._Element:
        """Render this paragraph as a w:p element."""
        para = make_element("p")

        if self.properties or self.property_change is not None:
            ppr = build_paragraph_properties(self.properties)
            if self.property_change is not None:
                ppr.append(self.property_change.to_xml())
            para.append(ppr)

        for item in self._content:
            if isinstance(item, Revision):
                for element in item.render_inline():
                    para.append(element)
            else:
                para.append(item.to_xml())
        return para

    def __repr__(self) -> str:
        text = self.get_text()
        preview = text[:40] + "..." if len(text) > 40 else text
        return f"<Paragraph items={len(self._content)}: {preview!r}>"
