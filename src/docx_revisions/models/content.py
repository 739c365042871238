"""
Inline content model: text runs and hyperlinks.

These are the items a paragraph holds and a Revision wraps. They know how to
report their text, copy themselves and render to OOXML, including the
deleted-text variants a deletion revision needs.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Union

from lxml import etree

from ..constants import NSMAP, OFFICE_RELATIONSHIPS_NAMESPACE
from ..constants import r as _r
from ..constants import w
from ..constants import xml as _xml
from .properties import build_run_properties, make_element


@dataclass
class Run:
    """A run of text sharing one set of run properties.

    Attributes:
        text: The run text
        properties: Run properties keyed by w: local names
            (e.g. ``{"b": True, "sz": "24"}``)

    Example:
        >>> run = Run("Hello", {"b": True})
        >>> run.get_text()
        'Hello'
    """

    text: str = ""
    properties: dict[str, Any] = field(default_factory=dict)

    def get_text(self) -> str:
        return self.text

    def set_text(self, text: str) -> "Run":
        self.text = text
        return self

    def clone(self) -> "Run":
        """Return an independent copy of this run."""
        return Run(self.text, copy.deepcopy(self.properties))

    def to_xml(
        self,
        deleted: bool = False,
        field_instruction: bool = False,
        property_change: etree._Element | None = None,
    ) -> etree._Element:
        """Render this run as a w:r element.

        Args:
            deleted: Use w:delText instead of w:t
            field_instruction: With ``deleted``, use w:delInstrText
            property_change: A w:rPrChange record to place at the end of w:rPr

        Returns:
            The w:r element
        """
        run = make_element("r")

        if self.properties or property_change is not None:
            rpr = build_run_properties(self.properties)
            if property_change is not None:
                rpr.append(property_change)
            run.append(rpr)

        if deleted:
            text_tag = "delInstrText" if field_instruction else "delText"
        else:
            text_tag = "t"
        text_elem = make_element(text_tag)
        text_elem.text = self.text
        if self.text and (self.text[0].isspace() or self.text[-1].isspace()):
            text_elem.set(_xml("space"), "preserve")
        run.append(text_elem)
        return run


@dataclass
class Hyperlink:
    """A hyperlink wrapping one or more runs.

    External targets are referenced through a relationship id; internal
    targets through a bookmark anchor. ``url`` is informational only since
    relationships belong to the package.

    Attributes:
        runs: The runs displayed as link text
        url: Target URL, if known
        anchor: Bookmark name for internal links
        relationship_id: r:id of the external target relationship
    """

    runs: list[Run] = field(default_factory=list)
    url: str | None = None
    anchor: str | None = None
    relationship_id: str | None = None

    def get_text(self) -> str:
        return "".join(run.get_text() for run in self.runs)

    def get_url(self) -> str | None:
        return self.url

    def clone(self) -> "Hyperlink":
        return Hyperlink(
            runs=[run.clone() for run in self.runs],
            url=self.url,
            anchor=self.anchor,
            relationship_id=self.relationship_id,
        )

    def to_xml(
        self,
        deleted: bool = False,
        field_instruction: bool = False,
        property_change: etree._Element | None = None,
    ) -> etree._Element:
        link = etree.Element(w("hyperlink"), nsmap={**NSMAP, "r": OFFICE_RELATIONSHIPS_NAMESPACE})
        if self.relationship_id:
            link.set(_r("id"), self.relationship_id)
        if self.anchor:
            link.set(w("anchor"), self.anchor)
        for run in self.runs:
            change = copy.deepcopy(property_change) if property_change is not None else None
            link.append(run.to_xml(deleted, field_instruction, change))
        return link


InlineContent = Union[Run, Hyperlink]


def is_run_content(item: Any) -> bool:
    """Check whether an item is a text run."""
    return isinstance(item, Run)


def is_hyperlink_content(item: Any) -> bool:
    """Check whether an item is a hyperlink."""
    return isinstance(item, Hyperlink)


def is_inline_content(item: Any) -> bool:
    return isinstance(item, (Run, Hyperlink))
