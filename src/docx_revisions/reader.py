"""
Reading WordprocessingML paragraphs into the in-memory revision model.

parse_paragraph() turns a w:p element into a Paragraph whose content holds
Runs, Hyperlinks and Revisions. Every revision found is registered with the
given registry, so ids follow document order regardless of the w:id values in
the source XML.
"""

import logging
from collections.abc import Iterator
from datetime import datetime

from lxml import etree

from .constants import local_name, r, w
from .errors import InvalidRevisionError
from .models.content import Hyperlink, InlineContent, Run
from .models.paragraph import Paragraph, ParagraphContent, ParagraphPropertyChange
from .models.properties import parse_paragraph_properties, parse_property_bag
from .models.revision import (
    Revision,
    RevisionType,
    element_to_revision_type,
    parse_revision_date,
    utc_now,
)
from .registry import RevisionRegistry

logger = logging.getLogger(__name__)

_TEXT_TAGS = {w("t"), w("delText"), w("instrText"), w("delInstrText")}
_MOVE_RANGE_STARTS = {w("moveFromRangeStart"), w("moveToRangeStart")}


def _read_date(element: etree._Element) -> datetime:
    raw = element.get(w("date"))
    date = parse_revision_date(raw)
    if date is None:
        if raw:
            logger.warning("Unparseable revision date %r on w:%s", raw, local_name(element.tag))
        return utc_now()
    return date


def _read_id(element: etree._Element) -> int:
    try:
        return int(element.get(w("id"), "0"))
    except ValueError:
        return 0


def parse_run(element: etree._Element) -> Run:
    """Read a w:r element into a Run.

    Text comes from w:t, w:delText and field instruction elements; w:tab
    becomes a tab character and w:br a newline.
    """
    parts = []
    for child in element:
        if child.tag in _TEXT_TAGS:
            parts.append(child.text or "")
        elif child.tag == w("tab"):
            parts.append("\t")
        elif child.tag in (w("br"), w("cr")):
            parts.append("\n")
    return Run("".join(parts), parse_property_bag(element.find(w("rPr"))))


def _hyperlink(element: etree._Element, runs: list[Run]) -> Hyperlink:
    return Hyperlink(
        runs=runs,
        anchor=element.get(w("anchor")),
        relationship_id=element.get(r("id")),
    )


def parse_hyperlink(element: etree._Element) -> Hyperlink:
    """Read a w:hyperlink element's direct runs into a Hyperlink.

    Tracked changes inside the link are not part of a Hyperlink; see
    parse_paragraph, which splits such links around their revisions.
    """
    runs = []
    for child in element:
        if child.tag == w("r"):
            runs.append(parse_run(child))
        elif element_to_revision_type(child) is not None:
            logger.warning("Skipping w:%s nested in w:hyperlink", local_name(child.tag))
    return _hyperlink(element, runs)


def _parse_inline(element: etree._Element) -> list[InlineContent]:
    items: list[InlineContent] = []
    for child in element:
        if child.tag == w("r"):
            items.append(parse_run(child))
        elif child.tag == w("hyperlink"):
            items.append(parse_hyperlink(child))
    return items


def _has_field_instruction(element: etree._Element) -> bool:
    return any(True for _ in element.iter(w("delInstrText")))


def _run_property_change(element: etree._Element) -> Revision | None:
    rpr = element.find(w("rPr"))
    change = rpr.find(w("rPrChange")) if rpr is not None else None
    if change is None:
        return None
    run = parse_run(element)
    try:
        return Revision.create_property_change(
            RevisionType.RUN_PROPERTY_CHANGE,
            change.get(w("author"), ""),
            run,
            previous_properties=parse_property_bag(change.find(w("rPr"))),
            new_properties=dict(run.properties) or None,
            date=_read_date(change),
        )
    except InvalidRevisionError as e:
        logger.warning("Skipping w:rPrChange: %s", e)
        return None


def _content_revision(
    element: etree._Element,
    revision_type: RevisionType,
    move_name: str | None,
    content: list[InlineContent] | None = None,
) -> Revision | None:
    if content is None:
        content = _parse_inline(element)
    move_id = None
    if revision_type.is_move:
        move_id = element.get(w("moveId")) or move_name or element.get(w("id"))
    try:
        return Revision(
            revision_type,
            element.get(w("author"), ""),
            content,
            _read_date(element),
            move_id=move_id,
            field_instruction=_has_field_instruction(element),
        )
    except InvalidRevisionError as e:
        logger.warning("Skipping w:%s: %s", local_name(element.tag), e)
        return None


def _split_hyperlink(
    element: etree._Element, move_name: str | None
) -> list[Hyperlink | Revision]:
    """Read a w:hyperlink holding tracked changes.

    Each w:ins, w:del or move inside the link becomes a revision wrapping its
    own copy of the link; runs between them stay in plain Hyperlinks.
    """
    items: list[Hyperlink | Revision] = []
    runs: list[Run] = []
    for child in element:
        if child.tag == w("r"):
            runs.append(parse_run(child))
            continue
        revision_type = element_to_revision_type(child)
        if revision_type is None:
            continue
        if not revision_type.is_content_change:
            logger.warning("Skipping unsupported w:%s in w:hyperlink", local_name(child.tag))
            continue
        inner = [parse_run(run) for run in child if run.tag == w("r")]
        content: list[InlineContent] = [_hyperlink(element, inner)] if inner else []
        revision = _content_revision(child, revision_type, move_name, content)
        if revision is None:
            continue
        if runs:
            items.append(_hyperlink(element, runs))
            runs = []
        items.append(revision)
    if runs or not items:
        items.append(_hyperlink(element, runs))
    return items


def _paragraph_property_change(ppr: etree._Element | None) -> ParagraphPropertyChange | None:
    change = ppr.find(w("pPrChange")) if ppr is not None else None
    if change is None:
        return None
    return ParagraphPropertyChange(
        author=change.get(w("author"), ""),
        previous_properties=parse_paragraph_properties(change.find(w("pPr"))),
        date=_read_date(change),
        id=_read_id(change),
    )


def parse_paragraph(
    element: etree._Element, registry: RevisionRegistry | None = None
) -> Paragraph:
    """Read a w:p element into a Paragraph.

    Args:
        element: The w:p element
        registry: Registry that receives every revision found, in order

    Returns:
        The parsed Paragraph

    Example:
        >>> para = parse_paragraph(etree.fromstring(PARAGRAPH_XML), registry)
        >>> para.get_text()
        'Hello world'
    """
    ppr = element.find(w("pPr"))
    content: list[ParagraphContent] = []
    move_name: str | None = None

    for child in element:
        if not isinstance(child.tag, str):
            continue
        if child.tag == w("pPr"):
            continue

        if child.tag in _MOVE_RANGE_STARTS:
            move_name = child.get(w("name"))
            continue

        if child.tag == w("r"):
            revision = _run_property_change(child)
            if revision is None:
                content.append(parse_run(child))
                continue
        elif child.tag == w("hyperlink"):
            for item in _split_hyperlink(child, move_name):
                if registry is not None and isinstance(item, Revision):
                    registry.register(item)
                content.append(item)
            continue
        else:
            revision_type = element_to_revision_type(child)
            if revision_type is None:
                continue
            if not revision_type.is_content_change:
                logger.warning("Skipping unsupported w:%s in paragraph", local_name(child.tag))
                continue
            revision = _content_revision(child, revision_type, move_name)
            if revision is None:
                continue

        if registry is not None:
            registry.register(revision)
        content.append(revision)

    return Paragraph(
        content,
        properties=parse_paragraph_properties(ppr),
        property_change=_paragraph_property_change(ppr),
    )


def iter_paragraph_elements(element: etree._Element) -> Iterator[etree._Element]:
    """Yield every w:p below ``element`` in document order, including table cells."""
    yield from element.iter(w("p"))


def parse_body(
    element: etree._Element, registry: RevisionRegistry | None = None
) -> list[Paragraph]:
    """Read every paragraph in a w:body (or w:document) element.

    Args:
        element: The body, document or any container element
        registry: Registry that receives every revision found

    Returns:
        Paragraphs in document order
    """
    paragraphs = [parse_paragraph(p, registry) for p in iter_paragraph_elements(element)]
    logger.debug("Parsed %d paragraphs", len(paragraphs))
    return paragraphs
