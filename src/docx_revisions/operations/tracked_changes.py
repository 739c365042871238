"""
Building tracked replacements from text diffs.

Turns "replace this text with that text" into paragraph content where only
the changed middle is tracked, leaving the unchanged prefix and suffix as
plain runs.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..models.content import Run
from ..models.paragraph import Paragraph, ParagraphContent
from ..models.revision import Revision
from ..registry import RevisionRegistry
from ..text_diff import SegmentKind, diff_has_unchanged_parts, diff_text

logger = logging.getLogger(__name__)


def build_tracked_replacement(
    old_text: str,
    new_text: str,
    author: str,
    registry: RevisionRegistry | None = None,
    properties: dict[str, Any] | None = None,
    date: datetime | None = None,
) -> list[ParagraphContent]:
    """Build content items that replace ``old_text`` with ``new_text`` as tracked changes.

    Equal segments become plain runs and changed segments become deletion and
    insertion revisions. If the two texts share no prefix or suffix, the
    whole text is replaced by one deletion followed by one insertion.

    Args:
        old_text: The text being replaced
        new_text: The replacement text
        author: Author recorded on every revision
        registry: If given, each revision is registered to receive its id
        properties: Run properties copied onto every run produced
        date: Timestamp for the revisions (default: now)

    Returns:
        Content items in reading order

    Example:
        >>> items = build_tracked_replacement("The quick fox", "The slow fox", "Alice")
        >>> [type(i).__name__ for i in items]
        ['Run', 'Revision', 'Revision', 'Run']
    """
    props = properties or {}
    segments = diff_text(old_text, new_text)

    if segments and not diff_has_unchanged_parts(segments):
        logger.debug("No shared text between old and new; replacing the whole unit")

    items: list[ParagraphContent] = []
    for segment in segments:
        run = Run(segment.text, dict(props))
        if segment.kind is SegmentKind.EQUAL:
            items.append(run)
            continue

        if segment.kind is SegmentKind.DELETE:
            revision = Revision.create_deletion(author, run, date)
        else:
            revision = Revision.create_insertion(author, run, date)
        if registry is not None:
            registry.register(revision)
        items.append(revision)

    return items


def replace_paragraph_text(
    paragraph: Paragraph,
    new_text: str,
    author: str,
    registry: RevisionRegistry | None = None,
    date: datetime | None = None,
) -> bool:
    """Replace a paragraph's text with a granular tracked change.

    Paragraphs that already contain revisions are left alone, since diffing
    their visible text would lose the existing change history. Run properties
    of the first run are carried onto the new runs.

    Returns:
        True if the paragraph was rewritten
    """
    if paragraph.has_revisions() or paragraph.property_change is not None:
        logger.debug("Paragraph has existing tracked revisions; not replacing")
        return False

    runs = [item for item in paragraph.get_content() if isinstance(item, Run)]
    properties = runs[0].properties if runs else None
    paragraph.set_content(
        build_tracked_replacement(
            paragraph.get_text(), new_text, author, registry, properties, date
        )
    )
    return True
