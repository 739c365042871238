"""
In-memory document model classes for docx_revisions.

These classes hold paragraph content and tracked changes and render them to
OOXML elements.
"""

from docx_revisions.models.content import (
    Hyperlink,
    InlineContent,
    Run,
    is_hyperlink_content,
    is_run_content,
)
from docx_revisions.models.paragraph import Paragraph, ParagraphContent, ParagraphPropertyChange
from docx_revisions.models.revision import (
    CONTENT_REVISION_TYPES,
    PROPERTY_REVISION_TYPES,
    TABLE_CELL_REVISION_TYPES,
    Revision,
    RevisionType,
    format_revision_date,
)

__all__ = [
    "Run",
    "Hyperlink",
    "InlineContent",
    "is_run_content",
    "is_hyperlink_content",
    "Paragraph",
    "ParagraphContent",
    "ParagraphPropertyChange",
    "Revision",
    "RevisionType",
    "CONTENT_REVISION_TYPES",
    "PROPERTY_REVISION_TYPES",
    "TABLE_CELL_REVISION_TYPES",
    "format_revision_date",
]
