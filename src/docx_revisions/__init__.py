"""
docx_revisions - Tracked-change revisions and round-trip fidelity for Word documents.

This package models WordprocessingML tracked changes (insertions, deletions,
moves and property changes), resolves them by accepting or rejecting, turns
text replacements into granular redlines, and re-saves loaded definition
parts such as numbering.xml without disturbing markup it does not model.

Example:
    >>> from docx_revisions import RevisionRegistry, ChangeTransformer, parse_body
    >>> registry = RevisionRegistry()
    >>> paragraphs = parse_body(body_element, registry)
    >>> ChangeTransformer().accept_all(paragraphs, registry)
"""

__version__ = "0.1.0"
__all__ = [
    # Errors
    "DocxRevisionsError",
    "InvalidRevisionError",
    "DefinitionNotFoundError",
    "InvalidDefinitionError",
    "CriteriaFileError",
    # Model
    "Run",
    "Hyperlink",
    "Paragraph",
    "ParagraphPropertyChange",
    "Revision",
    "RevisionType",
    "format_revision_date",
    # Diff
    "DiffSegment",
    "SegmentKind",
    "diff_text",
    "diff_has_unchanged_parts",
    # Registry and selection
    "RevisionRegistry",
    "RevisionCategory",
    "DateRange",
    "MovePair",
    "SelectionCriteria",
    "SelectiveRevisionSelector",
    "load_criteria",
    # Operations
    "AcceptPolicy",
    "ChangeTransformer",
    "build_tracked_replacement",
    "replace_paragraph_text",
    # Reader
    "parse_paragraph",
    "parse_body",
    # Numbering
    "NumberingLevel",
    "AbstractNumbering",
    "NumberingInstance",
    "NumberingManager",
    "DefinitionModificationTracker",
    "DefinitionConsolidator",
    "SelectiveFidelityMerger",
    "DefinitionTableSchema",
    "NUMBERING_SCHEMA",
    # Results
    "AcceptResult",
    "RejectResult",
    "SelectionResult",
    "RevisionStats",
    "MovePairReport",
    "ConsolidationResult",
    "MergeResult",
    "CleanupResult",
]

from docx_revisions.errors import (
    CriteriaFileError,
    DefinitionNotFoundError,
    DocxRevisionsError,
    InvalidDefinitionError,
    InvalidRevisionError,
)
from docx_revisions.models import (
    Hyperlink,
    Paragraph,
    ParagraphPropertyChange,
    Revision,
    RevisionType,
    Run,
    format_revision_date,
)
from docx_revisions.numbering import (
    NUMBERING_SCHEMA,
    AbstractNumbering,
    DefinitionConsolidator,
    DefinitionModificationTracker,
    DefinitionTableSchema,
    NumberingInstance,
    NumberingLevel,
    NumberingManager,
    SelectiveFidelityMerger,
)
from docx_revisions.operations import (
    AcceptPolicy,
    ChangeTransformer,
    build_tracked_replacement,
    replace_paragraph_text,
)
from docx_revisions.reader import parse_body, parse_paragraph
from docx_revisions.registry import DateRange, MovePair, RevisionCategory, RevisionRegistry
from docx_revisions.results import (
    AcceptResult,
    CleanupResult,
    ConsolidationResult,
    MergeResult,
    MovePairReport,
    RejectResult,
    RevisionStats,
    SelectionResult,
)
from docx_revisions.selection import (
    SelectionCriteria,
    SelectiveRevisionSelector,
    load_criteria,
)
from docx_revisions.text_diff import (
    DiffSegment,
    SegmentKind,
    diff_has_unchanged_parts,
    diff_text,
)
