"""Operations that rewrite paragraph content: resolving and creating tracked changes."""

from docx_revisions.operations.change_management import (
    AcceptPolicy,
    ChangeTransformer,
    count_revisions_by_type,
    paragraph_has_revisions,
    revisions_in_paragraph,
)
from docx_revisions.operations.tracked_changes import (
    build_tracked_replacement,
    replace_paragraph_text,
)

__all__ = [
    "AcceptPolicy",
    "ChangeTransformer",
    "count_revisions_by_type",
    "paragraph_has_revisions",
    "revisions_in_paragraph",
    "build_tracked_replacement",
    "replace_paragraph_text",
]
