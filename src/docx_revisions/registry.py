"""
RevisionRegistry: the ordered, id-assigning store of a document's revisions.

The registry owns the id counter. Ids start at 0, follow registration order
and are never reused, even after removals. Queries never raise; a lookup that
finds nothing returns None or an empty list.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .models.revision import (
    PROPERTY_REVISION_TYPES,
    TABLE_CELL_REVISION_TYPES,
    Revision,
    RevisionType,
    as_utc,
)
from .results import MovePairReport, RevisionStats

logger = logging.getLogger(__name__)


class RevisionCategory(Enum):
    """Coarse grouping of revision kinds used for filtering and reports."""

    CONTENT = "content"
    FORMATTING = "formatting"
    STRUCTURAL = "structural"
    TABLE = "table"


_CATEGORY_BY_TYPE = {
    RevisionType.INSERT: RevisionCategory.CONTENT,
    RevisionType.DELETE: RevisionCategory.CONTENT,
    RevisionType.RUN_PROPERTY_CHANGE: RevisionCategory.FORMATTING,
    RevisionType.PARAGRAPH_PROPERTY_CHANGE: RevisionCategory.FORMATTING,
    RevisionType.NUMBERING_CHANGE: RevisionCategory.FORMATTING,
    RevisionType.MOVE_FROM: RevisionCategory.STRUCTURAL,
    RevisionType.MOVE_TO: RevisionCategory.STRUCTURAL,
    RevisionType.SECTION_PROPERTY_CHANGE: RevisionCategory.STRUCTURAL,
    RevisionType.TABLE_PROPERTY_CHANGE: RevisionCategory.TABLE,
    RevisionType.TABLE_EXCEPTION_PROPERTY_CHANGE: RevisionCategory.TABLE,
    RevisionType.TABLE_ROW_PROPERTY_CHANGE: RevisionCategory.TABLE,
    RevisionType.TABLE_CELL_PROPERTY_CHANGE: RevisionCategory.TABLE,
    RevisionType.TABLE_CELL_INSERT: RevisionCategory.TABLE,
    RevisionType.TABLE_CELL_DELETE: RevisionCategory.TABLE,
    RevisionType.TABLE_CELL_MERGE: RevisionCategory.TABLE,
}


def revision_category(revision_type: RevisionType) -> RevisionCategory:
    """Get the category a revision kind belongs to."""
    return _CATEGORY_BY_TYPE.get(revision_type, RevisionCategory.CONTENT)


@dataclass(frozen=True)
class DateRange:
    """An inclusive range of revision dates. Naive datetimes are taken to be UTC."""

    start: datetime
    end: datetime

    def contains(self, date: datetime) -> bool:
        return as_utc(self.start) <= as_utc(date) <= as_utc(self.end)


@dataclass(frozen=True)
class MovePair:
    """The two halves of a move. Either half may be missing."""

    move_from: Revision | None = None
    move_to: Revision | None = None

    @property
    def is_complete(self) -> bool:
        return self.move_from is not None and self.move_to is not None


class RevisionRegistry:
    """Ordered collection of a document's revisions.

    Example:
        >>> registry = RevisionRegistry()
        >>> rev = registry.register(Revision.from_text(RevisionType.INSERT, "Alice", "new"))
        >>> rev.id
        0
        >>> [r.id for r in registry.by_author("Alice")]
        [0]
    """

    def __init__(self) -> None:
        self._revisions: list[Revision] = []
        self._next_id = 0

    def register(self, revision: Revision) -> Revision:
        """Assign the next id to ``revision`` and store it.

        Args:
            revision: A revision not yet registered anywhere

        Returns:
            The same revision instance, now carrying its id
        """
        revision.id = self._next_id
        self._next_id += 1
        self._revisions.append(revision)
        logger.debug(
            "Registered revision %d (%s by %s)",
            revision.id,
            revision.revision_type.value,
            revision.author,
        )
        return revision

    def register_all(self, revisions: Iterable[Revision]) -> list[Revision]:
        return [self.register(revision) for revision in revisions]

    # Collection protocol

    def __len__(self) -> int:
        return len(self._revisions)

    def __iter__(self) -> Iterator[Revision]:
        return iter(list(self._revisions))

    def __contains__(self, revision: object) -> bool:
        return any(existing is revision for existing in self._revisions)

    @property
    def count(self) -> int:
        return len(self._revisions)

    @property
    def next_id(self) -> int:
        return self._next_id

    @property
    def is_empty(self) -> bool:
        return not self._revisions

    @property
    def is_tracking_changes(self) -> bool:
        return bool(self._revisions)

    def all(self) -> list[Revision]:
        """Return all revisions in registration order."""
        return list(self._revisions)

    # Single lookups

    def get_by_id(self, revision_id: int) -> Revision | None:
        for revision in self._revisions:
            if revision.id == revision_id:
                return revision
        return None

    def latest(self) -> Revision | None:
        """Return the most recently registered revision."""
        return self._revisions[-1] if self._revisions else None

    # Filtered queries

    def by_type(self, revision_type: RevisionType) -> list[Revision]:
        return [r for r in self._revisions if r.revision_type is revision_type]

    def by_types(self, revision_types: Iterable[RevisionType]) -> list[Revision]:
        wanted = set(revision_types)
        return [r for r in self._revisions if r.revision_type in wanted]

    def by_author(self, author: str) -> list[Revision]:
        return [r for r in self._revisions if r.author == author]

    def by_category(self, category: RevisionCategory) -> list[Revision]:
        return [r for r in self._revisions if revision_category(r.revision_type) is category]

    def by_date_range(self, start: datetime, end: datetime) -> list[Revision]:
        """Return revisions dated within ``start``..``end`` inclusive."""
        date_range = DateRange(start, end)
        return [r for r in self._revisions if date_range.contains(r.date)]

    def find(
        self,
        revision_type: RevisionType | None = None,
        author: str | None = None,
        category: RevisionCategory | None = None,
        date_range: DateRange | None = None,
    ) -> list[Revision]:
        """Return revisions matching every given criterion.

        Omitted criteria do not filter, so ``find()`` returns everything.

        Args:
            revision_type: Only this kind
            author: Only this author
            category: Only kinds in this category
            date_range: Only revisions dated within this range

        Returns:
            Matching revisions in registration order
        """
        results = []
        for revision in self._revisions:
            if revision_type is not None and revision.revision_type is not revision_type:
                continue
            if author is not None and revision.author != author:
                continue
            if category is not None and revision_category(revision.revision_type) is not category:
                continue
            if date_range is not None and not date_range.contains(revision.date):
                continue
            results.append(revision)
        return results

    def find_by_text(self, search_text: str) -> list[Revision]:
        """Return revisions whose content text contains ``search_text`` (case-insensitive)."""
        needle = search_text.lower()
        return [r for r in self._revisions if needle in r.get_text().lower()]

    def recent(self, count: int) -> list[Revision]:
        """Return the ``count`` most recently dated revisions, newest first."""
        ordered = sorted(self._revisions, key=lambda r: as_utc(r.date), reverse=True)
        return ordered[: max(count, 0)]

    def authors(self) -> list[str]:
        """Return distinct authors in order of first appearance."""
        seen: dict[str, None] = {}
        for revision in self._revisions:
            seen.setdefault(revision.author, None)
        return list(seen)

    # Per-kind shortcuts

    def insertions(self) -> list[Revision]:
        return self.by_type(RevisionType.INSERT)

    def deletions(self) -> list[Revision]:
        return self.by_type(RevisionType.DELETE)

    def moves(self) -> list[Revision]:
        return self.by_types((RevisionType.MOVE_FROM, RevisionType.MOVE_TO))

    def property_changes(self) -> list[Revision]:
        return self.by_types(PROPERTY_REVISION_TYPES)

    def table_cell_changes(self) -> list[Revision]:
        return self.by_types(TABLE_CELL_REVISION_TYPES)

    def numbering_changes(self) -> list[Revision]:
        return self.by_type(RevisionType.NUMBERING_CHANGE)

    @property
    def insertion_count(self) -> int:
        return len(self.insertions())

    @property
    def deletion_count(self) -> int:
        return len(self.deletions())

    # Moves

    def get_move_pair(self, move_id: str) -> MovePair:
        """Find both halves of the move identified by ``move_id``.

        A missing half is reported as None, never as an error.
        """
        move_from = next(
            (
                r
                for r in self._revisions
                if r.revision_type is RevisionType.MOVE_FROM and r.move_id == move_id
            ),
            None,
        )
        move_to = next(
            (
                r
                for r in self._revisions
                if r.revision_type is RevisionType.MOVE_TO and r.move_id == move_id
            ),
            None,
        )
        return MovePair(move_from, move_to)

    def move_pairs(self) -> MovePairReport:
        """Report which move ids are matched and which halves are orphaned."""
        from_ids: dict[str, None] = {}
        to_ids: dict[str, None] = {}
        for revision in self._revisions:
            if revision.move_id is None:
                continue
            if revision.revision_type is RevisionType.MOVE_FROM:
                from_ids.setdefault(revision.move_id, None)
            elif revision.revision_type is RevisionType.MOVE_TO:
                to_ids.setdefault(revision.move_id, None)

        report = MovePairReport(
            matched=[m for m in from_ids if m in to_ids],
            orphaned_from=[m for m in from_ids if m not in to_ids],
            orphaned_to=[m for m in to_ids if m not in from_ids],
        )
        if report.orphaned_count:
            logger.debug("Found %d orphaned move halves", report.orphaned_count)
        return report

    # Mutation

    def remove_by_id(self, revision_id: int) -> bool:
        """Remove the revision with ``revision_id``. Remaining ids are not renumbered.

        Returns:
            True if a revision was removed
        """
        for index, revision in enumerate(self._revisions):
            if revision.id == revision_id:
                del self._revisions[index]
                return True
        return False

    def remove(self, revision: Revision) -> bool:
        """Remove a specific revision instance."""
        for index, existing in enumerate(self._revisions):
            if existing is revision:
                del self._revisions[index]
                return True
        return False

    def clear(self) -> None:
        """Drop every revision and restart ids at 0.

        Used once all tracked changes in the document have been resolved, so
        no stale id can still be referenced.
        """
        self._revisions = []
        self._next_id = 0

    def stats(self) -> RevisionStats:
        return RevisionStats(
            total=len(self._revisions),
            insertions=self.insertion_count,
            deletions=self.deletion_count,
            property_changes=len(self.property_changes()),
            moves=len(self.moves()),
            table_cell_changes=len(self.table_cell_changes()),
            authors=self.authors(),
            next_id=self._next_id,
        )
