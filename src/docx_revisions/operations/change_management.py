"""
Accepting and rejecting tracked changes in paragraph content.

This module provides the ChangeTransformer, which rewrites a paragraph's
content sequence so that selected revisions are resolved: accepted
insertions are spliced in, accepted deletions vanish, and so on. Items that
are not revisions always pass through untouched.

The transformer works on one content sequence at a time. It does not own the
revision registry; ``accept_all`` only clears one when it is handed over.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ..models.content import Hyperlink, Run
from ..models.paragraph import Paragraph, ParagraphContent
from ..models.revision import Revision, RevisionType
from ..registry import RevisionRegistry
from ..results import AcceptResult, RejectResult
from ..selection import SelectionCriteria

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AcceptPolicy:
    """Which revision kinds to resolve.

    Attributes:
        accept_insertions: Resolve w:ins revisions
        accept_deletions: Resolve w:del revisions
        accept_moves: Resolve both move halves
        accept_property_changes: Resolve every property-change kind and the
            paragraph-level w:pPrChange record
    """

    accept_insertions: bool = True
    accept_deletions: bool = True
    accept_moves: bool = True
    accept_property_changes: bool = True

    @classmethod
    def only(cls, *revision_types: RevisionType) -> AcceptPolicy:
        """Build a policy that resolves only the groups the given kinds belong to.

        Example:
            >>> policy = AcceptPolicy.only(RevisionType.DELETE)
            >>> policy.accept_deletions, policy.accept_insertions
            (True, False)
        """
        return cls(
            accept_insertions=RevisionType.INSERT in revision_types,
            accept_deletions=RevisionType.DELETE in revision_types,
            accept_moves=any(t.is_move for t in revision_types),
            accept_property_changes=any(t.is_property_change for t in revision_types),
        )

    @property
    def accepts_everything(self) -> bool:
        return (
            self.accept_insertions
            and self.accept_deletions
            and self.accept_moves
            and self.accept_property_changes
        )

    def covers(self, revision_type: RevisionType) -> bool:
        """Check whether revisions of ``revision_type`` are resolved under this policy.

        Table cell insert/delete/merge revisions are never covered.
        """
        if revision_type is RevisionType.INSERT:
            return self.accept_insertions
        if revision_type is RevisionType.DELETE:
            return self.accept_deletions
        if revision_type.is_move:
            return self.accept_moves
        if revision_type.is_property_change:
            return self.accept_property_changes
        return False


def _tally(result: AcceptResult | RejectResult, revision_type: RevisionType) -> None:
    if revision_type is RevisionType.INSERT:
        result.insertions += 1
    elif revision_type is RevisionType.DELETE:
        result.deletions += 1
    elif revision_type.is_move:
        result.moves += 1
    elif revision_type.is_property_change:
        result.property_changes += 1


def _restore_run_properties(item: ParagraphContent, previous: dict) -> ParagraphContent:
    if isinstance(item, Run):
        item.properties = dict(previous)
    elif isinstance(item, Hyperlink):
        for run in item.runs:
            run.properties = dict(previous)
    return item


class ChangeTransformer:
    """Resolves tracked changes in paragraph content sequences.

    Example:
        >>> transformer = ChangeTransformer()
        >>> content = [Run("A"), Revision.create_deletion("Bob", Run("B"))]
        >>> transformer.apply(content)
        [Run(text='A', properties={})]
    """

    # Content sequence rewrites

    def apply(
        self,
        content: list[ParagraphContent],
        policy: AcceptPolicy | None = None,
    ) -> list[ParagraphContent]:
        """Accept the revisions ``policy`` covers and return the rewritten sequence.

        Args:
            content: One paragraph's content sequence (not modified)
            policy: Which kinds to accept (default: all)

        Returns:
            A new content sequence in the original order
        """
        policy = policy or AcceptPolicy()
        rewritten, _, _ = self._accept(content, lambda rev: policy.covers(rev.revision_type))
        return rewritten

    def _accept(
        self,
        content: list[ParagraphContent],
        selected: Callable[[Revision], bool],
    ) -> tuple[list[ParagraphContent], AcceptResult, list[Revision]]:
        rewritten: list[ParagraphContent] = []
        result = AcceptResult()
        resolved: list[Revision] = []

        for item in content:
            if not isinstance(item, Revision) or not selected(item):
                rewritten.append(item)
                continue

            kind = item.revision_type
            if kind.removes_content:
                logger.debug("Dropping accepted %s revision %d", kind.value, item.id)
            else:
                logger.debug("Unwrapping accepted %s revision %d", kind.value, item.id)
                rewritten.extend(item.content)
            _tally(result, kind)
            resolved.append(item)

        return rewritten, result, resolved

    def _reject(
        self,
        content: list[ParagraphContent],
        selected: Callable[[Revision], bool],
    ) -> tuple[list[ParagraphContent], RejectResult, list[Revision]]:
        rewritten: list[ParagraphContent] = []
        result = RejectResult()
        resolved: list[Revision] = []

        for item in content:
            if not isinstance(item, Revision) or not selected(item):
                rewritten.append(item)
                continue

            kind = item.revision_type
            if kind in (RevisionType.INSERT, RevisionType.MOVE_TO):
                logger.debug("Dropping rejected %s revision %d", kind.value, item.id)
            elif kind is RevisionType.RUN_PROPERTY_CHANGE:
                previous = item.previous_properties or {}
                rewritten.extend(_restore_run_properties(c, previous) for c in item.content)
            else:
                logger.debug("Restoring rejected %s revision %d", kind.value, item.id)
                rewritten.extend(item.content)
            _tally(result, kind)
            resolved.append(item)

        return rewritten, result, resolved

    # Paragraph-level operations

    def accept_in_paragraph(
        self, paragraph: Paragraph, policy: AcceptPolicy | None = None
    ) -> AcceptResult:
        """Accept the covered revisions in one paragraph, in place.

        When property changes are accepted, a pending paragraph-level
        w:pPrChange record is cleared too and counted as a property change.

        Args:
            paragraph: The paragraph to rewrite
            policy: Which kinds to accept (default: all)

        Returns:
            AcceptResult with per-kind counts
        """
        policy = policy or AcceptPolicy()
        result, _ = self._accept_paragraph(
            paragraph, lambda rev: policy.covers(rev.revision_type), policy.accept_property_changes
        )
        return result

    def _accept_paragraph(
        self,
        paragraph: Paragraph,
        selected: Callable[[Revision], bool],
        clear_paragraph_change: bool,
    ) -> tuple[AcceptResult, list[Revision]]:
        content, result, resolved = self._accept(paragraph.get_content(), selected)
        paragraph.set_content(content)
        if clear_paragraph_change and paragraph.clear_property_change():
            result.property_changes += 1
        return result, resolved

    def reject_in_paragraph(
        self, paragraph: Paragraph, policy: AcceptPolicy | None = None
    ) -> RejectResult:
        """Reject the covered revisions in one paragraph, in place.

        Rejected insertions and move-ins are dropped, rejected deletions and
        move-outs are restored, and rejected property changes put back the
        previous properties. Revisions of other kinds are kept.

        Args:
            paragraph: The paragraph to rewrite
            policy: Which kinds to reject (default: all)

        Returns:
            RejectResult with per-kind counts
        """
        policy = policy or AcceptPolicy()
        result, _ = self._reject_paragraph(
            paragraph, lambda rev: policy.covers(rev.revision_type), policy.accept_property_changes
        )
        return result

    def _reject_paragraph(
        self,
        paragraph: Paragraph,
        selected: Callable[[Revision], bool],
        restore_paragraph_properties: bool,
    ) -> tuple[RejectResult, list[Revision]]:
        content, result, resolved = self._reject(paragraph.get_content(), selected)
        paragraph.set_content(content)
        change = paragraph.property_change
        if restore_paragraph_properties and change is not None:
            paragraph.properties = dict(change.previous_properties)
            paragraph.clear_property_change()
            result.property_changes += 1
        return result, resolved

    # Document-level operations

    def accept_all(
        self,
        paragraphs: Iterable[Paragraph],
        registry: RevisionRegistry | None = None,
        policy: AcceptPolicy | None = None,
    ) -> AcceptResult:
        """Accept covered revisions across many paragraphs.

        When ``registry`` is given and every kind is accepted, the registry is
        cleared (which also restarts its ids). Under a narrower policy only
        the resolved revisions are removed from it.

        Args:
            paragraphs: Every paragraph to process, including table cells
            registry: The document's registry, if it should be updated
            policy: Which kinds to accept (default: all)

        Returns:
            The summed AcceptResult
        """
        policy = policy or AcceptPolicy()
        total = AcceptResult()
        resolved: list[Revision] = []
        for paragraph in paragraphs:
            result, done = self._accept_paragraph(
                paragraph,
                lambda rev: policy.covers(rev.revision_type),
                policy.accept_property_changes,
            )
            total.add(result)
            resolved.extend(done)

        if registry is not None:
            if policy.accepts_everything:
                registry.clear()
            else:
                for revision in resolved:
                    registry.remove(revision)

        logger.info("%s", total)
        return total

    def reject_all(
        self,
        paragraphs: Iterable[Paragraph],
        registry: RevisionRegistry | None = None,
        policy: AcceptPolicy | None = None,
    ) -> RejectResult:
        """Reject covered revisions across many paragraphs.

        Registry handling matches ``accept_all``.
        """
        policy = policy or AcceptPolicy()
        total = RejectResult()
        resolved: list[Revision] = []
        for paragraph in paragraphs:
            result, done = self._reject_paragraph(
                paragraph,
                lambda rev: policy.covers(rev.revision_type),
                policy.accept_property_changes,
            )
            total.add(result)
            resolved.extend(done)

        if registry is not None:
            if policy.accepts_everything:
                registry.clear()
            else:
                for revision in resolved:
                    registry.remove(revision)

        logger.info("%s", total)
        return total

    def accept_matching(
        self,
        paragraphs: Iterable[Paragraph],
        criteria: SelectionCriteria,
        registry: RevisionRegistry | None = None,
    ) -> AcceptResult:
        """Accept only the revisions matching ``criteria``.

        Empty criteria match nothing, so nothing is accepted. Paragraph-level
        w:pPrChange records are not registry revisions and are left alone.

        Example:
            >>> criteria = SelectionCriteria.create(authors=["Alice"])
            >>> transformer.accept_matching(paragraphs, criteria, registry)
        """
        total = AcceptResult()
        for paragraph in paragraphs:
            result, done = self._accept_paragraph(paragraph, criteria.matches, False)
            total.add(result)
            if registry is not None:
                for revision in done:
                    registry.remove(revision)
        logger.info("%s", total)
        return total

    def reject_matching(
        self,
        paragraphs: Iterable[Paragraph],
        criteria: SelectionCriteria,
        registry: RevisionRegistry | None = None,
    ) -> RejectResult:
        """Reject only the revisions matching ``criteria``."""
        total = RejectResult()
        for paragraph in paragraphs:
            result, done = self._reject_paragraph(paragraph, criteria.matches, False)
            total.add(result)
            if registry is not None:
                for revision in done:
                    registry.remove(revision)
        logger.info("%s", total)
        return total


# Helper queries


def paragraph_has_revisions(paragraph: Paragraph) -> bool:
    """Check for inline revisions or a pending paragraph property change."""
    return paragraph.has_revisions() or paragraph.property_change is not None


def revisions_in_paragraph(paragraph: Paragraph) -> list[Revision]:
    return paragraph.get_revisions()


def count_revisions_by_type(paragraphs: Iterable[Paragraph]) -> dict[RevisionType, int]:
    """Count inline revisions per kind across paragraphs.

    Paragraph-level w:pPrChange records count as paragraph property changes.
    """
    counts: Counter[RevisionType] = Counter()
    for paragraph in paragraphs:
        for revision in paragraph.get_revisions():
            counts[revision.revision_type] += 1
        if paragraph.property_change is not None:
            counts[RevisionType.PARAGRAPH_PROPERTY_CHANGE] += 1
    return dict(counts)
