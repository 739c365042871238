"""
Result classes for revision and definition operations.

Operations in this package report what they did through these small
dataclasses instead of raising for "nothing matched".
"""

from dataclasses import dataclass, field


@dataclass
class AcceptResult:
    """Result of accepting tracked changes.

    Attributes:
        insertions: Number of insertions accepted
        deletions: Number of deletions accepted
        moves: Number of move halves accepted (moveFrom and moveTo count separately)
        property_changes: Number of property changes accepted, including
            paragraph-level w:pPrChange records
    """

    insertions: int = 0
    deletions: int = 0
    moves: int = 0
    property_changes: int = 0

    @property
    def total(self) -> int:
        return self.insertions + self.deletions + self.moves + self.property_changes

    def add(self, other: "AcceptResult") -> None:
        """Accumulate another result into this one."""
        self.insertions += other.insertions
        self.deletions += other.deletions
        self.moves += other.moves
        self.property_changes += other.property_changes

    def __str__(self) -> str:
        return (
            f"Accepted {self.insertions} insertions, {self.deletions} deletions, "
            f"{self.moves} moves, {self.property_changes} property changes"
        )


@dataclass
class RejectResult:
    """Result of rejecting tracked changes.

    Attributes:
        insertions: Number of insertions rejected (content dropped)
        deletions: Number of deletions rejected (content restored)
        moves: Number of move halves rejected
        property_changes: Number of property changes reverted
    """

    insertions: int = 0
    deletions: int = 0
    moves: int = 0
    property_changes: int = 0

    @property
    def total(self) -> int:
        return self.insertions + self.deletions + self.moves + self.property_changes

    def add(self, other: "RejectResult") -> None:
        self.insertions += other.insertions
        self.deletions += other.deletions
        self.moves += other.moves
        self.property_changes += other.property_changes

    def __str__(self) -> str:
        return (
            f"Rejected {self.insertions} insertions, {self.deletions} deletions, "
            f"{self.moves} moves, {self.property_changes} property changes"
        )


@dataclass
class RevisionStats:
    """Counts describing the revisions held by a registry.

    Attributes:
        total: Number of registered revisions
        insertions: Number of insertions
        deletions: Number of deletions
        property_changes: Number of property-change revisions
        moves: Number of move halves
        table_cell_changes: Number of cell insert/delete/merge revisions
        authors: Distinct authors in registration order
        next_id: The id the next registered revision will receive
    """

    total: int
    insertions: int
    deletions: int
    property_changes: int
    moves: int
    table_cell_changes: int
    authors: list[str] = field(default_factory=list)
    next_id: int = 0


@dataclass
class MovePairReport:
    """Summary of how moveFrom/moveTo halves pair up by move id.

    An orphaned half is not an error; callers decide whether to warn.

    Attributes:
        matched: Move ids with both halves present
        orphaned_from: Move ids with only a moveFrom half
        orphaned_to: Move ids with only a moveTo half
    """

    matched: list[str] = field(default_factory=list)
    orphaned_from: list[str] = field(default_factory=list)
    orphaned_to: list[str] = field(default_factory=list)

    @property
    def matched_count(self) -> int:
        return len(self.matched)

    @property
    def orphaned_count(self) -> int:
        return len(self.orphaned_from) + len(self.orphaned_to)


@dataclass
class SelectionResult:
    """Partition of revisions into those matching some criteria and the rest.

    Attributes:
        matching: Ids of revisions that match, in registration order
        non_matching: Ids of revisions that do not match
    """

    matching: list[int] = field(default_factory=list)
    non_matching: list[int] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.matching) + len(self.non_matching)

    @property
    def matching_count(self) -> int:
        return len(self.matching)

    @property
    def non_matching_count(self) -> int:
        return len(self.non_matching)

    def __str__(self) -> str:
        return f"{self.matching_count} of {self.total} revisions selected"


@dataclass
class ConsolidationResult:
    """Result of deduplicating structurally identical definitions.

    Attributes:
        removed: Number of duplicate definitions deleted
        remapped: Number of instances pointed at a canonical definition
        groups: Number of duplicate groups found
    """

    removed: int = 0
    remapped: int = 0
    groups: int = 0

    def __str__(self) -> str:
        if not self.groups:
            return "No duplicate definitions"
        return (
            f"Consolidated {self.groups} group{'s' if self.groups != 1 else ''}: "
            f"removed {self.removed}, remapped {self.remapped}"
        )


@dataclass
class MergeResult:
    """Result of a selective definition-table merge.

    Attributes:
        xml: The merged part text
        preserved: Original definitions kept verbatim
        replaced: Original definitions replaced by their in-memory version
        removed: Original definitions deleted
        added: Definitions inserted that were not in the original
        fallback_used: True if an anchor was missing and new definitions were
            appended before the closing tag
        unchanged: True if the original text was returned untouched
    """

    xml: str
    preserved: int = 0
    replaced: int = 0
    removed: int = 0
    added: int = 0
    fallback_used: bool = False
    unchanged: bool = False


@dataclass
class CleanupResult:
    """Result of removing unused numbering definitions.

    Attributes:
        instances_removed: Number of instances no paragraph referenced
        templates_removed: Number of templates no remaining instance referenced
    """

    instances_removed: int = 0
    templates_removed: int = 0
