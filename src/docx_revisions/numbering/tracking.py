"""
Modification tracking for a two-tier definition table.

The tracker records which template and instance ids changed or were removed
since the table was loaded. For each tier an id is in at most one of the
two sets: marking it modified clears a prior removal and vice versa, so the
latest call wins.
"""

from dataclasses import dataclass, field
from enum import Enum


class DefinitionTier(Enum):
    """The two tiers of a definition table."""

    TEMPLATE = "template"
    INSTANCE = "instance"


@dataclass
class _TierState:
    modified: set[int] = field(default_factory=set)
    removed: set[int] = field(default_factory=set)


class DefinitionModificationTracker:
    """Modified and removed id sets for templates and instances.

    Example:
        >>> tracker = DefinitionModificationTracker()
        >>> tracker.mark_modified(DefinitionTier.TEMPLATE, 3)
        >>> tracker.mark_removed(DefinitionTier.TEMPLATE, 3)
        >>> tracker.modified(DefinitionTier.TEMPLATE), tracker.removed(DefinitionTier.TEMPLATE)
        (set(), {3})
    """

    def __init__(self) -> None:
        self._tiers = {tier: _TierState() for tier in DefinitionTier}

    def mark_modified(self, tier: DefinitionTier, definition_id: int) -> None:
        """Record an add or change of ``definition_id``."""
        state = self._tiers[tier]
        state.removed.discard(definition_id)
        state.modified.add(definition_id)

    def mark_removed(self, tier: DefinitionTier, definition_id: int) -> None:
        state = self._tiers[tier]
        state.modified.discard(definition_id)
        state.removed.add(definition_id)

    def modified(self, tier: DefinitionTier) -> set[int]:
        """Return a copy of the modified ids for ``tier``."""
        return set(self._tiers[tier].modified)

    def removed(self, tier: DefinitionTier) -> set[int]:
        return set(self._tiers[tier].removed)

    def is_modified(self, tier: DefinitionTier, definition_id: int) -> bool:
        return definition_id in self._tiers[tier].modified

    def is_removed(self, tier: DefinitionTier, definition_id: int) -> bool:
        return definition_id in self._tiers[tier].removed

    @property
    def has_changes(self) -> bool:
        return any(state.modified or state.removed for state in self._tiers.values())

    def reset(self) -> None:
        """Forget all changes, e.g. right after loading."""
        for state in self._tiers.values():
            state.modified.clear()
            state.removed.clear()
