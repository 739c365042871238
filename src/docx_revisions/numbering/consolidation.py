"""
Deduplication of structurally identical numbering templates.

Documents assembled from many sources often carry dozens of identical list
templates. Two templates whose levels render the same are merged: the lowest
id survives, instances pointing at the others are remapped to it, and the
duplicates are deleted. Names and ids do not take part in the comparison.
"""

import logging
from collections.abc import Callable, Iterable

from ..results import ConsolidationResult
from .definitions import AbstractNumbering, NumberingInstance
from .tracking import DefinitionModificationTracker, DefinitionTier

logger = logging.getLogger(__name__)


def _level_key(level) -> str:
    return "|".join(
        str(part)
        for part in (
            level.level,
            level.format,
            level.text,
            level.font,
            level.font_size,
            level.color or "",
            level.left_indent,
            level.hanging_indent,
            level.alignment,
            level.start,
            level.bold,
            level.italic,
            level.underline or "",
            level.suffix,
            level.is_legal,
            "" if level.restart_level is None else level.restart_level,
        )
    )


def fingerprint(template: AbstractNumbering) -> str:
    """Build the structural-equality key of a template.

    The key covers the style links, the multi-level type and every
    rendering field of every level in level order.

    Example:
        >>> fingerprint(AbstractNumbering.bullet_list(0)) == fingerprint(
        ...     AbstractNumbering.bullet_list(7)
        ... )
        True
    """
    parts = [template.num_style_link or "", template.style_link or "", template.multi_level_type]
    parts.extend(_level_key(level) for level in template.get_levels())
    return "::".join(parts)


class DefinitionConsolidator:
    """Merges duplicate templates and remaps the instances that use them.

    Args:
        key: Function computing the equality key of a template
    """

    def __init__(self, key: Callable[[AbstractNumbering], str] = fingerprint) -> None:
        self._key = key

    def find_duplicate_groups(
        self,
        templates: dict[int, AbstractNumbering],
        protected: Iterable[int] = (),
    ) -> list[list[int]]:
        """Group unprotected template ids by key, keeping groups with more than one id.

        Each group is sorted, so its first id is the canonical one.
        """
        protected_ids = set(protected)
        groups: dict[str, list[int]] = {}
        for template_id, template in templates.items():
            if template_id in protected_ids:
                continue
            groups.setdefault(self._key(template), []).append(template_id)
        return [sorted(ids) for ids in groups.values() if len(ids) > 1]

    def consolidate(
        self,
        templates: dict[int, AbstractNumbering],
        instances: dict[int, NumberingInstance],
        tracker: DefinitionModificationTracker | None = None,
        protected: Iterable[int] = (),
    ) -> ConsolidationResult:
        """Merge duplicate templates in place.

        Args:
            templates: Templates by id; duplicates are deleted from it
            instances: Instances by id; remapped ones are updated in place
            tracker: Records remapped instances as modified and deleted
                templates as removed
            protected: Template ids never merged or removed

        Returns:
            ConsolidationResult with removed, remapped and group counts
        """
        result = ConsolidationResult()

        for ids in self.find_duplicate_groups(templates, protected):
            canonical, duplicates = ids[0], set(ids[1:])
            result.groups += 1

            for instance in instances.values():
                if instance.abstract_num_id in duplicates:
                    instance.abstract_num_id = canonical
                    result.remapped += 1
                    if tracker is not None:
                        tracker.mark_modified(DefinitionTier.INSTANCE, instance.num_id)

            for duplicate in sorted(duplicates):
                del templates[duplicate]
                result.removed += 1
                if tracker is not None:
                    tracker.mark_removed(DefinitionTier.TEMPLATE, duplicate)
                logger.debug("Merged numbering template %d into %d", duplicate, canonical)

        if result.groups:
            logger.info("%s", result)
        return result
