"""
NumberingManager: the in-memory numbering part.

Holds list templates (w:abstractNum) and instances (w:num), allocates ids,
and tracks which definitions changed since loading so that saving a loaded
document rewrites only those definitions.
"""

import logging
from collections.abc import Iterable

from lxml import etree

from ..constants import NSMAP_NUMBERING, w
from ..errors import DefinitionNotFoundError, InvalidDefinitionError
from ..results import CleanupResult, ConsolidationResult, MergeResult
from .consolidation import DefinitionConsolidator
from .definitions import AbstractNumbering, NumberingInstance
from .level import DEFAULT_HANGING_INDENT, NumberingLevel
from .merger import NUMBERING_SCHEMA, SelectiveFidelityMerger, parse_part
from .tracking import DefinitionModificationTracker, DefinitionTier

logger = logging.getLogger(__name__)

TEMPLATE = DefinitionTier.TEMPLATE
INSTANCE = DefinitionTier.INSTANCE


class NumberingManager:
    """Numbering templates and instances for one document.

    Example:
        >>> manager = NumberingManager()
        >>> num_id = manager.create_bullet_list(levels=3)
        >>> manager.get_instance(num_id).abstract_num_id
        0
    """

    def __init__(self) -> None:
        self._templates: dict[int, AbstractNumbering] = {}
        self._instances: dict[int, NumberingInstance] = {}
        self._next_abstract_num_id = 0
        self._next_num_id = 1
        self._raw_xml: str | None = None
        self.tracker = DefinitionModificationTracker()
        self.merger = SelectiveFidelityMerger(NUMBERING_SCHEMA)

    # Templates

    def add_abstract_numbering(self, template: AbstractNumbering) -> "NumberingManager":
        """Add or replace a template and mark it modified."""
        template_id = template.abstract_num_id
        self._templates[template_id] = template
        self._next_abstract_num_id = max(self._next_abstract_num_id, template_id + 1)
        self.tracker.mark_modified(TEMPLATE, template_id)
        return self

    def get_abstract_numbering(self, abstract_num_id: int) -> AbstractNumbering | None:
        return self._templates.get(abstract_num_id)

    def get_abstract_numberings(self) -> list[AbstractNumbering]:
        """Return all templates sorted by id."""
        return [self._templates[i] for i in sorted(self._templates)]

    def has_abstract_numbering(self, abstract_num_id: int) -> bool:
        return abstract_num_id in self._templates

    def remove_abstract_numbering(self, abstract_num_id: int) -> bool:
        """Remove a template and every instance that uses it.

        Returns:
            True if the template existed
        """
        for num_id in [
            num_id
            for num_id, instance in self._instances.items()
            if instance.abstract_num_id == abstract_num_id
        ]:
            del self._instances[num_id]
            self.tracker.mark_removed(INSTANCE, num_id)

        if self._templates.pop(abstract_num_id, None) is None:
            return False
        self.tracker.mark_removed(TEMPLATE, abstract_num_id)
        return True

    def mark_abstract_modified(self, abstract_num_id: int) -> None:
        """Flag a template for rewrite after editing its levels directly."""
        if abstract_num_id in self._templates:
            self.tracker.mark_modified(TEMPLATE, abstract_num_id)

    # Instances

    def add_instance(self, instance: NumberingInstance) -> "NumberingManager":
        """Add or replace an instance and mark it modified.

        Raises:
            DefinitionNotFoundError: If the instance's template does not exist
        """
        if instance.abstract_num_id not in self._templates:
            raise DefinitionNotFoundError(instance.abstract_num_id, sorted(self._templates))
        self._instances[instance.num_id] = instance
        self._next_num_id = max(self._next_num_id, instance.num_id + 1)
        self.tracker.mark_modified(INSTANCE, instance.num_id)
        return self

    def get_instance(self, num_id: int) -> NumberingInstance | None:
        return self._instances.get(num_id)

    def get_instances(self) -> list[NumberingInstance]:
        return [self._instances[i] for i in sorted(self._instances)]

    def has_instance(self, num_id: int) -> bool:
        return num_id in self._instances

    def remove_instance(self, num_id: int) -> bool:
        if self._instances.pop(num_id, None) is None:
            return False
        self.tracker.mark_removed(INSTANCE, num_id)
        return True

    # List creation

    def _allocate_template_id(self) -> int:
        template_id = self._next_abstract_num_id
        self._next_abstract_num_id += 1
        return template_id

    def create_instance(self, abstract_num_id: int) -> int:
        """Create a new instance of an existing template.

        Returns:
            The new numId

        Raises:
            DefinitionNotFoundError: If the template does not exist
        """
        if abstract_num_id not in self._templates:
            raise DefinitionNotFoundError(abstract_num_id, sorted(self._templates))
        num_id = self._next_num_id
        self.add_instance(NumberingInstance(num_id, abstract_num_id))
        return num_id

    def create_bullet_list(self, levels: int = 9, bullets: list[str] | None = None) -> int:
        """Create a bullet list template plus an instance and return its numId."""
        template_id = self._allocate_template_id()
        if bullets:
            template = AbstractNumbering.bullet_list(template_id, levels, bullets)
        else:
            template = AbstractNumbering.bullet_list(template_id, levels)
        self.add_abstract_numbering(template)
        return self.create_instance(template_id)

    def create_numbered_list(self, levels: int = 9, formats: list[str] | None = None) -> int:
        """Create a numbered list template plus an instance and return its numId."""
        template_id = self._allocate_template_id()
        if formats:
            template = AbstractNumbering.numbered_list(template_id, levels, formats)
        else:
            template = AbstractNumbering.numbered_list(template_id, levels)
        self.add_abstract_numbering(template)
        return self.create_instance(template_id)

    def create_custom_list(self, levels: list[NumberingLevel], name: str | None = None) -> int:
        template_id = self._allocate_template_id()
        self.add_abstract_numbering(AbstractNumbering(template_id, name=name, levels=levels))
        return self.create_instance(template_id)

    def set_list_indentation(
        self,
        num_id: int,
        level: int,
        left_indent: int,
        hanging_indent: int = DEFAULT_HANGING_INDENT,
    ) -> bool:
        """Change one level's indentation for the template behind ``num_id``.

        Negative indents are clamped to zero. Every list sharing the template
        is affected.

        Returns:
            True if the level was updated, False if the instance, template or
            level does not exist

        Raises:
            InvalidDefinitionError: If ``level`` is outside 0-8
        """
        if not 0 <= level <= 8:
            raise InvalidDefinitionError(f"Invalid level {level}. Level must be between 0 and 8.")

        instance = self._instances.get(num_id)
        if instance is None:
            logger.warning("Numbering instance %d does not exist", num_id)
            return False
        template = self._templates.get(instance.abstract_num_id)
        if template is None:
            logger.warning("Abstract numbering for instance %d does not exist", num_id)
            return False
        numbering_level = template.get_level(level)
        if numbering_level is None:
            logger.warning("Level %d does not exist in abstract numbering", level)
            return False

        numbering_level.set_indent(max(0, left_indent), max(0, hanging_indent))
        self.mark_abstract_modified(template.abstract_num_id)
        return True

    # Housekeeping

    @property
    def template_count(self) -> int:
        return len(self._templates)

    @property
    def instance_count(self) -> int:
        return len(self._instances)

    @property
    def is_modified(self) -> bool:
        return self.tracker.has_changes

    def clear(self) -> "NumberingManager":
        """Remove every definition and restart id allocation."""
        for num_id in list(self._instances):
            self.tracker.mark_removed(INSTANCE, num_id)
        for template_id in list(self._templates):
            self.tracker.mark_removed(TEMPLATE, template_id)
        self._templates.clear()
        self._instances.clear()
        self._next_abstract_num_id = 0
        self._next_num_id = 1
        return self

    def cleanup_unused(self, used_num_ids: Iterable[int]) -> CleanupResult:
        """Remove instances no paragraph uses, then templates no instance uses.

        Args:
            used_num_ids: numIds referenced by the document's paragraphs

        Returns:
            CleanupResult with the number of each removed
        """
        used = set(used_num_ids)
        result = CleanupResult()

        for num_id in [num_id for num_id in self._instances if num_id not in used]:
            del self._instances[num_id]
            self.tracker.mark_removed(INSTANCE, num_id)
            result.instances_removed += 1

        referenced = {instance.abstract_num_id for instance in self._instances.values()}
        for template_id in [t for t in self._templates if t not in referenced]:
            del self._templates[template_id]
            self.tracker.mark_removed(TEMPLATE, template_id)
            result.templates_removed += 1

        if result.instances_removed or result.templates_removed:
            logger.info(
                "Removed %d unused numbering instances and %d templates",
                result.instances_removed,
                result.templates_removed,
            )
        return result

    def consolidate(self, protected: Iterable[int] = ()) -> ConsolidationResult:
        """Merge structurally identical templates.

        Args:
            protected: Template ids to leave alone

        Returns:
            ConsolidationResult with removed, remapped and group counts
        """
        return DefinitionConsolidator().consolidate(
            self._templates, self._instances, self.tracker, protected
        )

    # Serialization

    def _build_root(self) -> etree._Element:
        root = etree.Element(w("numbering"), nsmap=NSMAP_NUMBERING)
        for template in self.get_abstract_numberings():
            root.append(template.to_xml())
        for instance in self.get_instances():
            root.append(instance.to_xml())
        return root

    def generate_xml(self) -> str:
        """Generate a complete numbering part from the in-memory model."""
        return etree.tostring(
            self._build_root(), xml_declaration=True, encoding="UTF-8", standalone=True
        ).decode("utf-8")

    @classmethod
    def from_xml(cls, raw: str) -> "NumberingManager":
        """Load a numbering part, keeping its text for selective merging.

        Loaded definitions do not count as modifications.

        Args:
            raw: The numbering part text

        Returns:
            A manager holding the part's templates and instances
        """
        manager = cls()
        root = parse_part(raw)
        for element in root.findall(w("abstractNum")):
            template = AbstractNumbering.from_xml(element)
            manager._templates[template.abstract_num_id] = template
        for element in root.findall(w("num")):
            instance = NumberingInstance.from_xml(element)
            manager._instances[instance.num_id] = instance
        if manager._templates:
            manager._next_abstract_num_id = max(manager._templates) + 1
        if manager._instances:
            manager._next_num_id = max(manager._instances) + 1
        manager._raw_xml = raw
        manager.tracker.reset()
        logger.debug(
            "Loaded %d numbering templates and %d instances",
            manager.template_count,
            manager.instance_count,
        )
        return manager

    @property
    def raw_xml(self) -> str | None:
        return self._raw_xml

    def merge(self) -> MergeResult:
        """Merge current definitions into the loaded part text.

        Without loaded text the part is generated from scratch.
        """
        if self._raw_xml is None:
            added = self.template_count + self.instance_count
            return MergeResult(xml=self.generate_xml(), added=added)
        return self.merger.merge(self._raw_xml, self._templates, self._instances, self.tracker)

    def to_xml(self) -> str:
        """Return the numbering part text to save."""
        return self.merge().xml
