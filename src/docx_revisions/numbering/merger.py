"""
Selective merge of a loaded definition table with its in-memory model.

A numbering part written by Word carries markup the in-memory model does not
hold: vendor namespaces, w15/w16cid attributes, w:nsid and w:tplc values.
Regenerating the part from the model would drop all of that. The merger
instead starts from the original text and only touches what changed:

- nothing tracked as changed: the original text is returned as-is
- definitions not tracked: kept as loaded
- modified definitions: replaced in place by their fresh serialization
- removed definitions: deleted
- new definitions: templates before the first instance, instances after the
  last instance, both strictly before any trailing element such as
  w:numIdMacAtCleanup, which must stay the last child

Root namespace declarations are kept and only ever extended.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from lxml import etree

from ..constants import (
    NUMBERING_INSTANCE_ID,
    NUMBERING_INSTANCE_TAG,
    NUMBERING_TEMPLATE_ID,
    NUMBERING_TEMPLATE_TAG,
    NUMBERING_TRAILING_TAGS,
    NSMAP_NUMBERING,
    WORD_NAMESPACE,
)
from ..results import MergeResult
from .tracking import DefinitionModificationTracker, DefinitionTier

logger = logging.getLogger(__name__)

# Byte order mark, XML declaration, comments and whitespace ahead of the root element
_PROLOG = re.compile(r"^\ufeff?(?:\s+|<\?.*?\?>|<!--.*?-->)*", re.DOTALL)


class XmlDefinition(Protocol):
    def to_xml(self) -> etree._Element: ...


@dataclass(frozen=True)
class DefinitionTableSchema:
    """Describes a two-tier definition part for the merger.

    Attributes:
        template_tag: Local name of template elements
        template_id: Local name of the template id attribute
        instance_tag: Local name of instance elements
        instance_id: Local name of the instance id attribute
        trailing_tags: Elements that must remain after every definition
        namespace: Namespace of the tags and id attributes
        required_namespaces: Prefix/URI pairs the root must declare
    """

    template_tag: str
    template_id: str
    instance_tag: str
    instance_id: str
    trailing_tags: tuple[str, ...] = ()
    namespace: str = WORD_NAMESPACE
    required_namespaces: tuple[tuple[str, str], ...] = ()

    def qualify(self, name: str) -> str:
        return f"{{{self.namespace}}}{name}"


NUMBERING_SCHEMA = DefinitionTableSchema(
    template_tag=NUMBERING_TEMPLATE_TAG,
    template_id=NUMBERING_TEMPLATE_ID,
    instance_tag=NUMBERING_INSTANCE_TAG,
    instance_id=NUMBERING_INSTANCE_ID,
    trailing_tags=NUMBERING_TRAILING_TAGS,
    required_namespaces=tuple(NSMAP_NUMBERING.items()),
)


def parse_part(raw: str) -> etree._Element:
    """Parse part text into its root element, keeping all whitespace."""
    parser = etree.XMLParser(remove_blank_text=False, resolve_entities=False)
    return etree.fromstring(raw.encode("utf-8"), parser)


def _split_prolog(raw: str) -> tuple[str, str]:
    """Return the text before the root element and the whitespace after it."""
    prolog = _PROLOG.match(raw).group(0)
    stripped = raw.rstrip()
    return prolog, raw[len(stripped) :]


def _definition_id(element: etree._Element, attribute: str) -> int | None:
    try:
        return int(element.get(attribute, ""))
    except ValueError:
        return None


def _insert_child(root: etree._Element, index: int, element: etree._Element) -> None:
    """Insert ``element`` at ``index`` reusing the surrounding indentation."""
    if index > 0:
        previous = root[index - 1]
        element.tail = previous.tail
        if index == len(root):
            # Appending: the old last child now needs the separator, not the closing newline
            previous.tail = root[index - 2].tail if index >= 2 else root.text
    else:
        element.tail = root.text
    root.insert(index, element)


class SelectiveFidelityMerger:
    """Merges changed definitions into the originally loaded part.

    Example:
        >>> merger = SelectiveFidelityMerger(NUMBERING_SCHEMA)
        >>> result = merger.merge(raw_xml, templates, instances, tracker)
        >>> result.unchanged
        True
    """

    def __init__(self, schema: DefinitionTableSchema = NUMBERING_SCHEMA) -> None:
        self.schema = schema

    def merge(
        self,
        raw: str,
        templates: Mapping[int, XmlDefinition],
        instances: Mapping[int, XmlDefinition],
        tracker: DefinitionModificationTracker,
    ) -> MergeResult:
        """Produce the part text for the current in-memory definitions.

        When ``tracker`` has no changes the original text is returned
        untouched and the per-definition counts stay at zero.

        Args:
            raw: The part text as originally loaded
            templates: Current templates by id
            instances: Current instances by id
            tracker: Which ids were modified or removed since loading

        Returns:
            MergeResult holding the merged text and what happened
        """
        if not tracker.has_changes:
            return MergeResult(xml=raw, unchanged=True)

        schema = self.schema
        root = parse_part(raw)
        result = MergeResult(xml="")

        tiers = (
            (DefinitionTier.TEMPLATE, schema.template_tag, schema.template_id, templates),
            (DefinitionTier.INSTANCE, schema.instance_tag, schema.instance_id, instances),
        )
        seen: dict[DefinitionTier, set[int]] = {tier: set() for tier, *_ in tiers}

        for tier, tag, id_attr, current in tiers:
            modified = tracker.modified(tier)
            removed = tracker.removed(tier)
            for element in root.findall(schema.qualify(tag)):
                definition_id = _definition_id(element, schema.qualify(id_attr))
                if definition_id is None:
                    result.preserved += 1
                    continue
                seen[tier].add(definition_id)

                if definition_id in removed:
                    root.remove(element)
                    result.removed += 1
                    logger.debug("Removed w:%s %d", tag, definition_id)
                elif definition_id in modified and definition_id in current:
                    replacement = current[definition_id].to_xml()
                    replacement.tail = element.tail
                    root.replace(element, replacement)
                    result.replaced += 1
                    logger.debug("Replaced w:%s %d", tag, definition_id)
                else:
                    result.preserved += 1

        seen_templates = seen[DefinitionTier.TEMPLATE]
        seen_instances = seen[DefinitionTier.INSTANCE]
        new_templates = [
            templates[i].to_xml() for i in sorted(templates) if i not in seen_templates
        ]
        new_instances = [
            instances[i].to_xml() for i in sorted(instances) if i not in seen_instances
        ]

        if new_templates:
            index = self._template_insert_index(root, result)
            for offset, element in enumerate(new_templates):
                _insert_child(root, index + offset, element)
        if new_instances:
            index = self._instance_insert_index(root, result)
            for offset, element in enumerate(new_instances):
                _insert_child(root, index + offset, element)
        result.added = len(new_templates) + len(new_instances)

        root = self._grow_namespaces(root)

        # Untouched definitions keep their content, not their bytes: lxml may
        # collapse empty elements, requote attributes or normalize references.
        prolog, epilog = _split_prolog(raw)
        result.xml = prolog + etree.tostring(root, encoding="unicode") + epilog
        logger.info(
            "Merged definitions: %d preserved, %d replaced, %d removed, %d added",
            result.preserved,
            result.replaced,
            result.removed,
            result.added,
        )
        return result

    # Anchors

    def _fallback_index(self, root: etree._Element, result: MergeResult, what: str) -> int:
        trailing = {self.schema.qualify(tag) for tag in self.schema.trailing_tags}
        result.fallback_used = True
        for index, child in enumerate(root):
            if child.tag in trailing:
                logger.warning(
                    "No w:%s anchor found; inserting %s before w:%s",
                    self.schema.instance_tag,
                    what,
                    child.tag.rsplit("}", 1)[-1],
                )
                return index
        logger.warning(
            "No w:%s anchor found; appending %s before closing tag",
            self.schema.instance_tag,
            what,
        )
        return len(root)

    def _template_insert_index(self, root: etree._Element, result: MergeResult) -> int:
        instance_tag = self.schema.qualify(self.schema.instance_tag)
        for index, child in enumerate(root):
            if child.tag == instance_tag:
                return index
        return self._fallback_index(root, result, "templates")

    def _instance_insert_index(self, root: etree._Element, result: MergeResult) -> int:
        instance_tag = self.schema.qualify(self.schema.instance_tag)
        last = None
        for index, child in enumerate(root):
            if child.tag == instance_tag:
                last = index
        if last is not None:
            return last + 1
        return self._fallback_index(root, result, "instances")

    # Namespaces

    def _grow_namespaces(self, root: etree._Element) -> etree._Element:
        """Return a root declaring every required namespace.

        Existing declarations keep their prefixes and order; missing ones are
        appended. A prefix already bound to another URI is left alone.
        """
        declared_uris = set(root.nsmap.values())
        missing = {
            prefix: uri
            for prefix, uri in self.schema.required_namespaces
            if uri not in declared_uris and prefix not in root.nsmap
        }
        if not missing:
            return root

        grown = etree.Element(root.tag, attrib=dict(root.attrib), nsmap={**root.nsmap, **missing})
        grown.text = root.text
        for child in list(root):
            grown.append(child)
        logger.debug("Added namespace declarations: %s", ", ".join(sorted(missing)))
        return grown
