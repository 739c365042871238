"""Tests for deduplicating structurally identical numbering templates."""

from lxml import etree

from docx_revisions import (
    AbstractNumbering,
    DefinitionConsolidator,
    DefinitionModificationTracker,
    NumberingInstance,
    NumberingLevel,
    NumberingManager,
)
from docx_revisions.constants import w
from docx_revisions.numbering import DefinitionTier, fingerprint

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"


def abstract_num(abstract_id: int, nsid: str, name: str) -> str:
    return (
        f'<w:abstractNum w:abstractNumId="{abstract_id}">'
        f'<w:nsid w:val="{nsid}"/><w:multiLevelType w:val="hybridMultilevel"/>'
        f'<w:name w:val="{name}"/>'
        '<w:lvl w:ilvl="0"><w:start w:val="1"/><w:numFmt w:val="decimal"/>'
        '<w:lvlText w:val="%1."/><w:lvlJc w:val="left"/>'
        '<w:pPr><w:ind w:left="720" w:hanging="360"/></w:pPr></w:lvl>'
        "</w:abstractNum>"
    )


def num(num_id: int, abstract_id: int) -> str:
    return f'<w:num w:numId="{num_id}"><w:abstractNumId w:val="{abstract_id}"/></w:num>'


# Three copies of one list pasted from different documents
DUPLICATED_NUMBERING = (
    f'<w:numbering xmlns:w="{W_NS}">'
    + abstract_num(5, "11111111", "Copy A")
    + abstract_num(2, "22222222", "Copy B")
    + abstract_num(9, "33333333", "Copy C")
    + num(1, 5)
    + num(2, 2)
    + num(3, 9)
    + "</w:numbering>"
)


def make_definitions():
    templates = {
        template_id: AbstractNumbering(
            template_id, name=f"List {template_id}", levels=[NumberingLevel.decimal(0)]
        )
        for template_id in (5, 2, 9)
    }
    instances = {
        1: NumberingInstance(1, 5),
        2: NumberingInstance(2, 2),
        3: NumberingInstance(3, 9),
    }
    return templates, instances


class TestFingerprint:
    """The structural-equality key."""

    def test_ignores_id_and_name(self):
        """Templates differing only in id and name share a fingerprint."""
        first = AbstractNumbering(1, name="A", levels=[NumberingLevel.decimal(0)])
        second = AbstractNumbering(8, name="B", levels=[NumberingLevel.decimal(0)])
        assert fingerprint(first) == fingerprint(second)

    def test_rendering_fields_matter(self):
        """Any rendering difference changes the fingerprint."""
        base = AbstractNumbering(1, levels=[NumberingLevel.decimal(0)])
        variants = [
            AbstractNumbering(1, levels=[NumberingLevel.decimal(0, "%1)")]),
            AbstractNumbering(1, levels=[NumberingLevel.decimal(0).set_indent(1080)]),
            AbstractNumbering(1, levels=[NumberingLevel(0, "decimal", "%1.", bold=True)]),
            AbstractNumbering(1, levels=[NumberingLevel(0, "decimal", "%1.", start=4)]),
            AbstractNumbering(1, levels=[NumberingLevel.decimal(0)], style_link="Outline"),
            AbstractNumbering(
                1, levels=[NumberingLevel.decimal(0)], multi_level_type="singleLevel"
            ),
        ]
        assert all(fingerprint(variant) != fingerprint(base) for variant in variants)


class TestDefinitionConsolidator:
    """Merging duplicate templates in plain mappings."""

    def test_lowest_id_is_canonical(self):
        """Identical templates 5, 2 and 9 collapse onto 2."""
        templates, instances = make_definitions()
        tracker = DefinitionModificationTracker()

        result = DefinitionConsolidator().consolidate(templates, instances, tracker)

        assert list(templates) == [2]
        assert {i.abstract_num_id for i in instances.values()} == {2}
        assert (result.groups, result.removed, result.remapped) == (1, 2, 2)
        assert tracker.removed(DefinitionTier.TEMPLATE) == {5, 9}
        assert tracker.modified(DefinitionTier.INSTANCE) == {1, 3}

    def test_second_run_is_a_no_op(self):
        """Consolidating twice removes and remaps nothing the second time."""
        templates, instances = make_definitions()
        consolidator = DefinitionConsolidator()
        consolidator.consolidate(templates, instances)

        again = consolidator.consolidate(templates, instances)

        assert (again.groups, again.removed, again.remapped) == (0, 0, 0)
        assert str(again) == "No duplicate definitions"

    def test_protected_templates_untouched(self):
        """Protected ids are neither removed nor used as the canonical id."""
        templates, instances = make_definitions()

        result = DefinitionConsolidator().consolidate(templates, instances, protected=[2])

        assert sorted(templates) == [2, 5]
        assert instances[3].abstract_num_id == 5
        assert instances[2].abstract_num_id == 2
        assert result.removed == 1

    def test_distinct_templates_kept(self):
        """Templates that render differently are not merged."""
        templates = {
            0: AbstractNumbering.bullet_list(0, levels=1),
            1: AbstractNumbering.numbered_list(1, levels=1),
        }
        result = DefinitionConsolidator().consolidate(templates, {})
        assert result.groups == 0
        assert sorted(templates) == [0, 1]

    def test_custom_key(self):
        """A custom key function decides what counts as a duplicate."""
        templates = {
            0: AbstractNumbering.bullet_list(0, levels=1),
            1: AbstractNumbering.numbered_list(1, levels=1),
        }
        groups = DefinitionConsolidator(key=lambda t: "same").find_duplicate_groups(templates)
        assert groups == [[0, 1]]


class TestManagerConsolidation:
    """Consolidating a loaded part and saving it."""

    def test_consolidate_loaded_part(self):
        """Duplicates are removed from the saved part and instances point at the survivor."""
        manager = NumberingManager.from_xml(DUPLICATED_NUMBERING)

        result = manager.consolidate()
        xml = manager.to_xml()

        assert str(result) == "Consolidated 1 group: removed 2, remapped 2"
        root = etree.fromstring(xml.encode("utf-8"))
        assert [e.get(w("abstractNumId")) for e in root.findall(w("abstractNum"))] == ["2"]
        assert [
            e.find(w("abstractNumId")).get(w("val")) for e in root.findall(w("num"))
        ] == ["2", "2", "2"]
        assert "22222222" in xml
        assert "11111111" not in xml

    def test_consolidate_then_cleanup(self):
        """Cleanup after consolidation drops instances no paragraph uses."""
        manager = NumberingManager.from_xml(DUPLICATED_NUMBERING)
        manager.consolidate()

        cleanup = manager.cleanup_unused(used_num_ids=[2])

        assert cleanup.instances_removed == 2
        assert cleanup.templates_removed == 0
        assert [i.num_id for i in manager.get_instances()] == [2]
