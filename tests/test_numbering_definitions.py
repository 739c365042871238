"""Tests for numbering levels, templates and instances."""

import pytest
from lxml import etree

from docx_revisions import (
    AbstractNumbering,
    InvalidDefinitionError,
    NumberingInstance,
    NumberingLevel,
)
from docx_revisions.constants import w

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

WORD_LEVEL_XML = f"""<w:lvl xmlns:w="{W_NS}" w:ilvl="1" w:tplc="04090019">
  <w:start w:val="3"/>
  <w:numFmt w:val="lowerLetter"/>
  <w:lvlRestart w:val="0"/>
  <w:lvlText w:val="%2)"/>
  <w:lvlJc w:val="right"/>
  <w:pPr><w:ind w:left="1440" w:hanging="180"/></w:pPr>
  <w:rPr>
    <w:rFonts w:ascii="Arial" w:hAnsi="Arial"/><w:b/><w:color w:val="FF0000"/><w:sz w:val="20"/>
  </w:rPr>
</w:lvl>"""


def child_names(element):
    return [child.tag.rsplit("}", 1)[-1] for child in element]


class TestNumberingLevel:
    """A single list level."""

    def test_defaults(self):
        """Indent and font defaults depend on level and format."""
        level = NumberingLevel.decimal(2)
        assert level.text == "%3."
        assert level.left_indent == 2160
        assert level.hanging_indent == 360
        assert level.font == "Calibri"
        assert NumberingLevel.bullet(0).font == "Symbol"

    @pytest.mark.parametrize(
        "factory,fmt",
        [
            (NumberingLevel.lower_roman, "lowerRoman"),
            (NumberingLevel.upper_roman, "upperRoman"),
            (NumberingLevel.lower_letter, "lowerLetter"),
            (NumberingLevel.upper_letter, "upperLetter"),
        ],
    )
    def test_factories(self, factory, fmt):
        """Factories set the number format and a default template."""
        level = factory(0)
        assert level.format == fmt
        assert level.text == "%1."

    def test_invalid_level(self):
        """Levels outside 0-8 are rejected."""
        with pytest.raises(InvalidDefinitionError, match="between 0 and 8"):
            NumberingLevel.decimal(9)

    def test_negative_indent(self):
        """Negative indents are rejected."""
        with pytest.raises(InvalidDefinitionError, match="Left indent"):
            NumberingLevel(0, "decimal", "%1.", left_indent=-1)
        with pytest.raises(InvalidDefinitionError, match="Indentation"):
            NumberingLevel.decimal(0).set_indent(100, -5)

    def test_negative_start(self):
        """Negative start values are rejected."""
        with pytest.raises(InvalidDefinitionError, match="Start value"):
            NumberingLevel(0, "decimal", "%1.", start=-1)

    def test_to_xml_child_order(self):
        """w:lvl children follow CT_Lvl order."""
        level = NumberingLevel(
            1, "decimal", "%1.%2.", restart_level=0, is_legal=True, bold=True, underline="single"
        )
        element = level.to_xml()

        assert element.get(w("ilvl")) == "1"
        assert child_names(element) == [
            "start",
            "numFmt",
            "lvlRestart",
            "isLgl",
            "suff",
            "lvlText",
            "lvlJc",
            "pPr",
            "rPr",
        ]
        assert child_names(element.find(w("rPr"))) == ["rFonts", "b", "sz", "szCs", "u"]

    def test_from_word_xml(self):
        """Levels written by Word read back into the model."""
        level = NumberingLevel.from_xml(etree.fromstring(WORD_LEVEL_XML))

        assert level.level == 1
        assert level.start == 3
        assert level.format == "lowerLetter"
        assert level.text == "%2)"
        assert level.alignment == "right"
        assert level.restart_level == 0
        assert (level.left_indent, level.hanging_indent) == (1440, 180)
        assert level.font == "Arial"
        assert level.font_size == 20
        assert level.color == "FF0000"
        assert level.bold and not level.italic

    def test_xml_round_trip_keeps_properties(self):
        """Rendering and reading a level keeps every field."""
        level = NumberingLevel(
            4, "upperRoman", "%5.", alignment="center", start=2, color="00FF00", italic=True
        )
        assert NumberingLevel.from_xml(level.to_xml()).properties() == level.properties()


class TestAbstractNumbering:
    """List templates."""

    def test_bullet_list(self):
        """Bullet templates cycle through their bullet characters."""
        template = AbstractNumbering.bullet_list(0, levels=4)
        assert [level.text for level in template.get_levels()] == ["•", "○", "▪", "•"]
        assert template.name == "Bullet List"

    def test_numbered_list(self):
        """Numbered templates cycle through their formats."""
        template = AbstractNumbering.numbered_list(3, levels=3)
        assert [level.format for level in template.get_levels()] == [
            "decimal",
            "lowerLetter",
            "lowerRoman",
        ]
        assert template.get_level(1).text == "%2."
        assert template.id == 3

    def test_levels_capped_at_nine(self):
        """Factories never create more than nine levels."""
        assert AbstractNumbering.bullet_list(0, levels=12).level_count == 9

    def test_level_management(self):
        """Levels can be added, replaced and removed by index."""
        template = AbstractNumbering(1)
        template.add_level(NumberingLevel.decimal(0))
        template.add_level(NumberingLevel.bullet(0))

        assert template.level_count == 1
        assert template.get_level(0).format == "bullet"
        assert template.remove_level(0)
        assert not template.has_level(0)
        assert template.remove_level(0) is False

    def test_invalid_values(self):
        """Negative ids and unknown multi-level types are rejected."""
        with pytest.raises(InvalidDefinitionError, match="non-negative"):
            AbstractNumbering(-1)
        with pytest.raises(InvalidDefinitionError, match="Unknown multi-level type"):
            AbstractNumbering(0, multi_level_type="spiral")

    def test_to_xml(self):
        """Templates write their header elements before the levels."""
        template = AbstractNumbering(
            5, name="Legal", levels=[NumberingLevel.decimal(0)], style_link="LegalList"
        )
        element = template.to_xml()

        assert element.get(w("abstractNumId")) == "5"
        assert child_names(element) == ["multiLevelType", "name", "styleLink", "lvl"]

    def test_empty_template_gets_default_level(self):
        """A template without levels still writes one decimal level."""
        element = AbstractNumbering(0).to_xml()
        assert len(element.findall(w("lvl"))) == 1

    def test_from_xml(self):
        """Templates read their header and levels."""
        element = etree.fromstring(
            f'<w:abstractNum xmlns:w="{W_NS}" w:abstractNumId="7">'
            '<w:nsid w:val="1A2B3C4D"/><w:multiLevelType w:val="hybridMultilevel"/>'
            '<w:numStyleLink w:val="Outline"/>'
            '<w:lvl w:ilvl="0"><w:numFmt w:val="bullet"/><w:lvlText w:val="-"/></w:lvl>'
            "</w:abstractNum>"
        )
        template = AbstractNumbering.from_xml(element)

        assert template.abstract_num_id == 7
        assert template.multi_level_type == "hybridMultilevel"
        assert template.num_style_link == "Outline"
        assert template.get_level(0).text == "-"


class TestNumberingInstance:
    """List instances."""

    def test_to_xml_with_overrides(self):
        """Start overrides are written per level."""
        element = NumberingInstance(4, 2, {1: 5}).to_xml()

        assert element.get(w("numId")) == "4"
        assert element.find(w("abstractNumId")).get(w("val")) == "2"
        override = element.find(w("lvlOverride"))
        assert override.get(w("ilvl")) == "1"
        assert override.find(w("startOverride")).get(w("val")) == "5"

    def test_from_xml(self):
        """Instances read their template reference and overrides."""
        element = etree.fromstring(
            f'<w:num xmlns:w="{W_NS}" w:numId="3"><w:abstractNumId w:val="1"/>'
            '<w:lvlOverride w:ilvl="0"><w:startOverride w:val="10"/></w:lvlOverride></w:num>'
        )
        instance = NumberingInstance.from_xml(element)
        assert instance == NumberingInstance(3, 1, {0: 10})

    def test_negative_ids(self):
        """Negative ids are rejected."""
        with pytest.raises(InvalidDefinitionError):
            NumberingInstance(-1, 0)
