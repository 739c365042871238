"""
Conversion between property mappings and OOXML property-bag elements.

Run, paragraph, table and section properties are held in memory as plain
dicts. Run and generic bags are keyed by WordprocessingML local names
(``{"b": True, "sz": 24}``); paragraph properties use readable keys
(``{"alignment": "center", "keep_next": True}``) and are written in schema
order, which Word enforces.
"""

from typing import Any

from lxml import etree

from ..constants import (
    INDENTATION_ATTRIBUTES,
    NSMAP,
    PARAGRAPH_PROPERTY_ORDER,
    RUN_PROPERTY_ORDER,
    SPACING_ATTRIBUTES,
    local_name,
    w,
)

# On/off properties where w:val="0" means "explicitly off"
TOGGLE_PROPERTIES = frozenset(
    {
        "b",
        "bCs",
        "i",
        "iCs",
        "caps",
        "smallCaps",
        "strike",
        "dstrike",
        "vanish",
        "keepNext",
        "keepLines",
        "widowControl",
        "suppressLineNumbers",
        "bidi",
        "contextualSpacing",
    }
)

_FALSE_VALUES = ("0", "false", "off")

# Children of a property bag that are not properties themselves
_NESTED_RECORDS = frozenset({"rPrChange", "pPrChange", "rPr", "sectPr"})


def make_element(tag: str, attrib: dict[str, str] | None = None) -> etree._Element:
    """Create a standalone w: element carrying the w prefix declaration."""
    element = etree.Element(w(tag), nsmap=NSMAP)
    for key, value in (attrib or {}).items():
        element.set(w(key), value)
    return element


def property_element(name: str, value: Any) -> etree._Element | None:
    """Build one property child element.

    ``True`` becomes an empty element, strings and numbers a ``w:val``
    attribute, and dicts one attribute per key. ``None`` and ``False`` are
    omitted (absence already means "off").

    Args:
        name: Local element name (e.g. "b", "sz", "rFonts")
        value: The property value

    Returns:
        The element, or None when nothing should be written
    """
    if value is None or value is False:
        return None
    if value is True:
        return make_element(name)
    if isinstance(value, dict):
        return make_element(name, {k: str(v) for k, v in value.items() if v is not None})
    return make_element(name, {"val": str(value)})


def build_property_bag(tag: str, properties: dict[str, Any] | None) -> etree._Element:
    """Build a property bag with children in mapping order."""
    bag = make_element(tag)
    for name, value in (properties or {}).items():
        child = property_element(name, value)
        if child is not None:
            bag.append(child)
    return bag


def build_run_properties(properties: dict[str, Any] | None, tag: str = "rPr") -> etree._Element:
    """Build a w:rPr bag with known children in CT_RPr order."""
    properties = properties or {}
    ordered = [name for name in RUN_PROPERTY_ORDER if name in properties]
    ordered += [name for name in properties if name not in RUN_PROPERTY_ORDER]
    return build_property_bag(tag, {name: properties[name] for name in ordered})


def _paragraph_property_element(key: str, element_name: str, value: Any) -> etree._Element | None:
    if value is None or value is False:
        return None
    if key == "numbering" and isinstance(value, dict):
        num_pr = make_element("numPr")
        if value.get("level") is not None:
            num_pr.append(make_element("ilvl", {"val": str(value["level"])}))
        if value.get("num_id") is not None:
            num_pr.append(make_element("numId", {"val": str(value["num_id"])}))
        return num_pr
    if key == "spacing" and isinstance(value, dict):
        return make_element(
            element_name,
            {SPACING_ATTRIBUTES.get(k, k): str(v) for k, v in value.items() if v is not None},
        )
    if key == "indentation" and isinstance(value, dict):
        return make_element(
            element_name,
            {INDENTATION_ATTRIBUTES.get(k, k): str(v) for k, v in value.items() if v is not None},
        )
    return property_element(element_name, value)


def build_paragraph_properties(
    properties: dict[str, Any] | None, tag: str = "pPr"
) -> etree._Element:
    """Build a w:pPr bag with children in CT_PPrBase order.

    Keys not in the known order are written afterwards, in mapping order,
    using the key as the element name.

    Args:
        properties: Paragraph properties keyed by readable names
        tag: Bag element name

    Returns:
        The property bag element
    """
    properties = properties or {}
    bag = make_element(tag)
    known = set()
    for key, element_name in PARAGRAPH_PROPERTY_ORDER:
        known.add(key)
        if key in properties:
            child = _paragraph_property_element(key, element_name, properties[key])
            if child is not None:
                bag.append(child)
    for key, value in properties.items():
        if key not in known:
            child = property_element(key, value)
            if child is not None:
                bag.append(child)
    return bag


def parse_property_value(element: etree._Element) -> Any:
    """Read one property child back into a Python value."""
    name = local_name(element.tag)
    attributes = {local_name(k): v for k, v in element.attrib.items()}
    if not attributes:
        return True
    if set(attributes) == {"val"}:
        value = attributes["val"]
        if name in TOGGLE_PROPERTIES:
            return value.lower() not in _FALSE_VALUES
        return value
    return attributes


def parse_property_bag(bag: etree._Element | None) -> dict[str, Any]:
    """Read a run or generic property bag into a mapping keyed by local names."""
    if bag is None:
        return {}
    properties: dict[str, Any] = {}
    for child in bag:
        if not isinstance(child.tag, str):
            continue
        name = local_name(child.tag)
        if name in _NESTED_RECORDS:
            continue
        properties[name] = parse_property_value(child)
    return properties


def parse_paragraph_properties(bag: etree._Element | None) -> dict[str, Any]:
    """Read a w:pPr bag into a mapping keyed by readable names."""
    if bag is None:
        return {}
    by_element = {element_name: key for key, element_name in PARAGRAPH_PROPERTY_ORDER}
    spacing_keys = {v: k for k, v in SPACING_ATTRIBUTES.items()}
    indent_keys = {v: k for k, v in INDENTATION_ATTRIBUTES.items()}

    properties: dict[str, Any] = {}
    for child in bag:
        if not isinstance(child.tag, str):
            continue
        name = local_name(child.tag)
        if name in _NESTED_RECORDS:
            continue
        key = by_element.get(name, name)
        if key == "numbering":
            ilvl = child.find(w("ilvl"))
            num_id = child.find(w("numId"))
            properties[key] = {
                "level": int(ilvl.get(w("val"))) if ilvl is not None else None,
                "num_id": int(num_id.get(w("val"))) if num_id is not None else None,
            }
        elif key == "spacing":
            properties[key] = {
                spacing_keys.get(local_name(k), local_name(k)): v for k, v in child.attrib.items()
            }
        elif key == "indentation":
            properties[key] = {
                indent_keys.get(local_name(k), local_name(k)): v for k, v in child.attrib.items()
            }
        else:
            properties[key] = parse_property_value(child)
    return properties
