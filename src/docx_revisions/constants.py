"""
Centralized constants for OOXML namespaces, revision markup and schema ordering.

Import from here instead of repeating namespace URLs or element names in the
modules that build and read tracked-change markup.
"""

# =============================================================================
# Namespaces
# =============================================================================

# Main WordprocessingML namespace (Word 2007+)
WORD_NAMESPACE = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

# Word version-specific namespaces
W14_NAMESPACE = "http://schemas.microsoft.com/office/word/2010/wordml"  # Word 2010
W15_NAMESPACE = "http://schemas.microsoft.com/office/word/2012/wordml"  # Word 2012

# Office Document relationships
OFFICE_RELATIONSHIPS_NAMESPACE = (
    "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
)

# Markup Compatibility namespace
MC_NAMESPACE = "http://schemas.openxmlformats.org/markup-compatibility/2006"

# XML namespace
XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"


# =============================================================================
# Namespace Maps
# =============================================================================

NSMAP = {"w": WORD_NAMESPACE}

# Used when generating a numbering part from scratch
NSMAP_NUMBERING = {
    "w": WORD_NAMESPACE,
    "r": OFFICE_RELATIONSHIPS_NAMESPACE,
}


# =============================================================================
# Revision markup
# =============================================================================

# Revision dates are written without fractional seconds; Word rejects them
REVISION_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Paragraph property children in CT_PPrBase sequence order. The key is the
# name used in property mappings, the value the w: element local name.
PARAGRAPH_PROPERTY_ORDER: tuple[tuple[str, str], ...] = (
    ("style", "pStyle"),
    ("keep_next", "keepNext"),
    ("keep_lines", "keepLines"),
    ("widow_control", "widowControl"),
    ("numbering", "numPr"),
    ("suppress_line_numbers", "suppressLineNumbers"),
    ("bidi", "bidi"),
    ("spacing", "spacing"),
    ("indentation", "ind"),
    ("contextual_spacing", "contextualSpacing"),
    ("alignment", "jc"),
    ("text_direction", "textDirection"),
    ("text_alignment", "textAlignment"),
    ("outline_level", "outlineLvl"),
)

# Sub-attribute names for the compound paragraph properties
SPACING_ATTRIBUTES = {
    "before": "before",
    "after": "after",
    "line": "line",
    "line_rule": "lineRule",
}
INDENTATION_ATTRIBUTES = {
    "left": "left",
    "right": "right",
    "first_line": "firstLine",
    "hanging": "hanging",
}

# Run property children in CT_RPr sequence order (subset that is written)
RUN_PROPERTY_ORDER: tuple[str, ...] = (
    "rStyle",
    "rFonts",
    "b",
    "bCs",
    "i",
    "iCs",
    "caps",
    "smallCaps",
    "strike",
    "dstrike",
    "vanish",
    "color",
    "spacing",
    "sz",
    "szCs",
    "highlight",
    "u",
    "vertAlign",
)


# =============================================================================
# Numbering part (CT_Numbering)
# =============================================================================

NUMBERING_TEMPLATE_TAG = "abstractNum"
NUMBERING_TEMPLATE_ID = "abstractNumId"
NUMBERING_INSTANCE_TAG = "num"
NUMBERING_INSTANCE_ID = "numId"
# Must remain the last child of w:numbering
NUMBERING_TRAILING_TAGS = ("numIdMacAtCleanup",)

MAX_NUMBERING_LEVELS = 9


# =============================================================================
# Helper Functions
# =============================================================================


def w(tag: str) -> str:
    """Create a fully qualified Word namespace tag.

    Args:
        tag: Tag name without namespace prefix (e.g., "p", "r", "t")

    Returns:
        Fully qualified tag (e.g., "{http://...wordprocessingml/2006/main}p")

    Example:
        >>> w("p")
        '{http://schemas.openxmlformats.org/wordprocessingml/2006/main}p'
    """
    return f"{{{WORD_NAMESPACE}}}{tag}"


def w15(tag: str) -> str:
    """Create a fully qualified Word 2012 namespace tag."""
    return f"{{{W15_NAMESPACE}}}{tag}"


def r(tag: str) -> str:
    """Create a fully qualified Office Relationships namespace tag."""
    return f"{{{OFFICE_RELATIONSHIPS_NAMESPACE}}}{tag}"


def xml(tag: str) -> str:
    """Create a fully qualified xml: namespace attribute name (e.g. xml:space)."""
    return f"{{{XML_NAMESPACE}}}{tag}"


def local_name(tag: str) -> str:
    """Strip the namespace part from a Clark-notation tag."""
    return tag.rsplit("}", 1)[-1]
