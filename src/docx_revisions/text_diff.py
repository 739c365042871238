"""
Prefix/suffix text diffing for granular tracked changes.

Replacing a run's text wholesale produces a "delete everything, insert
everything" redline. This module trims the common prefix and suffix of the two
strings so that only the changed middle is tracked.

It is deliberately not an LCS diff: it finds at most one changed region and
therefore returns at most four segments. That covers appends, truncations,
infix replacements and whitespace fixes. A caller that sees no ``equal``
segment gains nothing from granular tracking and should replace the whole unit.
"""

from dataclasses import dataclass
from enum import Enum


class SegmentKind(Enum):
    """Kinds of diff segments.

    Attributes:
        EQUAL: Text present in both strings
        DELETE: Text present only in the old string
        INSERT: Text present only in the new string
    """

    EQUAL = "equal"
    DELETE = "delete"
    INSERT = "insert"


@dataclass(frozen=True)
class DiffSegment:
    """One piece of a text diff.

    Attributes:
        kind: Whether the text is kept, deleted or inserted
        text: The segment text (never empty)
    """

    kind: SegmentKind
    text: str

    @classmethod
    def equal(cls, text: str) -> "DiffSegment":
        return cls(SegmentKind.EQUAL, text)

    @classmethod
    def delete(cls, text: str) -> "DiffSegment":
        return cls(SegmentKind.DELETE, text)

    @classmethod
    def insert(cls, text: str) -> "DiffSegment":
        return cls(SegmentKind.INSERT, text)


def diff_text(old_text: str, new_text: str) -> list[DiffSegment]:
    """Compute the edit segments that turn ``old_text`` into ``new_text``.

    Segments are emitted in the order equal-prefix, delete, insert,
    equal-suffix, skipping empty ones.

    Args:
        old_text: The original text
        new_text: The replacement text

    Returns:
        Between zero and four segments

    Example:
        >>> [(s.kind.value, s.text) for s in diff_text("The quick fox", "The slow fox")]
        [('equal', 'The '), ('delete', 'quick'), ('insert', 'slow'), ('equal', ' fox')]
    """
    if old_text == new_text:
        return [DiffSegment.equal(old_text)] if old_text else []

    if not old_text:
        return [DiffSegment.insert(new_text)]

    if not new_text:
        return [DiffSegment.delete(old_text)]

    min_len = min(len(old_text), len(new_text))

    prefix_len = 0
    while prefix_len < min_len and old_text[prefix_len] == new_text[prefix_len]:
        prefix_len += 1

    # Suffix may not overlap the prefix in the shorter string
    suffix_len = 0
    max_suffix = min_len - prefix_len
    while (
        suffix_len < max_suffix
        and old_text[len(old_text) - 1 - suffix_len] == new_text[len(new_text) - 1 - suffix_len]
    ):
        suffix_len += 1

    segments: list[DiffSegment] = []

    if prefix_len:
        segments.append(DiffSegment.equal(old_text[:prefix_len]))

    old_middle = old_text[prefix_len : len(old_text) - suffix_len]
    new_middle = new_text[prefix_len : len(new_text) - suffix_len]

    if old_middle:
        segments.append(DiffSegment.delete(old_middle))
    if new_middle:
        segments.append(DiffSegment.insert(new_middle))

    if suffix_len:
        segments.append(DiffSegment.equal(old_text[len(old_text) - suffix_len :]))

    return segments


def diff_has_unchanged_parts(segments: list[DiffSegment]) -> bool:
    """Check whether a diff kept any text, i.e. granular tracking is worthwhile."""
    return any(segment.kind is SegmentKind.EQUAL for segment in segments)


def reconstruct_old(segments: list[DiffSegment]) -> str:
    """Rebuild the original text from equal and delete segments."""
    return "".join(s.text for s in segments if s.kind is not SegmentKind.INSERT)


def reconstruct_new(segments: list[DiffSegment]) -> str:
    """Rebuild the new text from equal and insert segments."""
    return "".join(s.text for s in segments if s.kind is not SegmentKind.DELETE)
