"""Tests for accepting and rejecting tracked changes with ChangeTransformer."""

from datetime import datetime, timezone

import pytest

from docx_revisions import (
    AcceptPolicy,
    ChangeTransformer,
    Hyperlink,
    Paragraph,
    Revision,
    RevisionRegistry,
    RevisionType,
    Run,
    SelectionCriteria,
)
from docx_revisions.operations import count_revisions_by_type, paragraph_has_revisions

DATE = datetime(2024, 2, 1, tzinfo=timezone.utc)


def texts(content):
    return [item.get_text() for item in content]


def kinds(content):
    return [
        item.revision_type.value if isinstance(item, Revision) else type(item).__name__
        for item in content
    ]


@pytest.fixture
def transformer():
    return ChangeTransformer()


class TestApply:
    """Rewriting a single content sequence."""

    def test_accept_only_deletions(self, transformer):
        """Accepting deletions drops them and leaves insertions tracked."""
        content = [
            Run("A"),
            Revision.create_deletion("Bob", Run("B"), DATE),
            Revision.create_insertion("Bob", Run("C"), DATE),
        ]
        result = transformer.apply(content, AcceptPolicy.only(RevisionType.DELETE))

        assert kinds(result) == ["Run", "insert"]
        assert texts(result) == ["A", "C"]
        assert result[1] is content[2]

    def test_accept_all_kinds(self, transformer):
        """Accepted insertions unwrap in place and deletions vanish."""
        content = [
            Run("The "),
            Revision.create_deletion("Bob", Run("quick"), DATE),
            Revision.create_insertion("Bob", Run("slow"), DATE),
            Run(" fox"),
        ]
        result = transformer.apply(content)

        assert kinds(result) == ["Run", "Run", "Run"]
        assert "".join(texts(result)) == "The slow fox"

    def test_input_is_not_modified(self, transformer):
        """apply returns a new list."""
        content = [Run("A"), Revision.create_deletion("Bob", Run("B"), DATE)]
        transformer.apply(content)
        assert len(content) == 2

    def test_non_revisions_pass_through(self, transformer):
        """Runs and hyperlinks are kept as the same objects."""
        link = Hyperlink([Run("site")], anchor="top")
        run = Run("plain")
        result = transformer.apply([run, link])
        assert result[0] is run
        assert result[1] is link

    def test_moves(self, transformer):
        """Accepting a move drops the old location and keeps the new."""
        content = [
            Revision.create_move_from("Bob", Run("X"), "m1", DATE),
            Run("Y"),
            Revision.create_move_to("Bob", Run("X"), "m1", DATE),
        ]
        result = transformer.apply(content, AcceptPolicy.only(RevisionType.MOVE_TO))
        assert texts(result) == ["Y", "X"]

    def test_property_change_unwraps(self, transformer):
        """Accepting a property change keeps the content with its new properties."""
        run = Run("bold", {"b": True})
        content = [Revision.create_run_property_change("Bob", run, {}, DATE)]
        result = transformer.apply(content)
        assert result == [run]
        assert run.properties == {"b": True}

    def test_table_cell_revisions_never_covered(self, transformer):
        """Cell insert, delete and merge revisions stay in place."""
        cell = Revision(RevisionType.TABLE_CELL_DELETE, "Bob", date=DATE)
        result = transformer.apply([cell])
        assert result == [cell]

    @pytest.mark.parametrize(
        "policy",
        [
            AcceptPolicy(),
            AcceptPolicy.only(RevisionType.INSERT),
            AcceptPolicy.only(RevisionType.DELETE),
            AcceptPolicy.only(RevisionType.MOVE_FROM),
            AcceptPolicy.only(RevisionType.RUN_PROPERTY_CHANGE),
            AcceptPolicy(False, False, False, False),
        ],
    )
    def test_uncovered_revisions_survive_in_order(self, transformer, policy):
        """Revisions outside the policy are kept, in their original order."""
        content = [
            Run("a"),
            Revision.create_insertion("Bob", Run("b"), DATE),
            Revision.create_deletion("Bob", Run("c"), DATE),
            Revision.create_move_from("Bob", Run("d"), "m", DATE),
            Revision.create_move_to("Bob", Run("d"), "m", DATE),
            Revision.create_run_property_change("Bob", Run("e", {"i": True}), {}, DATE),
        ]
        result = transformer.apply(content, policy)
        remaining = [item for item in result if isinstance(item, Revision)]
        expected = [
            item
            for item in content
            if isinstance(item, Revision) and not policy.covers(item.revision_type)
        ]
        assert remaining == expected


class TestAcceptPolicy:
    """Policy construction."""

    def test_default_accepts_everything(self):
        """The default policy covers every non-cell kind."""
        policy = AcceptPolicy()
        assert policy.accepts_everything
        assert policy.covers(RevisionType.SECTION_PROPERTY_CHANGE)
        assert not policy.covers(RevisionType.TABLE_CELL_MERGE)

    def test_only_groups_moves(self):
        """Either move half enables both."""
        policy = AcceptPolicy.only(RevisionType.MOVE_TO)
        assert policy.covers(RevisionType.MOVE_FROM)
        assert not policy.covers(RevisionType.INSERT)

    def test_only_groups_property_changes(self):
        """Any property kind enables all property kinds."""
        policy = AcceptPolicy.only(RevisionType.TABLE_PROPERTY_CHANGE)
        assert policy.covers(RevisionType.RUN_PROPERTY_CHANGE)
        assert not policy.accepts_everything


class TestParagraphOperations:
    """Accepting and rejecting within one paragraph."""

    def make_paragraph(self):
        return Paragraph(
            [
                Run("The "),
                Revision.create_deletion("Bob", Run("quick"), DATE),
                Revision.create_insertion("Bob", Run("slow"), DATE),
                Run(" fox"),
            ]
        )

    def test_accept_in_paragraph(self, transformer):
        """Accepting rewrites the paragraph in place and counts each kind."""
        para = self.make_paragraph()
        result = transformer.accept_in_paragraph(para)

        assert para.get_text() == "The slow fox"
        assert not para.has_revisions()
        assert result.insertions == 1
        assert result.deletions == 1
        assert result.total == 2

    def test_reject_in_paragraph(self, transformer):
        """Rejecting restores deletions and drops insertions."""
        para = self.make_paragraph()
        result = transformer.reject_in_paragraph(para)

        assert para.get_text() == "The quick fox"
        assert not para.has_revisions()
        assert result.insertions == 1
        assert result.deletions == 1

    def test_accept_and_reject_are_complementary(self, transformer):
        """Accepting yields the current text and rejecting the original text."""
        accepted = self.make_paragraph()
        rejected = self.make_paragraph()
        current = accepted.get_text()
        original = rejected.get_original_text()

        transformer.accept_in_paragraph(accepted)
        transformer.reject_in_paragraph(rejected)

        assert accepted.get_text() == current
        assert rejected.get_text() == original

    def test_reject_move(self, transformer):
        """Rejecting a move keeps the text at its old location."""
        para = Paragraph(
            [
                Revision.create_move_from("Bob", Run("X"), "m1", DATE),
                Run("Y"),
                Revision.create_move_to("Bob", Run("X"), "m1", DATE),
            ]
        )
        result = transformer.reject_in_paragraph(para)
        assert para.get_text() == "XY"
        assert result.moves == 2

    def test_reject_run_property_change_restores_properties(self, transformer):
        """Rejecting a formatting change puts back the previous run properties."""
        run = Run("styled", {"b": True})
        para = Paragraph([Revision.create_run_property_change("Bob", run, {"i": True}, DATE)])
        result = transformer.reject_in_paragraph(para)

        assert para.get_content() == [run]
        assert run.properties == {"i": True}
        assert result.property_changes == 1

    def test_reject_property_change_on_hyperlink(self, transformer):
        """Rejected formatting on a hyperlink is restored on each of its runs."""
        link = Hyperlink([Run("a", {"b": True}), Run("b", {"b": True})], anchor="x")
        para = Paragraph(
            [
                Revision.create_property_change(
                    RevisionType.RUN_PROPERTY_CHANGE, "Bob", link, {"u": "single"}
                )
            ]
        )
        transformer.reject_in_paragraph(para)
        assert [run.properties for run in link.runs] == [{"u": "single"}, {"u": "single"}]

    def test_accept_clears_paragraph_property_change(self, transformer):
        """Accepting property changes clears a pending w:pPrChange."""
        para = Paragraph([Run("x")], properties={"alignment": "left"})
        para.track_property_change("Bob", {"alignment": "center"}, DATE)

        result = transformer.accept_in_paragraph(para)

        assert para.property_change is None
        assert para.properties == {"alignment": "center"}
        assert result.property_changes == 1

    def test_reject_restores_paragraph_properties(self, transformer):
        """Rejecting property changes restores the recorded paragraph properties."""
        para = Paragraph([Run("x")], properties={"alignment": "left"})
        para.track_property_change("Bob", {"alignment": "center", "style": "Quote"}, DATE)

        result = transformer.reject_in_paragraph(para)

        assert para.property_change is None
        assert para.properties == {"alignment": "left"}
        assert result.property_changes == 1

    def test_policy_without_property_changes_keeps_ppr_change(self, transformer):
        """A pending w:pPrChange survives when property changes are not covered."""
        para = Paragraph([Run("x")], properties={"alignment": "left"})
        para.track_property_change("Bob", {"alignment": "center"}, DATE)

        transformer.accept_in_paragraph(para, AcceptPolicy.only(RevisionType.INSERT))
        assert para.property_change is not None


class TestDocumentOperations:
    """Accepting and rejecting across paragraphs with a registry."""

    def make_document(self):
        registry = RevisionRegistry()
        first = Paragraph(
            [
                Run("A"),
                registry.register(Revision.create_insertion("Alice", Run("B"), DATE)),
            ]
        )
        second = Paragraph(
            [
                registry.register(Revision.create_deletion("Bob", Run("C"), DATE)),
                Run("D"),
            ]
        )
        return [first, second], registry

    def test_accept_all_clears_registry(self, transformer):
        """Accepting every kind empties the registry and restarts ids."""
        paragraphs, registry = self.make_document()
        result = transformer.accept_all(paragraphs, registry)

        assert [p.get_text() for p in paragraphs] == ["AB", "D"]
        assert str(result) == "Accepted 1 insertions, 1 deletions, 0 moves, 0 property changes"
        assert registry.is_empty
        assert registry.next_id == 0

    def test_accept_all_with_narrow_policy(self, transformer):
        """A narrower policy only removes the resolved revisions."""
        paragraphs, registry = self.make_document()
        transformer.accept_all(paragraphs, registry, AcceptPolicy.only(RevisionType.INSERT))

        assert [r.revision_type for r in registry] == [RevisionType.DELETE]
        assert registry.next_id == 2

    def test_reject_all(self, transformer):
        """Rejecting everything restores the original text."""
        paragraphs, registry = self.make_document()
        result = transformer.reject_all(paragraphs, registry)

        assert [p.get_text() for p in paragraphs] == ["A", "CD"]
        assert result.total == 2
        assert registry.is_empty

    def test_accept_all_without_registry(self, transformer):
        """The registry is optional."""
        paragraphs, registry = self.make_document()
        transformer.accept_all(paragraphs)
        assert len(registry) == 2

    def test_accept_matching_by_author(self, transformer):
        """Only matching revisions are accepted and removed from the registry."""
        paragraphs, registry = self.make_document()
        criteria = SelectionCriteria.create(authors=["Alice"])
        result = transformer.accept_matching(paragraphs, criteria, registry)

        assert result.insertions == 1
        assert result.deletions == 0
        assert paragraphs[1].has_revisions()
        assert [r.author for r in registry] == ["Bob"]

    def test_reject_matching_by_id(self, transformer):
        """Rejecting by id restores just that change."""
        paragraphs, registry = self.make_document()
        transformer.reject_matching(paragraphs, SelectionCriteria.create(ids=[1]), registry)

        assert paragraphs[1].get_text() == "CD"
        assert paragraphs[0].has_revisions()
        assert [r.id for r in registry] == [0]

    def test_empty_criteria_change_nothing(self, transformer):
        """Empty criteria accept nothing."""
        paragraphs, registry = self.make_document()
        result = transformer.accept_matching(paragraphs, SelectionCriteria(), registry)

        assert result.total == 0
        assert len(registry) == 2
        assert all(p.has_revisions() for p in paragraphs)

    def test_matching_leaves_paragraph_property_change(self, transformer):
        """Paragraph-level records are not touched by criteria-based operations."""
        para = Paragraph([Run("x")], properties={"alignment": "left"})
        para.track_property_change("Bob", {"alignment": "center"}, DATE)
        transformer.accept_matching([para], SelectionCriteria.create(authors=["Bob"]))
        assert para.property_change is not None


class TestHelpers:
    """Helper queries."""

    def test_paragraph_has_revisions_includes_ppr_change(self):
        """A pending w:pPrChange counts as a revision."""
        para = Paragraph([Run("x")])
        assert not paragraph_has_revisions(para)
        para.track_property_change("Bob", {"style": "Quote"})
        assert paragraph_has_revisions(para)

    def test_count_revisions_by_type(self):
        """Counts include paragraph property changes."""
        para = Paragraph(
            [
                Revision.create_insertion("Bob", Run("a"), DATE),
                Revision.create_insertion("Bob", Run("b"), DATE),
                Revision.create_deletion("Bob", Run("c"), DATE),
            ]
        )
        para.track_property_change("Bob", {"style": "Quote"})

        assert count_revisions_by_type([para]) == {
            RevisionType.INSERT: 2,
            RevisionType.DELETE: 1,
            RevisionType.PARAGRAPH_PROPERTY_CHANGE: 1,
        }
