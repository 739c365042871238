"""Tests for selective revision matching and criteria files."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from docx_revisions import (
    CriteriaFileError,
    DateRange,
    Revision,
    RevisionCategory,
    RevisionRegistry,
    RevisionType,
    Run,
    SelectionCriteria,
    SelectiveRevisionSelector,
    load_criteria,
)
from docx_revisions.selection import criteria_from_dict

BASE = datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.fixture
def registry():
    reg = RevisionRegistry()
    reg.register(Revision.from_text(RevisionType.INSERT, "Alice", "one", BASE))
    reg.register(Revision.from_text(RevisionType.DELETE, "Bob", "two", BASE + timedelta(days=2)))
    reg.register(Revision.from_text(RevisionType.INSERT, "Bob", "three", BASE + timedelta(days=4)))
    reg.register(
        Revision.create_run_property_change(
            "Alice", Run("four", {"b": True}), {}, BASE + timedelta(days=6)
        )
    )
    reg.register(Revision.create_move_from("Carol", Run("five"), "m1", BASE))
    return reg


class TestSelectionCriteria:
    """Matching individual revisions."""

    def test_empty_criteria_match_nothing(self, registry):
        """Criteria with nothing set never select anything."""
        criteria = SelectionCriteria()
        assert criteria.is_empty
        assert not any(criteria.matches(r) for r in registry)

    def test_criteria_are_anded(self, registry):
        """Every set criterion must hold."""
        criteria = SelectionCriteria.create(authors=["Bob"], types=[RevisionType.INSERT])
        assert [r.id for r in registry if criteria.matches(r)] == [2]

    def test_empty_set_matches_nothing(self, registry):
        """An explicitly empty id set selects nothing."""
        criteria = SelectionCriteria.create(ids=[])
        assert not criteria.is_empty
        assert not any(criteria.matches(r) for r in registry)

    def test_predicate(self, registry):
        """A predicate adds an arbitrary test."""
        criteria = SelectionCriteria.create(predicate=lambda r: "o" in r.get_text())
        assert [r.id for r in registry if criteria.matches(r)] == [0, 1, 3]


class TestSelector:
    """Partitioning a registry."""

    def test_partition_covers_all(self, registry):
        """Matching and non-matching ids together cover the registry."""
        result = SelectiveRevisionSelector(registry).by_author("Alice")
        assert result.matching == [0, 3]
        assert result.non_matching == [1, 2, 4]
        assert result.total == 5
        assert str(result) == "2 of 5 revisions selected"

    def test_partition_empty_criteria(self, registry):
        """Empty criteria leave every revision unselected."""
        result = SelectiveRevisionSelector(registry).partition(SelectionCriteria())
        assert result.matching == []
        assert result.non_matching_count == 5

    def test_by_ids(self, registry):
        """Selecting by id ignores unknown ids."""
        result = SelectiveRevisionSelector(registry).by_ids([1, 4, 99])
        assert result.matching == [1, 4]

    def test_by_types(self, registry):
        """Selecting by kind."""
        result = SelectiveRevisionSelector(registry).by_types([RevisionType.DELETE])
        assert result.matching == [1]

    def test_by_authors(self, registry):
        """Selecting several authors."""
        result = SelectiveRevisionSelector(registry).by_authors(["Bob", "Carol"])
        assert result.matching == [1, 2, 4]

    def test_by_categories(self, registry):
        """Selecting by category."""
        selector = SelectiveRevisionSelector(registry)
        assert selector.by_categories([RevisionCategory.FORMATTING]).matching == [3]
        assert selector.by_categories([RevisionCategory.STRUCTURAL]).matching == [4]

    def test_by_date_range(self, registry):
        """Selecting by inclusive date range."""
        result = SelectiveRevisionSelector(registry).by_date_range(
            BASE + timedelta(days=2), BASE + timedelta(days=4)
        )
        assert result.matching == [1, 2]

    def test_by_predicate(self, registry):
        """Selecting by predicate."""
        result = SelectiveRevisionSelector(registry).by_predicate(lambda r: r.id % 2 == 0)
        assert result.matching == [0, 2, 4]

    def test_preview_returns_revisions(self, registry):
        """preview returns the revisions themselves and changes nothing."""
        selector = SelectiveRevisionSelector(registry)
        preview = selector.preview(SelectionCriteria.create(authors=["Carol"]))
        assert [r.get_text() for r in preview] == ["five"]
        assert len(registry) == 5


class TestCriteriaFromDict:
    """Building criteria from plain mappings."""

    def test_full_mapping(self):
        """All recognized keys are converted."""
        criteria = criteria_from_dict(
            {
                "ids": [1, 2],
                "types": ["insert", "moveFrom"],
                "authors": ["Alice"],
                "categories": ["content"],
                "date_range": {"start": "2024-01-01T00:00:00Z", "end": "2024-12-31T00:00:00Z"},
            }
        )
        assert criteria.ids == frozenset({1, 2})
        assert criteria.types == frozenset({RevisionType.INSERT, RevisionType.MOVE_FROM})
        assert criteria.categories == frozenset({RevisionCategory.CONTENT})
        assert criteria.date_range == DateRange(
            datetime(2024, 1, 1, tzinfo=timezone.utc), datetime(2024, 12, 31, tzinfo=timezone.utc)
        )

    def test_collects_all_errors(self):
        """Every problem is reported at once."""
        with pytest.raises(CriteriaFileError, match="Invalid selection criteria") as exc_info:
            criteria_from_dict({"types": ["bogus"], "ids": "1", "colour": "red"})

        errors = exc_info.value.errors
        assert "Unknown criteria key: 'colour'" in errors
        assert "'ids' must be a list of integers" in errors
        assert "Unknown types value: 'bogus'" in errors

    def test_bad_date_range(self):
        """Date ranges need both ends."""
        with pytest.raises(CriteriaFileError) as exc_info:
            criteria_from_dict({"date_range": {"start": "2024-01-01"}})
        assert exc_info.value.errors == ["'date_range' must have 'start' and 'end'"]


class TestLoadCriteria:
    """Loading criteria files."""

    def test_load_yaml(self, tmp_path):
        """YAML criteria files load, including unquoted timestamps."""
        path = tmp_path / "criteria.yaml"
        path.write_text(
            """
criteria:
  authors: [Alice, Bob]
  types: [insert, delete]
  date_range:
    start: 2024-06-01T00:00:00Z
    end: 2024-06-03T00:00:00Z
"""
        )
        criteria = load_criteria(path)

        assert criteria.authors == frozenset({"Alice", "Bob"})
        assert criteria.types == frozenset({RevisionType.INSERT, RevisionType.DELETE})
        assert criteria.date_range.contains(BASE + timedelta(days=1))

    def test_load_json(self, tmp_path):
        """JSON criteria files load."""
        path = tmp_path / "criteria.json"
        path.write_text(json.dumps({"criteria": {"ids": [3]}}))
        assert load_criteria(path, format="json").ids == frozenset({3})

    def test_loaded_criteria_select(self, tmp_path, registry):
        """Loaded criteria drive the selector."""
        path = tmp_path / "criteria.yaml"
        path.write_text("criteria:\n  categories: [formatting]\n")
        result = SelectiveRevisionSelector(registry).partition(load_criteria(path))
        assert result.matching == [3]

    def test_missing_file(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Criteria file not found"):
            load_criteria(tmp_path / "missing.yaml")

    def test_unsupported_format(self, tmp_path):
        """Only yaml and json are supported."""
        path = tmp_path / "criteria.toml"
        path.write_text("criteria = 1")
        with pytest.raises(CriteriaFileError, match="Unsupported format: toml"):
            load_criteria(path, format="toml")

    def test_invalid_yaml(self, tmp_path):
        """YAML syntax errors are wrapped."""
        path = tmp_path / "criteria.yaml"
        path.write_text("criteria: [unclosed")
        with pytest.raises(CriteriaFileError, match="Failed to parse YAML file"):
            load_criteria(path)

    def test_invalid_json(self, tmp_path):
        """JSON syntax errors are wrapped."""
        path = tmp_path / "criteria.json"
        path.write_text("{not json")
        with pytest.raises(CriteriaFileError, match="Failed to parse JSON file"):
            load_criteria(path, format="json")

    def test_not_a_mapping(self, tmp_path):
        """The top level must be a mapping."""
        path = tmp_path / "criteria.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(CriteriaFileError, match="must contain a dictionary/object"):
            load_criteria(path)

    def test_missing_criteria_key(self, tmp_path):
        """The criteria key is required."""
        path = tmp_path / "criteria.yaml"
        path.write_text("authors: [Alice]\n")
        with pytest.raises(CriteriaFileError, match="must contain a 'criteria' key"):
            load_criteria(path)

    def test_criteria_not_a_mapping(self, tmp_path):
        """The criteria value must be a mapping."""
        path = tmp_path / "criteria.yaml"
        path.write_text("criteria: [Alice]\n")
        with pytest.raises(CriteriaFileError, match="'criteria' must be a dictionary/object"):
            load_criteria(path)

    def test_invalid_values_keep_path(self, tmp_path):
        """Validation errors carry the file path and the specific problems."""
        path = tmp_path / "criteria.yaml"
        path.write_text("criteria:\n  types: [rewrite]\n")
        with pytest.raises(CriteriaFileError) as exc_info:
            load_criteria(path)
        assert exc_info.value.path == str(path)
        assert exc_info.value.errors == ["Unknown types value: 'rewrite'"]
