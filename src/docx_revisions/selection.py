"""
Selective revision matching.

The selector partitions a registry's revisions into those matching some
criteria and the rest, without touching the document. It is the preview step
for operations like "accept only Alice's changes".

Criteria with nothing set select nothing. An empty criteria object therefore
never sweeps up unrelated changes.
"""

import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from .errors import CriteriaFileError
from .models.revision import Revision, RevisionType
from .registry import DateRange, RevisionCategory, RevisionRegistry, revision_category
from .results import SelectionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionCriteria:
    """Criteria for selecting revisions. Every set criterion must match.

    Attributes:
        ids: Revision ids to select
        types: Revision kinds to select
        authors: Authors whose revisions to select
        categories: Categories to select
        date_range: Only revisions dated within this range
        predicate: Arbitrary extra test on each revision
    """

    ids: frozenset[int] | None = None
    types: frozenset[RevisionType] | None = None
    authors: frozenset[str] | None = None
    categories: frozenset[RevisionCategory] | None = None
    date_range: DateRange | None = None
    predicate: Callable[[Revision], bool] | None = field(default=None, compare=False)

    @classmethod
    def create(
        cls,
        ids: Iterable[int] | None = None,
        types: Iterable[RevisionType] | None = None,
        authors: Iterable[str] | None = None,
        categories: Iterable[RevisionCategory] | None = None,
        date_range: DateRange | None = None,
        predicate: Callable[[Revision], bool] | None = None,
    ) -> "SelectionCriteria":
        """Build criteria from any iterables, freezing them.

        Example:
            >>> criteria = SelectionCriteria.create(authors=["Alice"])
            >>> criteria.is_empty
            False
        """
        return cls(
            ids=frozenset(ids) if ids is not None else None,
            types=frozenset(types) if types is not None else None,
            authors=frozenset(authors) if authors is not None else None,
            categories=frozenset(categories) if categories is not None else None,
            date_range=date_range,
            predicate=predicate,
        )

    @property
    def is_empty(self) -> bool:
        return (
            self.ids is None
            and self.types is None
            and self.authors is None
            and self.categories is None
            and self.date_range is None
            and self.predicate is None
        )

    def matches(self, revision: Revision) -> bool:
        """Check whether ``revision`` satisfies every set criterion."""
        if self.is_empty:
            return False
        if self.ids is not None and revision.id not in self.ids:
            return False
        if self.types is not None and revision.revision_type not in self.types:
            return False
        if self.authors is not None and revision.author not in self.authors:
            return False
        if (
            self.categories is not None
            and revision_category(revision.revision_type) not in self.categories
        ):
            return False
        if self.date_range is not None and not self.date_range.contains(revision.date):
            return False
        if self.predicate is not None and not self.predicate(revision):
            return False
        return True


class SelectiveRevisionSelector:
    """Read-only partitioning of a registry's revisions.

    Example:
        >>> selector = SelectiveRevisionSelector(registry)
        >>> preview = selector.by_author("Alice")
        >>> print(preview)
        2 of 5 revisions selected
    """

    def __init__(self, registry: RevisionRegistry) -> None:
        self._registry = registry

    def partition(self, criteria: SelectionCriteria) -> SelectionResult:
        """Split all registered revisions into matching and non-matching ids.

        Args:
            criteria: What to select; empty criteria select nothing

        Returns:
            SelectionResult with both id lists in registration order
        """
        result = SelectionResult()
        for revision in self._registry.all():
            if criteria.matches(revision):
                result.matching.append(revision.id)
            else:
                result.non_matching.append(revision.id)
        logger.debug("Selection matched %d of %d revisions", result.matching_count, result.total)
        return result

    def preview(self, criteria: SelectionCriteria) -> list[Revision]:
        """Return the matching revisions themselves."""
        return [revision for revision in self._registry.all() if criteria.matches(revision)]

    def by_ids(self, ids: Iterable[int]) -> SelectionResult:
        return self.partition(SelectionCriteria.create(ids=ids))

    def by_types(self, types: Iterable[RevisionType]) -> SelectionResult:
        return self.partition(SelectionCriteria.create(types=types))

    def by_author(self, author: str) -> SelectionResult:
        return self.partition(SelectionCriteria.create(authors=[author]))

    def by_authors(self, authors: Iterable[str]) -> SelectionResult:
        return self.partition(SelectionCriteria.create(authors=authors))

    def by_categories(self, categories: Iterable[RevisionCategory]) -> SelectionResult:
        return self.partition(SelectionCriteria.create(categories=categories))

    def by_date_range(self, start: datetime, end: datetime) -> SelectionResult:
        return self.partition(SelectionCriteria.create(date_range=DateRange(start, end)))

    def by_predicate(self, predicate: Callable[[Revision], bool]) -> SelectionResult:
        return self.partition(SelectionCriteria.create(predicate=predicate))


def _parse_enum_list(values: Any, enum_cls: type, key: str, errors: list[str]) -> list | None:
    if values is None:
        return None
    if not isinstance(values, list):
        errors.append(f"'{key}' must be a list")
        return None
    parsed = []
    for value in values:
        try:
            parsed.append(enum_cls(value))
        except ValueError:
            errors.append(f"Unknown {key} value: {value!r}")
    return parsed


def _parse_date(value: Any, key: str, errors: list[str]) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    errors.append(f"'{key}' must be an ISO 8601 date, got {value!r}")
    return None


def criteria_from_dict(data: dict[str, Any]) -> SelectionCriteria:
    """Build SelectionCriteria from a plain mapping.

    Recognized keys are ``ids``, ``types``, ``authors``, ``categories`` and
    ``date_range`` (a mapping with ``start`` and ``end``). Type and category
    names are the enum values, e.g. ``insert`` or ``formatting``.

    Raises:
        CriteriaFileError: If any key has an invalid shape or value
    """
    errors: list[str] = []
    known = {"ids", "types", "authors", "categories", "date_range"}
    for key in data:
        if key not in known:
            errors.append(f"Unknown criteria key: {key!r}")

    ids = data.get("ids")
    if ids is not None and (
        not isinstance(ids, list) or not all(isinstance(i, int) for i in ids)
    ):
        errors.append("'ids' must be a list of integers")
        ids = None

    authors = data.get("authors")
    if authors is not None and (
        not isinstance(authors, list) or not all(isinstance(a, str) for a in authors)
    ):
        errors.append("'authors' must be a list of strings")
        authors = None

    types = _parse_enum_list(data.get("types"), RevisionType, "types", errors)
    categories = _parse_enum_list(data.get("categories"), RevisionCategory, "categories", errors)

    date_range = None
    raw_range = data.get("date_range")
    if raw_range is not None:
        if not isinstance(raw_range, dict) or not {"start", "end"} <= set(raw_range):
            errors.append("'date_range' must have 'start' and 'end'")
        else:
            start = _parse_date(raw_range["start"], "date_range.start", errors)
            end = _parse_date(raw_range["end"], "date_range.end", errors)
            if start is not None and end is not None:
                date_range = DateRange(start, end)

    if errors:
        raise CriteriaFileError("Invalid selection criteria", errors=errors)

    return SelectionCriteria.create(
        ids=ids, types=types, authors=authors, categories=categories, date_range=date_range
    )


def load_criteria(path: str | Path, format: str = "yaml") -> SelectionCriteria:
    """Load selection criteria from a YAML or JSON file.

    The file must contain a ``criteria`` mapping.

    Args:
        path: Path to the criteria file
        format: File format - "yaml" or "json" (default: "yaml")

    Returns:
        The parsed SelectionCriteria

    Raises:
        CriteriaFileError: If the file cannot be parsed or has invalid format
        FileNotFoundError: If the file does not exist

    Example YAML file:
        ```yaml
        criteria:
          authors: [Alice]
          types: [insert, delete]
          date_range:
            start: 2024-01-01T00:00:00Z
            end: 2024-12-31T23:59:59Z
        ```
    """
    file_path = Path(path)

    if not file_path.exists():
        raise FileNotFoundError(f"Criteria file not found: {path}")

    try:
        with open(file_path, encoding="utf-8") as f:
            if format == "yaml":
                data = yaml.safe_load(f)
            elif format == "json":
                data = json.load(f)
            else:
                raise CriteriaFileError(f"Unsupported format: {format}", path=str(path))
    except yaml.YAMLError as e:
        raise CriteriaFileError(f"Failed to parse YAML file: {e}", path=str(path)) from e
    except json.JSONDecodeError as e:
        raise CriteriaFileError(f"Failed to parse JSON file: {e}", path=str(path)) from e

    if not isinstance(data, dict):
        raise CriteriaFileError("Criteria file must contain a dictionary/object", path=str(path))
    if "criteria" not in data:
        raise CriteriaFileError("Criteria file must contain a 'criteria' key", path=str(path))

    criteria = data["criteria"]
    if not isinstance(criteria, dict):
        raise CriteriaFileError("'criteria' must be a dictionary/object", path=str(path))

    try:
        return criteria_from_dict(criteria)
    except CriteriaFileError as e:
        raise CriteriaFileError(str(e), path=str(path), errors=e.errors) from e
