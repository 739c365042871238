"""
Custom exception classes for the docx_revisions package.

The revision engine itself reports "not found" as empty results; these
exceptions are reserved for constructing invalid objects and for reading
malformed input files.
"""


class DocxRevisionsError(Exception):
    """Base exception for all docx_revisions errors."""

    pass


class InvalidRevisionError(DocxRevisionsError, ValueError):
    """Raised when a Revision is constructed in a state it can never serialize.

    Attributes:
        revision_type: The kind of revision being constructed
        reason: Why the revision is invalid
    """

    def __init__(self, revision_type: str, reason: str) -> None:
        self.revision_type = revision_type
        self.reason = reason
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format an error message naming the revision kind."""
        return f"Invalid {self.revision_type} revision: {self.reason}"


class DefinitionNotFoundError(DocxRevisionsError, KeyError):
    """Raised when a definition references a template that does not exist.

    Attributes:
        definition_id: The identifier that could not be resolved
        available_ids: Identifiers that do exist
    """

    def __init__(self, definition_id: int, available_ids: list[int] | None = None) -> None:
        self.definition_id = definition_id
        self.available_ids = available_ids or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format an error message with the available identifiers."""
        msg = f"Abstract numbering {self.definition_id} does not exist"
        if self.available_ids:
            ids_str = ", ".join(str(i) for i in self.available_ids)
            msg += f"\n\nAvailable abstract numbering IDs: {ids_str}"
        return msg

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return self._format_message()


class InvalidDefinitionError(DocxRevisionsError, ValueError):
    """Raised when a numbering definition has out-of-range values."""

    pass


class CriteriaFileError(DocxRevisionsError):
    """Raised when a selection criteria file cannot be loaded.

    Attributes:
        path: The file that failed to load
        errors: Specific problems found (optional)
    """

    def __init__(self, message: str, path: str | None = None, errors: list[str] | None = None):
        self.path = path
        self.errors = errors or []
        super().__init__(message)
