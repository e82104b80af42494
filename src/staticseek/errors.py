"""Error taxonomy for index construction, loading and querying.

Every error raised by the library derives from :class:`StaticSeekError` and
carries a :class:`ErrorKind` so callers can branch on ``exc.kind`` without
matching on class names or messages.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Inspectable error categories."""

    INVALID_FIELD_TYPE = "invalid_field_type"
    EMPTY_FIELD_SELECTION = "empty_field_selection"
    DUPLICATE_FIELD_NAME = "duplicate_field_name"
    UNSUPPORTED_VERSION = "unsupported_version"
    MALFORMED_INDEX = "malformed_index"
    UNKNOWN_FIELD = "unknown_field"


class StaticSeekError(ValueError):
    """Base class for all library errors."""

    kind: ErrorKind


class InvalidFieldTypeError(StaticSeekError):
    """Raised when a selected field holds something other than text or a list of text.

    Also raised when the record itself cannot be read by field name (a string,
    number or plain sequence).
    """

    kind = ErrorKind.INVALID_FIELD_TYPE

    def __init__(self, field_name: str, record_id: int, value: object, message: str | None = None) -> None:
        self.field_name = field_name
        self.record_id = record_id
        self.value_type = type(value).__name__
        super().__init__(
            message
            or f"Field '{field_name}' of record {record_id} has unsupported type {self.value_type}; "
            "expected a string or a sequence of strings"
        )


class EmptyFieldSelectionError(StaticSeekError):
    """Raised when an index is requested with no key fields."""

    kind = ErrorKind.EMPTY_FIELD_SELECTION

    def __init__(self) -> None:
        super().__init__("Field selection must name at least one field")


class DuplicateFieldNameError(StaticSeekError):
    """Raised when the field selection repeats a name."""

    kind = ErrorKind.DUPLICATE_FIELD_NAME

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"Field '{field_name}' appears more than once in the field selection")


class UnsupportedVersionError(StaticSeekError):
    """Raised when a serialized index has an unknown format version or index class."""

    kind = ErrorKind.UNSUPPORTED_VERSION

    def __init__(self, message: str) -> None:
        super().__init__(message)


class MalformedIndexError(StaticSeekError):
    """Raised when a serialized index violates its structural invariants."""

    kind = ErrorKind.MALFORMED_INDEX

    def __init__(self, message: str) -> None:
        super().__init__(message)


class UnknownFieldError(StaticSeekError):
    """Raised when a query restricts matching to fields the index does not have."""

    kind = ErrorKind.UNKNOWN_FIELD

    def __init__(self, field_names: list[str], available: tuple[str, ...]) -> None:
        self.field_names = field_names
        self.available = available
        names = ", ".join(repr(name) for name in field_names)
        super().__init__(f"Unknown field(s) {names}; index fields are {list(available)}")
