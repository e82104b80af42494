"""Field extraction: turn a record into per-field text fragments.

Records are accessed by name, either as mappings (``record["title"]``) or as
plain objects (``record.title``), which covers dicts, dataclasses, named tuples and
pydantic models alike. Each selected value is classified once into a
:data:`FieldValue` variant so the rest of the pipeline never inspects raw
record types again.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from staticseek.errors import InvalidFieldTypeError
from staticseek.search.normalizer import normalize
from staticseek.search.schema import FieldSelection


_MISSING = object()


@dataclass(frozen=True, slots=True)
class Absent:
    """Field missing from the record, or explicitly ``None``."""

    def raw_values(self) -> tuple[str, ...]:
        return ()


@dataclass(frozen=True, slots=True)
class Scalar:
    """Single text value."""

    value: str

    def raw_values(self) -> tuple[str, ...]:
        return (self.value,)


@dataclass(frozen=True, slots=True)
class Multi:
    """Multi-value field such as a tag list; element order is preserved."""

    values: tuple[str, ...]

    def raw_values(self) -> tuple[str, ...]:
        return self.values


FieldValue = Union[Absent, Scalar, Multi]


def _is_record(value: Any) -> bool:
    """Whether ``value`` supports access by field name."""
    if isinstance(value, Mapping):
        return True
    # Named tuples are sequences but expose their fields as attributes
    if isinstance(value, tuple) and hasattr(type(value), "_fields"):
        return True
    return value is not None and not isinstance(value, (str, bytes, bytearray, int, float, Sequence))


def _get(container: Any, key: str) -> Any:
    if isinstance(container, Mapping):
        return container.get(key, _MISSING)
    if not _is_record(container):
        return _MISSING
    return getattr(container, key, _MISSING)


def lookup(record: Any, name: str) -> Any:
    """Fetch ``name`` from ``record``; dotted names fall back to a nested path."""
    value = _get(record, name)
    if value is not _MISSING or "." not in name:
        return value

    current = record
    for part in name.split("."):
        if current is None:
            return _MISSING
        current = _get(current, part)
        if current is _MISSING:
            return _MISSING
    return current


def classify(value: Any, *, field_name: str, record_id: int) -> FieldValue:
    """Resolve a raw record value into its :data:`FieldValue` variant."""
    if value is _MISSING or value is None:
        return Absent()
    if isinstance(value, str):
        return Scalar(value)
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        if all(isinstance(item, str) for item in value):
            return Multi(tuple(value))
    raise InvalidFieldTypeError(field_name, record_id, value)


def fragment_pairs(value: FieldValue) -> list[tuple[str, str]]:
    """Return ``(original, normalized)`` pairs, skipping values that normalize to nothing."""
    pairs = []
    for raw in value.raw_values():
        text = normalize(raw)
        if text:
            pairs.append((raw, text))
    return pairs


def extract_values(record: Any, selection: FieldSelection, *, record_id: int = 0) -> list[tuple[str, FieldValue]]:
    """Classify every selected field of ``record``, in selection order.

    Raises :class:`InvalidFieldTypeError` when ``record`` is not a mapping or
    object (a string, number or plain list), since none of its fields could
    be read.
    """
    if not _is_record(record):
        name = selection.names[0]
        msg = (
            f"Record {record_id} is a {type(record).__name__}, not a mapping or object; "
            f"cannot read field '{name}'"
        )
        raise InvalidFieldTypeError(name, record_id, record, msg)
    return [
        (name, classify(lookup(record, name), field_name=name, record_id=record_id)) for name in selection.names
    ]


def extract(
    record: Any,
    selection: FieldSelection | Sequence[str],
    *,
    record_id: int = 0,
) -> list[tuple[str, list[str]]]:
    """Return ``(field, normalized fragments)`` for every selected field.

    Absent fields yield an empty list. Raises :class:`InvalidFieldTypeError`
    for numbers, mappings and other non-text values.
    """
    if not isinstance(selection, FieldSelection):
        selection = FieldSelection.from_names(selection)
    return [
        (name, [text for _, text in fragment_pairs(value)])
        for name, value in extract_values(record, selection, record_id=record_id)
    ]
