"""Index variants and the index builder.

Every variant implements :class:`SearchIndex`: it is built from records plus
a field selection, it can be rebuilt from the canonical entry list stored in
the serialized artifact, and it yields candidate hits for the query engine.
Variants are registered by tag in :data:`INDEX_CLASSES` so the deserializer
can dispatch on the ``index_class`` recorded in an artifact.

Only the ``linear`` variant exists today: it keeps every fragment and scans
them all per query.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
import logging
from types import MappingProxyType
from typing import Any, ClassVar, TypeVar

from staticseek.errors import MalformedIndexError
from staticseek.observability.tracing import create_span
from staticseek.search.engine import FieldMatch, MatchResult, SearchOptions, match_kind, search
from staticseek.search.fields import extract_values, fragment_pairs
from staticseek.search.normalizer import normalize
from staticseek.search.schema import FieldSelection


logger = logging.getLogger(__name__)

IndexT = TypeVar("IndexT", bound="SearchIndex")


@dataclass(frozen=True, slots=True)
class Fragment:
    """Normalized text of one field value, tied to its record and field."""

    record_id: int
    field: str
    text: str
    original: str


@dataclass(frozen=True, slots=True)
class IndexEntry:
    """All fragments of one record; ``fields`` is aligned with the field selection."""

    record_id: int
    fields: tuple[tuple[Fragment, ...], ...]

    def originals(self) -> list[list[str]]:
        return [[fragment.original for fragment in fragments] for fragments in self.fields]


def _make_entry(
    record_id: int,
    selection: FieldSelection,
    per_field: Sequence[Sequence[tuple[str, str]]],
) -> IndexEntry:
    return IndexEntry(
        record_id=record_id,
        fields=tuple(
            tuple(
                Fragment(record_id=record_id, field=key_field.name, text=text, original=original)
                for original, text in pairs
            )
            for key_field, pairs in zip(selection.fields, per_field)
        ),
    )


class SearchIndex(ABC):
    """Common contract of all index variants."""

    index_class: ClassVar[str]

    @property
    @abstractmethod
    def field_selection(self) -> FieldSelection:
        """Fields covered by this index, in order."""

    @property
    @abstractmethod
    def entries(self) -> tuple[IndexEntry, ...]:
        """Per-record entries in record id order."""

    @classmethod
    @abstractmethod
    def from_entries(cls: type[IndexT], selection: FieldSelection, entries: Sequence[IndexEntry]) -> IndexT:
        """Rebuild the variant from canonical entries."""

    @abstractmethod
    def collect_hits(self, query: str, positions: Sequence[int]) -> Iterable[MatchResult]:
        """Yield every record with a positive score for a normalized query."""

    @classmethod
    def build(
        cls: type[IndexT],
        records: Iterable[Any],
        selection: FieldSelection | Sequence[str],
    ) -> IndexT:
        """Extract every record (in input order) and build the variant.

        Raises the construction-time errors of :class:`FieldSelection` and
        :func:`~staticseek.search.fields.classify`; nothing is returned on
        failure.
        """
        if not isinstance(selection, FieldSelection):
            selection = FieldSelection.from_names(selection)

        with create_span(
            "staticseek.build",
            attributes={"index.class": cls.index_class, "index.field_count": len(selection)},
        ) as span:
            entries = []
            for record_id, record in enumerate(records):
                values = extract_values(record, selection, record_id=record_id)
                entries.append(_make_entry(record_id, selection, [fragment_pairs(value) for _, value in values]))
            span.set_attribute("index.record_count", len(entries))

        logger.info(
            "Built %s index over %d record(s) and %d field(s)", cls.index_class, len(entries), len(selection)
        )
        return cls.from_entries(selection, entries)

    @property
    def record_count(self) -> int:
        return len(self.entries)

    def search(self, query: str, options: SearchOptions | Mapping[str, Any] | None = None) -> list[MatchResult]:
        return search(self, query, options)


@dataclass(frozen=True)
class LinearIndex(SearchIndex):
    """Flat list of entries scanned in full for every query."""

    index_class: ClassVar[str] = "linear"

    selection: FieldSelection
    records: tuple[IndexEntry, ...]

    @property
    def field_selection(self) -> FieldSelection:
        return self.selection

    @property
    def entries(self) -> tuple[IndexEntry, ...]:
        return self.records

    @classmethod
    def from_entries(cls, selection: FieldSelection, entries: Sequence[IndexEntry]) -> LinearIndex:
        return cls(selection=selection, records=tuple(entries))

    def collect_hits(self, query: str, positions: Sequence[int]) -> Iterator[MatchResult]:
        weights = [self.selection.fields[position].weight for position in positions]
        for entry in self.records:
            score = 0.0
            matches = []
            for position, weight in zip(positions, weights):
                for fragment in entry.fields[position]:
                    kind = match_kind(fragment.text, query)
                    if kind is None:
                        continue
                    score += weight * kind.multiplier
                    matches.append(FieldMatch(field=fragment.field, fragment=fragment.original, kind=kind))
            if score > 0:
                yield MatchResult(record_id=entry.record_id, score=score, matches=tuple(matches))


INDEX_CLASSES: Mapping[str, type[SearchIndex]] = MappingProxyType({LinearIndex.index_class: LinearIndex})


def restore_entries(
    selection: FieldSelection,
    raw_entries: Sequence[tuple[int, Sequence[Sequence[str]]]],
) -> list[IndexEntry]:
    """Rebuild entries from ``(record id, per-field original texts)`` pairs.

    Raises :class:`MalformedIndexError` when ids are not dense, when an entry
    does not carry one list per selected field, or when a stored fragment
    normalizes to nothing (the builder never stores such fragments).
    """
    entries = []
    for position, (record_id, per_field) in enumerate(raw_entries):
        if record_id != position:
            msg = f"Record ids must be dense and ordered: expected {position}, found {record_id}"
            raise MalformedIndexError(msg)
        if len(per_field) != len(selection):
            msg = f"Record {record_id} has {len(per_field)} field list(s), expected {len(selection)}"
            raise MalformedIndexError(msg)
        pairs_per_field = []
        for key_field, originals in zip(selection.fields, per_field):
            pairs = []
            for original in originals:
                text = normalize(original)
                if not text:
                    msg = f"Record {record_id} field '{key_field.name}' holds an empty fragment"
                    raise MalformedIndexError(msg)
                pairs.append((original, text))
            pairs_per_field.append(pairs)
        entries.append(_make_entry(record_id, selection, pairs_per_field))
    return entries


def create_index(
    index_class: type[IndexT],
    records: Iterable[Any],
    *,
    key_fields: Sequence[str],
    weights: Mapping[str, float] | None = None,
) -> IndexT:
    """Build an index of the given variant over ``records``.

    Example:
        index = create_index(LinearIndex, songs, key_fields=["title", "artist", "genre", "note"])
    """
    return index_class.build(records, FieldSelection.from_names(key_fields, weights))


def build(records: Iterable[Any], selection: FieldSelection | Sequence[str]) -> LinearIndex:
    """Build the default (linear) index variant."""
    return LinearIndex.build(records, selection)
