"""
Field selection for search indexing.

A field selection is the ordered list of record fields an index covers. Order
is meaningful: it fixes the layout of every index entry and of the serialized
artifact, and it sets the default relevance weight of each field:

    weight(field at position p) = 1 / (1 + p)

so the first field weighs 1.0, the second 0.5, the third 1/3 and so on.
Callers may override individual weights; overrides travel with the artifact.

Example:
    selection = FieldSelection.from_names(["title", "artist", "genre"], weights={"genre": 0.75})
    selection.weight("artist")  # 0.5
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
import math
from types import MappingProxyType
from typing import Any

from staticseek.errors import DuplicateFieldNameError, EmptyFieldSelectionError, UnknownFieldError


def default_weight(position: int) -> float:
    """Return the positional weight of the field at ``position``."""
    return 1.0 / (1 + position)


@dataclass(frozen=True, slots=True)
class KeyField:
    """One selected field with its resolved weight."""

    name: str
    position: int
    weight: float

    @property
    def has_default_weight(self) -> bool:
        return self.weight == default_weight(self.position)


@dataclass(frozen=True)
class FieldSelection:
    """Immutable, validated, ordered set of key fields."""

    fields: tuple[KeyField, ...]
    _by_name: Mapping[str, KeyField] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.fields:
            raise EmptyFieldSelectionError
        by_name: dict[str, KeyField] = {}
        for key_field in self.fields:
            if key_field.name in by_name:
                raise DuplicateFieldNameError(key_field.name)
            by_name[key_field.name] = key_field
        object.__setattr__(self, "_by_name", MappingProxyType(by_name))

    @classmethod
    def from_names(
        cls,
        names: Sequence[str],
        weights: Mapping[str, float] | None = None,
    ) -> FieldSelection:
        """Build a selection from field names, applying optional weight overrides."""
        if isinstance(names, str):
            msg = "Field selection must be a sequence of names, not a single string"
            raise TypeError(msg)
        names = list(names)
        for name in names:
            if not isinstance(name, str) or not name:
                msg = f"Field names must be non-empty strings, got {name!r}"
                raise TypeError(msg)

        overrides = dict(weights or {})
        unknown = [name for name in overrides if name not in names]
        if unknown:
            raise UnknownFieldError(unknown, tuple(names))
        for name, weight in overrides.items():
            if isinstance(weight, bool) or not isinstance(weight, (int, float)):
                msg = f"Weight for field '{name}' must be a number, got {weight!r}"
                raise TypeError(msg)
            if weight < 0 or not math.isfinite(weight):
                msg = f"Weight for field '{name}' must be a finite non-negative number, got {weight!r}"
                raise ValueError(msg)

        return cls(
            fields=tuple(
                KeyField(name=name, position=position, weight=float(overrides.get(name, default_weight(position))))
                for position, name in enumerate(names)
            )
        )

    def __getitem__(self, name: str) -> KeyField:
        return self._by_name[name]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[KeyField]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(key_field.name for key_field in self.fields)

    def weight(self, name: str) -> float:
        return self._by_name[name].weight

    def positions(self, names: Sequence[str] | None = None) -> tuple[int, ...]:
        """Resolve field names to their positions, in selection order.

        ``None`` selects every field. Names outside the selection raise
        :class:`UnknownFieldError`.
        """
        if names is None:
            return tuple(range(len(self.fields)))
        unknown = [name for name in names if name not in self._by_name]
        if unknown:
            raise UnknownFieldError(unknown, self.names)
        wanted = set(names)
        return tuple(key_field.position for key_field in self.fields if key_field.name in wanted)

    def custom_weights(self) -> dict[str, float]:
        """Return only the weights that differ from the positional default."""
        return {key_field.name: key_field.weight for key_field in self.fields if not key_field.has_default_weight}

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"key_fields": list(self.names)}
        weights = self.custom_weights()
        if weights:
            data["weights"] = weights
        return data
