"""Portable, versioned representation of a search index.

The artifact is a JSON document built once at site-build time and shipped
alongside the consuming application::

    {
      "version": 1,
      "index_class": "linear",
      "key_fields": ["title", "artist", "genre"],
      "weights": {"genre": 0.75},
      "entries": [
        {"id": 0, "fields": [["Song A"], ["Artist 1"], ["Pop"]]}
      ]
    }

* ``weights`` is present only when a field overrides its positional weight.
* ``fields`` holds one list per key field (empty lists included) with the
  original fragment text; normalized text is recomputed on load.
* Key order is fixed and entries follow record id order, so serializing the
  same index always yields the same bytes.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any, Union

import orjson
from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, ValidationError

from staticseek.errors import MalformedIndexError, StaticSeekError, UnsupportedVersionError
from staticseek.observability.tracing import create_span
from staticseek.search.index import INDEX_CLASSES, SearchIndex, restore_entries
from staticseek.search.schema import FieldSelection


logger = logging.getLogger(__name__)

FORMAT_VERSION = 1
SUPPORTED_VERSIONS = frozenset({FORMAT_VERSION})


class SerializedEntry(BaseModel):
    """One record of the artifact."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    record_id: StrictInt = Field(alias="id")
    fields: list[list[StrictStr]]


class SerializedIndex(BaseModel):
    """Validated shape of a version 1 artifact."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: StrictInt
    index_class: StrictStr
    key_fields: list[StrictStr]
    weights: dict[StrictStr, Union[StrictFloat, StrictInt]] = Field(default_factory=dict)
    entries: list[SerializedEntry]


def index_to_object(index: SearchIndex) -> dict[str, Any]:
    """Serialize ``index`` into a JSON-compatible dict."""
    payload: dict[str, Any] = {
        "version": FORMAT_VERSION,
        "index_class": index.index_class,
    }
    payload.update(index.field_selection.to_dict())
    payload["entries"] = [{"id": entry.record_id, "fields": entry.originals()} for entry in index.entries]
    return payload


def _check_header(data: Mapping[str, Any]) -> type[SearchIndex]:
    if "version" not in data:
        msg = "Serialized index is missing required key 'version'"
        raise MalformedIndexError(msg)
    version = data["version"]
    if isinstance(version, bool) or not isinstance(version, int):
        msg = f"Serialized index version must be an integer, got {version!r}"
        raise MalformedIndexError(msg)
    if version not in SUPPORTED_VERSIONS:
        msg = f"Unsupported index format version {version}; supported: {sorted(SUPPORTED_VERSIONS)}"
        raise UnsupportedVersionError(msg)

    index_class = data.get("index_class")
    if not isinstance(index_class, str):
        msg = "Serialized index is missing required key 'index_class'"
        raise MalformedIndexError(msg)
    if index_class not in INDEX_CLASSES:
        msg = f"Unsupported index class {index_class!r}; known: {sorted(INDEX_CLASSES)}"
        raise UnsupportedVersionError(msg)
    return INDEX_CLASSES[index_class]


def create_index_from_object(data: Any) -> SearchIndex:
    """Rebuild an index from :func:`index_to_object` output.

    Raises:
        UnsupportedVersionError: unknown ``version`` or ``index_class``
        MalformedIndexError: any structural violation
    """
    if not isinstance(data, Mapping):
        msg = f"Serialized index must be a JSON object, got {type(data).__name__}"
        raise MalformedIndexError(msg)

    with create_span("staticseek.deserialize") as span:
        index_cls = _check_header(data)

        try:
            artifact = SerializedIndex.model_validate(data)
        except ValidationError as exc:
            logger.warning("Rejected malformed index artifact: %d validation error(s)", exc.error_count())
            msg = f"Serialized index failed validation: {exc}"
            raise MalformedIndexError(msg) from exc

        try:
            selection = FieldSelection.from_names(artifact.key_fields, artifact.weights)
        except (StaticSeekError, TypeError, ValueError) as exc:
            msg = f"Serialized index has an invalid field selection: {exc}"
            raise MalformedIndexError(msg) from exc

        entries = restore_entries(selection, [(entry.record_id, entry.fields) for entry in artifact.entries])
        span.set_attribute("index.record_count", len(entries))

    return index_cls.from_entries(selection, entries)


def dumps(index: SearchIndex, *, indent: bool = False) -> bytes:
    """Serialize ``index`` to UTF-8 JSON bytes."""
    option = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(index_to_object(index), option=option)


def loads(data: bytes | bytearray | memoryview | str) -> SearchIndex:
    """Parse artifact bytes (or text) produced by :func:`dumps`."""
    try:
        payload = orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        msg = f"Serialized index is not valid JSON: {exc}"
        raise MalformedIndexError(msg) from exc
    return create_index_from_object(payload)


def serialize(index: SearchIndex) -> dict[str, Any]:
    """Alias of :func:`index_to_object`."""
    return index_to_object(index)


def deserialize(data: Any) -> SearchIndex:
    """Load an index from artifact bytes/text or from an already-parsed object."""
    if isinstance(data, (bytes, bytearray, memoryview, str)):
        return loads(data)
    return create_index_from_object(data)
