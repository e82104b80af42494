"""Unit tests for index artifact serialization."""

import json

import orjson
import pytest

from staticseek.errors import ErrorKind, MalformedIndexError, UnsupportedVersionError
from staticseek.search.index import LinearIndex, build, create_index
from staticseek.search.serializer import (
    FORMAT_VERSION,
    create_index_from_object,
    deserialize,
    dumps,
    index_to_object,
    loads,
    serialize,
)


pytestmark = pytest.mark.unit


@pytest.fixture
def song_index(songs: list[dict]) -> LinearIndex:
    return create_index(LinearIndex, songs, key_fields=["title", "artist", "genre", "note"])


def _artifact(**overrides):
    data = {
        "version": FORMAT_VERSION,
        "index_class": "linear",
        "key_fields": ["title", "genre"],
        "entries": [
            {"id": 0, "fields": [["Song A"], ["Pop"]]},
            {"id": 1, "fields": [[], []]},
        ],
    }
    data.update(overrides)
    return data


def test_artifact_layout() -> None:
    index = build([{"title": "Alpha", "genre": ["Pop", "Dance"]}, {"note": "x"}], ["title", "genre"])

    assert index_to_object(index) == {
        "version": 1,
        "index_class": "linear",
        "key_fields": ["title", "genre"],
        "entries": [
            {"id": 0, "fields": [["Alpha"], ["Pop", "Dance"]]},
            {"id": 1, "fields": [[], []]},
        ],
    }


def test_custom_weights_are_serialized() -> None:
    index = create_index(LinearIndex, [{"title": "Alpha"}], key_fields=["title", "genre"], weights={"genre": 0.75})

    data = serialize(index)

    assert data["weights"] == {"genre": 0.75}
    assert list(data) == ["version", "index_class", "key_fields", "weights", "entries"]
    assert deserialize(data).field_selection.weight("genre") == 0.75


def test_round_trip_value_form(song_index: LinearIndex) -> None:
    restored = create_index_from_object(index_to_object(song_index))

    assert restored == song_index
    assert restored.search("rock") == song_index.search("rock")


def test_round_trip_through_json_text(song_index: LinearIndex) -> None:
    text = json.dumps(index_to_object(song_index), ensure_ascii=False)

    assert loads(text) == song_index
    assert deserialize(text) == song_index


def test_round_trip_preserves_original_text() -> None:
    index = build([{"title": "  Ｓｏｎｇ　Ａ  ", "genre": ["J-Pop"]}], ["title", "genre"])

    restored = loads(dumps(index))

    assert restored.entries[0].fields[0][0].original == "  Ｓｏｎｇ　Ａ  "
    assert restored == index


def test_serialization_is_deterministic(songs: list[dict]) -> None:
    first = dumps(build(songs, ["title", "artist", "genre", "note"]))
    second = dumps(build([dict(song) for song in songs], ["title", "artist", "genre", "note"]))

    assert first == second


def test_indented_output_is_equivalent(song_index: LinearIndex) -> None:
    pretty = dumps(song_index, indent=True)

    assert b"\n  " in pretty
    assert orjson.loads(pretty) == orjson.loads(dumps(song_index))


def test_unknown_version_is_unsupported() -> None:
    with pytest.raises(UnsupportedVersionError) as excinfo:
        create_index_from_object(_artifact(version=99))

    assert excinfo.value.kind is ErrorKind.UNSUPPORTED_VERSION


def test_unknown_index_class_is_unsupported() -> None:
    with pytest.raises(UnsupportedVersionError, match="inverted"):
        create_index_from_object(_artifact(index_class="inverted"))


@pytest.mark.parametrize("version", ["1", 1.0, True, None])
def test_non_integer_version_is_malformed(version: object) -> None:
    with pytest.raises(MalformedIndexError):
        create_index_from_object(_artifact(version=version))


@pytest.mark.parametrize("missing", ["version", "index_class", "key_fields", "entries"])
def test_missing_required_keys_are_malformed(missing: str) -> None:
    data = _artifact()
    del data[missing]

    with pytest.raises(MalformedIndexError):
        create_index_from_object(data)


@pytest.mark.parametrize(
    "overrides",
    [
        {"entries": [{"id": 0, "fields": [["Song A"]]}]},
        {"entries": [{"id": 1, "fields": [[], []]}]},
        {"entries": [{"id": 0, "fields": [["Song A"], []]}, {"id": 0, "fields": [[], []]}]},
        {"entries": [{"id": "0", "fields": [[], []]}]},
        {"entries": [{"id": 0, "fields": [[1], []]}]},
        {"entries": [{"id": 0, "fields": [["  "], []]}]},
        {"entries": [{"fields": [[], []]}]},
        {"key_fields": []},
        {"key_fields": ["title", "title"]},
        {"weights": {"note": 1.0}},
        {"weights": {"title": -1.0}},
        {"extra": True},
    ],
)
def test_structural_violations_are_malformed(overrides: dict) -> None:
    with pytest.raises(MalformedIndexError) as excinfo:
        create_index_from_object(_artifact(**overrides))

    assert excinfo.value.kind is ErrorKind.MALFORMED_INDEX


@pytest.mark.parametrize("payload", [b"{not json", b"[]", b"42", "null"])
def test_invalid_documents_are_malformed(payload: bytes | str) -> None:
    with pytest.raises(MalformedIndexError):
        loads(payload)


def test_deserialize_emits_span(song_index: LinearIndex, span_exporter) -> None:
    create_index_from_object(index_to_object(song_index))

    spans = [span for span in span_exporter.get_finished_spans() if span.name == "staticseek.deserialize"]
    assert len(spans) == 1
    assert spans[0].attributes["index.record_count"] == 5
