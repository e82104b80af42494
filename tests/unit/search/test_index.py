"""Unit tests for the index builder and the linear index variant."""

from collections import namedtuple
import copy

import pytest

from staticseek.errors import (
    DuplicateFieldNameError,
    EmptyFieldSelectionError,
    InvalidFieldTypeError,
    MalformedIndexError,
)
from staticseek.search.index import INDEX_CLASSES, LinearIndex, SearchIndex, build, create_index, restore_entries
from staticseek.search.schema import FieldSelection


pytestmark = pytest.mark.unit


def test_build_assigns_dense_ids_in_input_order(songs: list[dict]) -> None:
    index = create_index(LinearIndex, songs, key_fields=["title", "artist", "genre", "note"])

    assert [entry.record_id for entry in index.entries] == [0, 1, 2, 3, 4]
    assert index.record_count == 5
    assert index.field_selection.names == ("title", "artist", "genre", "note")


def test_entries_are_aligned_with_field_selection(songs: list[dict]) -> None:
    index = build(songs, ["genre", "title"])

    entry = index.entries[2]
    genre, title = entry.fields
    assert [fragment.text for fragment in genre] == ["pop", "dance"]
    assert [fragment.original for fragment in genre] == ["Pop", "Dance"]
    assert {fragment.field for fragment in genre} == {"genre"}
    assert {fragment.record_id for fragment in title} == {2}


def test_record_without_selected_fields_still_has_entry() -> None:
    index = build([{"title": "Song A"}, {"other": "x"}, {"title": "   "}], ["title", "note"])

    assert index.record_count == 3
    assert index.entries[1].fields == ((), ())
    assert index.entries[2].fields == ((), ())


def test_build_does_not_mutate_records(songs: list[dict]) -> None:
    before = copy.deepcopy(songs)

    build(songs, ["title", "genre"])

    assert songs == before


def test_build_accepts_generators(songs: list[dict]) -> None:
    index = build((song for song in songs), ["title"])

    assert index.record_count == len(songs)


def test_empty_record_collection_builds_empty_index() -> None:
    index = build([], ["title"])

    assert index.entries == ()
    assert index.search("anything") == []


def test_empty_field_selection_fails() -> None:
    with pytest.raises(EmptyFieldSelectionError):
        create_index(LinearIndex, [{"title": "Song A"}], key_fields=[])


def test_duplicate_field_selection_fails() -> None:
    with pytest.raises(DuplicateFieldNameError):
        create_index(LinearIndex, [{"title": "Song A"}], key_fields=["title", "title"])


def test_invalid_field_type_aborts_build() -> None:
    records = [{"title": "Song A"}, {"title": {"nested": True}}]

    with pytest.raises(InvalidFieldTypeError) as excinfo:
        build(records, ["title"])

    assert excinfo.value.record_id == 1


def test_non_record_input_aborts_build() -> None:
    with pytest.raises(InvalidFieldTypeError) as excinfo:
        build([{"title": "Song A"}, 1, "x"], ["title"])

    assert excinfo.value.record_id == 1
    assert excinfo.value.value_type == "int"


def test_named_tuple_records_are_indexed() -> None:
    song = namedtuple("Song", ["title", "genre"])

    index = build([song("Song A", ("Pop",))], ["title", "genre"])

    assert index.entries[0].originals() == [["Song A"], ["Pop"]]
    assert [result.record_id for result in index.search("song a")] == [0]


def test_index_is_immutable(songs: list[dict]) -> None:
    index = build(songs, ["title"])

    with pytest.raises(AttributeError):
        index.records = ()  # type: ignore[misc]
    with pytest.raises(AttributeError):
        index.entries[0].record_id = 9  # type: ignore[misc]


def test_builds_with_same_input_are_equal(songs: list[dict]) -> None:
    assert build(songs, ["title", "genre"]) == build(songs, ["title", "genre"])
    assert build(songs, ["title", "genre"]) != build(songs, ["genre", "title"])


def test_registry_exposes_linear_variant() -> None:
    assert INDEX_CLASSES["linear"] is LinearIndex
    assert issubclass(LinearIndex, SearchIndex)
    with pytest.raises(TypeError):
        INDEX_CLASSES["other"] = LinearIndex  # type: ignore[index]


def test_restore_entries_rejects_sparse_ids() -> None:
    selection = FieldSelection.from_names(["title"])

    with pytest.raises(MalformedIndexError, match="dense"):
        restore_entries(selection, [(0, [["Song A"]]), (2, [["Song C"]])])


def test_restore_entries_rejects_field_count_mismatch() -> None:
    selection = FieldSelection.from_names(["title", "genre"])

    with pytest.raises(MalformedIndexError, match="field list"):
        restore_entries(selection, [(0, [["Song A"]])])


def test_restore_entries_rejects_blank_fragments() -> None:
    selection = FieldSelection.from_names(["title"])

    with pytest.raises(MalformedIndexError, match="empty fragment"):
        restore_entries(selection, [(0, [["  "]])])
