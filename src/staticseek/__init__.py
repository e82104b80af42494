"""staticseek: build a portable search index once, query it anywhere.

Example:
    from staticseek import LinearIndex, create_index, dumps, loads

    index = create_index(LinearIndex, songs, key_fields=["title", "artist", "genre", "note"])
    artifact = dumps(index)

    # later, possibly in another process
    results = loads(artifact).search("pop", {"limit": 10})
"""

from staticseek.errors import (
    DuplicateFieldNameError,
    EmptyFieldSelectionError,
    ErrorKind,
    InvalidFieldTypeError,
    MalformedIndexError,
    StaticSeekError,
    UnknownFieldError,
    UnsupportedVersionError,
)
from staticseek.search.engine import FieldMatch, MatchKind, MatchResult, SearchOptions, search
from staticseek.search.fields import extract
from staticseek.search.index import INDEX_CLASSES, IndexEntry, LinearIndex, SearchIndex, build, create_index
from staticseek.search.normalizer import normalize
from staticseek.search.schema import FieldSelection
from staticseek.search.serializer import (
    FORMAT_VERSION,
    create_index_from_object,
    deserialize,
    dumps,
    index_to_object,
    loads,
    serialize,
)


__version__ = "0.1.0"

__all__ = [
    "FORMAT_VERSION",
    "INDEX_CLASSES",
    "DuplicateFieldNameError",
    "EmptyFieldSelectionError",
    "ErrorKind",
    "FieldMatch",
    "FieldSelection",
    "IndexEntry",
    "InvalidFieldTypeError",
    "LinearIndex",
    "MalformedIndexError",
    "MatchKind",
    "MatchResult",
    "SearchIndex",
    "SearchOptions",
    "StaticSeekError",
    "UnknownFieldError",
    "UnsupportedVersionError",
    "build",
    "create_index",
    "create_index_from_object",
    "deserialize",
    "dumps",
    "extract",
    "index_to_object",
    "loads",
    "normalize",
    "search",
    "serialize",
]
