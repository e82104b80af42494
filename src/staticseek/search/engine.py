"""Query engine: rank index entries against a free-text query.

Matching is deliberately simple. The normalized query is compared against
every normalized fragment of the requested fields and each fragment is
classified by the first rule it satisfies:

=========  ===============================  ==========
kind       rule                             multiplier
=========  ===============================  ==========
exact      fragment == query                3
prefix     fragment.startswith(query)       2
substring  query in fragment                1
=========  ===============================  ==========

A fragment contributes ``field weight x multiplier`` to its record's score and
a record's score is the sum over all of its matching fragments. Results are
ordered by score (descending), then record id (ascending).

The index variant owns the candidate scan (``collect_hits``); this module owns
query normalization, options validation and ranking, so every variant ranks
identically.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
import heapq
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from staticseek.observability.tracing import create_span
from staticseek.search.normalizer import normalize


if TYPE_CHECKING:
    from staticseek.search.index import SearchIndex


logger = logging.getLogger(__name__)


class MatchKind(str, Enum):
    """How a query matched a fragment, in descending priority."""

    EXACT = "exact"
    PREFIX = "prefix"
    SUBSTRING = "substring"

    @property
    def multiplier(self) -> float:
        return _MULTIPLIERS[self]


_MULTIPLIERS = {
    MatchKind.EXACT: 3.0,
    MatchKind.PREFIX: 2.0,
    MatchKind.SUBSTRING: 1.0,
}


def match_kind(fragment: str, query: str) -> MatchKind | None:
    """Classify ``fragment`` against an already-normalized ``query``."""
    if fragment == query:
        return MatchKind.EXACT
    if fragment.startswith(query):
        return MatchKind.PREFIX
    if query in fragment:
        return MatchKind.SUBSTRING
    return None


class SearchOptions(BaseModel):
    """Per-query options.

    Args:
        limit: Keep only the top ``limit`` results (``None`` = unbounded)
        fields: Restrict matching to these fields of the index
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    limit: int | None = Field(default=None, ge=0)
    fields: tuple[str, ...] | None = None


class FieldMatch(BaseModel):
    """Provenance of one matching fragment."""

    model_config = ConfigDict(frozen=True)

    field: str
    fragment: str
    kind: MatchKind


class MatchResult(BaseModel):
    """One ranked record with its score and per-fragment provenance."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    record_id: int = Field(alias="recordId", ge=0)
    score: float = Field(ge=0.0)
    matches: tuple[FieldMatch, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Wire form: ``{"recordId", "score", "matches": [{"field", "fragment", "kind"}]}``."""
        return self.model_dump(mode="json", by_alias=True)


def _coerce_options(options: SearchOptions | Mapping[str, Any] | None) -> SearchOptions:
    if options is None:
        return SearchOptions()
    if isinstance(options, SearchOptions):
        return options
    return SearchOptions.model_validate(dict(options))


def rank(hits: Iterable[MatchResult], limit: int | None = None) -> list[MatchResult]:
    """Order hits by score descending then record id ascending, keeping at most ``limit``."""

    def sort_key(hit: MatchResult) -> tuple[float, int]:
        return (-hit.score, hit.record_id)

    if limit is None:
        return sorted(hits, key=sort_key)
    return heapq.nsmallest(limit, hits, key=sort_key)


def search(
    index: SearchIndex,
    query: str,
    options: SearchOptions | Mapping[str, Any] | None = None,
) -> list[MatchResult]:
    """Evaluate ``query`` against ``index`` and return ranked matches.

    An empty (or whitespace-only) query returns ``[]``. Unknown names in
    ``options.fields`` raise :class:`~staticseek.errors.UnknownFieldError`;
    the index itself is untouched and remains usable.
    """
    opts = _coerce_options(options)
    positions = index.field_selection.positions(opts.fields)

    text = normalize(query)
    if not text:
        return []

    with create_span(
        "staticseek.search",
        attributes={"search.index_class": index.index_class, "search.query_length": len(text)},
    ) as span:
        results = rank(index.collect_hits(text, positions), opts.limit)
        span.set_attribute("search.result_count", len(results))

    logger.debug("Query %r matched %d record(s)", text, len(results))
    return results
