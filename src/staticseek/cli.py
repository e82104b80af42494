"""Command-line host: build artifacts from JSON records and query them.

    staticseek build songs.json -k title -k artist -k genre -k note -o songs.index.json
    staticseek search songs.index.json "pop" --limit 5

File I/O lives here; the library calls stay pure.
"""

# ruff: noqa: T201  # CLI prints artifacts and results to stdout

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from pathlib import Path
import sys

import orjson
from pydantic import ValidationError

from staticseek.config import Settings
from staticseek.errors import StaticSeekError
from staticseek.observability.logging import configure_logging
from staticseek.observability.tracing import init_tracing
from staticseek.search.engine import SearchOptions
from staticseek.search.index import LinearIndex
from staticseek.search.schema import FieldSelection
from staticseek.search.serializer import dumps, loads


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_IO_ERROR = 1
EXIT_INDEX_ERROR = 2


def _parse_weight(text: str) -> tuple[str, float]:
    name, sep, raw = text.partition("=")
    if not sep or not name:
        msg = f"expected FIELD=WEIGHT, got {text!r}"
        raise argparse.ArgumentTypeError(msg)
    try:
        return name, float(raw)
    except ValueError as exc:
        msg = f"weight for {name!r} is not a number: {raw!r}"
        raise argparse.ArgumentTypeError(msg) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="staticseek", description="Build and query static search indexes.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Build an index artifact from a JSON array of records")
    build.add_argument("records", type=Path, help="JSON file holding an array of records")
    build.add_argument(
        "-k",
        "--key-field",
        dest="key_fields",
        action="append",
        required=True,
        help="Field to index; repeat in priority order",
    )
    build.add_argument(
        "-w",
        "--weight",
        dest="weights",
        action="append",
        type=_parse_weight,
        default=[],
        help="Override a field weight as FIELD=WEIGHT",
    )
    build.add_argument("-o", "--output", type=Path, help="Write the artifact here instead of stdout")
    build.add_argument("--indent", action="store_true", help="Pretty-print the artifact")
    build.set_defaults(handler=_run_build)

    query = subparsers.add_parser("search", help="Query an index artifact")
    query.add_argument("index", type=Path, help="Artifact produced by 'staticseek build'")
    query.add_argument("query", help="Free-text query")
    query.add_argument("-n", "--limit", type=int, help="Maximum number of results")
    query.add_argument(
        "-f",
        "--field",
        dest="fields",
        action="append",
        help="Restrict matching to this field; repeatable",
    )
    query.set_defaults(handler=_run_search)

    return parser


def _run_build(args: argparse.Namespace, settings: Settings) -> int:
    records = orjson.loads(args.records.read_bytes())
    if not isinstance(records, list):
        print(f"error: {args.records} must contain a JSON array of records", file=sys.stderr)
        return EXIT_INDEX_ERROR

    try:
        selection = FieldSelection.from_names(args.key_fields, dict(args.weights))
    except StaticSeekError:
        raise
    except (TypeError, ValueError) as exc:
        print(f"error: invalid field selection: {exc}", file=sys.stderr)
        return EXIT_INDEX_ERROR

    index = LinearIndex.build(records, selection)
    artifact = dumps(index, indent=args.indent or settings.artifact_indent)

    if args.output is None:
        print(artifact.decode("utf-8"))
    else:
        args.output.write_bytes(artifact)
        logger.info("Wrote index artifact to %s (%d bytes)", args.output, len(artifact))
    return EXIT_OK


def _run_search(args: argparse.Namespace, settings: Settings) -> int:
    index = loads(args.index.read_bytes())
    limit = args.limit if args.limit is not None else settings.default_search_limit
    try:
        options = SearchOptions(limit=limit, fields=args.fields)
    except ValidationError as exc:
        print(f"error: invalid search options: {exc}", file=sys.stderr)
        return EXIT_INDEX_ERROR

    results = index.search(args.query, options)
    for result in results:
        print(orjson.dumps(result.to_dict()).decode("utf-8"))
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = Settings()
    configure_logging(settings.log_level, settings.log_json)
    if settings.trace_console:
        init_tracing(settings.service_name)

    try:
        return args.handler(args, settings)
    except StaticSeekError as exc:
        print(f"error [{exc.kind.value}]: {exc}", file=sys.stderr)
        return EXIT_INDEX_ERROR
    except orjson.JSONDecodeError as exc:
        print(f"error: invalid JSON input: {exc}", file=sys.stderr)
        return EXIT_IO_ERROR
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_IO_ERROR


if __name__ == "__main__":
    sys.exit(main())
