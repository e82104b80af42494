"""Shared test fixtures and configuration."""

import logging
import os
from pathlib import Path
import sys

from opentelemetry import trace as trace_api
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


# Pin every setting so a developer's shell or .env never leaks into tests
TEST_ENV = {
    "STATICSEEK_LOG_LEVEL": "warning",
    "STATICSEEK_LOG_JSON": "true",
    "STATICSEEK_TRACE_CONSOLE": "false",
    "STATICSEEK_SERVICE_NAME": "staticseek-tests",
    "STATICSEEK_ARTIFACT_INDENT": "false",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value

from staticseek.observability.tracing import init_tracing


SONGS = [
    {"title": "Song A", "artist": "Artist 1", "genre": ["Pop"], "note": "Popular song"},
    {"title": "Song B", "artist": "Artist 2", "genre": ["Rock"], "note": "Classic rock"},
    {"title": "Song C", "artist": "Artist 1", "genre": ["Pop", "Dance"], "note": "Dance hit"},
    {"title": "Song D", "artist": "Artist 3", "genre": ["Jazz"], "note": "Smooth jazz"},
    {"title": "Song E", "artist": "Artist 2", "genre": ["Rock", "Alternative"], "note": "Alternative rock"},
]

SONG_FIELDS = ["title", "artist", "genre", "note"]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset STATICSEEK_* variables before each test."""
    for key in list(os.environ):
        if key.startswith("STATICSEEK_") and key not in TEST_ENV:
            monkeypatch.delenv(key, raising=False)
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Drop handlers that configure_logging added during a test."""
    root = logging.getLogger()
    handlers, level = set(root.handlers), root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def songs() -> list[dict]:
    return [dict(song) for song in SONGS]


@pytest.fixture(scope="session")
def _session_span_exporter() -> InMemorySpanExporter:
    exporter = InMemorySpanExporter()
    provider = trace_api.get_tracer_provider()
    if isinstance(provider, TracerProvider):
        provider.add_span_processor(SimpleSpanProcessor(exporter))
    else:
        init_tracing("staticseek-tests", exporter=exporter)
    return exporter


@pytest.fixture
def span_exporter(_session_span_exporter: InMemorySpanExporter):
    """In-memory exporter collecting the spans finished during one test."""
    _session_span_exporter.clear()
    yield _session_span_exporter
    _session_span_exporter.clear()
