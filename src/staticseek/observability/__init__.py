"""Observability helpers: structured logging and OpenTelemetry tracing."""

from staticseek.observability.context import get_trace_context, set_trace_context, trace_context
from staticseek.observability.logging import JsonFormatter, configure_logging
from staticseek.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "set_trace_context",
    "trace_context",
]
