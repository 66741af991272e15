"""
Tracing abstraction used by the service layer.

Services receive a ``Tracer`` instead of reaching for a process-wide
global.  ``OpenTelemetryTracer`` forwards spans to the OpenTelemetry API
(whatever provider and exporter the host configured); ``NoOpTracer``
discards them and is used when tracing is disabled and in tests.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Protocol

from opentelemetry import trace

from .config import Settings


class Span(Protocol):
    def set_attribute(self, key: str, value: Any) -> None: ...


class Tracer(Protocol):
    def start_span(self, name: str) -> Any:
        """Return a context manager yielding a :class:`Span`."""
        ...


class _NoOpSpan:
    def set_attribute(self, key: str, value: Any) -> None:
        return None


class NoOpTracer:
    """Tracer that records nothing."""

    @contextmanager
    def start_span(self, name: str) -> Iterator[Span]:
        yield _NoOpSpan()


class OpenTelemetryTracer:
    """Tracer backed by :mod:`opentelemetry.trace`.

    Exceptions escaping a span are recorded on it and mark its status as
    an error; they are re-raised unchanged.
    """

    def __init__(self, name: str, version: str | None = None) -> None:
        self._tracer = trace.get_tracer(name, version)

    @contextmanager
    def start_span(self, name: str) -> Iterator[Span]:
        with self._tracer.start_as_current_span(name) as span:
            yield span


def build_tracer(settings: Settings) -> Tracer:
    if settings.tracing_enabled:
        return OpenTelemetryTracer(settings.tracer_name, settings.api_version)
    return NoOpTracer()
