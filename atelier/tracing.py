"""OpenTelemetry tracing for generation runs.

One span per executed step.  Spans only reach an exporter when the host
application installs an OpenTelemetry SDK; otherwise the API's default
provider discards them.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator

from opentelemetry import trace
from opentelemetry.trace import StatusCode


class AtelierTracer:
    """Creates spans for step execution."""

    def __init__(self, project_name: str, enable: bool = True) -> None:
        self.project_name: str = project_name
        self.enabled: bool = enable

    @contextmanager
    def span(
        self, name: str, attributes: dict[str, Any] | None = None
    ) -> Generator[Any, None, None]:
        if not self.enabled:
            yield None
            return

        tracer = trace.get_tracer("atelier", "0.1.0")
        attrs: dict[str, Any] = {"atelier.project": self.project_name}
        if attributes:
            attrs.update(attributes)
        with tracer.start_as_current_span(name, attributes=attrs) as span:
            try:
                yield span
            except Exception as e:
                span.set_status(StatusCode.ERROR, str(e))
                span.record_exception(e)
                raise

    @staticmethod
    def mark_failed(span: Any, reason: str) -> None:
        if span is not None:
            span.set_status(StatusCode.ERROR, reason)


class _NoopTracer:
    """No-op tracer when tracing is disabled."""

    @contextmanager
    def span(
        self, name: str, attributes: dict[str, Any] | None = None
    ) -> Generator[None, None, None]:
        yield

    @staticmethod
    def mark_failed(span: Any, reason: str) -> None:
        pass
