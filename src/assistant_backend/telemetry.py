"""Tracing for the API server.

``OBSERVABILITY`` picks the backend: ``logfire`` (needs ``LOGFIRE_TOKEN``),
``otel`` (OTLP over HTTP to ``OTEL_EXPORTER_OTLP_ENDPOINT``) or ``off``.
Both backends live in the ``otel`` extra and are imported lazily, so a
plain install runs with tracing off.

When tracing is on, the completion service asks pydantic-ai to emit a span
per model request, which puts the two requests of a tool-calling chat turn
under the same FastAPI request span.
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import FastAPI
from loguru import logger

from assistant_backend import __version__
from assistant_backend.config import Settings


def _enable_logfire(app: FastAPI, settings: Settings) -> str:
    import logfire

    logfire.configure(service_name=settings.otel_service_name, service_version=__version__)
    logfire.instrument_fastapi(app)
    # Embedding, CMS and completion calls all go through httpx
    logfire.instrument_httpx()
    return "logfire"


def _enable_otel(app: FastAPI, settings: Settings) -> str:
    from opentelemetry import trace
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

    trace.set_tracer_provider(_build_tracer_provider(settings))
    FastAPIInstrumentor.instrument_app(app, excluded_urls="health")
    return f"otel -> {_traces_url(settings)}"


def _traces_url(settings: Settings) -> str:
    return settings.otel_exporter_otlp_endpoint.rstrip("/") + "/v1/traces"


def _build_tracer_provider(settings: Settings):
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import (
        BatchSpanProcessor,
        ConsoleSpanExporter,
        SimpleSpanProcessor,
    )

    provider = TracerProvider(
        resource=Resource.create(
            {"service.name": settings.otel_service_name, "service.version": __version__}
        )
    )
    exporter = OTLPSpanExporter(endpoint=_traces_url(settings))
    provider.add_span_processor(BatchSpanProcessor(exporter))
    if settings.otel_console_exporter:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    return provider


_BACKENDS: dict[str, Callable[[FastAPI, Settings], str]] = {
    "logfire": _enable_logfire,
    "otel": _enable_otel,
}


def tracing_mode(settings: Settings) -> str | None:
    """The configured backend name, or ``None`` when tracing is off or unknown."""
    mode = settings.observability.strip().lower()
    return mode if mode in _BACKENDS else None


def setup_telemetry(app: FastAPI, settings: Settings) -> None:
    """Instrument *app* with the configured tracing backend, if any."""
    mode = tracing_mode(settings)
    if mode is None:
        if settings.observability.strip().lower() not in ("", "off"):
            logger.warning(
                "Unknown OBSERVABILITY value {!r}, tracing disabled", settings.observability
            )
        else:
            logger.debug("Tracing disabled")
        return

    target = _BACKENDS[mode](app, settings)
    logger.info("Tracing enabled | service={} | {}", settings.otel_service_name, target)


def is_observability_active(settings: Settings) -> bool:
    return tracing_mode(settings) is not None
