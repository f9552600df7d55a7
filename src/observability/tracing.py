import os
from typing import Optional

from flask import Flask
from opentelemetry import trace
from opentelemetry.trace import Span, SpanKind, Status, StatusCode

try:
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.instrumentation.flask import FlaskInstrumentor
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
except Exception:  # pragma: no cover - optional dependency
    FlaskInstrumentor = None  # type: ignore

from config import Config

# Semantic-convention attribute names used on spans
ATTR_HTTP_REQUEST_METHOD = "http.request.method"
ATTR_HTTP_RESPONSE_STATUS_CODE = "http.response.status_code"
ATTR_HTTP_ROUTE = "http.route"
ATTR_URL_FULL = "url.full"
ATTR_SERVER_ADDRESS = "server.address"
ATTR_PEER_SERVICE = "peer.service"
ATTR_ERROR_TYPE = "error.type"
ATTR_ERROR_MESSAGE = "error.message"

tracer = trace.get_tracer(Config.OTEL_SERVICE_NAME, Config.SERVICE_VERSION)


def set_span_error(span: Span, error: object, error_type: Optional[str] = None) -> None:
    message = str(error)
    span.set_status(Status(StatusCode.ERROR, message))
    span.set_attribute(ATTR_ERROR_MESSAGE, message)
    if error_type:
        span.set_attribute(ATTR_ERROR_TYPE, error_type)
    if isinstance(error, BaseException):
        span.record_exception(error)


def set_span_success(span: Span) -> None:
    span.set_status(Status(StatusCode.OK))


def init_tracing(app: Flask) -> None:
    if FlaskInstrumentor is None:  # pragma: no cover - optional dependency
        return

    endpoint = app.config.get("OTEL_EXPORTER_OTLP_ENDPOINT") or os.getenv(
        "OTEL_EXPORTER_OTLP_ENDPOINT"
    )
    if not endpoint:
        return

    headers = app.config.get("OTEL_EXPORTER_OTLP_HEADERS") or os.getenv(
        "OTEL_EXPORTER_OTLP_HEADERS"
    )

    resource = Resource.create(
        {
            "service.name": app.config.get("OTEL_SERVICE_NAME", "mixtape-creator-api"),
            "service.version": app.config.get("SERVICE_VERSION", "0.1.0"),
        }
    )

    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(
        endpoint=endpoint,
        headers=headers,
        insecure=app.config.get("OTEL_EXPORTER_OTLP_INSECURE", True),
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    FlaskInstrumentor().instrument_app(app)


__all__ = [
    "tracer",
    "SpanKind",
    "init_tracing",
    "set_span_error",
    "set_span_success",
]
