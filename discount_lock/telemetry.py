import logging

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from discount_lock.core.config import Settings

logger = logging.getLogger(__name__)

SERVICE = "sale-discount-lock"


def setup_opentelemetry(app: FastAPI, settings: Settings) -> bool:
    """Installs a tracer provider and instruments the app. Returns False when disabled."""
    if not settings.OPENTELEMETRY_ENABLED:
        logger.info("OpenTelemetry tracing is disabled via OPENTELEMETRY_ENABLED setting.")
        return False

    provider = TracerProvider(resource=Resource(attributes={SERVICE_NAME: SERVICE}))
    trace.set_tracer_provider(provider)

    endpoint = settings.OTEL_EXPORTER_OTLP_ENDPOINT
    if endpoint:
        logger.info(f"Configuring OTLP Exporter to: {endpoint}/v1/traces")
        try:
            exporter = OTLPSpanExporter(endpoint=f"{endpoint.strip('/')}/v1/traces")
        except Exception as e:
            logger.error(f"Failed to initialize OTLP Exporter: {e}. Falling back to Console Exporter.")
            exporter = ConsoleSpanExporter()
    else:
        logger.warning("OTEL_EXPORTER_OTLP_ENDPOINT not set. Defaulting to ConsoleSpanExporter.")
        exporter = ConsoleSpanExporter()
    provider.add_span_processor(BatchSpanProcessor(exporter))

    FastAPIInstrumentor.instrument_app(app)
    logger.info("OpenTelemetry setup complete.")
    return True
