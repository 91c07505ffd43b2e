# feedbackhub/monitoring.py
"""
Centralized monitoring: Prometheus metrics, structured JSON logging, optional Sentry.

Env vars:
- PROMETHEUS_ENABLED (default: true)
- SENTRY_DSN (optional)
- LOG_AS_JSON (default: true)
- LOG_LEVEL (default: INFO)
- ENVIRONMENT (default: development)
"""

import os
import logging
from typing import Tuple

import sentry_sdk
from prometheus_client import (
    Counter, Histogram,
    generate_latest, CONTENT_TYPE_LATEST, REGISTRY,
)
from pythonjsonlogger import jsonlogger

# --- ENV flags
PROMETHEUS_ENABLED = os.getenv("PROMETHEUS_ENABLED", "true").lower() in ("1", "true", "yes")
SENTRY_DSN = os.getenv("SENTRY_DSN", None)
LOG_AS_JSON = os.getenv("LOG_AS_JSON", "true").lower() in ("1", "true", "yes")
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")


# --- Logger setup
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logger(name: str = "feedbackhub", level: int = None) -> logging.Logger:
    """Stream logger emitting JSON lines unless LOG_AS_JSON is off; repeat calls reuse the handler."""
    logger = logging.getLogger(name)
    logger.setLevel(level if level is not None else os.getenv("LOG_LEVEL", "INFO").upper())
    if logger.handlers:
        return logger
    handler = logging.StreamHandler()
    if LOG_AS_JSON:
        handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger


logger = setup_logger()

# --- Sentry (optional)
if SENTRY_DSN:
    sentry_sdk.init(dsn=SENTRY_DSN, environment=ENVIRONMENT)
    logger.info("Sentry initialized")


# --- Prometheus metrics
REQUEST_COUNT = Counter(
    "feedbackhub_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

REQUEST_LATENCY = Histogram(
    "feedbackhub_request_latency_seconds",
    "Request latency in seconds",
    ["endpoint"],
)

PROMPTS_CREATED = Counter(
    "feedbackhub_prompts_created_total",
    "Feedback prompts created",
)

FEEDBACK_SUBMITTED = Counter(
    "feedbackhub_feedback_submitted_total",
    "Feedback entries submitted",
)

STORAGE_ERRORS = Counter(
    "feedbackhub_storage_errors_total",
    "Storage errors surfaced to the router",
    ["kind"],
)


# --- Helper wrappers (never crash the app)
def observe_request(endpoint: str, method: str, status: str, elapsed: float):
    """Record one handled request; `endpoint` is the route template, not the raw path."""
    try:
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=status).inc()
        REQUEST_LATENCY.labels(endpoint=endpoint).observe(elapsed)
    except Exception:
        pass


def inc_prompt_created():
    try:
        PROMPTS_CREATED.inc()
    except Exception:
        pass


def inc_feedback_submitted():
    try:
        FEEDBACK_SUBMITTED.inc()
    except Exception:
        pass


def inc_storage_error(kind: str):
    try:
        STORAGE_ERRORS.labels(kind=kind).inc()
    except Exception:
        pass


def render_metrics() -> Tuple[bytes, str]:
    """Prometheus text exposition of the default registry, as (payload, content_type)."""
    try:
        payload = generate_latest(REGISTRY)
    except Exception:
        logger.exception("Metrics rendering failed")
        payload = b""
    return payload, CONTENT_TYPE_LATEST
