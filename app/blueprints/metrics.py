"""
Prometheus metrics blueprint.

Exposes /metrics with HTTP request metrics and counters for the CRM rule
engines (auto-tag evaluations, suggestions served). Restrict to the
monitoring network in production.
"""
from flask import Blueprint, Response, request, g
from prometheus_client import Counter, Histogram, generate_latest, CollectorRegistry, CONTENT_TYPE_LATEST
from prometheus_client import multiprocess, REGISTRY
import time
import os

metrics_bp = Blueprint('metrics', __name__)

# Check if running in multi-process mode (Gunicorn)
MULTIPROCESS_MODE = os.environ.get('PROMETHEUS_MULTIPROC_DIR') is not None

if MULTIPROCESS_MODE:
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)
else:
    registry = REGISTRY

_metric_registry = registry if not MULTIPROCESS_MODE else None

http_requests_total = Counter(
    'sunstone_http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'http_status'],
    registry=_metric_registry
)

http_request_duration_seconds = Histogram(
    'sunstone_http_request_duration_seconds',
    'HTTP request latency in seconds',
    ['method', 'endpoint'],
    registry=_metric_registry,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
)

auto_tag_evaluations_total = Counter(
    'sunstone_auto_tag_evaluations_total',
    'Auto-tag evaluations by trigger and outcome',
    ['context_type', 'outcome'],
    registry=_metric_registry
)

auto_tag_assignments_total = Counter(
    'sunstone_auto_tag_assignments_total',
    'Tag assignments written or removed by the auto-tag evaluator',
    ['change'],
    registry=_metric_registry
)

suggestions_served_total = Counter(
    'sunstone_suggestions_served_total',
    'Suggestions returned by the rankers',
    ['audience', 'type'],
    registry=_metric_registry
)


def record_auto_tag(context_type, result=None, failed=False):
    """Count one evaluation and the assignments it changed."""
    auto_tag_evaluations_total.labels(
        context_type=context_type,
        outcome='error' if failed else 'ok'
    ).inc()
    if result is not None:
        if result.applied_tag_ids:
            auto_tag_assignments_total.labels(change='applied').inc(len(result.applied_tag_ids))
        if result.removed_tag_ids:
            auto_tag_assignments_total.labels(change='removed').inc(len(result.removed_tag_ids))


def record_suggestions(audience, suggestions):
    for suggestion in suggestions:
        suggestions_served_total.labels(audience=audience, type=suggestion.type).inc()


def setup_metrics_instrumentation(app):
    """Register before/after request hooks that time every request."""

    @app.before_request
    def before_request_metrics():
        g._prometheus_metrics_start_time = time.time()

    @app.after_request
    def after_request_metrics(response):
        start = g.get('_prometheus_metrics_start_time')
        if start is not None:
            endpoint = request.endpoint or 'unknown'
            http_request_duration_seconds.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(time.time() - start)
            http_requests_total.labels(
                method=request.method,
                endpoint=endpoint,
                http_status=response.status_code
            ).inc()
        return response


@metrics_bp.route('/metrics')
def metrics():
    """
    Prometheus metrics endpoint.

    SECURITY NOTE: not authenticated; allow only the Prometheus server.
    """
    data = generate_latest(registry)
    return Response(data, mimetype=CONTENT_TYPE_LATEST)
