import logging
import time

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from quart import Quart, request

from .config import Settings

log = logging.getLogger(__name__)

# Basic metrics with proper buckets for latency
REQUEST_COUNT = Counter("http_requests_total", "Total HTTP requests", ["method", "endpoint", "status"])
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0, 7.5, 10.0, float("inf"))
)

# Service-level counters
PRODUCT_REQUESTS = Counter("product_requests_total", "Total number of product API requests", ["endpoint"])
PRODUCT_VIEWS = Counter("product_views_total", "Total number of individual product views", ["product_id"])
ORDER_REQUESTS = Counter("order_requests_total", "Total number of order API requests", ["endpoint"])


def configure_logging(config: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _endpoint_label() -> str:
    # Route template keeps label cardinality bounded (/api/orders/<int:order_id>)
    rule = request.url_rule
    return rule.rule if rule is not None else "unmatched"


def instrument(app: Quart, config: Settings) -> None:
    """Attach request logging, latency/count metrics and /metrics to ``app``."""

    @app.before_request
    async def before_request():
        request._start_time = time.time()
        log.info("[Instance %s] %s %s", config.INSTANCE_ID, request.method, request.path)

    @app.after_request
    async def after_request(response):
        try:
            if hasattr(request, "_start_time"):
                duration = time.time() - request._start_time
                endpoint = _endpoint_label()
                REQUEST_LATENCY.labels(endpoint=endpoint).observe(duration)
                REQUEST_COUNT.labels(
                    method=request.method,
                    endpoint=endpoint,
                    status=str(response.status_code)
                ).inc()
            response.headers["X-Instance-ID"] = config.INSTANCE_ID
        except Exception as e:
            log.error("Error recording metrics: %s", e)
        return response

    @app.get("/metrics")
    async def metrics():
        data = generate_latest()
        return app.response_class(data, mimetype=CONTENT_TYPE_LATEST)
