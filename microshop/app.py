import logging
from typing import Optional

from quart import Quart, jsonify

from .common.config import Settings, settings
from .common.errors import StorageUnavailable
from .common.http import register_error_handlers
from .common.sequence import SequenceAllocator
from .common.store import DocumentStore, build_store
from .common.telemetry import configure_logging, instrument
from .inventory.controller import bp as inventory_bp
from .inventory.service import ProductRepository, seed_products
from .orders.controller import bp as orders_bp
from .orders.service import OrderRepository, seed_orders


log = logging.getLogger(__name__)

SERVICE_NAMES = {"products": "product-service", "orders": "order-service"}


def create_app(
    service: Optional[str] = None,
    store: Optional[DocumentStore] = None,
    config: Optional[Settings] = None,
) -> Quart:
    """Build the Quart app for one of the two services.

    ``store`` is injected by tests; otherwise it is built from ``config``
    (``STORAGE_BACKEND`` / ``DB_URL``). The store is opened and the collection
    seeded in ``before_serving``, so no request sees a half-initialized store.
    """
    config = config or settings
    service = (service or config.SERVICE).strip().lower()
    if service not in SERVICE_NAMES:
        raise ValueError(f"Unknown service: {service!r} (expected one of {sorted(SERVICE_NAMES)})")

    app = Quart(__name__)
    app.config["SERVICE"] = service
    app.service_name = SERVICE_NAMES[service]
    app.store = store if store is not None else build_store(config)
    allocator = SequenceAllocator(app.store)

    if service == "products":
        app.repository = ProductRepository(app.store, allocator)
        app.register_blueprint(inventory_bp)
        seeder = seed_products
    else:
        app.repository = OrderRepository(app.store, allocator, status_policy=config.ORDER_STATUS_POLICY)
        app.register_blueprint(orders_bp)
        seeder = seed_orders

    instrument(app, config)
    register_error_handlers(app)

    @app.get("/health")
    async def health():
        try:
            await app.store.ping()
        except StorageUnavailable as e:
            log.warning("Health check failed: %s", e)
            return jsonify({"status": "unhealthy", "service": app.service_name}), 503
        return jsonify({"status": "healthy", "service": app.service_name})

    @app.get("/")
    async def index():
        return jsonify(
            {
                "service": app.service_name,
                "instance": config.INSTANCE_ID,
                "telemetry_endpoint": config.OTEL_EXPORTER_OTLP_ENDPOINT,
                "endpoints": sorted(
                    rule.rule for rule in app.url_map.iter_rules() if not rule.rule.startswith("/static")
                ),
            }
        )

    @app.before_serving
    async def startup():
        configure_logging(config)
        log.info("Starting %s (storage=%s)", app.service_name, type(app.store).__name__)
        await app.store.connect()
        log.info("Storage ready.")
        if config.SEED_DATA:
            await seeder(app.repository)
        else:
            log.info("Seeding disabled (SEED_DATA=false)")

    @app.after_serving
    async def shutdown():
        await app.store.close()
        log.info("Shutdown complete.")

    return app
