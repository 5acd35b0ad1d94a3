from quart import Blueprint, current_app, jsonify

from ..common.http import parse_body, to_json
from ..common.telemetry import PRODUCT_REQUESTS, PRODUCT_VIEWS
from .schemas import ProductIn

bp = Blueprint("inventory", __name__, url_prefix="/api/products")


def _repo():
    return current_app.repository


@bp.get("")
async def products_list():
    PRODUCT_REQUESTS.labels(endpoint="list").inc()
    items = await _repo().list()
    return jsonify([to_json(p) for p in items])


@bp.get("/<int:product_id>")
async def product_detail(product_id: int):
    PRODUCT_REQUESTS.labels(endpoint="get").inc()
    PRODUCT_VIEWS.labels(product_id=str(product_id)).inc()
    product = await _repo().get(product_id)
    if product is None:
        return jsonify({"error": "product_not_found"}), 404
    return jsonify(to_json(product))


@bp.post("")
async def product_create():
    PRODUCT_REQUESTS.labels(endpoint="create").inc()
    data = await parse_body(ProductIn)
    product = await _repo().create(data)
    return jsonify(to_json(product)), 201, {"Location": f"/api/products/{product.id}"}


@bp.put("/<int:product_id>")
async def product_replace(product_id: int):
    PRODUCT_REQUESTS.labels(endpoint="replace").inc()
    data = await parse_body(ProductIn)
    product = await _repo().replace(product_id, data)
    if product is None:
        return jsonify({"error": "product_not_found"}), 404
    return jsonify(to_json(product))


@bp.delete("/<int:product_id>")
async def product_delete(product_id: int):
    PRODUCT_REQUESTS.labels(endpoint="delete").inc()
    if not await _repo().delete(product_id):
        return jsonify({"error": "product_not_found"}), 404
    return "", 204
