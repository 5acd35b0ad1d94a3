from quart import Blueprint, current_app, jsonify

from ..common.http import parse_body, to_json
from ..common.telemetry import ORDER_REQUESTS
from .schemas import OrderCreate, StatusUpdate

bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _repo():
    return current_app.repository


@bp.get("")
async def orders_list():
    ORDER_REQUESTS.labels(endpoint="list").inc()
    orders = await _repo().list()
    return jsonify([to_json(o) for o in orders])


@bp.get("/<int:order_id>")
async def order_detail(order_id: int):
    ORDER_REQUESTS.labels(endpoint="get").inc()
    order = await _repo().get(order_id)
    if order is None:
        return jsonify({"error": "order_not_found"}), 404
    return jsonify(to_json(order))


@bp.get("/customer/<int:customer_id>")
async def orders_by_customer(customer_id: int):
    ORDER_REQUESTS.labels(endpoint="by_customer").inc()
    orders = await _repo().list_by_customer(customer_id)
    return jsonify([to_json(o) for o in orders])


@bp.post("")
async def order_create():
    ORDER_REQUESTS.labels(endpoint="create").inc()
    data = await parse_body(OrderCreate)
    order = await _repo().create(data)
    return jsonify(to_json(order)), 201, {"Location": f"/api/orders/{order.id}"}


@bp.put("/<int:order_id>/status")
async def order_status_put(order_id: int):
    ORDER_REQUESTS.labels(endpoint="update_status").inc()
    data = await parse_body(StatusUpdate)
    order = await _repo().update_status(order_id, data.status)
    if order is None:
        return jsonify({"error": "order_not_found"}), 404
    return jsonify(to_json(order))


@bp.delete("/<int:order_id>")
async def order_delete(order_id: int):
    ORDER_REQUESTS.labels(endpoint="delete").inc()
    if not await _repo().delete(order_id):
        return jsonify({"error": "order_not_found"}), 404
    return "", 204
