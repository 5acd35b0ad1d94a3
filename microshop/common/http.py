import logging
from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel, ValidationError
from quart import Quart, jsonify, request

from .errors import InvalidStatusTransition, StorageUnavailable, ValidationFailure

_logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


async def parse_body(model: Type[M]) -> M:
    data = await request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise ValidationFailure("Request body must be a JSON object")
    return model.model_validate(data)


def to_json(record: BaseModel) -> Dict[str, Any]:
    return record.model_dump(mode="json", by_alias=True)


def register_error_handlers(app: Quart) -> None:
    @app.errorhandler(ValidationFailure)
    async def validation_failure(e: ValidationFailure):
        return jsonify({"error": "validation_failed", "message": str(e), "details": e.details}), 400

    @app.errorhandler(ValidationError)
    async def invalid_body(e: ValidationError):
        details = e.errors(include_url=False, include_context=False, include_input=False)
        return jsonify({"error": "validation_failed", "details": details}), 400

    @app.errorhandler(StorageUnavailable)
    async def storage_unavailable(e: StorageUnavailable):
        _logger.error("Storage unavailable while handling %s %s: %s", request.method, request.path, e)
        return jsonify({"error": "storage_unavailable"}), 503

    @app.errorhandler(InvalidStatusTransition)
    async def invalid_transition(e: InvalidStatusTransition):
        return jsonify({"error": "invalid_status_transition", "from": e.current, "to": e.requested}), 409
