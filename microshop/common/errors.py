class StorageUnavailable(Exception):
    """The backing store could not be reached."""


class DuplicateKey(Exception):
    """An insert collided with an existing identifier."""


class ValidationFailure(Exception):
    """The request body could not be turned into a valid record."""

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.details = details or []


class InvalidStatusTransition(Exception):
    def __init__(self, order_id: int, current: str, requested: str):
        super().__init__(f"order {order_id}: {current} -> {requested} is not allowed")
        self.order_id = order_id
        self.current = current
        self.requested = requested
