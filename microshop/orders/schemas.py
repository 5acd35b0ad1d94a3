"""Pydantic models for customer orders."""

from datetime import datetime, timezone
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..common.repository import INT32_MAX, INT32_MIN


class OrderStatus(str, Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @classmethod
    def parse(cls, value):
        """Accept a member, its name in any case, or its ordinal (0-4)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            members = list(cls)
            if 0 <= value < len(members):
                return members[value]
            raise ValueError(f"unknown order status ordinal: {value}")
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        raise ValueError(f"unknown order status: {value!r}")


TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

# Allowed next states under the strict policy
TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}


def allowed_predecessors(target: OrderStatus) -> List[str]:
    return [s.value for s, nexts in TRANSITIONS.items() if target in nexts]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class OrderItem(_CamelModel):
    product_id: int = Field(ge=INT32_MIN, le=INT32_MAX)
    quantity: int = Field(ge=1, le=INT32_MAX)


class OrderCreate(_CamelModel):
    """POST body. Status and timestamps are assigned by the server."""

    customer_id: int = Field(ge=INT32_MIN, le=INT32_MAX)
    items: List[OrderItem] = Field(min_length=1)


class StatusUpdate(_CamelModel):
    status: OrderStatus

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value):
        return OrderStatus.parse(value)


class Order(_CamelModel):
    model_config = ConfigDict(use_enum_values=True)

    id: int
    customer_id: int = Field(ge=INT32_MIN, le=INT32_MAX)
    items: List[OrderItem] = Field(min_length=1)
    status: OrderStatus
    created_at: datetime

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value):
        return OrderStatus.parse(value)

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # SQLite hands timestamps back without tzinfo
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
