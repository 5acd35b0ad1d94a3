"""Pydantic models for catalog products."""

from decimal import Decimal, ROUND_HALF_EVEN

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from ..common.repository import INT32_MAX

CENT = Decimal("0.01")
MAX_PRICE = Decimal("9999999999.99")


class ProductIn(BaseModel):
    """Body of POST and PUT requests. Any ``id`` sent by the client is ignored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1, max_length=255)
    # Fits Numeric(12, 2)
    price: Decimal = Field(ge=0, le=MAX_PRICE, allow_inf_nan=False)
    stock: int = Field(ge=0, le=INT32_MAX)

    @field_validator("price")
    @classmethod
    def quantize_price(cls, value: Decimal) -> Decimal:
        return value.quantize(CENT, rounding=ROUND_HALF_EVEN)


class Product(ProductIn):
    id: int

    @field_serializer("price", when_used="json")
    def serialize_price(self, price: Decimal) -> float:
        return float(price)
