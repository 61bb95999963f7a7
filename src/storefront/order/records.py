"""Order and order line item records as written to the remote store.

Records are plain data: the pipeline builds them, the store assigns ids and
timestamps. An order is created once and never updated by the storefront;
its status only changes through the admin console.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class OrderStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    REFUNDED = "refunded"


class OrderRecord(BaseModel):
    id: str | None = None
    user_id: str
    total_amount_cents: int = Field(ge=0)
    status: OrderStatus = OrderStatus.PENDING
    delivery_info: dict[str, str] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None


class OrderLineItemRecord(BaseModel):
    order_id: str
    product_id: str
    product_name: str
    variant_id: str
    variant_name: str
    quantity: int = Field(ge=1)
    price_per_item_cents: int = Field(ge=0)

    @field_validator("order_id", "product_id", "variant_id", mode="before")
    @classmethod
    def coerce_identifier(cls, value: Any) -> Any:
        # Catalog ids may be integers; the store keeps every id as text.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value
