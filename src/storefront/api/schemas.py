"""Pydantic request/response schemas for the Storefront API.

These are external contracts, kept separate from the cart and order models.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddCartItemRequest(BaseModel):
    product_id: int | str
    variant_id: int | str | None = None
    quantity: int = Field(ge=1, default=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": 42,
                    "variant_id": None,
                    "quantity": 1,
                }
            ]
        }
    }


class SetQuantityRequest(BaseModel):
    quantity: int


class ProductSchema(BaseModel):
    id: int | str
    title: str
    image: str | None = None
    category: str | None = None


class VariantSchema(BaseModel):
    id: int | str
    title: str
    price_in_cents: int


class CartItemResponse(BaseModel):
    product: ProductSchema
    variant: VariantSchema
    quantity: int
    line_total_cents: int


class CartResponse(BaseModel):
    items: list[CartItemResponse]
    item_count: int
    total_cents: int


class CartAnalysisResponse(BaseModel):
    contains_service_item: bool
    contains_deliverable_item: bool
    required_fields: list[str]


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    nickname: str | None = None
    discord: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "nickname": "Steve",
                    "discord": "steve#1234",
                }
            ]
        }
    }


class CheckoutResponse(BaseModel):
    order_id: str
    total_amount_cents: int
    status: str = "pending"


class CheckoutFailureResponse(BaseModel):
    kind: str
    message: str
    user_message: str
    errors: dict[str, list[str]] = Field(default_factory=dict)
    order_id: str | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderLineItemResponse(BaseModel):
    product_id: str
    product_name: str
    variant_id: str
    variant_name: str
    quantity: int
    price_per_item_cents: int


class OrderSummaryResponse(BaseModel):
    order_id: str
    user_id: str
    status: str
    total_amount_cents: int
    delivery_info: dict[str, str]
    user_email: str | None = None
    created_at: str | None = None
    item_count: int
    is_orphaned: bool
    items: list[OrderLineItemResponse]


class OrphanedOrderResponse(BaseModel):
    order_id: str
    user_id: str
    user_email: str | None = None
    total_amount_cents: int
    created_at: str


class ErrorResponse(BaseModel):
    errors: dict[str, list[str]]
