"""FastAPI routes for the Storefront: cart, checkout and orders.

The shared ``StorefrontServices`` live in ``app.state.services``. Each request
opens its own ``Storefront`` from them:

- ``X-User-Id`` / ``X-User-Email`` carry the identity asserted by the
  authenticating gateway in front of the API; without them the caller is
  anonymous
- ``X-Session-Id`` selects the client session's cart; a signed-in caller
  without one gets a cart keyed by their user id
"""

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse

from storefront.api.schemas import (
    AddCartItemRequest,
    CartAnalysisResponse,
    CartItemResponse,
    CartResponse,
    CheckoutFailureResponse,
    CheckoutRequest,
    CheckoutResponse,
    ErrorResponse,
    OrderLineItemResponse,
    OrderSummaryResponse,
    OrphanedOrderResponse,
    SetQuantityRequest,
)
from storefront.checkout.submission import FailureKind
from storefront.exceptions import SessionRequired
from storefront.identity import Identity, StaticIdentityProvider
from storefront.order.history import OrderSummary
from storefront.order.records import OrderStatus
from storefront.session import Storefront, StorefrontServices, build_services, orders_for

_FAILURE_STATUS_CODES = {
    FailureKind.VALIDATION: 422,
    FailureKind.AUTHENTICATION_REQUIRED: 401,
    FailureKind.ORDER_CREATE: 502,
    FailureKind.LINE_ITEM_CREATE: 502,
}


async def get_services(request: Request) -> StorefrontServices:
    services = getattr(request.app.state, "services", None)
    if services is None:
        services = build_services()
        request.app.state.services = services
    return services


async def get_identity(
    x_user_id: str | None = Header(default=None),
    x_user_email: str | None = Header(default=None),
) -> Identity | None:
    if not x_user_id:
        return None
    return Identity(id=x_user_id, email=x_user_email or "")


async def get_session_id(
    x_session_id: str | None = Header(default=None),
    identity: Identity | None = Depends(get_identity),
) -> str:
    if x_session_id:
        return x_session_id
    if identity is not None:
        return f"user-{identity.id}"
    raise SessionRequired({"session": ["Send an X-Session-Id header to keep a cart"]})


async def get_storefront(
    services: StorefrontServices = Depends(get_services),
    session_id: str = Depends(get_session_id),
    identity: Identity | None = Depends(get_identity),
) -> Storefront:
    return services.open(session_id, StaticIdentityProvider(identity))


def _cart_response(storefront: Storefront) -> CartResponse:
    cart = storefront.cart
    return CartResponse(
        items=[
            CartItemResponse(
                product=item.product.model_dump(),
                variant=item.variant.model_dump(),
                quantity=item.quantity,
                line_total_cents=item.line_total_cents,
            )
            for item in cart.items
        ],
        item_count=cart.item_count(),
        total_cents=cart.total(),
    )


def _summary_response(summary: OrderSummary) -> OrderSummaryResponse:
    order = summary.order
    return OrderSummaryResponse(
        order_id=order.id,
        user_id=order.user_id,
        status=order.status.value,
        total_amount_cents=order.total_amount_cents,
        delivery_info=order.delivery_info,
        user_email=order.metadata.get("user_email"),
        created_at=order.created_at.isoformat() if order.created_at else None,
        item_count=summary.item_count,
        is_orphaned=summary.is_orphaned,
        items=[OrderLineItemResponse(**item.model_dump(exclude={"order_id"})) for item in summary.items],
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(storefront: Storefront = Depends(get_storefront)) -> CartResponse:
    return _cart_response(storefront)


@cart_router.post("/items", response_model=CartResponse, responses={422: {"model": ErrorResponse}})
async def add_cart_item(body: AddCartItemRequest, storefront: Storefront = Depends(get_storefront)) -> CartResponse:
    storefront.add_to_cart(body.product_id, body.variant_id, body.quantity)
    return _cart_response(storefront)


@cart_router.put("/items/{variant_id}", response_model=CartResponse, responses={422: {"model": ErrorResponse}})
async def set_cart_item_quantity(
    variant_id: str,
    body: SetQuantityRequest,
    storefront: Storefront = Depends(get_storefront),
) -> CartResponse:
    storefront.cart.set_quantity(variant_id, body.quantity)
    return _cart_response(storefront)


@cart_router.delete("/items/{variant_id}", response_model=CartResponse)
async def remove_cart_item(variant_id: str, storefront: Storefront = Depends(get_storefront)) -> CartResponse:
    storefront.cart.remove_item(variant_id)
    return _cart_response(storefront)


@cart_router.delete("", response_model=CartResponse)
async def clear_cart(storefront: Storefront = Depends(get_storefront)) -> CartResponse:
    storefront.cart.clear()
    return _cart_response(storefront)


@cart_router.get("/analysis", response_model=CartAnalysisResponse)
async def get_cart_analysis(storefront: Storefront = Depends(get_storefront)) -> CartAnalysisResponse:
    analysis = storefront.analysis()
    return CartAnalysisResponse(
        contains_service_item=analysis.contains_service_item,
        contains_deliverable_item=analysis.contains_deliverable_item,
        required_fields=sorted(storefront.required_fields()),
    )


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post(
    "",
    status_code=201,
    response_model=CheckoutResponse,
    responses={
        401: {"model": CheckoutFailureResponse},
        422: {"model": CheckoutFailureResponse},
        502: {"model": CheckoutFailureResponse},
    },
)
async def checkout(body: CheckoutRequest, storefront: Storefront = Depends(get_storefront)):
    """Place the cart as a pending order awaiting manual fulfillment."""
    result = storefront.submit_order(body.model_dump(exclude_none=True))

    if not result.success:
        failure = CheckoutFailureResponse(
            kind=result.kind.value,
            message=result.message or "",
            user_message=result.kind.user_message,
            errors=result.errors,
            order_id=result.order_id,
        )
        return JSONResponse(status_code=_FAILURE_STATUS_CODES[result.kind], content=failure.model_dump())

    return CheckoutResponse(order_id=result.order_id, total_amount_cents=result.total_amount_cents)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=list[OrderSummaryResponse])
async def list_orders(
    status: OrderStatus | None = None,
    services: StorefrontServices = Depends(get_services),
) -> list[OrderSummaryResponse]:
    return [_summary_response(summary) for summary in services.order_history(status=status)]


@order_router.get("/mine", response_model=list[OrderSummaryResponse], responses={401: {"model": ErrorResponse}})
async def list_my_orders(
    services: StorefrontServices = Depends(get_services),
    identity: Identity | None = Depends(get_identity),
) -> list[OrderSummaryResponse]:
    return [_summary_response(summary) for summary in orders_for(services.store, identity)]


@order_router.get("/orphans", response_model=list[OrphanedOrderResponse])
async def list_orphaned_orders(services: StorefrontServices = Depends(get_services)) -> list[OrphanedOrderResponse]:
    return [
        OrphanedOrderResponse(
            order_id=orphan.order_id,
            user_id=orphan.user_id,
            user_email=orphan.user_email,
            total_amount_cents=orphan.total_amount_cents,
            created_at=orphan.created_at.isoformat(),
        )
        for orphan in services.orphaned_orders()
    ]
