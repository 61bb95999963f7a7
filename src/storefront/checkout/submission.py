"""Order submission: turn the cart into a pending order plus its line items.

Flow:
    1. validating          → delivery info checked against the fields the cart requires
    2. awaiting_identity   → a signed-in identity is mandatory
    3. creating_order      → one order insert; the store returns the new id
    4. creating_line_items → one batch insert of every cart line
    5. success             → cart cleared

Any failure lands in ``failed`` with the cart untouched. Steps 3 and 4 are two
independent writes: if step 4 fails the order from step 3 stays behind with
no line items. It is not deleted; the failure is logged with the order id and
such orders are surfaced by ``detect_orphaned_orders`` for an operator.

Nothing is retried and resubmission is not deduplicated: every call that
reaches step 3 creates a new order. Callers guard against double submits.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog
from protean.exceptions import ValidationError

from storefront.cart.analysis import analyze_cart, required_fields
from storefront.cart.cart import Cart
from storefront.cart.items import CartLineItem
from storefront.checkout.delivery import validate_delivery_info
from storefront.config import SERVICE_CATEGORY
from storefront.exceptions import (
    AuthenticationRequired,
    LineItemCreateError,
    OrderCreateError,
    StorefrontError,
    StoreWriteError,
    flatten_messages,
)
from storefront.identity import Identity, IdentityProvider
from storefront.order.port import OrderStore
from storefront.order.records import OrderLineItemRecord, OrderRecord, OrderStatus

logger = structlog.get_logger(__name__)


class SubmissionState(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    AWAITING_IDENTITY = "awaiting_identity"
    CREATING_ORDER = "creating_order"
    CREATING_LINE_ITEMS = "creating_line_items"
    SUCCESS = "success"
    FAILED = "failed"


class FailureKind(Enum):
    VALIDATION = "validation"
    AUTHENTICATION_REQUIRED = "authentication_required"
    ORDER_CREATE = "order_create"
    LINE_ITEM_CREATE = "line_item_create"

    @property
    def user_message(self) -> str:
        return _USER_MESSAGES[self]


_USER_MESSAGES = {
    FailureKind.VALIDATION: "Please check your delivery details.",
    FailureKind.AUTHENTICATION_REQUIRED: "You must be logged in to place an order.",
    FailureKind.ORDER_CREATE: "There was a problem placing your order.",
    FailureKind.LINE_ITEM_CREATE: "Your order could not be completed. Your cart has been kept.",
}

_FAILURE_KINDS = {
    ValidationError: FailureKind.VALIDATION,
    AuthenticationRequired: FailureKind.AUTHENTICATION_REQUIRED,
    OrderCreateError: FailureKind.ORDER_CREATE,
    LineItemCreateError: FailureKind.LINE_ITEM_CREATE,
}


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of one submission attempt."""

    success: bool
    order_id: str | None = None
    total_amount_cents: int | None = None
    kind: FailureKind | None = None
    message: str | None = None
    errors: dict[str, list[str]] = field(default_factory=dict)


class OrderSubmission:
    """Submits the injected cart as a pending order for the current identity."""

    def __init__(
        self,
        cart: Cart,
        store: OrderStore,
        identity: IdentityProvider,
        service_category: str = SERVICE_CATEGORY,
    ) -> None:
        self.cart = cart
        self.store = store
        self.identity = identity
        self.service_category = service_category
        self.history: list[SubmissionState] = [SubmissionState.IDLE]

    @property
    def state(self) -> SubmissionState:
        return self.history[-1]

    def submit(self, delivery_info: Mapping[str, Any] | None = None) -> SubmissionResult:
        self.history = [SubmissionState.IDLE]
        order_id = None

        try:
            self._enter(SubmissionState.VALIDATING)
            info = self._validate(delivery_info)

            self._enter(SubmissionState.AWAITING_IDENTITY)
            identity = self.identity.current()
            if identity is None:
                raise AuthenticationRequired({"user": ["You must be logged in to place an order."]})

            self._enter(SubmissionState.CREATING_ORDER)
            items = self.cart.items
            order = self._create_order(identity, info.sparse(), items)
            order_id = order.id

            self._enter(SubmissionState.CREATING_LINE_ITEMS)
            self._create_line_items(order, items)
        except (ValidationError, StorefrontError) as exc:
            return self._fail(exc)

        self.cart.clear()
        self._enter(SubmissionState.SUCCESS)
        logger.info(
            "Order submitted",
            order_id=order_id,
            user_id=order.user_id,
            total_amount_cents=order.total_amount_cents,
            line_items=len(items),
        )
        return SubmissionResult(success=True, order_id=order_id, total_amount_cents=order.total_amount_cents)

    # -------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------
    def _validate(self, delivery_info: Mapping[str, Any] | None):
        if self.cart.is_empty:
            raise ValidationError({"cart": ["Cannot place an order for an empty cart"]})

        analysis = analyze_cart(self.cart.items, self.service_category)
        return validate_delivery_info(delivery_info, required_fields(analysis))

    def _create_order(
        self,
        identity: Identity,
        delivery_info: dict[str, str],
        items: tuple[CartLineItem, ...],
    ) -> OrderRecord:
        order = OrderRecord(
            user_id=str(identity.id),
            total_amount_cents=sum(item.line_total_cents for item in items),
            status=OrderStatus.PENDING,
            delivery_info=delivery_info,
            metadata={"user_email": identity.email},
        )

        try:
            return self.store.insert_order(order)
        except StoreWriteError as exc:
            raise OrderCreateError(exc.messages) from exc

    def _create_line_items(self, order: OrderRecord, items: tuple[CartLineItem, ...]) -> None:
        line_items = [
            OrderLineItemRecord(
                order_id=order.id,
                product_id=str(item.product.id),
                product_name=item.product.title,
                variant_id=str(item.variant.id),
                variant_name=item.variant.title,
                quantity=item.quantity,
                price_per_item_cents=item.variant.price_in_cents,
            )
            for item in items
        ]

        try:
            self.store.insert_line_items(line_items)
        except StoreWriteError as exc:
            raise LineItemCreateError(exc.messages, order_id=order.id) from exc

    # -------------------------------------------------------------------
    # State bookkeeping
    # -------------------------------------------------------------------
    def _enter(self, state: SubmissionState) -> None:
        self.history.append(state)

    def _fail(self, exc: ValidationError | StorefrontError) -> SubmissionResult:
        failed_in = self.state
        self._enter(SubmissionState.FAILED)
        kind = _FAILURE_KINDS.get(type(exc), FailureKind.ORDER_CREATE)
        order_id = getattr(exc, "order_id", None)
        message = flatten_messages(exc.messages)

        if kind is FailureKind.LINE_ITEM_CREATE:
            logger.error(
                "Order left without line items",
                order_id=order_id,
                error=message,
            )
        else:
            logger.warning(
                "Order submission failed",
                kind=kind.value,
                failed_in=failed_in.value,
                error=message,
            )

        return SubmissionResult(
            success=False,
            order_id=order_id,
            kind=kind,
            message=message,
            errors=dict(exc.messages),
        )
