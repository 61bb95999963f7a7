"""Storefront composition root.

``StorefrontServices`` holds what every client session shares: the cart
storage, the catalog and the order store. ``StorefrontServices.open`` builds a
``Storefront`` for one session, with that session's own cart and identity.
Nothing is shared through module globals, so tests build isolated instances.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from protean.exceptions import ValidationError

from storefront.cart.analysis import CartAnalysis, analyze_cart, required_fields
from storefront.cart.cart import Cart
from storefront.cart.storage import CartStorage, FileCartStorage
from storefront.catalog.memory_adapter import InMemoryCatalog
from storefront.catalog.port import CatalogReader
from storefront.catalog.snapshots import select_variant, snapshot_product
from storefront.checkout.submission import OrderSubmission, SubmissionResult
from storefront.config import CART_STORAGE_KEY, SERVICE_CATEGORY, StorefrontSettings, get_settings
from storefront.domain import storefront
from storefront.exceptions import AuthenticationRequired
from storefront.identity import Identity, IdentityProvider, StaticIdentityProvider
from storefront.order.history import OrderSummary, list_order_summaries
from storefront.order.port import OrderStore
from storefront.order.reconciliation import DEFAULT_GRACE_PERIOD, OrphanedOrder, detect_orphaned_orders
from storefront.order.records import OrderStatus
from storefront.order.sql_adapter import SqlOrderStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_domain_initialized = False


def init_domain() -> None:
    """Initialize the storefront domain; safe to call more than once."""
    global _domain_initialized
    if not _domain_initialized:
        storefront.init(traverse=False)
        _domain_initialized = True


def cart_key(base_key: str, session_id: str | None) -> str:
    """Storage key of one session's cart; without a session the base key is used."""
    return f"{base_key}:{session_id}" if session_id else base_key


@dataclass
class Storefront:
    cart: Cart
    catalog: CatalogReader
    store: OrderStore
    identity: IdentityProvider
    service_category: str = SERVICE_CATEGORY
    orphan_grace_period: timedelta = DEFAULT_GRACE_PERIOD
    submission: OrderSubmission = field(init=False)

    def __post_init__(self) -> None:
        self.submission = OrderSubmission(self.cart, self.store, self.identity, self.service_category)

    # -------------------------------------------------------------------
    # Cart
    # -------------------------------------------------------------------
    def add_to_cart(self, product_id: int | str, variant_id: int | str | None = None, quantity: int = 1) -> None:
        """Snapshot a catalog product (and variant) into the cart."""
        record = self.catalog.get_product(product_id)
        if record is None or not record.get("is_active", True):
            raise ValidationError({"product_id": [f"Product {product_id} is not available"]})

        self.cart.add_item(snapshot_product(record), select_variant(record, variant_id), quantity)

    def analysis(self) -> CartAnalysis:
        return analyze_cart(self.cart.items, self.service_category)

    def required_fields(self) -> frozenset[str]:
        return required_fields(self.analysis())

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def submit_order(self, delivery_info: dict | None = None) -> SubmissionResult:
        return self.submission.submit(delivery_info)

    # -------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------
    def my_orders(self) -> list[OrderSummary]:
        return orders_for(self.store, self.identity.current())

    def order_history(self, status: OrderStatus | None = None) -> list[OrderSummary]:
        return list_order_summaries(self.store, status=status)

    def orphaned_orders(self, as_of: datetime | None = None) -> list[OrphanedOrder]:
        return detect_orphaned_orders(self.store, self.orphan_grace_period, as_of=as_of)


def orders_for(store: OrderStore, identity: Identity | None) -> list[OrderSummary]:
    if identity is None:
        raise AuthenticationRequired({"user": ["You must be logged in to view your orders."]})
    return list_order_summaries(store, user_id=str(identity.id))


@dataclass
class StorefrontServices:
    storage: CartStorage
    catalog: CatalogReader
    store: OrderStore
    cart_storage_key: str = CART_STORAGE_KEY
    service_category: str = SERVICE_CATEGORY
    orphan_grace_period: timedelta = DEFAULT_GRACE_PERIOD

    def open(self, session_id: str | None = None, identity: IdentityProvider | None = None) -> Storefront:
        """Storefront for one client session; its cart is keyed by ``session_id``."""
        cart = Cart(self.storage, key=cart_key(self.cart_storage_key, session_id), session_id=session_id)
        return Storefront(
            cart=cart,
            catalog=self.catalog,
            store=self.store,
            identity=identity or StaticIdentityProvider(),
            service_category=self.service_category,
            orphan_grace_period=self.orphan_grace_period,
        )

    def order_history(self, status: OrderStatus | None = None) -> list[OrderSummary]:
        return list_order_summaries(self.store, status=status)

    def orphaned_orders(self, as_of: datetime | None = None) -> list[OrphanedOrder]:
        return detect_orphaned_orders(self.store, self.orphan_grace_period, as_of=as_of)


def build_services(
    settings: StorefrontSettings | None = None,
    catalog: CatalogReader | None = None,
    store: OrderStore | None = None,
) -> StorefrontServices:
    """Assemble the shared services from settings, with any collaborator overridable."""
    settings = settings or get_settings()

    if store is None:
        store = SqlOrderStore.from_uri(settings.database_uri)
        store.create_schema()

    logger.debug(
        "Storefront services assembled",
        cart_storage=settings.cart_storage_path,
        store=type(store).__name__,
    )

    return StorefrontServices(
        storage=FileCartStorage(settings.cart_storage_path),
        catalog=catalog or InMemoryCatalog(),
        store=store,
        cart_storage_key=settings.cart_storage_key,
        service_category=settings.service_category,
        orphan_grace_period=timedelta(minutes=settings.orphan_grace_minutes),
    )


def build_storefront(
    settings: StorefrontSettings | None = None,
    catalog: CatalogReader | None = None,
    identity: IdentityProvider | None = None,
    store: OrderStore | None = None,
    session_id: str | None = None,
) -> Storefront:
    """A single-session Storefront, as used by tooling that acts for one shopper."""
    return build_services(settings, catalog=catalog, store=store).open(session_id, identity)
