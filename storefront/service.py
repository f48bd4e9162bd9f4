import logging
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence, Union

from .accounts import AccountStore
from .cart import CartStore
from .catalog import Catalog, DEFAULT_TAXONOMY, load_taxonomy
from .checkout import Clock, InvoiceReader, OrderRecorder, utc_now
from .config import Settings
from .domain import CartEntry, Order, PricingBreakdown, ShippingInfo
from .events import (
    CART_CHANGED,
    ORDER_CONFIRMED,
    create_event,
    create_storefront_bus,
    initial_state,
)
from .pricing import compute_breakdown
from .storage import JsonFileStore, SlotStore

logger = logging.getLogger(__name__)


class PricingService:
    """Prices carts against one catalog"""

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def compute(self, cart: Sequence[CartEntry]) -> PricingBreakdown:
        return compute_breakdown(cart, self.catalog.lookup)


class CheckoutService:
    """Confirms the current cart with shipping details"""

    def __init__(
        self,
        cart: CartStore,
        recorder: OrderRecorder,
        on_confirmed: Callable[[Order], None] = lambda order: None,
    ):
        self.cart = cart
        self.recorder = recorder
        self.on_confirmed = on_confirmed

    def confirm(self, shipping: Union[ShippingInfo, Mapping[str, str]]) -> Order:
        if not isinstance(shipping, ShippingInfo):
            shipping = ShippingInfo.from_form(shipping)
        order = self.recorder.confirm(self.cart.get(), shipping)
        self.on_confirmed(order)
        return order


class Storefront:
    """Facade wiring catalog, cart, pricing, checkout, invoice and accounts to one store"""

    def __init__(self, store: SlotStore, catalog: Catalog, clock: Clock = utc_now):
        self.store = store
        self.catalog = catalog
        self.bus = create_storefront_bus()

        self.cart = CartStore(store, observers=(self._on_cart_changed,))
        self.pricing = PricingService(catalog)
        self.invoice = InvoiceReader(store)
        self.accounts = AccountStore(store)
        self.checkout = CheckoutService(
            self.cart,
            OrderRecorder(store, self.cart, catalog.lookup, clock),
            on_confirmed=self._on_order_confirmed,
        )
        self.ui_state = initial_state(cart_count=self.cart.count())

    @classmethod
    def from_settings(
        cls, settings: Settings, store: Optional[SlotStore] = None
    ) -> "Storefront":
        taxonomy = (
            load_taxonomy(settings.taxonomy_path)
            if settings.taxonomy_path
            else DEFAULT_TAXONOMY
        )
        catalog = Catalog.generate(
            taxonomy,
            first_year=settings.first_year,
            last_year=settings.last_year,
            seed=settings.catalog_seed,
        )
        store = store or JsonFileStore(Path(settings.store_path))
        logger.info(f"Storefront ready: {len(catalog)} products, store {store.__class__.__name__}")
        return cls(store, catalog)

    def _on_cart_changed(self, count: int) -> None:
        event = create_event(CART_CHANGED, {"count": count})
        self.ui_state = self.bus.publish(event, self.ui_state)

    def _on_order_confirmed(self, order: Order) -> None:
        event = create_event(ORDER_CONFIRMED, {"order_id": order.id, "total": order.total})
        self.ui_state = self.bus.publish(event, self.ui_state)

    def cart_count(self) -> int:
        return self.ui_state["cart_count"]
