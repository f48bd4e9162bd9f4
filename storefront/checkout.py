"""
Checkout: turning the cart into the persisted "last order", and reading it back for the invoice.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence, Tuple

from .cart import CartStore
from .domain import CartEntry, Order, OrderItem, PricingBreakdown, ShippingInfo
from .errors import EmptyCartError, IncompleteShippingError, StorageError
from .ftypes import Maybe
from .pricing import ProductLookup, compute_breakdown, resolve
from .storage import LAST_ORDER_SLOT, SlotStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def order_id_for(instant: datetime) -> str:
    """INV + epoch milliseconds of the confirmation instant"""
    return f"INV{int(instant.timestamp() * 1000)}"


# ============ Serialization ============


def order_to_dict(order: Order) -> dict:
    return {
        "id": order.id,
        "date": order.date,
        "name": order.shipping_name,
        "address": order.shipping_address,
        "phone": order.shipping_phone,
        "items": [
            {"id": i.product_id, "name": i.name, "price": i.unit_price, "qty": i.quantity}
            for i in order.items
        ],
        "subtotal": order.subtotal,
        "discount": order.discount,
        "tax": order.tax,
        "total": order.total,
    }


def order_from_dict(data: dict) -> Order:
    try:
        return Order(
            id=str(data["id"]),
            date=str(data["date"]),
            shipping_name=str(data["name"]),
            shipping_address=str(data["address"]),
            shipping_phone=str(data["phone"]),
            items=tuple(
                OrderItem(
                    product_id=int(i["id"]),
                    name=str(i["name"]),
                    unit_price=int(i["price"]),
                    quantity=int(i["qty"]),
                )
                for i in data["items"]
            ),
            subtotal=int(data["subtotal"]),
            discount=int(data["discount"]),
            tax=int(data["tax"]),
            total=int(data["total"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise StorageError(f"Malformed last order: {e}") from e


def invoice_lines(order: Order) -> Tuple[Tuple[int, str, int, int, int], ...]:
    """(row number, product, qty, unit price, line total) for each item"""
    return tuple(
        (idx, item.name, item.quantity, item.unit_price, item.line_total)
        for idx, item in enumerate(order.items, start=1)
    )


# ============ Order recorder ============


class OrderRecorder:
    """Captures a confirmed checkout as the single persisted last order"""

    def __init__(
        self,
        store: SlotStore,
        cart_store: CartStore,
        lookup: ProductLookup,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.cart_store = cart_store
        self.lookup = lookup
        self.clock = clock

    def confirm(
        self,
        cart: Sequence[CartEntry],
        shipping: ShippingInfo,
        breakdown: Optional[PricingBreakdown] = None,
    ) -> Order:
        """
        Validate, snapshot, persist, then clear the cart.

        Nothing is written unless every check passes, and the order is stored
        before the cart is cleared.
        """
        if not cart:
            raise EmptyCartError()
        missing = shipping.missing_fields()
        if missing:
            logger.warning(f"Checkout rejected, blank shipping fields: {missing}")
            raise IncompleteShippingError(missing)

        current = compute_breakdown(cart, self.lookup)
        if breakdown is not None and breakdown != current:
            raise ValueError(
                f"Breakdown {breakdown} does not match the cart ({current})"
            )

        items = tuple(
            OrderItem(
                product_id=product.id,
                name=product.name,
                unit_price=product.price,
                quantity=entry.quantity,
            )
            for entry, product in ((e, resolve(e, self.lookup)) for e in cart)
        )
        instant = self.clock()
        clean = shipping.trimmed()
        order = Order(
            id=order_id_for(instant),
            date=instant.isoformat(),
            shipping_name=clean.name,
            shipping_address=clean.address,
            shipping_phone=clean.phone,
            items=items,
            subtotal=current.subtotal,
            discount=current.discount,
            tax=current.tax,
            total=current.total,
        )

        self.store.write_json(LAST_ORDER_SLOT, order_to_dict(order))
        self.cart_store.clear()
        logger.info(f"Order {order.id} confirmed, total {order.total}")
        return order


class InvoiceReader:
    def __init__(self, store: SlotStore):
        self.store = store

    def get_last(self) -> Maybe[Order]:
        data = self.store.read_json(LAST_ORDER_SLOT)
        if data is None:
            return Maybe.nothing()
        return Maybe.some(order_from_dict(data))
