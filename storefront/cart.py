import logging
import re
from typing import Callable, Iterable, List, Tuple

from .domain import CartEntry
from .errors import StorageError
from .storage import CART_SLOT, SlotStore

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_quantity(value) -> int:
    """
    Leading integer of the input ("3", " 4 ", "5 pcs").
    Anything unparsable, zero or negative becomes 1.
    """
    if isinstance(value, bool):
        return 1
    if isinstance(value, int):
        qty = value
    else:
        match = _LEADING_INT.match(str(value))
        if not match:
            return 1
        qty = int(match.group(1))
    return qty if qty > 0 else 1


def _decode(raw) -> Tuple[CartEntry, ...]:
    if not isinstance(raw, list):
        raise StorageError("Cart slot is not a list")
    try:
        entries = tuple(CartEntry(int(item["id"]), int(item["qty"])) for item in raw)
    except (KeyError, TypeError, ValueError) as e:
        raise StorageError(f"Malformed cart entry: {e}") from e

    seen = set()
    for entry in entries:
        if entry.quantity < 1:
            raise StorageError(
                f"Cart entry for product {entry.product_id} has quantity {entry.quantity}"
            )
        if entry.product_id in seen:
            raise StorageError(f"Product {entry.product_id} appears twice in the cart")
        seen.add(entry.product_id)
    return entries


def _encode(entries: Iterable[CartEntry]) -> List[dict]:
    return [{"id": e.product_id, "qty": e.quantity} for e in entries]


class CartStore:
    """
    The persisted cart: ordered entries, one per product id.

    Each mutation writes the whole cart back to the store before returning,
    then tells observers the new item count.
    """

    def __init__(
        self, store: SlotStore, observers: Iterable[Callable[[int], None]] = ()
    ):
        self.store = store
        self._observers: List[Callable[[int], None]] = list(observers)

    def subscribe(self, observer: Callable[[int], None]) -> None:
        self._observers.append(observer)

    def get(self) -> Tuple[CartEntry, ...]:
        return _decode(self.store.read_json(CART_SLOT, []))

    def count(self) -> int:
        return sum(e.quantity for e in self.get())

    def _save(self, entries: Tuple[CartEntry, ...]) -> None:
        self.store.write_json(CART_SLOT, _encode(entries))
        count = sum(e.quantity for e in entries)
        for observer in self._observers:
            observer(count)

    def add(self, product_id: int) -> None:
        entries = self.get()
        if any(e.product_id == product_id for e in entries):
            updated = tuple(
                CartEntry(e.product_id, e.quantity + 1) if e.product_id == product_id else e
                for e in entries
            )
        else:
            updated = entries + (CartEntry(product_id, 1),)
        self._save(updated)
        logger.info(f"Added product {product_id} to cart")

    def set_quantity(self, product_id: int, quantity) -> None:
        entries = self.get()
        if not any(e.product_id == product_id for e in entries):
            return
        qty = parse_quantity(quantity)
        if str(qty) != str(quantity).strip():
            logger.warning(f"Quantity {quantity!r} for product {product_id} coerced to {qty}")
        self._save(
            tuple(
                CartEntry(e.product_id, qty) if e.product_id == product_id else e
                for e in entries
            )
        )
        logger.info(f"Set quantity of product {product_id} to {qty}")

    def remove(self, product_id: int) -> None:
        entries = self.get()
        remaining = tuple(e for e in entries if e.product_id != product_id)
        if len(remaining) == len(entries):
            return
        self._save(remaining)
        logger.info(f"Removed product {product_id} from cart")

    def clear(self) -> None:
        self._save(())
        logger.info("Cart cleared")
