"""
Cart pricing: subtotal, bulk discount, tax and total.

Discount and tax are each rounded half-up on their own, discount first,
and tax is taken on the already-rounded discounted subtotal.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from functools import reduce
from typing import Callable, Iterable

from .domain import CartEntry, PricingBreakdown, Product
from .errors import MissingProductError
from .ftypes import Maybe

logger = logging.getLogger(__name__)

DISCOUNT_THRESHOLD = 100000  # exclusive
DISCOUNT_RATE = Decimal("0.05")
TAX_RATE = Decimal("0.125")

ProductLookup = Callable[[int], Maybe[Product]]


def round_half_up(amount: Decimal) -> int:
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def discount_for(subtotal: int) -> int:
    if subtotal > DISCOUNT_THRESHOLD:
        return round_half_up(subtotal * DISCOUNT_RATE)
    return 0


def tax_for(taxable: int) -> int:
    return round_half_up(taxable * TAX_RATE)


def resolve(entry: CartEntry, lookup: ProductLookup) -> Product:
    product = lookup(entry.product_id)
    if product.is_none():
        raise MissingProductError(entry.product_id)
    return product.get_or_else(None)


def line_total(entry: CartEntry, lookup: ProductLookup) -> int:
    return resolve(entry, lookup).price * entry.quantity


def compute_breakdown(
    cart: Iterable[CartEntry], lookup: ProductLookup
) -> PricingBreakdown:
    """Pure: the same cart and catalog always give the same breakdown"""
    subtotal = reduce(lambda acc, e: acc + line_total(e, lookup), cart, 0)
    discount = discount_for(subtotal)
    tax = tax_for(subtotal - discount)
    breakdown = PricingBreakdown(
        subtotal=subtotal,
        discount=discount,
        tax=tax,
        total=subtotal - discount + tax,
    )
    logger.debug(f"Breakdown computed: {breakdown}")
    return breakdown
