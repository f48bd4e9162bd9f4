from dataclasses import dataclass
from typing import Dict, Mapping, Tuple


@dataclass(frozen=True)
class Product:
    id: int
    brand: str
    model: str
    part: str
    year: int
    name: str
    price: int  # JMD, whole dollars
    image: str


@dataclass(frozen=True)
class CartEntry:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class PricingBreakdown:
    subtotal: int
    discount: int
    tax: int
    total: int


SHIPPING_FIELDS = ("name", "address", "phone")


@dataclass(frozen=True)
class ShippingInfo:
    name: str
    address: str
    phone: str

    @staticmethod
    def from_form(form: Mapping[str, str]) -> "ShippingInfo":
        """Builds shipping info from submitted form values (``ship-name`` or ``name`` keys)"""

        def field(key: str) -> str:
            value = form.get(f"ship-{key}", form.get(key, ""))
            return str(value or "").strip()

        return ShippingInfo(
            name=field("name"), address=field("address"), phone=field("phone")
        )

    def trimmed(self) -> "ShippingInfo":
        return ShippingInfo(
            name=(self.name or "").strip(),
            address=(self.address or "").strip(),
            phone=(self.phone or "").strip(),
        )

    def missing_fields(self) -> Tuple[str, ...]:
        clean = self.trimmed()
        return tuple(f for f in SHIPPING_FIELDS if not getattr(clean, f))


@dataclass(frozen=True)
class OrderItem:
    product_id: int
    name: str
    unit_price: int
    quantity: int

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class Order:
    id: str
    date: str  # ISO-8601, UTC
    shipping_name: str
    shipping_address: str
    shipping_phone: str
    items: Tuple[OrderItem, ...]
    subtotal: int
    discount: int
    tax: int
    total: int

    @property
    def breakdown(self) -> PricingBreakdown:
        return PricingBreakdown(
            subtotal=self.subtotal,
            discount=self.discount,
            tax=self.tax,
            total=self.total,
        )


@dataclass(frozen=True)
class Account:
    username: str
    password: str  # plaintext, demo only
    email: str
    fullname: str
    dob: str


@dataclass(frozen=True)
class Session:
    username: str
    fullname: str
    email: str


@dataclass(frozen=True)
class Event:
    id: str
    ts: str
    name: str
    payload: Dict
