"""
Storefront exceptions
"""

from typing import Iterable


class StorefrontError(Exception):
    """Base exception"""
    pass


class MissingProductError(StorefrontError):
    """Cart references a product id that is not in the catalog"""

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product {product_id} is not in the catalog")


class EmptyCartError(StorefrontError):
    """Checkout attempted with nothing in the cart"""

    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class IncompleteShippingError(StorefrontError):
    """One or more shipping fields are blank"""

    def __init__(self, missing_fields: Iterable[str]):
        self.missing_fields = tuple(missing_fields)
        super().__init__(
            "Please fill shipping details: " + ", ".join(self.missing_fields)
        )


class StorageError(StorefrontError):
    """A persisted slot could not be read or written"""
    pass
