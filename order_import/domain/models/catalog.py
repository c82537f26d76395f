"""
Catalog reference entities: variants, shipping methods and payment methods.

These are resolved from the persistence layer during import; the import
never creates or modifies them.
"""

from dataclasses import dataclass
from datetime import datetime

from order_import.domain.value_objects.money import Money


@dataclass
class VariantDomain:
    """
    A purchasable configuration of a product (size/color combination).

    Attributes:
        id: Variant ID
        sku: Stock keeping unit, unique across variants
        price: Current unit price
        deleted_at: Soft-delete timestamp; deleted variants are inactive
    """

    id: int
    sku: str
    price: Money
    deleted_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        """Only non-deleted variants can be resolved by SKU."""
        return self.deleted_at is None


@dataclass
class ShippingMethodDomain:
    """Shipping method looked up by exact name."""

    id: int
    name: str


@dataclass
class PaymentMethodDomain:
    """Payment method looked up by exact name."""

    id: int
    name: str
