"""
Line item domain model.

Represents a priced quantity of one variant within an order.
"""

from dataclasses import dataclass

from order_import.domain.value_objects.money import Money


@dataclass
class LineItemDomain:
    """
    Domain model representing an order line item.

    Attributes:
        variant_id: Variant being purchased
        quantity: Units ordered (always positive)
        price: Unit price
        order_id: Parent order ID (None until persisted)
        id: Line item ID (None for new items)
    """

    variant_id: int
    quantity: int
    price: Money
    order_id: int | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        """Validate line item data after initialization."""
        if self.quantity <= 0:
            raise ValueError(f"Quantity must be positive: {self.quantity}")

    @property
    def amount(self) -> Money:
        """Line total (price * quantity)."""
        return self.price * self.quantity

    def increase_quantity(self, quantity: int) -> None:
        if quantity <= 0:
            raise ValueError(f"Quantity must be positive: {quantity}")
        self.quantity += quantity
