"""
Adjustment domain model.

An adjustment is a monetary modifier (discount, tax, fee) attached to an
order or to one of its shipments.
"""

from dataclasses import dataclass
from enum import Enum

from order_import.domain.value_objects.money import Money


class AdjustmentSource(str, Enum):
    """Where an adjustment comes from; ``TAX`` is the tax classification."""

    MANUAL = "manual"
    SHIPPING = "shipping"
    TAX = "tax"
    PROMOTION = "promotion"


@dataclass
class AdjustmentDomain:
    """
    Domain model representing an adjustment.

    Attributes:
        amount: Signed amount added to the order total
        label: Human readable label
        locked: When True, automatic pricing logic must not recalculate it
        source: Origin of the adjustment
        order_id: Owning order
        shipment_id: Set when the adjustment belongs to a shipment
        id: Adjustment ID (None for new adjustments)
    """

    amount: Money
    label: str
    locked: bool = False
    source: AdjustmentSource = AdjustmentSource.MANUAL
    order_id: int | None = None
    shipment_id: int | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        if not self.label or not self.label.strip():
            raise ValueError("Adjustment label can't be blank")

    @property
    def is_tax(self) -> bool:
        return self.source == AdjustmentSource.TAX

    def lock(self) -> None:
        self.locked = True
