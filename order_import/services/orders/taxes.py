"""
RateTaxCalculator - automatic tax adjustments for imported orders.

Automatic taxes are unlocked ``tax`` adjustments. Imports flagged with
``import: true`` carry their own taxes and drop these again.
"""

import logging
from decimal import Decimal

from order_import.domain.models import AdjustmentDomain, AdjustmentSource, OrderDomain

logger = logging.getLogger(__name__)


class RateTaxCalculator:
    """Flat-rate tax over the item total (ITaxCalculator implementation)."""

    def __init__(self, rate: Decimal, label: str = "Tax"):
        """
        Args:
            rate: Fraction of the item total, e.g. ``Decimal("0.13")``
            label: Label of the generated adjustment
        """
        if rate < 0:
            raise ValueError(f"Tax rate can't be negative: {rate}")
        self.rate = Decimal(rate)
        self.label = label

    def compute(self, order: OrderDomain) -> list[AdjustmentDomain]:
        item_total = order.item_total
        if self.rate == 0 or item_total.is_zero:
            return []

        adjustment = AdjustmentDomain(
            amount=item_total * self.rate,
            label=self.label,
            locked=False,
            source=AdjustmentSource.TAX,
            order_id=order.id,
        )
        logger.debug(f"Automatic tax {adjustment.amount} ({self.rate}) for order {order.number}")
        return [adjustment]
