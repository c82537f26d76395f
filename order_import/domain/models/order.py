"""
Order domain model (Aggregate Root).

Represents an order with its line items, shipments, payments and adjustments.
Owned collections are destroyed together with the order.
"""

import secrets
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from order_import.domain.value_objects.money import Money

from .address import AddressDomain
from .adjustment import AdjustmentDomain
from .catalog import VariantDomain
from .line_item import LineItemDomain
from .payment import PaymentDomain
from .shipment import ShipmentDomain


class OrderState(str, Enum):
    """Order lifecycle states. Import only ever reaches ``COMPLETE``."""

    CART = "cart"
    ADDRESS = "address"
    DELIVERY = "delivery"
    PAYMENT = "payment"
    CONFIRM = "confirm"
    COMPLETE = "complete"
    CANCELED = "canceled"
    RETURNED = "returned"


HEADER_ATTRIBUTES = ("number", "email", "channel", "currency", "special_instructions", "completed_at", "state")


def generate_order_number(prefix: str = "R", digits: int = 9) -> str:
    """Random order number such as ``R482019375``."""
    return prefix + "".join(str(secrets.randbelow(10)) for _ in range(digits))


@dataclass
class OrderDomain:
    """
    Domain model representing an order (Aggregate Root).

    Attributes:
        number: Public order number
        currency: Currency of every monetary value in the order
        channel: Channel tag (e.g. "api", "pos")
        state: Lifecycle state
        completed_at: Completion timestamp (aware UTC)
        email: Customer email
        special_instructions: Free-text notes
        ship_address: Shipping address
        bill_address: Billing address
        line_items: Line items, one per distinct variant
        shipments: Shipments in import order
        payments: Payments in import order
        adjustments: Order-level adjustments (shipment costs live on shipments)
        id: Order ID (None for new orders)
    """

    number: str
    currency: str = "USD"
    channel: str = "api"
    state: OrderState = OrderState.CART
    completed_at: datetime | None = None
    email: str | None = None
    special_instructions: str | None = None
    ship_address: AddressDomain | None = None
    bill_address: AddressDomain | None = None
    line_items: list[LineItemDomain] = field(default_factory=list)
    shipments: list[ShipmentDomain] = field(default_factory=list)
    payments: list[PaymentDomain] = field(default_factory=list)
    adjustments: list[AdjustmentDomain] = field(default_factory=list)
    id: int | None = None

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    @property
    def is_complete(self) -> bool:
        return self.state == OrderState.COMPLETE

    @property
    def item_count(self) -> int:
        """Total units across line items."""
        return sum(item.quantity for item in self.line_items)

    @property
    def item_total(self) -> Money:
        return Money.sum([item.amount for item in self.line_items], self.currency)

    @property
    def all_adjustments(self) -> list[AdjustmentDomain]:
        """Order-level adjustments followed by shipment cost adjustments."""
        shipment_adjustments = [s.adjustment for s in self.shipments if s.adjustment is not None]
        return [*self.adjustments, *shipment_adjustments]

    @property
    def adjustment_total(self) -> Money:
        return Money.sum([a.amount for a in self.all_adjustments], self.currency)

    @property
    def payment_total(self) -> Money:
        return Money.sum([p.amount for p in self.payments if p.is_completed], self.currency)

    @property
    def total(self) -> Money:
        return self.item_total + self.adjustment_total

    @property
    def tax_adjustments(self) -> list[AdjustmentDomain]:
        return [a for a in self.adjustments if a.is_tax]

    def find_line_item(self, variant_id: int) -> LineItemDomain | None:
        for item in self.line_items:
            if item.variant_id == variant_id:
                return item
        return None

    def add_variant(self, variant: VariantDomain, quantity: int) -> LineItemDomain:
        """
        Add ``quantity`` units of ``variant`` using cart semantics.

        An existing line item for the same variant has its quantity increased;
        otherwise a new line item is priced at the variant's current price.

        Returns:
            LineItemDomain: The created or updated line item
        """
        item = self.find_line_item(variant.id)
        if item is not None:
            item.increase_quantity(quantity)
            return item

        if variant.price.currency != self.currency:
            raise ValueError(
                f"Variant currency ({variant.price.currency}) doesn't match order currency ({self.currency})"
            )

        item = LineItemDomain(variant_id=variant.id, quantity=quantity, price=variant.price, order_id=self.id)
        self.line_items.append(item)
        return item

    def complete(self, completed_at: datetime) -> None:
        """Mark the order complete at ``completed_at``."""
        self.completed_at = completed_at
        self.state = OrderState.COMPLETE

    def remove_adjustments(self, adjustment_ids: set[int]) -> None:
        self.adjustments = [a for a in self.adjustments if a.id not in adjustment_ids]

    def apply_attributes(self, attributes: dict[str, Any]) -> None:
        """
        Assign already-validated header attributes and addresses.

        ``ship_address``/``bill_address`` values are dicts merged into the
        existing address (or used to build a new one).
        """
        for name in HEADER_ATTRIBUTES:
            if name in attributes:
                value = attributes[name]
                if name == "state" and value is not None:
                    value = OrderState(value)
                setattr(self, name, value)

        for name in ("bill_address", "ship_address"):
            if attributes.get(name) is not None:
                setattr(self, name, self._merge_address(getattr(self, name), attributes[name]))

        if attributes.get("use_billing") and self.bill_address is not None:
            self.ship_address = self.bill_address.copy_without_id()

    @staticmethod
    def _merge_address(current: AddressDomain | None, data: dict[str, Any]) -> AddressDomain:
        if current is None:
            return AddressDomain.from_dict(data)
        merged = {**current.to_dict(), **data}
        return AddressDomain.from_dict(merged)

    def summary(self) -> dict[str, Any]:
        """Compact, JSON-friendly description of the order."""
        return {
            "id": self.id,
            "number": self.number,
            "state": self.state.value,
            "channel": self.channel,
            "email": self.email,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "currency": self.currency,
            "item_count": self.item_count,
            "item_total": str(self.item_total.amount),
            "adjustment_total": str(self.adjustment_total.amount),
            "payment_total": str(self.payment_total.amount),
            "total": str(self.total.amount),
            "line_items": [
                {"variant_id": i.variant_id, "quantity": i.quantity, "price": str(i.price.amount)}
                for i in self.line_items
            ],
            "shipments": [
                {
                    "tracking": s.tracking,
                    "shipping_method_id": s.shipping_method_id,
                    "cost": str(s.cost.amount) if s.cost else None,
                    "inventory_units": [u.variant_id for u in s.inventory_units],
                }
                for s in self.shipments
            ],
            "payments": [
                {"amount": str(p.amount.amount), "state": p.state.value, "payment_method_id": p.payment_method_id}
                for p in self.payments
            ],
            "adjustments": [
                {"label": a.label, "amount": str(a.amount.amount), "locked": a.locked, "source": a.source.value}
                for a in self.adjustments
            ],
        }
