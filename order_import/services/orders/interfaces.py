"""
Interfaces/Protocols for order import services (Dependency Inversion Principle).

These protocols define the persistence contracts the importers depend on,
allowing for loose coupling and easy testing.
"""

from typing import Any, AsyncContextManager, Protocol

from order_import.domain.models import (
    AdjustmentDomain,
    CountryDomain,
    LineItemDomain,
    OrderDomain,
    PaymentDomain,
    PaymentMethodDomain,
    ShipmentDomain,
    ShippingMethodDomain,
    StateDomain,
    VariantDomain,
)


class IReferenceRepository(Protocol):
    """Read-only lookups over reference and catalog data (zero-or-one results)."""

    async def find_country(self, criteria: dict[str, Any]) -> CountryDomain | None:
        """Find the first country whose columns equal ``criteria``."""
        ...

    async def find_state(self, criteria: dict[str, Any]) -> StateDomain | None:
        """Find the first state whose columns equal ``criteria`` (includes ``country_id``)."""
        ...

    async def find_active_variant_by_sku(self, sku: str) -> VariantDomain | None:
        """Find a non-deleted variant with exactly this SKU."""
        ...

    async def get_variant(self, variant_id: int) -> VariantDomain | None:
        """Load a variant by ID."""
        ...

    async def find_shipping_method_by_name(self, name: str) -> ShippingMethodDomain | None:
        """Find a shipping method by exact name."""
        ...

    async def find_payment_method_by_name(self, name: str) -> PaymentMethodDomain | None:
        """Find a payment method by exact name."""
        ...


class IOrderRepository(Protocol):
    """Write operations on orders and their owned entities."""

    def transaction(self) -> AsyncContextManager[None]:
        """Unit of work: commit on success, roll back on error."""
        ...

    async def create_order(self, order: OrderDomain) -> OrderDomain:
        """Persist a new order header, assigning its ID."""
        ...

    async def save_line_item(self, order_id: int, line_item: LineItemDomain) -> LineItemDomain:
        """Insert or update a line item."""
        ...

    async def save_shipment(self, order_id: int, shipment: ShipmentDomain) -> ShipmentDomain:
        """Persist a shipment and its inventory units."""
        ...

    async def save_adjustment(
        self, order_id: int, adjustment: AdjustmentDomain, shipment_id: int | None = None
    ) -> AdjustmentDomain:
        """Persist an adjustment on the order, or on one of its shipments."""
        ...

    async def save_payment(self, order_id: int, payment: PaymentDomain) -> PaymentDomain:
        """Persist a payment."""
        ...

    async def delete_adjustments(self, adjustment_ids: list[int]) -> int:
        """Delete adjustments by ID, returning how many were removed."""
        ...

    async def update_order(self, order: OrderDomain) -> OrderDomain:
        """Persist header attributes and addresses of an existing order."""
        ...

    async def delete_order(self, order_id: int) -> None:
        """Delete an order and everything it owns."""
        ...

    async def order_exists(self, order_id: int) -> bool:
        """Check whether an order row is still persisted."""
        ...

    async def get_order(self, order_id: int) -> OrderDomain | None:
        """Reload the full order state."""
        ...


class ITaxCalculator(Protocol):
    """Computes automatic (unlocked, tax-classified) adjustments for an order."""

    def compute(self, order: OrderDomain) -> list[AdjustmentDomain]:
        """Return the tax adjustments that should exist on ``order``."""
        ...
