"""
Shipment and inventory unit domain models.
"""

from dataclasses import dataclass, field

from order_import.domain.value_objects.money import Money

from .adjustment import AdjustmentDomain


@dataclass
class InventoryUnitDomain:
    """
    A single unit of a variant allocated to a shipment.

    Attributes:
        variant_id: Variant allocated
        order_id: Owning order (must match the shipment's order)
        shipment_id: Owning shipment (None until the shipment is persisted)
        state: Inventory state
        id: Inventory unit ID
    """

    variant_id: int
    order_id: int | None = None
    shipment_id: int | None = None
    state: str = "on_hand"
    id: int | None = None


@dataclass
class ShipmentDomain:
    """
    Domain model representing a shipment of an order.

    Attributes:
        shipping_method_id: Shipping method used
        tracking: Carrier tracking code
        inventory_units: Units shipped, in payload order
        adjustment: Locked cost adjustment (set once persisted)
        order_id: Owning order
        id: Shipment ID
    """

    shipping_method_id: int | None = None
    tracking: str | None = None
    inventory_units: list[InventoryUnitDomain] = field(default_factory=list)
    adjustment: AdjustmentDomain | None = None
    order_id: int | None = None
    id: int | None = None

    def add_inventory_unit(self, variant_id: int) -> InventoryUnitDomain:
        """Build a unit bound to this shipment and its order."""
        unit = InventoryUnitDomain(variant_id=variant_id, order_id=self.order_id, shipment_id=self.id)
        self.inventory_units.append(unit)
        return unit

    def bind(self, order_id: int, shipment_id: int) -> None:
        """Propagate persisted identifiers to the inventory units."""
        self.order_id = order_id
        self.id = shipment_id
        for unit in self.inventory_units:
            unit.order_id = order_id
            unit.shipment_id = shipment_id

    @property
    def cost(self) -> Money | None:
        return self.adjustment.amount if self.adjustment else None
