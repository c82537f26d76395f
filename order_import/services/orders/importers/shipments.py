"""ShipmentImporter service - SRP compliance."""

import logging
from typing import Any, Mapping, Sequence

from order_import.domain.models import AdjustmentDomain, AdjustmentSource, OrderDomain, ShipmentDomain
from order_import.domain.value_objects import Money
from order_import.services.orders.interfaces import IOrderRepository, IReferenceRepository
from order_import.services.orders.resolvers import VariantResolver
from order_import.utils.coercion import to_decimal
from order_import.utils.error_handler import ShipmentImportException, ShippingMethodNotFoundException

logger = logging.getLogger(__name__)


class ShipmentImporter:
    """
    Reconstructs shipments with their inventory units, shipping method and
    locked cost adjustment (SRP: shipments only).
    """

    def __init__(
        self,
        order_repo: IOrderRepository,
        reference_repo: IReferenceRepository,
        variant_resolver: VariantResolver,
    ):
        """
        Initialize with SOLID dependencies (DIP).

        Args:
            order_repo: Repository for order writes
            reference_repo: Repository for shipping method lookups
            variant_resolver: Service resolving inventory unit variants
        """
        self.order_repo = order_repo
        self.reference_repo = reference_repo
        self.variant_resolver = variant_resolver

    async def import_shipments(self, order: OrderDomain, shipments: Sequence[Mapping[str, Any]]) -> None:
        """
        Import shipments in payload order.

        Raises:
            ShipmentImportException: On the first shipment that fails
        """
        for payload in shipments:
            try:
                shipment = await self._import_one(order, payload)
            except Exception as e:
                logger.error(f"Shipment import failed for order {order.number}: {e}")
                raise ShipmentImportException(payload=payload, cause=e) from e
            order.shipments.append(shipment)

        logger.debug(f"Imported {len(shipments)} shipments into order {order.number}")

    async def _import_one(self, order: OrderDomain, payload: Mapping[str, Any]) -> ShipmentDomain:
        shipment = ShipmentDomain(tracking=payload.get("tracking"), order_id=order.id)

        for unit_payload in payload.get("inventory_units") or []:
            resolved = await self.variant_resolver.resolve(unit_payload)
            variant = await self.variant_resolver.get_variant(resolved["variant_id"])
            shipment.add_inventory_unit(variant.id)

        method_name = payload.get("shipping_method")
        shipping_method = await self.reference_repo.find_shipping_method_by_name(method_name)
        if shipping_method is None:
            raise ShippingMethodNotFoundException({"name": method_name})
        shipment.shipping_method_id = shipping_method.id

        saved = await self.order_repo.save_shipment(order.id, shipment)
        shipment.bind(order.id, saved.id)

        adjustment = AdjustmentDomain(
            amount=Money(amount=to_decimal(payload.get("cost")), currency=order.currency),
            label=shipping_method.name,
            source=AdjustmentSource.SHIPPING,
            order_id=order.id,
            shipment_id=shipment.id,
        )
        adjustment.lock()
        shipment.adjustment = await self.order_repo.save_adjustment(order.id, adjustment, shipment_id=shipment.id)

        logger.debug(
            f"Shipment {shipment.id} via '{shipping_method.name}' with "
            f"{len(shipment.inventory_units)} units, cost {adjustment.amount}"
        )
        return shipment
