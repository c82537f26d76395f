"""LineItemImporter service - SRP compliance."""

import logging
from typing import Any, Mapping

from order_import.domain.models import OrderDomain
from order_import.domain.value_objects import Money
from order_import.services.orders.interfaces import IOrderRepository
from order_import.services.orders.resolvers import VariantResolver
from order_import.utils.coercion import to_positive_int, to_strict_decimal
from order_import.utils.error_handler import LineItemImportException

logger = logging.getLogger(__name__)


class LineItemImporter:
    """Adds priced quantities of resolved variants to an order (SRP: line items only)."""

    def __init__(self, order_repo: IOrderRepository, variant_resolver: VariantResolver):
        """
        Initialize with SOLID dependencies (DIP).

        Args:
            order_repo: Repository for order writes
            variant_resolver: Service resolving variant_id/sku references
        """
        self.order_repo = order_repo
        self.variant_resolver = variant_resolver

    async def import_line_items(self, order: OrderDomain, line_items: Mapping[Any, Mapping[str, Any]]) -> None:
        """
        Import every entry of ``line_items`` in mapping iteration order.

        Quantities for the same variant are merged into one line item. An
        explicit ``price`` overrides the variant price.

        Raises:
            LineItemImportException: On the first entry that fails
        """
        for key, payload in line_items.items():
            try:
                await self._import_one(order, payload)
            except Exception as e:
                logger.error(f"Line item '{key}' import failed for order {order.number}: {e}")
                raise LineItemImportException(payload=payload, cause=e) from e

        logger.debug(f"Imported {len(line_items)} line item entries into order {order.number}")

    async def _import_one(self, order: OrderDomain, payload: Mapping[str, Any]) -> None:
        resolved = await self.variant_resolver.resolve(payload)
        variant = await self.variant_resolver.get_variant(resolved["variant_id"])
        quantity = to_positive_int(resolved.get("quantity"))

        item = order.add_variant(variant, quantity)
        if "price" in resolved:
            item.price = Money(amount=to_strict_decimal(resolved["price"]), currency=order.currency)

        saved = await self.order_repo.save_line_item(order.id, item)
        item.id = saved.id
        item.order_id = order.id
        logger.debug(f"Line item variant={variant.id} quantity={item.quantity} price={item.price}")
