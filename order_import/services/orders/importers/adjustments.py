"""AdjustmentImporter service - SRP compliance."""

import logging
from typing import Any, Mapping, Sequence

from order_import.domain.models import AdjustmentDomain, AdjustmentSource, OrderDomain
from order_import.domain.value_objects import Money
from order_import.services.orders.interfaces import IOrderRepository
from order_import.utils.coercion import to_decimal
from order_import.utils.error_handler import AdjustmentImportException

logger = logging.getLogger(__name__)


class AdjustmentImporter:
    """Creates locked order adjustments, e.g. externally computed taxes (SRP: adjustments only)."""

    def __init__(self, order_repo: IOrderRepository):
        """
        Args:
            order_repo: Repository for order writes
        """
        self.order_repo = order_repo

    async def import_adjustments(self, order: OrderDomain, adjustments: Sequence[Mapping[str, Any]]) -> None:
        """
        Import adjustments in payload order.

        Raises:
            AdjustmentImportException: On the first adjustment that fails
        """
        for payload in adjustments:
            try:
                adjustment = AdjustmentDomain(
                    amount=Money(amount=to_decimal(payload.get("amount")), currency=order.currency),
                    label=payload.get("label") or "",
                    source=AdjustmentSource.MANUAL,
                    order_id=order.id,
                )
                adjustment.lock()
                saved = await self.order_repo.save_adjustment(order.id, adjustment)
            except Exception as e:
                logger.error(f"Adjustment import failed for order {order.number}: {e}")
                raise AdjustmentImportException(payload=payload, cause=e) from e

            adjustment.id = saved.id
            order.adjustments.append(adjustment)

        logger.debug(f"Imported {len(adjustments)} adjustments into order {order.number}")
