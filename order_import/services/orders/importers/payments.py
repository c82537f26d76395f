"""PaymentImporter service - SRP compliance."""

import logging
from typing import Any, Mapping, Sequence

from order_import.domain.models import OrderDomain, PaymentDomain, PaymentState
from order_import.domain.value_objects import Money
from order_import.services.orders.interfaces import IOrderRepository, IReferenceRepository
from order_import.utils.coercion import to_decimal
from order_import.utils.error_handler import PaymentImportException, PaymentMethodNotFoundException

logger = logging.getLogger(__name__)


class PaymentImporter:
    """Reconstructs payment records (SRP: payments only)."""

    def __init__(
        self,
        order_repo: IOrderRepository,
        reference_repo: IReferenceRepository,
        default_state: PaymentState | str = PaymentState.COMPLETED,
    ):
        """
        Initialize with SOLID dependencies (DIP).

        Args:
            order_repo: Repository for order writes
            reference_repo: Repository for payment method lookups
            default_state: State used when a payment omits ``state``
        """
        self.order_repo = order_repo
        self.reference_repo = reference_repo
        self.default_state = PaymentState(default_state)

    async def import_payments(self, order: OrderDomain, payments: Sequence[Mapping[str, Any]]) -> None:
        """
        Import payments in payload order.

        Raises:
            PaymentImportException: On the first payment that fails
        """
        for payload in payments:
            try:
                payment = await self._import_one(order, payload)
            except Exception as e:
                logger.error(f"Payment import failed for order {order.number}: {e}")
                raise PaymentImportException(payload=payload, cause=e) from e
            order.payments.append(payment)

        logger.debug(f"Imported {len(payments)} payments into order {order.number}")

    async def _import_one(self, order: OrderDomain, payload: Mapping[str, Any]) -> PaymentDomain:
        state = PaymentState(payload.get("state", self.default_state))

        method_name = payload.get("payment_method")
        payment_method = await self.reference_repo.find_payment_method_by_name(method_name)
        if payment_method is None:
            raise PaymentMethodNotFoundException({"name": method_name})

        payment = PaymentDomain(
            amount=Money(amount=to_decimal(payload.get("amount")), currency=order.currency),
            state=state,
            payment_method_id=payment_method.id,
            order_id=order.id,
        )
        saved = await self.order_repo.save_payment(order.id, payment)
        payment.id = saved.id
        logger.debug(f"Payment {payment.id} of {payment.amount} ({state.value}) via '{payment_method.name}'")
        return payment
