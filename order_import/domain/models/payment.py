"""Payment domain model."""

from dataclasses import dataclass
from enum import Enum

from order_import.domain.value_objects.money import Money


class PaymentState(str, Enum):
    """Lifecycle states of a payment."""

    CHECKOUT = "checkout"
    PENDING = "pending"
    PROCESSING = "processing"
    FAILED = "failed"
    VOID = "void"
    COMPLETED = "completed"
    INVALID = "invalid"


@dataclass
class PaymentDomain:
    """
    Domain model representing a payment recorded against an order.

    Attributes:
        amount: Amount paid
        state: Payment state
        payment_method_id: Payment method used
        order_id: Owning order
        id: Payment ID (None for new payments)
    """

    amount: Money
    state: PaymentState
    payment_method_id: int
    order_id: int | None = None
    id: int | None = None

    @property
    def is_completed(self) -> bool:
        return self.state == PaymentState.COMPLETED
