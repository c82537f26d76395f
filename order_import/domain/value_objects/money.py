"""
Money value object for handling monetary amounts with currency.

This value object ensures type safety and provides clear semantics
for monetary operations in the domain.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """
    Immutable value object representing a monetary amount with currency.

    Amounts are normalized to two decimal places. Negative amounts are
    allowed because adjustments (discounts, refunds) can be negative.

    Attributes:
        amount: The monetary amount as Decimal for precision
        currency: Currency code (e.g., "USD", "EUR")

    Example:
        >>> price = Money(amount=Decimal("19.99"), currency="USD")
        >>> shipping = Money(amount=Decimal("5.00"), currency="USD")
        >>> (price + shipping).amount
        Decimal('24.99')
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        """Validate money object after initialization."""
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))

        if not self.amount.is_finite():
            raise ValueError(f"Money amount must be finite: {self.amount}")

        object.__setattr__(self, "amount", self.amount.quantize(CENTS, rounding=ROUND_HALF_UP))

        if not self.currency or len(self.currency) != 3:
            raise ValueError(f"Invalid currency code: {self.currency}")

    def __add__(self, other: "Money") -> "Money":
        """Add two Money objects with the same currency."""
        if not isinstance(other, Money):
            raise TypeError(f"Cannot add Money with {type(other)}")

        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")

        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: "Money") -> "Money":
        """Subtract two Money objects with the same currency."""
        if not isinstance(other, Money):
            raise TypeError(f"Cannot subtract Money with {type(other)}")

        if self.currency != other.currency:
            raise ValueError(f"Cannot subtract different currencies: {self.currency} and {other.currency}")

        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __mul__(self, multiplier: int | Decimal) -> "Money":
        """Multiply money by a scalar value."""
        if isinstance(multiplier, bool) or not isinstance(multiplier, (int, Decimal)):
            raise TypeError(f"Cannot multiply Money by {type(multiplier)}")

        return Money(amount=self.amount * Decimal(multiplier), currency=self.currency)

    def __neg__(self) -> "Money":
        return Money(amount=-self.amount, currency=self.currency)

    def __str__(self) -> str:
        """String representation of Money."""
        return f"{self.currency} {self.amount:.2f}"

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"Money(amount=Decimal('{self.amount}'), currency='{self.currency}')"

    @property
    def is_zero(self) -> bool:
        """Check if amount is zero."""
        return self.amount == Decimal("0")

    @property
    def is_positive(self) -> bool:
        """Check if amount is positive."""
        return self.amount > Decimal("0")

    @classmethod
    def zero(cls, currency: str = "USD") -> "Money":
        """Create a zero Money object."""
        return cls(amount=Decimal("0"), currency=currency)

    @classmethod
    def sum(cls, values: "list[Money]", currency: str = "USD") -> "Money":
        """Sum a list of Money objects (zero for an empty list)."""
        total = cls.zero(currency)
        for value in values:
            total = total + value
        return total
