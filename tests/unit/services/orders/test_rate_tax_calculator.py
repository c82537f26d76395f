"""Tests for RateTaxCalculator."""

from decimal import Decimal

import pytest

from order_import.domain.models import AdjustmentSource, OrderDomain, VariantDomain
from order_import.domain.value_objects import Money
from order_import.services.orders.taxes import RateTaxCalculator


def _order_with(amount: str, quantity: int) -> OrderDomain:
    order = OrderDomain(number="R1", id=7)
    order.add_variant(VariantDomain(id=1, sku="A", price=Money(amount=Decimal(amount))), quantity)
    return order


class TestRateTaxCalculator:
    def test_tax_over_item_total(self):
        calculator = RateTaxCalculator(rate=Decimal("0.13"), label="IVA")

        adjustments = calculator.compute(_order_with("10.00", 3))

        assert len(adjustments) == 1
        tax = adjustments[0]
        assert tax.amount.amount == Decimal("3.90")
        assert tax.label == "IVA"
        assert tax.source == AdjustmentSource.TAX
        assert tax.is_tax
        assert not tax.locked
        assert tax.order_id == 7

    def test_amount_is_rounded_to_cents(self):
        adjustments = RateTaxCalculator(rate=Decimal("0.10")).compute(_order_with("19.99", 2))

        assert adjustments[0].amount.amount == Decimal("4.00")

    def test_zero_rate_produces_nothing(self):
        assert RateTaxCalculator(rate=Decimal("0")).compute(_order_with("10.00", 1)) == []

    def test_empty_order_produces_nothing(self):
        assert RateTaxCalculator(rate=Decimal("0.13")).compute(OrderDomain(number="R1")) == []

    def test_negative_rate_rejected(self):
        with pytest.raises(ValueError):
            RateTaxCalculator(rate=Decimal("-0.01"))
