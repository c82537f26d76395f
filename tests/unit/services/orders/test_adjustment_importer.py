"""Tests for AdjustmentImporter."""

from decimal import Decimal

import pytest

from order_import.domain.models import AdjustmentSource, OrderDomain
from order_import.services.orders.importers import AdjustmentImporter
from order_import.utils.error_handler import AdjustmentImportException, ErrorCode


@pytest.fixture
def importer(order_repo):
    return AdjustmentImporter(order_repo=order_repo)


@pytest.fixture
async def order(order_repo):
    return await order_repo.create_order(OrderDomain(number="R100000004"))


class TestImportAdjustments:
    @pytest.mark.asyncio
    async def test_adjustments_are_locked(self, importer, order, order_repo):
        await importer.import_adjustments(
            order, [{"label": "VAT", "amount": "1.30"}, {"label": "Promo", "amount": "-2.00"}]
        )

        assert [(a.label, a.amount.amount) for a in order.adjustments] == [
            ("VAT", Decimal("1.30")),
            ("Promo", Decimal("-2.00")),
        ]
        assert all(a.locked and a.source == AdjustmentSource.MANUAL for a in order.adjustments)
        assert len(order_repo.adjustments) == 2

    @pytest.mark.asyncio
    async def test_non_numeric_amount_is_zero(self, importer, order):
        await importer.import_adjustments(order, [{"label": "Fee", "amount": "n/a"}])

        assert order.adjustments[0].amount.amount == Decimal("0.00")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"amount": "1.00"}, {"label": "  ", "amount": "1.00"}])
    async def test_label_is_required(self, importer, order, payload):
        with pytest.raises(AdjustmentImportException) as exc_info:
            await importer.import_adjustments(order, [payload])

        assert exc_info.value.error_code == ErrorCode.ADJUSTMENT_IMPORT_FAILED
        assert exc_info.value.payload == payload
        assert isinstance(exc_info.value.cause, ValueError)
