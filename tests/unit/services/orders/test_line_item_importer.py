"""Tests for LineItemImporter."""

from decimal import Decimal

import pytest

from order_import.domain.models import OrderDomain
from order_import.services.orders.importers import LineItemImporter
from order_import.services.orders.resolvers import VariantResolver
from order_import.utils.error_handler import ErrorCode, LineItemImportException, VariantNotFoundException


@pytest.fixture
def importer(order_repo, reference_repo):
    return LineItemImporter(order_repo=order_repo, variant_resolver=VariantResolver(reference_repo=reference_repo))


@pytest.fixture
async def order(order_repo):
    return await order_repo.create_order(OrderDomain(number="R100000001"))


class TestImportLineItems:
    @pytest.mark.asyncio
    async def test_imports_by_sku_and_variant_id(self, importer, order, order_repo):
        await importer.import_line_items(
            order,
            {"0": {"sku": "SHIRT-S", "quantity": 2}, "1": {"variant_id": 3, "quantity": "1"}},
        )

        assert [(li.variant_id, li.quantity) for li in order.line_items] == [(1, 2), (3, 1)]
        assert all(li.id is not None and li.order_id == order.id for li in order.line_items)
        assert len(order_repo.line_items) == 2

    @pytest.mark.asyncio
    async def test_same_variant_quantities_are_summed(self, importer, order):
        await importer.import_line_items(
            order,
            {"0": {"sku": "SHIRT-S", "quantity": 2}, "1": {"variant_id": 1, "quantity": 3}},
        )

        assert len(order.line_items) == 1
        assert order.line_items[0].quantity == 5

    @pytest.mark.asyncio
    async def test_price_override(self, importer, order, order_repo):
        await importer.import_line_items(order, {"0": {"sku": "MUG", "quantity": 1, "price": "6.00"}})

        item = order.line_items[0]
        assert item.price.amount == Decimal("6.00")
        assert order_repo.line_items[item.id].price.amount == Decimal("6.00")

    @pytest.mark.asyncio
    async def test_without_price_uses_variant_price(self, importer, order):
        await importer.import_line_items(order, {"0": {"sku": "MUG", "quantity": 2}})

        assert order.line_items[0].price.amount == Decimal("8.50")
        assert order.item_total.amount == Decimal("17.00")

    @pytest.mark.asyncio
    async def test_unknown_sku_is_wrapped(self, importer, order):
        payload = {"sku": "NOPE", "quantity": 1}

        with pytest.raises(LineItemImportException) as exc_info:
            await importer.import_line_items(order, {"0": payload})

        error = exc_info.value
        assert error.error_code == ErrorCode.LINE_ITEM_IMPORT_FAILED
        assert error.payload == payload
        assert isinstance(error.cause, VariantNotFoundException)
        assert error.__cause__ is error.cause

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quantity", [0, -2, "abc", None])
    async def test_invalid_quantity_is_wrapped(self, importer, order, quantity):
        with pytest.raises(LineItemImportException) as exc_info:
            await importer.import_line_items(order, {"0": {"sku": "MUG", "quantity": quantity}})

        assert isinstance(exc_info.value.cause, ValueError)

    @pytest.mark.asyncio
    async def test_invalid_price_is_wrapped(self, importer, order):
        with pytest.raises(LineItemImportException):
            await importer.import_line_items(order, {"0": {"sku": "MUG", "quantity": 1, "price": "cheap"}})

    @pytest.mark.asyncio
    async def test_first_failure_halts_the_import(self, importer, order, order_repo):
        with pytest.raises(LineItemImportException):
            await importer.import_line_items(
                order,
                {
                    "0": {"sku": "SHIRT-S", "quantity": 1},
                    "1": {"sku": "NOPE", "quantity": 1},
                    "2": {"sku": "MUG", "quantity": 1},
                },
            )

        assert [li.variant_id for li in order_repo.line_items.values()] == [1]

    @pytest.mark.asyncio
    async def test_persistence_errors_are_wrapped(self, importer, order, order_repo):
        order_repo.fail_on["save_line_item"] = RuntimeError("disk full")

        with pytest.raises(LineItemImportException) as exc_info:
            await importer.import_line_items(order, {"0": {"sku": "MUG", "quantity": 1}})

        assert str(exc_info.value.cause) == "disk full"
