"""Tests for ShipmentImporter."""

from decimal import Decimal

import pytest

from order_import.domain.models import AdjustmentSource, OrderDomain
from order_import.services.orders.importers import ShipmentImporter
from order_import.services.orders.resolvers import VariantResolver
from order_import.utils.error_handler import (
    ErrorCode,
    ShipmentImportException,
    ShippingMethodNotFoundException,
    VariantNotFoundException,
)


@pytest.fixture
def importer(order_repo, reference_repo):
    return ShipmentImporter(
        order_repo=order_repo,
        reference_repo=reference_repo,
        variant_resolver=VariantResolver(reference_repo=reference_repo),
    )


@pytest.fixture
async def order(order_repo):
    return await order_repo.create_order(OrderDomain(number="R100000002"))


class TestImportShipments:
    @pytest.mark.asyncio
    async def test_shipment_with_units_and_cost(self, importer, order):
        await importer.import_shipments(
            order,
            [
                {
                    "tracking": "1Z999",
                    "shipping_method": "UPS Ground",
                    "cost": "5.00",
                    "inventory_units": [{"sku": "SHIRT-S"}, {"variant_id": 3}],
                }
            ],
        )

        shipment = order.shipments[0]
        assert shipment.id is not None
        assert shipment.tracking == "1Z999"
        assert shipment.shipping_method_id == 1
        assert [u.variant_id for u in shipment.inventory_units] == [1, 3]
        assert all(u.order_id == order.id and u.shipment_id == shipment.id for u in shipment.inventory_units)

        adjustment = shipment.adjustment
        assert adjustment.locked
        assert adjustment.source == AdjustmentSource.SHIPPING
        assert adjustment.label == "UPS Ground"
        assert adjustment.amount.amount == Decimal("5.00")
        assert adjustment.shipment_id == shipment.id

    @pytest.mark.asyncio
    async def test_cost_adjustment_counts_in_order_totals(self, importer, order):
        await importer.import_shipments(order, [{"shipping_method": "FedEx", "cost": "12.5", "inventory_units": []}])

        assert order.adjustment_total.amount == Decimal("12.50")
        assert order.adjustments == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("cost", [None, "free", ""])
    async def test_non_numeric_cost_is_zero(self, importer, order, cost):
        await importer.import_shipments(order, [{"shipping_method": "UPS Ground", "cost": cost}])

        assert order.shipments[0].cost.amount == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_unknown_shipping_method(self, importer, order, order_repo):
        payload = {"shipping_method": "Pigeon", "cost": "1.00", "inventory_units": [{"sku": "MUG"}]}

        with pytest.raises(ShipmentImportException) as exc_info:
            await importer.import_shipments(order, [payload])

        error = exc_info.value
        assert error.error_code == ErrorCode.SHIPMENT_IMPORT_FAILED
        assert error.payload == payload
        assert isinstance(error.cause, ShippingMethodNotFoundException)
        assert error.cause.criteria == {"name": "Pigeon"}
        assert order_repo.shipments == {}

    @pytest.mark.asyncio
    async def test_unknown_unit_variant(self, importer, order):
        with pytest.raises(ShipmentImportException) as exc_info:
            await importer.import_shipments(
                order, [{"shipping_method": "UPS Ground", "inventory_units": [{"sku": "NOPE"}]}]
            )

        assert isinstance(exc_info.value.cause, VariantNotFoundException)

    @pytest.mark.asyncio
    async def test_shipments_are_imported_in_order(self, importer, order):
        await importer.import_shipments(
            order,
            [{"shipping_method": "UPS Ground", "tracking": "A"}, {"shipping_method": "FedEx", "tracking": "B"}],
        )

        assert [s.tracking for s in order.shipments] == ["A", "B"]
