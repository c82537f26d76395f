"""Shared fixtures: in-memory repositories seeded with reference data."""

import contextlib
import copy
import dataclasses
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any, Optional

import pytest

from order_import.core.config import Settings
from order_import.domain.models import (
    AdjustmentDomain,
    CountryDomain,
    LineItemDomain,
    OrderDomain,
    PaymentDomain,
    PaymentMethodDomain,
    ShipmentDomain,
    ShippingMethodDomain,
    StateDomain,
    VariantDomain,
)
from order_import.domain.value_objects import Money
from order_import.services.orders import ImportContext, create_orchestrator


def _matches(entity: Any, criteria: dict[str, Any]) -> bool:
    return all(getattr(entity, key) == value for key, value in criteria.items())


class InMemoryReferenceRepository:
    """IReferenceRepository over plain lists."""

    def __init__(self, countries, states, variants, shipping_methods, payment_methods):
        self.countries = countries
        self.states = states
        self.variants = {variant.id: variant for variant in variants}
        self.shipping_methods = shipping_methods
        self.payment_methods = payment_methods

    async def find_country(self, criteria: dict[str, Any]) -> Optional[CountryDomain]:
        return next((c for c in self.countries if _matches(c, criteria)), None)

    async def find_state(self, criteria: dict[str, Any]) -> Optional[StateDomain]:
        return next((s for s in self.states if _matches(s, criteria)), None)

    async def find_active_variant_by_sku(self, sku: str) -> Optional[VariantDomain]:
        return next((v for v in self.variants.values() if v.sku == sku and v.is_active), None)

    async def get_variant(self, variant_id: int) -> Optional[VariantDomain]:
        return self.variants.get(variant_id)

    async def find_shipping_method_by_name(self, name: str) -> Optional[ShippingMethodDomain]:
        return next((m for m in self.shipping_methods if m.name == name), None)

    async def find_payment_method_by_name(self, name: str) -> Optional[PaymentMethodDomain]:
        return next((m for m in self.payment_methods if m.name == name), None)


class InMemoryOrderRepository:
    """
    IOrderRepository keeping copies of everything it is given.

    ``fail_on`` maps a method name to the exception that method should raise.
    """

    def __init__(self):
        self.orders: dict[int, OrderDomain] = {}
        self.line_items: dict[int, LineItemDomain] = {}
        self.shipments: dict[int, ShipmentDomain] = {}
        self.payments: dict[int, PaymentDomain] = {}
        self.adjustments: dict[int, AdjustmentDomain] = {}
        self.fail_on: dict[str, Exception] = {}
        self.calls: list[str] = []
        self.commits = 0
        self.rollbacks = 0
        self._next_id = 0

    def _id(self) -> int:
        self._next_id += 1
        return self._next_id

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise self.fail_on[name]

    def _tables(self):
        return (self.orders, self.line_items, self.shipments, self.payments, self.adjustments)

    @contextlib.asynccontextmanager
    async def transaction(self):
        snapshot = copy.deepcopy(self._tables())
        try:
            yield
        except Exception:
            for table, saved in zip(self._tables(), snapshot):
                table.clear()
                table.update(saved)
            self.rollbacks += 1
            raise
        self.commits += 1

    async def create_order(self, order: OrderDomain) -> OrderDomain:
        self._record("create_order")
        order.id = self._id()
        self.orders[order.id] = self._header(order)
        return order

    async def save_line_item(self, order_id: int, line_item: LineItemDomain) -> LineItemDomain:
        self._record("save_line_item")
        if line_item.id is None:
            line_item.id = self._id()
        line_item.order_id = order_id
        self.line_items[line_item.id] = copy.deepcopy(line_item)
        return line_item

    async def save_shipment(self, order_id: int, shipment: ShipmentDomain) -> ShipmentDomain:
        self._record("save_shipment")
        shipment.bind(order_id, self._id())
        for unit in shipment.inventory_units:
            unit.id = self._id()
        self.shipments[shipment.id] = copy.deepcopy(shipment)
        return shipment

    async def save_adjustment(
        self, order_id: int, adjustment: AdjustmentDomain, shipment_id: Optional[int] = None
    ) -> AdjustmentDomain:
        self._record("save_adjustment")
        adjustment.id = self._id()
        adjustment.order_id = order_id
        adjustment.shipment_id = shipment_id
        self.adjustments[adjustment.id] = copy.deepcopy(adjustment)
        return adjustment

    async def save_payment(self, order_id: int, payment: PaymentDomain) -> PaymentDomain:
        self._record("save_payment")
        payment.id = self._id()
        payment.order_id = order_id
        self.payments[payment.id] = copy.deepcopy(payment)
        return payment

    async def delete_adjustments(self, adjustment_ids: list[int]) -> int:
        self._record("delete_adjustments")
        removed = [self.adjustments.pop(i) for i in adjustment_ids if i in self.adjustments]
        return len(removed)

    async def update_order(self, order: OrderDomain) -> OrderDomain:
        self._record("update_order")
        for address in (order.ship_address, order.bill_address):
            if address is not None and address.id is None:
                address.id = self._id()
        self.orders[order.id] = self._header(order)
        return order

    async def delete_order(self, order_id: int) -> None:
        self._record("delete_order")
        self.orders.pop(order_id, None)
        for table in (self.line_items, self.shipments, self.payments, self.adjustments):
            for key in [k for k, v in table.items() if v.order_id == order_id]:
                del table[key]

    async def order_exists(self, order_id: int) -> bool:
        self._record("order_exists")
        return order_id in self.orders

    async def get_order(self, order_id: int) -> Optional[OrderDomain]:
        self._record("get_order")
        if order_id not in self.orders:
            return None

        order = copy.deepcopy(self.orders[order_id])
        adjustments = [copy.deepcopy(a) for a in self.adjustments.values() if a.order_id == order_id]
        by_shipment = {a.shipment_id: a for a in adjustments if a.shipment_id is not None}

        order.line_items = [copy.deepcopy(li) for li in self.line_items.values() if li.order_id == order_id]
        order.shipments = []
        for shipment in self.shipments.values():
            if shipment.order_id == order_id:
                shipment = copy.deepcopy(shipment)
                shipment.adjustment = by_shipment.get(shipment.id)
                order.shipments.append(shipment)
        order.payments = [copy.deepcopy(p) for p in self.payments.values() if p.order_id == order_id]
        order.adjustments = [a for a in adjustments if a.shipment_id is None]
        return order

    @staticmethod
    def _header(order: OrderDomain) -> OrderDomain:
        return copy.deepcopy(dataclasses.replace(order, line_items=[], shipments=[], payments=[], adjustments=[]))


def usd(amount: str) -> Money:
    return Money(amount=Decimal(amount), currency="USD")


@pytest.fixture
def reference_repo():
    return InMemoryReferenceRepository(
        countries=[
            CountryDomain(id=1, name="United States", iso_name="UNITED STATES", iso="US", iso3="USA"),
            CountryDomain(id=2, name="Costa Rica", iso_name="COSTA RICA", iso="CR", iso3="CRI"),
        ],
        states=[
            StateDomain(id=10, name="New York", country_id=1, abbr="NY"),
            StateDomain(id=11, name="California", country_id=1, abbr="CA"),
            StateDomain(id=20, name="San José", country_id=2, abbr="SJ"),
        ],
        variants=[
            VariantDomain(id=1, sku="SHIRT-S", price=usd("19.99")),
            VariantDomain(id=2, sku="SHIRT-M", price=usd("19.99")),
            VariantDomain(id=3, sku="MUG", price=usd("8.50")),
            VariantDomain(id=4, sku="RETIRED", price=usd("5.00"), deleted_at=datetime(2024, 1, 1, tzinfo=UTC)),
        ],
        shipping_methods=[ShippingMethodDomain(id=1, name="UPS Ground"), ShippingMethodDomain(id=2, name="FedEx")],
        payment_methods=[PaymentMethodDomain(id=1, name="Check"), PaymentMethodDomain(id=2, name="Credit Card")],
    )


@pytest.fixture
def order_repo():
    return InMemoryOrderRepository()


@pytest.fixture
def settings():
    return Settings(_env_file=None, ENVIRONMENT="testing", AUTOMATIC_TAX_RATE=Decimal("0"))


@pytest.fixture
def orchestrator(order_repo, reference_repo, settings):
    return create_orchestrator(order_repo=order_repo, reference_repo=reference_repo, settings=settings)


@pytest.fixture
def customer():
    return ImportContext.for_roles("user", user_id=42)


@pytest.fixture
def admin():
    return ImportContext.for_roles("admin", user_id=1)
