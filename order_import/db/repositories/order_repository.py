"""
OrderRepository - writes and reloads orders with everything they own.

Implements ``IOrderRepository``. Save methods assign the generated ID to the
domain object they receive and return it.
"""

import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload

from order_import.db.models import (
    AddressRecord,
    AdjustmentRecord,
    InventoryUnitRecord,
    LineItemRecord,
    OrderRecord,
    PaymentRecord,
    ShipmentRecord,
)
from order_import.db.repositories.base import BaseRepository, log_operation
from order_import.domain.models import (
    AddressDomain,
    AdjustmentDomain,
    AdjustmentSource,
    InventoryUnitDomain,
    LineItemDomain,
    OrderDomain,
    OrderState,
    PaymentDomain,
    PaymentState,
    ShipmentDomain,
)
from order_import.domain.value_objects import Money
from order_import.utils.coercion import ensure_utc_datetime
from order_import.utils.error_handler import PersistenceException

logger = logging.getLogger(__name__)

ADDRESS_COLUMNS = (
    "firstname",
    "lastname",
    "company",
    "address1",
    "address2",
    "city",
    "zipcode",
    "phone",
    "alternative_phone",
    "state_name",
    "state_id",
    "country_id",
)


class OrderRepository(BaseRepository):
    """Repository for orders, line items, shipments, payments and adjustments."""

    @log_operation()
    async def create_order(self, order: OrderDomain) -> OrderDomain:
        async with self.session_scope() as session:
            record = OrderRecord(
                number=order.number,
                state=order.state.value,
                channel=order.channel,
                currency=order.currency,
                email=order.email,
                special_instructions=order.special_instructions,
                completed_at=order.completed_at,
            )
            session.add(record)
            await session.flush()
            order.id = record.id

        logger.debug(f"Order {order.number} created with id {order.id}")
        return order

    @log_operation()
    async def save_line_item(self, order_id: int, line_item: LineItemDomain) -> LineItemDomain:
        async with self.session_scope() as session:
            record = await session.get(LineItemRecord, line_item.id) if line_item.id is not None else None
            if record is None:
                record = LineItemRecord(order_id=order_id, variant_id=line_item.variant_id)
                session.add(record)

            record.quantity = line_item.quantity
            record.price = line_item.price.amount
            await session.flush()

            line_item.id = record.id
            line_item.order_id = order_id
        return line_item

    @log_operation()
    async def save_shipment(self, order_id: int, shipment: ShipmentDomain) -> ShipmentDomain:
        async with self.session_scope() as session:
            record = ShipmentRecord(
                order_id=order_id,
                shipping_method_id=shipment.shipping_method_id,
                tracking=shipment.tracking,
            )
            session.add(record)
            await session.flush()

            unit_records = [
                InventoryUnitRecord(order_id=order_id, shipment_id=record.id, variant_id=unit.variant_id, state=unit.state)
                for unit in shipment.inventory_units
            ]
            session.add_all(unit_records)
            await session.flush()

            shipment.bind(order_id, record.id)
            for unit, unit_record in zip(shipment.inventory_units, unit_records):
                unit.id = unit_record.id
        return shipment

    @log_operation()
    async def save_adjustment(
        self, order_id: int, adjustment: AdjustmentDomain, shipment_id: Optional[int] = None
    ) -> AdjustmentDomain:
        async with self.session_scope() as session:
            record = AdjustmentRecord(
                order_id=order_id,
                shipment_id=shipment_id,
                amount=adjustment.amount.amount,
                label=adjustment.label,
                locked=adjustment.locked,
                source=adjustment.source.value,
            )
            session.add(record)
            await session.flush()

            adjustment.id = record.id
            adjustment.order_id = order_id
            adjustment.shipment_id = shipment_id
        return adjustment

    @log_operation()
    async def save_payment(self, order_id: int, payment: PaymentDomain) -> PaymentDomain:
        async with self.session_scope() as session:
            record = PaymentRecord(
                order_id=order_id,
                payment_method_id=payment.payment_method_id,
                amount=payment.amount.amount,
                state=payment.state.value,
            )
            session.add(record)
            await session.flush()

            payment.id = record.id
            payment.order_id = order_id
        return payment

    @log_operation()
    async def delete_adjustments(self, adjustment_ids: list[int]) -> int:
        if not adjustment_ids:
            return 0
        async with self.session_scope() as session:
            result = await session.execute(delete(AdjustmentRecord).where(AdjustmentRecord.id.in_(adjustment_ids)))
        return result.rowcount or 0

    @log_operation()
    async def update_order(self, order: OrderDomain) -> OrderDomain:
        async with self.session_scope() as session:
            record = await session.get(OrderRecord, order.id)
            if record is None:
                raise PersistenceException(message=f"Order {order.id} not found", operation="update_order")

            record.number = order.number
            record.state = order.state.value
            record.channel = order.channel
            record.currency = order.currency
            record.email = order.email
            record.special_instructions = order.special_instructions
            record.completed_at = order.completed_at

            record.ship_address_id = await self._save_address(session, order.ship_address)
            record.bill_address_id = await self._save_address(session, order.bill_address)
            await session.flush()

        return order

    async def _save_address(self, session, address: Optional[AddressDomain]) -> Optional[int]:
        if address is None:
            return None

        record = await session.get(AddressRecord, address.id) if address.id is not None else None
        if record is None:
            record = AddressRecord()
            session.add(record)

        for column in ADDRESS_COLUMNS:
            setattr(record, column, getattr(address, column))
        await session.flush()

        address.id = record.id
        return record.id

    @log_operation()
    async def delete_order(self, order_id: int) -> None:
        async with self.session_scope() as session:
            record = await session.get(OrderRecord, order_id)
            address_ids = [] if record is None else [record.ship_address_id, record.bill_address_id]

            # Children first; SQLite doesn't enforce ON DELETE CASCADE by default
            for model in (InventoryUnitRecord, AdjustmentRecord, PaymentRecord, LineItemRecord, ShipmentRecord):
                await session.execute(delete(model).where(model.order_id == order_id))
            await session.execute(delete(OrderRecord).where(OrderRecord.id == order_id))

            address_ids = [address_id for address_id in address_ids if address_id is not None]
            if address_ids:
                await session.execute(delete(AddressRecord).where(AddressRecord.id.in_(address_ids)))

        logger.info(f"Order {order_id} deleted")

    @log_operation()
    async def order_exists(self, order_id: int) -> bool:
        async with self.session_scope() as session:
            found = await session.scalar(select(OrderRecord.id).where(OrderRecord.id == order_id))
        return found is not None

    @log_operation()
    async def get_order(self, order_id: int) -> Optional[OrderDomain]:
        async with self.session_scope() as session:
            stmt = (
                select(OrderRecord)
                .where(OrderRecord.id == order_id)
                .options(
                    selectinload(OrderRecord.line_items),
                    selectinload(OrderRecord.shipments).selectinload(ShipmentRecord.inventory_units),
                    selectinload(OrderRecord.payments),
                    selectinload(OrderRecord.adjustments),
                    selectinload(OrderRecord.ship_address),
                    selectinload(OrderRecord.bill_address),
                )
                .execution_options(populate_existing=True)
            )
            record = (await session.execute(stmt)).scalar_one_or_none()
            if record is None:
                return None
            return self._to_domain(record)

    # === Mapping ===

    @classmethod
    def _to_domain(cls, record: OrderRecord) -> OrderDomain:
        currency = record.currency

        def money(value) -> Money:
            return Money(amount=value, currency=currency)

        adjustments = [
            AdjustmentDomain(
                amount=money(a.amount),
                label=a.label,
                locked=a.locked,
                source=AdjustmentSource(a.source),
                order_id=a.order_id,
                shipment_id=a.shipment_id,
                id=a.id,
            )
            for a in record.adjustments
        ]
        shipment_adjustments = {a.shipment_id: a for a in adjustments if a.shipment_id is not None}

        shipments = [
            ShipmentDomain(
                shipping_method_id=s.shipping_method_id,
                tracking=s.tracking,
                inventory_units=[
                    InventoryUnitDomain(
                        variant_id=u.variant_id, order_id=u.order_id, shipment_id=u.shipment_id, state=u.state, id=u.id
                    )
                    for u in s.inventory_units
                ],
                adjustment=shipment_adjustments.get(s.id),
                order_id=s.order_id,
                id=s.id,
            )
            for s in record.shipments
        ]

        return OrderDomain(
            id=record.id,
            number=record.number,
            currency=currency,
            channel=record.channel,
            state=OrderState(record.state),
            completed_at=ensure_utc_datetime(record.completed_at),
            email=record.email,
            special_instructions=record.special_instructions,
            ship_address=cls._to_address(record.ship_address),
            bill_address=cls._to_address(record.bill_address),
            line_items=[
                LineItemDomain(
                    variant_id=li.variant_id, quantity=li.quantity, price=money(li.price), order_id=li.order_id, id=li.id
                )
                for li in record.line_items
            ],
            shipments=shipments,
            payments=[
                PaymentDomain(
                    amount=money(p.amount),
                    state=PaymentState(p.state),
                    payment_method_id=p.payment_method_id,
                    order_id=p.order_id,
                    id=p.id,
                )
                for p in record.payments
            ],
            adjustments=[a for a in adjustments if a.shipment_id is None],
        )

    @staticmethod
    def _to_address(record: Optional[AddressRecord]) -> Optional[AddressDomain]:
        if record is None:
            return None
        data = {column: getattr(record, column) for column in ADDRESS_COLUMNS}
        return AddressDomain(id=record.id, **data)
