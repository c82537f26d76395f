"""
ReferenceRepository - read-only lookups over geography and catalog tables.

Implements ``IReferenceRepository``. Every finder returns zero or one domain
object; the lowest ID wins when several rows match.
"""

import logging
from typing import Any, Optional

from sqlalchemy import select

from order_import.db.models import (
    CountryRecord,
    PaymentMethodRecord,
    ShippingMethodRecord,
    StateRecord,
    VariantRecord,
)
from order_import.db.repositories.base import BaseRepository, log_operation
from order_import.domain.models import (
    CountryDomain,
    PaymentMethodDomain,
    ShippingMethodDomain,
    StateDomain,
    VariantDomain,
)
from order_import.domain.value_objects import Money
from order_import.utils.coercion import ensure_utc_datetime

logger = logging.getLogger(__name__)


class ReferenceRepository(BaseRepository):
    """Repository for countries, states, variants and shipping/payment methods."""

    @log_operation()
    async def find_country(self, criteria: dict[str, Any]) -> Optional[CountryDomain]:
        async with self.session_scope() as session:
            stmt = select(CountryRecord).filter_by(**criteria).order_by(CountryRecord.id).limit(1)
            record = (await session.execute(stmt)).scalar_one_or_none()

        if record is None:
            return None
        return CountryDomain(id=record.id, name=record.name, iso_name=record.iso_name, iso=record.iso, iso3=record.iso3)

    @log_operation()
    async def find_state(self, criteria: dict[str, Any]) -> Optional[StateDomain]:
        async with self.session_scope() as session:
            stmt = select(StateRecord).filter_by(**criteria).order_by(StateRecord.id).limit(1)
            record = (await session.execute(stmt)).scalar_one_or_none()

        if record is None:
            return None
        return StateDomain(id=record.id, name=record.name, country_id=record.country_id, abbr=record.abbr)

    @log_operation()
    async def find_active_variant_by_sku(self, sku: str) -> Optional[VariantDomain]:
        async with self.session_scope() as session:
            stmt = (
                select(VariantRecord)
                .where(VariantRecord.sku == sku, VariantRecord.deleted_at.is_(None))
                .order_by(VariantRecord.id)
                .limit(1)
            )
            record = (await session.execute(stmt)).scalar_one_or_none()

        return self._to_variant(record)

    @log_operation()
    async def get_variant(self, variant_id: int) -> Optional[VariantDomain]:
        async with self.session_scope() as session:
            record = await session.get(VariantRecord, variant_id)
        return self._to_variant(record)

    @log_operation()
    async def find_shipping_method_by_name(self, name: str) -> Optional[ShippingMethodDomain]:
        async with self.session_scope() as session:
            stmt = (
                select(ShippingMethodRecord)
                .where(ShippingMethodRecord.name == name)
                .order_by(ShippingMethodRecord.id)
                .limit(1)
            )
            record = (await session.execute(stmt)).scalar_one_or_none()

        if record is None:
            return None
        return ShippingMethodDomain(id=record.id, name=record.name)

    @log_operation()
    async def find_payment_method_by_name(self, name: str) -> Optional[PaymentMethodDomain]:
        async with self.session_scope() as session:
            stmt = (
                select(PaymentMethodRecord)
                .where(PaymentMethodRecord.name == name)
                .order_by(PaymentMethodRecord.id)
                .limit(1)
            )
            record = (await session.execute(stmt)).scalar_one_or_none()

        if record is None:
            return None
        return PaymentMethodDomain(id=record.id, name=record.name)

    @staticmethod
    def _to_variant(record: Optional[VariantRecord]) -> Optional[VariantDomain]:
        if record is None:
            return None
        return VariantDomain(
            id=record.id,
            sku=record.sku,
            price=Money(amount=record.price, currency=record.currency),
            deleted_at=ensure_utc_datetime(record.deleted_at),
        )
