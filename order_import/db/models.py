"""
SQLAlchemy ORM tables for orders and the reference data they point to.

Timestamps are stored as UTC; SQLite drops the offset, so readers re-attach it.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

MONEY = Numeric(12, 2)


class Base(DeclarativeBase):
    """ORM declarative base."""


# === Reference data ===


class CountryRecord(Base):
    __tablename__ = "countries"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    iso_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    iso: Mapped[Optional[str]] = mapped_column(String(2), nullable=True, index=True)
    iso3: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)

    def __repr__(self) -> str:
        return f"<Country id={self.id} iso={self.iso!r}>"


class StateRecord(Base):
    __tablename__ = "states"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    abbr: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    country_id: Mapped[int] = mapped_column(ForeignKey("countries.id"), index=True)

    def __repr__(self) -> str:
        return f"<State id={self.id} abbr={self.abbr!r} country_id={self.country_id}>"


class VariantRecord(Base):
    __tablename__ = "variants"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    sku: Mapped[str] = mapped_column(String(255), index=True, default="")
    price: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Variant id={self.id} sku={self.sku!r}>"


class ShippingMethodRecord(Base):
    __tablename__ = "shipping_methods"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), index=True)


class PaymentMethodRecord(Base):
    __tablename__ = "payment_methods"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), index=True)


# === Orders ===


class AddressRecord(Base):
    __tablename__ = "addresses"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    firstname: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    lastname: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    company: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address1: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address2: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    zipcode: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    alternative_phone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    state_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    state_id: Mapped[Optional[int]] = mapped_column(ForeignKey("states.id"), nullable=True)
    country_id: Mapped[Optional[int]] = mapped_column(ForeignKey("countries.id"), nullable=True)


class OrderRecord(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    number: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    state: Mapped[str] = mapped_column(String(32), nullable=False, default="cart", index=True)
    channel: Mapped[str] = mapped_column(String(64), nullable=False, default="api")
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    special_instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    ship_address_id: Mapped[Optional[int]] = mapped_column(ForeignKey("addresses.id"), nullable=True)
    bill_address_id: Mapped[Optional[int]] = mapped_column(ForeignKey("addresses.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    ship_address: Mapped[Optional[AddressRecord]] = relationship(foreign_keys=[ship_address_id], lazy="selectin")
    bill_address: Mapped[Optional[AddressRecord]] = relationship(foreign_keys=[bill_address_id], lazy="selectin")

    line_items: Mapped[List["LineItemRecord"]] = relationship(
        back_populates="order", cascade="all, delete-orphan", passive_deletes=True, order_by="LineItemRecord.id"
    )
    shipments: Mapped[List["ShipmentRecord"]] = relationship(
        back_populates="order", cascade="all, delete-orphan", passive_deletes=True, order_by="ShipmentRecord.id"
    )
    payments: Mapped[List["PaymentRecord"]] = relationship(
        back_populates="order", cascade="all, delete-orphan", passive_deletes=True, order_by="PaymentRecord.id"
    )
    adjustments: Mapped[List["AdjustmentRecord"]] = relationship(
        back_populates="order", cascade="all, delete-orphan", passive_deletes=True, order_by="AdjustmentRecord.id"
    )

    def __repr__(self) -> str:
        return f"<Order id={self.id} number={self.number!r} state={self.state}>"


class LineItemRecord(Base):
    __tablename__ = "line_items"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    variant_id: Mapped[int] = mapped_column(ForeignKey("variants.id"), index=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    order: Mapped[OrderRecord] = relationship(back_populates="line_items")


class ShipmentRecord(Base):
    __tablename__ = "shipments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    shipping_method_id: Mapped[Optional[int]] = mapped_column(ForeignKey("shipping_methods.id"), nullable=True)
    tracking: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    order: Mapped[OrderRecord] = relationship(back_populates="shipments")
    inventory_units: Mapped[List["InventoryUnitRecord"]] = relationship(
        back_populates="shipment",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="InventoryUnitRecord.id",
        lazy="selectin",
    )


class InventoryUnitRecord(Base):
    __tablename__ = "inventory_units"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    shipment_id: Mapped[int] = mapped_column(ForeignKey("shipments.id", ondelete="CASCADE"), index=True)
    variant_id: Mapped[int] = mapped_column(ForeignKey("variants.id"))
    state: Mapped[str] = mapped_column(String(32), nullable=False, default="on_hand")

    shipment: Mapped[ShipmentRecord] = relationship(back_populates="inventory_units")


class PaymentRecord(Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    payment_method_id: Mapped[Optional[int]] = mapped_column(ForeignKey("payment_methods.id"), nullable=True)
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=0)
    state: Mapped[str] = mapped_column(String(32), nullable=False)

    order: Mapped[OrderRecord] = relationship(back_populates="payments")


class AdjustmentRecord(Base):
    __tablename__ = "adjustments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # Shipment adjustments keep order_id so deleting an order removes them too
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    shipment_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("shipments.id", ondelete="CASCADE"), nullable=True, index=True
    )
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=0)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    source: Mapped[str] = mapped_column(String(32), nullable=False, default="manual", index=True)

    order: Mapped[OrderRecord] = relationship(back_populates="adjustments")
