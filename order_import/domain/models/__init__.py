"""
Domain models for business entities.

These models represent core business concepts and contain
business logic and invariants.
"""

from .address import AddressDomain
from .adjustment import AdjustmentDomain, AdjustmentSource
from .catalog import PaymentMethodDomain, ShippingMethodDomain, VariantDomain
from .geography import CountryDomain, StateDomain
from .line_item import LineItemDomain
from .order import OrderDomain, OrderState, generate_order_number
from .payment import PaymentDomain, PaymentState
from .shipment import InventoryUnitDomain, ShipmentDomain

__all__ = [
    "AddressDomain",
    "AdjustmentDomain",
    "AdjustmentSource",
    "CountryDomain",
    "InventoryUnitDomain",
    "LineItemDomain",
    "OrderDomain",
    "OrderState",
    "PaymentDomain",
    "PaymentMethodDomain",
    "PaymentState",
    "ShipmentDomain",
    "ShippingMethodDomain",
    "StateDomain",
    "VariantDomain",
    "generate_order_number",
]
