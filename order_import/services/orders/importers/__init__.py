"""Importers rebuilding the parts of an order from payload sections."""

from .adjustments import AdjustmentImporter
from .line_items import LineItemImporter
from .payments import PaymentImporter
from .shipments import ShipmentImporter

__all__ = ["AdjustmentImporter", "LineItemImporter", "PaymentImporter", "ShipmentImporter"]
