"""
Validator services for validating business rules and data integrity.
"""

from .order_validator import AdminOrderAttributes, OrderAttributes, OrderAttributesValidator

__all__ = ["AdminOrderAttributes", "OrderAttributes", "OrderAttributesValidator"]
