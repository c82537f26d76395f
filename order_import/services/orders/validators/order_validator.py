"""
OrderAttributesValidator service for the order attributes applied after import.

Two explicit attribute schemas exist: ``OrderAttributes`` (writable by any
caller) and ``AdminOrderAttributes`` (adds protected fields). The schema is
selected from the caller's capability, never from framework magic.
"""

import logging
import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from order_import.domain.models import OrderDomain, OrderState
from order_import.services.orders.context import ImportContext
from order_import.utils.error_handler import ValidationException

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class AddressAttributes(BaseModel):
    """Normalized address payload (country/state already resolved)."""

    model_config = ConfigDict(extra="forbid")

    country_id: Optional[int] = None
    state_id: Optional[int] = None
    state_name: Optional[str] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    company: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    zipcode: Optional[str] = None
    phone: Optional[str] = None
    alternative_phone: Optional[str] = None
    id: Optional[int] = None


class OrderAttributes(BaseModel):
    """Attributes any API caller may set on an imported order."""

    model_config = ConfigDict(extra="forbid")

    email: Optional[str] = None
    special_instructions: Optional[str] = None
    currency: Optional[str] = None
    use_billing: Optional[bool] = None
    ship_address: Optional[AddressAttributes] = None
    bill_address: Optional[AddressAttributes] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        """Valida el formato del email."""
        if v is not None and not EMAIL_PATTERN.match(v):
            raise ValueError(f"Invalid email format: {v}")
        return v

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        if v is not None and (len(v) != 3 or not v.isalpha()):
            raise ValueError(f"Invalid currency code: {v}")
        return v.upper() if v else v


class AdminOrderAttributes(OrderAttributes):
    """Attributes only administrators may set (protected fields included)."""

    number: Optional[str] = None
    state: Optional[OrderState] = None
    channel: Optional[str] = None


RESTRICTED_FIELDS = frozenset(OrderAttributes.model_fields)
PROTECTED_FIELDS = frozenset(AdminOrderAttributes.model_fields) - RESTRICTED_FIELDS


class OrderAttributesValidator:
    """
    Validates the remaining top-level payload attributes and the resulting order.

    Responsibilities:
    - Select the attribute schema from the caller's privileges
    - Drop (or reject) protected attributes sent by non-admins
    - Reject unknown attributes
    - Validate the order model after assignment
    """

    def __init__(self, reject_protected: bool = False):
        """
        Args:
            reject_protected: Raise instead of dropping protected attributes
                sent by non-admin callers
        """
        self.reject_protected = reject_protected

    def sanitize(self, attributes: dict[str, Any], context: ImportContext) -> dict[str, Any]:
        """
        Validate ``attributes`` against the schema allowed for ``context``.

        Returns:
            dict: Only the attributes the caller supplied, validated and coerced

        Raises:
            ValidationException: On unknown or invalid attributes, or protected
                attributes when rejection is configured
        """
        attributes = dict(attributes)

        unknown = sorted(set(attributes) - RESTRICTED_FIELDS - PROTECTED_FIELDS)
        if unknown:
            raise ValidationException(
                message=f"Unknown order attributes: {', '.join(unknown)}",
                field=unknown[0],
                invalid_value=attributes[unknown[0]],
            )

        schema: type[OrderAttributes] = OrderAttributes
        if context.is_admin:
            schema = AdminOrderAttributes
        else:
            protected = sorted(set(attributes) & PROTECTED_FIELDS)
            if protected and self.reject_protected:
                raise ValidationException(
                    message=f"Can't mass-assign protected attributes: {', '.join(protected)}",
                    field=protected[0],
                    invalid_value=attributes[protected[0]],
                )
            for name in protected:
                logger.warning(f"Ignoring protected order attribute '{name}' from non-admin caller {context.user_id}")
                attributes.pop(name)

        try:
            validated = schema.model_validate(attributes)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ())) or "order"
            raise ValidationException(
                message=f"Invalid order attributes: {first.get('msg')}",
                field=field,
                invalid_value=first.get("input"),
            ) from e

        return validated.model_dump(exclude_unset=True)

    def validate_order(self, order: OrderDomain) -> None:
        """
        Validate the order model after attributes were applied.

        Raises:
            ValidationException: If the order is not valid
        """
        if order.email is not None and not EMAIL_PATTERN.match(order.email):
            raise ValidationException(message="Email is invalid", field="email", invalid_value=order.email)

        for name in ("ship_address", "bill_address"):
            address = getattr(order, name)
            if address is not None and address.country_id is None:
                raise ValidationException(
                    message=f"{name} country can't be blank",
                    field=f"{name}.country_id",
                    invalid_value=None,
                )

        if not order.number:
            raise ValidationException(message="Number can't be blank", field="number", invalid_value=order.number)

        logger.debug(f"Order {order.number} validation passed")
