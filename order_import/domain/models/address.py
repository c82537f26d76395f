"""
Address domain model.

Country and state references are resolved from free-text descriptors by the
address normalizer before an address reaches this model.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any


@dataclass
class AddressDomain:
    """
    Postal address attached to an order as shipping or billing address.

    ``state_id`` is set when the state matched a reference record; otherwise
    ``state_name`` keeps the free-text value supplied by the caller.
    """

    country_id: int | None = None
    state_id: int | None = None
    state_name: str | None = None
    firstname: str | None = None
    lastname: str | None = None
    company: str | None = None
    address1: str | None = None
    address2: str | None = None
    city: str | None = None
    zipcode: str | None = None
    phone: str | None = None
    alternative_phone: str | None = None
    id: int | None = None

    @property
    def full_name(self) -> str:
        return f"{self.firstname or ''} {self.lastname or ''}".strip()

    def copy_without_id(self) -> "AddressDomain":
        """Clone for reuse as another address of the same order."""
        data = self.to_dict()
        data.pop("id")
        return AddressDomain(**data)

    def to_dict(self) -> dict[str, Any]:
        """Convert address to dictionary for persistence."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AddressDomain":
        """Create address from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})
