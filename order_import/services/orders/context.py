"""Caller context consumed by the import (authorization is decided upstream)."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ImportContext:
    """
    Who is importing the order.

    Attributes:
        user_id: Caller ID, used for logging only
        roles: Roles granted to the caller by the authorization layer
        admin_role: Role that unlocks protected order attributes
    """

    user_id: int | str | None = None
    roles: frozenset[str] = field(default_factory=frozenset)
    admin_role: str = "admin"

    @property
    def is_admin(self) -> bool:
        return self.admin_role in self.roles

    @classmethod
    def for_roles(cls, *roles: str, user_id: int | str | None = None, admin_role: str = "admin") -> "ImportContext":
        return cls(user_id=user_id, roles=frozenset(roles), admin_role=admin_role)
