"""AddressNormalizer service - SRP compliance."""

import logging
from typing import Any, Mapping

from order_import.services.orders.resolvers import ReferenceDataResolver
from order_import.utils.error_handler import AddressResolutionException

logger = logging.getLogger(__name__)


def _has_value(address: Mapping[str, Any], key: str) -> bool:
    value = address.get(key)
    return value is not None and value != ""


class AddressNormalizer:
    """
    Rewrites inbound address payloads into the canonical form accepted by
    order creation: ``country`` → ``country_id`` and ``state`` → ``state_id``
    (or ``state_name`` when the state has no reference record).
    """

    def __init__(self, reference_resolver: ReferenceDataResolver):
        """
        Args:
            reference_resolver: Country/state lookup service
        """
        self.reference_resolver = reference_resolver

    async def normalize(self, address: Mapping[str, Any] | None) -> dict[str, Any] | None:
        """
        Return a normalized copy of ``address`` (``None`` stays ``None``).

        Raises:
            AddressResolutionException: If the country cannot be resolved
        """
        if address is None:
            return None

        normalized = dict(address)
        await self._ensure_country_id(normalized)
        await self._ensure_state_id(normalized)
        return normalized

    async def _ensure_country_id(self, address: dict[str, Any]) -> None:
        if _has_value(address, "country_id") or address.get("country") is None:
            # A known ID wins; the descriptor is not an address attribute
            address.pop("country", None)
            return

        descriptor = address.pop("country")
        try:
            address["country_id"] = await self.reference_resolver.resolve_country_id(descriptor)
        except Exception as e:
            criteria = getattr(e, "criteria", None) or _descriptor_dict(descriptor)
            logger.warning(f"Could not resolve address country {criteria}: {e}")
            raise AddressResolutionException("country", criteria, e) from e

    async def _ensure_state_id(self, address: dict[str, Any]) -> None:
        if _has_value(address, "state_id") or address.get("state") is None:
            address.pop("state", None)
            return

        descriptor = address.pop("state")
        try:
            resolution = await self.reference_resolver.resolve_state(descriptor, address.get("country_id"))
        except Exception as e:
            criteria = {**_descriptor_dict(descriptor), "country_id": address.get("country_id")}
            logger.warning(f"Could not resolve address state {criteria}: {e}")
            raise AddressResolutionException("state", criteria, e) from e

        if resolution.resolved:
            address["state_id"] = resolution.state_id
        else:
            address["state_name"] = resolution.state_name


def _descriptor_dict(descriptor: Any) -> dict[str, Any]:
    if isinstance(descriptor, Mapping):
        return dict(descriptor)
    return {"value": descriptor}
