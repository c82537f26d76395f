"""VariantResolver service - SRP compliance."""

import logging
from typing import Any, Mapping

from order_import.domain.models import VariantDomain
from order_import.services.orders.interfaces import IReferenceRepository
from order_import.utils.error_handler import VariantNotFoundException

logger = logging.getLogger(__name__)


def _present(value: Any) -> bool:
    return value is not None and not (isinstance(value, str) and not value.strip())


class VariantResolver:
    """Resolves variant references of line items and inventory units (SRP: variants only)."""

    def __init__(self, reference_repo: IReferenceRepository):
        """
        Initialize with SOLID dependencies (DIP).

        Args:
            reference_repo: Repository for catalog lookups
        """
        self.reference_repo = reference_repo

    async def resolve(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """
        Return a copy of ``payload`` that carries a ``variant_id``.

        When ``variant_id`` is already present the copy is returned unchanged.
        Otherwise the active variant with exactly the given ``sku`` is looked
        up; its ID replaces the ``sku`` key.

        Raises:
            VariantNotFoundException: If no active variant has that SKU
        """
        resolved = dict(payload)
        if _present(resolved.get("variant_id")):
            return resolved

        sku = resolved.get("sku")
        if not _present(sku):
            raise VariantNotFoundException(
                {"sku": sku}, message=f"Line item has neither variant_id nor sku: {dict(payload)}"
            )

        variant = await self.reference_repo.find_active_variant_by_sku(str(sku))
        if variant is None:
            raise VariantNotFoundException({"sku": sku})

        logger.debug(f"Resolved SKU {sku} → variant {variant.id}")
        resolved["variant_id"] = variant.id
        resolved.pop("sku", None)
        return resolved

    async def get_variant(self, variant_id: Any) -> VariantDomain:
        """
        Load the variant referenced by a resolved payload.

        Raises:
            VariantNotFoundException: If the variant does not exist
        """
        try:
            lookup_id = int(variant_id)
        except (TypeError, ValueError) as e:
            raise VariantNotFoundException({"id": variant_id}) from e

        variant = await self.reference_repo.get_variant(lookup_id)
        if variant is None:
            raise VariantNotFoundException({"id": lookup_id})
        return variant
