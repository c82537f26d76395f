"""ReferenceDataResolver service - SRP compliance.

Resolves free-form country/state descriptors coming from API payloads to
reference-data identifiers.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from order_import.services.orders.interfaces import IReferenceRepository
from order_import.utils.error_handler import ReferenceNotFoundException

logger = logging.getLogger(__name__)


def _as_is(value: str) -> str:
    return value


def _upcase(value: str) -> str:
    return value.upper()


# Evaluated in order; only the first present field is used.
COUNTRY_LOOKUP_FIELDS: tuple[tuple[str, Callable[[str], str]], ...] = (
    ("name", _as_is),
    ("iso_name", _upcase),
    ("iso", _upcase),
    ("iso3", _upcase),
)

STATE_LOOKUP_FIELDS: tuple[tuple[str, Callable[[str], str]], ...] = (
    ("name", _as_is),
    ("abbr", _upcase),
)


@dataclass(frozen=True)
class StateResolution:
    """Outcome of a state lookup: a reference ID, or the free-text name to store."""

    state_id: int | None = None
    state_name: str | None = None

    @property
    def resolved(self) -> bool:
        return self.state_id is not None


def build_search(
    descriptor: Mapping[str, Any] | str, lookup_fields: tuple[tuple[str, Callable[[str], str]], ...]
) -> dict[str, str]:
    """
    Build search criteria from the first present descriptor field.

    A bare string is treated as ``{"name": descriptor}``. Missing, ``None``
    and blank values are skipped.
    """
    if isinstance(descriptor, str):
        descriptor = {"name": descriptor}

    for field_name, transform in lookup_fields:
        value = descriptor.get(field_name)
        if value is None:
            continue
        value = str(value).strip()
        if value:
            return {field_name: transform(value)}
    return {}


class ReferenceDataResolver:
    """Resolves country and state descriptors (SRP: reference data only)."""

    def __init__(self, reference_repo: IReferenceRepository):
        """
        Initialize with SOLID dependencies (DIP).

        Args:
            reference_repo: Repository for reference data lookups
        """
        self.reference_repo = reference_repo

    async def resolve_country_id(self, descriptor: Mapping[str, Any] | str) -> int:
        """
        Resolve a country descriptor to a country ID.

        Args:
            descriptor: Map with one of name, iso_name, iso, iso3

        Returns:
            int: Country ID

        Raises:
            ReferenceNotFoundException: If no country matches
        """
        search = build_search(descriptor, COUNTRY_LOOKUP_FIELDS)
        if not search:
            raise ReferenceNotFoundException(
                "country", search, message=f"Country descriptor has no usable field: {descriptor}"
            )

        country = await self.reference_repo.find_country(search)
        if country is None:
            raise ReferenceNotFoundException("country", search)

        logger.debug(f"Resolved country {search} → {country.id}")
        return country.id

    async def resolve_state(self, descriptor: Mapping[str, Any] | str, country_id: int | None) -> StateResolution:
        """
        Resolve a state descriptor within ``country_id``.

        Unlike countries, an unknown state is not an error: the searched value
        is returned as ``state_name`` so it can be stored as free text.

        Args:
            descriptor: Map with one of name, abbr
            country_id: Already resolved country

        Returns:
            StateResolution: Reference ID or free-text name
        """
        search = build_search(descriptor, STATE_LOOKUP_FIELDS)
        if not search:
            logger.debug(f"State descriptor has no usable field: {descriptor}")
            return StateResolution()

        criteria = {**search, "country_id": country_id}
        state = await self.reference_repo.find_state(criteria)
        if state is not None:
            logger.debug(f"Resolved state {criteria} → {state.id}")
            return StateResolution(state_id=state.id)

        state_name = search.get("name") or search.get("abbr")
        logger.info(f"No state record for {criteria}, keeping free-text state name '{state_name}'")
        return StateResolution(state_name=state_name)
