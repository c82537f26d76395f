"""Geographic reference data used to normalize addresses."""

from dataclasses import dataclass


@dataclass
class CountryDomain:
    """
    Country reference record.

    Attributes:
        id: Country ID
        name: Display name ("United States")
        iso_name: Upper-case ISO name ("UNITED STATES")
        iso: ISO 3166-1 alpha-2 code ("US")
        iso3: ISO 3166-1 alpha-3 code ("USA")
    """

    id: int
    name: str
    iso_name: str | None = None
    iso: str | None = None
    iso3: str | None = None


@dataclass
class StateDomain:
    """State/province reference record, always scoped to a country."""

    id: int
    name: str
    country_id: int
    abbr: str | None = None
