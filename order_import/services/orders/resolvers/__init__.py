"""Resolvers turning payload descriptors into persisted references."""

from .reference_resolver import ReferenceDataResolver, StateResolution
from .variant_resolver import VariantResolver

__all__ = ["ReferenceDataResolver", "StateResolution", "VariantResolver"]
