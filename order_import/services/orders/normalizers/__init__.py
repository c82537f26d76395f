"""Payload normalizers applied before an order is created."""

from .address_normalizer import AddressNormalizer

__all__ = ["AddressNormalizer"]
