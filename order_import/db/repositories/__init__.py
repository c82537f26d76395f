"""
SQLAlchemy repositories implementing the order import persistence contracts.
"""

from .base import BaseRepository, log_operation
from .order_repository import OrderRepository
from .reference_repository import ReferenceRepository

__all__ = ["BaseRepository", "OrderRepository", "ReferenceRepository", "log_operation"]
