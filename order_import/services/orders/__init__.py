"""
Order import services package.

This package contains the services that rebuild a complete order from an
external payload, following SOLID principles for better maintainability.
"""

from .context import ImportContext
from .orchestrator import OrderImportOrchestrator, create_orchestrator

__all__ = ["ImportContext", "OrderImportOrchestrator", "create_orchestrator"]
