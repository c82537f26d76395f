"""
Módulo de acceso a base de datos del importador de órdenes.

- ConnDB: Gestión exclusiva de conexiones
- Repositorios: operaciones de lectura y escritura sobre órdenes y referencias
"""

from order_import.db.connection import ConnDB, close_database, get_db_connection
from order_import.db.repositories import OrderRepository, ReferenceRepository

__all__ = [
    "ConnDB",
    "OrderRepository",
    "ReferenceRepository",
    "close_database",
    "get_db_connection",
]
