"""
Módulo de acceso a base de datos para Order Limits Manager.

Este módulo proporciona acceso unificado a la base de datos
con separación clara de responsabilidades:

- ConnDB: Gestión exclusiva de conexiones y esquema
- models: Modelos ORM (shops, rules, settings, prep_shipments)
- repositories: Operaciones de negocio por tabla
"""

from order_limits.db.connection import (
    ConnDB,
    close_database,
    get_db_connection,
    initialize_database,
)

__all__ = [
    # Clase de conexión
    "ConnDB",
    "get_db_connection",
    # Funciones de gestión de conexión
    "initialize_database",
    "close_database",
]
