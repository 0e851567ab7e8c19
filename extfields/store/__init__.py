"""
Storage module for extension data.

Provides the SQLite ExtensionStore, the identifier-safe query builder,
DDL generation for extension tables and the PersistenceService.
"""

from .ddl import create_table_statements, drop_table_statements
from .persistence import PersistenceService
from .query import Statement, quote_identifier, select_where, upsert
from .sqlite import ExtensionStore

__all__ = [
    "ExtensionStore",
    "PersistenceService",
    "Statement",
    "quote_identifier",
    "upsert",
    "select_where",
    "create_table_statements",
    "drop_table_statements",
]
