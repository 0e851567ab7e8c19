"""
SQLite backing store for extension tables.

This module manages the SQLite database holding every plugin-owned
extension table. It provides:
- Per-operation connections configured from StorageConfig
- Transactions wrapping a batch of statements
- Installation and removal of a schema's tables

Invariants:
    - A batch of statements is atomic (single transaction)
    - sqlite3 errors surface as ExtensionStorageError
    - Table names always carry the configured prefix

How to change safely:
    - Keep statement text free of values; bind everything
    - Test with WAL mode both on and off
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

from ..errors import ExtensionStorageError
from ..schema.types import EntitySchema, TableSpec
from .ddl import create_table_statements, drop_table_statements
from .query import Statement

if TYPE_CHECKING:
    from ..config import StorageConfig

logger = logging.getLogger(__name__)


class ExtensionStore:
    """SQLite database holding extension rows.

    Thread safety:
        Each operation opens its own connection.
        SQLite handles concurrent access via WAL mode.

    Example:
        >>> store = ExtensionStore("/var/lib/extfields/extensions.db")
        >>> store.install_schema(registry.get_schema("AttributeGroup"))
    """

    def __init__(
        self,
        db_path: str,
        table_prefix: str = "",
        wal_mode: bool = True,
        busy_timeout_ms: int = 5000,
    ) -> None:
        """Initialize the store.

        Args:
            db_path: SQLite database file
            table_prefix: Prefix prepended to every extension table name
            wal_mode: Enable SQLite WAL mode
            busy_timeout_ms: SQLite busy timeout
        """
        self.db_path = Path(db_path)
        self.table_prefix = table_prefix
        self.wal_mode = wal_mode
        self.busy_timeout_ms = busy_timeout_ms

    @classmethod
    def from_config(cls, config: StorageConfig) -> ExtensionStore:
        """Create a store from storage configuration."""
        return cls(
            db_path=config.db_path,
            table_prefix=config.table_prefix,
            wal_mode=config.wal_mode,
            busy_timeout_ms=config.busy_timeout_ms,
        )

    def table_name(self, table: TableSpec) -> str:
        """Physical name of an extension table."""
        return self.table_prefix + table.storage_table

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Open a configured connection.

        Raises:
            ExtensionStorageError: If the database cannot be opened
        """
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(
                str(self.db_path),
                timeout=self.busy_timeout_ms / 1000.0,
                isolation_level=None,  # Autocommit by default, explicit transactions
            )
        except sqlite3.Error as e:
            raise ExtensionStorageError(f"Cannot open extension database {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row

        try:
            conn.execute(f"PRAGMA busy_timeout = {int(self.busy_timeout_ms)}")
            if self.wal_mode:
                conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("PRAGMA synchronous = NORMAL")
            yield conn
        finally:
            conn.close()

    def execute(self, statements: Iterable[Statement | str]) -> int:
        """Run statements in one transaction.

        Returns:
            Number of statements executed

        Raises:
            ExtensionStorageError: If any statement fails (nothing is kept)
        """
        count = 0
        with self._get_connection() as conn:
            try:
                conn.execute("BEGIN IMMEDIATE")
                for statement in statements:
                    if isinstance(statement, Statement):
                        conn.execute(statement.sql, statement.params)
                    else:
                        conn.execute(statement)
                    count += 1
                conn.execute("COMMIT")
            except sqlite3.Error as e:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise ExtensionStorageError(f"Extension write failed: {e}") from e
        return count

    def fetch_all(self, statement: Statement) -> list[dict[str, Any]]:
        """Run a query and return rows as dictionaries.

        Raises:
            ExtensionStorageError: If the query fails
        """
        with self._get_connection() as conn:
            try:
                cursor = conn.execute(statement.sql, statement.params)
                return [dict(row) for row in cursor.fetchall()]
            except sqlite3.Error as e:
                raise ExtensionStorageError(f"Extension read failed: {e}") from e

    def install_schema(self, schema: EntitySchema) -> int:
        """Create every table of schema if missing.

        Returns:
            Number of tables ensured
        """
        count = self.execute(create_table_statements(schema, self.table_prefix))
        logger.info(f"Installed {count} extension tables for {schema.entity_type}")
        return count

    def uninstall_schema(self, schema: EntitySchema) -> int:
        """Drop every table of schema."""
        count = self.execute(drop_table_statements(schema, self.table_prefix))
        logger.info(f"Dropped {count} extension tables for {schema.entity_type}")
        return count

    def table_exists(self, table: TableSpec) -> bool:
        """Whether a table of the schema is installed."""
        rows = self.fetch_all(
            Statement(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
                (self.table_name(table),),
            )
        )
        return bool(rows)
