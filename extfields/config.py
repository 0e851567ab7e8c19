"""
Configuration management for the extension field engine.

All configuration is done via environment variables.
This module provides typed configuration classes with validation.

Invariants:
    - All settings have sensible defaults for local development
    - Strict mode is off unless explicitly enabled

How to change safely:
    - Add new settings with defaults that maintain backward compatibility
    - Keep the environment variable names stable; deployments depend on them
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

import json_log_formatter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageConfig:
    """Extension storage configuration.

    Attributes:
        db_path: SQLite database file holding the extension tables
        table_prefix: Prefix prepended to every extension table name
        wal_mode: SQLite WAL mode enabled
        busy_timeout_ms: SQLite busy timeout in milliseconds
    """

    db_path: str = "/var/lib/extfields/extensions.db"
    table_prefix: str = ""
    wal_mode: bool = True
    busy_timeout_ms: int = 5000

    @classmethod
    def from_env(cls) -> StorageConfig:
        """Load configuration from environment variables."""
        return cls(
            db_path=os.getenv("EXTFIELDS_DB_PATH", "/var/lib/extfields/extensions.db"),
            table_prefix=os.getenv("EXTFIELDS_TABLE_PREFIX", ""),
            wal_mode=os.getenv("SQLITE_WAL_MODE", "true").lower() == "true",
            busy_timeout_ms=int(os.getenv("SQLITE_BUSY_TIMEOUT_MS", "5000")),
        )


@dataclass(frozen=True)
class ObservabilityConfig:
    """Logging configuration.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Log format (json, text)
    """

    log_level: str = "INFO"
    log_format: str = "json"

    @classmethod
    def from_env(cls) -> ObservabilityConfig:
        """Load configuration from environment variables."""
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "json"),
        )


@dataclass
class EngineConfig:
    """Complete engine configuration.

    Attributes:
        storage: Extension storage configuration
        observability: Logging configuration
        strict: Raise on unresolvable junctions and invalid values instead
            of silently dropping them
    """

    storage: StorageConfig = field(default_factory=StorageConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)
    strict: bool = False

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Load complete configuration from environment variables.

        Raises:
            ValueError: If configuration is invalid.
        """
        config = cls(
            storage=StorageConfig.from_env(),
            observability=ObservabilityConfig.from_env(),
            strict=os.getenv("EXTFIELDS_STRICT", "false").lower() == "true",
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Validate configuration consistency.

        Raises:
            ValueError: If configuration is invalid.
        """
        if not self.storage.db_path:
            raise ValueError("EXTFIELDS_DB_PATH must not be empty")
        if self.storage.busy_timeout_ms < 0:
            raise ValueError("SQLITE_BUSY_TIMEOUT_MS must be >= 0")
        if self.observability.log_format not in ("json", "text"):
            raise ValueError(
                f"Invalid LOG_FORMAT '{self.observability.log_format}'. Must be one of: json, text"
            )

        if not os.path.exists(os.path.dirname(self.storage.db_path) or "."):
            logger.warning(
                f"Database directory does not exist for {self.storage.db_path}. "
                "It will be created on first write."
            )

    def log_config(self) -> None:
        """Log configuration."""
        logger.info(
            "Engine configuration loaded",
            extra={
                "db_path": self.storage.db_path,
                "table_prefix": self.storage.table_prefix,
                "wal_mode": self.storage.wal_mode,
                "strict": self.strict,
                "log_level": self.observability.log_level,
            },
        )


def setup_logging(config: EngineConfig) -> None:
    """Configure root logging from configuration.

    Args:
        config: Engine configuration
    """
    level = getattr(logging, config.observability.log_level.upper(), logging.INFO)

    if config.observability.log_format == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]
