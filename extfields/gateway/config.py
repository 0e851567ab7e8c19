"""
Configuration for the extension field HTTP gateway.

Uses pydantic-settings for environment variable loading. List and dict
settings are read as JSON, e.g.
EXTFIELDS_GATEWAY_LOCALES='{"en-GB": 1, "fr-FR": 2}'.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Gateway configuration loaded from environment."""

    # Storage
    db_path: str = Field(default="./extfields-gateway.db", description="SQLite file")
    table_prefix: str = Field(default="", description="Extension table name prefix")
    wal_mode: bool = Field(default=True, description="SQLite WAL mode")
    busy_timeout_ms: int = Field(default=5000, description="SQLite busy timeout")

    # Junction resolution
    locales: dict[str, int] = Field(
        default={"en-GB": 1, "fr-FR": 2},
        description="Locale code -> language id",
    )
    shop_ids: list[int] = Field(
        default=[1],
        description="Known shop ids (empty list accepts any positive id)",
    )

    # Engine
    strict: bool = Field(default=False, description="Reject unknown locales/shops and values")
    plugins: list[str] = Field(
        default=["extfields.plugins:AttributeGroupExtrasPlugin"],
        description="Plugins to load as module:attribute",
    )

    # Gateway settings
    host: str = Field(default="0.0.0.0", description="Gateway bind host")
    port: int = Field(default=8090, description="Gateway bind port")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins",
    )

    model_config = {"env_prefix": "EXTFIELDS_GATEWAY_"}
