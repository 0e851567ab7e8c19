"""
Schema CLI tool for extension fields.

This tool inspects and installs the extension tables plugins declare:
- show: Print the discovered schema of an entity type as JSON
- ddl: Print the CREATE TABLE statements
- install: Create the tables in the configured SQLite file
- uninstall: Drop them

Usage:
    extfields-schema --plugin extfields.plugins:AttributeGroupExtrasPlugin show AttributeGroup
    extfields-schema ddl AttributeGroup
    EXTFIELDS_DB_PATH=./ext.db extfields-schema install AttributeGroup

Invariants:
    - An entity type without extensions exits with code 1
    - JSON output is deterministic (sorted keys)

How to change safely:
    - Add new commands, don't modify existing ones
    - Keep output format stable for scripting
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import Sequence

from ..config import EngineConfig, setup_logging
from ..plugins.base import PluginRegistry
from ..schema.registry import ExtensionRegistry
from ..schema.types import EntitySchema
from ..store.ddl import create_table_statements, drop_table_statements
from ..store.sqlite import ExtensionStore

logger = logging.getLogger(__name__)


class SchemaCLI:
    """CLI tool for extension schema management.

    Example:
        >>> cli = SchemaCLI(registry)
        >>> print(cli.show("AttributeGroup"))
    """

    def __init__(self, registry: ExtensionRegistry, table_prefix: str = "") -> None:
        self.registry = registry
        self.table_prefix = table_prefix

    def schema(self, entity_type: str) -> EntitySchema | None:
        """Discovered schema, or None if entity_type has no extensions."""
        schema = self.registry.get_schema(entity_type)
        return schema if schema.has_extensions else None

    def show(self, schema: EntitySchema) -> str:
        """Export schema to JSON."""
        output = {"entityType": schema.entity_type, "schema": schema.to_dict()}
        return json.dumps(output, indent=2, sort_keys=True)

    def ddl(self, schema: EntitySchema, drop: bool = False) -> str:
        """CREATE (or DROP) statements, one per table."""
        if drop:
            statements = drop_table_statements(schema, self.table_prefix)
        else:
            statements = create_table_statements(schema, self.table_prefix)
        return ";\n\n".join(statements) + ";"


def _build_registry(plugin_paths: Sequence[str]) -> ExtensionRegistry:
    """Registry over the given plugin paths, or the installed entry points."""
    plugins = PluginRegistry()
    if plugin_paths:
        for path in plugin_paths:
            plugins.load_path(path)
    else:
        plugins.load_entrypoints()
    return ExtensionRegistry(plugins)


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point for the schema tool."""
    parser = argparse.ArgumentParser(description="Extension field schema tool")
    parser.add_argument(
        "--plugin",
        "-p",
        action="append",
        default=[],
        help="Plugin to load as module:attribute (repeatable; default: installed entry points)",
    )
    parser.add_argument("--db-path", help="SQLite file (default: EXTFIELDS_DB_PATH)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("show", "Print the discovered schema as JSON"),
        ("ddl", "Print CREATE TABLE statements"),
        ("install", "Create the extension tables"),
        ("uninstall", "Drop the extension tables"),
    ):
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument("entity_type", help="Entity type, e.g. AttributeGroup")
        if name == "ddl":
            command_parser.add_argument(
                "--drop", action="store_true", help="Print DROP statements instead"
            )

    args = parser.parse_args(argv)

    config = EngineConfig.from_env()
    if args.db_path:
        config = replace(config, storage=replace(config.storage, db_path=args.db_path))
    setup_logging(config)

    cli = SchemaCLI(_build_registry(args.plugin), table_prefix=config.storage.table_prefix)
    schema = cli.schema(args.entity_type)
    if schema is None:
        print(f"No extension fields declared for {args.entity_type}", file=sys.stderr)
        return 1

    if args.command == "show":
        print(cli.show(schema))
    elif args.command == "ddl":
        print(cli.ddl(schema, drop=args.drop))
    elif args.command == "install":
        count = ExtensionStore.from_config(config.storage).install_schema(schema)
        print(f"Installed {count} table(s) into {config.storage.db_path}")
    elif args.command == "uninstall":
        count = ExtensionStore.from_config(config.storage).uninstall_schema(schema)
        print(f"Dropped {count} table(s) from {config.storage.db_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
