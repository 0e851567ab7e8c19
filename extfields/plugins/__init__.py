"""
Plugin module for the extension field engine.

Provides the ExtensionPlugin contract, the ordered PluginRegistry that
runs the broadcasts, and an example plugin for the AttributeGroup entity.
"""

from .attribute_group import AttributeGroupExtrasPlugin
from .base import (
    ENTRYPOINT_GROUP,
    DuplicateRegistrationError,
    ExtensionPlugin,
    PluginRegistry,
)

__all__ = [
    "ExtensionPlugin",
    "PluginRegistry",
    "DuplicateRegistrationError",
    "ENTRYPOINT_GROUP",
    "AttributeGroupExtrasPlugin",
]
