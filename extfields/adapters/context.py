"""
Request-scoped attribute slot shared by the request-boundary adapters.

The inbound adapter stashes extracted extension data here; the post-write
adapter reads it back once the native write succeeded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

EXTENSION_DATA_ATTRIBUTE = "_extfields.extension_data"


@dataclass
class RequestContext:
    """Attributes attached to one request.

    Attributes:
        attributes: Attribute name -> value
    """

    attributes: dict[str, Any] = field(default_factory=dict)

    def has(self, name: str) -> bool:
        return name in self.attributes

    def get(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self.attributes[name] = value

    def pop(self, name: str, default: Any = None) -> Any:
        return self.attributes.pop(name, default)

    @property
    def extension_data(self) -> dict[str, Any] | None:
        """Extension data stashed by the inbound adapter, if any."""
        return self.attributes.get(EXTENSION_DATA_ATTRIBUTE)
