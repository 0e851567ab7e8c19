"""
In-memory native AttributeGroup resource.

Stands in for the host application's own entity handling. Its request
models forbid unknown keys, so a payload only validates once the
inbound adapter has removed the extension fields.
"""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

ENTITY_TYPE = "AttributeGroup"


class AttributeGroupCreate(BaseModel):
    """Native create payload."""

    model_config = ConfigDict(extra="forbid")

    names: dict[str, str] = Field(..., description="Locale code -> name")
    publicNames: dict[str, str] = Field(default_factory=dict)
    type: str = Field(default="select")
    shopIds: list[int] = Field(default_factory=list)


class AttributeGroupUpdate(BaseModel):
    """Native partial update payload."""

    model_config = ConfigDict(extra="forbid")

    names: dict[str, str] | None = None
    publicNames: dict[str, str] | None = None
    type: str | None = None
    shopIds: list[int] | None = None


@dataclass
class AttributeGroup:
    """Native entity as returned by the repository."""

    attributeGroupId: int
    names: dict[str, str]
    publicNames: dict[str, str] = field(default_factory=dict)
    type: str = "select"
    shopIds: list[int] = field(default_factory=list)
    position: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class AttributeGroupRepository:
    """Thread-safe in-memory store of attribute groups."""

    def __init__(self) -> None:
        self._groups: dict[int, AttributeGroup] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def create(self, command: AttributeGroupCreate) -> AttributeGroup:
        with self._lock:
            group = AttributeGroup(
                attributeGroupId=self._next_id,
                names=dict(command.names),
                publicNames=dict(command.publicNames) or dict(command.names),
                type=command.type,
                shopIds=list(command.shopIds),
                position=len(self._groups),
            )
            self._groups[group.attributeGroupId] = group
            self._next_id += 1
            return group

    def get(self, group_id: int) -> AttributeGroup | None:
        with self._lock:
            return self._groups.get(group_id)

    def update(self, group_id: int, command: AttributeGroupUpdate) -> AttributeGroup | None:
        with self._lock:
            group = self._groups.get(group_id)
            if group is None:
                return None
            for name, value in command.model_dump(exclude_none=True).items():
                setattr(group, name, value)
            return group
