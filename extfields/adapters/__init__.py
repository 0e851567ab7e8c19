"""
Request-boundary adapters.

- InboundAdapter: strips extension fields from the payload
- PostWriteAdapter: persists them after the native write
- OutboundAdapter: merges reloaded extension data into responses
"""

from .context import EXTENSION_DATA_ATTRIBUTE, RequestContext
from .identity import resolve_entity_id, to_entity_data
from .inbound import InboundAdapter
from .outbound import OutboundAdapter
from .post_write import PostWriteAdapter

__all__ = [
    "EXTENSION_DATA_ATTRIBUTE",
    "RequestContext",
    "InboundAdapter",
    "PostWriteAdapter",
    "OutboundAdapter",
    "resolve_entity_id",
    "to_entity_data",
]
