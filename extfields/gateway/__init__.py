"""
HTTP gateway exposing an AttributeGroup resource with extension fields.

Run with:
    uvicorn extfields.gateway:create_app --factory
"""

from .app import create_app
from .config import Settings

__all__ = ["create_app", "Settings"]
