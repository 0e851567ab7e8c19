"""
API routes for the extension field gateway.

Every write runs through the three request-boundary adapters:
inbound (strip extension fields) -> native handling -> post-write
(persist extensions) -> outbound (merge extensions into the response).
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from pydantic import ValidationError

from ..adapters import RequestContext
from .native import ENTITY_TYPE, AttributeGroupCreate, AttributeGroupUpdate
from .services import GatewayServices

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Attribute groups"])


# --- Dependencies ---


def get_services(request: Request) -> GatewayServices:
    """Get gateway services from app state."""
    return request.app.state.services


def get_context() -> RequestContext:
    """Fresh attribute slot for each request."""
    return RequestContext()


def _validation_error(error: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail=error.errors(include_url=False, include_context=False),
    )


# --- Attribute groups ---


@router.post("/attribute-groups", status_code=201)
def create_attribute_group(
    payload: dict[str, Any] = Body(...),
    services: GatewayServices = Depends(get_services),
    context: RequestContext = Depends(get_context),
) -> dict[str, Any]:
    """Create an attribute group with its extension fields."""
    cleaned = services.inbound.process(ENTITY_TYPE, payload, context)
    try:
        command = AttributeGroupCreate.model_validate(cleaned)
    except ValidationError as e:
        raise _validation_error(e) from e

    group = services.repository.create(command)
    services.post_write.process(ENTITY_TYPE, group, context)
    logger.info(f"Created attribute group {group.attributeGroupId}")
    return services.outbound.process(ENTITY_TYPE, group, group.to_dict())


@router.get("/attribute-groups/{attributeGroupId}")
def get_attribute_group(
    attributeGroupId: int,
    services: GatewayServices = Depends(get_services),
) -> dict[str, Any]:
    """Get an attribute group including its extension fields."""
    group = services.repository.get(attributeGroupId)
    if group is None:
        raise HTTPException(status_code=404, detail=f"Attribute group {attributeGroupId} not found")
    return services.outbound.process(ENTITY_TYPE, group, group.to_dict())


@router.patch("/attribute-groups/{attributeGroupId}")
def update_attribute_group(
    attributeGroupId: int,
    payload: dict[str, Any] = Body(...),
    services: GatewayServices = Depends(get_services),
    context: RequestContext = Depends(get_context),
) -> dict[str, Any]:
    """Partially update an attribute group and its extension fields."""
    cleaned = services.inbound.process(ENTITY_TYPE, payload, context)
    try:
        command = AttributeGroupUpdate.model_validate(cleaned)
    except ValidationError as e:
        raise _validation_error(e) from e

    group = services.repository.update(attributeGroupId, command)
    if group is None:
        raise HTTPException(status_code=404, detail=f"Attribute group {attributeGroupId} not found")
    services.post_write.process(
        ENTITY_TYPE,
        group,
        context,
        uri_variables={"attributeGroupId": attributeGroupId},
    )
    return services.outbound.process(ENTITY_TYPE, group, group.to_dict())
