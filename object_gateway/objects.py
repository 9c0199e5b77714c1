"""
Object routes under /api/v1/objects.
Each route declares its allowed roles, validates the client payload, and forwards to the
ObjectStore; adapter failures are logged here and surfaced as a generic message.
"""
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool

from object_gateway.auth import RequireAdmin, RequireReader
from object_gateway.envelope import send_response
from object_gateway.errors import GatewayError, NoDataError, NotFoundError, UpstreamError, ValidationError
from object_gateway.models import Identity, ObjectPatch, ObjectPayload
from object_gateway.store import ObjectStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/objects", tags=["objects"])

OBJECT_NOT_AVAILABLE = "Object with given ID not available"


def get_store(request: Request) -> ObjectStore:
    return request.app.state.store


async def _read_model(request: Request, model: type[BaseModel], message: str) -> Any:
    """Decode the JSON body into model; anything else is a 400 with message."""
    try:
        raw = await request.json()
    except ValueError:
        raise ValidationError(message)
    if not isinstance(raw, dict):
        raise ValidationError(message)
    try:
        return model.model_validate(raw)
    except PydanticValidationError as e:
        logger.info("rejected payload: %s", e.errors(include_url=False))
        raise ValidationError(message)


def _upstream_failure(e: UpstreamError, message: str, not_found: str | None = None) -> GatewayError:
    if not_found is not None and isinstance(e, NoDataError):
        return NotFoundError(not_found)
    logger.error("upstream call failed: %s", e)
    return UpstreamError(message)


@router.post("")
async def create_object(
    request: Request,
    identity: Annotated[Identity, RequireAdmin],
    store: Annotated[ObjectStore, Depends(get_store)],
):
    payload = await _read_model(request, ObjectPayload, "Could not create object, invalid payload provided")
    try:
        created = await run_in_threadpool(store.create_object, payload)
    except UpstreamError as e:
        raise _upstream_failure(e, "error creating object, try again later")
    return send_response(200, "Successfully created the object", created)


@router.get("")
def list_objects(
    identity: Annotated[Identity, RequireReader],
    store: Annotated[ObjectStore, Depends(get_store)],
    ids: Annotated[list[str] | None, Query(alias="id")] = None,
):
    """All objects, or only those named by repeated ?id= parameters."""
    if ids:
        try:
            objects = store.get_objects_by_ids(*ids)
        except UpstreamError as e:
            raise _upstream_failure(
                e, "could not retrieve objects. Try again later", not_found="Objects with given IDs not available"
            )
        return send_response(200, "Successfully retrieved objects", objects)

    try:
        objects = store.list_objects()
    except UpstreamError as e:
        raise _upstream_failure(e, "could not retrieve objects. Try again later")
    return send_response(200, "Successfully retrieved all objects", objects)


@router.get("/{object_id}")
def get_object(
    object_id: str,
    identity: Annotated[Identity, RequireReader],
    store: Annotated[ObjectStore, Depends(get_store)],
):
    try:
        obj = store.get_object(object_id)
    except UpstreamError as e:
        raise _upstream_failure(
            e, "could not retrieve requested object. Try again later", not_found=OBJECT_NOT_AVAILABLE
        )
    return send_response(200, "Successfully retrieved object", obj)


@router.put("/{object_id}")
async def update_object(
    object_id: str,
    request: Request,
    identity: Annotated[Identity, RequireAdmin],
    store: Annotated[ObjectStore, Depends(get_store)],
):
    payload = await _read_model(request, ObjectPayload, "Could not update object, invalid payload provided")
    try:
        updated = await run_in_threadpool(store.update_object, object_id, payload)
    except UpstreamError as e:
        raise _upstream_failure(e, "error updating object, try again later", not_found=OBJECT_NOT_AVAILABLE)
    return send_response(200, "Successfully updated the object", updated)


@router.patch("/{object_id}")
async def patch_object(
    object_id: str,
    request: Request,
    identity: Annotated[Identity, RequireAdmin],
    store: Annotated[ObjectStore, Depends(get_store)],
):
    patch = await _read_model(request, ObjectPatch, "Could not update object, invalid payload provided")
    try:
        updated = await run_in_threadpool(store.patch_object, object_id, patch)
    except UpstreamError as e:
        raise _upstream_failure(e, "error updating object, try again later", not_found=OBJECT_NOT_AVAILABLE)
    return send_response(200, "Successfully updated the object partially", updated)


@router.delete("/{object_id}")
def delete_object(
    object_id: str,
    identity: Annotated[Identity, RequireAdmin],
    store: Annotated[ObjectStore, Depends(get_store)],
):
    try:
        result = store.delete_object(object_id)
    except UpstreamError as e:
        raise _upstream_failure(e, "error deleting object, try again later")
    return send_response(200, "Successfully deleted the object", result)
