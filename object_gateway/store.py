"""
Object store adapter for the upstream REST API.
ObjectStore is the operation set handlers depend on; HttpObjectStore forwards each
operation to the upstream /objects endpoints and maps the response into models or errors.
"""
import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from object_gateway.errors import (
    DecodeError,
    NoDataError,
    PayloadEncodingError,
    TransportError,
    UnexpectedResponseShapeError,
    UnexpectedStatusError,
)
from object_gateway.models import CreatedObject, ObjectPatch, ObjectPayload, ObjectRecord

logger = logging.getLogger(__name__)

OBJECTS_PATH = "/objects"
DELETED_MARKER = "has been deleted"

# Connection pool shared by every call
MAX_KEEPALIVE_CONNECTIONS = 100
KEEPALIVE_EXPIRY = 90.0

_object_list = TypeAdapter(list[ObjectRecord])
_object = TypeAdapter(ObjectRecord)
_created_object = TypeAdapter(CreatedObject)
_message = TypeAdapter(dict[str, Any])


class ObjectStore(ABC):
    """Operations the gateway can perform against the system of record."""

    @abstractmethod
    def list_objects(self) -> list[ObjectRecord]:
        """All objects."""

    @abstractmethod
    def get_objects_by_ids(self, *ids: str) -> list[ObjectRecord]:
        """Objects matching any of ids."""

    @abstractmethod
    def get_object(self, object_id: str) -> ObjectRecord:
        """Single object by id."""

    @abstractmethod
    def create_object(self, payload: ObjectPayload) -> CreatedObject:
        """Create an object; upstream assigns the id."""

    @abstractmethod
    def update_object(self, object_id: str, payload: ObjectPayload) -> CreatedObject:
        """Replace every field of an object."""

    @abstractmethod
    def patch_object(self, object_id: str, patch: ObjectPatch) -> CreatedObject:
        """Replace only the fields present in patch."""

    @abstractmethod
    def delete_object(self, object_id: str) -> dict[str, Any]:
        """Delete an object; returns the upstream confirmation."""

    def close(self) -> None:
        """Release resources held by the store."""


class HttpObjectStore(ObjectStore):
    """ObjectStore backed by the upstream REST API. No retries."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 8.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            limits=httpx.Limits(
                max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
                keepalive_expiry=KEEPALIVE_EXPIRY,
            ),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    # --- operations ---

    def list_objects(self) -> list[ObjectRecord]:
        body = self._send("GET", OBJECTS_PATH, action="fetch all objects")
        objects = self._decode(body, _object_list, action="all objects")
        # An empty list is a legitimate answer; entries without an id are not.
        if any(not obj.id for obj in objects):
            raise NoDataError()
        return objects

    def get_objects_by_ids(self, *ids: str) -> list[ObjectRecord]:
        params = [("id", object_id) for object_id in ids]
        body = self._send("GET", OBJECTS_PATH, params=params, action="fetch objects based on IDs")
        objects = self._decode(body, _object_list, action="objects based on IDs")
        if not objects or any(not obj.id for obj in objects):
            raise NoDataError()
        return objects

    def get_object(self, object_id: str) -> ObjectRecord:
        body = self._send("GET", self._object_path(object_id), action="fetch object based on ID")
        obj = self._decode(body, _object, action="object based on ID")
        if not obj.id:
            raise NoDataError()
        return obj

    def create_object(self, payload: ObjectPayload) -> CreatedObject:
        content = self._encode(payload.model_dump(exclude_none=True), action="create new object")
        body = self._send("POST", OBJECTS_PATH, content=content, action="create new object")
        obj = self._decode(body, _created_object, action="newly created object")
        if not obj.id:
            raise NoDataError()
        return obj

    def update_object(self, object_id: str, payload: ObjectPayload) -> CreatedObject:
        content = self._encode(payload.model_dump(exclude_none=True), action="update object")
        body = self._send("PUT", self._object_path(object_id), content=content, action="update object")
        obj = self._decode(body, _created_object, action="updated object")
        if not obj.id:
            raise NoDataError()
        return obj

    def patch_object(self, object_id: str, patch: ObjectPatch) -> CreatedObject:
        content = self._encode(patch.model_dump(exclude_none=True), action="partially update object")
        body = self._send(
            "PATCH", self._object_path(object_id), content=content, action="partially update object"
        )
        obj = self._decode(body, _created_object, action="partially updated object")
        if not obj.id:
            raise NoDataError()
        return obj

    def delete_object(self, object_id: str) -> dict[str, Any]:
        body = self._send("DELETE", self._object_path(object_id), action="delete object")
        result = self._decode(body, _message, action="deleted object")
        message = result.get("message")
        if not isinstance(message, str) or DELETED_MARKER not in message:
            raise UnexpectedResponseShapeError("the response of delete object API is not as expected")
        return result

    # --- protocol steps ---

    @staticmethod
    def _object_path(object_id: str) -> str:
        return f"{OBJECTS_PATH}/{quote(object_id, safe='')}"

    @staticmethod
    def _encode(payload: dict[str, Any], *, action: str) -> bytes:
        try:
            return json.dumps(payload, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise PayloadEncodingError(f"error creating payload to send to {action}, {e}") from e

    def _send(self, method: str, path: str, *, action: str, **kwargs) -> bytes:
        """Perform the call and return the 200 body; the whole exchange must finish within self.timeout."""
        deadline = time.monotonic() + self.timeout
        try:
            with self._client.stream(method, path, **kwargs) as response:
                if response.status_code != 200:
                    logger.warning("upstream %s %s returned %d", method, path, response.status_code)
                    raise UnexpectedStatusError(response.status_code)
                chunks = []
                for chunk in response.iter_bytes():
                    chunks.append(chunk)
                    if time.monotonic() > deadline:
                        logger.warning("upstream %s %s exceeded %ss deadline", method, path, self.timeout)
                        raise TransportError(f"error sending request to {action}, deadline exceeded")
        except httpx.HTTPError as e:
            logger.warning("upstream %s %s failed: %s", method, path, e)
            raise TransportError(f"error sending request to {action}, {e}") from e
        return b"".join(chunks)

    @staticmethod
    def _decode(body: bytes, adapter: TypeAdapter, *, action: str):
        try:
            raw = json.loads(body)
        except ValueError as e:
            raise DecodeError(f"error parsing response of {action}, {e}") from e

        try:
            return adapter.validate_python(raw)
        except PydanticValidationError as e:
            raise DecodeError(f"error parsing response of {action}, {e}") from e
