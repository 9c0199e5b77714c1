"""
Uniform response envelope: {"status": <reason phrase>, "message": ..., "data": ...}.
"""
import json
import logging
from http import HTTPStatus
from typing import Any

from fastapi import Response
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

logger = logging.getLogger(__name__)

MEDIA_TYPE = "application/json"
FALLBACK_BODY = b'{"status": "Internal Server Error", "message": "Please try again later"}'


def status_text(code: int) -> str:
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ""


def _plain(data: Any) -> Any:
    # Unset model fields are dropped; nulls inside open-ended maps are kept.
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True, exclude_unset=True)
    if isinstance(data, list):
        return [_plain(item) for item in data]
    return data


def send_response(
    status_code: int,
    message: str,
    data: Any = None,
    headers: dict[str, str] | None = None,
) -> Response:
    """Serialize the envelope. data is omitted when None; encoding failures fall back to a fixed 500."""
    envelope: dict[str, Any] = {"status": status_text(status_code), "message": message}

    try:
        if data is not None:
            envelope["data"] = _plain(data)
        body = json.dumps(jsonable_encoder(envelope), allow_nan=False)
    except (TypeError, ValueError) as e:
        logger.error("error sending response, %s", e)
        return Response(content=FALLBACK_BODY, status_code=500, media_type=MEDIA_TYPE)

    return Response(content=body, status_code=status_code, media_type=MEDIA_TYPE, headers=headers)
