"""
Roles, caller identity, and the object shapes exchanged with the upstream API.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Role(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"

    @classmethod
    def parse(cls, value: str | None) -> "Role | None":
        """Return the Role for value, or None if it is not one of the fixed roles."""
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class Identity:
    """Authenticated caller. role is the raw claim; None means unauthenticated."""

    role: str | None = None


class ObjectRecord(BaseModel):
    """Object as returned by the upstream API."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    name: str = ""
    data: dict[str, Any] | None = None


class CreatedObject(ObjectRecord):
    """Object returned from create/update; upstream stamps createdAt or updatedAt."""

    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")


class ObjectPayload(BaseModel):
    """Client-supplied fields for create and full update."""

    name: str = Field(min_length=1)
    data: dict[str, Any] | None = None


class ObjectPatch(BaseModel):
    """Partial update; only fields that are set are forwarded."""

    name: str | None = Field(default=None, min_length=1)
    data: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _require_a_field(self) -> "ObjectPatch":
        if self.name is None and self.data is None:
            raise ValueError("at least one of name or data is required")
        return self
