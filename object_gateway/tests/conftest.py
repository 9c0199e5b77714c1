"""
Pytest fixtures for the object gateway: settings, a fake store, the app and a token factory.
No test talks to a real upstream; the HTTP adapter is tested against httpx.MockTransport.
"""
import uuid
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from object_gateway.config import Settings
from object_gateway.errors import NoDataError
from object_gateway.main import create_app
from object_gateway.models import CreatedObject, ObjectRecord
from object_gateway.store import ObjectStore
from object_gateway.tokens import issue_token

SECRET = "test-secret-key-that-is-long-enough-for-hs256"


class FakeObjectStore(ObjectStore):
    """In-test ObjectStore; records every call so tests can assert upstream was not reached."""

    def __init__(self):
        self.calls: list[str] = []
        self.objects = [ObjectRecord(id="123", name="Test Object", data={"Price": "519.99"})]
        self.by_id = {
            "1": ObjectRecord(id="1", name="Test Object One", data={"Price": "1"}),
            "2": ObjectRecord(id="2", name="Test Object Two", data={"Price": "2"}),
            "3": ObjectRecord(id="3", name="Test Object Three", data={"Price": "3"}),
        }
        self.fail_with: Exception | None = None
        self.closed = False

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    def list_objects(self):
        self._record("list_objects")
        return list(self.objects)

    def get_objects_by_ids(self, *ids):
        self._record("get_objects_by_ids")
        found = [self.by_id[i] for i in ids if i in self.by_id]
        if not found:
            raise NoDataError()
        return found

    def get_object(self, object_id):
        self._record("get_object")
        if object_id not in self.by_id:
            raise NoDataError()
        return self.by_id[object_id]

    def create_object(self, payload):
        self._record("create_object")
        return CreatedObject(
            id=str(uuid.uuid4()),
            name=payload.name,
            data=payload.data,
            created_at=datetime.now(timezone.utc).isoformat(),
        )

    def update_object(self, object_id, payload):
        self._record("update_object")
        if object_id not in self.by_id:
            raise NoDataError()
        return CreatedObject(
            id=object_id,
            name=payload.name,
            data=payload.data,
            updated_at=datetime.now(timezone.utc).isoformat(),
        )

    def patch_object(self, object_id, patch):
        self._record("patch_object")
        if object_id not in self.by_id:
            raise NoDataError()
        current = self.by_id[object_id]
        return CreatedObject(
            id=object_id,
            name=patch.name or current.name,
            data=patch.data if patch.data is not None else current.data,
            updated_at=datetime.now(timezone.utc).isoformat(),
        )

    def delete_object(self, object_id):
        self._record("delete_object")
        return {"message": f"Object with id = {object_id} has been deleted."}

    def close(self):
        self.closed = True


@pytest.fixture
def settings():
    return Settings(base_api_url="http://upstream.test", auth_secret_key=SECRET, log_file=None)


@pytest.fixture
def store():
    return FakeObjectStore()


@pytest.fixture
def app(settings, store):
    return create_app(settings, store=store)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_header():
    """Factory: role -> Authorization header with a freshly issued token."""

    def _make(role: str, secret: str = SECRET) -> dict:
        return {"Authorization": f"Bearer {issue_token(role, secret)}"}

    return _make
