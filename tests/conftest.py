# tests/conftest.py
import itertools
import os
import tempfile
from io import BytesIO

# configure before anything imports jobboard.core.config
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("EMAIL_ADAPTER", "mock")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("MONGODB_DB", "jobboard_test")
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="jobboard-uploads-")

import mongomock
import pytest
from fastapi import UploadFile
from httpx import ASGITransport, AsyncClient
from starlette.datastructures import Headers

from jobboard.core.config import settings
from jobboard.core.security import SecurityConfig
from jobboard.db import mongo
from jobboard.services.identity import IdentityService
from jobboard.services.policy import Principal

_emails = itertools.count(1)


class FakeCursor:
    def __init__(self, cursor):
        self._cursor = cursor

    def sort(self, *args, **kwargs):
        self._cursor.sort(*args, **kwargs)
        return self

    def skip(self, n):
        self._cursor.skip(n)
        return self

    def limit(self, n):
        self._cursor.limit(n)
        return self

    def __aiter__(self):
        return self

    async def __anext__(self):
        try:
            return next(self._cursor)
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:
    """Awaitable facade over a mongomock collection, shaped like motor's."""

    def __init__(self, collection):
        self._collection = collection

    def find(self, *args, **kwargs):
        return FakeCursor(self._collection.find(*args, **kwargs))

    def __getattr__(self, name):
        method = getattr(self._collection, name)

        async def call(*args, **kwargs):
            return method(*args, **kwargs)
        return call


class FakeDatabase:
    def __init__(self, database):
        self._database = database

    def __getitem__(self, name):
        return FakeCollection(self._database[name])


class FakeMotorClient:
    def __init__(self, client):
        self._client = client

    def __getitem__(self, name):
        return FakeDatabase(self._client[name])

    def close(self):
        self._client.close()


def make_upload(content: bytes = b"%PDF-1.4 test cv", filename: str = "cv.pdf",
                content_type: str = "application/pdf") -> UploadFile:
    headers = Headers({"content-type": content_type})
    return UploadFile(file=BytesIO(content), filename=filename, size=len(content), headers=headers)


@pytest.fixture
async def db(monkeypatch):
    """Fresh in-memory Mongo per test, with the real indexes (uniqueness included)."""
    backend = mongomock.MongoClient()
    # mongomock clients may share a store; start every test empty
    backend.drop_database(settings.MONGODB_DB)
    client = FakeMotorClient(backend)
    monkeypatch.setattr(mongo, "_mongo_client", client)
    await mongo.init_indexes()
    yield mongo.get_db()


@pytest.fixture
def identity(db):
    return IdentityService(SecurityConfig.from_settings(settings))


@pytest.fixture
def make_user(identity):
    """Register an account and return ``(principal, token)``."""
    async def _make(role="user", approved=True, email=None, password="secret123", **extra):
        profile = {
            "first_name": extra.pop("first_name", "Test"),
            "last_name": extra.pop("last_name", role.title()),
            "email": email or f"{role}{next(_emails)}@example.com",
            "password": password,
            "role": role,
            **extra,
        }
        cv = make_upload() if role == "user" else None
        session = await identity.register(profile, cv, approved=approved)
        return Principal(user_id=session["user"]["id"], role=role), session["token"]
    return _make


@pytest.fixture
def job_payload():
    def _payload(**overrides):
        payload = {
            "position": "Backend Engineer",
            "category": "Engineering",
            "job_type": "Full-time",
            "experience_level": "Mid Level",
            "location": "Lahore, Pakistan",
            "education_level": "Bachelor's Degree",
            "salary": "50000-80000",
            "age": "25-35",
            "gender": "Any",
            "requirements": "Python, MongoDB",
            "benefits": "Health insurance",
            "skills_required": "python, fastapi , mongodb",
            "application_deadline": "2030-01-01T00:00:00",
        }
        payload.update(overrides)
        return payload
    return _payload


@pytest.fixture
def application_profile():
    return {
        "first_name": "Ali",
        "last_name": "Khan",
        "cnic": "35202-1234567-1",
        "city": "Lahore",
        "country": "Pakistan",
        "address": "12 Mall Road",
        "experience": "3-5 years",
        "expected_salary": "70000",
    }


@pytest.fixture
async def client(db):
    from jobboard.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
