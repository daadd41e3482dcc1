"""
Centralized Test Configuration.

The document store runs on in-memory fake collections, the checkout
provider on a fake client, and identity on locally signed tokens.
"""

from copy import deepcopy
from types import SimpleNamespace

import pytest
from bson import ObjectId
from httpx import AsyncClient, ASGITransport
from pymongo.errors import ConnectionFailure, DuplicateKeyError

from zapshift.app.main import app
from zapshift.app.core.dependencies import get_checkout_client, get_identity_verifier, get_store
from zapshift.app.core.exceptions import CheckoutSessionNotFoundError
from zapshift.app.core.identity import LocalIdentityVerifier
from zapshift.app.core.jwt import create_access_token
from zapshift.app.db.mongo import DocumentStore
from zapshift.app.schemas.payment import CheckoutSession


# Mock MongoDB collections
class FakeCursor:
    def __init__(self, docs):
        self.docs = docs

    async def to_list(self, length=None):
        return self.docs if length is None else self.docs[:length]


class FakeCollection:
    def __init__(self, name):
        self.name = name
        self.documents = []
        self.unique_keys = []
        self.fail_with = None

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    @staticmethod
    def _matches(doc, query):
        return all(doc.get(key) == value for key, value in query.items())

    def find(self, query=None, sort=None):
        self._check()
        docs = [deepcopy(d) for d in self.documents if self._matches(d, query or {})]
        for key, direction in reversed(sort or []):
            docs.sort(key=lambda d: d.get(key), reverse=direction < 0)
        return FakeCursor(docs)

    async def find_one(self, query):
        self._check()
        for doc in self.documents:
            if self._matches(doc, query):
                return deepcopy(doc)
        return None

    async def insert_one(self, document):
        self._check()
        for key in self.unique_keys:
            if any(d.get(key) == document.get(key) for d in self.documents):
                raise DuplicateKeyError(f"E11000 duplicate key error collection: {self.name} index: {key}")
        document.setdefault("_id", ObjectId())
        self.documents.append(deepcopy(document))
        return SimpleNamespace(acknowledged=True, inserted_id=document["_id"])

    async def update_one(self, query, update):
        self._check()
        for doc in self.documents:
            if self._matches(doc, query):
                changes = update["$set"]
                modified = any(doc.get(key) != value for key, value in changes.items())
                doc.update(deepcopy(changes))
                return SimpleNamespace(acknowledged=True, matched_count=1, modified_count=int(modified), upserted_id=None)
        return SimpleNamespace(acknowledged=True, matched_count=0, modified_count=0, upserted_id=None)

    async def delete_one(self, query):
        self._check()
        for index, doc in enumerate(self.documents):
            if self._matches(doc, query):
                del self.documents[index]
                return SimpleNamespace(acknowledged=True, deleted_count=1)
        return SimpleNamespace(acknowledged=True, deleted_count=0)

    async def create_index(self, keys, unique=False, name=None):
        if unique:
            self.unique_keys.append(keys[0][0])
        return name


class FakeDatabase:
    def __init__(self):
        self.collections = {}
        self.down = False

    def __getitem__(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    async def command(self, name):
        if self.down:
            raise ConnectionFailure("connection refused")
        return {"ok": 1.0}


class FakeCheckoutClient:
    """Stands in for StripeCheckoutClient; sessions are registered by tests."""

    def __init__(self):
        self.sessions = {}
        self.created = []

    def add_session(self, session_id, **fields):
        self.sessions[session_id] = CheckoutSession(id=session_id, **fields)
        return self.sessions[session_id]

    async def create_session(self, cost, parcel_name, sender_email, parcel_id):
        session_id = f"cs_test_{len(self.created) + 1}"
        self.created.append({
            "cost": cost,
            "parcel_name": parcel_name,
            "sender_email": sender_email,
            "parcel_id": parcel_id,
        })
        return self.add_session(
            session_id,
            url=f"https://checkout.stripe.com/c/pay/{session_id}",
            payment_status="unpaid",
            metadata={"parcelId": parcel_id, "parcelName": parcel_name},
        )

    async def retrieve_session(self, session_id):
        if session_id not in self.sessions:
            raise CheckoutSessionNotFoundError(session_id)
        return self.sessions[session_id]


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
async def store(fake_db):
    document_store = DocumentStore(fake_db)
    await document_store.ensure_indexes()
    return document_store


@pytest.fixture
def checkout():
    return FakeCheckoutClient()


@pytest.fixture(autouse=True)
def apply_overrides(store, checkout):
    """Wire the fakes into the app for each test."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_checkout_client] = lambda: checkout
    app.dependency_overrides[get_identity_verifier] = lambda: LocalIdentityVerifier()
    yield
    app.dependency_overrides = {}


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers():
    """Build a Bearer header for a locally signed token."""
    def _headers(email: str) -> dict:
        token = create_access_token({"sub": email, "email": email})
        return {"Authorization": f"Bearer {token}"}
    return _headers
