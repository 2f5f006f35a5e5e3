"""
Pytest fixtures for the products API tests.

The Motor-backed repository and the HTTP auth client are replaced through
FastAPI dependency overrides, so no MongoDB or auth service is needed.
"""
import os

os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGO_DB", "products_test")
os.environ.setdefault("APIKEY_SERVICE_URL", "http://apikeys.test")
os.environ.setdefault("SESSION_SERVICE_URL", "http://sessions.test")

import copy
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.api.deps import auth_client, product_repo
from app.domain.errors import AuthenticationError
from app.domain.models.product import Product
from app.domain.models.query import QueryOptions
from app.domain.models.security import SecurityContext
from app.domain.services.filters import mongo_filter
from app.main import app


def _matches(doc: Dict[str, Any], flt: Dict[str, Any]) -> bool:
    """Evaluate the subset of Mongo filter syntax produced by mongo_filter()."""
    if "$and" in flt:
        return all(_matches(doc, c) for c in flt["$and"])
    for field, cond in flt.items():
        value = doc.get(field)
        for op, arg in cond.items():
            if op == "$eq" and value != arg:
                return False
            if op == "$ne" and value == arg:
                return False
            if op == "$gt" and not (value is not None and value > arg):
                return False
            if op == "$gte" and not (value is not None and value >= arg):
                return False
            if op == "$lt" and not (value is not None and value < arg):
                return False
            if op == "$lte" and not (value is not None and value <= arg):
                return False
            if op == "$in" and value not in arg:
                return False
            if op == "$nin" and value in arg:
                return False
    return True


class InMemoryProductRepo:
    """Same surface as ProductRepo, over a dict of documents."""

    def __init__(self):
        self.docs: Dict[str, Dict[str, Any]] = {}
        self.last_filter: Optional[Dict[str, Any]] = None

    async def get(self, product_id: str) -> Optional[Product]:
        doc = self.docs.get(product_id)
        return Product.model_validate(copy.deepcopy(doc)) if doc else None

    async def create(self, product: Product) -> None:
        self.docs[product.id] = product.to_document()

    async def update(self, product_id: str, fields: Dict[str, Any]) -> bool:
        if product_id not in self.docs:
            return False
        self.docs[product_id].update(copy.deepcopy(fields))
        return True

    async def save(self, product: Product) -> bool:
        return await self.update(product.id, product.to_document())

    async def query(self, options: QueryOptions) -> List[Product]:
        self.last_filter = mongo_filter(options)
        return [Product.model_validate(copy.deepcopy(d)) for d in self.docs.values()
                if _matches(d, self.last_filter)]


class StubAuthClient:
    """Known credentials only; everything else is rejected like the real services do."""

    def __init__(self):
        self.api_keys: Dict[str, SecurityContext] = {
            "acme-key": SecurityContext(
                identity="key-acme", allowed_subdomains=frozenset({"acme"}),
                permissions=frozenset({"write:products", "read:products"}),
            ),
            "other-key": SecurityContext(
                identity="key-other", allowed_subdomains=frozenset({"other"}),
                permissions=frozenset({"write:products"}),
            ),
            "readonly-key": SecurityContext(
                identity="key-ro", allowed_subdomains=frozenset({"acme"}),
                permissions=frozenset({"read:products"}),
            ),
            "no-subdomains-key": SecurityContext(
                identity="key-broken", allowed_subdomains=None,
                permissions=frozenset({"write:products"}),
            ),
        }
        self.sessions: Dict[str, Dict[str, Any]] = {
            "sess-1": {"uid": "user-1", "claims": {"role": "admin"}},
        }

    async def validate_api_key(self, api_key: str, permission: str) -> SecurityContext:
        if api_key not in self.api_keys:
            raise AuthenticationError("Invalid or missing API Key.")
        return self.api_keys[api_key]

    async def validate_session(self, session_id: str) -> Dict[str, Any]:
        if session_id not in self.sessions:
            raise AuthenticationError("Invalid or expired session.")
        return self.sessions[session_id]


@pytest.fixture
def repo():
    return InMemoryProductRepo()


@pytest.fixture
def auth_stub():
    return StubAuthClient()


@pytest.fixture
def client(repo, auth_stub):
    app.dependency_overrides[product_repo] = lambda: repo
    app.dependency_overrides[auth_client] = lambda: auth_stub
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def acme_headers():
    return {"X-API-KEY": "acme-key"}


@pytest.fixture
def acme_session():
    return {"X-Session-ID": "sess-1", "X-Client-Subdomain": "acme"}


@pytest.fixture
def shirt_payload():
    return {"name": "Shirt", "sku": "SH1", "price": 10, "project_id": "p1", "subdomain": "acme"}


@pytest.fixture
def created_shirt(client, acme_headers, shirt_payload):
    res = client.post("/api/v1/products", json=shirt_payload, headers=acme_headers)
    assert res.status_code == 201
    return res.json()["data"]
