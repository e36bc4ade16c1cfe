"""Pytest configuration and fixtures."""

import base64
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import jwt
import pytest
import azure.functions as func
from azure.core.exceptions import ResourceNotFoundError

from shared import blob_client, token_broker, token_store

ACCOUNT_NAME = "galleryacct"
ACCOUNT_KEY = base64.b64encode(b"not-a-real-storage-account-key-0123456789").decode()
CONNECTION_STRING = (
    f"DefaultEndpointsProtocol=https;AccountName={ACCOUNT_NAME};"
    f"AccountKey={ACCOUNT_KEY};EndpointSuffix=core.windows.net"
)
CONTAINER_URL = f"https://{ACCOUNT_NAME}.blob.core.windows.net/event-photos"


@pytest.fixture(autouse=True)
def environment(monkeypatch):
    """Configure the environment every endpoint reads."""
    monkeypatch.setenv("STORAGE_CONNECTION_STRING", CONNECTION_STRING)
    monkeypatch.setenv("AZURE_TENANT_ID", "tenant-123")
    monkeypatch.setenv("AZURE_CLIENT_ID", "obo-client")
    monkeypatch.setenv("AZURE_CLIENT_SECRET", "obo-secret")
    monkeypatch.setenv("DATAVERSE_CLIENT_ID", "app-client")
    monkeypatch.setenv("DATAVERSE_CLIENT_SECRET", "app-secret")
    monkeypatch.delenv("DATAVERSE_URL", raising=False)
    monkeypatch.delenv("DATAVERSE_TABLE", raising=False)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Start every test with fresh process-wide state."""
    token_store.set_token_store(None)
    token_broker._confidential_clients.clear()
    blob_client._blob_service_client = None
    yield
    token_store.set_token_store(None)
    token_broker._confidential_clients.clear()
    blob_client._blob_service_client = None


# =============================================================================
# Blob Storage fakes
# =============================================================================

class FakeBlobProperties:
    def __init__(self, name: str, size: int = 100, last_modified: Optional[datetime] = None):
        self.name = name
        self.size = size
        self.last_modified = last_modified or datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeDownloader:
    def __init__(self, content: bytes):
        self.content = content

    def readall(self) -> bytes:
        return self.content


class FakeBlobClient:
    def __init__(self, container: "FakeContainer", name: str):
        self.container = container
        self.name = name
        self.url = f"{container.url}/{name}"

    def download_blob(self):
        if self.name not in self.container.contents:
            raise ResourceNotFoundError("The specified blob does not exist.")
        return FakeDownloader(self.container.contents[self.name])


class FakeContainer:
    """In-memory stand-in for azure.storage.blob.ContainerClient."""

    def __init__(self, url: str = CONTAINER_URL):
        self.url = url
        self.contents: Dict[str, bytes] = {}
        self.properties: Dict[str, FakeBlobProperties] = {}
        self.uploads: List[Dict[str, Any]] = []
        self.failing_prefixes = set()

    def add_blob(self, name: str, content: bytes = b"", size: int = 100, last_modified: Optional[datetime] = None):
        self.contents[name] = content
        self.properties[name] = FakeBlobProperties(name, size, last_modified)

    def set_index(self, index: Any):
        self.add_blob("_index.json", json.dumps(index).encode("utf-8"))

    def get_blob_client(self, name: str) -> FakeBlobClient:
        return FakeBlobClient(self, name)

    def list_blobs(self, name_starts_with: Optional[str] = None):
        if name_starts_with in self.failing_prefixes:
            raise RuntimeError(f"listing failed for {name_starts_with}")
        prefix = name_starts_with or ""
        return [p for name, p in sorted(self.properties.items()) if name.startswith(prefix)]

    def upload_blob(self, name, data, overwrite=False, content_settings=None, **kwargs):
        self.uploads.append({
            "name": name,
            "data": data,
            "overwrite": overwrite,
            "content_type": content_settings.content_type if content_settings else None,
        })
        self.add_blob(name, data, size=len(data))
        return FakeBlobClient(self, name)


@pytest.fixture
def container(monkeypatch) -> FakeContainer:
    """Fake event-photos container wired in place of the real one."""
    fake = FakeContainer()
    monkeypatch.setattr(blob_client, "get_container_client", lambda connection_string=None: fake)
    return fake


# =============================================================================
# MSAL fake
# =============================================================================

class FakeConfidentialClient:
    def __init__(self, result: Optional[Dict[str, Any]] = None):
        self.result = result or {"access_token": "downstream-token", "expires_in": 3600}
        self.obo_calls: List[Dict[str, Any]] = []
        self.client_calls: List[List[str]] = []

    def acquire_token_on_behalf_of(self, user_assertion, scopes, **kwargs):
        self.obo_calls.append({"user_assertion": user_assertion, "scopes": scopes})
        return self.result

    def acquire_token_for_client(self, scopes, **kwargs):
        self.client_calls.append(scopes)
        return self.result


@pytest.fixture
def msal_client(monkeypatch) -> FakeConfidentialClient:
    """Replace MSAL confidential clients with a recording fake."""
    fake = FakeConfidentialClient()
    monkeypatch.setattr(token_broker, "get_confidential_client", lambda client_id, client_secret: fake)
    return fake


# =============================================================================
# Requests
# =============================================================================

def make_jwt(claims: Optional[Dict[str, Any]] = None) -> str:
    """Build a syntactically valid JWT (signature is never checked)."""
    payload = {"oid": "user-oid", "upn": "mario.rossi@contoso.com"}
    payload.update(claims or {})
    return jwt.encode(payload, "test-secret", algorithm="HS256")


def encode_principal(principal: Dict[str, Any]) -> str:
    return base64.b64encode(json.dumps(principal).encode("utf-8")).decode("ascii")


def make_request(
    method: str = "GET",
    url: str = "/api/test",
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, str]] = None,
    route_params: Optional[Dict[str, str]] = None,
    body: Any = None
) -> func.HttpRequest:
    if body is None:
        raw = b""
    elif isinstance(body, bytes):
        raw = body
    else:
        raw = json.dumps(body).encode("utf-8")

    return func.HttpRequest(
        method=method,
        url=url,
        headers=headers or {},
        params=params or {},
        route_params=route_params or {},
        body=raw,
    )


def response_json(response: func.HttpResponse) -> Any:
    return json.loads(response.get_body())
