from unittest.mock import MagicMock
from urllib.parse import unquote, urlparse

import mongomock
import pytest
from fastapi.testclient import TestClient

from app import create_app
from models import get_mongo_collections, UserStore, ItemStore
from security import TokenService
from services import AuthGateway, InventoryGateway
from storage import ObjectStorage

TEST_SECRET = "test-secret"
TEST_BUCKET = "test-bucket"

# smallest valid PNG header, enough to stand in for an image upload
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture
def collections():
    client = mongomock.MongoClient()
    return get_mongo_collections(client, "test_inventory")


@pytest.fixture
def s3_objects():
    """Bodies uploaded through the fake S3 client, keyed by object key."""
    return {}


@pytest.fixture
def s3_client(s3_objects):
    client = MagicMock()

    def put_object(**params):
        s3_objects[params["Key"]] = params["Body"]
        return {"ETag": '"fake"'}

    client.put_object.side_effect = put_object
    return client


@pytest.fixture
def storage(s3_client):
    return ObjectStorage(s3_client, TEST_BUCKET, "us-east-1")


@pytest.fixture
def tokens():
    return TokenService(TEST_SECRET)


@pytest.fixture
def user_store(collections):
    return UserStore(collections[0])


@pytest.fixture
def item_store(collections):
    return ItemStore(collections[1])


@pytest.fixture
def app(user_store, item_store, tokens, storage):
    return create_app(
        auth=AuthGateway(user_store, tokens),
        inventory=InventoryGateway(item_store, storage),
    )


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def login(client):
    """Registers a user and returns auth headers for them."""
    def _login(username="alice", password="p1"):
        client.post("/api/auth/register", json={"username": username, "password": password})
        r = client.post("/api/auth/login", json={"username": username, "password": password})
        assert r.status_code == 200
        return {"Authorization": f"Bearer {r.json()['token']}"}
    return _login


@pytest.fixture
def resolve_url(s3_objects):
    """Maps a public image URL back to the bytes uploaded under it."""
    def _resolve(url):
        # https://<bucket>.s3.<region>.amazonaws.com/<key>
        return s3_objects.get(unquote(urlparse(url).path.lstrip("/")))
    return _resolve
