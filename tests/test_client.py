import httpx
import pytest

from client import InventoryClient
from conftest import PNG_BYTES


@pytest.fixture
def ui(client):
    # TestClient is an httpx.Client, so it can stand in for the real connection
    return InventoryClient(client)


def test_login_fetches_items(ui, login, client):
    headers = login("alice", "p1")
    client.post(
        "/api/inventory",
        data={"name": "Widget", "description": "d", "quantity": "3"},
        files={"image": ("w.png", PNG_BYTES, "image/png")},
        headers=headers,
    )

    assert ui.login("alice", "p1")
    assert ui.is_authenticated
    assert ui.token
    assert ui.error_message == ""
    assert [item["name"] for item in ui.items] == ["Widget"]


def test_failed_login_sets_error(ui):
    ui.register("alice", "p1")

    assert not ui.login("alice", "wrong")
    assert not ui.is_authenticated
    assert ui.token == ""
    assert ui.error_message == "Invalid credentials"


def test_register_twice_sets_error(ui):
    assert ui.register("alice", "p1")
    assert not ui.register("alice", "p1")
    assert ui.error_message == "Registration failed"


def test_add_item_refreshes_list(ui):
    ui.register("alice", "p1")
    ui.login("alice", "p1")

    assert ui.add_item("Widget", "A widget", 3, PNG_BYTES, "widget.png", "image/png")
    assert ui.error_message == ""
    assert len(ui.items) == 1
    assert ui.items[0]["quantity"] == 3


def test_add_item_failure_keeps_items(ui):
    ui.register("alice", "p1")
    ui.login("alice", "p1")
    ui.add_item("Widget", "A widget", 3, PNG_BYTES, "widget.png")

    assert not ui.add_item("Broken", "bad quantity", "lots", PNG_BYTES, "broken.png")
    assert ui.error_message == "Failed to add item"
    assert [item["name"] for item in ui.items] == ["Widget"]


def test_logout_only_clears_auth_state(ui):
    ui.register("alice", "p1")
    ui.login("alice", "p1")
    ui.add_item("Widget", "A widget", 3, PNG_BYTES, "widget.png")

    ui.logout()

    assert ui.token == ""
    assert not ui.is_authenticated
    assert len(ui.items) == 1

    # without a token the server refuses, the old list stays
    assert not ui.fetch_items()
    assert ui.error_message == "Failed to fetch items"
    assert len(ui.items) == 1


def test_network_errors_are_reported():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    ui = InventoryClient(httpx.Client(base_url="http://inventory.test", transport=httpx.MockTransport(refuse)))

    assert not ui.login("alice", "p1")
    assert ui.error_message == "Invalid credentials"
    assert not ui.fetch_items()
    assert ui.error_message == "Failed to fetch items"
