"""Test configuration: a fresh SQLite database per test, driven through TestClient."""

import asyncio
import os
import tempfile
from pathlib import Path

import pytest

# Settings are read once at import time, so the environment must be set first
_DB_DIR = Path(tempfile.mkdtemp(prefix="qrdine-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR / 'test.db'}"
os.environ["ENV_MODE"] = "development"
os.environ["APP_BASE_URL"] = "http://menu.example.com"
os.environ.setdefault("SECRET_KEY", "x" * 48)

from fastapi.testclient import TestClient  # noqa: E402

from qrdine.database import init_db  # noqa: E402
from qrdine.main import app  # noqa: E402

DEFAULT_PASSWORD = "s3cret-pass"


@pytest.fixture
def client():
    asyncio.run(init_db(drop_existing=True))
    with TestClient(app) as test_client:
        yield test_client


def register(client, email="owner@spiceroute.in", **overrides) -> dict:
    payload = {
        "name": "Spice Route",
        "email": email,
        "password": DEFAULT_PASSWORD,
        "address": "12 MG Road, Bengaluru",
        "phone": "+91 98765 43210",
    }
    payload.update(overrides)
    response = client.post("/api/restaurants", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["restaurant"]


def sign_in(client, email, password=DEFAULT_PASSWORD) -> dict:
    response = client.post("/api/auth/session", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


def add_menu_item(client, owner, name, price, category="Mains") -> dict:
    response = client.post(
        "/api/menu",
        json={"restaurantId": owner["id"], "name": name, "price": price, "category": category},
        headers=owner["headers"],
    )
    assert response.status_code == 201, response.text
    return response.json()["menuItem"]


def place_order(client, owner_id, lines, **extra):
    payload = {
        "restaurantId": owner_id,
        "items": [{"menuItemId": item["id"], "quantity": qty} for item, qty in lines],
    }
    payload.update(extra)
    return client.post("/api/orders", json=payload)


@pytest.fixture
def owner(client) -> dict:
    """A registered restaurant with a signed-in session."""
    restaurant = register(client)
    return {**restaurant, "headers": sign_in(client, restaurant["email"])}


@pytest.fixture
def other_owner(client) -> dict:
    restaurant = register(client, email="owner@pastapalace.it", name="Pasta Palace")
    return {**restaurant, "headers": sign_in(client, restaurant["email"])}
