import qrdine.services.restaurants as restaurant_service
from tests.conftest import add_menu_item, register, sign_in


def test_register_returns_profile_without_credentials(client):
    restaurant = register(client)

    assert restaurant["name"] == "Spice Route"
    assert restaurant["email"] == "owner@spiceroute.in"
    assert "password" not in restaurant
    assert "passwordHash" not in restaurant
    assert restaurant["operatingHours"] == {"open": "09:00", "close": "22:00"}
    assert restaurant["discountConfig"] == {
        "enabled": False,
        "percentage": 10,
        "minOrderAmount": 0.0,
    }
    assert restaurant["qrCodeUrl"] == f"http://menu.example.com/restaurant/{restaurant['id']}"


def test_second_registration_with_same_email_is_rejected(client):
    register(client)

    response = client.post("/api/restaurants", json={
        "name": "Copycat",
        "email": "Owner@SpiceRoute.in ",
        "password": "another-pass",
        "address": "Elsewhere",
        "phone": "+91 11111 11111",
    })

    assert response.status_code == 400
    assert response.json()["error"] == "Restaurant with this email already exists"


def test_register_requires_all_fields(client):
    response = client.post("/api/restaurants", json={"name": "No Email", "password": "secret1"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "email" in body["detail"]


def test_register_rejects_bad_operating_hours(client):
    response = client.post("/api/restaurants", json={
        "name": "Night Owl",
        "email": "owl@example.com",
        "password": "secret1",
        "address": "1 Moon St",
        "phone": "+91 22222 22222",
        "operatingHours": {"open": "25:00", "close": "02:00"},
    })

    assert response.status_code == 400


def test_get_restaurant_groups_only_available_items(client, owner):
    pizza = add_menu_item(client, owner, "Margherita", 300, "Pizza")
    add_menu_item(client, owner, "Lassi", 80, "Drinks")
    add_menu_item(client, owner, "Farmhouse", 400, "Pizza")
    client.put(f"/api/menu/{pizza['id']}", json={"isAvailable": False}, headers=owner["headers"])

    response = client.get(f"/api/restaurants/{owner['id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["restaurant"]["id"] == owner["id"]
    # Margherita is hidden, so Lassi is the first available item
    assert [group["category"] for group in body["menu"]] == ["Drinks", "Pizza"]
    assert [item["name"] for item in body["menu"][1]["items"]] == ["Farmhouse"]


def test_get_unknown_restaurant_is_404(client):
    response = client.get("/api/restaurants/does-not-exist")

    assert response.status_code == 404
    assert response.json()["error"] == "Restaurant not found"


def test_update_requires_session(client, owner):
    response = client.put(f"/api/restaurants/{owner['id']}", json={"name": "Renamed"})

    assert response.status_code == 401


def test_update_of_another_tenant_is_forbidden(client, owner, other_owner):
    response = client.put(
        f"/api/restaurants/{owner['id']}",
        json={"name": "Hijacked"},
        headers=other_owner["headers"],
    )

    assert response.status_code == 403
    assert client.get(f"/api/restaurants/{owner['id']}").json()["restaurant"]["name"] == "Spice Route"


def test_update_merges_nested_settings(client, owner):
    response = client.put(
        f"/api/restaurants/{owner['id']}",
        json={
            "description": "South Indian classics",
            "operatingHours": {"close": "23:30"},
            "discountConfig": {"enabled": True, "minOrderAmount": 200},
        },
        headers=owner["headers"],
    )

    assert response.status_code == 200
    restaurant = response.json()["restaurant"]
    assert restaurant["description"] == "South Indian classics"
    assert restaurant["operatingHours"] == {"open": "09:00", "close": "23:30"}
    assert restaurant["discountConfig"] == {
        "enabled": True,
        "percentage": 10,
        "minOrderAmount": 200.0,
    }


def test_update_rejects_taken_email_and_unknown_fields(client, owner, other_owner):
    taken = client.put(
        f"/api/restaurants/{owner['id']}",
        json={"email": other_owner["email"]},
        headers=owner["headers"],
    )
    unknown = client.put(
        f"/api/restaurants/{owner['id']}",
        json={"passwordHash": "nope"},
        headers=owner["headers"],
    )

    assert taken.status_code == 400
    assert taken.json()["error"] == "Restaurant with this email already exists"
    assert unknown.status_code == 400


def test_password_change_takes_effect(client, owner):
    client.put(
        f"/api/restaurants/{owner['id']}",
        json={"password": "brand-new-pass"},
        headers=owner["headers"],
    )

    old = client.post("/api/auth/session", json={"email": owner["email"], "password": "s3cret-pass"})
    assert old.status_code == 401
    assert sign_in(client, owner["email"], "brand-new-pass")


def test_table_qr_code_is_png(client, owner):
    response = client.get(f"/api/restaurants/{owner['id']}/qr", params={"table": "7"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")


def test_table_qr_code_for_unknown_restaurant(client):
    assert client.get("/api/restaurants/nope/qr").status_code == 404


def test_email_taken_between_check_and_commit(client, owner, other_owner, monkeypatch):
    async def nobody_has_it(db, email):
        return None

    monkeypatch.setattr(restaurant_service, "find_by_email", nobody_has_it)

    response = client.put(
        f"/api/restaurants/{owner['id']}",
        json={"email": other_owner["email"], "name": "Renamed"},
        headers=owner["headers"],
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Restaurant with this email already exists"
    restaurant = client.get(f"/api/restaurants/{owner['id']}").json()["restaurant"]
    assert restaurant["email"] == owner["email"]
    assert restaurant["name"] == "Spice Route"
