import pytest

from qrdine.models import OrderStatus, next_status
from qrdine.services.orders import calculate_discount, calculate_subtotal, can_transition
from tests.conftest import add_menu_item, place_order


# =============================================================================
# STATUS WORKFLOW
# =============================================================================

def test_next_status_walks_the_forward_chain():
    assert next_status(OrderStatus.PENDING) == OrderStatus.CONFIRMED
    assert next_status(OrderStatus.CONFIRMED) == OrderStatus.PREPARING
    assert next_status(OrderStatus.PREPARING) == OrderStatus.READY
    assert next_status(OrderStatus.READY) == OrderStatus.COMPLETED
    assert next_status(OrderStatus.COMPLETED) is None
    assert next_status(OrderStatus.CANCELLED) is None


@pytest.mark.parametrize("current,target", [
    (OrderStatus.PENDING, OrderStatus.PREPARING),
    (OrderStatus.CONFIRMED, OrderStatus.PENDING),
    (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
    (OrderStatus.READY, OrderStatus.PREPARING),
    (OrderStatus.COMPLETED, OrderStatus.CANCELLED),
    (OrderStatus.CANCELLED, OrderStatus.PENDING),
])
def test_illegal_transitions(current, target):
    assert not can_transition(current, target)


def test_pending_can_be_cancelled():
    assert can_transition(OrderStatus.PENDING, OrderStatus.CANCELLED)


def test_pricing_helpers():
    lines = [{"price": 120.0, "quantity": 2}, {"price": 10.0, "quantity": 1}]

    assert calculate_subtotal(lines) == 250.0
    assert calculate_discount(250.0, 10) == 25.0
    assert calculate_discount(99.99, 15) == 15.0


# =============================================================================
# PLACING ORDERS
# =============================================================================

@pytest.fixture
def menu(client, owner):
    return {
        "dosa": add_menu_item(client, owner, "Masala Dosa", 120, "Breakfast"),
        "coffee": add_menu_item(client, owner, "Filter Coffee", 10, "Drinks"),
    }


def test_total_is_sum_of_line_items(client, owner, menu):
    response = place_order(
        client, owner["id"], [(menu["dosa"], 2), (menu["coffee"], 1)],
        tableNumber="4", customerNote="Less spicy",
    )

    assert response.status_code == 201
    order = response.json()["order"]
    assert order["totalPrice"] == 250
    assert order["discountApplied"] == 0
    assert order["discountCode"] is None
    assert order["status"] == "pending"
    assert order["tableNumber"] == "4"
    assert order["customerNote"] == "Less spicy"
    assert order["items"][0] == {
        "menuItemId": menu["dosa"]["id"],
        "name": "Masala Dosa",
        "price": 120,
        "quantity": 2,
    }


def test_placed_orders_keep_their_price_snapshot(client, owner, menu):
    order = place_order(client, owner["id"], [(menu["dosa"], 1)]).json()["order"]

    client.put(
        f"/api/menu/{menu['dosa']['id']}",
        json={"price": 999, "name": "Ghee Roast Dosa"},
        headers=owner["headers"],
    )

    fetched = client.get(f"/api/orders/{order['id']}").json()["order"]
    assert fetched["items"][0]["price"] == 120
    assert fetched["items"][0]["name"] == "Masala Dosa"
    assert fetched["totalPrice"] == 120


def test_order_needs_items(client, owner):
    response = client.post("/api/orders", json={"restaurantId": owner["id"], "items": []})

    assert response.status_code == 400


def test_order_rejects_zero_quantity(client, owner, menu):
    response = place_order(client, owner["id"], [(menu["dosa"], 0)])

    assert response.status_code == 400


def test_order_for_unknown_restaurant_is_404(client, menu):
    response = place_order(client, "missing", [(menu["dosa"], 1)])

    assert response.status_code == 404


def test_order_rejects_unavailable_item(client, owner, menu):
    client.put(
        f"/api/menu/{menu['coffee']['id']}",
        json={"isAvailable": False},
        headers=owner["headers"],
    )

    response = place_order(client, owner["id"], [(menu["coffee"], 1)])

    assert response.status_code == 400
    assert response.json()["error"] == "Filter Coffee is currently unavailable"


def test_order_rejects_another_restaurants_item(client, owner, other_owner, menu):
    pasta = add_menu_item(client, other_owner, "Carbonara", 450, "Pasta")

    response = place_order(client, owner["id"], [(menu["dosa"], 1), (pasta, 1)])

    assert response.status_code == 400
    assert "not on this restaurant's menu" in response.json()["error"]


def test_get_unknown_order_is_404(client):
    response = client.get("/api/orders/nope")

    assert response.status_code == 404
    assert response.json()["error"] == "Order not found"


# =============================================================================
# LISTING
# =============================================================================

def test_list_orders_newest_first_and_filtered(client, owner, menu):
    first = place_order(client, owner["id"], [(menu["dosa"], 1)]).json()["order"]
    second = place_order(client, owner["id"], [(menu["coffee"], 3)]).json()["order"]
    client.put(f"/api/orders/{first['id']}", json={"status": "confirmed"}, headers=owner["headers"])

    everything = client.get(
        "/api/orders", params={"restaurantId": owner["id"]}, headers=owner["headers"]
    ).json()
    pending = client.get(
        "/api/orders", params={"restaurantId": owner["id"], "status": "pending"},
        headers=owner["headers"],
    ).json()

    assert everything["total"] == 2
    assert [o["id"] for o in everything["orders"]] == [second["id"], first["id"]]
    assert [o["id"] for o in pending["orders"]] == [second["id"]]


def test_list_orders_rejects_unknown_status(client, owner):
    response = client.get(
        "/api/orders", params={"restaurantId": owner["id"], "status": "shipped"},
        headers=owner["headers"],
    )

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid status")


def test_list_orders_is_owner_only(client, owner, other_owner):
    anonymous = client.get("/api/orders", params={"restaurantId": owner["id"]})
    foreign = client.get(
        "/api/orders", params={"restaurantId": owner["id"]}, headers=other_owner["headers"]
    )

    assert anonymous.status_code == 401
    assert foreign.status_code == 403


# =============================================================================
# STATUS UPDATES
# =============================================================================

def _set_status(client, owner, order_id, status):
    return client.put(f"/api/orders/{order_id}", json={"status": status}, headers=owner["headers"])


def test_full_forward_progression(client, owner, menu):
    order = place_order(client, owner["id"], [(menu["dosa"], 1)]).json()["order"]

    assert order["nextStatus"] == "confirmed"
    expected_next = ["preparing", "ready", "completed", None]

    for status, following in zip(["confirmed", "preparing", "ready", "completed"], expected_next):
        response = _set_status(client, owner, order["id"], status)
        assert response.status_code == 200, response.text
        assert response.json()["order"]["status"] == status
        assert response.json()["order"]["nextStatus"] == following

    for status in ["pending", "cancelled", "ready"]:
        response = _set_status(client, owner, order["id"], status)
        assert response.status_code == 400
        assert response.json()["error"] == f"Cannot change order status from completed to {status}"


def test_skipping_a_step_is_rejected(client, owner, menu):
    order = place_order(client, owner["id"], [(menu["dosa"], 1)]).json()["order"]

    response = _set_status(client, owner, order["id"], "ready")

    assert response.status_code == 400
    assert client.get(f"/api/orders/{order['id']}").json()["order"]["status"] == "pending"


def test_pending_order_can_be_cancelled_once(client, owner, menu):
    order = place_order(client, owner["id"], [(menu["dosa"], 1)]).json()["order"]

    cancelled = _set_status(client, owner, order["id"], "cancelled")
    revived = _set_status(client, owner, order["id"], "confirmed")

    assert cancelled.status_code == 200
    assert cancelled.json()["order"]["status"] == "cancelled"
    assert cancelled.json()["order"]["nextStatus"] is None
    assert revived.status_code == 400


def test_confirmed_order_cannot_be_cancelled(client, owner, menu):
    order = place_order(client, owner["id"], [(menu["dosa"], 1)]).json()["order"]
    _set_status(client, owner, order["id"], "confirmed")

    assert _set_status(client, owner, order["id"], "cancelled").status_code == 400


def test_status_outside_fixed_set_is_rejected(client, owner, menu):
    order = place_order(client, owner["id"], [(menu["dosa"], 1)]).json()["order"]

    assert _set_status(client, owner, order["id"], "delivered").status_code == 400


def test_patch_can_edit_table_and_note(client, owner, menu):
    order = place_order(client, owner["id"], [(menu["dosa"], 1)], tableNumber="2").json()["order"]

    response = client.put(
        f"/api/orders/{order['id']}",
        json={"tableNumber": "9", "customerNote": "Moved to patio"},
        headers=owner["headers"],
    )

    assert response.status_code == 200
    updated = response.json()["order"]
    assert updated["tableNumber"] == "9"
    assert updated["customerNote"] == "Moved to patio"
    assert updated["status"] == "pending"


def test_patch_cannot_rewrite_items_or_total(client, owner, menu):
    order = place_order(client, owner["id"], [(menu["dosa"], 1)]).json()["order"]

    response = client.put(
        f"/api/orders/{order['id']}",
        json={"totalPrice": 1, "items": []},
        headers=owner["headers"],
    )

    assert response.status_code == 400
    assert client.get(f"/api/orders/{order['id']}").json()["order"]["totalPrice"] == 120


def test_status_update_is_owner_only(client, owner, other_owner, menu):
    order = place_order(client, owner["id"], [(menu["dosa"], 1)]).json()["order"]

    assert client.put(f"/api/orders/{order['id']}", json={"status": "confirmed"}).status_code == 401
    assert _set_status(client, other_owner, order["id"], "confirmed").status_code == 403
