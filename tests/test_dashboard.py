from tests.conftest import add_menu_item, place_order


def test_dashboard_requires_session(client):
    assert client.get("/api/dashboard/summary").status_code == 401


def test_empty_dashboard(client, owner):
    response = client.get("/api/dashboard/summary", headers=owner["headers"])

    assert response.status_code == 200
    assert response.json() == {
        "totalOrders": 0,
        "pendingOrders": 0,
        "totalRevenue": 0.0,
        "totalReviews": 0,
        "avgFoodRating": 0.0,
        "avgRestaurantRating": 0.0,
        "recentOrders": [],
    }


def test_dashboard_counts_only_own_restaurant(client, owner, other_owner):
    naan = add_menu_item(client, owner, "Butter Naan", 60, "Breads")
    pizza = add_menu_item(client, other_owner, "Diavola", 500, "Pizza")

    kept = place_order(client, owner["id"], [(naan, 2)]).json()["order"]
    cancelled = place_order(client, owner["id"], [(naan, 5)]).json()["order"]
    place_order(client, other_owner["id"], [(pizza, 1)])

    client.put(f"/api/orders/{kept['id']}", json={"status": "confirmed"}, headers=owner["headers"])
    client.put(f"/api/orders/{cancelled['id']}", json={"status": "cancelled"}, headers=owner["headers"])
    place_order(client, owner["id"], [(naan, 1)])
    client.post("/api/reviews", json={
        "restaurantId": owner["id"],
        "orderId": kept["id"],
        "foodRating": 5,
        "restaurantRating": 3,
    })

    summary = client.get("/api/dashboard/summary", headers=owner["headers"]).json()

    assert summary["totalOrders"] == 3
    assert summary["pendingOrders"] == 1
    assert summary["totalRevenue"] == 180
    assert summary["totalReviews"] == 1
    assert summary["avgFoodRating"] == 5.0
    assert summary["avgRestaurantRating"] == 3.0
    assert len(summary["recentOrders"]) == 3
    assert all(o["restaurantId"] == owner["id"] for o in summary["recentOrders"])
    by_id = {o["id"]: o for o in summary["recentOrders"]}
    assert by_id[kept["id"]]["nextStatus"] == "preparing"
    assert by_id[cancelled["id"]]["nextStatus"] is None


def test_recent_orders_are_capped(client, owner):
    naan = add_menu_item(client, owner, "Butter Naan", 60, "Breads")
    for _ in range(7):
        place_order(client, owner["id"], [(naan, 1)])

    summary = client.get("/api/dashboard/summary", headers=owner["headers"]).json()

    assert summary["totalOrders"] == 7
    assert len(summary["recentOrders"]) == 5
