"""
Dinner Rush Simulation Script

Seeds a demo restaurant and fires concurrent table orders at a running API,
then races several orders against one discount code to show that a code
is consumed exactly once.

Run from project root: python scripts/simulate.py

Version: 1.0.0
"""

import argparse
import asyncio
import random
import sys
import time
import uuid
from datetime import datetime
from typing import Any

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:8001"
TOTAL_ORDERS = 50
RACE_SIZE = 10
DEMO_PASSWORD = "demo-password"

MENU_ITEMS = [
    {"name": "Masala Dosa", "price": 120, "category": "Breakfast"},
    {"name": "Idli Sambar", "price": 80, "category": "Breakfast"},
    {"name": "Paneer Butter Masala", "price": 260, "category": "Mains"},
    {"name": "Veg Biryani", "price": 220, "category": "Mains"},
    {"name": "Butter Naan", "price": 50, "category": "Breads"},
    {"name": "Gulab Jamun", "price": 90, "category": "Desserts"},
    {"name": "Filter Coffee", "price": 40, "category": "Drinks"},
    {"name": "Mango Lassi", "price": 110, "category": "Drinks"},
]
NOTES = [None, "Less spicy", "No onion", "Extra chutney", "Birthday at this table"]


# =============================================================================
# SEEDING
# =============================================================================

async def seed_restaurant(client: httpx.AsyncClient) -> dict[str, Any]:
    """Register a throwaway restaurant with a menu and the review discount switched on."""
    email = f"demo-{uuid.uuid4().hex[:8]}@qrdine.test"
    response = await client.post(f"{API_BASE_URL}/api/restaurants", json={
        "name": "Demo Dosa House",
        "email": email,
        "password": DEMO_PASSWORD,
        "address": "1 Demo Street",
        "phone": "+91 90000 00000",
    })
    response.raise_for_status()
    restaurant = response.json()["restaurant"]

    session = await client.post(
        f"{API_BASE_URL}/api/auth/session",
        json={"email": email, "password": DEMO_PASSWORD},
    )
    session.raise_for_status()
    headers = {"Authorization": f"Bearer {session.json()['accessToken']}"}

    enabled = await client.put(
        f"{API_BASE_URL}/api/restaurants/{restaurant['id']}",
        json={"discountConfig": {"enabled": True, "percentage": 10, "minOrderAmount": 200}},
        headers=headers,
    )
    enabled.raise_for_status()

    menu = []
    for item in MENU_ITEMS:
        created = await client.post(
            f"{API_BASE_URL}/api/menu",
            json={"restaurantId": restaurant["id"], **item},
            headers=headers,
        )
        created.raise_for_status()
        menu.append(created.json()["menuItem"])

    return {"restaurant": restaurant, "headers": headers, "menu": menu}


def random_order_payload(
    restaurant_id: str,
    menu: list[dict],
) -> dict[str, Any]:
    picks = random.sample(menu, k=random.randint(1, 4))
    payload = {
        "restaurantId": restaurant_id,
        "tableNumber": str(random.randint(1, 20)),
        "customerNote": random.choice(NOTES),
        "items": [
            {"menuItemId": item["id"], "quantity": random.randint(1, 3)} for item in picks
        ],
    }
    return payload


# =============================================================================
# ORDER TRAFFIC
# =============================================================================

async def send_order(
    client: httpx.AsyncClient,
    order_num: int,
    payload: dict[str, Any],
) -> dict[str, Any]:
    start_time = time.time()

    try:
        response = await client.post(f"{API_BASE_URL}/api/orders", json=payload, timeout=30.0)
        elapsed = round(time.time() - start_time, 3)

        if response.status_code == 201:
            order = response.json()["order"]
            return {
                "order_num": order_num,
                "success": True,
                "order_id": order["id"],
                "total": order["totalPrice"],
                "discount": order["discountApplied"],
                "time": elapsed,
            }
        return {
            "order_num": order_num,
            "success": False,
            "error": response.json().get("error", response.text[:100]),
            "time": elapsed,
        }
    except httpx.HTTPError as e:
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": round(time.time() - start_time, 3),
        }


async def earn_discount_code(client: httpx.AsyncClient, seeded: dict[str, Any]) -> str:
    """Place one order, review it and return the code the review earns."""
    restaurant_id = seeded["restaurant"]["id"]
    placed = await client.post(
        f"{API_BASE_URL}/api/orders",
        json=random_order_payload(restaurant_id, seeded["menu"]),
    )
    placed.raise_for_status()

    review = await client.post(f"{API_BASE_URL}/api/reviews", json={
        "restaurantId": restaurant_id,
        "orderId": placed.json()["order"]["id"],
        "foodRating": random.randint(3, 5),
        "restaurantRating": random.randint(3, 5),
        "comment": "Simulated diner",
    })
    review.raise_for_status()
    return review.json()["discountCode"]


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(num_orders: int = TOTAL_ORDERS, race_size: int = RACE_SIZE) -> dict[str, Any]:
    """
    Run the dinner rush.

    Args:
        num_orders: Number of concurrent plain orders
        race_size: Number of orders racing for one discount code
    """
    print("=" * 70)
    print("🍽️  DINNER RUSH SIMULATION")
    print("=" * 70)
    print(f"📋 Orders: {num_orders}")
    print(f"🎟️  Discount race size: {race_size}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    async with httpx.AsyncClient() as client:
        seeded = await seed_restaurant(client)
        restaurant_id = seeded["restaurant"]["id"]
        print(f"\n🏪 Seeded restaurant {restaurant_id} with {len(seeded['menu'])} menu items")

        print("\n🚀 Firing table orders...\n")
        start_time = time.time()
        results = await asyncio.gather(*[
            send_order(client, i + 1, random_order_payload(restaurant_id, seeded["menu"]))
            for i in range(num_orders)
        ])
        total_time = round(time.time() - start_time, 2)

        print("🎟️  Racing orders for a single discount code...\n")
        code = await earn_discount_code(client, seeded)
        # Biryani x1 clears the minimum order on its own
        biryani = next(item for item in seeded["menu"] if item["name"] == "Veg Biryani")
        race_payload = {
            "restaurantId": restaurant_id,
            "items": [{"menuItemId": biryani["id"], "quantity": 1}],
            "discountCode": code,
        }
        race = await asyncio.gather(*[
            send_order(client, i + 1, race_payload) for i in range(race_size)
        ])

        summary = await client.get(
            f"{API_BASE_URL}/api/dashboard/summary", headers=seeded["headers"]
        )
        summary.raise_for_status()
        dashboard = summary.json()

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]
    race_winners = [r for r in race if r["success"]]

    print("=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)

    print(f"\n✅ Successful Orders: {len(successful)}/{num_orders}")
    print(f"❌ Failed Orders: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        print("\n📈 Performance Metrics:")
        print(f"   Average Response: {avg_time}s")
        print(f"   Fastest: {min(r['time'] for r in successful)}s")
        print(f"   Slowest: {max(r['time'] for r in successful)}s")

    if failed:
        print("\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print(f"\n🎟️  Code {code}: {len(race_winners)}/{race_size} orders redeemed it")
    if len(race_winners) == 1:
        print(f"   ✅ Exactly one redemption (discount {race_winners[0]['discount']})")
    else:
        print("   ❌ Expected exactly one redemption")

    print("\n📋 Dashboard:")
    print(f"   Orders: {dashboard['totalOrders']} ({dashboard['pendingOrders']} pending)")
    print(f"   💰 Revenue: {dashboard['totalRevenue']:.2f}")
    print(f"   ⭐ Food {dashboard['avgFoodRating']} / Service {dashboard['avgRestaurantRating']}")
    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "race_winners": len(race_winners),
    }


async def check_health() -> bool:
    """Pre-flight: the API is up and its database answers."""
    async with httpx.AsyncClient() as client:
        try:
            response = await client.get(f"{API_BASE_URL}/health")
        except httpx.HTTPError as e:
            print(f"❌ API unreachable: {e}")
            return False

    if response.status_code != 200:
        print(f"❌ Health check failed: {response.text}")
        return False

    data = response.json()
    print(f"✅ Status: {data.get('status')} (database: {data.get('database')})")
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Dinner Rush Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--race", type=int, default=RACE_SIZE, help="Orders racing for one code")
    parser.add_argument("--base-url", default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()

    API_BASE_URL = args.base_url.rstrip("/")

    if not asyncio.run(check_health()):
        sys.exit(1)

    outcome = asyncio.run(run_simulation(args.orders, args.race))
    sys.exit(0 if outcome["race_winners"] == 1 else 1)
