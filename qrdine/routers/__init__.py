"""HTTP routers, one per resource."""

from qrdine.routers import auth, dashboard, menu, orders, restaurants, reviews

all_routers = [
    auth.router,
    restaurants.router,
    menu.router,
    orders.router,
    reviews.router,
    dashboard.router,
]

__all__ = ["all_routers"]
