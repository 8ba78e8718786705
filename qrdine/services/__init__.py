"""
                        Services Module

Business logic for each tenant-scoped store. Functions take an
``AsyncSession`` and raise ``qrdine.core.exceptions`` errors; routers
stay thin.

Services:
    - restaurants: registration, settings, credentials
    - menu: menu CRUD and category grouping
    - orders: placement, discount redemption, status workflow
    - reviews: reviews and discount code issuance
    - dashboard: owner summary numbers
    - qr: printable table QR codes
"""
