"""
                QRDine

Multi-tenant QR-code restaurant ordering backend: restaurants manage a
menu and settings, customers scan a table code, order, and review.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
