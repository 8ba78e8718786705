"""Table QR codes that open a restaurant's menu."""

import io
from typing import Optional
from urllib.parse import urlencode

import qrcode

from qrdine.services.restaurants import menu_url


def table_url(restaurant_id: str, table: Optional[str] = None) -> str:
    """Menu URL for a restaurant, pinned to a table when one is given."""
    url = menu_url(restaurant_id)
    if table:
        url = f"{url}?{urlencode({'table': table})}"
    return url


def build_table_qr(restaurant_id: str, table: Optional[str] = None) -> bytes:
    """Render the table's menu URL as a PNG QR code."""
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=2,
    )
    qr.add_data(table_url(restaurant_id, table))
    qr.make(fit=True)

    buffer = io.BytesIO()
    qr.make_image().save(buffer)
    return buffer.getvalue()
