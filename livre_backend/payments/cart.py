"""
Logique panier pure (pas de Stripe, pas de réseau): un livre + les frais de port.
"""
from typing import Any, Dict, List, Optional

from livre_backend import config

SHIPPING_LINE_NAME = "Frais de livraison"

# module livre_backend.payments.cart
def _line(name: str, unit_amount: int) -> Dict[str, Any]:
    return {
        "quantity": 1,
        "price_data": {
            "currency": "eur",
            "unit_amount": unit_amount,
            "product_data": {"name": name},
        },
    }

def to_line_items(
    shipping_cents: int,
    book_price_cents: Optional[int] = None,
    book_title: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Construit les deux line_items Stripe (EUR, quantité 1):
    - le livre au prix catalogue
    - la livraison au montant coté (centimes)
    """
    price = config.BOOK_PRICE_CENTS if book_price_cents is None else book_price_cents
    title = book_title or config.BOOK_TITLE
    return [
        _line(title, int(price)),
        _line(SHIPPING_LINE_NAME, int(shipping_cents)),
    ]
