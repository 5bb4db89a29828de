"""
Construction de la demande d'expédition Sendcloud à partir d'une commande payée.

- Domicile national / point relais: POST /shipments, sans douane
- Domicile international (hors FR): POST /shipments/announce avec déclaration
  en douane (un article "book", code SH 490199)
Les envois en point relais n'ont jamais de bloc douane, même hors de France.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from livre_backend import config
from .address import normalize_address
from .errors import MissingRateCodeError
from .models import OrderRecord, PickupPoint, ShipmentRequest
from .sendcloud_client import ANNOUNCE_PATH, SHIPMENTS_PATH

PARCEL_WEIGHT_KG = 0.5
PARCEL_DIMENSIONS_CM = ("30", "20", "5")

CUSTOMS_DESCRIPTION = "book"
CUSTOMS_HS_CODE = "490199"
CUSTOMS_ORIGIN_COUNTRY = "FR"
CUSTOMS_EXPORT_TYPE = "private"
CUSTOMS_EXPORT_REASON = "commercial_goods"
INVOICE_NUMBER_MAX_LENGTH = 40


@dataclass
class SenderConfig:
    """Expéditeur (from_address) et marque Sendcloud."""
    name: str
    email: str
    address_line_1: str
    address_line_2: str
    postal_code: str
    city: str
    country_code: str
    brand_id: int


def get_default_sender() -> SenderConfig:
    return SenderConfig(
        name=config.SENDCLOUD_SENDER_NAME,
        email=config.SENDCLOUD_SENDER_EMAIL,
        address_line_1=config.SENDCLOUD_SENDER_STREET,
        address_line_2=config.SENDCLOUD_SENDER_STREET2,
        postal_code=config.SENDCLOUD_SENDER_POSTAL_CODE,
        city=config.SENDCLOUD_SENDER_CITY,
        country_code=config.SENDCLOUD_SENDER_COUNTRY_CODE,
        brand_id=config.SENDCLOUD_BRAND_ID,
    )


class ShipmentRequestBuilder:
    def __init__(self, sender: Optional[SenderConfig] = None, catalog_price_cents: Optional[int] = None):
        self.sender = sender or get_default_sender()
        self.catalog_price_cents = catalog_price_cents if catalog_price_cents is not None else config.BOOK_PRICE_CENTS

    def _build_from_address(self) -> Dict[str, Any]:
        return {
            "name": self.sender.name,
            "email": self.sender.email,
            "address_line_1": self.sender.address_line_1,
            "address_line_2": self.sender.address_line_2 or "",
            "postal_code": self.sender.postal_code,
            "city": self.sender.city,
            "country_code": self.sender.country_code,
        }

    def _build_parcel(self) -> Dict[str, Any]:
        length, width, height = PARCEL_DIMENSIONS_CM
        return {
            "weight": {"value": PARCEL_WEIGHT_KG, "unit": "kg"},
            "dimensions": {"length": length, "width": width, "height": height, "unit": "cm"},
        }

    def _build_customs_item(self) -> Dict[str, Any]:
        return {
            "description": CUSTOMS_DESCRIPTION,
            "quantity": 1,
            "weight": {"value": PARCEL_WEIGHT_KG, "unit": "kg"},
            "price": {"value": round(self.catalog_price_cents / 100, 2), "currency": "EUR"},
            "origin_country": CUSTOMS_ORIGIN_COUNTRY,
            "hs_code": CUSTOMS_HS_CODE,
        }

    def build(self, order: OrderRecord) -> ShipmentRequest:
        """
        Soulève MissingRateCodeError sans code d'option, IncompleteAddressError
        (via normalize_address) si l'adresse domicile est incomplète.
        """
        if not (order.rate_code or "").strip():
            raise MissingRateCodeError("Missing shipping option code")

        destination = order.destination
        to_address = normalize_address(destination, order.buyer)
        international = destination.is_international
        needs_customs = international and not destination.is_pickup

        payload: Dict[str, Any] = {
            "external_reference": order.order_id,
            "telephone": order.buyer.phone,
            "from_address": self._build_from_address(),
            "to_address": to_address,
            "ship_with": {
                "type": "shipping_option_code",
                "properties": {"shipping_option_code": order.rate_code.strip()},
            },
            "parcels": [self._build_parcel()],
            "brand_id": self.sender.brand_id,
        }

        if isinstance(destination.mode, PickupPoint):
            payload["to_service_point"] = {"id": destination.mode.point_id}

        if needs_customs:
            payload["parcels"][0]["parcel_items"] = [self._build_customs_item()]
            payload["customs_information"] = {
                "invoice_number": order.order_id[:INVOICE_NUMBER_MAX_LENGTH],
                "export_type": CUSTOMS_EXPORT_TYPE,
                "export_reason": CUSTOMS_EXPORT_REASON,
            }

        return ShipmentRequest(
            payload=payload,
            endpoint=ANNOUNCE_PATH if needs_customs else SHIPMENTS_PATH,
            international=international,
        )
