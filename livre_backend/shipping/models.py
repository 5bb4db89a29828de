"""
Types du domaine livraison: destination, mode de livraison, cotation,
acheteur, commande confirmée et demande d'expédition.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from .errors import ValidationError

HOME_COUNTRY = "FR"


@dataclass(frozen=True)
class HomeDelivery:
    """Livraison à domicile."""

    @property
    def is_pickup(self) -> bool:
        return False


@dataclass(frozen=True)
class PickupPoint:
    """Livraison en point relais chez un transporteur donné."""
    point_id: str
    carrier_code: str

    @property
    def is_pickup(self) -> bool:
        return True


DeliveryMode = Union[HomeDelivery, PickupPoint]


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _amount_cents(raw: Dict[str, Any]) -> Optional[int]:
    # Prix pré-calculé côté front: seul un nombre est accepté (pas de chaîne)
    for key in ("amount_cents", "amountCents"):
        value = raw.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
    return None


@dataclass
class Destination:
    country: str
    postal_code: str
    mode: DeliveryMode = field(default_factory=HomeDelivery)
    street: str = ""
    house_number: str = ""
    city: str = ""
    state_province_code: str = ""
    phone: str = ""
    service_point_name: str = ""
    shipping_option_code: str = ""
    amount_cents: Optional[int] = None

    @property
    def is_pickup(self) -> bool:
        return self.mode.is_pickup

    @property
    def is_international(self) -> bool:
        return self.country != HOME_COUNTRY

    @classmethod
    def from_payload(cls, raw: Any) -> "Destination":
        """
        Construit la destination depuis le JSON 'shipping' du front (ou des metadata Stripe).
        - Le mode point relais est choisi une seule fois ici (id + carrier_code).
        - country retombe sur country_code puis sur FR.
        - Soulève ValidationError si la charge n'est pas un objet ou si le point relais
          n'a pas de transporteur.
        """
        if not isinstance(raw, dict):
            raise ValidationError("Missing parameter: shipping")

        point_id = _text(raw.get("pickup_point_id") or raw.get("id"))
        carrier = _text(raw.get("pickup_carrier_code") or raw.get("carrier_code"))
        if point_id:
            if not carrier:
                raise ValidationError("Pickup point requires a carrier_code")
            mode: DeliveryMode = PickupPoint(point_id=point_id, carrier_code=carrier)
        else:
            mode = HomeDelivery()

        country = _text(raw.get("country") or raw.get("country_code") or HOME_COUNTRY).upper()
        return cls(
            country=country,
            postal_code=_text(raw.get("postal_code")),
            mode=mode,
            street=_text(raw.get("street")),
            house_number=_text(raw.get("house_number")),
            city=_text(raw.get("city")),
            state_province_code=_text(raw.get("state_province_code")),
            phone=_text(raw.get("phone")),
            service_point_name=_text(raw.get("service_point_name")),
            shipping_option_code=_text(raw.get("shipping_option_code") or raw.get("shipping_method")),
            amount_cents=_amount_cents(raw),
        )


@dataclass(frozen=True)
class Quote:
    carrier_code: str
    option_code: str
    is_pickup_point: bool
    price_cents: int
    name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "carrier_code": self.carrier_code,
            "option_code": self.option_code,
            "is_pickup_point": self.is_pickup_point,
            "price_cents": self.price_cents,
            "name": self.name,
        }


@dataclass(frozen=True)
class Buyer:
    full_name: str
    email: str
    phone: str = ""


@dataclass
class OrderRecord:
    order_id: str
    buyer: Buyer
    destination: Destination
    rate_code: str
    dedication_text: str = ""
    amount_total_cents: int = 0


@dataclass
class ShipmentRequest:
    payload: Dict[str, Any]
    endpoint: str
    international: bool = False
