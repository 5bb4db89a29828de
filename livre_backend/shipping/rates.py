"""
Résolution des cotations Sendcloud.

Deux usages:
- list_options: liste courte classée pour l'affichage (choix du transporteur)
- select_best_price: une seule option retenue pour facturer la livraison

Les deux passes n'utilisent pas le même colis nominal (0,5 kg avec dimensions
pour la liste, 1 kg pour le prix). Les poids sont des constantes nommées et
surchargeables via le constructeur.
"""
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from livre_backend import config
from .address import clean_postal_code
from .errors import InvalidQuoteError, NoRateAvailableError
from .models import Destination, PickupPoint, Quote
from .sendcloud_client import SendcloudClient

logger = logging.getLogger(__name__)

LETTER_PREFIX = "sendcloud:letter"
DEFAULT_HOME_PREFIX = "colissimo:home"
MAX_HOME_CARRIERS = 3


@dataclass(frozen=True)
class ParcelSpec:
    weight_kg: str
    dimensions_cm: Optional[Tuple[int, int, int]] = None

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"weight": {"value": self.weight_kg, "unit": "kg"}}
        if self.dimensions_cm:
            length, width, height = self.dimensions_cm
            body["dimensions"] = {"length": length, "width": width, "height": height, "unit": "cm"}
        return body


LISTING_PARCEL = ParcelSpec(weight_kg="0.5", dimensions_cm=(30, 20, 5))
PRICING_PARCEL = ParcelSpec(weight_kg="1")


def to_cents(price: Decimal) -> int:
    """Arrondi au centime, demi vers l'extérieur (12.345 -> 1235)."""
    return int((price * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def option_price(option: Dict[str, Any]) -> Optional[Decimal]:
    """Prix total de la première cotation, None s'il est absent ou non numérique."""
    quotes = option.get("quotes")
    if not isinstance(quotes, list) or not quotes:
        return None
    total = (((quotes[0] or {}).get("price") or {}).get("total") or {})
    value = total.get("value")
    if value is None or isinstance(value, bool):
        return None
    try:
        price = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not price.is_finite():
        return None
    return price


def _carrier_code(option: Dict[str, Any]) -> str:
    return str((option.get("carrier") or {}).get("code") or "")


def _requires_service_point(option: Dict[str, Any]) -> bool:
    return bool((option.get("requirements") or {}).get("is_service_point_required"))


def _to_quote(option: Dict[str, Any], price: Decimal) -> Quote:
    return Quote(
        carrier_code=_carrier_code(option),
        option_code=str(option.get("code") or ""),
        is_pickup_point=_requires_service_point(option),
        price_cents=to_cents(price),
        name=str(option.get("name") or ""),
    )


class RateQuoteResolver:
    def __init__(
        self,
        client: SendcloudClient,
        origin_country: Optional[str] = None,
        origin_postal_code: Optional[str] = None,
        listing_parcel: ParcelSpec = LISTING_PARCEL,
        pricing_parcel: ParcelSpec = PRICING_PARCEL,
    ):
        self.client = client
        self.origin_country = origin_country or config.SENDCLOUD_SENDER_COUNTRY
        self.origin_postal_code = origin_postal_code if origin_postal_code is not None else config.SENDCLOUD_SENDER_POSTAL
        self.listing_parcel = listing_parcel
        self.pricing_parcel = pricing_parcel

    def _base_body(self, destination: Destination, parcel: ParcelSpec) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "from_country_code": self.origin_country,
            "from_postal_code": self.origin_postal_code,
            "to_country_code": destination.country,
            "to_postal_code": clean_postal_code(destination.postal_code),
            "functionalities": {"b2c": True, "is_service_point_required": destination.is_pickup},
        }
        body.update(parcel.to_body())
        return body

    def list_options(self, destination: Destination) -> List[Quote]:
        """
        Options à afficher, triées par prix croissant.
        - Ignore les options sans prix exploitable et les produits "lettre".
        - Point relais: seules les options service point du transporteur demandé.
        - Domicile: l'option la moins chère par transporteur, 3 transporteurs au plus.
        - Retourne [] quand Sendcloud ne renvoie aucune donnée.
        """
        body = self._base_body(destination, self.listing_parcel)
        if isinstance(destination.mode, PickupPoint):
            body["service_point_id"] = destination.mode.point_id

        options = self.client.fetch_shipping_options(body)
        priced: List[Tuple[Decimal, Dict[str, Any]]] = []
        for option in options:
            if not isinstance(option, dict):
                continue
            if str(option.get("code") or "").startswith(LETTER_PREFIX):
                continue
            price = option_price(option)
            if price is None or price < 0:
                continue
            priced.append((price, option))

        if isinstance(destination.mode, PickupPoint):
            wanted = destination.mode.carrier_code
            kept = [
                (price, o) for price, o in priced
                if _requires_service_point(o) and _carrier_code(o) == wanted
            ]
        else:
            home_only = sorted(
                ((price, o) for price, o in priced if not _requires_service_point(o)),
                key=lambda item: item[0],
            )
            kept = []
            seen = set()
            for price, o in home_only:
                carrier = _carrier_code(o)
                if carrier in seen:
                    continue
                seen.add(carrier)
                kept.append((price, o))
                if len(kept) == MAX_HOME_CARRIERS:
                    break

        kept.sort(key=lambda item: item[0])
        quotes = [_to_quote(o, price) for price, o in kept]
        logger.info(
            "shipping.list_options country=%s pickup=%s upstream=%s kept=%s",
            destination.country, destination.is_pickup, len(options), len(quotes),
        )
        return quotes

    def select_best_price(self, destination: Destination) -> Quote:
        """
        Option retenue pour le prix facturé:
        a) point relais: première option exigeant un service point
        b) sinon: première option Colissimo domicile
        c) sinon: première option renvoyée
        Soulève NoRateAvailableError (aucune option) ou InvalidQuoteError (prix illisible).
        """
        body = self._base_body(destination, self.pricing_parcel)
        if isinstance(destination.mode, PickupPoint):
            body["carrier_code"] = destination.mode.carrier_code

        options = [o for o in self.client.fetch_shipping_options(body) if isinstance(o, dict)]
        if not options:
            raise NoRateAvailableError("Aucune option de livraison disponible")

        option = None
        if destination.is_pickup:
            option = next((o for o in options if _requires_service_point(o)), None)
        if option is None:
            option = next((o for o in options if str(o.get("code") or "").startswith(DEFAULT_HOME_PREFIX)), None)
        if option is None:
            option = options[0]

        price = option_price(option)
        if price is None or price < 0:
            raise InvalidQuoteError("Prix de livraison invalide")
        quote = _to_quote(option, price)
        logger.info("shipping.select_best_price country=%s option=%s cents=%s", destination.country, quote.option_code, quote.price_cents)
        return quote
