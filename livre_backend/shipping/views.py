import logging
from typing import Any, Dict, Iterator, List

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from livre_backend.utils.rate_limit import optional_rate_limit
from .errors import ValidationError
from .models import Destination
from .rates import RateQuoteResolver
from .sendcloud_client import SendcloudClient

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Shipping"])

class QuoteOption(BaseModel):
    carrier_code: str
    option_code: str
    is_pickup_point: bool
    price_cents: int
    name: str = ""

class QuoteOptionsResponse(BaseModel):
    options: List[QuoteOption]

class QuotePriceResponse(BaseModel):
    amount: int

# module livre_backend.shipping.views
def get_sendcloud_client() -> Iterator[SendcloudClient]:
    """Client Sendcloud par requête, fermé après la réponse."""
    client = SendcloudClient()
    try:
        yield client
    finally:
        client.close()

def get_rate_resolver(client: SendcloudClient = Depends(get_sendcloud_client)) -> RateQuoteResolver:
    return RateQuoteResolver(client)

async def read_json(request: Request) -> Dict[str, Any]:
    """Body JSON brut; ValidationError('Invalid JSON') si illisible ou non objet."""
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Invalid JSON")
    if not isinstance(body, dict):
        raise ValidationError("Invalid JSON")
    return body

async def read_destination(body: Dict[str, Any] = Depends(read_json)) -> Destination:
    shipping = body.get("shipping")
    if not shipping:
        raise ValidationError("Missing parameter: shipping")
    return Destination.from_payload(shipping)

@router.post("/quote-options", response_model=QuoteOptionsResponse, dependencies=[Depends(optional_rate_limit(times=30, seconds=60))])
def quote_options(destination: Destination = Depends(read_destination), resolver: RateQuoteResolver = Depends(get_rate_resolver)):
    """
    Liste courte des options de livraison pour la destination.
    - Entrée JSON: {"shipping": {country, postal_code, id?, carrier_code?, ...}}
    - Réponse: {"options": [Quote, ...]} triées par prix croissant (peut être vide)
    - Erreurs: 400 body/destination invalide, 500 échec Sendcloud
    """
    quotes = resolver.list_options(destination)
    return {"options": [q.to_dict() for q in quotes]}

@router.post("/quote-price", response_model=QuotePriceResponse, dependencies=[Depends(optional_rate_limit(times=30, seconds=60))])
def quote_price(destination: Destination = Depends(read_destination), resolver: RateQuoteResolver = Depends(get_rate_resolver)):
    """
    Prix de livraison facturé (centimes).
    - Réponse: {"amount": <int>}
    - Erreurs: 400 body invalide, 500 aucune option / prix illisible / échec Sendcloud
    """
    quote = resolver.select_best_price(destination)
    return {"amount": quote.price_cents}
