import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from livre_backend.notifications.mailer import EmailNotificationService, get_email_notification_service
from livre_backend.shipping.dispatcher import FulfillmentDispatcher
from livre_backend.shipping.rates import RateQuoteResolver
from livre_backend.shipping.sendcloud_client import SendcloudClient
from livre_backend.shipping.views import get_rate_resolver, get_sendcloud_client, read_json
from livre_backend.utils.rate_limit import optional_rate_limit

from livre_backend.payments import stripe_client
from livre_backend.payments.repository import FulfillmentLedger, get_fulfillment_ledger
from livre_backend.payments.service import (
    CheckoutQuoteService,
    WebhookFulfillmentService,
    build_webhook_service,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Payments"])

class CheckoutResponse(BaseModel):
    sessionId: str

class WebhookResponse(BaseModel):
    status: str

# module livre_backend.payments.views
def get_checkout_service(resolver: RateQuoteResolver = Depends(get_rate_resolver)) -> CheckoutQuoteService:
    return CheckoutQuoteService(resolver)

def get_webhook_service(
    client: SendcloudClient = Depends(get_sendcloud_client),
    ledger: FulfillmentLedger = Depends(get_fulfillment_ledger),
    notifier: EmailNotificationService = Depends(get_email_notification_service),
) -> WebhookFulfillmentService:
    return build_webhook_service(ledger=ledger, dispatcher=FulfillmentDispatcher(client), notifier=notifier)

@router.post("/create-checkout", response_model=CheckoutResponse, dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_checkout(payload: Dict[str, Any] = Depends(read_json), service: CheckoutQuoteService = Depends(get_checkout_service)):
    """
    Crée une session Checkout Stripe (livre + livraison).
    - Entrée JSON: {"shipping": {...}, "name": "...", "email": "...", "dedicace": "..."}
    - Réponse: {"sessionId": "cs_..."}
    - Erreurs: 400 champs manquants / JSON invalide, 500 cotation ou Stripe en échec
    """
    return service.create_checkout(payload)

@router.post("/webhook", response_model=WebhookResponse, include_in_schema=False)
def webhook_stripe(event: Dict[str, Any] = Depends(stripe_client.parse_event), service: WebhookFulfillmentService = Depends(get_webhook_service)):
    """
    Webhook Stripe: consomme checkout.session.completed pour créer l'expédition.
    - Signature: stripe_client.parse_event (Stripe-Signature + STRIPE_WEBHOOK_SECRET)
    - Réponses: {"status": "ok" | "ignored" | "duplicate"}
    - Erreurs: 400 si signature ou metadata invalides; un échec d'expédition reste 200
    """
    status = service.handle_event(event)
    logger.info("payments.webhook type=%s status=%s", event.get("type"), status)
    return {"status": status}
