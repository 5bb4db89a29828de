"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
"""
import json
import logging
from typing import Any, Dict, List

import stripe
from fastapi import Request

from livre_backend import config
from livre_backend.shipping.errors import PaymentProviderError, WebhookSignatureError

logger = logging.getLogger(__name__)

# module livre_backend.payments.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY si disponible.
    - En absence de clé, les appels Stripe échoueront côté SDK (ex: No API key provided).
    """
    if config.STRIPE_SECRET_KEY:
        stripe.api_key = config.STRIPE_SECRET_KEY
    return stripe

def create_session(
    *,
    line_items: List[Dict[str, Any]],
    mode: str,
    success_url: str,
    cancel_url: str,
    metadata: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout.
    - line_items: lignes Stripe (price_data/quantity)
    - metadata: {"shipping": "<json>", "name", "email", "dedicace"}
    Retour: dict session (ex: {"id": "cs_test_...", "url": "https://..."})
    Soulève PaymentProviderError si Stripe refuse la création.
    """
    require_stripe()
    try:
        session = stripe.checkout.Session.create(
            line_items=line_items,
            mode=mode,
            success_url=success_url,
            cancel_url=cancel_url,
            metadata=metadata,
            payment_method_types=["card"],
        )
    except stripe.StripeError as e:
        logger.exception("stripe.create_session failed")
        raise PaymentProviderError(str(e)) from e
    return {"id": _field(session, "id"), "url": _field(session, "url")}

def _field(obj: Any, key: str) -> Any:
    # StripeObject ou dict (mocks de tests)
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)

async def parse_event(request: Request) -> Dict[str, Any]:
    """
    Parse et valide un événement Stripe signé (webhook).
    - Lit le body brut + en-tête Stripe-Signature
    - Valide la signature via Webhook.construct_event (STRIPE_WEBHOOK_SECRET)
    - Sans secret configuré (dev local), le JSON est accepté tel quel avec un avertissement.
    Retour: l'événement sous forme de dict (body brut décodé).
    Soulève WebhookSignatureError si la signature ou le JSON est invalide.
    """
    require_stripe()
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature") or ""
    if config.STRIPE_WEBHOOK_SECRET:
        try:
            stripe.Webhook.construct_event(payload, sig_header, config.STRIPE_WEBHOOK_SECRET)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning("stripe.parse_event signature rejected: %s", e)
            raise WebhookSignatureError(f"Webhook Error: {e}") from e
    else:
        logger.warning("STRIPE_WEBHOOK_SECRET absent: signature du webhook non vérifiée")
    try:
        event = json.loads(payload)
    except ValueError as e:
        raise WebhookSignatureError("Webhook Error: invalid payload") from e
    if not isinstance(event, dict):
        raise WebhookSignatureError("Webhook Error: invalid payload")
    return event
