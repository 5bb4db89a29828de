"""
Cas d'usage 'payments': orchestre cotation, Stripe, registre et expédition.

- CheckoutQuoteService: destination + acheteur -> session Stripe Checkout
- WebhookFulfillmentService: checkout.session.completed -> envoi Sendcloud + email
"""
import logging
from typing import Any, Dict, Optional

from livre_backend import config
from livre_backend.notifications.mailer import EmailNotificationService, one_line_address
from livre_backend.shipping.address import format_one_line
from livre_backend.shipping.builder import ShipmentRequestBuilder
from livre_backend.shipping.dispatcher import FulfillmentDispatcher
from livre_backend.shipping.errors import (
    FulfillmentError,
    MissingRateCodeError,
    NotificationError,
    PaymentProviderError,
    ValidationError,
)
from livre_backend.shipping.models import Destination, OrderRecord
from livre_backend.shipping.rates import RateQuoteResolver

from . import cart
from . import metadata as meta
from . import stripe_client
from .repository import FulfillmentLedger

logger = logging.getLogger(__name__)

COMPLETED_EVENT = "checkout.session.completed"


class CheckoutQuoteService:
    def __init__(self, resolver: RateQuoteResolver):
        self.resolver = resolver

    def create_checkout(self, payload: Dict[str, Any]) -> Dict[str, str]:
        """
        Crée la session Checkout pour un livre + livraison.
        - Requiert shipping, name, email (ValidationError sinon).
        - amount_cents pré-calculé (ou amountCents) utilisé tel quel avec son
          shipping_option_code (obligatoire dans ce cas), sinon select_best_price.
        - Sans code d'option côté front, le code de l'option cotée est conservé en metadata.
        Retour: {"sessionId": "<cs_...>"}
        """
        if not isinstance(payload, dict):
            raise ValidationError("Invalid JSON")
        shipping = payload.get("shipping")
        name = str(payload.get("name") or "").strip()
        email = str(payload.get("email") or "").strip()
        if not shipping or not name or not email:
            raise ValidationError("Missing parameters: shipping, name or email")

        destination = Destination.from_payload(shipping)
        rate_code = destination.shipping_option_code
        if destination.amount_cents is not None:
            if destination.amount_cents < 0:
                raise ValidationError("Invalid parameter: amount_cents")
            # un prix coté sans son option ne pourrait pas être expédié au webhook
            if not rate_code:
                raise ValidationError("Missing parameter: shipping_option_code")
            shipping_cents = destination.amount_cents
        else:
            quote = self.resolver.select_best_price(destination)
            shipping_cents = quote.price_cents
            rate_code = rate_code or quote.option_code

        session = stripe_client.create_session(
            line_items=cart.to_line_items(shipping_cents),
            mode="payment",
            success_url=f"{config.SITE_URL}{config.CHECKOUT_SUCCESS_PATH}",
            cancel_url=f"{config.SITE_URL}{config.CHECKOUT_CANCEL_PATH}",
            metadata=meta.make_metadata(
                shipping=shipping,
                name=name,
                email=email,
                dedicace=str(payload.get("dedicace") or ""),
                rate_code=rate_code,
            ),
        )
        session_id = (session or {}).get("id")
        if not session_id:
            raise PaymentProviderError("Session Stripe invalide")
        logger.info(
            "payments.create_checkout session=%s country=%s pickup=%s shipping_cents=%s",
            session_id, destination.country, destination.is_pickup, shipping_cents,
        )
        return {"sessionId": session_id}


class WebhookFulfillmentService:
    def __init__(
        self,
        ledger: FulfillmentLedger,
        builder: ShipmentRequestBuilder,
        dispatcher: FulfillmentDispatcher,
        notifier: EmailNotificationService,
    ):
        self.ledger = ledger
        self.builder = builder
        self.dispatcher = dispatcher
        self.notifier = notifier

    def handle_event(self, event: Dict[str, Any]) -> str:
        """
        Traite un événement Stripe déjà authentifié.
        Retour: "ignored" (autre type), "duplicate" (commande déjà prise) ou "ok".
        - Metadata illisibles -> MetadataError; code d'option absent -> MissingRateCodeError.
        - Échec d'expédition: dead letter + libération du verrou, la réponse reste "ok".
        - L'email part dans tous les cas, ses erreurs sont seulement journalisées.
        """
        if (event or {}).get("type") != COMPLETED_EVENT:
            return "ignored"

        order = meta.extract_order_record(event)
        if not order.rate_code.strip():
            logger.error("payments.webhook missing shipping option code session=%s", order.order_id)
            raise MissingRateCodeError("Missing shipping option code")

        if not self.ledger.claim(order.order_id):
            logger.info("payments.webhook duplicate delivery session=%s", order.order_id)
            return "duplicate"

        address_line = self._fulfill(order)
        self._notify(order, address_line)
        return "ok"

    def _fulfill(self, order: OrderRecord) -> str:
        address_line = one_line_address(order)
        try:
            request = self.builder.build(order)
            address_line = format_one_line(request.payload["to_address"])
            self.dispatcher.dispatch(request)
        except (FulfillmentError, ValidationError) as e:
            logger.exception("payments.webhook fulfillment failed session=%s", order.order_id)
            self.ledger.record_dead_letter(order.order_id, str(e), getattr(e, "payload", None))
            self.ledger.release(order.order_id)
        return address_line

    def _notify(self, order: OrderRecord, address_line: str) -> None:
        try:
            self.notifier.send_order_notification(order, address_line)
        except NotificationError:
            logger.exception("payments.webhook notification failed session=%s", order.order_id)


def build_webhook_service(
    ledger: FulfillmentLedger,
    dispatcher: FulfillmentDispatcher,
    notifier: EmailNotificationService,
    builder: Optional[ShipmentRequestBuilder] = None,
) -> WebhookFulfillmentService:
    return WebhookFulfillmentService(
        ledger=ledger,
        builder=builder or ShipmentRequestBuilder(),
        dispatcher=dispatcher,
        notifier=notifier,
    )
