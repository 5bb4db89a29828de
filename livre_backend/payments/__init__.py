"""
Module 'payments' (feature-first): point d'entrée public.
Réunit lignes Stripe, metadata, client Stripe, registre Redis et services.
"""

from .cart import to_line_items
from .metadata import make_metadata, extract_order_record
from .stripe_client import require_stripe, create_session, parse_event
from .repository import FulfillmentLedger, get_fulfillment_ledger
from .service import CheckoutQuoteService, WebhookFulfillmentService, build_webhook_service

__all__ = [
    # cart
    "to_line_items",
    # metadata
    "make_metadata",
    "extract_order_record",
    # stripe
    "require_stripe",
    "create_session",
    "parse_event",
    # repository
    "FulfillmentLedger",
    "get_fulfillment_ledger",
    # services
    "CheckoutQuoteService",
    "WebhookFulfillmentService",
    "build_webhook_service",
]
