"""
Module 'shipping' (feature-first): point d'entrée public.
Réunit normalisation d'adresse, cotation Sendcloud, construction et envoi
de la demande d'expédition.
"""

from .errors import (
    ShippingError,
    ValidationError,
    IncompleteAddressError,
    MissingRateCodeError,
    MetadataError,
    WebhookSignatureError,
    UpstreamRateError,
    NoRateAvailableError,
    InvalidQuoteError,
    PaymentProviderError,
    FulfillmentError,
    NotificationError,
)
from .models import Buyer, Destination, HomeDelivery, OrderRecord, PickupPoint, Quote, ShipmentRequest
from .address import clean_postal_code, derive_state_code, normalize_address, split_full_name
from .sendcloud_client import SendcloudClient
from .rates import RateQuoteResolver, LISTING_PARCEL, PRICING_PARCEL
from .builder import ShipmentRequestBuilder
from .dispatcher import FulfillmentDispatcher

__all__ = [
    # errors
    "ShippingError",
    "ValidationError",
    "IncompleteAddressError",
    "MissingRateCodeError",
    "MetadataError",
    "WebhookSignatureError",
    "UpstreamRateError",
    "NoRateAvailableError",
    "InvalidQuoteError",
    "PaymentProviderError",
    "FulfillmentError",
    "NotificationError",
    # models
    "Buyer",
    "Destination",
    "HomeDelivery",
    "OrderRecord",
    "PickupPoint",
    "Quote",
    "ShipmentRequest",
    # address
    "clean_postal_code",
    "derive_state_code",
    "normalize_address",
    "split_full_name",
    # sendcloud
    "SendcloudClient",
    "RateQuoteResolver",
    "LISTING_PARCEL",
    "PRICING_PARCEL",
    "ShipmentRequestBuilder",
    "FulfillmentDispatcher",
]
