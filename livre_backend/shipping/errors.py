"""
Hiérarchie d'erreurs de la feature 'shipping' (et des flux checkout/webhook).
Les handlers FastAPI (app_setup.exception_handlers) traduisent ces classes en
codes HTTP: ValidationError -> 400, UpstreamRateError/InvalidQuoteError/
PaymentProviderError -> 500. FulfillmentError et NotificationError ne sont
jamais renvoyées au client: elles sont journalisées par le webhook.
"""
from typing import Any, Optional


class ShippingError(Exception):
    """Racine de toutes les erreurs métier du backend."""
    status_code = 500


class ValidationError(ShippingError):
    """Requête ou métadonnées incomplètes / mal formées."""
    status_code = 400


class IncompleteAddressError(ValidationError):
    pass


class MissingRateCodeError(ValidationError):
    pass


class MetadataError(ValidationError):
    pass


class WebhookSignatureError(ValidationError):
    pass


class UpstreamRateError(ShippingError):
    """API de cotation injoignable, non-2xx, JSON invalide ou sans option."""


class NoRateAvailableError(UpstreamRateError):
    pass


class InvalidQuoteError(ShippingError):
    """Prix de cotation non numérique."""


class PaymentProviderError(ShippingError):
    """Échec de création de la session de paiement."""


class FulfillmentError(ShippingError):
    """L'API d'expédition a rejeté la demande; porte la charge d'erreur du transporteur."""

    def __init__(self, message: str, payload: Optional[Any] = None, status: Optional[int] = None):
        super().__init__(message)
        self.payload = payload
        self.status = status


class NotificationError(ShippingError):
    pass
