"""
Soumission de la demande d'expédition à Sendcloud.
"""
import logging
from typing import Any, Dict

from .errors import FulfillmentError
from .models import ShipmentRequest
from .sendcloud_client import SendcloudClient

logger = logging.getLogger(__name__)


class FulfillmentDispatcher:
    def __init__(self, client: SendcloudClient):
        self.client = client

    def dispatch(self, request: ShipmentRequest) -> Dict[str, Any]:
        """
        POST sur l'endpoint choisi par le builder.
        - Succès: renvoie la réponse Sendcloud.
        - Échec: journalise puis relance FulfillmentError (charge d'erreur du transporteur).
        Aucun retour arrière côté paiement: le paiement est déjà encaissé.
        """
        reference = request.payload.get("external_reference")
        try:
            response = self.client.create_shipment(request.endpoint, request.payload)
        except FulfillmentError as e:
            logger.error(
                "shipping.dispatch failed ref=%s endpoint=%s status=%s errors=%s",
                reference, request.endpoint, e.status, e.payload,
            )
            raise
        logger.info("shipping.dispatch ok ref=%s endpoint=%s", reference, request.endpoint)
        return response
