"""
Adaptateur Sendcloud v3: centralise l'authentification et les appels HTTP.
- fetch_shipping_options: cotation (POST /fetch-shipping-options)
- create_shipment: création d'envoi (POST /shipments ou /shipments/announce)
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from livre_backend import config
from .errors import FulfillmentError, UpstreamRateError

logger = logging.getLogger(__name__)

SHIPPING_OPTIONS_PATH = "fetch-shipping-options"
SHIPMENTS_PATH = "shipments"
ANNOUNCE_PATH = "shipments/announce"


class SendcloudClient:
    def __init__(
        self,
        public_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = (base_url or config.SENDCLOUD_API_URL).rstrip("/")
        self._client = httpx.Client(
            auth=(public_key or config.SENDCLOUD_PUBLIC_KEY, secret_key or config.SENDCLOUD_SECRET_KEY),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            timeout=timeout or config.SENDCLOUD_TIMEOUT,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def fetch_shipping_options(self, body: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Retourne la liste 'data' de Sendcloud (éventuellement vide).
        - Non-2xx, erreur réseau ou JSON invalide -> UpstreamRateError.
        - 'data' absent ou non liste -> [] (l'appelant décide si c'est une erreur).
        """
        try:
            resp = self._client.post(self._url(SHIPPING_OPTIONS_PATH), json=body)
        except httpx.HTTPError as e:
            logger.exception("sendcloud.fetch_shipping_options transport error")
            raise UpstreamRateError(f"Sendcloud injoignable: {e}") from e

        if not 200 <= resp.status_code < 300:
            logger.error("sendcloud.fetch_shipping_options failed: status=%s body=%s", resp.status_code, resp.text)
            raise UpstreamRateError(f"Sendcloud a répondu {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as e:
            logger.error("sendcloud.fetch_shipping_options invalid JSON: %s", resp.text[:500])
            raise UpstreamRateError("Réponse Sendcloud invalide") from e

        options = data.get("data") if isinstance(data, dict) else None
        if not isinstance(options, list):
            return []
        return options

    def create_shipment(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Envoie la demande d'expédition sur path (shipments ou shipments/announce).
        - Non-2xx ou erreur réseau -> FulfillmentError portant la charge d'erreur Sendcloud.
        """
        try:
            resp = self._client.post(self._url(path), json=payload)
        except httpx.HTTPError as e:
            raise FulfillmentError(f"Sendcloud injoignable: {e}") from e

        try:
            body: Any = resp.json()
        except ValueError:
            body = resp.text

        if not 200 <= resp.status_code < 300:
            errors = body.get("errors", body) if isinstance(body, dict) else body
            raise FulfillmentError(
                f"Sendcloud a refusé l'envoi ({resp.status_code})",
                payload=errors,
                status=resp.status_code,
            )
        return body if isinstance(body, dict) else {"raw": body}
