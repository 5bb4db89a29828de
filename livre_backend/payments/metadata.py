"""
Sérialisation/désérialisation des métadonnées Stripe (shipping, name, email, dedicace).
"""
import json
import logging
from typing import Any, Dict, Optional

from livre_backend import config
from livre_backend.shipping.errors import MetadataError, ValidationError
from livre_backend.shipping.models import Buyer, Destination, OrderRecord

logger = logging.getLogger(__name__)

# module livre_backend.payments.metadata
def make_metadata(
    *,
    shipping: Dict[str, Any],
    name: str,
    email: str,
    dedicace: str = "",
    rate_code: Optional[str] = None,
    brand_id: Optional[int] = None,
) -> Dict[str, str]:
    """
    Métadonnées de la session Checkout, relues telles quelles par le webhook.
    - shipping: destination du front sérialisée en JSON, complétée par
      service_point_name, brand_id et le code d'option retenu s'il manquait.
    """
    shipping_meta = dict(shipping)
    shipping_meta["service_point_name"] = shipping.get("service_point_name") or ""
    shipping_meta["brand_id"] = config.SENDCLOUD_BRAND_ID if brand_id is None else brand_id
    if rate_code and not (shipping.get("shipping_option_code") or shipping.get("shipping_method")):
        shipping_meta["shipping_option_code"] = rate_code
    return {
        "shipping": json.dumps(shipping_meta),
        "name": name,
        "email": email,
        "dedicace": dedicace or "",
    }

def _session_phone(session: Dict[str, Any]) -> str:
    details = session.get("customer_details") or {}
    if not isinstance(details, dict):
        return ""
    return str(details.get("phone") or "").strip()

def extract_order_record(event: Dict[str, Any]) -> OrderRecord:
    """
    Reconstruit la commande depuis un event checkout.session.completed.
    - Attend event.data.object.{id, metadata.{shipping, name, email, dedicace}, amount_total}
    - Téléphone: celui de la destination, sinon customer_details.phone de la session.
    - Soulève MetadataError si la session ou le JSON 'shipping' est inexploitable.
    Le code d'option peut rester vide: c'est à l'appelant de le refuser.
    """
    data_obj = ((event or {}).get("data") or {}).get("object") if isinstance(event, dict) else None
    if not isinstance(data_obj, dict):
        raise MetadataError("Invalid metadata")
    session_id = str(data_obj.get("id") or "")
    if not session_id:
        raise MetadataError("Invalid metadata: missing session id")

    meta = data_obj.get("metadata") or {}
    if not isinstance(meta, dict):
        raise MetadataError("Invalid metadata")
    try:
        shipping = json.loads(meta.get("shipping") or "{}")
        destination = Destination.from_payload(shipping)
    except (TypeError, ValueError, ValidationError) as e:
        logger.warning("payments.metadata invalid shipping session=%s: %s", session_id, e)
        raise MetadataError("Invalid metadata") from e

    buyer = Buyer(
        full_name=str(meta.get("name") or "").strip(),
        email=str(meta.get("email") or "").strip(),
        phone=destination.phone or _session_phone(data_obj),
    )
    try:
        amount_total = int(data_obj.get("amount_total") or 0)
    except (TypeError, ValueError):
        amount_total = 0

    return OrderRecord(
        order_id=session_id,
        buyer=buyer,
        destination=destination,
        rate_code=destination.shipping_option_code,
        dedication_text=str(meta.get("dedicace") or ""),
        amount_total_cents=amount_total,
    )
