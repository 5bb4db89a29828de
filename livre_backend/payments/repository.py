"""
Accès aux données pour la feature 'payments': registre d'expédition Redis.

- claim/release: verrou d'idempotence par identifiant de commande (session Stripe)
- dead letters: expéditions en échec à reprendre manuellement (liste bornée)
Les erreurs Redis sont journalisées et ne font jamais échouer le webhook.
"""
import json
import logging
import time
from typing import Any, Dict, List, Optional

import redis

from livre_backend.infra import redis_client

logger = logging.getLogger(__name__)
dead_letter_logger = logging.getLogger("livre_backend.dead_letter")

CLAIM_PREFIX = "livre:fulfillment:claim:"
DEAD_LETTER_KEY = "livre:fulfillment:dead_letters"
CLAIM_TTL_SECONDS = 30 * 24 * 3600
DEAD_LETTER_MAX = 500

# module livre_backend.payments.repository
class FulfillmentLedger:
    def __init__(self, client: redis.Redis):
        self.client = client

    def claim(self, order_id: str) -> bool:
        """
        Pose le verrou de la commande (SET NX, TTL 30 jours).
        - True: première livraison de l'événement, l'expédition peut partir.
        - False: doublon déjà traité.
        - Redis indisponible: True (on préfère expédier que perdre la commande).
        """
        try:
            return bool(self.client.set(CLAIM_PREFIX + order_id, str(int(time.time())), nx=True, ex=CLAIM_TTL_SECONDS))
        except redis.RedisError:
            logger.exception("payments.ledger.claim failed order_id=%s (fail open)", order_id)
            return True

    def release(self, order_id: str) -> None:
        """Libère le verrou pour autoriser une nouvelle tentative (renvoi Stripe)."""
        try:
            self.client.delete(CLAIM_PREFIX + order_id)
        except redis.RedisError:
            logger.exception("payments.ledger.release failed order_id=%s", order_id)

    def record_dead_letter(self, order_id: str, reason: str, payload: Optional[Any] = None) -> None:
        entry = {
            "order_id": order_id,
            "reason": reason,
            "payload": payload,
            "at": int(time.time()),
        }
        dead_letter_logger.error("fulfillment dead letter order_id=%s reason=%s payload=%s", order_id, reason, payload)
        try:
            pipe = self.client.pipeline()
            pipe.lpush(DEAD_LETTER_KEY, json.dumps(entry, default=str))
            pipe.ltrim(DEAD_LETTER_KEY, 0, DEAD_LETTER_MAX - 1)
            pipe.execute()
        except redis.RedisError:
            logger.exception("payments.ledger.record_dead_letter failed order_id=%s", order_id)

    def dead_letters(self, limit: int = 20) -> List[Dict[str, Any]]:
        """Dernières dead letters, la plus récente en premier."""
        try:
            raw = self.client.lrange(DEAD_LETTER_KEY, 0, max(limit, 1) - 1)
        except redis.RedisError:
            logger.exception("payments.ledger.dead_letters failed")
            return []
        entries: List[Dict[str, Any]] = []
        for item in raw or []:
            try:
                entries.append(json.loads(item))
            except (TypeError, ValueError):
                entries.append({"raw": item})
        return entries

    def health(self) -> Dict[str, Any]:
        try:
            self.client.ping()
            count = int(self.client.llen(DEAD_LETTER_KEY))
        except redis.RedisError as e:
            return {"ready": False, "error": str(e)}
        return {"ready": True, "dead_letters": count}

def get_fulfillment_ledger() -> FulfillmentLedger:
    """Dépendance FastAPI (surchargée en tests par un ledger fakeredis)."""
    return FulfillmentLedger(redis_client.get_redis())
