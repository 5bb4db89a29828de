from typing import Optional

import redis

from livre_backend.config import FULFILLMENT_REDIS_URL

_redis: Optional[redis.Redis] = None

def get_redis() -> redis.Redis:
    """
    Client Redis synchrone partagé (registre d'expédition).
    La connexion est paresseuse: aucune I/O tant qu'aucune commande n'est envoyée.
    """
    global _redis
    if _redis is None:
        _redis = redis.from_url(
            FULFILLMENT_REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_timeout=2,
            socket_connect_timeout=2,
        )
    return _redis
