from unittest.mock import MagicMock

import redis

from livre_backend.payments.repository import (
    CLAIM_PREFIX,
    CLAIM_TTL_SECONDS,
    DEAD_LETTER_MAX,
    FulfillmentLedger,
)


def test_claim_is_exclusive(ledger, fake_redis):
    assert ledger.claim("cs_1") is True
    assert ledger.claim("cs_1") is False
    assert ledger.claim("cs_2") is True
    ttl = fake_redis.ttl(CLAIM_PREFIX + "cs_1")
    assert 0 < ttl <= CLAIM_TTL_SECONDS


def test_release_allows_new_claim(ledger):
    ledger.claim("cs_1")
    ledger.release("cs_1")
    assert ledger.claim("cs_1") is True


def test_dead_letters_latest_first_and_trimmed(ledger):
    for i in range(DEAD_LETTER_MAX + 5):
        ledger.record_dead_letter(f"cs_{i}", "rejected", {"i": i})
    latest = ledger.dead_letters(limit=2)
    assert [e["order_id"] for e in latest] == [f"cs_{DEAD_LETTER_MAX + 4}", f"cs_{DEAD_LETTER_MAX + 3}"]
    assert ledger.health() == {"ready": True, "dead_letters": DEAD_LETTER_MAX}


def test_redis_errors_degrade_gracefully():
    client = MagicMock()
    client.set.side_effect = redis.ConnectionError("down")
    client.delete.side_effect = redis.ConnectionError("down")
    client.pipeline.side_effect = redis.ConnectionError("down")
    client.lrange.side_effect = redis.ConnectionError("down")
    client.ping.side_effect = redis.ConnectionError("down")
    ledger = FulfillmentLedger(client)

    # fail open: l'expédition part quand même
    assert ledger.claim("cs_1") is True
    ledger.release("cs_1")
    ledger.record_dead_letter("cs_1", "rejected")
    assert ledger.dead_letters() == []
    health = ledger.health()
    assert health["ready"] is False
