import json
import os
from typing import Any, Dict, Generator, List

import fakeredis
import httpx
import pytest
from fastapi.testclient import TestClient

# Avant l'import de l'app: pas d'init FastAPILimiter (Redis) pendant les tests
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

from livre_backend import config
from livre_backend.app_setup import create_app
from livre_backend.notifications.mailer import get_email_notification_service
from livre_backend.payments import stripe_client
from livre_backend.payments.repository import FulfillmentLedger, get_fulfillment_ledger
from livre_backend.shipping.errors import NotificationError
from livre_backend.shipping.sendcloud_client import SendcloudClient
from livre_backend.shipping.views import get_sendcloud_client

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


class SendcloudStub:
    """Faux Sendcloud v3 branché via httpx.MockTransport (aucun accès réseau)."""

    def __init__(self):
        self.options: List[Dict[str, Any]] = []
        self.options_status = 200
        self.shipment_status = 200
        self.shipment_body: Any = {"data": {"id": 42, "parcels": [{"tracking_number": "TRK1"}]}}
        self.requests: List[tuple] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content or b"{}")
        self.requests.append((request.url.path, body, request))
        if request.url.path.endswith("/fetch-shipping-options"):
            return httpx.Response(self.options_status, json={"data": self.options})
        return httpx.Response(self.shipment_status, json=self.shipment_body)

    def client(self) -> SendcloudClient:
        return SendcloudClient(
            public_key="pk_test",
            secret_key="sk_test",
            base_url="https://sendcloud.test/api/v3",
            transport=httpx.MockTransport(self.handler),
        )

    def bodies(self, suffix: str) -> List[Dict[str, Any]]:
        return [body for path, body, _ in self.requests if path.endswith(suffix)]


class FakeNotifier:
    def __init__(self):
        self.sent: List[tuple] = []
        self.fail = False

    def send_order_notification(self, order, address_line):
        self.sent.append((order, address_line))
        if self.fail:
            raise NotificationError("smtp down")


@pytest.fixture
def make_option():
    def _make(code: str, carrier: str, price: Any, service_point: bool = False, name: str = ""):
        return {
            "code": code,
            "name": name or code,
            "carrier": {"code": carrier},
            "requirements": {"is_service_point_required": service_point},
            "quotes": [{"price": {"total": {"value": price, "currency": "EUR"}}}],
        }
    return _make


@pytest.fixture
def sendcloud() -> SendcloudStub:
    return SendcloudStub()


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def ledger(fake_redis) -> FulfillmentLedger:
    return FulfillmentLedger(fake_redis)


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def stripe_sessions(monkeypatch) -> List[Dict[str, Any]]:
    """Remplace stripe_client.create_session; renvoie la liste des appels."""
    calls: List[Dict[str, Any]] = []

    def _fake_create_session(**kwargs):
        calls.append(kwargs)
        return {"id": "cs_test_123", "url": "https://checkout.stripe.test/cs_test_123"}

    monkeypatch.setattr(stripe_client, "create_session", _fake_create_session, raising=True)
    return calls


@pytest.fixture
def completed_event():
    def _make(shipping: Dict[str, Any], session_id: str = "cs_test_123", **extra):
        session = {
            "id": session_id,
            "amount_total": extra.pop("amount_total", 3490),
            "customer_details": {"phone": extra.pop("customer_phone", "+33600000000")},
            "metadata": {
                "shipping": json.dumps(shipping),
                "name": extra.pop("name", "Marie Curie"),
                "email": extra.pop("email", "marie@example.com"),
                "dedicace": extra.pop("dedicace", "Pour Pierre"),
            },
        }
        session.update(extra)
        return {"type": "checkout.session.completed", "data": {"object": session}}
    return _make


@pytest.fixture(scope="session")
def app():
    return create_app()


@pytest.fixture()
def client(app, sendcloud, ledger, notifier, monkeypatch) -> Generator[TestClient, None, None]:
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    monkeypatch.setattr(config, "STRIPE_WEBHOOK_SECRET", "", raising=True)

    def _override_sendcloud():
        c = sendcloud.client()
        try:
            yield c
        finally:
            c.close()

    app.dependency_overrides[get_sendcloud_client] = _override_sendcloud
    app.dependency_overrides[get_fulfillment_ledger] = lambda: ledger
    app.dependency_overrides[get_email_notification_service] = lambda: notifier
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
