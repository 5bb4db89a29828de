import smtplib

import pytest

from livre_backend.notifications.mailer import EmailNotificationService, SmtpSettings
from livre_backend.shipping.errors import NotificationError
from livre_backend.shipping.models import Buyer, Destination, OrderRecord


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout):
        self.host, self.port, self.timeout = host, port, timeout
        self.logged_in = None
        self.messages = []
        self.started_tls = False
        FakeSMTP.instances.append(self)

    def starttls(self):
        self.started_tls = True

    def login(self, user, password):
        self.logged_in = (user, password)

    def send_message(self, message):
        self.messages.append(message)

    def quit(self):
        pass

    def close(self):
        pass


@pytest.fixture(autouse=True)
def _fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(smtplib, "SMTP_SSL", FakeSMTP)
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)


def _settings(**overrides):
    values = dict(
        host="smtp.test", port=465, use_ssl=True, timeout=5.0,
        username="shop@example.com", password="secret",
        recipients=["owner@example.com", "shop@example.com"],
    )
    values.update(overrides)
    return SmtpSettings(**values)


def _order():
    return OrderRecord(
        order_id="cs_test_9",
        buyer=Buyer("Marie Curie", "marie@example.com", "+33600000000"),
        destination=Destination.from_payload({"country": "FR", "postal_code": "75001", "city": "Paris"}),
        rate_code="colissimo:home",
        dedication_text="Pour Pierre",
        amount_total_cents=3490,
    )


def test_send_order_notification_content():
    EmailNotificationService(_settings()).send_order_notification(_order(), "Rue A 1, 75001 Paris, FR")
    smtp = FakeSMTP.instances[0]
    assert smtp.logged_in == ("shop@example.com", "secret")
    message = smtp.messages[0]
    assert message["Subject"] == "Nouvelle commande cs_test_9"
    assert message["To"] == "owner@example.com, shop@example.com"
    body = message.get_content()
    assert "Nom       : Marie Curie" in body
    assert "Dédicace  : Pour Pierre" in body
    assert "Adresse   : Rue A 1, 75001 Paris, FR" in body
    assert "Total     : 34.90 €" in body


def test_starttls_without_ssl():
    EmailNotificationService(_settings(use_ssl=False, port=587)).send_order_notification(_order(), "")
    assert FakeSMTP.instances[0].started_tls is True


def test_incomplete_configuration_raises():
    with pytest.raises(NotificationError):
        EmailNotificationService(_settings(password="")).send_order_notification(_order(), "")
    assert FakeSMTP.instances == []


def test_smtp_failure_wrapped(monkeypatch):
    def _boom(self, user, password):
        raise smtplib.SMTPAuthenticationError(535, b"bad credentials")

    monkeypatch.setattr(FakeSMTP, "login", _boom)
    with pytest.raises(NotificationError):
        EmailNotificationService(_settings()).send_order_notification(_order(), "")
