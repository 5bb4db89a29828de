"""Notification email de nouvelle commande (SMTP, Gmail par défaut)."""

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from typing import List, Optional

from livre_backend import config
from livre_backend.shipping.address import clean_postal_code, format_one_line
from livre_backend.shipping.errors import NotificationError
from livre_backend.shipping.models import OrderRecord

logger = logging.getLogger(__name__)


@dataclass
class SmtpSettings:
    host: str
    port: int
    use_ssl: bool
    timeout: float
    username: str
    password: str
    recipients: List[str]


def get_default_smtp_settings() -> SmtpSettings:
    return SmtpSettings(
        host=config.SMTP_HOST,
        port=config.SMTP_PORT,
        use_ssl=config.SMTP_USE_SSL,
        timeout=config.SMTP_TIMEOUT,
        username=config.GMAIL_USER,
        password=config.GMAIL_PASS,
        recipients=[r for r in (config.NOTIFY_EMAIL_TO, config.NOTIFY_EMAIL_FROM) if r],
    )


class EmailNotificationService:
    """Envoi synchrone, appelé par le webhook après la tentative d'expédition."""

    def __init__(self, settings: Optional[SmtpSettings] = None):
        self._settings = settings or get_default_smtp_settings()

    def send_order_notification(self, order: OrderRecord, address_line: str) -> None:
        """
        Envoie le récapitulatif de commande aux destinataires configurés.
        Soulève NotificationError si la configuration est incomplète ou si l'envoi échoue.
        """
        if not self._ready():
            raise NotificationError("Configuration SMTP incomplète")

        message = self._build_message(order, address_line)
        try:
            self._send_sync(message)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"Envoi email impossible: {e}") from e
        logger.info("notifications.email sent order_id=%s to=%s", order.order_id, message["To"])

    def _ready(self) -> bool:
        s = self._settings
        return bool(s.host and s.username and s.password and s.recipients)

    def _build_message(self, order: OrderRecord, address_line: str) -> EmailMessage:
        total = order.amount_total_cents / 100
        lines = [
            "Nouvelle commande reçue",
            f"Nom       : {order.buyer.full_name}",
            f"Email     : {order.buyer.email}",
            f"Téléphone : {order.buyer.phone}",
            f"Adresse   : {address_line}",
            f"Dédicace  : {order.dedication_text}",
            f"Total     : {total:.2f} €",
        ]
        message = EmailMessage()
        message["Subject"] = f"Nouvelle commande {order.order_id}"
        message["From"] = formataddr((config.BOOK_TITLE, self._settings.username))
        message["To"] = ", ".join(self._settings.recipients)
        message.set_content("\n".join(lines))
        return message

    def _send_sync(self, message: EmailMessage) -> None:
        s = self._settings
        if s.use_ssl:
            smtp = smtplib.SMTP_SSL(host=s.host, port=s.port, timeout=s.timeout)
        else:
            smtp = smtplib.SMTP(host=s.host, port=s.port, timeout=s.timeout)
        try:
            if not s.use_ssl:
                smtp.starttls()
            smtp.login(s.username, s.password)
            smtp.send_message(message)
        finally:
            try:
                smtp.quit()
            except smtplib.SMTPException:
                smtp.close()


def one_line_address(order: OrderRecord) -> str:
    """Adresse affichée dans l'email, sans exiger une adresse complète."""
    d = order.destination
    return format_one_line({
        "address_line_1": f"{d.street} {d.house_number}".strip(),
        "postal_code": clean_postal_code(d.postal_code),
        "city": d.city,
        "country_code": d.country,
    })


def get_email_notification_service() -> EmailNotificationService:
    """Factory pour l'injection de dépendances FastAPI."""
    return EmailNotificationService()
