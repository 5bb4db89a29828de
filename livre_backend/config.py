# livre_backend.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du backend.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Sendcloud, Stripe, SMTP, Redis)
- Fournit l'identité expéditeur et les URLs de redirection du checkout
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _int_env(name: str, default: int) -> int:
    raw = _clean_env(os.getenv(name) or "")
    try:
        return int(raw) if raw else default
    except ValueError:
        return default

def _float_env(name: str, default: float) -> float:
    raw = _clean_env(os.getenv(name) or "")
    try:
        return float(raw) if raw else default
    except ValueError:
        return default

# Site public (CORS + URLs de retour Stripe)
SITE_URL = _clean_env(os.getenv("SITE_URL") or "http://localhost:8000").rstrip("/")
CORS_ORIGINS = [o.strip() for o in (os.getenv("CORS_ORIGINS") or SITE_URL).split(",") if o.strip()]

# Sendcloud: authentification basic (clé publique / secrète)
SENDCLOUD_API_URL = _clean_env(os.getenv("SENDCLOUD_API_URL") or "https://panel.sendcloud.sc/api/v3").rstrip("/")
SENDCLOUD_PUBLIC_KEY = _clean_env(os.getenv("SENDCLOUD_PUBLIC_KEY") or "")
SENDCLOUD_SECRET_KEY = _clean_env(os.getenv("SENDCLOUD_SECRET_KEY") or "")
SENDCLOUD_TIMEOUT = _float_env("SENDCLOUD_TIMEOUT", 10.0)

# Origine utilisée pour la cotation (pays + code postal de départ)
SENDCLOUD_SENDER_COUNTRY = _clean_env(os.getenv("SENDCLOUD_SENDER_COUNTRY") or "FR")
SENDCLOUD_SENDER_POSTAL = _clean_env(os.getenv("SENDCLOUD_SENDER_POSTAL") or "")

# Identité expéditeur pour la création d'envoi (from_address)
SENDCLOUD_SENDER_NAME = _clean_env(os.getenv("SENDCLOUD_SENDER_NAME") or "")
SENDCLOUD_SENDER_EMAIL = _clean_env(os.getenv("SENDCLOUD_SENDER_EMAIL") or "")
SENDCLOUD_SENDER_STREET = _clean_env(os.getenv("SENDCLOUD_SENDER_STREET") or "")
SENDCLOUD_SENDER_STREET2 = _clean_env(os.getenv("SENDCLOUD_SENDER_STREET2") or "")
SENDCLOUD_SENDER_POSTAL_CODE = _clean_env(os.getenv("SENDCLOUD_SENDER_POSTAL_CODE") or "")
SENDCLOUD_SENDER_CITY = _clean_env(os.getenv("SENDCLOUD_SENDER_CITY") or "")
SENDCLOUD_SENDER_COUNTRY_CODE = _clean_env(os.getenv("SENDCLOUD_SENDER_COUNTRY_CODE") or "FR")
SENDCLOUD_BRAND_ID = _int_env("SENDCLOUD_BRAND_ID", 0)

# Stripe: clé secrète et secret webhook
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")

# Pages de succès/annulation du checkout
CHECKOUT_SUCCESS_PATH = os.getenv("CHECKOUT_SUCCESS_PATH", "/mon-livre/remerciement")
CHECKOUT_CANCEL_PATH = os.getenv("CHECKOUT_CANCEL_PATH", "/mon-livre/paiement")

# Catalogue (un seul titre)
BOOK_TITLE = _clean_env(os.getenv("BOOK_TITLE") or "Livre")
BOOK_PRICE_CENTS = _int_env("BOOK_PRICE_CENTS", 3000)

# SMTP (Gmail par défaut) pour la notification de commande
SMTP_HOST = _clean_env(os.getenv("SMTP_HOST") or "smtp.gmail.com")
SMTP_PORT = _int_env("SMTP_PORT", 465)
SMTP_USE_SSL = (os.getenv("SMTP_USE_SSL", "true").lower() == "true")
SMTP_TIMEOUT = _float_env("SMTP_TIMEOUT", 10.0)
GMAIL_USER = _clean_env(os.getenv("GMAIL_USER") or "")
GMAIL_PASS = _clean_env(os.getenv("GMAIL_PASS") or "")
NOTIFY_EMAIL_TO = _clean_env(os.getenv("NOTIFY_EMAIL_TO") or "")
NOTIFY_EMAIL_FROM = _clean_env(os.getenv("NOTIFY_EMAIL_FROM") or "")

# Redis: registre d'expédition (dédoublonnage + dead letters) et rate limiting
FULFILLMENT_REDIS_URL = _clean_env(os.getenv("FULFILLMENT_REDIS_URL") or os.getenv("RATE_LIMIT_REDIS_URL") or "redis://127.0.0.1:6379/0")
