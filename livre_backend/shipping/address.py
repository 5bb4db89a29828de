"""
Normalisation d'adresse pour les deux APIs Sendcloud (cotation et création d'envoi).
"""
import re
from typing import Any, Dict, Tuple

from .errors import IncompleteAddressError
from .models import Buyer, Destination

# Pays pour lesquels Sendcloud exige un code région (ISO 3166-2)
STATE_REQUIRED_COUNTRIES = {"US", "CA", "AU", "NZ"}

_WHITESPACE = re.compile(r"\s+")


def clean_postal_code(postal_code: str) -> str:
    return _WHITESPACE.sub("", postal_code or "")


def split_full_name(full_name: str) -> Tuple[str, str]:
    """Prénom = premier mot, nom = le reste (ou le prénom si rien ne reste)."""
    first, _, rest = (full_name or "").strip().partition(" ")
    rest = rest.strip()
    return first, rest or first


def derive_state_code(country: str, raw_code: str) -> str:
    """
    Code région au format Sendcloud, uniquement pour US/CA/AU/NZ.
    - "CA" pour US -> "US-CA"
    - un code contenant déjà un tiret est renvoyé tel quel
    - retourne "" pour les autres pays ou sans code fourni
    """
    raw_code = (raw_code or "").strip()
    if not raw_code or country not in STATE_REQUIRED_COUNTRIES:
        return ""
    if "-" in raw_code:
        return raw_code
    return f"{country}-{raw_code}"


def normalize_address(destination: Destination, buyer: Buyer) -> Dict[str, Any]:
    """
    Adresse "to_address" canonique.
    - Domicile: city, postal_code et country obligatoires (IncompleteAddressError).
    - Point relais: first_name/last_name ajoutés (exigés par le transporteur).
    """
    postal = clean_postal_code(destination.postal_code)
    if not destination.is_pickup:
        missing = [
            name for name, value in (
                ("city", destination.city),
                ("postal_code", postal),
                ("country", destination.country),
            ) if not value
        ]
        if missing:
            raise IncompleteAddressError(f"Adresse incomplète: {', '.join(missing)}")

    address: Dict[str, Any] = {"name": buyer.full_name}
    if destination.is_pickup:
        first_name, last_name = split_full_name(buyer.full_name)
        address["first_name"] = first_name
        address["last_name"] = last_name

    address.update({
        "email": buyer.email,
        "address_line_1": f"{destination.street} {destination.house_number}".strip(),
        "address_line_2": "",
        "postal_code": postal,
        "city": destination.city,
        "country_code": destination.country,
        "phone_number": buyer.phone,
    })
    state = derive_state_code(destination.country, destination.state_province_code)
    if state:
        address["state_province_code"] = state
    return address


def format_one_line(address: Dict[str, Any]) -> str:
    """Adresse sur une ligne pour l'email de notification."""
    return f"{address.get('address_line_1', '')}, {address.get('postal_code', '')} {address.get('city', '')}, {address.get('country_code', '')}"
