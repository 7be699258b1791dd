"""HTTP Basic authentication for dashboard routes."""

import base64
import binascii
import hmac
from typing import Optional

from src.utils.logging import get_structured_logger
from src.utils.settings import Settings, get_settings

logger = get_structured_logger(__name__)

REALM = "Secure Area"
CHALLENGE = f'Basic realm="{REALM}"'


def is_auth_configured(settings: Optional[Settings] = None) -> bool:
    """Both credentials must be set; otherwise the dashboard is open (development mode)."""
    settings = settings or get_settings()
    return bool(settings.basic_auth_user and settings.basic_auth_password)


def parse_basic_auth(header: Optional[str]) -> Optional[tuple[str, str]]:
    """Decode an ``Authorization: Basic ...`` header into (user, password)."""
    if not header:
        return None

    scheme, _, encoded = header.strip().partition(" ")
    if scheme.lower() != "basic" or not encoded.strip():
        return None

    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    user, sep, password = decoded.partition(":")
    if not sep:
        return None
    return user, password


def verify_basic_auth(header: Optional[str], settings: Optional[Settings] = None) -> bool:
    """
    Check an Authorization header against the configured credentials.

    Returns True when the credentials match or auth is not configured.
    """
    settings = settings or get_settings()
    if not is_auth_configured(settings):
        logger.warning("Basic Auth is not configured. Access is unrestricted.")
        return True

    credentials = parse_basic_auth(header)
    if credentials is None:
        return False

    user, password = credentials
    # Evaluate both comparisons so timing does not reveal which one failed
    user_ok = hmac.compare_digest(user.encode("utf-8"), settings.basic_auth_user.encode("utf-8"))
    password_ok = hmac.compare_digest(password.encode("utf-8"), settings.basic_auth_password.encode("utf-8"))
    return user_ok and password_ok
