"""
Admin Session Tokens

Issues and verifies the opaque session token carried in the admin cookie.
Tokens are Fernet tokens (AES-128-CBC + HMAC-SHA256) over a small JSON
payload. Fernet stamps the issue time into the token, so expiry is checked
with ``ttl`` on decryption and no server-side session store is needed.
"""

import base64
import json
import logging
import time
from functools import lru_cache
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

logger = logging.getLogger(__name__)

# Salt for key derivation (fixed salt is okay for this use case since key is secret)
SALT = b"portfolio_admin_session_v1"


@lru_cache(maxsize=4)
def _get_fernet(secret: str) -> Fernet:
    """
    Get Fernet cipher instance for a signing secret.

    Raises:
        RuntimeError: If the secret is not set
    """
    if not secret:
        raise RuntimeError(
            "SESSION_SECRET environment variable must be set for admin sessions. "
            "Generate one with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
        )

    # Derive a valid Fernet key from the configured secret
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=SALT,
        iterations=100000,
    )
    key = base64.urlsafe_b64encode(kdf.derive(secret.encode()))
    return Fernet(key)


def create_session_token(email: str, secret: str, now: Optional[int] = None) -> str:
    """
    Issue a session token for the admin identity.

    Args:
        email: Identity to embed in the token
        secret: Signing secret (SESSION_SECRET)
        now: Issue time as unix seconds, defaults to the current time

    Returns:
        Opaque token string

    Raises:
        RuntimeError: If the secret is not configured
    """
    fernet = _get_fernet(secret or "")
    payload = json.dumps({"email": email}).encode()
    issued_at = int(time.time()) if now is None else now
    return fernet.encrypt_at_time(payload, issued_at).decode()


def verify_session_token(
    token: Optional[str],
    secret: str,
    ttl: int,
    now: Optional[int] = None,
) -> Optional[str]:
    """
    Verify a session token and return the identity it carries.

    Returns None for missing, malformed, tampered or expired tokens.

    Raises:
        RuntimeError: If the secret is not configured
    """
    if not token:
        return None

    fernet = _get_fernet(secret or "")
    current_time = int(time.time()) if now is None else now

    try:
        payload = fernet.decrypt_at_time(token.encode(), ttl, current_time)
        data = json.loads(payload)
    except (InvalidToken, ValueError, UnicodeError):
        logger.debug("Rejected admin session token")
        return None

    email = data.get("email") if isinstance(data, dict) else None
    return email if isinstance(email, str) and email else None
