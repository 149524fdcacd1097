"""Session token verification.

CRM users sign in with the external identity provider; it issues a signed
JWT per session. This service only verifies those tokens.
"""

import logging
from typing import Optional
from jose import JWTError, jwt

from app.core.config import settings

logger = logging.getLogger(__name__)


def auth_configured() -> bool:
    return bool(settings.AUTH_JWT_KEY)


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and validate a session token. Returns None when invalid."""
    options = {"verify_aud": bool(settings.AUTH_JWT_AUDIENCE)}
    kwargs = {}
    if settings.AUTH_JWT_AUDIENCE:
        kwargs["audience"] = settings.AUTH_JWT_AUDIENCE
    if settings.AUTH_JWT_ISSUER:
        kwargs["issuer"] = settings.AUTH_JWT_ISSUER
    try:
        return jwt.decode(
            token,
            settings.AUTH_JWT_KEY,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            options=options,
            **kwargs,
        )
    except JWTError as e:
        logger.warning("JWT decode error: %s", e)
        return None
