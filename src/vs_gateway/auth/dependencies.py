"""FastAPI dependencies: get_current_user_id, require_admin.

Usage in any protected router:
    from src.vs_gateway.auth.dependencies import get_current_user_id

    @router.post("/protected")
    async def protected(user_id: str = Depends(get_current_user_id)):
        ...
"""

from dataclasses import dataclass
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.vs_common.errors import AdminRequiredError, InvalidCredentialsError
from src.vs_gateway.auth.jwt_handler import decode_token

_bearer = HTTPBearer(auto_error=False)

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


@dataclass(frozen=True)
class Principal:
    user_id: str | None
    role: str | None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


async def get_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> Principal:
    """Extract and validate the bearer token. Raises HTTP 401 when absent or invalid."""
    if credentials is None:
        raise _CREDENTIALS_EXCEPTION
    try:
        payload: dict[str, Any] = decode_token(credentials.credentials)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None
    sub = payload.get("sub")
    return Principal(user_id=str(sub) if sub else None, role=payload.get("role"))


async def get_current_user_id(principal: Principal = Depends(get_principal)) -> str:
    if principal.user_id is None:
        raise _CREDENTIALS_EXCEPTION
    return principal.user_id


async def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    """Admin tokens carry role=admin; used for sweeps and prize execution."""
    if not principal.is_admin:
        raise AdminRequiredError()
    return principal
