"""FastAPI dependency: get_caller.

Usage in any protected router:
    from src.bm_gateway.auth.dependencies import get_caller

    @router.post("/protected")
    async def protected(caller: str = Depends(get_caller)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.bm_common.errors import InvalidCredentialsError
from src.bm_gateway.auth.jwt_handler import decode_token

# Tokens are issued out of band; tokenUrl only feeds the Swagger "Authorize" button
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_caller(token: str = Depends(oauth2_scheme)) -> str:
    """Return the caller identity from the Bearer token, or raise HTTP 401."""
    try:
        payload = decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    caller: str | None = payload.get("sub")
    if not caller:
        raise _CREDENTIALS_EXCEPTION
    return caller
