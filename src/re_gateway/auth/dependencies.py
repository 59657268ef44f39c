"""FastAPI dependencies: the authenticated principal.

Usage in any protected router:
    from src.re_gateway.auth.dependencies import require_payer

    @router.get("/protected")
    async def protected(principal: Principal = Depends(require_payer)):
        ...

The ledger trusts the identifier it is given; role checks here only pick
which surface (tenant vs owner) a caller may use.
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.re_common.errors import InvalidCredentialsError, RoleForbiddenError
from src.re_gateway.auth.jwt_handler import ROLE_OWNER, ROLE_PAYER, decode_access_token

# Tokens are minted by the identity service; tokenUrl only feeds Swagger UI.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: str


async def get_current_principal(token: str = Depends(oauth2_scheme)) -> Principal:
    """Raises HTTP 401 if the token is missing, invalid, or expired."""
    try:
        payload = decode_access_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or role not in (ROLE_OWNER, ROLE_PAYER):
        raise _CREDENTIALS_EXCEPTION
    return Principal(user_id=user_id, role=role)


async def require_payer(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    if principal.role != ROLE_PAYER:
        raise RoleForbiddenError(ROLE_PAYER)
    return principal


async def require_owner(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    if principal.role != ROLE_OWNER:
        raise RoleForbiddenError(ROLE_OWNER)
    return principal
