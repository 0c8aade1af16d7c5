"""Bearer-token authentication for the Storefront API.

Tokens are issued elsewhere. This module only verifies them: an HS256 JWT
whose ``sub`` claim is the user id and whose ``is_admin`` claim grants access
to the ``/admin`` routes.
"""

import os

from fastapi import Depends, Header, HTTPException
from jose import JWTError, jwt
from pydantic import BaseModel

from storefront.errors import AuthorizationError
from storefront.utils.logging import add_context

DEFAULT_JWT_SECRET = "dev-secret-change-me"
DEFAULT_JWT_ALGORITHM = "HS256"


class Requester(BaseModel):
    user_id: str
    is_admin: bool = False


def _jwt_settings() -> tuple[str, str]:
    return (
        os.environ.get("JWT_SECRET", DEFAULT_JWT_SECRET),
        os.environ.get("JWT_ALGORITHM", DEFAULT_JWT_ALGORITHM),
    )


def create_access_token(user_id: str, is_admin: bool = False) -> str:
    """Sign a token the way the external issuer does. Used by tests and load tests."""
    secret, algorithm = _jwt_settings()
    return jwt.encode({"sub": str(user_id), "is_admin": is_admin}, secret, algorithm=algorithm)


async def get_current_user(authorization: str | None = Header(None)) -> Requester:
    if not authorization:
        raise HTTPException(status_code=401, detail="Not authorized, no token")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Not authorized, no token")

    secret, algorithm = _jwt_settings()
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError:
        raise HTTPException(status_code=401, detail="Not authorized, token failed") from None

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Not authorized, token failed")

    requester = Requester(user_id=str(user_id), is_admin=bool(payload.get("is_admin", False)))
    add_context(user_id=requester.user_id)
    return requester


async def require_admin(requester: Requester = Depends(get_current_user)) -> Requester:
    if not requester.is_admin:
        raise AuthorizationError({"user": ["Not authorized as an admin"]})
    return requester
