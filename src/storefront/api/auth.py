"""Bearer-token principal for API requests.

Tokens are issued by the identity service; this module only verifies them
and reads the `id`, `role` and `name` claims.
"""

import os
from datetime import UTC, datetime, timedelta

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from storefront.exceptions import AccessDenied, AuthenticationRequired

ADMIN_ROLE = "admin"

bearer_scheme = HTTPBearer(auto_error=False)


def jwt_secret() -> str:
    return os.getenv("STOREFRONT_JWT_SECRET", "storefront-development-signing-secret-change-me")


def jwt_algorithm() -> str:
    return os.getenv("STOREFRONT_JWT_ALGORITHM", "HS256")


class Principal(BaseModel):
    id: str
    role: str = "user"
    name: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def create_token(user_id: str, role: str = "user", name: str | None = None, expires_in_days: int = 7) -> str:
    """Mint a token with the claims this service reads. Used by tooling and tests."""
    payload = {
        "id": user_id,
        "role": role,
        "name": name,
        "exp": datetime.now(UTC) + timedelta(days=expires_in_days),
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_token(token: str) -> Principal:
    try:
        payload = jwt.decode(token, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.ExpiredSignatureError:
        raise AuthenticationRequired("Token expired") from None
    except jwt.InvalidTokenError:
        raise AuthenticationRequired("Invalid token") from None

    user_id = payload.get("id")
    if not user_id:
        raise AuthenticationRequired("Invalid token payload")
    return Principal(id=str(user_id), role=payload.get("role") or "user", name=payload.get("name"))


async def current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Principal:
    if credentials is None or not credentials.credentials:
        raise AuthenticationRequired("Not authorized, no token")
    return decode_token(credentials.credentials)


async def require_admin(principal: Principal = Depends(current_principal)) -> Principal:
    if not principal.is_admin:
        raise AccessDenied("Admin access required")
    return principal
