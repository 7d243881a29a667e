# eversol/core/auth.py
from typing import Any

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from eversol.core.config import get_settings
from eversol.storefront import Storefront, StorefrontRegistry, get_registry

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so guests can fall back to the X-Client-Id header.
bearer_scheme = HTTPBearer(auto_error=False)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a shopper access token (JWT).

    Verification:
      - signature (JWT_ALG using JWT_SECRET)
      - expiration time (exp)
      - audience is NOT verified

    Raises:
        HTTPException(401): if token is invalid/expired or no secret is configured.
    """
    settings = get_settings()
    if not settings.JWT_SECRET:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token authentication is not configured",
        )
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def get_shopper_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    x_client_id: str | None = Header(default=None),
) -> str | None:
    """
    Resolve whose storefront state a request works on.

    Flow:
      1. Bearer token => its 'sub' claim (signed-in shopper).
      2. Else X-Client-Id header => guest shopper.
      3. Else None => no durable storage for this request.

    Raises:
        HTTPException(401): if the token is invalid or has no 'sub'.
    """
    if credentials is not None:
        payload = decode_access_token(credentials.credentials)
        sub = payload.get("sub")
        if not sub:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token missing sub",
            )
        return f"user:{sub}"

    if x_client_id and x_client_id.strip():
        return f"guest:{x_client_id.strip()}"

    return None


def get_storefront(
    shopper_id: str | None = Depends(get_shopper_id),
    registry: StorefrontRegistry = Depends(get_registry),
) -> Storefront:
    """FastAPI dependency returning the caller's engines."""
    return registry.get(shopper_id)
