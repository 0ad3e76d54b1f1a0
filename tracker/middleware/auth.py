"""Authentication dependencies: user JWTs and the cron shared secret."""
from fastapi import HTTPException, status, Request
from jose import jwt, JWTError
from pydantic import BaseModel
from typing import Optional
import hmac

from tracker import config


class CurrentUser(BaseModel):
    """User information extracted from JWT."""
    user_id: str
    email: Optional[str] = None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _bearer_token(request: Request) -> str:
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme != "Bearer" or not token:
        raise _unauthorized("Missing or invalid Authorization header")
    return token


async def get_current_user(request: Request) -> CurrentUser:
    """
    Resolve the caller from the HS256 bearer token.

    Raises:
        HTTPException: 401 if the token is missing, invalid, expired or has no subject
    """
    token = _bearer_token(request)

    try:
        claims = jwt.decode(token, config.AUTH_SECRET, algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except JWTError as e:
        raise _unauthorized(f"Invalid token: {e}")

    if not claims.get("sub"):
        raise _unauthorized("Invalid token: missing user ID")

    return CurrentUser(user_id=claims["sub"], email=claims.get("email"))


def ensure_same_user(user_id: str, current_user: CurrentUser) -> None:
    """Reject access to another user's tasks and streaks."""
    if user_id != current_user.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to access this user's resources"
        )


async def verify_cron_secret(request: Request) -> None:
    """Only the external scheduler, holding the shared secret, may trigger sweeps."""
    if not config.CRON_SECRET:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Sweep trigger is not configured",
        )
    token = _bearer_token(request)
    if not hmac.compare_digest(token.encode(), config.CRON_SECRET.encode()):
        raise _unauthorized("Invalid cron secret")
