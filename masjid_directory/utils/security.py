# Access tokens and password hashing.
# Every token verification failure maps to one
# "invalid or expired" outcome for callers.

import hashlib
import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from masjid_directory.core.config import settings
from masjid_directory.models.dto import ErrorResponse, TokenUser

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """SHA-256 hex digest, the format existing user records were written with."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def verify_password(password: str, password_hash: str) -> bool:
    return hmac.compare_digest(hash_password(password), password_hash)


def create_access_token(user_id: str, email: str, admin: List[str]) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "email": email,
        "admin": list(admin),
        "iat": now,
        "exp": now + timedelta(days=settings.JWT_EXPIRES_DAYS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[TokenUser]:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        return TokenUser.model_validate(payload)
    except jwt.PyJWTError as e:
        logger.info(f"Rejected access token: {type(e).__name__}")
        return None
    except ValueError:
        logger.info("Rejected access token: unexpected claims")
        return None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TokenUser:
    """FastAPI dependency returning the token's user, or 401/403."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ErrorResponse(error="Access token required").model_dump(exclude_none=True),
        )

    user = decode_access_token(credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=ErrorResponse(error="Invalid or expired token").model_dump(exclude_none=True),
        )
    return user


def get_client_ip(request: Request) -> str:
    """
    Extracts the client's IP address from the request, preferring the first
    hop of `x-forwarded-for` when running behind a proxy.
    """
    x_forwarded_for = request.headers.get("x-forwarded-for")
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()

    return request.client.host if request.client else "unknown_ip"
