from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from shared.auth.config import AuthSettings, get_auth_settings
from shared.models.user import CurrentUser

http_bearer = HTTPBearer(auto_error=False)


def decode_token(token: str, settings: AuthSettings) -> CurrentUser:
    """Decode and verify a bearer token into the caller's identity.

    Raises ``JWTError`` for bad signatures/claims and ``ValueError`` when ``sub``
    is missing or not a UUID.
    """
    payload = jwt.decode(
        token,
        settings.secret,
        algorithms=[settings.algorithm],
        issuer=settings.issuer,
        audience=settings.audience,
    )
    subject = payload.get("sub")
    if not subject:
        raise ValueError("Missing sub in token")
    return CurrentUser(id=UUID(subject), email=payload.get("email") or "")


async def get_current_user_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    settings: AuthSettings = Depends(get_auth_settings),
) -> CurrentUser | None:
    """Identity of the caller, or None for anonymous / unverifiable requests."""
    if not credentials or not credentials.credentials:
        return None
    try:
        return decode_token(credentials.credentials, settings)
    except (JWTError, ValueError):
        return None


async def get_current_user_required(
    user: CurrentUser | None = Depends(get_current_user_optional),
) -> CurrentUser:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
