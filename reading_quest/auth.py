"""JWT verification for authenticated reading-plan endpoints.

Tokens are issued by the account service; this module only validates them
and loads the matching user. The token is read from the auth cookie first,
then from an ``Authorization: Bearer`` header.
"""
import logging
from typing import Optional

from fastapi import HTTPException, Request, status
from fastapi.security.utils import get_authorization_scheme_param
from jose import JWTError, jwt

from reading_quest.config import get_settings
from reading_quest.repositories import UserProfileRepository

logger = logging.getLogger(__name__)

settings = get_settings()

SECRET_KEY = settings.secret_key
ALGORITHM = "HS256"


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def token_from_request(request: Request) -> Optional[str]:
    cookie_token = request.cookies.get(settings.auth_cookie_name)
    if cookie_token:
        return cookie_token

    scheme, param = get_authorization_scheme_param(request.headers.get("Authorization"))
    if scheme.lower() != "bearer" or not param:
        return None
    return param


def decode_user_id(token: str) -> int:
    """Return the user id in the token's ``sub`` claim; 401 if the token is unusable."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as err:
        logger.info(f"Rejected token: {err}")
        raise _unauthorized() from err

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise _unauthorized()
    return int(subject)


async def get_current_user(request: Optional[Request] = None, token: Optional[str] = None) -> dict:
    """Resolve the active user behind ``token`` or the request's credentials."""
    token_value = token or (token_from_request(request) if request is not None else None)
    if not token_value:
        raise _unauthorized()

    user = UserProfileRepository.get_user(decode_user_id(token_value))
    if user is None:
        raise _unauthorized()
    if not user["is_active"]:
        raise HTTPException(status_code=400, detail="Inactive user")
    return user


async def get_current_user_dependency(request: Request) -> dict:
    """FastAPI dependency for routes that require a signed-in user."""
    return await get_current_user(request=request)
