from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from ..config import settings
from ..models.checkout import CheckoutUser, ANONYMOUS_USER_ID


def create_nonce(action: str, user_id: str = ANONYMOUS_USER_ID, lifetime: Optional[int] = None) -> str:
    """
    Issue an anti-forgery token bound to an action name and a user.
    """
    lifetime = lifetime if lifetime is not None else settings.NONCE_LIFETIME_SECONDS
    expire = datetime.now(timezone.utc) + timedelta(seconds=lifetime)
    claims = {
        "action": action,
        "uid": str(user_id),
        "exp": expire,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_nonce(token: Optional[str], action: str, user_id: str = ANONYMOUS_USER_ID) -> bool:
    """
    True only for an unexpired token issued for the same action and user.
    """
    if not token:
        return False

    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return False

    return claims.get("action") == action and claims.get("uid") == str(user_id)


def decode_access_token(token: str) -> Optional[CheckoutUser]:
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None

    return CheckoutUser(id=str(user_id), email=payload.get("email"))


def user_id_of(user: Optional[CheckoutUser]) -> str:
    return user.id if user else ANONYMOUS_USER_ID
