from datetime import datetime, timedelta, timezone

import jwt

from tuition_api.core import config


def create_access_token(email: str, expires_minutes: int | None = None) -> str:
    expire_minutes = expires_minutes or config.JWT_EXPIRES_MINUTES
    now = datetime.now(timezone.utc)
    payload = {
        "sub": email,
        "email": email,
        "exp": now + timedelta(minutes=expire_minutes),
        "iat": now,
    }
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])


def verify(token: str) -> str:
    """Return the lower-cased email attested by a bearer token.

    Raises jwt.InvalidTokenError for bad signatures, expired tokens and
    tokens that carry no email.
    """
    payload = decode_access_token(token)
    email = payload.get("email") or payload.get("sub")
    if not email or not isinstance(email, str):
        raise jwt.InvalidTokenError("Token does not carry an email claim")
    return email.strip().lower()
