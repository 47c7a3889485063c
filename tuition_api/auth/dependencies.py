import logging

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tuition_api.auth import jwt_handler
from tuition_api.core.errors import Unauthorized, UpstreamFailure
from tuition_api.database import get_db
from tuition_api.models.user import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_verified_email(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Missing bearer token.")
    try:
        return jwt_handler.verify(credentials.credentials)
    except jwt.InvalidTokenError as exc:
        logger.warning("Rejected bearer token: %s", exc)
        raise Unauthorized("Invalid token.") from exc


def get_current_user(
    email: str = Depends(get_verified_email),
    db: Session = Depends(get_db),
) -> User:
    try:
        user = db.query(User).filter(User.email == email).first()
    except SQLAlchemyError as exc:
        logger.exception("User lookup failed for %s", email)
        raise UpstreamFailure() from exc
    if user is None:
        raise Unauthorized("User not registered.")
    return user


def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User | None:
    if credentials is None:
        return None
    email = get_verified_email(credentials)
    try:
        return db.query(User).filter(User.email == email).first()
    except SQLAlchemyError as exc:
        logger.exception("User lookup failed for %s", email)
        raise UpstreamFailure() from exc
