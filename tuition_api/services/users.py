import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tuition_api.core.errors import BadInput, Forbidden, NotFound
from tuition_api.database import paginate, parse_record_id, store_operation, utcnow
from tuition_api.models.user import User, UserRole, UserStatus, initial_status_for
from tuition_api.services.permissions import can

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ('name', 'photo_url', 'phone')
SELF_REGISTER_ROLES = frozenset({UserRole.STUDENT, UserRole.TUTOR})


def register_user(db: Session, email: str, role: str, profile: dict) -> tuple[User, bool]:
    """Create the user for a verified email unless one already exists.

    Returns the stored user and whether it was inserted by this call.
    """
    normalized_email = email.strip().lower()
    try:
        requested_role = UserRole(role)
    except ValueError as exc:
        raise BadInput('Invalid role.') from exc
    if requested_role not in SELF_REGISTER_ROLES:
        raise BadInput('Only student and tutor accounts can be registered.')

    with store_operation(db, 'User registration'):
        existing = db.query(User).filter(User.email == normalized_email).first()
        if existing is not None:
            return existing, False

        now = utcnow()
        user = User(
            email=normalized_email,
            role=requested_role.value,
            status=initial_status_for(requested_role).value,
            created_at=now,
            updated_at=now,
            **{field: profile[field] for field in PROFILE_FIELDS if field in profile},
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.info('Concurrent registration for %s; returning the stored user', normalized_email)
            return db.query(User).filter(User.email == normalized_email).one(), False
        db.refresh(user)

    logger.info('Registered %s as %s (%s)', user.email, user.role, user.status)
    return user, True


def update_profile(db: Session, actor: User, changes: dict) -> User:
    for field in PROFILE_FIELDS:
        if field in changes:
            setattr(actor, field, changes[field])
    actor.updated_at = utcnow()

    with store_operation(db, 'Profile update'):
        db.commit()
        db.refresh(actor)
    return actor


def update_user_access(
    db: Session,
    actor: User,
    user_id: str,
    role: str | None = None,
    status: str | None = None,
) -> User:
    record_id = parse_record_id(user_id, 'user id')
    if not can(actor, 'manage', User):
        raise Forbidden('Only admins can change roles or statuses.')
    if role is None and status is None:
        raise BadInput('Role or status is required.')
    try:
        new_role = UserRole(role) if role is not None else None
        new_status = UserStatus(status) if status is not None else None
    except ValueError as exc:
        raise BadInput('Invalid role or status.') from exc

    with store_operation(db, 'User access update'):
        user = db.get(User, record_id)
        if user is None:
            raise NotFound('User not found.')
        if new_role is not None:
            user.role = new_role.value
        if new_status is not None:
            user.status = new_status.value
        user.updated_at = utcnow()
        db.commit()
        db.refresh(user)

    logger.info('User %s updated by %s: role=%s status=%s', user.email, actor.email, user.role, user.status)
    return user


def list_users(db: Session, actor: User, role: str | None = None, page: int = 1, limit: int = 10):
    if not can(actor, 'manage', User):
        raise Forbidden('Only admins can list users.')

    query = db.query(User)
    if role:
        try:
            query = query.filter(User.role == UserRole(role).value)
        except ValueError as exc:
            raise BadInput('Invalid role.') from exc
    query = query.order_by(User.created_at.desc())

    with store_operation(db, 'User listing'):
        return paginate(query, page, limit)
