"""Tuition listing lifecycle.

``pending`` is the initial status. An admin moderates a listing into
``approved`` or ``rejected``; the hiring workflow moves it to ``confirmed``.
Any content edit by the creator sends the listing back to ``pending`` for
another review.
"""

import logging

from sqlalchemy.orm import Session

from tuition_api.core.errors import BadInput, Forbidden, NotFound
from tuition_api.database import paginate, parse_record_id, store_operation, utcnow
from tuition_api.models.application import Application
from tuition_api.models.tuition import (
    DESCRIPTIVE_FIELDS,
    MODERATION_STATUSES,
    PUBLIC_STATUSES,
    Tuition,
    TuitionStatus,
)
from tuition_api.models.user import User
from tuition_api.services.permissions import can

logger = logging.getLogger(__name__)

WRITE_ONCE_FIELDS = frozenset({'id', 'email', 'created_at'})


def parse_moderation_status(value) -> TuitionStatus:
    try:
        requested = TuitionStatus(str(value).strip().lower())
    except ValueError as exc:
        raise BadInput('Status must be approved or rejected.') from exc
    if requested not in MODERATION_STATUSES:
        raise BadInput('Status must be approved or rejected.')
    return requested


def content_changes(changes: dict) -> dict:
    """Keep only descriptive fields; write-once and status fields are dropped."""
    dropped = set(changes) & WRITE_ONCE_FIELDS
    if dropped:
        logger.info('Discarding write-once fields from tuition update: %s', sorted(dropped))
    return {field: value for field, value in changes.items() if field in DESCRIPTIVE_FIELDS}


def create_tuition(db: Session, actor: User, fields: dict) -> Tuition:
    if not can(actor, 'create', Tuition):
        raise Forbidden('Only students and tutors can post tuitions.')

    tuition = Tuition(
        email=actor.email,
        status=TuitionStatus.PENDING.value,
        **content_changes(fields),
    )
    with store_operation(db, 'Tuition create'):
        db.add(tuition)
        db.commit()
        db.refresh(tuition)

    logger.info('Tuition %s posted by %s', tuition.id, actor.email)
    return tuition


def load_tuition(db: Session, tuition_id: str) -> Tuition:
    record_id = parse_record_id(tuition_id, 'tuition id')
    with store_operation(db, 'Tuition lookup'):
        tuition = db.get(Tuition, record_id)
    if tuition is None:
        raise NotFound('Tuition not found.')
    return tuition


def get_visible_tuition(db: Session, actor: User | None, tuition_id: str) -> Tuition:
    tuition = load_tuition(db, tuition_id)
    if TuitionStatus(tuition.status) in PUBLIC_STATUSES or can(actor, 'view', tuition):
        return tuition
    raise NotFound('Tuition not found.')


def update_tuition(
    db: Session,
    actor: User,
    tuition_id: str,
    changes: dict,
    requested_status: str | None = None,
) -> Tuition:
    """Apply an admin moderation or a creator edit to a tuition.

    An admin supplying a status (or editing someone else's listing) moderates:
    only ``approved``/``rejected`` are accepted and nothing else changes. The
    creator's edit merges descriptive fields and always resets the status to
    ``pending``, whatever status was requested.
    """
    tuition = load_tuition(db, tuition_id)

    if can(actor, 'moderate', tuition) and (requested_status is not None or not can(actor, 'update_content', tuition)):
        new_status = parse_moderation_status(requested_status)
        tuition.status = new_status.value
        logger.info('Tuition %s moderated to %s by %s', tuition.id, new_status.value, actor.email)
    elif can(actor, 'update_content', tuition):
        for field, value in content_changes(changes).items():
            setattr(tuition, field, value)
        if tuition.status != TuitionStatus.PENDING.value:
            logger.info('Tuition %s edited by creator; status %s reset to pending', tuition.id, tuition.status)
        tuition.status = TuitionStatus.PENDING.value
    else:
        logger.warning('%s attempted to update tuition %s', actor.email, tuition.id)
        raise Forbidden('Only the creator or an admin can update this tuition.')

    tuition.updated_at = utcnow()
    with store_operation(db, 'Tuition update'):
        db.commit()
        db.refresh(tuition)
    return tuition


def delete_tuition(db: Session, actor: User, tuition_id: str) -> None:
    tuition = load_tuition(db, tuition_id)
    if not can(actor, 'delete', tuition):
        raise Forbidden('Only the creator or an admin can delete this tuition.')

    with store_operation(db, 'Tuition delete'):
        db.query(Application).filter(Application.tuition_id == tuition.id).delete(synchronize_session=False)
        db.delete(tuition)
        db.commit()
    logger.info('Tuition %s deleted by %s', tuition.id, actor.email)


def list_tuitions(
    db: Session,
    *,
    statuses=None,
    email: str | None = None,
    subject: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Tuition], int]:
    query = db.query(Tuition)
    if statuses:
        query = query.filter(Tuition.status.in_([TuitionStatus(item).value for item in statuses]))
    if email:
        query = query.filter(Tuition.email == email.strip().lower())
    if subject:
        query = query.filter(Tuition.subject.ilike(f'%{subject.strip()}%'))
    query = query.order_by(Tuition.created_at.desc())

    with store_operation(db, 'Tuition listing'):
        return paginate(query, page, limit)


def list_public_tuitions(db: Session, *, subject: str | None = None, page: int = 1, limit: int = 10):
    return list_tuitions(db, statuses=PUBLIC_STATUSES, subject=subject, page=page, limit=limit)


def require_moderator(actor: User) -> None:
    if not can(actor, 'moderate', Tuition):
        raise Forbidden('Only admins can review tuitions.')
