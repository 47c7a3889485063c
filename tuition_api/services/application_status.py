"""Application lifecycle: ``applied`` -> ``accepted`` | ``rejected``."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tuition_api.core.errors import Conflict, Forbidden, NotFound
from tuition_api.database import parse_record_id, store_operation
from tuition_api.models.application import Application, ApplicationStatus
from tuition_api.models.tuition import TuitionStatus
from tuition_api.models.user import User
from tuition_api.services.permissions import can
from tuition_api.services.tuition_status import load_tuition

logger = logging.getLogger(__name__)

APPLICATION_FIELDS = ('qualifications', 'experience', 'expected_salary')


def apply_to_tuition(db: Session, actor: User, tuition_id: str, fields: dict) -> Application:
    if not can(actor, 'create', Application):
        raise Forbidden('Only tutors can apply to tuitions.')

    tuition = load_tuition(db, tuition_id)
    if tuition.status != TuitionStatus.APPROVED.value:
        raise Conflict('Tuition is not open for applications.')

    with store_operation(db, 'Application create'):
        existing = db.query(Application).filter(
            Application.tuition_id == tuition.id,
            Application.tutor_email == actor.email,
        ).first()
        if existing:
            raise Conflict('You have already applied to this tuition.')

        application = Application(
            tuition_id=tuition.id,
            tutor_email=actor.email,
            student_email=tuition.email,
            status=ApplicationStatus.APPLIED.value,
            **{field: fields[field] for field in APPLICATION_FIELDS if field in fields},
        )
        db.add(application)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise Conflict('You have already applied to this tuition.') from exc
        db.refresh(application)

    logger.info('Tutor %s applied to tuition %s', actor.email, tuition.id)
    return application


def reject_own_application(db: Session, actor: User, application_id: str) -> Application:
    """Let a tutor withdraw their own application.

    The lookup is scoped by owner, so another tutor's application is reported
    as not found rather than forbidden.
    """
    record_id = parse_record_id(application_id, 'application id')
    with store_operation(db, 'Application reject'):
        application = db.query(Application).filter(
            Application.id == record_id,
            Application.tutor_email == actor.email,
        ).first()
        if application is None or not can(actor, 'reject', application):
            raise NotFound('Application not found or unauthorized.')

        application.status = ApplicationStatus.REJECTED.value
        db.commit()
        db.refresh(application)

    logger.info('Application %s rejected by its tutor %s', application.id, actor.email)
    return application


def list_tutor_applications(db: Session, actor: User) -> list[Application]:
    with store_operation(db, 'Application listing'):
        return db.query(Application).filter(
            Application.tutor_email == actor.email,
        ).order_by(Application.applied_at.desc()).all()


def list_tuition_applications(db: Session, actor: User, tuition_id: str) -> list[Application]:
    tuition = load_tuition(db, tuition_id)
    if not can(actor, 'view_applications', tuition):
        raise Forbidden('Only the creator or an admin can view applications for this tuition.')

    with store_operation(db, 'Application listing'):
        return db.query(Application).filter(
            Application.tuition_id == tuition.id,
        ).order_by(Application.applied_at.asc()).all()
