"""Hiring workflow fired by a completed payment.

The four writes are issued in a fixed order inside one transaction:

1. insert the ``paid`` payment receipt
2. accept the paid-for application
3. reject every competing application for the same tuition
4. confirm the tuition, only while it is still approved

Only an ``approved`` listing can be hired for. The tuition row is locked
(``FOR UPDATE``) before any write, so two hires on the same listing run one
after the other. Step 4 is also conditional on the listing still being
``approved``; if it matches no row the whole unit is rolled back and the
caller gets a conflict. A tuition never ends up with two accepted
applications.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from sqlalchemy.orm import Session

from tuition_api.core.errors import BadInput, Conflict, Forbidden, NotFound
from tuition_api.database import parse_record_id, store_operation, utcnow
from tuition_api.models.application import Application, ApplicationStatus
from tuition_api.models.payment import PAYMENT_STATUS_PAID, Payment
from tuition_api.models.tuition import Tuition, TuitionStatus
from tuition_api.models.user import User
from tuition_api.services.permissions import can

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def _parse_amount(amount) -> Decimal:
    if amount is None:
        raise BadInput('Amount is required.')
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation as exc:
        raise BadInput('Amount must be a number.') from exc
    if not value.is_finite():
        raise BadInput('Amount must be a number.')

    value = value.quantize(CENT, rounding=ROUND_HALF_UP)
    if value <= 0:
        raise BadInput('Amount must be greater than zero.')
    return value


def complete_hiring(
    db: Session,
    actor: User,
    application_id: str,
    tuition_id: str,
    amount,
    transaction_id: str | None = None,
) -> Payment:
    application_key = parse_record_id(application_id, 'application id')
    tuition_key = parse_record_id(tuition_id, 'tuition id')
    paid_amount = _parse_amount(amount)

    with store_operation(db, 'Hiring workflow'):
        # Lock the listing first so concurrent hires queue on the same row.
        tuition = db.get(Tuition, tuition_key, with_for_update=True)
        if tuition is None:
            raise NotFound('Tuition not found.')
        if not can(actor, 'pay', tuition):
            raise Forbidden('Only the creator of this tuition can hire for it.')
        if tuition.status == TuitionStatus.CONFIRMED.value:
            raise Conflict('Tuition is already confirmed.')
        if tuition.status != TuitionStatus.APPROVED.value:
            raise Conflict('Only approved tuitions can be hired for.')

        application = db.query(Application).filter(
            Application.id == application_key,
            Application.tuition_id == tuition.id,
        ).first()
        if application is None:
            raise NotFound('Application not found for this tuition.')
        if application.status == ApplicationStatus.REJECTED.value:
            raise Conflict('Application has already been rejected.')

        now = utcnow()
        payment = Payment(
            application_id=application.id,
            tuition_id=tuition.id,
            tutor_email=application.tutor_email,
            student_email=actor.email,
            amount=paid_amount,
            transaction_id=transaction_id,
            payment_status=PAYMENT_STATUS_PAID,
            date=now,
        )
        db.add(payment)
        db.flush()

        db.query(Application).filter(
            Application.id == application.id,
        ).update(
            {Application.status: ApplicationStatus.ACCEPTED.value, Application.accepted_at: now},
            synchronize_session=False,
        )

        rejected = db.query(Application).filter(
            Application.tuition_id == tuition.id,
            Application.id != application.id,
        ).update(
            {Application.status: ApplicationStatus.REJECTED.value},
            synchronize_session=False,
        )

        confirmed = db.query(Tuition).filter(
            Tuition.id == tuition.id,
            Tuition.status == TuitionStatus.APPROVED.value,
        ).update(
            {Tuition.status: TuitionStatus.CONFIRMED.value, Tuition.updated_at: now},
            synchronize_session=False,
        )
        if confirmed != 1:
            db.rollback()
            logger.warning('Tuition %s changed status during the hire; rolled back payment', tuition.id)
            raise Conflict('Tuition is no longer open for hiring.')

        db.commit()
        db.refresh(payment)

    logger.info(
        'Tuition %s confirmed: application %s accepted, %s competing applications rejected, payment %s',
        tuition_key, application_key, rejected, payment.id,
    )
    return payment


def list_payment_history(db: Session, actor: User, as_role: str | None = None) -> list[Payment]:
    """Payments the caller made as a student or received as a tutor."""
    query = db.query(Payment)
    if as_role == 'tutor':
        query = query.filter(Payment.tutor_email == actor.email)
    elif as_role == 'student':
        query = query.filter(Payment.student_email == actor.email)
    elif as_role is None:
        query = query.filter(
            (Payment.student_email == actor.email) | (Payment.tutor_email == actor.email)
        )
    else:
        raise BadInput('Role must be student or tutor.')

    with store_operation(db, 'Payment listing'):
        return query.order_by(Payment.date.desc()).all()


def list_all_payments(db: Session, actor: User) -> list[Payment]:
    if not can(actor, 'manage', User):
        raise Forbidden('Only admins can view all payments.')
    with store_operation(db, 'Payment listing'):
        return db.query(Payment).order_by(Payment.date.desc()).all()
