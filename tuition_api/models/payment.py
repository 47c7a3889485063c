"""Payment receipt model definitions."""

from sqlalchemy import Column, DateTime, Numeric, String

from tuition_api.database import Base, new_record_id, utcnow

PAYMENT_STATUS_PAID = 'paid'


class Payment(Base):
    """Immutable receipt written once per completed hire."""
    __tablename__ = 'payments'

    id = Column(String(32), primary_key=True, default=new_record_id)
    application_id = Column(String(32), index=True, nullable=False)
    tuition_id = Column(String(32), index=True, nullable=False)
    tutor_email = Column(String, index=True, nullable=False)
    student_email = Column(String, index=True, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    transaction_id = Column(String)
    payment_status = Column(String, nullable=False, default=PAYMENT_STATUS_PAID)
    date = Column(DateTime, nullable=False, default=utcnow)

    def __init__(self, **kwargs):
        kwargs.setdefault('payment_status', PAYMENT_STATUS_PAID)
        kwargs.setdefault('id', new_record_id())
        super().__init__(**kwargs)
