"""Application model definitions."""

import enum

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint

from tuition_api.database import Base, new_record_id, utcnow


class ApplicationStatus(str, enum.Enum):
    APPLIED = 'applied'
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'


class Application(Base):
    """Represents a tutor's bid on a tuition listing."""
    __tablename__ = 'applications'
    __table_args__ = (
        UniqueConstraint('tuition_id', 'tutor_email', name='uq_applications_tuition_tutor'),
    )

    id = Column(String(32), primary_key=True, default=new_record_id)
    tuition_id = Column(String(32), ForeignKey('tuitions.id'), index=True, nullable=False)
    tutor_email = Column(String, index=True, nullable=False)
    student_email = Column(String, index=True, nullable=False)
    status = Column(String, nullable=False)
    qualifications = Column(Text)
    experience = Column(String)
    expected_salary = Column(String)
    applied_at = Column(DateTime, nullable=False, default=utcnow)
    accepted_at = Column(DateTime)

    def __init__(self, **kwargs):
        kwargs.setdefault('status', ApplicationStatus.APPLIED.value)
        kwargs.setdefault('id', new_record_id())
        super().__init__(**kwargs)
