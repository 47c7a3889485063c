"""Tuition listing model definitions."""

import enum

from sqlalchemy import Column, DateTime, Float, Integer, String, Text

from tuition_api.database import Base, new_record_id, utcnow


class TuitionStatus(str, enum.Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    CONFIRMED = 'confirmed'


# Statuses an admin may moderate a listing into.
MODERATION_STATUSES = frozenset({TuitionStatus.APPROVED, TuitionStatus.REJECTED})

# Statuses visible to anyone browsing listings.
PUBLIC_STATUSES = frozenset({TuitionStatus.APPROVED})

DESCRIPTIVE_FIELDS = (
    'student_name',
    'subject',
    'grade',
    'medium',
    'location',
    'days_per_week',
    'salary',
    'description',
)


class Tuition(Base):
    """Represents a tuition listing posted by a creator."""
    __tablename__ = 'tuitions'

    id = Column(String(32), primary_key=True, default=new_record_id)
    email = Column(String, index=True, nullable=False)
    status = Column(String, index=True, nullable=False)
    student_name = Column(String)
    subject = Column(String, index=True)
    grade = Column(String)
    medium = Column(String)
    location = Column(String)
    days_per_week = Column(Integer)
    salary = Column(Float)
    description = Column(Text)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    def __init__(self, **kwargs):
        kwargs.setdefault('status', TuitionStatus.PENDING.value)
        kwargs.setdefault('id', new_record_id())
        super().__init__(**kwargs)
