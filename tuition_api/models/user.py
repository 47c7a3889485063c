"""User model definitions."""

import enum

from sqlalchemy import Column, DateTime, String

from tuition_api.database import Base, new_record_id, utcnow


class UserRole(str, enum.Enum):
    STUDENT = 'student'
    TUTOR = 'tutor'
    ADMIN = 'admin'


class UserStatus(str, enum.Enum):
    ACTIVE = 'active'
    PENDING = 'pending'


def initial_status_for(role: UserRole) -> UserStatus:
    return UserStatus.PENDING if role == UserRole.TUTOR else UserStatus.ACTIVE


class User(Base):
    """Represents a registered marketplace user."""
    __tablename__ = 'users'

    id = Column(String(32), primary_key=True, default=new_record_id)
    email = Column(String, unique=True, index=True, nullable=False)
    role = Column(String, nullable=False)
    status = Column(String, nullable=False)
    name = Column(String)
    photo_url = Column(String)
    phone = Column(String)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    def __init__(self, **kwargs):
        role = UserRole(kwargs.get('role', UserRole.STUDENT))
        kwargs['role'] = role.value
        kwargs.setdefault('status', initial_status_for(role).value)
        kwargs.setdefault('id', new_record_id())
        super().__init__(**kwargs)
