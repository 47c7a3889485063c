import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret-key-for-the-tuition-api-suite')

from tuition_api.database import Base  # noqa: E402
from tuition_api.models.application import Application  # noqa: E402
from tuition_api.models.payment import Payment  # noqa: E402,F401
from tuition_api.models.tuition import Tuition  # noqa: E402
from tuition_api.models.user import User  # noqa: E402


@pytest.fixture
def db():
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def make_user(db):
    def _make_user(email: str, role: str = 'student', **fields) -> User:
        user = User(email=email, role=role, **fields)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_tuition(db):
    def _make_tuition(owner: User, status: str = 'pending', **fields) -> Tuition:
        fields.setdefault('subject', 'Mathematics')
        fields.setdefault('grade', 'Class 8')
        fields.setdefault('salary', 5000.0)
        tuition = Tuition(email=owner.email, status=status, **fields)
        db.add(tuition)
        db.commit()
        db.refresh(tuition)
        return tuition

    return _make_tuition


@pytest.fixture
def make_application(db):
    def _make_application(tuition: Tuition, tutor: User, status: str = 'applied') -> Application:
        application = Application(
            tuition_id=tuition.id,
            tutor_email=tutor.email,
            student_email=tuition.email,
            status=status,
        )
        db.add(application)
        db.commit()
        db.refresh(application)
        return application

    return _make_application


@pytest.fixture
def people(make_user):
    return {
        'admin': make_user('admin@example.com', role='admin'),
        'student': make_user('student@example.com', role='student'),
        'other_student': make_user('other@example.com', role='student'),
        'tutor_a': make_user('tutor.a@example.com', role='tutor', status='active'),
        'tutor_b': make_user('tutor.b@example.com', role='tutor', status='active'),
    }
