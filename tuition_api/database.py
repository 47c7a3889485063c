from contextlib import contextmanager
from datetime import datetime, timezone
import logging
import uuid

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, declarative_base, sessionmaker

from tuition_api.core import config
from tuition_api.core.errors import BadInput, UpstreamFailure

logger = logging.getLogger(__name__)


_connect_args = {"check_same_thread": False} if config.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(config.DATABASE_URL, echo=config.DATABASE_ECHO, connect_args=_connect_args)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


def new_record_id() -> str:
    return uuid.uuid4().hex


def parse_record_id(value: str, label: str = 'id') -> str:
    """Normalize a record id, raising BadInput before any query is issued."""
    try:
        return uuid.UUID(str(value).strip()).hex
    except (ValueError, AttributeError) as exc:
        raise BadInput(f'Invalid {label}.') from exc


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


@contextmanager
def store_operation(db: Session, action: str):
    """Roll back and re-raise store errors as UpstreamFailure."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('%s failed against the record store.', action)
        raise UpstreamFailure() from exc


def paginate(query: Query, page: int, limit: int) -> tuple[list, int]:
    if page < 1 or limit < 1:
        raise BadInput('Page and limit must be positive.')
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, total
