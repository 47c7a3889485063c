from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from tuition_api.auth.dependencies import get_current_user, get_optional_user
from tuition_api.core import config
from tuition_api.database import get_db
from tuition_api.models.tuition import TuitionStatus
from tuition_api.models.user import User
from tuition_api.routes.application_routes import ApplicationResponse
from tuition_api.services import application_status, tuition_status

router = APIRouter(tags=['tuitions'])


class TuitionFields(BaseModel):
    student_name: str | None = None
    grade: str | None = None
    medium: str | None = None
    location: str | None = None
    days_per_week: int | None = Field(default=None, ge=1, le=7)
    salary: float | None = Field(default=None, gt=0)
    description: str | None = None

    @field_validator('student_name', 'grade', 'medium', 'location', 'description')
    @classmethod
    def strip_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class CreateTuitionRequest(TuitionFields):
    subject: str

    @field_validator('subject')
    @classmethod
    def validate_subject(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Subject is required.')
        return normalized


class UpdateTuitionRequest(TuitionFields):
    subject: str | None = None
    status: str | None = None
    # Write-once fields are accepted so they can be discarded explicitly.
    email: str | None = None
    created_at: datetime | None = None

    @field_validator('subject')
    @classmethod
    def validate_subject(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            raise ValueError('Subject cannot be blank.')
        return normalized


class TuitionResponse(BaseModel):
    id: str
    email: str
    status: str
    student_name: str | None = None
    subject: str | None = None
    grade: str | None = None
    medium: str | None = None
    location: str | None = None
    days_per_week: int | None = None
    salary: float | None = None
    description: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TuitionPageResponse(BaseModel):
    items: list[TuitionResponse]
    total: int
    page: int
    limit: int


def _page(items, total: int, page: int, limit: int) -> TuitionPageResponse:
    return TuitionPageResponse(
        items=[TuitionResponse.model_validate(item) for item in items],
        total=total,
        page=page,
        limit=limit,
    )


@router.post('', response_model=TuitionResponse, status_code=status.HTTP_201_CREATED)
def create_tuition(
    data: CreateTuitionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return tuition_status.create_tuition(db, current_user, data.model_dump(exclude_none=True))


@router.get('', response_model=TuitionPageResponse)
def list_public_tuitions(
    subject: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    items, total = tuition_status.list_public_tuitions(db, subject=subject, page=page, limit=limit)
    return _page(items, total, page, limit)


@router.get('/mine', response_model=TuitionPageResponse)
def list_my_tuitions(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items, total = tuition_status.list_tuitions(db, email=current_user.email, page=page, limit=limit)
    return _page(items, total, page, limit)


@router.get('/review', response_model=TuitionPageResponse)
def list_tuitions_for_review(
    tuition_state: TuitionStatus | None = Query(default=None, alias='status'),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tuition_status.require_moderator(current_user)
    statuses = [tuition_state] if tuition_state else None
    items, total = tuition_status.list_tuitions(db, statuses=statuses, page=page, limit=limit)
    return _page(items, total, page, limit)


@router.get('/{tuition_id}', response_model=TuitionResponse)
def get_tuition(
    tuition_id: str,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    return tuition_status.get_visible_tuition(db, current_user, tuition_id)


@router.patch('/{tuition_id}', response_model=TuitionResponse)
def update_tuition(
    tuition_id: str,
    data: UpdateTuitionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    changes = data.model_dump(exclude_unset=True)
    requested_status = changes.pop('status', None)
    return tuition_status.update_tuition(db, current_user, tuition_id, changes, requested_status)


@router.delete('/{tuition_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_tuition(
    tuition_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tuition_status.delete_tuition(db, current_user, tuition_id)


@router.get('/{tuition_id}/applications', response_model=list[ApplicationResponse])
def list_tuition_applications(
    tuition_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return application_status.list_tuition_applications(db, current_user, tuition_id)
