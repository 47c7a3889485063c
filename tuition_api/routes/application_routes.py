from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from tuition_api.auth.dependencies import get_current_user
from tuition_api.database import get_db
from tuition_api.models.user import User
from tuition_api.services import application_status

router = APIRouter(tags=['applications'])

MAX_QUALIFICATIONS_LENGTH = 1000


class CreateApplicationRequest(BaseModel):
    tuition_id: str
    qualifications: str | None = None
    experience: str | None = None
    expected_salary: str | None = None

    @field_validator('qualifications')
    @classmethod
    def validate_qualifications(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_QUALIFICATIONS_LENGTH:
            raise ValueError(f'Qualifications must be {MAX_QUALIFICATIONS_LENGTH} characters or fewer.')

        return normalized


class ApplicationResponse(BaseModel):
    id: str
    tuition_id: str
    tutor_email: str
    student_email: str
    status: str
    qualifications: str | None = None
    experience: str | None = None
    expected_salary: str | None = None
    applied_at: datetime
    accepted_at: datetime | None = None

    class Config:
        from_attributes = True


@router.post('', response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
def create_application(
    data: CreateApplicationRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    fields = data.model_dump(exclude_none=True, exclude={'tuition_id'})
    return application_status.apply_to_tuition(db, current_user, data.tuition_id, fields)


@router.get('/mine', response_model=list[ApplicationResponse])
def list_my_applications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return application_status.list_tutor_applications(db, current_user)


@router.patch('/{application_id}/reject', response_model=ApplicationResponse)
def reject_my_application(
    application_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return application_status.reject_own_application(db, current_user, application_id)
