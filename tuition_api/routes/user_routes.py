from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from tuition_api.auth.dependencies import get_current_user, get_verified_email
from tuition_api.core import config
from tuition_api.database import get_db
from tuition_api.models.user import User
from tuition_api.services import users

router = APIRouter(tags=['users'])


class ProfileFields(BaseModel):
    name: str | None = None
    photo_url: str | None = None
    phone: str | None = None

    @field_validator('name', 'photo_url', 'phone')
    @classmethod
    def strip_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class RegisterUserRequest(ProfileFields):
    role: str = 'student'

    @field_validator('role')
    @classmethod
    def normalize_role(cls, value: str) -> str:
        return value.strip().lower()


class UpdateProfileRequest(ProfileFields):
    pass


class UpdateUserAccessRequest(BaseModel):
    role: str | None = None
    status: str | None = None


class UserResponse(BaseModel):
    id: str
    email: str
    role: str
    status: str
    name: str | None = None
    photo_url: str | None = None
    phone: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RegisterUserResponse(BaseModel):
    message: str
    inserted_id: str | None = None


class RoleResponse(BaseModel):
    role: str
    status: str


class UserPageResponse(BaseModel):
    items: list[UserResponse]
    total: int
    page: int
    limit: int


@router.post('', response_model=RegisterUserResponse)
def register_user(
    data: RegisterUserRequest,
    response: Response,
    db: Session = Depends(get_db),
    email: str = Depends(get_verified_email),
):
    user, created = users.register_user(db, email, data.role, data.model_dump(exclude_none=True, exclude={'role'}))
    if not created:
        return RegisterUserResponse(message='User already exists', inserted_id=None)
    response.status_code = status.HTTP_201_CREATED
    return RegisterUserResponse(message='User created', inserted_id=user.id)


@router.get('/me', response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.get('/me/role', response_model=RoleResponse)
def get_my_role(current_user: User = Depends(get_current_user)):
    return RoleResponse(role=current_user.role, status=current_user.status)


@router.patch('/me', response_model=UserResponse)
def update_me(
    data: UpdateProfileRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return users.update_profile(db, current_user, data.model_dump(exclude_unset=True))


@router.get('', response_model=UserPageResponse)
def list_users(
    role: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items, total = users.list_users(db, current_user, role=role, page=page, limit=limit)
    return UserPageResponse(
        items=[UserResponse.model_validate(item) for item in items],
        total=total,
        page=page,
        limit=limit,
    )


@router.patch('/{user_id}', response_model=UserResponse)
def update_user_access(
    user_id: str,
    data: UpdateUserAccessRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return users.update_user_access(db, current_user, user_id, role=data.role, status=data.status)
