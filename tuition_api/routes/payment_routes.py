from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from tuition_api.auth.dependencies import get_current_user
from tuition_api.database import get_db
from tuition_api.models.user import User
from tuition_api.services import hiring, payment_processor

router = APIRouter(tags=['payments'])


class PaymentIntentRequest(BaseModel):
    salary: Decimal | None = None
    tuition_id: str | None = None
    application_id: str | None = None


class PaymentIntentResponse(BaseModel):
    client_secret: str


class CompletePaymentRequest(BaseModel):
    application_id: str
    tuition_id: str
    amount: Decimal
    transaction_id: str | None = None


class PaymentResponse(BaseModel):
    id: str
    application_id: str
    tuition_id: str
    tutor_email: str
    student_email: str
    amount: Decimal
    transaction_id: str | None = None
    payment_status: str
    date: datetime

    class Config:
        from_attributes = True


class HiringResponse(BaseModel):
    message: str
    payment: PaymentResponse


@router.post('/intent', response_model=PaymentIntentResponse)
def create_payment_intent(
    data: PaymentIntentRequest,
    current_user: User = Depends(get_current_user),
):
    metadata = {'student_email': current_user.email}
    if data.tuition_id:
        metadata['tuition_id'] = data.tuition_id
    if data.application_id:
        metadata['application_id'] = data.application_id
    client_secret = payment_processor.create_payment_intent(data.salary, metadata=metadata)
    return PaymentIntentResponse(client_secret=client_secret)


@router.post('', response_model=HiringResponse, status_code=status.HTTP_201_CREATED)
def complete_payment(
    data: CompletePaymentRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    payment = hiring.complete_hiring(
        db,
        current_user,
        application_id=data.application_id,
        tuition_id=data.tuition_id,
        amount=data.amount,
        transaction_id=data.transaction_id,
    )
    return HiringResponse(
        message='Payment recorded and tutor hired.',
        payment=PaymentResponse.model_validate(payment),
    )


@router.get('/mine', response_model=list[PaymentResponse])
def list_my_payments(
    as_role: str | None = Query(default=None, alias='role'),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return hiring.list_payment_history(db, current_user, as_role)


@router.get('', response_model=list[PaymentResponse])
def list_payments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return hiring.list_all_payments(db, current_user)
