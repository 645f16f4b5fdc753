from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from isp_billing.data.base import get_db
from isp_billing.domain.access import ensure_can_access
from isp_billing.domain.models import User
from isp_billing.domain.services.auth_service import get_current_user, require_admin
from isp_billing.domain.services.fee_service import (
    create_fee,
    delete_fee,
    get_fee_or_404,
    get_fee_with_owner,
    list_fees,
    list_fees_for_user,
    mark_fee_paid,
    update_fee,
)
from isp_billing.domain.services.invoice_service import invoice_filename, render_invoice
from isp_billing.domain.services.payment_request_service import submit_payment_request
from isp_billing.presentation.schemas import FeeResponse

router = APIRouter(prefix="/api/fees", tags=["fees"])


class CreateFeeRequest(BaseModel):
    user_id: int
    amount: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2)
    due_date: datetime
    description: Optional[str] = Field(None, max_length=500)


class UpdateFeeRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2)
    due_date: datetime
    description: Optional[str] = Field(None, max_length=500)


class PayFeeRequest(BaseModel):
    payment_date: Optional[datetime] = None


class PayRequestSubmission(BaseModel):
    transaction_id: str = Field(..., min_length=1, max_length=100)
    payee_name: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2)


@router.get("", response_model=List[FeeResponse])
def get_all_fees_endpoint(db: Session = Depends(get_db), admin=Depends(require_admin)):
    return [FeeResponse.from_domain(f) for f in list_fees(db)]


@router.get("/my-fees", response_model=List[FeeResponse])
def get_my_fees(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    return [FeeResponse.from_domain(f) for f in list_fees_for_user(db, current_user.id)]


@router.get("/user/{user_id}", response_model=List[FeeResponse])
def get_fees_by_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_can_access(current_user, user_id)
    return [FeeResponse.from_domain(f) for f in list_fees_for_user(db, user_id)]


@router.get("/{fee_id}", response_model=FeeResponse)
def get_fee_endpoint(
    fee_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    fee = get_fee_or_404(db, fee_id)
    ensure_can_access(current_user, fee.user_id)
    return FeeResponse.from_domain(fee)


@router.post("", response_model=FeeResponse, status_code=status.HTTP_201_CREATED)
def create_fee_endpoint(
    req: CreateFeeRequest, db: Session = Depends(get_db), admin=Depends(require_admin)
):
    fee = create_fee(db, req.user_id, req.amount, req.due_date, req.description)
    return FeeResponse.from_domain(fee)


@router.put("/{fee_id}/pay", response_model=FeeResponse)
def pay_fee_endpoint(
    fee_id: int,
    req: Optional[PayFeeRequest] = Body(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    fee = get_fee_or_404(db, fee_id)
    ensure_can_access(current_user, fee.user_id)
    payment_date = req.payment_date if req else None
    return FeeResponse.from_domain(mark_fee_paid(db, fee_id, payment_date))


@router.post("/{fee_id}/pay-request")
def submit_pay_request_endpoint(
    fee_id: int,
    req: PayRequestSubmission,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    request = submit_payment_request(
        db, current_user, fee_id, req.transaction_id, req.payee_name, req.amount
    )
    return {"message": "Payment request submitted for approval", "id": request.id}


@router.put("/{fee_id}", response_model=FeeResponse)
def update_fee_endpoint(
    fee_id: int,
    req: UpdateFeeRequest,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    fee = update_fee(db, fee_id, req.amount, req.due_date, req.description)
    return FeeResponse.from_domain(fee)


@router.delete("/{fee_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_fee_endpoint(
    fee_id: int, db: Session = Depends(get_db), admin=Depends(require_admin)
):
    delete_fee(db, fee_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def invoice_response(db: Session, fee_id: int, current_user: User) -> Response:
    fee, owner = get_fee_with_owner(db, fee_id)
    ensure_can_access(current_user, fee.user_id)
    now = datetime.utcnow()
    pdf_bytes = render_invoice(fee, owner, now)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{invoice_filename(fee_id, now)}"'
        },
    )


@router.get("/{fee_id}/invoice")
def download_invoice(
    fee_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return invoice_response(db, fee_id, current_user)
