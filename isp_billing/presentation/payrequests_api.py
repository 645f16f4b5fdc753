from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from isp_billing.data.base import get_db
from isp_billing.domain.services.auth_service import require_admin
from isp_billing.domain.services.payment_request_service import (
    approve_payment_request,
    list_payment_requests,
)
from isp_billing.presentation.schemas import PaymentRequestResponse

router = APIRouter(
    prefix="/api/payrequests", tags=["payrequests"], dependencies=[Depends(require_admin)]
)


@router.get("", response_model=List[PaymentRequestResponse])
def get_all_payment_requests(db: Session = Depends(get_db)):
    return [PaymentRequestResponse.from_domain(r) for r in list_payment_requests(db)]


@router.post("/{request_id}/approve")
def approve_payment_request_endpoint(request_id: int, db: Session = Depends(get_db)):
    approve_payment_request(db, request_id)
    return {"message": "Payment approved and fee marked as paid"}
