from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from isp_billing.data.base import get_db
from isp_billing.domain.models import User
from isp_billing.domain.services.auth_service import get_current_user, require_admin
from isp_billing.domain.services.fee_service import get_income_summary, get_monthly_income
from isp_billing.presentation.fees_api import invoice_response
from isp_billing.presentation.schemas import IncomeSummaryResponse, MonthlyIncomeResponse

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/income", response_model=IncomeSummaryResponse)
def income_summary(db: Session = Depends(get_db), admin=Depends(require_admin)):
    return IncomeSummaryResponse.from_domain(get_income_summary(db))


@router.get("/income/monthly", response_model=List[MonthlyIncomeResponse])
def monthly_income(
    year: Optional[int] = Query(None, ge=1, le=9998, description="Defaults to the current year"),
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    target_year = year or datetime.utcnow().year
    return [MonthlyIncomeResponse.from_domain(m) for m in get_monthly_income(db, target_year)]


# Same document as /api/fees/{fee_id}/invoice; owners may fetch their own
@router.get("/invoice/{fee_id}")
def download_invoice(
    fee_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return invoice_response(db, fee_id, current_user)
