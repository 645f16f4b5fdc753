from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from isp_billing.domain.models import (
    Fee,
    IncomeSummary,
    MonthlyIncome,
    PaymentRequest,
    User,
)


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    @staticmethod
    def from_domain(u: User) -> "UserResponse":
        return UserResponse(
            id=u.id,
            username=u.username,
            email=u.email,
            role=u.role.value,
            first_name=u.first_name,
            last_name=u.last_name,
            phone_number=u.phone_number,
            is_active=u.is_active,
            created_at=u.created_at,
            last_login_at=u.last_login_at,
        )


class FeeResponse(BaseModel):
    id: int
    user_id: int
    username: Optional[str] = None
    amount: float
    due_date: datetime
    paid: bool
    payment_date: Optional[datetime] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    @staticmethod
    def from_domain(f: Fee) -> "FeeResponse":
        return FeeResponse(
            id=f.id,
            user_id=f.user_id,
            username=f.username,
            amount=float(f.amount),
            due_date=f.due_date,
            paid=f.paid,
            payment_date=f.payment_date,
            description=f.description,
            created_at=f.created_at,
        )


class RequestOwner(BaseModel):
    id: int
    username: str
    email: str


class PaymentRequestResponse(BaseModel):
    id: int
    fee_id: int
    transaction_id: str
    payee_name: str
    amount: float
    approved: bool
    requested_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    user: Optional[RequestOwner] = None
    fee_description: Optional[str] = None
    fee_paid: Optional[bool] = None

    @staticmethod
    def from_domain(r: PaymentRequest) -> "PaymentRequestResponse":
        owner = None
        if r.user_id is not None:
            owner = RequestOwner(id=r.user_id, username=r.username, email=r.email)
        return PaymentRequestResponse(
            id=r.id,
            fee_id=r.fee_id,
            transaction_id=r.transaction_id,
            payee_name=r.payee_name,
            amount=float(r.amount),
            approved=r.approved,
            requested_at=r.requested_at,
            approved_at=r.approved_at,
            user=owner,
            fee_description=r.fee_description,
            fee_paid=r.fee_paid,
        )


class IncomeSummaryResponse(BaseModel):
    total_paid_amount: float
    total_unpaid_amount: float
    total_amount: float
    paid_fees_count: int
    unpaid_fees_count: int
    total_fees_count: int
    overdue_fees_count: int
    overdue_amount: float
    collection_rate: float
    generated_at: datetime

    @staticmethod
    def from_domain(s: IncomeSummary) -> "IncomeSummaryResponse":
        return IncomeSummaryResponse(
            total_paid_amount=float(s.total_paid_amount),
            total_unpaid_amount=float(s.total_unpaid_amount),
            total_amount=float(s.total_amount),
            paid_fees_count=s.paid_fees_count,
            unpaid_fees_count=s.unpaid_fees_count,
            total_fees_count=s.total_fees_count,
            overdue_fees_count=s.overdue_fees_count,
            overdue_amount=float(s.overdue_amount),
            collection_rate=float(s.collection_rate),
            generated_at=s.generated_at,
        )


class MonthlyIncomeResponse(BaseModel):
    year: int
    month: int
    month_name: str
    total_amount: float
    fees_count: int

    @staticmethod
    def from_domain(m: MonthlyIncome) -> "MonthlyIncomeResponse":
        return MonthlyIncomeResponse(
            year=m.year,
            month=m.month,
            month_name=m.month_name,
            total_amount=float(m.total_amount),
            fees_count=m.fees_count,
        )
