# isp_billing/domain/models.py
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class Role(Enum):
    ADMIN = "Admin"
    CLIENT = "Client"


@dataclass
class User:
    id: int
    username: str
    hashed_password: str
    email: str
    role: Role = Role.CLIENT
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


@dataclass
class Fee:
    id: int
    user_id: int
    amount: Decimal
    due_date: datetime
    paid: bool = False
    payment_date: Optional[datetime] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    username: Optional[str] = None  # owner's username, for listings

    def __post_init__(self):
        if self.amount <= 0:
            raise ValueError("Fee amount must be greater than zero.")
        if self.paid != (self.payment_date is not None):
            raise ValueError("Payment date must be set if and only if the fee is paid.")

    def is_overdue(self, now: datetime) -> bool:
        return not self.paid and self.due_date < now


@dataclass
class PaymentRequest:
    id: int
    fee_id: int
    transaction_id: str
    payee_name: str
    amount: Decimal
    approved: bool = False
    requested_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    # Owner and fee details, filled in for admin listings
    user_id: Optional[int] = None
    username: Optional[str] = None
    email: Optional[str] = None
    fee_description: Optional[str] = None
    fee_paid: Optional[bool] = None


@dataclass
class IncomeSummary:
    total_paid_amount: Decimal
    total_unpaid_amount: Decimal
    total_amount: Decimal
    paid_fees_count: int
    unpaid_fees_count: int
    total_fees_count: int
    overdue_fees_count: int
    overdue_amount: Decimal
    collection_rate: Decimal
    generated_at: datetime


@dataclass
class MonthlyIncome:
    year: int
    month: int
    month_name: str
    total_amount: Decimal
    fees_count: int
