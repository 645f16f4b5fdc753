from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String

from isp_billing.data.base import Base
from isp_billing.data.repositories.fee_repository import FeeORM
from isp_billing.data.repositories.user_repository import UserORM
from isp_billing.domain.models import PaymentRequest


class PaymentRequestORM(Base):
    __tablename__ = "payment_requests"
    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    fee_id = Column(
        Integer, ForeignKey("fees.id", ondelete="CASCADE"), nullable=False, index=True
    )
    transaction_id = Column(String(100), nullable=False)
    payee_name = Column(String(100), nullable=False)
    amount = Column(Numeric(18, 2), nullable=False)
    approved = Column(Boolean, nullable=False, default=False)
    requested_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    approved_at = Column(DateTime)


def payment_request_to_domain(
    request_orm: PaymentRequestORM,
    fee_orm: FeeORM | None = None,
    user_orm: UserORM | None = None,
) -> PaymentRequest:
    return PaymentRequest(
        id=request_orm.id,
        fee_id=request_orm.fee_id,
        transaction_id=request_orm.transaction_id,
        payee_name=request_orm.payee_name,
        amount=Decimal(request_orm.amount),
        approved=request_orm.approved,
        requested_at=request_orm.requested_at,
        approved_at=request_orm.approved_at,
        user_id=user_orm.id if user_orm else None,
        username=user_orm.username if user_orm else None,
        email=user_orm.email if user_orm else None,
        fee_description=fee_orm.description if fee_orm else None,
        fee_paid=fee_orm.paid if fee_orm else None,
    )


def add_payment_request(
    db,
    fee_id: int,
    transaction_id: str,
    payee_name: str,
    amount: Decimal,
    requested_at: datetime,
) -> PaymentRequest:
    request_orm = PaymentRequestORM(
        fee_id=fee_id,
        transaction_id=transaction_id,
        payee_name=payee_name,
        amount=amount,
        approved=False,
        requested_at=requested_at,
    )
    db.add(request_orm)
    db.commit()
    db.refresh(request_orm)
    return payment_request_to_domain(request_orm)


def get_payment_request(db, request_id: int) -> PaymentRequest | None:
    row = (
        db.query(PaymentRequestORM, FeeORM, UserORM)
        .outerjoin(FeeORM, PaymentRequestORM.fee_id == FeeORM.id)
        .outerjoin(UserORM, FeeORM.user_id == UserORM.id)
        .filter(PaymentRequestORM.id == request_id)
        .first()
    )
    if not row:
        return None
    return payment_request_to_domain(*row)


def list_payment_requests(db) -> list[PaymentRequest]:
    rows = (
        db.query(PaymentRequestORM, FeeORM, UserORM)
        .outerjoin(FeeORM, PaymentRequestORM.fee_id == FeeORM.id)
        .outerjoin(UserORM, FeeORM.user_id == UserORM.id)
        .order_by(PaymentRequestORM.requested_at.desc(), PaymentRequestORM.id.desc())
        .all()
    )
    return [payment_request_to_domain(*row) for row in rows]


def approve_payment_request(
    db, request_id: int, approved_at: datetime
) -> PaymentRequest | None:
    """
    Mark the request approved and its fee paid, committed together.
    A fee that is already paid keeps its original payment date.
    Returns None when either the request or its fee is missing.
    """
    request_orm = (
        db.query(PaymentRequestORM).filter(PaymentRequestORM.id == request_id).first()
    )
    if not request_orm:
        return None
    fee_orm = db.query(FeeORM).filter(FeeORM.id == request_orm.fee_id).first()
    if not fee_orm:
        return None
    request_orm.approved = True
    request_orm.approved_at = approved_at
    if not fee_orm.paid:
        fee_orm.paid = True
        fee_orm.payment_date = approved_at
    fee_orm.updated_at = approved_at
    db.commit()
    return get_payment_request(db, request_id)
