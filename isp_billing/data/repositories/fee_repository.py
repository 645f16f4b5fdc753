from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Numeric, String

from isp_billing.data.base import Base
from isp_billing.data.repositories.user_repository import UserORM
from isp_billing.domain.models import Fee


class FeeORM(Base):
    __tablename__ = "fees"
    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount = Column(Numeric(18, 2), nullable=False)
    due_date = Column(DateTime, nullable=False)
    paid = Column(Boolean, nullable=False, default=False)
    payment_date = Column(DateTime)
    description = Column(String(500))
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime)

    __table_args__ = (Index("ix_fees_user_id_paid", "user_id", "paid"),)


def fee_to_domain(fee_orm: FeeORM, username: str | None = None) -> Fee:
    return Fee(
        id=fee_orm.id,
        user_id=fee_orm.user_id,
        amount=Decimal(fee_orm.amount),
        due_date=fee_orm.due_date,
        paid=fee_orm.paid,
        payment_date=fee_orm.payment_date,
        description=fee_orm.description,
        created_at=fee_orm.created_at,
        updated_at=fee_orm.updated_at,
        username=username,
    )


def _with_owner(db):
    return db.query(FeeORM, UserORM.username).join(UserORM, FeeORM.user_id == UserORM.id)


def get_all_fees(db) -> list[Fee]:
    rows = _with_owner(db).order_by(FeeORM.id).all()
    return [fee_to_domain(f, username) for f, username in rows]


def get_fees_by_user(db, user_id: int) -> list[Fee]:
    rows = _with_owner(db).filter(FeeORM.user_id == user_id).order_by(FeeORM.id).all()
    return [fee_to_domain(f, username) for f, username in rows]


def get_fee(db, fee_id: int) -> Fee | None:
    row = _with_owner(db).filter(FeeORM.id == fee_id).first()
    if not row:
        return None
    fee, username = row
    return fee_to_domain(fee, username)


def add_fee(
    db,
    user_id: int,
    amount: Decimal,
    due_date: datetime,
    description: str | None = None,
) -> Fee:
    fee_orm = FeeORM(
        user_id=user_id,
        amount=amount,
        due_date=due_date,
        description=description,
        paid=False,
        created_at=datetime.utcnow(),
    )
    db.add(fee_orm)
    db.commit()
    db.refresh(fee_orm)
    return get_fee(db, fee_orm.id)


def update_fee(
    db,
    fee_id: int,
    amount: Decimal,
    due_date: datetime,
    description: str | None,
) -> Fee | None:
    fee = db.query(FeeORM).filter(FeeORM.id == fee_id).first()
    if not fee:
        return None
    fee.amount = amount
    fee.due_date = due_date
    fee.description = description
    fee.updated_at = datetime.utcnow()
    db.commit()
    return get_fee(db, fee_id)


def mark_fee_paid(db, fee_id: int, payment_date: datetime) -> Fee | None:
    fee = db.query(FeeORM).filter(FeeORM.id == fee_id).first()
    if not fee:
        return None
    fee.paid = True
    fee.payment_date = payment_date
    fee.updated_at = datetime.utcnow()
    db.commit()
    return get_fee(db, fee_id)


def delete_fee(db, fee_id: int) -> bool:
    deleted = db.query(FeeORM).filter(FeeORM.id == fee_id).delete(
        synchronize_session=False
    )
    db.commit()
    return deleted > 0


def get_paid_fees_in_range(db, start: datetime, end: datetime) -> list[Fee]:
    """
    Paid fees whose payment date falls in [start, end).
    """
    fees = (
        db.query(FeeORM)
        .filter(
            FeeORM.paid.is_(True),
            FeeORM.payment_date.isnot(None),
            FeeORM.payment_date >= start,
            FeeORM.payment_date < end,
        )
        .all()
    )
    return [fee_to_domain(f) for f in fees]
