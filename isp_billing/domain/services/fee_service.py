import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from isp_billing.data.repositories.fee_repository import add_fee
from isp_billing.data.repositories.fee_repository import delete_fee as repo_delete_fee
from isp_billing.data.repositories.fee_repository import (
    get_all_fees,
    get_fee,
    get_fees_by_user,
    get_paid_fees_in_range,
)
from isp_billing.data.repositories.fee_repository import mark_fee_paid as repo_mark_fee_paid
from isp_billing.data.repositories.fee_repository import update_fee as repo_update_fee
from isp_billing.data.repositories.user_repository import get_user
from isp_billing.domain.exceptions import InvalidInputError, InvalidStateError, NotFoundError
from isp_billing.domain.helpers.aggregation import monthly_income, summarize_income
from isp_billing.domain.helpers.dates import to_utc_naive, year_bounds
from isp_billing.domain.models import Fee, IncomeSummary, MonthlyIncome, User

logger = logging.getLogger(__name__)


def _validate_amount(amount: Decimal) -> None:
    if amount is None or amount <= 0:
        raise InvalidInputError("Amount must be greater than zero")


def list_fees(db: Session) -> List[Fee]:
    return get_all_fees(db)


def list_fees_for_user(db: Session, user_id: int) -> List[Fee]:
    return get_fees_by_user(db, user_id)


def get_fee_or_404(db: Session, fee_id: int) -> Fee:
    fee = get_fee(db, fee_id)
    if fee is None:
        raise NotFoundError("Fee not found")
    return fee


def get_fee_with_owner(db: Session, fee_id: int) -> tuple[Fee, User]:
    fee = get_fee_or_404(db, fee_id)
    owner = get_user(db, fee.user_id)
    if owner is None:
        raise NotFoundError("User not found")
    return fee, owner


def create_fee(
    db: Session,
    user_id: int,
    amount: Decimal,
    due_date: datetime,
    description: Optional[str] = None,
) -> Fee:
    _validate_amount(amount)
    if get_user(db, user_id) is None:
        raise NotFoundError("User not found")
    fee = add_fee(db, user_id, amount, to_utc_naive(due_date), description)
    logger.info("Created fee id=%s for user id=%s amount=%s", fee.id, user_id, amount)
    return fee


def update_fee(
    db: Session,
    fee_id: int,
    amount: Decimal,
    due_date: datetime,
    description: Optional[str] = None,
) -> Fee:
    _validate_amount(amount)
    fee = repo_update_fee(db, fee_id, amount, to_utc_naive(due_date), description)
    if fee is None:
        raise NotFoundError("Fee not found")
    logger.info("Updated fee id=%s", fee_id)
    return fee


def mark_fee_paid(
    db: Session, fee_id: int, payment_date: Optional[datetime] = None
) -> Fee:
    """
    Record a payment. Paying a fee twice is an error, not a no-op, and the
    stored payment date stays as it was.
    """
    fee = get_fee_or_404(db, fee_id)
    if fee.paid:
        raise InvalidStateError("Fee is already paid")
    paid_at = to_utc_naive(payment_date) or datetime.utcnow()
    updated = repo_mark_fee_paid(db, fee_id, paid_at)
    if updated is None:
        raise NotFoundError("Fee not found")
    logger.info("Fee id=%s marked as paid at %s", fee_id, paid_at.isoformat())
    return updated


def delete_fee(db: Session, fee_id: int) -> None:
    if not repo_delete_fee(db, fee_id):
        raise NotFoundError("Fee not found")
    logger.info("Deleted fee id=%s", fee_id)


def get_income_summary(db: Session, now: Optional[datetime] = None) -> IncomeSummary:
    return summarize_income(get_all_fees(db), now or datetime.utcnow())


def get_monthly_income(db: Session, year: int) -> List[MonthlyIncome]:
    start, end = year_bounds(year)
    return monthly_income(get_paid_fees_in_range(db, start, end), year)
