import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from isp_billing.data.repositories.fee_repository import get_fee
from isp_billing.data.repositories.payment_request_repository import (
    add_payment_request,
    get_payment_request,
)
from isp_billing.data.repositories.payment_request_repository import (
    approve_payment_request as repo_approve_payment_request,
)
from isp_billing.data.repositories.payment_request_repository import (
    list_payment_requests as repo_list_payment_requests,
)
from isp_billing.domain.exceptions import (
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)
from isp_billing.domain.models import PaymentRequest, User

logger = logging.getLogger(__name__)


def submit_payment_request(
    db: Session,
    current_user: User,
    fee_id: int,
    transaction_id: str,
    payee_name: str,
    amount: Decimal,
) -> PaymentRequest:
    """
    Record a client's claim of having paid one of their fees. The fee itself
    is left untouched until an administrator approves the request.
    """
    fee = get_fee(db, fee_id)
    if fee is None:
        raise NotFoundError("Fee not found")
    if fee.user_id != current_user.id:
        raise ForbiddenError("Only the fee owner can submit a payment request")
    if amount is None or amount <= 0:
        raise InvalidInputError("Amount must be greater than zero")

    request = add_payment_request(
        db, fee_id, transaction_id, payee_name, amount, datetime.utcnow()
    )
    logger.info(
        "Payment request id=%s submitted for fee id=%s by %s",
        request.id,
        fee_id,
        current_user.username,
    )
    return request


def list_payment_requests(db: Session) -> List[PaymentRequest]:
    return repo_list_payment_requests(db)


def approve_payment_request(
    db: Session, request_id: int, now: Optional[datetime] = None
) -> PaymentRequest:
    request = get_payment_request(db, request_id)
    if request is None:
        raise NotFoundError("Pay request not found")
    if request.approved:
        raise InvalidStateError("Already approved")
    if get_fee(db, request.fee_id) is None:
        raise InvalidStateError("Fee not found")

    approved = repo_approve_payment_request(db, request_id, now or datetime.utcnow())
    if approved is None:
        raise InvalidStateError("Fee not found")
    logger.info(
        "Payment request id=%s approved, fee id=%s marked as paid",
        request_id,
        request.fee_id,
    )
    return approved
