import calendar
from collections import defaultdict
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List

from isp_billing.domain.models import Fee, IncomeSummary, MonthlyIncome

ZERO = Decimal("0.00")
CENTS = Decimal("0.01")


def _sum_amounts(fees: Iterable[Fee]) -> Decimal:
    return sum((f.amount for f in fees), ZERO)


def collection_rate(paid_count: int, unpaid_count: int) -> Decimal:
    """
    Percentage of fees (by count) that are paid, rounded to 2 decimals.
    Zero when there are no fees at all.
    """
    total = paid_count + unpaid_count
    if total == 0:
        return ZERO
    rate = Decimal(paid_count) / Decimal(total) * 100
    return rate.quantize(CENTS, rounding=ROUND_HALF_UP)


def summarize_income(fees: List[Fee], now: datetime) -> IncomeSummary:
    paid = [f for f in fees if f.paid]
    unpaid = [f for f in fees if not f.paid]
    overdue = [f for f in unpaid if f.is_overdue(now)]

    total_paid = _sum_amounts(paid)
    total_unpaid = _sum_amounts(unpaid)
    return IncomeSummary(
        total_paid_amount=total_paid,
        total_unpaid_amount=total_unpaid,
        total_amount=total_paid + total_unpaid,
        paid_fees_count=len(paid),
        unpaid_fees_count=len(unpaid),
        total_fees_count=len(paid) + len(unpaid),
        overdue_fees_count=len(overdue),
        overdue_amount=_sum_amounts(overdue),
        collection_rate=collection_rate(len(paid), len(unpaid)),
        generated_at=now,
    )


def monthly_income(fees: Iterable[Fee], year: int) -> List[MonthlyIncome]:
    """
    Group paid fees of the given year by payment month.
    Always returns all 12 months in order, zero-filled.
    """
    totals: dict = defaultdict(lambda: ZERO)
    counts: dict = defaultdict(int)
    for fee in fees:
        if not fee.paid or fee.payment_date is None:
            continue
        if fee.payment_date.year != year:
            continue
        month = fee.payment_date.month
        totals[month] += fee.amount
        counts[month] += 1

    return [
        MonthlyIncome(
            year=year,
            month=month,
            month_name=calendar.month_name[month],
            total_amount=totals[month],
            fees_count=counts[month],
        )
        for month in range(1, 13)
    ]
