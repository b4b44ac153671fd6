"""
Leave balance rules.

Everything here is a pure function over data that has already been read:
the balance service owns persistence, locking and the conditional write.
"""
from dataclasses import dataclass
from datetime import date
from typing import Optional

from approvex.core.exceptions import ValidationFailedError
from approvex.models.leave_request import LeaveType


class LeavePaymentStatus:
    PAID = "paid"
    HALF_PAID = "half-paid"
    UNPAID = "unpaid"


@dataclass(frozen=True)
class BalanceSnapshot:
    """Counters of one (requester, leave type) balance row at read time."""
    leave_type: str
    total_days: int
    used_days: int
    monthly_used_days: int
    yearly_used_days: int
    monthly_limit: int
    yearly_limit: int
    last_month_reset: date
    last_year_reset: date

    @property
    def remaining_days(self) -> int:
        return self.total_days - self.used_days

    @classmethod
    def from_row(cls, row) -> "BalanceSnapshot":
        return cls(
            leave_type=row.leave_type,
            total_days=row.total_days,
            used_days=row.used_days,
            monthly_used_days=row.monthly_used_days,
            yearly_used_days=row.yearly_used_days,
            monthly_limit=row.monthly_limit,
            yearly_limit=row.yearly_limit,
            last_month_reset=row.last_month_reset,
            last_year_reset=row.last_year_reset,
        )


@dataclass(frozen=True)
class LeaveDecision:
    allowed: bool
    reason: Optional[str] = None
    type_remaining: int = 0
    monthly_remaining: int = 0
    yearly_remaining: int = 0


def count_leave_days(start: date, end: date) -> int:
    """Inclusive calendar-day count. A reversed range is rejected, not swapped."""
    if end < start:
        raise ValidationFailedError(
            f"End date {end.isoformat()} is before start date {start.isoformat()}",
            details={"start_date": start.isoformat(), "end_date": end.isoformat()},
        )
    return (end - start).days + 1


def payment_status_for(leave_type: str) -> str:
    if leave_type == LeaveType.PERSONAL:
        return LeavePaymentStatus.UNPAID
    return LeavePaymentStatus.HALF_PAID


def can_submit_leave(
    balance: BalanceSnapshot,
    monthly_used_total: int,
    yearly_used_total: int,
    requested_days: int,
) -> LeaveDecision:
    """
    Decide whether `requested_days` of `balance.leave_type` may be taken.

    Monthly and yearly totals are summed over all of the requester's leave
    types. When several limits are exceeded the reason reports the monthly
    limit first, then the yearly limit, then the type balance.
    """
    type_remaining = balance.remaining_days
    monthly_remaining = balance.monthly_limit - monthly_used_total
    yearly_remaining = balance.yearly_limit - yearly_used_total

    reason = None
    if requested_days > monthly_remaining:
        reason = (
            f"Monthly leave limit exceeded: requested {requested_days} days, "
            f"{max(monthly_remaining, 0)} of {balance.monthly_limit} days remaining this month"
        )
    elif requested_days > yearly_remaining:
        reason = (
            f"Yearly leave limit exceeded: requested {requested_days} days, "
            f"{max(yearly_remaining, 0)} of {balance.yearly_limit} days remaining this year"
        )
    elif requested_days > type_remaining:
        reason = (
            f"Insufficient {balance.leave_type} balance: requested {requested_days} days, "
            f"{max(type_remaining, 0)} days remaining"
        )

    return LeaveDecision(
        allowed=reason is None,
        reason=reason,
        type_remaining=type_remaining,
        monthly_remaining=monthly_remaining,
        yearly_remaining=yearly_remaining,
    )


def reset_counters(balance: BalanceSnapshot, today: date) -> BalanceSnapshot:
    """
    Lazily zero the monthly/yearly counters once the calendar month/year has
    rolled over since the last reset. Applying it twice is a no-op.
    """
    monthly_used = balance.monthly_used_days
    yearly_used = balance.yearly_used_days
    last_month = balance.last_month_reset
    last_year = balance.last_year_reset

    if (last_month.year, last_month.month) != (today.year, today.month):
        monthly_used = 0
        last_month = today
    if last_year.year != today.year:
        yearly_used = 0
        last_year = today

    if last_month == balance.last_month_reset and last_year == balance.last_year_reset:
        return balance

    return BalanceSnapshot(
        leave_type=balance.leave_type,
        total_days=balance.total_days,
        used_days=balance.used_days,
        monthly_used_days=monthly_used,
        yearly_used_days=yearly_used,
        monthly_limit=balance.monthly_limit,
        yearly_limit=balance.yearly_limit,
        last_month_reset=last_month,
        last_year_reset=last_year,
    )
