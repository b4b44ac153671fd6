import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import aliased

from approvex.core.config import settings
from approvex.core.exceptions import ConcurrencyConflictError, ValidationFailedError
from approvex.models.leave_balance import LeaveBalance
from approvex.services.base import BaseService
from approvex.services.leave_policy import (
    BalanceSnapshot,
    LeaveDecision,
    can_submit_leave,
    payment_status_for,
    reset_counters,
)
from approvex.services.notification import NotificationService

logger = logging.getLogger(__name__)

LOW_BALANCE_NOTIFICATION = "leave_balance_warning"


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


@dataclass
class BalanceSheet:
    """All balance rows of one requester after the lazy reset."""
    rows: List[LeaveBalance]

    @property
    def monthly_used_total(self) -> int:
        return sum(r.monthly_used_days for r in self.rows)

    @property
    def yearly_used_total(self) -> int:
        return sum(r.yearly_used_days for r in self.rows)

    def for_type(self, leave_type: str) -> Optional[LeaveBalance]:
        for row in self.rows:
            if row.leave_type == leave_type:
                return row
        return None


class LeaveBalanceService(BaseService):
    def load(self, requester_id: int, today: Optional[date] = None, lock: bool = False) -> BalanceSheet:
        """
        Read the requester's balances, creating the defaults on first access
        and zeroing monthly/yearly counters whose period has rolled over.
        """
        today = today or utc_today()
        query = self.db.query(LeaveBalance).filter(LeaveBalance.requester_id == requester_id)
        if lock:
            query = query.with_for_update()
        rows = query.order_by(LeaveBalance.id).all()

        if not rows:
            rows = self._create_defaults(requester_id, today)

        changed = False
        for row in rows:
            snapshot = BalanceSnapshot.from_row(row)
            fresh = reset_counters(snapshot, today)
            if fresh is not snapshot:
                row.monthly_used_days = fresh.monthly_used_days
                row.yearly_used_days = fresh.yearly_used_days
                row.last_month_reset = fresh.last_month_reset
                row.last_year_reset = fresh.last_year_reset
                changed = True
        if changed:
            # Conditional writes compare against stored values, so resets must be flushed first
            self.db.flush()
            logger.info(f"Reset leave period counters for requester {requester_id}")

        return BalanceSheet(rows=rows)

    def _create_defaults(self, requester_id: int, today: date) -> List[LeaveBalance]:
        rows = []
        for leave_type, total in settings.leave.default_totals.items():
            row = LeaveBalance(
                requester_id=requester_id,
                leave_type=leave_type,
                total_days=total,
                used_days=0,
                monthly_used_days=0,
                yearly_used_days=0,
                monthly_limit=settings.leave.monthly_limit,
                yearly_limit=settings.leave.yearly_limit,
                last_month_reset=today,
                last_year_reset=today,
            )
            self.db.add(row)
            rows.append(row)
        self.db.flush()
        logger.info(f"Created default leave balances for requester {requester_id}")
        return rows

    def evaluate(self, sheet: BalanceSheet, leave_type: str, requested_days: int) -> LeaveDecision:
        row = sheet.for_type(leave_type)
        if row is None:
            raise ValidationFailedError(
                f"Unknown leave type: {leave_type}",
                details={"allowed": [r.leave_type for r in sheet.rows]},
            )
        return can_submit_leave(
            BalanceSnapshot.from_row(row),
            monthly_used_total=sheet.monthly_used_total,
            yearly_used_total=sheet.yearly_used_total,
            requested_days=requested_days,
        )

    def reserve_days(
        self,
        row: LeaveBalance,
        snapshot: BalanceSnapshot,
        days: int,
        monthly_used_total: int,
        yearly_used_total: int,
    ) -> LeaveBalance:
        """
        Add `days` to the used, monthly and yearly counters in one conditional
        UPDATE. The row must still hold the counters in `snapshot` and must
        not end up over its total. The requester's monthly and yearly sums
        over all leave types must still equal the totals the caps were checked
        against. Otherwise another submission won the race.
        """
        peer = aliased(LeaveBalance)
        monthly_sum = select(func.coalesce(func.sum(peer.monthly_used_days), 0)).where(
            peer.requester_id == row.requester_id
        ).scalar_subquery()
        yearly_sum = select(func.coalesce(func.sum(peer.yearly_used_days), 0)).where(
            peer.requester_id == row.requester_id
        ).scalar_subquery()

        updated = self.db.query(LeaveBalance).filter(
            LeaveBalance.id == row.id,
            LeaveBalance.used_days == snapshot.used_days,
            LeaveBalance.monthly_used_days == snapshot.monthly_used_days,
            LeaveBalance.yearly_used_days == snapshot.yearly_used_days,
            LeaveBalance.used_days + days <= LeaveBalance.total_days,
            monthly_sum == monthly_used_total,
            yearly_sum == yearly_used_total,
        ).update(
            {
                LeaveBalance.used_days: LeaveBalance.used_days + days,
                LeaveBalance.monthly_used_days: LeaveBalance.monthly_used_days + days,
                LeaveBalance.yearly_used_days: LeaveBalance.yearly_used_days + days,
            },
            synchronize_session=False,
        )
        if updated != 1:
            logger.warning(f"Leave balance {row.id} changed during submission; reservation of {days} days refused")
            raise ConcurrencyConflictError(
                f"{row.leave_type} balance changed while the request was being submitted. Please retry.",
                details={"balance_id": row.id},
            )
        self.db.refresh(row)
        return row

    def alert_if_low(self, row: LeaveBalance, today: Optional[date] = None):
        """Send at most one low-balance notification per leave type per day."""
        remaining = row.remaining_days
        threshold = settings.leave.low_balance_threshold
        if remaining < 0 or remaining > threshold:
            return None
        if NotificationService.already_sent_today(self.db, row.requester_id, LOW_BALANCE_NOTIFICATION, row.leave_type, today):
            return None

        if remaining == 0:
            title = f"🚨 {row.leave_type} Balance Alert"
            message = f"Your {row.leave_type} leave balance is exhausted. You have 0 days remaining."
        else:
            title = f"⚠️ {row.leave_type} Balance Alert"
            plural = "" if remaining == 1 else "s"
            message = (
                f"Your {row.leave_type} leave balance is running low. "
                f"Only {remaining} day{plural} remaining out of {row.total_days} days."
            )
        return NotificationService.create_notification(
            self.db, row.requester_id, title, message, type=LOW_BALANCE_NOTIFICATION
        )

    def summary(self, requester_id: int, today: Optional[date] = None) -> Dict:
        sheet = self.load(requester_id, today)
        self.commit()
        monthly_limit = max((r.monthly_limit for r in sheet.rows), default=settings.leave.monthly_limit)
        yearly_limit = max((r.yearly_limit for r in sheet.rows), default=settings.leave.yearly_limit)
        return {
            "balances": [
                {
                    "id": r.id,
                    "leave_type": r.leave_type,
                    "total_days": r.total_days,
                    "used_days": r.used_days,
                    "remaining_days": r.remaining_days,
                    "payment_status": payment_status_for(r.leave_type),
                }
                for r in sheet.rows
            ],
            "monthly_used_days": sheet.monthly_used_total,
            "monthly_limit": monthly_limit,
            "monthly_remaining_days": monthly_limit - sheet.monthly_used_total,
            "yearly_used_days": sheet.yearly_used_total,
            "yearly_limit": yearly_limit,
            "yearly_remaining_days": yearly_limit - sheet.yearly_used_total,
        }
