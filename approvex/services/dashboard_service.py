from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from approvex.models.asset_request import AssetRequest
from approvex.models.common import RequestStatus, RequestType
from approvex.models.expense_claim import ExpenseClaim
from approvex.models.leave_request import LeaveRequest
from approvex.models.user import User
from approvex.services.leave_policy import LeavePaymentStatus, payment_status_for

TREND_DAYS = 7

_MODELS = (
    (RequestType.LEAVE, LeaveRequest),
    (RequestType.EXPENSE, ExpenseClaim),
    (RequestType.ASSET, AssetRequest),
)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DashboardService:
    @staticmethod
    def request_stats(db: Session, now: Optional[datetime] = None) -> Dict:
        now = now or datetime.now(timezone.utc)
        week_ago = now - timedelta(days=7)

        pending_by_category = {}
        pending = approved_this_week = rejected = total = 0
        trend = [0] * TREND_DAYS

        for request_type, model in _MODELS:
            rows = db.query(model.status, model.approved_at).all()
            type_pending = 0
            for status, approved_at in rows:
                total += 1
                if status == RequestStatus.PENDING.value:
                    type_pending += 1
                elif status == RequestStatus.REJECTED.value:
                    rejected += 1
                elif status == RequestStatus.APPROVED.value:
                    approved_at = _as_utc(approved_at)
                    if approved_at is None:
                        continue
                    if approved_at >= week_ago:
                        approved_this_week += 1
                    days_ago = (now.date() - approved_at.date()).days
                    if 0 <= days_ago < TREND_DAYS:
                        trend[TREND_DAYS - 1 - days_ago] += 1
            pending_by_category[request_type.value] = type_pending
            pending += type_pending

        return {
            "pending": pending,
            "approved_this_week": approved_this_week,
            "rejected": rejected,
            "total": total,
            "pending_by_category": pending_by_category,
            "approval_trend": trend,
        }

    @staticmethod
    def team_leave_status(db: Session, day: date) -> Dict:
        """Who is on approved leave on `day`, with the pay classification of that leave."""
        employees = db.query(User).filter(User.is_active == True).order_by(User.full_name, User.id).all()  # noqa: E712
        leaves = db.query(LeaveRequest).filter(
            LeaveRequest.status == RequestStatus.APPROVED.value,
            LeaveRequest.start_date <= day,
            LeaveRequest.end_date >= day,
        ).all()
        on_leave = {leave.requester_id: leave for leave in leaves}

        statuses: List[Dict] = []
        for emp in employees:
            leave = on_leave.get(emp.id)
            payment_status = payment_status_for(leave.leave_type) if leave else None
            statuses.append({
                "employee_id": emp.id,
                "full_name": emp.display_name,
                "email": emp.email,
                "department": emp.department,
                "position": emp.position,
                "is_on_leave": leave is not None,
                "leave_type": leave.leave_type if leave else None,
                "is_paid": payment_status in (LeavePaymentStatus.PAID, LeavePaymentStatus.HALF_PAID),
                "payment_status": payment_status,
                "leave_start": leave.start_date if leave else None,
                "leave_end": leave.end_date if leave else None,
            })

        absent = [s for s in statuses if s["is_on_leave"]]
        stats = {
            "total_employees": len(statuses),
            "working_today": len(statuses) - len(absent),
            "on_paid_leave": sum(1 for s in absent if s["payment_status"] == LeavePaymentStatus.PAID),
            "on_half_paid_leave": sum(1 for s in absent if s["payment_status"] == LeavePaymentStatus.HALF_PAID),
            "on_unpaid_leave": sum(1 for s in absent if s["payment_status"] == LeavePaymentStatus.UNPAID),
            "on_leave_total": len(absent),
        }
        return {"day": day, "employees": statuses, "stats": stats}
