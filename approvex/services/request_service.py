import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from approvex.core.exceptions import (
    AccessDeniedError,
    ConcurrencyConflictError,
    InvalidTransitionError,
    NotFoundError,
    PolicyViolationError,
)
from approvex.models.asset_request import AssetRequest
from approvex.models.common import RequestStatus, RequestType
from approvex.models.expense_claim import ExpenseClaim, PaymentStatus
from approvex.models.leave_request import LeaveRequest
from approvex.models.user import User
from approvex.services.audit import ActivityService
from approvex.services.authorization import AuthorizationContext
from approvex.services.balance_service import LeaveBalanceService
from approvex.services.base import BaseService
from approvex.services.leave_policy import BalanceSnapshot, LeaveDecision, count_leave_days
from approvex.services.request_policy import evaluate_asset, evaluate_expense

logger = logging.getLogger(__name__)


def _visible_to(query, model, viewer: User, authz: AuthorizationContext, status: Optional[str]):
    # Managers see every request, everyone else only their own
    if not authz.is_manager(viewer.id):
        query = query.filter(model.requester_id == viewer.id)
    if status:
        query = query.filter(model.status == status)
    return query.order_by(model.created_at.desc(), model.id.desc())


class LeaveRequestService(BaseService):
    def __init__(self, db):
        super().__init__(db)
        self.balances = LeaveBalanceService(db)

    def check(self, requester: User, leave_type: str, start_date: date, end_date: date,
              today: Optional[date] = None) -> LeaveDecision:
        """Advisory pre-check; the same rule is enforced again on submit."""
        days = count_leave_days(start_date, end_date)
        sheet = self.balances.load(requester.id, today)
        decision = self.balances.evaluate(sheet, leave_type, days)
        self.commit()
        return decision

    def submit(
        self,
        requester: User,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: Optional[str] = None,
        urgency: str = "normal",
        today: Optional[date] = None,
    ) -> LeaveRequest:
        days = count_leave_days(start_date, end_date)

        sheet = self.balances.load(requester.id, today, lock=True)
        decision = self.balances.evaluate(sheet, leave_type, days)
        if not decision.allowed:
            # Keep lazily created/reset balances even though the request is refused
            self.commit()
            logger.info(f"Leave request refused for user {requester.id}: {decision.reason}")
            raise PolicyViolationError(
                decision.reason,
                details={
                    "requested_days": days,
                    "type_remaining": decision.type_remaining,
                    "monthly_remaining": decision.monthly_remaining,
                    "yearly_remaining": decision.yearly_remaining,
                },
            )

        row = sheet.for_type(leave_type)
        try:
            self.balances.reserve_days(
                row,
                BalanceSnapshot.from_row(row),
                days,
                monthly_used_total=sheet.monthly_used_total,
                yearly_used_total=sheet.yearly_used_total,
            )

            leave = LeaveRequest(
                requester_id=requester.id,
                leave_type=leave_type,
                start_date=start_date,
                end_date=end_date,
                days=days,
                reason=reason,
                urgency=urgency,
                status=RequestStatus.PENDING.value,
            )
            self.db.add(leave)
            self.db.flush()
            ActivityService.log(
                self.db,
                action="submitted",
                request_type=RequestType.LEAVE.value,
                request_id=leave.id,
                actor_id=requester.id,
                requester_id=requester.id,
                details={"leave_type": leave_type, "days": days},
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(leave)
        logger.info(f"Leave request {leave.id} submitted by user {requester.id} ({days} days {leave_type})")

        try:
            self.balances.alert_if_low(row, today)
        except Exception as e:
            # Don't fail the submission if the alert fails
            logger.warning(f"Low balance alert failed: {e}", exc_info=True)
        return leave

    def list(self, viewer: User, authz: AuthorizationContext, status: Optional[str] = None):
        return _visible_to(self.db.query(LeaveRequest), LeaveRequest, viewer, authz, status).all()


class ExpenseClaimService(BaseService):
    def submit(
        self,
        requester: User,
        title: str,
        amount: Decimal,
        category: str,
        description: Optional[str] = None,
        urgency: str = "normal",
    ) -> ExpenseClaim:
        evaluation = evaluate_expense(category, amount)
        claim = ExpenseClaim(
            requester_id=requester.id,
            title=title,
            description=description,
            amount=amount,
            category=category,
            urgency=urgency,
            status=RequestStatus.PENDING.value,
            payment_status=PaymentStatus.UNPAID.value,
            policy_warning=evaluation.policy_warning,
        )
        self.db.add(claim)
        self.db.flush()
        ActivityService.log(
            self.db,
            action="submitted",
            request_type=RequestType.EXPENSE.value,
            request_id=claim.id,
            actor_id=requester.id,
            requester_id=requester.id,
            details={"amount": str(amount), "category": category, "policy_warning": evaluation.policy_warning},
        )
        self.commit()
        self.db.refresh(claim)
        if evaluation.policy_warning:
            logger.info(f"Expense claim {claim.id} flagged: {evaluation.policy_warning}")
        return claim

    def mark_paid(self, claim_id: int, actor: User, authz: AuthorizationContext,
                  reference: Optional[str] = None) -> ExpenseClaim:
        if not authz.is_manager(actor.id):
            raise AccessDeniedError("Only a manager can record expense payments")

        claim = self.db.get(ExpenseClaim, claim_id)
        if not claim:
            raise NotFoundError("Expense claim not found")
        if claim.status != RequestStatus.APPROVED.value:
            raise InvalidTransitionError(f"Only approved claims can be paid (claim is {claim.status})")
        if claim.payment_status == PaymentStatus.PAID.value:
            raise InvalidTransitionError("Expense claim is already paid")

        updated = self.db.query(ExpenseClaim).filter(
            ExpenseClaim.id == claim_id,
            ExpenseClaim.status == RequestStatus.APPROVED.value,
            ExpenseClaim.payment_status == PaymentStatus.UNPAID.value,
        ).update(
            {
                ExpenseClaim.payment_status: PaymentStatus.PAID.value,
                ExpenseClaim.payment_reference: reference,
            },
            synchronize_session=False,
        )
        if updated != 1:
            raise ConcurrencyConflictError("Expense claim payment was recorded concurrently. Please refresh.")

        ActivityService.log(
            self.db,
            action="paid",
            request_type=RequestType.EXPENSE.value,
            request_id=claim_id,
            actor_id=actor.id,
            requester_id=claim.requester_id,
            details={"payment_reference": reference},
        )
        self.commit()
        self.db.refresh(claim)
        return claim

    def list(self, viewer: User, authz: AuthorizationContext, status: Optional[str] = None):
        return _visible_to(self.db.query(ExpenseClaim), ExpenseClaim, viewer, authz, status).all()


class AssetRequestService(BaseService):
    def submit(
        self,
        requester: User,
        title: str,
        asset_type: str,
        category: str,
        reason: Optional[str] = None,
        estimated_cost: Optional[Decimal] = None,
        urgency: str = "normal",
    ) -> AssetRequest:
        evaluation = evaluate_asset(estimated_cost)
        asset = AssetRequest(
            requester_id=requester.id,
            title=title,
            asset_type=asset_type,
            category=category,
            reason=reason,
            estimated_cost=estimated_cost,
            urgency=urgency,
            status=evaluation.status.value,
            auto_approved=evaluation.auto_approved,
        )
        if evaluation.auto_approved:
            asset.approved_at = datetime.now(timezone.utc)
        self.db.add(asset)
        self.db.flush()
        ActivityService.log(
            self.db,
            action=evaluation.action,
            request_type=RequestType.ASSET.value,
            request_id=asset.id,
            actor_id=requester.id,
            requester_id=requester.id,
            details={"estimated_cost": str(estimated_cost) if estimated_cost is not None else None},
        )
        self.commit()
        self.db.refresh(asset)
        logger.info(f"Asset request {asset.id} {evaluation.action} for user {requester.id}")
        return asset

    def list(self, viewer: User, authz: AuthorizationContext, status: Optional[str] = None):
        return _visible_to(self.db.query(AssetRequest), AssetRequest, viewer, authz, status).all()
