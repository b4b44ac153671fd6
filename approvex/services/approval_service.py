"""
Request status machine shared by leave, expense and asset requests.

    pending -> approved   (terminal)
    pending -> rejected   (terminal)

The status write is a single UPDATE guarded by ``status = 'pending'`` so two
managers deciding the same request cannot both win. Side effects run after
the write has committed.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from approvex.core.exceptions import (
    AccessDeniedError,
    ConcurrencyConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationFailedError,
)
from approvex.models.asset_request import AssetRequest
from approvex.models.common import RequestStatus, RequestType
from approvex.models.expense_claim import ExpenseClaim
from approvex.models.leave_request import LeaveRequest
from approvex.models.user import User
from approvex.services.authorization import AuthorizationContext
from approvex.services.base import BaseService
from approvex.services.effects import DecisionContext, EffectOutcome, TransitionEffects

logger = logging.getLogger(__name__)

REQUEST_MODELS = {
    RequestType.LEAVE: LeaveRequest,
    RequestType.EXPENSE: ExpenseClaim,
    RequestType.ASSET: AssetRequest,
}


@dataclass
class TransitionResult:
    """Outcome of a decision. Exactly one of `request` and `conflict` is set."""
    request_type: RequestType
    request_id: int
    request: Any = None
    status: Optional[RequestStatus] = None
    effects: List[EffectOutcome] = field(default_factory=list)
    conflict: Optional[ConcurrencyConflictError] = None

    @property
    def applied(self) -> bool:
        return self.conflict is None

    @property
    def failed_effects(self) -> List[str]:
        return [e.name for e in self.effects if not e.succeeded]


def _snapshot(record) -> Dict[str, Any]:
    data = {}
    for column in record.__table__.columns:
        value = getattr(record, column.name)
        if isinstance(value, Decimal):
            value = str(value)
        elif hasattr(value, "isoformat"):
            value = value.isoformat()
        data[column.name] = value
    return data


def _describe(request_type: RequestType, record) -> Dict[str, Any]:
    if request_type == RequestType.LEAVE:
        return {
            "start_date": record.start_date.isoformat(),
            "end_date": record.end_date.isoformat(),
            "days": record.days,
        }
    if request_type == RequestType.EXPENSE:
        return {"title": record.title, "amount": record.amount, "category": record.category}
    return {"title": record.title, "amount": record.estimated_cost, "category": record.category}


def _notification_details(request_type: RequestType, record) -> str:
    if request_type == RequestType.LEAVE:
        return f"{record.leave_type}, {record.days} days"
    if request_type == RequestType.EXPENSE:
        return f"{record.title}, ${record.amount}"
    return record.title


class ApprovalService(BaseService):
    def __init__(self, db, authz: AuthorizationContext, effects: Optional[TransitionEffects] = None):
        super().__init__(db)
        self.authz = authz
        self.effects = effects or TransitionEffects(db)

    def _load(self, model, request_id: int):
        return self.db.get(model, request_id)

    def decide(
        self,
        request_type: RequestType,
        request_id: int,
        actor: User,
        decision: RequestStatus,
        comment: Optional[str] = None,
    ) -> TransitionResult:
        request_type = RequestType(request_type)
        decision = RequestStatus(decision)
        if not decision.is_terminal:
            raise ValidationFailedError("Decision must be 'approved' or 'rejected'")

        if not self.authz.is_manager(actor.id):
            logger.warning(f"User {actor.id} attempted to {decision.value} {request_type.value} #{request_id}")
            raise AccessDeniedError("Only a manager can approve or reject requests")

        model = REQUEST_MODELS[request_type]
        record = self._load(model, request_id)
        if record is None:
            raise NotFoundError(f"{request_type.value.capitalize()} request not found")

        current = RequestStatus(record.status)
        if current.is_terminal:
            raise InvalidTransitionError(
                f"{request_type.value.capitalize()} request #{request_id} is already {current.value}",
                details={"status": current.value},
            )

        comment = (comment or "").strip() or None
        if decision == RequestStatus.REJECTED and not comment:
            raise ValidationFailedError("A comment is required when rejecting a request")

        updated = self.db.query(model).filter(
            model.id == request_id,
            model.status == RequestStatus.PENDING.value,
        ).update(
            {
                model.status: decision.value,
                model.approved_by: actor.id,
                model.approved_at: datetime.now(timezone.utc),
                model.manager_comment: comment,
            },
            synchronize_session=False,
        )
        if updated != 1:
            logger.warning(f"{request_type.value} #{request_id} was decided concurrently; {decision.value} by {actor.id} not applied")
            return TransitionResult(
                request_type=request_type,
                request_id=request_id,
                conflict=ConcurrencyConflictError(
                    f"{request_type.value.capitalize()} request #{request_id} was decided by someone else. Please refresh.",
                    details={"request_id": request_id},
                ),
            )

        self.commit()
        self.db.refresh(record)
        logger.info(f"{request_type.value} #{request_id} {decision.value} by user {actor.id}")

        requester = self.db.get(User, record.requester_id)
        ctx = DecisionContext(
            request_type=request_type.value,
            request_id=request_id,
            status=decision.value,
            actor=actor,
            requester=requester,
            manager_comment=comment,
            snapshot=_snapshot(record),
            email_details=_describe(request_type, record),
            notification_details=_notification_details(request_type, record),
        )
        outcomes = self.effects.dispatch(ctx)
        failed = [o.name for o in outcomes if not o.succeeded]
        if failed:
            logger.info(f"{request_type.value} #{request_id} decided with failed side effects: {failed}")

        return TransitionResult(
            request_type=request_type,
            request_id=request_id,
            request=record,
            status=decision,
            effects=outcomes,
        )
