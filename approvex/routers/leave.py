from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from approvex.database import get_db
from approvex.models.common import RequestStatus
from approvex.models.user import User
from approvex.routers.auth_deps import get_authorization, get_current_user
from approvex.schemas.leave import (
    LeaveBalanceSummary,
    LeaveEligibilityRequest,
    LeaveEligibilityResponse,
    LeaveRequestCreate,
    LeaveRequestResponse,
)
from approvex.services.authorization import AuthorizationContext
from approvex.services.balance_service import LeaveBalanceService
from approvex.services.leave_policy import count_leave_days, payment_status_for
from approvex.services.request_service import LeaveRequestService

router = APIRouter(prefix="/leave", tags=["leave"])


@router.post("/requests", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
def submit_leave_request(
    request: LeaveRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return LeaveRequestService(db).submit(
        current_user,
        leave_type=request.leave_type,
        start_date=request.start_date,
        end_date=request.end_date,
        reason=request.reason,
        urgency=request.urgency.value,
    )


@router.get("/requests", response_model=List[LeaveRequestResponse])
def list_leave_requests(
    status: Optional[RequestStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    authz: AuthorizationContext = Depends(get_authorization),
):
    return LeaveRequestService(db).list(current_user, authz, status.value if status else None)


@router.get("/balances", response_model=LeaveBalanceSummary)
def get_leave_balances(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return LeaveBalanceService(db).summary(current_user.id)


@router.post("/check-eligibility", response_model=LeaveEligibilityResponse)
def check_eligibility(
    request: LeaveEligibilityRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    decision = LeaveRequestService(db).check(
        current_user, request.leave_type, request.start_date, request.end_date
    )
    return LeaveEligibilityResponse(
        allowed=decision.allowed,
        reason=decision.reason,
        requested_days=count_leave_days(request.start_date, request.end_date),
        type_remaining=decision.type_remaining,
        monthly_remaining=decision.monthly_remaining,
        yearly_remaining=decision.yearly_remaining,
        payment_status=payment_status_for(request.leave_type),
    )
