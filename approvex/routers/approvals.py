import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from approvex.database import get_db
from approvex.models.common import RequestStatus, RequestType
from approvex.models.user import User
from approvex.routers.auth_deps import get_authorization, get_current_user, get_transition_effects
from approvex.schemas.approval import DecisionRequest, DecisionResponse, EffectOutcomeResponse
from approvex.services.approval_service import ApprovalService
from approvex.services.authorization import AuthorizationContext
from approvex.services.effects import TransitionEffects

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/approvals", tags=["approvals"])


@router.post("/{request_type}/{request_id}", response_model=DecisionResponse)
def decide_request(
    request_type: RequestType,
    request_id: int,
    decision: DecisionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    authz: AuthorizationContext = Depends(get_authorization),
    effects: TransitionEffects = Depends(get_transition_effects),
):
    result = ApprovalService(db, authz, effects).decide(
        request_type,
        request_id,
        actor=current_user,
        decision=RequestStatus(decision.decision),
        comment=decision.comment,
    )
    if not result.applied:
        raise result.conflict

    record = result.request
    return DecisionResponse(
        request_type=result.request_type.value,
        request_id=result.request_id,
        status=result.status.value,
        approved_by=record.approved_by,
        manager_comment=record.manager_comment,
        effects=[EffectOutcomeResponse(name=e.name, succeeded=e.succeeded, error=e.error) for e in result.effects],
    )
