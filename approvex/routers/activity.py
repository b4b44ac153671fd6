from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from approvex.database import get_db
from approvex.models.user import User
from approvex.routers.auth_deps import get_authorization, get_current_user
from approvex.schemas.activity import ActivityLogResponse
from approvex.services.audit import ActivityService
from approvex.services.authorization import AuthorizationContext

router = APIRouter(prefix="/activity", tags=["activity"])


@router.get("/", response_model=List[ActivityLogResponse])
def recent_activity(
    limit: int = Query(default=10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    authz: AuthorizationContext = Depends(get_authorization),
):
    requester_id = None if authz.is_manager(current_user.id) else current_user.id
    return ActivityService(db).recent(limit=limit, requester_id=requester_id)
