from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from approvex.database import get_db
from approvex.models.user import User
from approvex.routers.auth_deps import require_manager
from approvex.schemas.dashboard import RequestStats, TeamLeaveStatus
from approvex.services.balance_service import utc_today
from approvex.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=RequestStats)
def request_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
):
    return DashboardService.request_stats(db)


@router.get("/team-status", response_model=TeamLeaveStatus)
def team_status(
    day: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
):
    return DashboardService.team_leave_status(db, day or utc_today())
