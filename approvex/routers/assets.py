from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from approvex.database import get_db
from approvex.models.common import RequestStatus
from approvex.models.user import User
from approvex.routers.auth_deps import get_authorization, get_current_user
from approvex.schemas.asset import AssetRequestCreate, AssetRequestResponse
from approvex.services.authorization import AuthorizationContext
from approvex.services.request_service import AssetRequestService

router = APIRouter(prefix="/assets", tags=["assets"])


@router.post("/", response_model=AssetRequestResponse, status_code=status.HTTP_201_CREATED)
def submit_asset_request(
    request: AssetRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return AssetRequestService(db).submit(
        current_user,
        title=request.title,
        asset_type=request.asset_type,
        category=request.category,
        reason=request.reason,
        estimated_cost=request.estimated_cost,
        urgency=request.urgency.value,
    )


@router.get("/", response_model=List[AssetRequestResponse])
def list_asset_requests(
    status: Optional[RequestStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    authz: AuthorizationContext = Depends(get_authorization),
):
    return AssetRequestService(db).list(current_user, authz, status.value if status else None)
