from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from approvex.models.common import Urgency

class AssetRequestCreate(BaseModel):
    title: str = Field(min_length=1)
    asset_type: str
    category: str
    reason: Optional[str] = None
    estimated_cost: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    urgency: Urgency = Urgency.NORMAL

class AssetRequestResponse(BaseModel):
    id: int
    requester_id: int
    title: str
    asset_type: str
    category: str
    reason: Optional[str] = None
    estimated_cost: Optional[Decimal] = None
    urgency: str
    status: str
    auto_approved: bool
    manager_comment: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
