from pydantic import BaseModel, ConfigDict, Field, computed_field
from datetime import date, datetime
from typing import List, Optional

from approvex.models.common import Urgency
from approvex.services.leave_policy import payment_status_for

class LeaveRequestCreate(BaseModel):
    leave_type: str
    start_date: date
    end_date: date
    reason: Optional[str] = None
    urgency: Urgency = Urgency.NORMAL

class LeaveRequestResponse(BaseModel):
    id: int
    requester_id: int
    leave_type: str
    start_date: date
    end_date: date
    days: int
    reason: Optional[str] = None
    status: str
    urgency: str
    manager_comment: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    # Derived from the leave type on every read, never stored
    @computed_field
    @property
    def payment_status(self) -> str:
        return payment_status_for(self.leave_type)

class LeaveEligibilityRequest(BaseModel):
    leave_type: str
    start_date: date
    end_date: date

class LeaveEligibilityResponse(BaseModel):
    allowed: bool
    reason: Optional[str] = None
    requested_days: int
    type_remaining: int
    monthly_remaining: int
    yearly_remaining: int
    payment_status: str

class LeaveBalanceItem(BaseModel):
    id: int
    leave_type: str
    total_days: int
    used_days: int
    remaining_days: int
    payment_status: str

class LeaveBalanceSummary(BaseModel):
    balances: List[LeaveBalanceItem]
    monthly_used_days: int
    monthly_limit: int
    monthly_remaining_days: int
    yearly_used_days: int
    yearly_limit: int
    yearly_remaining_days: int = Field(description="Days left under the yearly cap across all leave types")
