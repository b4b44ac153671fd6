from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from approvex.models.common import Urgency

class ExpenseClaimCreate(BaseModel):
    title: str = Field(min_length=1)
    amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    category: str
    description: Optional[str] = None
    urgency: Urgency = Urgency.NORMAL

class ExpensePaymentRequest(BaseModel):
    payment_reference: Optional[str] = None

class ExpenseClaimResponse(BaseModel):
    id: int
    requester_id: int
    title: str
    description: Optional[str] = None
    amount: Decimal
    category: str
    status: str
    payment_status: str
    payment_reference: Optional[str] = None
    policy_warning: Optional[str] = None
    urgency: str
    manager_comment: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
