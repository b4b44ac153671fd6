from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Any, Dict, Optional

class ActivityLogResponse(BaseModel):
    id: int
    actor_id: Optional[int] = None
    action: str
    request_type: str
    request_id: int
    requester_id: Optional[int] = None
    decision_summary: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
