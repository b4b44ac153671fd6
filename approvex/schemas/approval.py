from pydantic import BaseModel
from typing import List, Literal, Optional

class DecisionRequest(BaseModel):
    decision: Literal["approved", "rejected"]
    comment: Optional[str] = None

class EffectOutcomeResponse(BaseModel):
    name: str
    succeeded: bool
    error: Optional[str] = None

class DecisionResponse(BaseModel):
    success: bool = True
    request_type: str
    request_id: int
    status: str
    approved_by: Optional[int] = None
    manager_comment: Optional[str] = None
    effects: List[EffectOutcomeResponse] = []
