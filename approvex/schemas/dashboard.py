from pydantic import BaseModel
from datetime import date
from typing import Dict, List, Optional

class RequestStats(BaseModel):
    pending: int
    approved_this_week: int
    rejected: int
    total: int
    pending_by_category: Dict[str, int]
    approval_trend: List[int]

class EmployeeLeaveStatus(BaseModel):
    employee_id: int
    full_name: str
    email: str
    department: Optional[str] = None
    position: Optional[str] = None
    is_on_leave: bool
    leave_type: Optional[str] = None
    is_paid: bool
    payment_status: Optional[str] = None
    leave_start: Optional[date] = None
    leave_end: Optional[date] = None

class TeamStats(BaseModel):
    total_employees: int
    working_today: int
    on_paid_leave: int
    on_half_paid_leave: int
    on_unpaid_leave: int
    on_leave_total: int

class TeamLeaveStatus(BaseModel):
    day: date
    employees: List[EmployeeLeaveStatus]
    stats: TeamStats
