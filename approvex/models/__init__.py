# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    user, leave_request, leave_balance, expense_claim,
    asset_request, activity, notification
)

# Explicit class exports for cleaner imports
from .common import RequestStatus, RequestType, Urgency
from .user import User, UserRole
from .leave_request import LeaveRequest, LeaveType
from .leave_balance import LeaveBalance
from .expense_claim import ExpenseClaim, PaymentStatus
from .asset_request import AssetRequest
from .activity import ActivityLog
from .notification import Notification

__all__ = [
    "RequestStatus",
    "RequestType",
    "Urgency",
    "User",
    "UserRole",
    "LeaveRequest",
    "LeaveType",
    "LeaveBalance",
    "ExpenseClaim",
    "PaymentStatus",
    "AssetRequest",
    "ActivityLog",
    "Notification",
]
