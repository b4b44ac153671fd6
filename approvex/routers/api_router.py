from fastapi import APIRouter
from approvex.routers import (
    leave, expenses, assets, approvals, activity, notifications, dashboard
)

# Centralized API router hub; main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(leave.router, tags=["Leave"])
api_router.include_router(expenses.router, tags=["Expenses"])
api_router.include_router(assets.router, tags=["Assets"])
api_router.include_router(approvals.router, tags=["Approvals"])
api_router.include_router(activity.router, tags=["Activity"])
api_router.include_router(notifications.router, tags=["Notifications"])
api_router.include_router(dashboard.router, tags=["Dashboard"])
