import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from approvex.models.common import RequestStatus, RequestType
from approvex.services.approval_service import ApprovalService
from approvex.services.authorization import RoleTableAuthorization
from approvex.services.dashboard_service import DashboardService
from approvex.services.request_service import (
    AssetRequestService,
    ExpenseClaimService,
    LeaveRequestService,
)

@pytest.fixture
def decided_requests(db_session, employee, other_employee, manager, effects):
    """One approved leave, one rejected claim, one pending claim and one auto-approved asset."""
    approvals = ApprovalService(db_session, RoleTableAuthorization(db_session), effects)
    leave = LeaveRequestService(db_session).submit(
        employee, "Sick Leave", date(2026, 11, 2), date(2026, 11, 4), today=date(2026, 10, 19)
    )
    approvals.decide(RequestType.LEAVE, leave.id, manager, RequestStatus.APPROVED)

    claims = ExpenseClaimService(db_session)
    rejected = claims.submit(other_employee, "Team lunch", Decimal("80"), "Meals")
    approvals.decide(RequestType.EXPENSE, rejected.id, manager, RequestStatus.REJECTED, comment="Over budget")
    claims.submit(other_employee, "Train ticket", Decimal("60"), "Travel")

    AssetRequestService(db_session).submit(employee, "Mouse", "peripheral", "Hardware", estimated_cost=Decimal("25"))
    return leave

def test_request_stats(db_session, decided_requests):
    stats = DashboardService.request_stats(db_session)
    assert stats["total"] == 4
    assert stats["pending"] == 1
    assert stats["rejected"] == 1
    assert stats["approved_this_week"] == 2
    assert stats["pending_by_category"] == {"leave": 0, "expense": 1, "asset": 0}
    assert len(stats["approval_trend"]) == 7
    assert stats["approval_trend"][-1] == 2

def test_approvals_older_than_a_week_leave_the_trend(db_session, decided_requests):
    later = datetime.now(timezone.utc) + timedelta(days=10)
    stats = DashboardService.request_stats(db_session, now=later)
    assert stats["approved_this_week"] == 0
    assert sum(stats["approval_trend"]) == 0

def test_team_leave_status(db_session, decided_requests, employee):
    status = DashboardService.team_leave_status(db_session, date(2026, 11, 3))
    assert status["stats"]["total_employees"] == 3
    assert status["stats"]["on_leave_total"] == 1
    assert status["stats"]["on_half_paid_leave"] == 1
    assert status["stats"]["working_today"] == 2

    absent = next(e for e in status["employees"] if e["employee_id"] == employee.id)
    assert absent["leave_type"] == "Sick Leave"
    assert absent["is_paid"] is True

    # The day after the leave ends everyone is back
    status = DashboardService.team_leave_status(db_session, date(2026, 11, 5))
    assert status["stats"]["on_leave_total"] == 0

def test_dashboard_requires_manager(client, employee, manager, auth_headers):
    assert client.get("/api/dashboard/stats", headers=auth_headers(employee)).status_code == 403

    response = client.get("/api/dashboard/team-status?day=2026-11-03", headers=auth_headers(manager))
    assert response.status_code == 200
    assert response.json()["day"] == "2026-11-03"

    response = client.get("/api/dashboard/stats", headers=auth_headers(manager))
    assert response.status_code == 200
    assert response.json()["total"] == 0
