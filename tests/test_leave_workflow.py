import pytest
from datetime import date, timedelta

from approvex.models.leave_balance import LeaveBalance

START = date(2026, 11, 2)


def _leave_payload(leave_type="Annual Leave", start=START, days=1, reason="Family visit"):
    return {
        "leave_type": leave_type,
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(days=days - 1)).isoformat(),
        "reason": reason,
    }

def _submit_leave(client, headers, **kwargs):
    return client.post("/api/leave/requests", headers=headers, json=_leave_payload(**kwargs))

def test_submit_leave_request(client, employee, auth_headers):
    """Test a leave request within all limits is accepted as pending."""
    response = _submit_leave(client, auth_headers(employee), days=3)
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["days"] == 3
    assert data["requester_id"] == employee.id
    assert data["payment_status"] == "half-paid"

def test_personal_leave_is_unpaid(client, employee, auth_headers):
    """Test payment classification is derived from the leave type."""
    response = _submit_leave(client, auth_headers(employee), leave_type="Personal Leave")
    assert response.status_code == 201
    assert response.json()["payment_status"] == "unpaid"

def test_monthly_limit_refusal(client, employee, auth_headers, db_session):
    """Test the second request is refused once the monthly cap would be exceeded."""
    headers = auth_headers(employee)
    assert _submit_leave(client, headers, days=3).status_code == 201

    response = _submit_leave(client, headers, leave_type="Sick Leave", start=START + timedelta(days=7), days=3)
    assert response.status_code == 422
    error = response.json()["errors"][0]
    assert error["code"] == "POLICY_VIOLATION"
    assert error["msg"].startswith("Monthly leave limit exceeded")
    assert error["details"]["monthly_remaining"] == 2

    sick = db_session.query(LeaveBalance).filter_by(requester_id=employee.id, leave_type="Sick Leave").one()
    assert sick.used_days == 0

def test_reversed_date_range_is_rejected(client, employee, auth_headers):
    """Test an end date before the start date is a validation error."""
    payload = _leave_payload()
    payload["end_date"] = (START - timedelta(days=2)).isoformat()
    response = client.post("/api/leave/requests", headers=auth_headers(employee), json=payload)
    assert response.status_code == 400
    assert response.json()["errors"][0]["code"] == "VALIDATION_ERROR"

def test_unknown_leave_type_is_rejected(client, employee, auth_headers):
    response = _submit_leave(client, auth_headers(employee), leave_type="Sabbatical")
    assert response.status_code == 400

def test_missing_identity_header(client):
    """Test requests without the forwarded identity are refused."""
    response = client.post("/api/leave/requests", json=_leave_payload())
    assert response.status_code == 401
    assert response.json()["errors"][0]["code"] == "AUTH_FAILED"

def test_request_visibility(client, employee, other_employee, manager, auth_headers):
    """Test employees only see their own requests while managers see all."""
    _submit_leave(client, auth_headers(employee))
    _submit_leave(client, auth_headers(other_employee), start=START + timedelta(days=1))

    own = client.get("/api/leave/requests", headers=auth_headers(employee)).json()
    assert [r["requester_id"] for r in own] == [employee.id]

    everything = client.get("/api/leave/requests", headers=auth_headers(manager)).json()
    assert {r["requester_id"] for r in everything} == {employee.id, other_employee.id}

    pending = client.get("/api/leave/requests?status=approved", headers=auth_headers(manager)).json()
    assert pending == []

def test_leave_balances(client, employee, auth_headers):
    """Test the balance summary reflects submitted requests."""
    headers = auth_headers(employee)
    _submit_leave(client, headers, days=2)

    response = client.get("/api/leave/balances", headers=headers)
    assert response.status_code == 200
    data = response.json()
    annual = next(b for b in data["balances"] if b["leave_type"] == "Annual Leave")
    assert annual["used_days"] == 2
    assert annual["remaining_days"] == 18
    assert data["monthly_limit"] == 5
    assert data["monthly_remaining_days"] == 3
    assert data["yearly_remaining_days"] == 58

@pytest.mark.parametrize("days,allowed", [(5, True), (6, False)])
def test_check_eligibility(client, employee, auth_headers, days, allowed):
    """Test the advisory check applies the same rule as submission."""
    payload = _leave_payload(days=days)
    payload.pop("reason")
    response = client.post("/api/leave/check-eligibility", headers=auth_headers(employee), json=payload)
    assert response.status_code == 200
    data = response.json()
    assert data["allowed"] is allowed
    assert data["requested_days"] == days
    if not allowed:
        assert data["reason"].startswith("Monthly leave limit exceeded")

def test_low_balance_notification(client, employee, auth_headers):
    """Test a low balance after submission notifies the requester once."""
    headers = auth_headers(employee)
    _submit_leave(client, headers, leave_type="Personal Leave", days=2)
    _submit_leave(client, headers, leave_type="Personal Leave", start=START + timedelta(days=7))

    notifications = client.get("/api/notifications/", headers=headers).json()
    alerts = [n for n in notifications if n["type"] == "leave_balance_warning"]
    assert len(alerts) == 1
    assert "Personal Leave" in alerts[0]["title"]
