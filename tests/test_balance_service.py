import pytest
from datetime import date, timedelta
from sqlalchemy.orm import Session

from approvex.core.exceptions import ConcurrencyConflictError, PolicyViolationError, ValidationFailedError
from approvex.models.activity import ActivityLog
from approvex.models.leave_balance import LeaveBalance
from approvex.models.notification import Notification
from approvex.models.user import User
from approvex.services.balance_service import LOW_BALANCE_NOTIFICATION, LeaveBalanceService
from approvex.services.leave_policy import BalanceSnapshot
from approvex.services.request_service import LeaveRequestService

TODAY = date(2026, 3, 10)


def _submit(db_session, user, leave_type, start, days, today=TODAY):
    return LeaveRequestService(db_session).submit(
        user, leave_type=leave_type, start_date=start, end_date=start + timedelta(days=days - 1), today=today
    )


def test_default_balances_created_on_first_access(db_session, employee):
    sheet = LeaveBalanceService(db_session).load(employee.id, TODAY)
    totals = {row.leave_type: row.total_days for row in sheet.rows}
    assert totals == {"Annual Leave": 20, "Sick Leave": 10, "Personal Leave": 5}
    assert all(row.monthly_limit == 5 and row.yearly_limit == 60 for row in sheet.rows)

    # Second access reuses the rows
    again = LeaveBalanceService(db_session).load(employee.id, TODAY)
    assert [r.id for r in again.rows] == [r.id for r in sheet.rows]


def test_submission_updates_all_counters_together(db_session, employee):
    leave = _submit(db_session, employee, "Annual Leave", date(2026, 3, 16), 3)
    assert leave.status == "pending"
    assert leave.days == 3

    row = db_session.query(LeaveBalance).filter_by(requester_id=employee.id, leave_type="Annual Leave").one()
    assert row.used_days == 3
    assert row.monthly_used_days == 3
    assert row.yearly_used_days == 3

    entry = db_session.query(ActivityLog).filter_by(request_type="leave", request_id=leave.id).one()
    assert entry.action == "submitted"


def test_used_days_is_sum_of_accepted_submissions(db_session, employee):
    service = LeaveBalanceService(db_session)
    accepted = []
    # Spread over months so the monthly cap is not the binding limit
    for month, days in [(1, 2), (2, 1), (3, 2), (4, 4), (5, 1)]:
        today = date(2026, month, 3)
        try:
            _submit(db_session, employee, "Personal Leave", date(2026, month, 10), days, today=today)
            accepted.append(days)
        except PolicyViolationError:
            pass

    row = service.load(employee.id, date(2026, 5, 3)).for_type("Personal Leave")
    assert row.used_days == sum(accepted)
    assert row.used_days <= row.total_days
    # 2 + 1 + 2 fills the 5 day Personal allowance; the rest are refused
    assert accepted == [2, 1, 2]


def test_monthly_cap_spans_leave_types(db_session, employee):
    _submit(db_session, employee, "Annual Leave", date(2026, 3, 16), 3)
    with pytest.raises(PolicyViolationError) as exc:
        _submit(db_session, employee, "Sick Leave", date(2026, 3, 23), 3)
    assert exc.value.message.startswith("Monthly leave limit exceeded")

    # Nothing was applied for the refused request
    sick = db_session.query(LeaveBalance).filter_by(requester_id=employee.id, leave_type="Sick Leave").one()
    assert sick.used_days == 0
    assert sick.monthly_used_days == 0


def test_unknown_leave_type_is_rejected(db_session, employee):
    with pytest.raises(ValidationFailedError):
        _submit(db_session, employee, "Sabbatical", date(2026, 3, 16), 1)


def test_reservation_with_stale_snapshot_conflicts(db_session, employee):
    service = LeaveBalanceService(db_session)
    row = service.load(employee.id, TODAY).for_type("Annual Leave")
    stale = BalanceSnapshot.from_row(row)

    # Another submission lands first
    service.reserve_days(row, stale, 2, monthly_used_total=0, yearly_used_total=0)

    with pytest.raises(ConcurrencyConflictError):
        service.reserve_days(row, stale, 2, monthly_used_total=0, yearly_used_total=0)

    db_session.refresh(row)
    assert row.used_days == 2
    assert row.monthly_used_days == 2


def test_concurrent_submission_of_another_type_conflicts(db_session, employee):
    service = LeaveBalanceService(db_session)
    sheet = service.load(employee.id, TODAY, lock=True)
    sick = sheet.for_type("Sick Leave")
    assert service.evaluate(sheet, "Sick Leave", 3).allowed

    # A second session submits Annual Leave between the check and the write
    other = Session(bind=db_session.connection())
    try:
        other_user = other.get(User, employee.id)
        _submit(other, other_user, "Annual Leave", date(2026, 3, 16), 3)
    finally:
        other.close()

    with pytest.raises(ConcurrencyConflictError):
        service.reserve_days(
            sick,
            BalanceSnapshot.from_row(sick),
            3,
            monthly_used_total=sheet.monthly_used_total,
            yearly_used_total=sheet.yearly_used_total,
        )

    monthly_total = sum(
        r.monthly_used_days
        for r in db_session.query(LeaveBalance).filter_by(requester_id=employee.id).populate_existing()
    )
    assert monthly_total == 3


def test_reservation_never_exceeds_total(db_session, employee):
    service = LeaveBalanceService(db_session)
    row = service.load(employee.id, TODAY).for_type("Personal Leave")
    with pytest.raises(ConcurrencyConflictError):
        service.reserve_days(row, BalanceSnapshot.from_row(row), 6, monthly_used_total=0, yearly_used_total=0)
    db_session.refresh(row)
    assert row.used_days == 0


def test_period_counters_reset_once_per_boundary(db_session, employee):
    service = LeaveBalanceService(db_session)
    _submit(db_session, employee, "Annual Leave", date(2026, 3, 16), 3, today=date(2026, 3, 10))

    row = service.load(employee.id, date(2026, 4, 1)).for_type("Annual Leave")
    assert row.monthly_used_days == 0
    assert row.yearly_used_days == 3
    assert row.used_days == 3

    _submit(db_session, employee, "Annual Leave", date(2026, 4, 20), 1, today=date(2026, 4, 2))
    for day in (date(2026, 4, 5), date(2026, 4, 15), date(2026, 4, 30)):
        row = service.load(employee.id, day).for_type("Annual Leave")
        assert row.monthly_used_days == 1
        assert row.last_month_reset == date(2026, 4, 1)

    row = service.load(employee.id, date(2027, 1, 4)).for_type("Annual Leave")
    assert row.monthly_used_days == 0
    assert row.yearly_used_days == 0
    assert row.used_days == 4


def test_low_balance_alert_sent_once_per_day(db_session, employee):
    _submit(db_session, employee, "Personal Leave", date(2026, 3, 16), 2)
    _submit(db_session, employee, "Personal Leave", date(2026, 3, 23), 1)

    alerts = db_session.query(Notification).filter_by(user_id=employee.id, type=LOW_BALANCE_NOTIFICATION).all()
    assert len(alerts) == 1
    assert "Personal Leave" in alerts[0].title
    assert "Only 3 days remaining out of 5 days" in alerts[0].message


def test_summary_reports_totals_and_payment_status(db_session, employee):
    _submit(db_session, employee, "Annual Leave", date(2026, 3, 16), 2)
    _submit(db_session, employee, "Personal Leave", date(2026, 3, 23), 1)

    summary = LeaveBalanceService(db_session).summary(employee.id, TODAY)
    by_type = {b["leave_type"]: b for b in summary["balances"]}
    assert by_type["Annual Leave"]["remaining_days"] == 18
    assert by_type["Annual Leave"]["payment_status"] == "half-paid"
    assert by_type["Personal Leave"]["payment_status"] == "unpaid"
    assert summary["monthly_used_days"] == 3
    assert summary["monthly_remaining_days"] == 2
    assert summary["yearly_remaining_days"] == 57
