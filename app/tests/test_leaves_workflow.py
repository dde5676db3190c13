"""
Tests for the Pending -> Approved | Rejected workflow and the balance endpoint
"""
from datetime import date, timedelta

import pytest
from fastapi import status
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog
from app.models.leave import LeaveApplication, LeaveLedgerCounter, LeaveStatus
from app.core.errors import BALANCE_NOT_VERIFIED, LeaveValidationError
from app.schemas.leave import LeaveApplyRequest
from app.schemas.policy import PolicyRecord
from app.services import leave_service
from app.utils.datetime_utils import today_utc

CASUAL_RULES = {"allowed_balance": 5, "leave_allow_between_multiple_years": True}
SICK_RULES = {"allowed_balance": 3, "leave_allow_between_multiple_years": True}
APPROVER = {"X-Actor-Id": "manager-7"}


def _day(offset: int) -> date:
    # Far enough ahead that every test range stays in one calendar year
    base = date(date.today().year + 1, 3, 2)
    return base + timedelta(days=offset)


@pytest.fixture
def employee(make_group, make_employee, leave_types):
    group = make_group("Staff", [(leave_types["casual"], CASUAL_RULES), (leave_types["sick"], SICK_RULES)])
    return make_employee(group=group)


@pytest.fixture
def submit(client, actor_headers):
    def _submit(employee, from_date, to_date, leave_type="Casual Leave"):
        response = client.post(
            "/api/v1/leaves/apply",
            json={
                "employee_id": employee.id,
                "leave_type": leave_type,
                "from_date": from_date.isoformat(),
                "to_date": to_date.isoformat(),
                "reason": "travel",
            },
            headers=actor_headers,
        )
        assert response.status_code == status.HTTP_201_CREATED, response.json()
        return response.json()["application"]
    return _submit


def _balance(client, employee, leave_type="Casual Leave", year=None):
    year = year or _day(0).year
    data = client.get(f"/api/v1/leaves/balance/{employee.id}", params={"year": year}).json()
    return next(b for b in data["balances"] if b["leave_type"] == leave_type)


def test_approve_records_decision(client, db: Session, employee, submit):
    application = submit(employee, _day(0), _day(1))

    response = client.post(
        f"/api/v1/leaves/{application['id']}/approve",
        json={"remarks": "enjoy"},
        headers=APPROVER,
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "Approved"
    assert data["decided_by"] == "manager-7"
    assert data["decision_remark"] == "enjoy"
    assert data["decided_at"].endswith("Z")

    audit = db.query(AuditLog).filter(AuditLog.action == "LEAVE_APPROVE").one()
    assert audit.meta_json["before"] == "Pending"
    assert audit.meta_json["after"] == "Approved"


def test_approve_without_body(client, employee, submit):
    application = submit(employee, _day(0), _day(0))
    response = client.post(f"/api/v1/leaves/{application['id']}/approve", headers=APPROVER)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["decision_remark"] is None


def test_only_approved_counts_toward_used(client, employee, submit):
    approved = submit(employee, _day(0), _day(1))
    rejected = submit(employee, _day(10), _day(10))
    submit(employee, _day(20), _day(20))  # stays Pending

    client.post(f"/api/v1/leaves/{approved['id']}/approve", headers=APPROVER)
    client.post(f"/api/v1/leaves/{rejected['id']}/reject", json={"remarks": "busy week"}, headers=APPROVER)

    balance = _balance(client, employee)
    assert balance["allowed"] == 5
    assert balance["used"] == 2
    assert balance["remaining"] == 3


def test_decisions_are_terminal(client, employee, submit):
    application = submit(employee, _day(0), _day(0))
    client.post(f"/api/v1/leaves/{application['id']}/reject", headers=APPROVER)

    for action in ("approve", "reject"):
        response = client.post(f"/api/v1/leaves/{application['id']}/{action}", headers=APPROVER)
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"] == f"Cannot {action} leave application with status Rejected"


def test_decision_on_missing_application(client):
    response = client.post("/api/v1/leaves/404/approve", headers=APPROVER)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_decision_read_failure_fails_closed(client, db: Session, employee, submit, monkeypatch):
    application = submit(employee, _day(0), _day(0))
    original_query = db.query

    def flaky_query(*entities, **kwargs):
        if entities and entities[0] is LeaveApplication:
            raise OperationalError("SELECT leave_applications", {}, Exception("statement timeout"))
        return original_query(*entities, **kwargs)

    monkeypatch.setattr(db, "query", flaky_query)
    response = client.post(f"/api/v1/leaves/{application['id']}/approve", headers=APPROVER)
    monkeypatch.undo()

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json()["detail"] == BALANCE_NOT_VERIFIED
    db.expire_all()
    assert db.query(LeaveApplication).one().status == LeaveStatus.PENDING


def test_approval_rechecks_balance(client, db: Session, employee, submit):
    # Both fit on their own while Pending; approving both would overdraw 5 days
    first = submit(employee, _day(0), _day(2))
    second = submit(employee, _day(10), _day(12))

    assert client.post(f"/api/v1/leaves/{first['id']}/approve", headers=APPROVER).status_code == 200
    response = client.post(f"/api/v1/leaves/{second['id']}/approve", headers=APPROVER)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "insufficient balance"
    db.expire_all()
    assert db.query(LeaveApplication).filter(LeaveApplication.id == second["id"]).one().status == LeaveStatus.PENDING
    assert _balance(client, employee)["used"] == 3


def test_negative_balance_policy_allows_overdraw(client, make_group, make_employee, leave_types, submit):
    group = make_group("Generous", [(leave_types["casual"], dict(CASUAL_RULES, negative_balance=True))])
    employee = make_employee(emp_code="EMP050", group=group)
    first = submit(employee, _day(0), _day(3))
    second = submit(employee, _day(10), _day(13))

    client.post(f"/api/v1/leaves/{first['id']}/approve", headers=APPROVER)
    response = client.post(f"/api/v1/leaves/{second['id']}/approve", headers=APPROVER)
    assert response.status_code == status.HTTP_200_OK
    assert _balance(client, employee)["remaining"] == -3


def test_approval_bumps_ledger_counter(client, db: Session, employee, submit):
    application = submit(employee, _day(0), _day(0))
    client.post(f"/api/v1/leaves/{application['id']}/approve", headers=APPROVER)
    counter = db.query(LeaveLedgerCounter).filter(
        LeaveLedgerCounter.employee_id == employee.id,
        LeaveLedgerCounter.leave_type == "Casual Leave",
    ).one()
    assert counter.version == 2


def test_status_change_notification(client, employee, submit, monkeypatch):
    application = submit(employee, _day(0), _day(0))
    sent = []
    monkeypatch.setattr("app.api.v1.leaves.dispatch_leave_event", lambda event: sent.append(event))

    client.post(f"/api/v1/leaves/{application['id']}/approve", headers=APPROVER)
    assert len(sent) == 1
    assert sent[0]["type"] == "status_change"
    assert sent[0]["status"] == "Approved"
    assert sent[0]["decided_by"] == "manager-7"


class TestForwardedDays:
    """Approving prior-year leave must not take forwarded days January already used"""

    TODAY = date(2026, 1, 20)
    RULES = {
        "allowed_balance": 10,
        "balance_forwarding": True,
        "max_forward_from_previous_year": 5,
        "max_limit_for_past_leave": 60,
    }

    @pytest.fixture
    def forwarding_employee(self, make_group, make_employee, leave_types):
        group = make_group("Forwarding", [(leave_types["casual"], self.RULES)])
        return make_employee(emp_code="EMP080", group=group)

    def _submit(self, db, employee, from_date, to_date):
        request = LeaveApplyRequest(
            employee_id=employee.id,
            leave_type="Casual Leave",
            from_date=from_date,
            to_date=to_date,
            reason="year end",
        )
        application, _ = leave_service.submit_application(db, request, "emp-80", today=self.TODAY)
        return application.id

    def test_december_approved_after_january(self, db: Session, forwarding_employee):
        december = self._submit(db, forwarding_employee, date(2025, 12, 10), date(2025, 12, 15))
        january = self._submit(db, forwarding_employee, date(2026, 1, 5), date(2026, 1, 19))

        # 2026 allows 10 + 5 forwarded, so the 15 January days fit
        leave_service.approve_application(db, january, "manager-7", today=self.TODAY)
        # 6 December days would cut the forward to 4 and leave 2026 at 15 of 14
        with pytest.raises(LeaveValidationError, match="insufficient balance"):
            leave_service.approve_application(db, december, "manager-7", today=self.TODAY)

        db.expire_all()
        assert db.query(LeaveApplication).filter(LeaveApplication.id == december).one().status == LeaveStatus.PENDING
        _, balances = leave_service.get_leave_balances(db, forwarding_employee.id, 2026, today=self.TODAY)
        assert balances[0].used == 15
        assert balances[0].used <= balances[0].allowed

    def test_december_submitted_after_january_approval(self, db: Session, forwarding_employee):
        january = self._submit(db, forwarding_employee, date(2026, 1, 5), date(2026, 1, 19))
        leave_service.approve_application(db, january, "manager-7", today=self.TODAY)

        with pytest.raises(LeaveValidationError, match="insufficient balance"):
            self._submit(db, forwarding_employee, date(2025, 12, 10), date(2025, 12, 15))
        # two days still leave 10 - 2 = 8 >= 5 to forward
        self._submit(db, forwarding_employee, date(2025, 12, 22), date(2025, 12, 23))


class TestBalances:
    def test_lists_every_group_type(self, client, employee):
        data = client.get(f"/api/v1/leaves/balance/{employee.id}", params={"year": 2030}).json()
        assert data["governed"] is True
        assert data["year"] == 2030
        assert [(b["leave_type"], b["allowed"], b["remaining"]) for b in data["balances"]] == [
            ("Casual Leave", 5, 5),
            ("Sick Leave", 3, 3),
        ]

    def test_defaults_to_current_year(self, client, employee):
        data = client.get(f"/api/v1/leaves/balance/{employee.id}").json()
        assert data["year"] == today_utc().year

    def test_ungoverned_employee_gets_usage_only(self, client, make_employee, leave_types):
        employee = make_employee(emp_code="EMP070")
        data = client.get(f"/api/v1/leaves/balance/{employee.id}", params={"year": 2030}).json()
        assert data["governed"] is False
        assert {b["leave_type"] for b in data["balances"]} == {"Casual Leave", "Sick Leave"}
        assert all(b["allowed"] is None and b["remaining"] is None for b in data["balances"])
        assert all(b["enforced"] is False for b in data["balances"])

    def test_unknown_employee(self, client):
        assert client.get("/api/v1/leaves/balance/999").status_code == status.HTTP_404_NOT_FOUND

    def test_past_year_uses_snapshot_after_policy_edit(self, db: Session, employee):
        snapshot = PolicyRecord(
            leave_type_id=1, leave_type_name="Casual Leave", allowed_balance=8
        ).model_dump()
        db.add(LeaveApplication(
            employee_id=employee.id,
            leave_type="Casual Leave",
            from_date=date(2025, 6, 2),
            to_date=date(2025, 6, 3),
            half_day=False,
            requested_days=2,
            status=LeaveStatus.APPROVED,
            created_by="emp",
            policy_snapshot=snapshot,
            policy_version=1,
        ))
        db.commit()

        governed, balances = leave_service.get_leave_balances(db, employee.id, 2025, today=date(2026, 5, 1))
        casual = next(b for b in balances if b.leave_type == "Casual Leave")
        assert governed is True
        assert casual.allowed == 8
        assert casual.remaining == 6

        _, current = leave_service.get_leave_balances(db, employee.id, 2026, today=date(2026, 5, 1))
        assert next(b for b in current if b.leave_type == "Casual Leave").allowed == 5


def test_history_listing(client, employee, submit):
    first = submit(employee, _day(0), _day(0))
    second = submit(employee, _day(5), _day(5), leave_type="Sick Leave")
    client.post(f"/api/v1/leaves/{first['id']}/approve", headers=APPROVER)

    data = client.get(f"/api/v1/leaves/employee/{employee.id}").json()
    assert data["total"] == 2
    assert [item["id"] for item in data["items"]] == [second["id"], first["id"]]

    approved = client.get(f"/api/v1/leaves/employee/{employee.id}", params={"status": "Approved"}).json()
    assert [item["id"] for item in approved["items"]] == [first["id"]]
