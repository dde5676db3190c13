"""
Tests for employee directory endpoints
"""
from fastapi import status
from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog


def test_create_employee_with_group(client, make_group, leave_types, actor_headers):
    group = make_group("Staff", [(leave_types["casual"], {"allowed_balance": 12})])
    response = client.post(
        "/api/v1/employees",
        json={"emp_code": "EMP010", "name": "Asha Rao", "leave_group_id": group.id},
        headers=actor_headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["leave_group_id"] == group.id
    assert data["active"] is True

    fetched = client.get(f"/api/v1/employees/{data['id']}").json()
    assert fetched["emp_code"] == "EMP010"


def test_duplicate_emp_code(client, actor_headers):
    client.post("/api/v1/employees", json={"emp_code": "EMP010", "name": "A"}, headers=actor_headers)
    response = client.post("/api/v1/employees", json={"emp_code": "EMP010", "name": "B"}, headers=actor_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_unknown_group_is_rejected(client, actor_headers):
    response = client.post(
        "/api/v1/employees",
        json={"emp_code": "EMP011", "name": "A", "leave_group_id": 77},
        headers=actor_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_assign_and_clear_leave_group(client, db: Session, make_group, make_employee, leave_types, actor_headers):
    group = make_group("Staff", [(leave_types["casual"], {"allowed_balance": 12})])
    employee = make_employee()

    response = client.put(
        f"/api/v1/employees/{employee.id}/leave-group",
        json={"leave_group_id": group.id},
        headers=actor_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["leave_group_id"] == group.id

    response = client.put(
        f"/api/v1/employees/{employee.id}/leave-group",
        json={"leave_group_id": None},
        headers=actor_headers,
    )
    assert response.json()["leave_group_id"] is None

    actions = [a.meta_json["after"] for a in db.query(AuditLog).filter(
        AuditLog.action == "EMPLOYEE_LEAVE_GROUP_ASSIGN"
    ).order_by(AuditLog.id)]
    assert actions == [group.id, None]


def test_get_missing_employee(client):
    assert client.get("/api/v1/employees/999").status_code == status.HTTP_404_NOT_FOUND
