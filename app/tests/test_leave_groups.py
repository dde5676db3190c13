"""
Tests for the leave type catalog and leave group endpoints
"""
import pytest
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.deps import get_actor_id
from app.models.audit_log import AuditLog
from app.models.leave_group import LeaveGroup


def _group_payload(leave_types, name="Staff"):
    return {
        "group_name": name,
        "description": "Default staff entitlements",
        "policies": [
            {"leave_type_id": leave_types["casual"].id, "allowed_balance": 12, "half_day": True},
            {"leave_type_id": leave_types["sick"].id, "allowed_balance": 6, "does_requires_leave_attachment": True,
             "min_day_count_for_requiring_attachment": 2},
        ],
    }


def test_create_and_list_leave_types(client, actor_headers):
    response = client.post("/api/v1/leave-types", json={"name": "Casual Leave"}, headers=actor_headers)
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["is_active"] is True

    client.post("/api/v1/leave-types", json={"name": "Old Leave", "is_active": False}, headers=actor_headers)

    all_types = client.get("/api/v1/leave-types").json()
    active = client.get("/api/v1/leave-types", params={"active_only": True}).json()
    assert [t["name"] for t in all_types] == ["Casual Leave", "Old Leave"]
    assert [t["name"] for t in active] == ["Casual Leave"]


def test_duplicate_leave_type_conflicts(client, actor_headers):
    client.post("/api/v1/leave-types", json={"name": "Casual Leave"}, headers=actor_headers)
    response = client.post("/api/v1/leave-types", json={"name": "Casual Leave"}, headers=actor_headers)
    assert response.status_code == status.HTTP_409_CONFLICT


def test_actor_header_is_required(client):
    response = client.post("/api/v1/leave-types", json={"name": "Casual Leave"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    with pytest.raises(HTTPException) as exc_info:
        get_actor_id("   ")
    assert exc_info.value.status_code == status.HTTP_400_BAD_REQUEST
    assert get_actor_id(" hr-admin ") == "hr-admin"


def test_create_group_keeps_order_and_catalog_names(client, db: Session, leave_types, actor_headers):
    response = client.post("/api/v1/leave-groups", json=_group_payload(leave_types), headers=actor_headers)
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()

    assert data["version"] == 1
    assert [p["leave_type_name"] for p in data["policies"]] == ["Casual Leave", "Sick Leave"]
    assert data["policies"][0]["allowed_balance"] == 12
    assert data["policies"][0]["negative_balance"] is False

    audit = db.query(AuditLog).filter(AuditLog.action == "LEAVE_GROUP_CREATE").one()
    assert audit.actor_id == "hr-admin"
    assert audit.entity_id == data["id"]


def test_group_requires_a_policy(client, actor_headers):
    response = client.post(
        "/api/v1/leave-groups",
        json={"group_name": "Empty", "policies": []},
        headers=actor_headers,
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_group_rejects_repeated_leave_type(client, leave_types, actor_headers):
    casual_id = leave_types["casual"].id
    response = client.post(
        "/api/v1/leave-groups",
        json={
            "group_name": "Twice",
            "policies": [{"leave_type_id": casual_id}, {"leave_type_id": casual_id}],
        },
        headers=actor_headers,
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_group_rejects_negative_counts(client, leave_types, actor_headers):
    response = client.post(
        "/api/v1/leave-groups",
        json={
            "group_name": "Broken",
            "policies": [{"leave_type_id": leave_types["casual"].id, "allowed_balance": -1}],
        },
        headers=actor_headers,
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_group_rejects_unknown_leave_type(client, actor_headers):
    response = client.post(
        "/api/v1/leave-groups",
        json={"group_name": "Ghost", "policies": [{"leave_type_id": 999}]},
        headers=actor_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_duplicate_group_name_conflicts(client, leave_types, actor_headers):
    client.post("/api/v1/leave-groups", json=_group_payload(leave_types), headers=actor_headers)
    response = client.post("/api/v1/leave-groups", json=_group_payload(leave_types), headers=actor_headers)
    assert response.status_code == status.HTTP_409_CONFLICT


def test_update_group_in_place_bumps_version(client, db: Session, leave_types, actor_headers):
    created = client.post("/api/v1/leave-groups", json=_group_payload(leave_types), headers=actor_headers).json()

    response = client.put(
        f"/api/v1/leave-groups/{created['id']}",
        json={
            "description": "Revised",
            "policies": [{"leave_type_id": leave_types["casual"].id, "allowed_balance": 15}],
        },
        headers=actor_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["version"] == 2
    assert data["description"] == "Revised"
    assert [(p["leave_type_name"], p["allowed_balance"]) for p in data["policies"]] == [("Casual Leave", 15)]

    group = db.query(LeaveGroup).filter(LeaveGroup.id == created["id"]).one()
    assert group.updated_by == "hr-admin"


def test_update_without_policies_keeps_them(client, leave_types, actor_headers):
    created = client.post("/api/v1/leave-groups", json=_group_payload(leave_types), headers=actor_headers).json()
    data = client.put(
        f"/api/v1/leave-groups/{created['id']}",
        json={"is_active": False},
        headers=actor_headers,
    ).json()
    assert data["is_active"] is False
    assert len(data["policies"]) == 2


def test_get_missing_group(client):
    response = client.get("/api/v1/leave-groups/12345")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["path"] == "/api/v1/leave-groups/12345"
