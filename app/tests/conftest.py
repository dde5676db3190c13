"""
Pytest configuration and fixtures
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.engine import Engine
from app.main import app
from app.db.base import Base
from app.core.deps import get_db

# Import all models to ensure they're registered with Base.metadata
from app.models import (
    Employee,
    AuditLog,
    LeaveTypeDefinition,
    LeaveGroup,
    LeavePolicy,
    LeaveApplication,
    LeaveLedgerCounter,
    Holiday,
)  # noqa


# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Enable foreign keys for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ACTOR_HEADERS = {"X-Actor-Id": "hr-admin"}


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Test client fixture with database override"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def actor_headers():
    return dict(ACTOR_HEADERS)


@pytest.fixture
def leave_types(db):
    """Casual and Sick leave in the catalog"""
    casual = LeaveTypeDefinition(name="Casual Leave", is_active=True)
    sick = LeaveTypeDefinition(name="Sick Leave", is_active=True)
    db.add_all([casual, sick])
    db.commit()
    db.refresh(casual)
    db.refresh(sick)
    return {"casual": casual, "sick": sick}


@pytest.fixture
def make_group(db):
    """Factory: leave group with one policy row per (leave type, rules) pair"""
    def _make(name, policies, is_active=True):
        group = LeaveGroup(group_name=name, is_active=is_active, version=1, created_by="test")
        group.policies = [
            LeavePolicy(
                position=i,
                leave_type_id=leave_type.id,
                leave_type_name=leave_type.name,
                **rules,
            )
            for i, (leave_type, rules) in enumerate(policies)
        ]
        db.add(group)
        db.commit()
        db.refresh(group)
        return group
    return _make


@pytest.fixture
def make_employee(db):
    """Factory: active employee, optionally in a leave group"""
    def _make(emp_code="EMP001", name="Test Employee", group=None, active=True):
        employee = Employee(
            emp_code=emp_code,
            name=name,
            leave_group_id=group.id if group is not None else None,
            active=active,
        )
        db.add(employee)
        db.commit()
        db.refresh(employee)
        return employee
    return _make
