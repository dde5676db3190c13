"""
Audit log model
"""
from sqlalchemy import Column, Integer, String, DateTime, JSON
from app.db.base import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(String, nullable=False, index=True)  # X-Actor-Id of the caller
    action = Column(String, nullable=False)  # e.g., "LEAVE_APPLY", "LEAVE_APPROVE", "LEAVE_GROUP_UPDATE"
    entity_type = Column(String, nullable=False)  # e.g., "leave_applications", "leave_groups"
    entity_id = Column(Integer, nullable=True)
    meta_json = Column(JSON, nullable=True)
    # Set explicitly by log_audit (SQLite server_default returns naive strings)
    created_at = Column(DateTime(timezone=True), nullable=False)
