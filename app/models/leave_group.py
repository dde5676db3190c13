"""
Leave policy models: leave type catalog, policy groups and per-type policy records
"""
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base


class LeaveTypeDefinition(Base):
    """Catalog entry for a leave type (e.g. Casual, Sick). Also the ungoverned fallback list."""
    __tablename__ = "leave_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)


class LeaveGroup(Base):
    """Named, ordered bundle of policy records assigned to employees"""
    __tablename__ = "leave_groups"

    id = Column(Integer, primary_key=True, index=True)
    group_name = Column(String(150), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    # Bumped on every in-place edit; copied onto applications with the policy snapshot
    version = Column(Integer, default=1, nullable=False)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    policies = relationship(
        "LeavePolicy",
        back_populates="leave_group",
        order_by="LeavePolicy.position",
        cascade="all, delete-orphan",
    )


class LeavePolicy(Base):
    """Rule set for one leave type inside a leave group"""
    __tablename__ = "leave_policies"

    id = Column(Integer, primary_key=True, index=True)
    leave_group_id = Column(Integer, ForeignKey("leave_groups.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    # Identity
    leave_type_id = Column(Integer, ForeignKey("leave_types.id"), nullable=False)
    leave_type_name = Column(String(100), nullable=False)

    # Entitlement
    allowed_balance = Column(Integer, nullable=False, default=0)
    max_leave_balance_in_year = Column(Integer, nullable=False, default=0)  # 0 = no cap
    max_sanction_in_service_life = Column(Integer, nullable=False, default=0)  # 0 = no cap

    # Carry-over
    balance_forwarding = Column(Boolean, nullable=False, default=False)
    max_forward_from_previous_year = Column(Integer, nullable=False, default=0)

    # Cross-year and spacing
    leave_allow_between_multiple_years = Column(Boolean, nullable=False, default=False)
    interval_days_in_same_leave = Column(Integer, nullable=False, default=0)

    negative_balance = Column(Boolean, nullable=False, default=False)
    max_limit_for_past_leave = Column(Integer, nullable=False, default=0)

    # Continuous-use cap
    continuous_days_allow = Column(Boolean, nullable=False, default=False)
    continuous_sanction = Column(Integer, nullable=False, default=0)

    half_day = Column(Boolean, nullable=False, default=False)
    max_balance_for_encashment = Column(Integer, nullable=False, default=0)

    # Holiday adjacency
    is_prefix_allowed = Column(Boolean, nullable=False, default=False)
    is_suffix_allowed = Column(Boolean, nullable=False, default=False)

    # Evidence
    does_requires_leave_attachment = Column(Boolean, nullable=False, default=False)
    min_day_count_for_requiring_attachment = Column(Integer, nullable=False, default=0)

    # Accrual / lead time
    allow_earn_leave = Column(Boolean, nullable=False, default=False)
    apply_future_leave_after_days = Column(Integer, nullable=False, default=0)

    leave_group = relationship("LeaveGroup", back_populates="policies")
    leave_type = relationship("LeaveTypeDefinition")

    __table_args__ = (
        UniqueConstraint("leave_group_id", "leave_type_id", name="uq_leave_policies_group_type"),
        CheckConstraint("allowed_balance >= 0", name="check_allowed_balance_non_negative"),
    )
