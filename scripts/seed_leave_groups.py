"""
Seed the leave type catalog and a default "Staff" leave group.

Existing leave types and groups are left unchanged. Run from the project root with .env loaded.

Usage:
  python scripts/seed_leave_groups.py              # seeds catalog and the "Staff" group
  python scripts/seed_leave_groups.py Contractors  # seeds catalog and a group with that name
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.db.session import SessionLocal
from app.models.leave_group import LeaveGroup, LeaveTypeDefinition
from app.schemas.policy import LeaveGroupCreate, LeaveTypeCreate, PolicyRecordIn
from app.services.leave_group_service import create_leave_group, create_leave_type

SEED_ACTOR = "seed-script"

# leave type name -> policy rules of the default group
DEFAULT_RULES = {
    "Casual Leave": {"allowed_balance": 5, "half_day": True, "interval_days_in_same_leave": 7},
    "Sick Leave": {
        "allowed_balance": 6,
        "half_day": True,
        "max_limit_for_past_leave": 7,
        "does_requires_leave_attachment": True,
        "min_day_count_for_requiring_attachment": 3,
    },
    "Privilege Leave": {
        "allowed_balance": 7,
        "balance_forwarding": True,
        "max_forward_from_previous_year": 7,
        "max_leave_balance_in_year": 14,
        "continuous_days_allow": True,
        "continuous_sanction": 7,
        "allow_earn_leave": True,
        "apply_future_leave_after_days": 7,
        "max_balance_for_encashment": 10,
    },
}


def main():
    group_name = sys.argv[1] if len(sys.argv) > 1 else "Staff"

    db = SessionLocal()
    try:
        types = {}
        for name in DEFAULT_RULES:
            leave_type = db.query(LeaveTypeDefinition).filter(LeaveTypeDefinition.name == name).first()
            if not leave_type:
                leave_type = create_leave_type(db, LeaveTypeCreate(name=name), SEED_ACTOR)
            types[name] = leave_type
            print(f"Leave type: {leave_type.name} (id={leave_type.id})")

        group = db.query(LeaveGroup).filter(LeaveGroup.group_name == group_name).first()
        if group:
            print(f"Leave group '{group_name}' already exists (version {group.version}), left unchanged")
            return

        policies = [
            PolicyRecordIn(leave_type_id=types[name].id, **rules)
            for name, rules in DEFAULT_RULES.items()
        ]
        group = create_leave_group(db, LeaveGroupCreate(group_name=group_name, policies=policies), SEED_ACTOR)
        for policy in group.policies:
            print(f"  {policy.leave_type_name}: allowed={policy.allowed_balance}")
        print(f"Leave group '{group.group_name}' created (id={group.id})")
    finally:
        db.close()


if __name__ == "__main__":
    main()
