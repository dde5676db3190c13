"""
Balance calculator - derives allowed/used/remaining for one leave type and year.

Pure functions over a policy record and an application history; nothing here
touches the database. Balances are never stored: callers recompute them from
the approved history on every request.

Day counts are calendar days inclusive of both ends (to_date - from_date + 1).
A half-day application weighs 0.5 per day. Fractions are kept as-is.
"""
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, Optional, Tuple

from app.models.leave import LeaveStatus
from app.schemas.policy import PolicyRecord

HALF_DAY_VALUE = 0.5


@dataclass(frozen=True)
class Balance:
    leave_type: str
    year: int
    allowed: Optional[float]
    forwarded: float
    used: float
    remaining: Optional[float]
    encashable: Optional[float] = None
    lifetime_used: float = 0.0
    enforced: bool = True

    def after(self, requested_days: float) -> "Balance":
        """Projected balance once requested_days are taken from this year"""
        return Balance(
            leave_type=self.leave_type,
            year=self.year,
            allowed=self.allowed,
            forwarded=self.forwarded,
            used=self.used + requested_days,
            remaining=None if self.remaining is None else self.remaining - requested_days,
            encashable=self.encashable,
            lifetime_used=self.lifetime_used + requested_days,
            enforced=self.enforced,
        )


def year_bounds(year: int) -> Tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def inclusive_days(from_date: date, to_date: date) -> int:
    """Calendar days from from_date to to_date, both included (0 for an inverted range)"""
    if to_date < from_date:
        return 0
    return (to_date - from_date).days + 1


def overlap_days(from_date: date, to_date: date, window_start: date, window_end: date) -> int:
    """Days of [from_date, to_date] that fall inside [window_start, window_end], inclusive"""
    return inclusive_days(max(from_date, window_start), min(to_date, window_end))


def day_weight(half_day: bool) -> float:
    return HALF_DAY_VALUE if half_day else 1.0


def days_in_year(from_date: date, to_date: date, year: int, half_day: bool = False) -> float:
    """In-year portion of a range; a cross-year range contributes only its days inside year"""
    start, end = year_bounds(year)
    return overlap_days(from_date, to_date, start, end) * day_weight(half_day)


def split_days_by_year(from_date: date, to_date: date, half_day: bool = False) -> Dict[int, float]:
    """
    Split an inclusive range into per-year day counts.

    Dec 25 .. Jan 5 -> {Y: 7, Y+1: 5}.
    """
    if to_date < from_date:
        return {}
    return {
        year: days_in_year(from_date, to_date, year, half_day)
        for year in range(from_date.year, to_date.year + 1)
    }


def requested_days(from_date: date, to_date: date, half_day: bool = False) -> float:
    return inclusive_days(from_date, to_date) * day_weight(half_day)


def _counts_for(application, leave_type: str) -> bool:
    # Only approved applications of this type ever count toward used
    return application.status == LeaveStatus.APPROVED and application.leave_type == leave_type


def used_days(applications: Iterable, leave_type: str, year: int) -> float:
    """Approved days of leave_type falling inside year"""
    return sum(
        days_in_year(a.from_date, a.to_date, year, bool(a.half_day))
        for a in applications
        if _counts_for(a, leave_type)
    )


def lifetime_used_days(applications: Iterable, leave_type: str) -> float:
    """Approved days of leave_type over the whole history"""
    return sum(
        requested_days(a.from_date, a.to_date, bool(a.half_day))
        for a in applications
        if _counts_for(a, leave_type)
    )


def forwarded_days(
    policy: PolicyRecord,
    year: int,
    applications: Iterable,
    previous_policy: Optional[PolicyRecord] = None,
) -> float:
    """
    Unused days carried from year - 1, clipped to [0, max_forward_from_previous_year].

    previous_policy is the record that governed year - 1 (defaults to policy).
    Only one year of lookback: the previous year's allowed is its
    allowed_balance under its own annual cap, so forwarding never compounds.
    """
    if not policy.balance_forwarding:
        return 0.0
    previous = previous_policy or policy
    previous_allowed = float(previous.allowed_balance)
    if previous.max_leave_balance_in_year > 0:
        previous_allowed = min(previous_allowed, float(previous.max_leave_balance_in_year))
    previous_remaining = previous_allowed - used_days(applications, policy.leave_type_name, year - 1)
    return float(min(max(previous_remaining, 0), policy.max_forward_from_previous_year))


def compute_balance(
    policy: PolicyRecord,
    reference_year: int,
    applications: Iterable,
    previous_policy: Optional[PolicyRecord] = None,
) -> Balance:
    """
    Balance of one leave type for reference_year.

    applications may hold any statuses and types; only approved applications of
    policy.leave_type_name count. remaining may be negative, admissibility is
    decided by the validator.
    """
    applications = list(applications)
    leave_type = policy.leave_type_name

    forwarded = forwarded_days(policy, reference_year, applications, previous_policy)
    allowed = float(policy.allowed_balance) + forwarded
    if policy.max_leave_balance_in_year > 0:
        allowed = min(allowed, float(policy.max_leave_balance_in_year))

    used = used_days(applications, leave_type, reference_year)
    remaining = allowed - used

    encashable = None
    if policy.max_balance_for_encashment > 0:
        encashable = min(max(remaining, 0.0), float(policy.max_balance_for_encashment))

    return Balance(
        leave_type=leave_type,
        year=reference_year,
        allowed=allowed,
        forwarded=forwarded,
        used=used,
        remaining=remaining,
        encashable=encashable,
        lifetime_used=lifetime_used_days(applications, leave_type),
    )


def ungoverned_balance(leave_type: str, reference_year: int, applications: Iterable) -> Balance:
    """Usage-only figures for a leave type without a policy record (nothing is enforced)"""
    applications = list(applications)
    return Balance(
        leave_type=leave_type,
        year=reference_year,
        allowed=None,
        forwarded=0.0,
        used=used_days(applications, leave_type, reference_year),
        remaining=None,
        lifetime_used=lifetime_used_days(applications, leave_type),
        enforced=False,
    )


def resolve_policy_for_year(
    live_policy: PolicyRecord,
    applications: Iterable,
    year: int,
    today: date,
) -> PolicyRecord:
    """
    Policy record to use for year.

    The current and future years always use the live record. For a past year
    the newest snapshot stored on an application of this type touching that
    year wins, so later in-place edits of the group do not rewrite history.
    """
    if year >= today.year:
        return live_policy

    start, end = year_bounds(year)
    candidates = [
        a for a in applications
        if a.policy_snapshot
        and a.leave_type == live_policy.leave_type_name
        and overlap_days(a.from_date, a.to_date, start, end) > 0
    ]
    if not candidates:
        return live_policy

    latest = max(candidates, key=lambda a: (a.policy_version or 0, a.id or 0))
    return PolicyRecord.model_validate(latest.policy_snapshot)


def year_balance(live_policy: PolicyRecord, applications: Iterable, year: int, today: date) -> Balance:
    """
    Balance for year with the policy in force for that year and for year - 1.

    Forwarding into year is derived from the same record that governs the
    previous year's own balance.
    """
    applications = list(applications)
    return compute_balance(
        resolve_policy_for_year(live_policy, applications, year, today),
        year,
        applications,
        previous_policy=resolve_policy_for_year(live_policy, applications, year - 1, today),
    )
