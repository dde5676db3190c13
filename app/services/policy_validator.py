"""
Policy validation service - validates leave requests against a leave policy record

Checks run in a fixed order and the first failure wins, so the submitter always
sees the most actionable reason. Every check raises LeaveValidationError with a
reason string that is returned to the caller verbatim.

Nothing in this module reads the database: the caller supplies the policy,
the per-year balances, the employee's history and the holiday dates.
"""
from datetime import date, timedelta
from typing import Dict, Iterable, Optional, Set

from app.core.errors import LeaveValidationError
from app.models.leave import LeaveStatus
from app.schemas.policy import PolicyRecord
from app.services.balance_calculator import (
    Balance,
    requested_days,
    split_days_by_year,
)

REASON_INVALID_RANGE = "invalid range"
REASON_HALF_DAY_NOT_PERMITTED = "half-day not permitted for this leave type"
REASON_CROSS_YEAR = "cross-year not permitted for this leave type"
REASON_CONTINUOUS_CAP = "exceeds continuous-day cap"
REASON_BACKDATING = "past-dated request exceeds allowed backdating"
REASON_TOO_EARLY = "too early for future leave"
REASON_SPACING = "insufficient spacing between same-type requests"
REASON_INSUFFICIENT_BALANCE = "insufficient balance"
REASON_ATTACHMENT_REQUIRED = "attachment required"
REASON_OVERLAP = "overlaps an existing leave application"
REASON_PRECEDES_HOLIDAY = "cannot immediately precede a holiday"
REASON_FOLLOWS_HOLIDAY = "cannot immediately follow a holiday"
REASON_SERVICE_LIFE = "exceeds service-life sanction"

# Statuses that still occupy dates (a Rejected application frees them)
ACTIVE_STATUSES = (LeaveStatus.PENDING, LeaveStatus.APPROVED)


def _is_active(application) -> bool:
    return application.status in ACTIVE_STATUSES


def validate_date_range(request, policy: Optional[PolicyRecord]) -> None:
    """
    Validate date order and half-day granularity.

    A half-day request must cover exactly one day, and the leave type must allow it.
    """
    if request.to_date < request.from_date:
        raise LeaveValidationError(REASON_INVALID_RANGE)
    if request.half_day:
        if request.from_date != request.to_date:
            raise LeaveValidationError(REASON_INVALID_RANGE)
        if policy is not None and not policy.half_day:
            raise LeaveValidationError(REASON_HALF_DAY_NOT_PERMITTED)


def validate_cross_year(request, policy: PolicyRecord) -> None:
    if not policy.leave_allow_between_multiple_years and request.from_date.year != request.to_date.year:
        raise LeaveValidationError(REASON_CROSS_YEAR)


def validate_continuous_days(total_days: float, policy: PolicyRecord) -> None:
    if policy.continuous_days_allow and total_days > policy.continuous_sanction:
        raise LeaveValidationError(REASON_CONTINUOUS_CAP)


def validate_backdating(request, policy: PolicyRecord, today: date) -> None:
    """A past-dated start may lie at most max_limit_for_past_leave days before today"""
    if request.from_date >= today:
        return
    days_back = (today - request.from_date).days
    if days_back > policy.max_limit_for_past_leave:
        raise LeaveValidationError(REASON_BACKDATING)


def validate_future_lead_time(request, policy: PolicyRecord, today: date) -> None:
    """With earn leave enabled, a future start needs at least apply_future_leave_after_days of lead time"""
    if request.from_date <= today or not policy.allow_earn_leave:
        return
    if (request.from_date - today).days < policy.apply_future_leave_after_days:
        raise LeaveValidationError(REASON_TOO_EARLY)


def validate_spacing(request, policy: PolicyRecord, history: Iterable) -> None:
    """
    Another Pending/Approved request of the same type must end at least
    interval_days_in_same_leave days before this one starts.

    gap = from_date - other.to_date; gap == interval is accepted.
    """
    interval = policy.interval_days_in_same_leave
    if interval <= 0:
        return
    for other in history:
        if other.leave_type != policy.leave_type_name or not _is_active(other):
            continue
        if other.to_date >= request.from_date:
            continue
        gap = (request.from_date - other.to_date).days
        if gap < interval:
            raise LeaveValidationError(REASON_SPACING)


def validate_balance(
    days_by_year: Dict[int, float],
    policy: PolicyRecord,
    balances: Dict[int, Balance],
) -> None:
    """Each touched year is checked against that year's remaining balance"""
    if policy.negative_balance:
        return
    for year, days in days_by_year.items():
        balance = balances.get(year)
        if balance is None or balance.remaining is None:
            continue
        if days > balance.remaining:
            raise LeaveValidationError(REASON_INSUFFICIENT_BALANCE)


def validate_following_year(policy: PolicyRecord, following: Optional[Balance]) -> None:
    """
    With forwarding on, days taken in the last touched year shrink what the
    next year receives. Leave already approved there must still fit.
    """
    if following is None or policy.negative_balance or following.allowed is None:
        return
    if following.used > following.allowed:
        raise LeaveValidationError(REASON_INSUFFICIENT_BALANCE)


def validate_attachment(request, total_days: float, policy: PolicyRecord) -> None:
    if not policy.does_requires_leave_attachment:
        return
    if total_days >= policy.min_day_count_for_requiring_attachment and not request.attachment_ref:
        raise LeaveValidationError(REASON_ATTACHMENT_REQUIRED)


def validate_overlap(request, history: Iterable) -> None:
    """No overlap with the employee's Pending/Approved applications of any type"""
    for other in history:
        if not _is_active(other):
            continue
        if other.to_date >= request.from_date and other.from_date <= request.to_date:
            raise LeaveValidationError(REASON_OVERLAP)


def validate_holiday_adjacency(request, policy: PolicyRecord, holidays: Set[date]) -> None:
    """
    Prefix: leave ending the day before a holiday.
    Suffix: leave starting the day after a holiday.
    """
    if not holidays:
        return
    if not policy.is_prefix_allowed and (request.to_date + timedelta(days=1)) in holidays:
        raise LeaveValidationError(REASON_PRECEDES_HOLIDAY)
    if not policy.is_suffix_allowed and (request.from_date - timedelta(days=1)) in holidays:
        raise LeaveValidationError(REASON_FOLLOWS_HOLIDAY)


def validate_service_life(total_days: float, policy: PolicyRecord, lifetime_used: float) -> None:
    cap = policy.max_sanction_in_service_life
    if cap > 0 and lifetime_used + total_days > cap:
        raise LeaveValidationError(REASON_SERVICE_LIFE)


def validate_application(
    request,
    policy: PolicyRecord,
    balances: Dict[int, Balance],
    history: Iterable,
    today: date,
    holidays: Optional[Set[date]] = None,
    following: Optional[Balance] = None,
) -> Dict[int, Balance]:
    """
    Validate a leave request against its policy record.

    Args:
        request: object with from_date, to_date, half_day, attachment_ref
        policy: policy record for the requested leave type
        balances: balance per calendar year touched by the request
        history: the employee's existing applications (any type, any status)
        today: reference date for backdating and lead-time rules
        holidays: active holiday dates around the request
        following: balance of the year after the request with the request counted
            as approved (only needed when the policy forwards balance)

    Returns:
        Projected balance per touched year after this request (display only)

    Raises:
        LeaveValidationError: on the first failing check
    """
    history = list(history)

    validate_date_range(request, policy)
    validate_cross_year(request, policy)

    total_days = requested_days(request.from_date, request.to_date, request.half_day)
    days_by_year = split_days_by_year(request.from_date, request.to_date, request.half_day)

    validate_continuous_days(total_days, policy)
    validate_backdating(request, policy, today)
    validate_future_lead_time(request, policy, today)
    validate_spacing(request, policy, history)
    validate_balance(days_by_year, policy, balances)
    validate_following_year(policy, following)
    validate_attachment(request, total_days, policy)
    validate_overlap(request, history)
    validate_holiday_adjacency(request, policy, holidays or set())

    lifetime_used = max((b.lifetime_used for b in balances.values()), default=0.0)
    validate_service_life(total_days, policy, lifetime_used)

    return {
        year: balances[year].after(days)
        for year, days in days_by_year.items()
        if year in balances
    }


def validate_ungoverned(request, history: Iterable) -> None:
    """
    Checks that still apply when no policy record governs the leave type.

    Only date order and overlap; no balance or policy enforcement.
    """
    validate_date_range(request, None)
    validate_overlap(request, history)
