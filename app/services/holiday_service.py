"""
Holiday calendar service

Only the dates matter to the ledger: the validator's prefix/suffix rule asks
whether a leave range ends the day before, or starts the day after, an active
holiday.
"""
from datetime import date, timedelta
from typing import List, Optional, Set
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from app.models.holiday import Holiday
from app.services.audit_service import log_audit
from app.utils.datetime_utils import now_utc


def create_holiday(
    db: Session,
    holiday_date: date,
    name: str,
    active: bool = True,
    actor_id: Optional[str] = None
) -> Holiday:
    """
    Add one dated holiday to the calendar.

    Raises:
        HTTPException: 409 if the date already has a holiday
    """
    if db.query(Holiday.id).filter(Holiday.date == holiday_date).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Holiday already exists on {holiday_date.isoformat()}"
        )

    created = now_utc()
    holiday = Holiday(
        year=holiday_date.year,
        date=holiday_date,
        name=name,
        active=active,
        created_at=created,
        updated_at=created,
    )
    db.add(holiday)
    db.commit()
    db.refresh(holiday)

    if actor_id:
        log_audit(
            db=db,
            actor_id=actor_id,
            action="HOLIDAY_CREATE",
            entity_type="holidays",
            entity_id=holiday.id,
            meta={"date": holiday_date, "name": name, "active": active}
        )
    return holiday


def list_holidays(db: Session, year: Optional[int] = None, active_only: bool = False) -> List[Holiday]:
    query = db.query(Holiday)
    if year is not None:
        query = query.filter(Holiday.year == year)
    if active_only:
        query = query.filter(Holiday.active == True)
    return query.order_by(Holiday.date).all()


def get_holiday_dates(db: Session, from_date: date, to_date: date) -> Set[date]:
    """Active holiday dates in [from_date - 1, to_date + 1]"""
    window_start = from_date - timedelta(days=1)
    window_end = max(from_date, to_date) + timedelta(days=1)
    return {
        holiday_date
        for (holiday_date,) in db.query(Holiday.date).filter(
            Holiday.active == True,
            Holiday.date.between(window_start, window_end)
        )
    }
