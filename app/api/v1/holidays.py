"""
Holiday calendar endpoints
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_actor_id
from app.schemas.holiday import HolidayCreate, HolidayOut
from app.services.holiday_service import create_holiday, list_holidays

router = APIRouter()


@router.post("", response_model=HolidayOut, status_code=201)
async def create_holiday_endpoint(
    holiday_data: HolidayCreate,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_actor_id)
):
    """Create a new holiday"""
    return create_holiday(
        db=db,
        holiday_date=holiday_data.date,
        name=holiday_data.name,
        active=holiday_data.active,
        actor_id=actor_id
    )


@router.get("", response_model=List[HolidayOut])
async def list_holidays_endpoint(
    year: Optional[int] = Query(None, description="Filter by year"),
    active_only: bool = Query(False, description="Return only active holidays"),
    db: Session = Depends(get_db)
):
    """List holidays"""
    return list_holidays(db, year=year, active_only=active_only)
