"""
Dependencies for FastAPI endpoints
"""
from typing import Generator
from fastapi import Header, HTTPException, status
from app.db.session import SessionLocal


def get_db() -> Generator:
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_actor_id(x_actor_id: str = Header(..., alias="X-Actor-Id")) -> str:
    """
    Identity of the caller, recorded as submitter or decider.

    Authentication happens upstream; this service only records who acted.
    """
    actor = x_actor_id.strip()
    if not actor:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Actor-Id header must not be empty"
        )
    return actor
