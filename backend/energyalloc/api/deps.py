from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from energyalloc.core.config import Settings, get_settings
from energyalloc.db.session import SessionLocal
from energyalloc.services.store import AllocationStore, SqlAllocationStore


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_allocation_store(db: Session = Depends(get_db)) -> AllocationStore:
    return SqlAllocationStore(db)


def get_app_settings() -> Settings:
    return get_settings()
