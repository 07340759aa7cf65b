from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

from energyalloc.core.config import get_settings


settings = get_settings()
database_url = make_url(settings.database_url)

if database_url.get_backend_name() == "sqlite":
    if database_url.database and database_url.database != ":memory:":
        Path(database_url.database).parent.mkdir(parents=True, exist_ok=True)
    # FastAPI runs sync routes in a threadpool.
    engine = create_engine(
        database_url,
        future=True,
        connect_args={"check_same_thread": False},
    )
else:
    engine = create_engine(
        database_url,
        future=True,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=5,
        pool_recycle=300,
    )

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)
