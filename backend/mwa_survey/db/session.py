from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from mwa_survey.core.config import DATABASE_URL
from mwa_survey.db.base import Base

# SQLite connections are handed across the server's worker threads
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None) -> None:
    # imported for its side effect of registering the tables on Base
    from mwa_survey.db import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
