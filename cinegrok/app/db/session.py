"""
Database engine and session factory
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from cinegrok.app.core.config import settings

_is_sqlite = settings.database_url.startswith("sqlite")

engine = create_engine(
    settings.database_url,
    echo=False,
    # SQLite connections are shared with background tasks running on other threads
    connect_args={"check_same_thread": False} if _is_sqlite else {},
    pool_pre_ping=not _is_sqlite,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
