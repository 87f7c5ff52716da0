"""
Database configuration and connection
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from gamezone.config import DATABASE_URL, SQL_ECHO


def _connect_args(url: str) -> dict:
    # SQLite needs this when the session is shared with the request thread
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


# Create the database engine
engine = create_engine(
    DATABASE_URL,
    connect_args=_connect_args(DATABASE_URL),
    echo=SQL_ECHO
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Declarative base for all models
Base = declarative_base()


def get_db():
    """Yield a database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
