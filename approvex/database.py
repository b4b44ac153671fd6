from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from approvex.core.config import settings

DATABASE_URL = settings.database_url

if DATABASE_URL.startswith("postgresql"):
    engine = create_engine(DATABASE_URL)
else:
    # SQLite configuration for local development/testing
    engine = create_engine(
        DATABASE_URL, connect_args={"check_same_thread": False}
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """
    Session Provider: Provides a database session per request.
    Transaction management is handled explicitly in the Service Layer.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    """
    Registers all domain models and initializes the database schema.
    Called during the application startup lifespan.
    """
    from approvex.models import (  # noqa: F401
        user, leave_request, leave_balance, expense_claim,
        asset_request, activity, notification
    )
    Base.metadata.create_all(bind=engine)
