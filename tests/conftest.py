import pytest
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RESEND_API_KEY"] = ""
os.environ["OPENROUTER_API_KEY"] = ""
os.environ["INTEGRATION_RETRY_WAIT"] = "0"

from approvex.database import Base, get_db
from approvex.main import app
from approvex.models.user import User, UserRole
from approvex.routers.auth_deps import get_transition_effects
from approvex.services.effects import TransitionEffects
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def db_session():
    """Get a clean database session for each test function with rollback safety."""
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()

def _make_user(db_session, email, role, full_name):
    user = User(email=email, full_name=full_name, role=role, is_active=True)
    db_session.add(user)
    db_session.commit()
    return user

@pytest.fixture(scope="function")
def manager(db_session):
    return _make_user(db_session, "manager@approvex.test", UserRole.MANAGER, "Morgan Manager")

@pytest.fixture(scope="function")
def employee(db_session):
    return _make_user(db_session, "emma@approvex.test", UserRole.EMPLOYEE, "Emma Employee")

@pytest.fixture(scope="function")
def other_employee(db_session):
    return _make_user(db_session, "oliver@approvex.test", UserRole.EMPLOYEE, "Oliver Other")

@pytest.fixture(scope="function")
def auth_headers():
    """Helper fixture building the forwarded identity header for a user."""
    def _auth_headers(user):
        return {"X-User-Id": str(user.id)}
    return _auth_headers

class RecordingCollaborators:
    """Stand-in email/LLM collaborators that record their calls."""

    def __init__(self):
        self.emails = []
        self.summaries = []
        self.fail_email = False
        self.fail_summary = False

    def mailer(self, **kwargs):
        if self.fail_email:
            raise RuntimeError("email provider unreachable")
        self.emails.append(kwargs)
        return "msg_123"

    def summarizer(self, **kwargs):
        if self.fail_summary:
            raise RuntimeError("llm unreachable")
        self.summaries.append(kwargs)
        return f"The {kwargs['request_type']} request was {kwargs['status']} based on policy review."

@pytest.fixture(scope="function")
def collaborators():
    return RecordingCollaborators()

@pytest.fixture(scope="function")
def effects(db_session, collaborators):
    return TransitionEffects(db_session, summarizer=collaborators.summarizer, mailer=collaborators.mailer)

@pytest.fixture(scope="function")
def client(db_session, collaborators):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    def override_effects():
        return TransitionEffects(db_session, summarizer=collaborators.summarizer, mailer=collaborators.mailer)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_transition_effects] = override_effects
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
