"""
Pytest configuration and fixtures for backend tests.
"""

import os
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment variables before importing config
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["CORS_ORIGINS"] = '["http://localhost:3000"]'
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["AUTO_CREATE_DB"] = "false"
os.environ["SENTRY_DSN"] = ""

from authentication.auth import create_access_token  # noqa: E402
from models.identity import CallerIdentity  # noqa: E402
from repositories.database import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
import repositories.db_models as db_models  # noqa: E402

# Test database engine (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh in-memory database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session."""
    return db_session


@pytest.fixture(autouse=True)
def clear_category_cache():
    """The category cache is per process; each test gets its own database."""
    from services.category_service import CategoryService

    CategoryService.invalidate_cache()
    yield
    CategoryService.invalidate_cache()


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with overridden database dependency."""
    from main import app
    from helpers.rate_limiter import limiter

    # Reset rate limiter storage before each test to prevent rate limit errors
    limiter.reset()

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _create_user(db_session, username: str, display_name: str) -> db_models.User:
    user = db_models.User(username=username, display_name=display_name)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_user(db_session) -> db_models.User:
    """Create a test user (owner of the idea fixtures)."""
    return _create_user(db_session, "testuser", "Test User")


@pytest.fixture
def other_user(db_session) -> db_models.User:
    """Create another test user (for permission tests)."""
    return _create_user(db_session, "otheruser", "Other User")


@pytest.fixture
def third_user(db_session) -> db_models.User:
    """Create a third test user (for multi-voter tests)."""
    return _create_user(db_session, "thirduser", "Third User")


@pytest.fixture
def moderator_user(db_session) -> db_models.User:
    """Create the profile row of a moderator (the claim lives in the token)."""
    return _create_user(db_session, "moderator", "Moderator")


@pytest.fixture
def user_identity(test_user) -> CallerIdentity:
    return CallerIdentity(user_id=test_user.id)


@pytest.fixture
def other_identity(other_user) -> CallerIdentity:
    return CallerIdentity(user_id=other_user.id)


@pytest.fixture
def third_identity(third_user) -> CallerIdentity:
    return CallerIdentity(user_id=third_user.id)


@pytest.fixture
def moderator_identity(moderator_user) -> CallerIdentity:
    return CallerIdentity(user_id=moderator_user.id, is_moderator=True)


@pytest.fixture
def test_category(db_session) -> db_models.Category:
    """Create a test category."""
    category = db_models.Category(
        name="environment",
        display_name="Environment",
        description="Green spaces, waste and climate",
        icon="Leaf",
    )
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def second_category(db_session) -> db_models.Category:
    """Create a second test category."""
    category = db_models.Category(
        name="health",
        display_name="Health",
        description="Wellbeing, sport and care",
        icon="Heart",
    )
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def make_idea(db_session, test_user, test_category):
    """Factory fixture creating an idea row with explicit status and time."""

    def _make_idea(
        title: str = "Idea",
        description: str = "An idea description.",
        status: db_models.IdeaStatus = db_models.IdeaStatus.APPROVED,
        user: db_models.User | None = None,
        categories: list[db_models.Category] | None = None,
        created_at: datetime | None = None,
    ) -> db_models.Idea:
        idea = db_models.Idea(
            title=title,
            description=description,
            user_id=(user or test_user).id,
            status=status,
        )
        if created_at is not None:
            idea.created_at = created_at
        db_session.add(idea)
        db_session.flush()
        for category in categories if categories is not None else [test_category]:
            db_session.add(
                db_models.IdeaCategory(idea_id=idea.id, category_id=category.id)
            )
        db_session.commit()
        db_session.refresh(idea)
        return idea

    return _make_idea


@pytest.fixture
def test_idea(make_idea) -> db_models.Idea:
    """Create an approved test idea."""
    return make_idea(
        title="Test Idea",
        description="Plant more trees along the river path.",
        status=db_models.IdeaStatus.APPROVED,
    )


@pytest.fixture
def pending_idea(make_idea) -> db_models.Idea:
    """Create a pending test idea."""
    return make_idea(
        title="Pending Idea",
        description="A community garden behind the library.",
        status=db_models.IdeaStatus.PENDING,
    )


@pytest.fixture
def rejected_idea(make_idea) -> db_models.Idea:
    """Create a rejected test idea."""
    return make_idea(
        title="Rejected Idea",
        description="Pave over the park.",
        status=db_models.IdeaStatus.REJECTED,
    )


@pytest.fixture
def base_time() -> datetime:
    """A fixed naive UTC timestamp for ordering tests."""
    return datetime(2026, 1, 15, 12, 0, 0)


@pytest.fixture
def later(base_time):
    """Return base_time shifted by a number of minutes."""

    def _later(minutes: int) -> datetime:
        return base_time + timedelta(minutes=minutes)

    return _later


def _auth_header(user_id: int, is_moderator: bool = False) -> dict:
    token = create_access_token(user_id, is_moderator=is_moderator)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(test_user) -> dict:
    """Get authentication headers for test user."""
    return _auth_header(test_user.id)


@pytest.fixture
def other_auth_headers(other_user) -> dict:
    """Get authentication headers for the other user."""
    return _auth_header(other_user.id)


@pytest.fixture
def third_auth_headers(third_user) -> dict:
    """Get authentication headers for the third user."""
    return _auth_header(third_user.id)


@pytest.fixture
def moderator_auth_headers(moderator_user) -> dict:
    """Get authentication headers carrying the moderator claim."""
    return _auth_header(moderator_user.id, is_moderator=True)


@pytest.fixture
def expired_auth_headers(test_user) -> dict:
    token = create_access_token(test_user.id, expires_delta=timedelta(seconds=-10))
    return {"Authorization": f"Bearer {token}"}
