"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the
real one. Tables are created before each test and dropped
after it, so every test starts empty.
"""

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from family_ledger.identity import Identity
from family_ledger.main import app
from family_ledger.models import Base
from family_ledger.models.base import get_db
from family_ledger.schemas.ledger import LedgerCreate, MemberAdd
from family_ledger.services.access_service import AccessGate
from family_ledger.services.ledger_service import LedgerService


TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def session_factory():
    """
    Open extra sessions on the test database.

    Each one has its own connection, like two concurrent requests.
    """
    sessions = []

    def open_session():
        session = TestSessionLocal()
        sessions.append(session)
        return session

    yield open_session
    for session in sessions:
        session.rollback()
        session.close()


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    The get_db dependency is overridden so the app uses the
    test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# --- Identity and ledger fixtures ---

def _token(sub, email=None):
    claims = {"sub": sub}
    if email:
        claims["email"] = email
    return jwt.encode(claims, "test-secret", algorithm="HS256")


@pytest.fixture
def auth_headers():
    """
    Build request headers for a caller.

    The token is a JWT the default resolver reads without
    checking its signature.
    """
    def build(sub="user-1", email="owner@test.com", ledger_id=None):
        headers = {"Authorization": f"Bearer {_token(sub, email)}"}
        if ledger_id is not None:
            headers["X-Ledger-Id"] = str(ledger_id)
        return headers
    return build


@pytest.fixture
def make_user(db_session):
    """Provision a user the same way the access gate does."""
    def make(sub="user-1", email="owner@test.com"):
        user = AccessGate(db_session).identify(
            Identity(external_id=sub, email=email)
        )
        db_session.commit()
        return user
    return make


@pytest.fixture
def owner(make_user):
    return make_user()


@pytest.fixture
def scope(db_session, owner):
    """Owner scope on a fresh ledger without a password."""
    ledger = LedgerService(db_session).create_ledger(
        owner, LedgerCreate(name="Household")
    )
    db_session.commit()
    return AccessGate(db_session).scope(owner, ledger.id)


@pytest.fixture
def make_member(db_session, make_user, owner, scope):
    """Add another user to the `scope` ledger with the given role."""
    def make(sub, email, role):
        user = make_user(sub, email)
        LedgerService(db_session).add_member(
            scope.ledger_id, owner, MemberAdd(email=email, role=role)
        )
        db_session.commit()
        return AccessGate(db_session).scope(user, scope.ledger_id)
    return make


@pytest.fixture
def ledger_headers(client, auth_headers):
    """Create a ledger over HTTP; return the owner's headers for it."""
    response = client.post("/ledgers", json={"name": "Household"}, headers=auth_headers())
    assert response.status_code == 201
    return auth_headers(ledger_id=response.json()["id"])
