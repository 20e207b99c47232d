# tests/conftest.py

import pytest
from starlette.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from eventhub.main import app
from eventhub.api import deps
from eventhub.core.limiter import limiter
from eventhub.db.base_class import Base
import eventhub.models  # noqa: F401


# --- Test Database Setup ---
# One in-memory SQLite database per test; StaticPool keeps the single
# connection alive so every session sees the same tables.
@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


# --- Test Client Fixtures ---
@pytest.fixture(scope="function")
def client(db):
    """
    Provides a TestClient wired to the per-test SQLite database.
    Kafka publishing stays disabled (KAFKA_ENABLED defaults to False).
    """

    def override_get_db():
        yield db

    app.dependency_overrides[deps.get_db] = override_get_db
    limiter.reset()

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
