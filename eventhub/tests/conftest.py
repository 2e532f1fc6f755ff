import pytest
from fastapi.testclient import TestClient

from eventhub.database.db import Database
from eventhub.main import create_app


def _event_fields(**overrides) -> dict:
    fields = {
        "title": "PyCon Launch Party",
        "description": "An evening with the organizers.",
        "overview": "Talks, drinks and a look at the schedule.",
        "image": "https://images.example.com/launch.png",
        "venue": "Main Hall",
        "location": "Berlin, Germany",
        "date": "2025-03-15",
        "time": "06:30 PM",
        "mode": "hybrid",
        "audience": "Developers",
        "agenda": ["Doors open", "Keynote", "Networking"],
        "organizer": "PyCon Team",
        "tags": ["python", "community"],
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def event_fields():
    """Factory for a complete set of valid event fields."""
    return _event_fields


@pytest.fixture
def database():
    """In-memory SQLite store, one per test."""
    db = Database("sqlite:///:memory:")
    db.create_all()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(database):
    app = create_app(database=database)
    with TestClient(app) as test_client:
        yield test_client
