from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from db import get_session, init_db
from main import app
from models.trips import TripCreate
from services.store import EntityStore


def make_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    return engine


@pytest.fixture
def engine():
    engine = make_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def empty_session():
    other = make_engine()
    with Session(other) as session:
        yield session
    other.dispose()


@pytest.fixture
def store(session):
    return EntityStore(session)


@pytest.fixture
def trip(store):
    return store.create_trip(TripCreate(
        destination="Japan",
        start_date=date(2025, 4, 1),
        end_date=date(2025, 4, 3),
        tags=["Food", "History"],
    ))


@pytest.fixture
def client(engine):
    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    yield TestClient(app)
    app.dependency_overrides.clear()
