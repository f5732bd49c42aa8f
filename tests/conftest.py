"""Shared fixtures: an in-memory database per test and an API client bound to it."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from carrier.db import Base, Challenge, ChallengeParticipant, build_engine, get_db
from carrier.main import app


class FakeClock:
    """Deterministic clock; every call is one second after the previous one."""

    def __init__(self, start=datetime(2026, 1, 1, 12, 0, 0)):
        self.now = start

    def __call__(self):
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


@pytest.fixture
def db_engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(db_engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_challenge(db):
    def _make(challenge_type="collection", configuration=None, is_active=True, name="Test Challenge"):
        challenge = Challenge(
            name=name,
            description="",
            category="award",
            challenge_type=challenge_type,
            configuration=configuration if configuration is not None else {},
            is_active=is_active,
        )
        db.add(challenge)
        db.commit()
        db.refresh(challenge)
        return challenge
    return _make


@pytest.fixture
def join(db):
    def _join(challenge_id, *callsigns):
        for callsign in callsigns:
            db.add(ChallengeParticipant(challenge_id=challenge_id, callsign=callsign))
        db.commit()
    return _join


@pytest.fixture
def client(db_engine):
    testing_session = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def override_get_db():
        session = testing_session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
