import os
from datetime import datetime

# Keep the app's own engine off disk; tests bind their own engine below
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from poolplay.database import get_session  # noqa: E402
from poolplay.main import app  # noqa: E402
from poolplay.models import CheckInStatus, Match, Team, Tournament  # noqa: E402,F401

FIRST_GAME_TIME = datetime(2026, 6, 6, 9, 0)


# ============================================================================
# Test Database Setup
# ============================================================================
# In-memory SQLite with StaticPool so every session in a test sees the same
# database. A fresh engine per test keeps tests independent.


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(engine):
    """Test client whose requests run against the test engine"""

    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_tournament(session: Session):
    def _make(**overrides) -> Tournament:
        values = dict(
            name="Summer Sand Classic",
            location="Main Beach",
            first_game_time=FIRST_GAME_TIME,
            estimated_game_duration=20,
            warm_up_duration=7,
        )
        values.update(overrides)
        tournament = Tournament(**values)
        session.add(tournament)
        session.commit()
        session.refresh(tournament)
        return tournament

    return _make


@pytest.fixture
def make_teams(session: Session):
    def _make(tournament_id: int, count: int, prefix: str = "Team", checked_in: bool = True, **fields):
        status = CheckInStatus.checked_in if checked_in else CheckInStatus.registered
        teams = [
            Team(tournament_id=tournament_id, name=f"{prefix} {i + 1}", check_in_status=status, **fields)
            for i in range(count)
        ]
        for team in teams:
            session.add(team)
        session.commit()
        for team in teams:
            session.refresh(team)
        return teams

    return _make
