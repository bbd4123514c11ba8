"""Shared fixtures: in-memory database, API client and trade builders."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from tradejournal.database import create_db_and_tables, get_session
from tradejournal.main import app
from tradejournal.services.ticker_rollup import TickerRollup
from tradejournal.services.trade_metrics import derive_trade_fields

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    app.state.ticker_rollup = TickerRollup(engine)
    # No context manager: the lifespan would touch the configured database
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_trade():
    """Build a trade dict with every derived field populated."""

    def _make(
        entry_price=100.0,
        shares=10,
        initial_stop_loss=95.0,
        exits=None,
        direction="long",
        entry_date="2024-01-01T00:00:00+00:00",
        target_position_size=None,
        **extra,
    ) -> dict:
        data = {
            "entry_price": entry_price,
            "shares": shares,
            "initial_stop_loss": initial_stop_loss,
            "exits": exits or [],
            "direction": direction,
            "entry_date": entry_date,
            "target_position_size": target_position_size,
            **extra,
        }
        return derive_trade_fields(data, now=NOW)

    return _make
