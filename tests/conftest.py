import os
from datetime import timedelta
from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("CAMPUS_POINTS_DATABASE_URL", "sqlite://")

from campus_points.core.database import Base, get_db
from campus_points.core.rate_limiter import set_rate_limiter
from campus_points.models import Account, Event, EventGuest, Promotion, PromotionType
from campus_points.utils.datetime import utcnow


@pytest.fixture()
def engine():
    """Fresh in-memory database for every test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(autouse=True)
def fresh_rate_limiter():
    set_rate_limiter(None)
    yield
    set_rate_limiter(None)


@pytest.fixture()
def client(db_session):
    from fastapi.testclient import TestClient

    from campus_points.main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def make_account(db_session):
    counter = {"n": 0}

    def _make(points: int = 0, *, verified: bool = True, suspicious: bool = False, role: str = "regular") -> Account:
        counter["n"] += 1
        account = Account(
            utorid=f"member{counter['n']:03d}",
            name=f"Member {counter['n']}",
            role=role,
            points=0,
            verified=verified,
            suspicious=suspicious,
        )
        db_session.add(account)
        db_session.flush()
        if points:
            # Seed through the ledger so the balance invariant holds from the start.
            from campus_points.models import Transaction, TransactionType
            from campus_points.services import ledger_service

            ledger_service.record(
                db_session,
                Transaction(account_id=account.id, type=TransactionType.ADJUSTMENT, amount=points, remark="seed"),
            )
        db_session.commit()
        return account

    return _make


@pytest.fixture()
def make_promotion(db_session):
    def _make(
        type: PromotionType = PromotionType.AUTOMATIC,
        *,
        rate=None,
        points=None,
        min_spending=None,
        starts_in: timedelta = timedelta(days=-1),
        lasts: timedelta = timedelta(days=7),
    ) -> Promotion:
        start = utcnow() + starts_in
        promotion = Promotion(
            name=f"{type.value} promo",
            type=type,
            start_time=start,
            end_time=start + lasts,
            rate=rate,
            points=points,
            min_spending=min_spending,
        )
        db_session.add(promotion)
        db_session.commit()
        return promotion

    return _make


@pytest.fixture()
def make_event(db_session):
    def _make(points: int = 100, guests=()) -> Event:
        event = Event(name="Hackathon", points=points, points_awarded=0, points_remain=points)
        db_session.add(event)
        db_session.flush()
        for account in guests:
            db_session.add(EventGuest(event_id=event.id, account_id=account.id))
        db_session.commit()
        return event

    return _make
