import pytest
from sqlalchemy import func, select

from campus_points.models import EventGuest, Transaction, TransactionType
from campus_points.services import event_service, ledger_service
from campus_points.services.exceptions import (
    BudgetExceededError,
    NotAGuestError,
    NotFoundError,
    ValidationError,
)


def _event_transactions(session, event_id):
    stmt = select(func.count(Transaction.id)).where(
        Transaction.type == TransactionType.EVENT, Transaction.related_id == event_id
    )
    return session.execute(stmt).scalar_one()


def test_targeted_award(db_session, make_account, make_event):
    guest = make_account(5)
    event = make_event(points=100, guests=[guest])

    transaction = event_service.award_event_points(
        db_session, event_id=event.id, amount=30, account_id=guest.id, created_by="organizer"
    )
    db_session.commit()

    assert transaction.type == TransactionType.EVENT
    assert transaction.related_id == event.id
    assert ledger_service.balance(db_session, guest.id) == 35
    db_session.refresh(event)
    assert (event.points_awarded, event.points_remain) == (30, 70)


def test_targeted_award_requires_guest(db_session, make_account, make_event):
    guest = make_account()
    stranger = make_account()
    event = make_event(guests=[guest])

    with pytest.raises(NotAGuestError):
        event_service.award_event_points(db_session, event_id=event.id, amount=5, account_id=stranger.id)


def test_targeted_award_respects_budget(db_session, make_account, make_event):
    guest = make_account()
    event = make_event(points=30, guests=[guest])

    with pytest.raises(BudgetExceededError):
        event_service.award_event_points(db_session, event_id=event.id, amount=40, account_id=guest.id)
    db_session.rollback()

    assert ledger_service.balance(db_session, guest.id) == 0


def test_broadcast_award_to_every_guest(db_session, make_account, make_event):
    guests = [make_account() for _ in range(3)]
    outsider = make_account()
    event = make_event(points=100, guests=guests)

    transactions = event_service.award_event_points(db_session, event_id=event.id, amount=25)
    db_session.commit()

    assert sorted(t.account_id for t in transactions) == sorted(g.id for g in guests)
    assert all(ledger_service.balance(db_session, g.id) == 25 for g in guests)
    assert ledger_service.balance(db_session, outsider.id) == 0
    db_session.refresh(event)
    assert (event.points_awarded, event.points_remain) == (75, 25)


def test_broadcast_over_budget_changes_nothing(db_session, make_account, make_event):
    guests = [make_account(1) for _ in range(3)]
    event = make_event(points=100, guests=guests)

    with pytest.raises(BudgetExceededError):
        event_service.award_event_points(db_session, event_id=event.id, amount=40)
    db_session.rollback()

    assert all(ledger_service.balance(db_session, g.id) == 1 for g in guests)
    assert _event_transactions(db_session, event.id) == 0
    db_session.refresh(event)
    assert (event.points_awarded, event.points_remain) == (0, 100)


def test_broadcast_without_guests_is_noop(db_session, make_event):
    event = make_event(points=10)

    assert event_service.award_event_points(db_session, event_id=event.id, amount=50) == []
    db_session.refresh(event)
    assert event.points_remain == 10


def test_award_unknown_event(db_session, make_account):
    guest = make_account()

    with pytest.raises(NotFoundError):
        event_service.award_event_points(db_session, event_id=404, amount=5, account_id=guest.id)
    with pytest.raises(NotFoundError):
        event_service.award_event_points(db_session, event_id=404, amount=5)


def test_award_rejects_non_positive_amount(db_session, make_event):
    event = make_event()

    with pytest.raises(ValidationError):
        event_service.award_event_points(db_session, event_id=event.id, amount=0)


def test_budget_never_goes_negative_across_awards(db_session, make_account, make_event):
    guest = make_account()
    event = make_event(points=50, guests=[guest])

    for amount in (20, 20, 20):
        try:
            event_service.award_event_points(db_session, event_id=event.id, amount=amount, account_id=guest.id)
            db_session.commit()
        except BudgetExceededError:
            db_session.rollback()
        db_session.refresh(event)
        assert event.points_remain >= 0

    assert event.points_remain == 10
    assert ledger_service.balance(db_session, guest.id) == 40


def test_create_and_resize_budget(db_session, make_account):
    guest = make_account()
    event = event_service.create_event(db_session, name="Orientation", points=100)
    db_session.commit()
    assert (event.points, event.points_awarded, event.points_remain) == (100, 0, 100)

    db_session.add(EventGuest(event_id=event.id, account_id=guest.id))
    db_session.commit()
    event_service.award_event_points(db_session, event_id=event.id, amount=60, account_id=guest.id)
    db_session.commit()

    with pytest.raises(BudgetExceededError):
        event_service.update_event_budget(db_session, event_id=event.id, points=50)
    db_session.rollback()

    resized = event_service.update_event_budget(db_session, event_id=event.id, points=150)
    db_session.commit()
    assert (resized.points, resized.points_awarded, resized.points_remain) == (150, 60, 90)

    with pytest.raises(ValidationError):
        event_service.create_event(db_session, name="Empty", points=0)
