import pytest

from campus_points.models import TransactionType
from campus_points.services import ledger_service, redemption_service, transaction_service
from campus_points.services.exceptions import (
    AlreadyProcessedError,
    InsufficientFundsError,
    NotFoundError,
    UnverifiedAccountError,
    ValidationError,
    WrongTypeError,
)


def test_request_creates_pending_entry_and_holds_points(db_session, make_account):
    member = make_account(100)

    transaction = redemption_service.request_redemption(
        db_session, account_id=member.id, amount=40, remark="coffee"
    )
    db_session.commit()

    assert transaction.type == TransactionType.REDEMPTION
    assert transaction.amount == -40
    assert transaction.redeemed is None
    assert transaction.related_id is None
    assert transaction.created_by == member.utorid
    assert ledger_service.balance(db_session, member.id) == 60
    assert ledger_service.ledger_balance(db_session, member.id) == 60


def test_request_requires_verified_account(db_session, make_account):
    member = make_account(100, verified=False)

    with pytest.raises(UnverifiedAccountError):
        redemption_service.request_redemption(db_session, account_id=member.id, amount=10)


def test_request_requires_sufficient_balance(db_session, make_account):
    member = make_account(30)

    with pytest.raises(InsufficientFundsError):
        redemption_service.request_redemption(db_session, account_id=member.id, amount=31)


@pytest.mark.parametrize("amount", [0, -5, True])
def test_request_rejects_bad_amounts(db_session, make_account, amount):
    member = make_account(30)

    with pytest.raises(ValidationError):
        redemption_service.request_redemption(db_session, account_id=member.id, amount=amount)


def test_process_completes_redemption_once(db_session, make_account):
    member = make_account(100)
    cashier = make_account(role="cashier")
    pending = redemption_service.request_redemption(db_session, account_id=member.id, amount=40)
    db_session.commit()

    processed = redemption_service.process_redemption(
        db_session, transaction_id=pending.id, processor_id=cashier.id
    )
    db_session.commit()

    assert processed.redeemed == 40
    assert processed.related_id == cashier.id
    assert processed.processed

    with pytest.raises(AlreadyProcessedError) as excinfo:
        redemption_service.process_redemption(
            db_session, transaction_id=pending.id, processor_id=cashier.id
        )
    db_session.rollback()

    assert excinfo.value.transaction.id == pending.id
    assert excinfo.value.transaction.redeemed == 40
    assert ledger_service.balance(db_session, member.id) == 60


def test_process_rejects_other_transaction_types(db_session, make_account):
    member = make_account(0)
    cashier = make_account(role="cashier")
    purchase = transaction_service.create_purchase(db_session, account_id=member.id, spent=5).transaction
    db_session.commit()

    with pytest.raises(WrongTypeError):
        redemption_service.process_redemption(
            db_session, transaction_id=purchase.id, processor_id=cashier.id
        )


def test_process_unknown_transaction(db_session, make_account):
    cashier = make_account(role="cashier")

    with pytest.raises(NotFoundError):
        redemption_service.process_redemption(db_session, transaction_id=999, processor_id=cashier.id)


def test_pending_list_excludes_processed(db_session, make_account):
    member = make_account(100)
    cashier = make_account(role="cashier")
    first = redemption_service.request_redemption(db_session, account_id=member.id, amount=10)
    second = redemption_service.request_redemption(db_session, account_id=member.id, amount=20)
    redemption_service.process_redemption(db_session, transaction_id=first.id, processor_id=cashier.id)
    db_session.commit()

    pending = redemption_service.list_pending_redemptions(db_session, account_id=member.id)

    assert [t.id for t in pending] == [second.id]
