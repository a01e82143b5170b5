import pytest
from sqlalchemy import func, select, update

from campus_points.models import Account, Transaction, TransactionPromotion, TransactionType
from campus_points.services import ledger_service
from campus_points.services.exceptions import InsufficientFundsError, NotFoundError, ValidationError


def _count_transactions(session, account_id):
    stmt = select(func.count(Transaction.id)).where(Transaction.account_id == account_id)
    return session.execute(stmt).scalar_one()


def test_record_applies_amount_to_balance(db_session, make_account):
    account = make_account(10)

    entry = ledger_service.record(
        db_session,
        Transaction(account_id=account.id, type=TransactionType.EVENT, amount=25, related_id=1),
    )
    db_session.commit()

    assert entry.id is not None
    assert ledger_service.balance(db_session, account.id) == 35
    assert ledger_service.ledger_balance(db_session, account.id) == 35


def test_record_rejects_negative_balance_without_writing(db_session, make_account):
    account = make_account(10)
    before = _count_transactions(db_session, account.id)

    with pytest.raises(InsufficientFundsError):
        ledger_service.record(
            db_session,
            Transaction(account_id=account.id, type=TransactionType.ADJUSTMENT, amount=-11),
        )
    db_session.rollback()

    assert ledger_service.balance(db_session, account.id) == 10
    assert _count_transactions(db_session, account.id) == before


def test_record_rejects_non_integer_amount(db_session, make_account):
    account = make_account()

    with pytest.raises(ValidationError):
        ledger_service.record(
            db_session,
            Transaction(account_id=account.id, type=TransactionType.ADJUSTMENT, amount=1.5),
        )


def test_suspicious_entry_is_stored_but_frozen(db_session, make_account):
    account = make_account(5)

    entry = ledger_service.record(
        db_session,
        Transaction(account_id=account.id, type=TransactionType.PURCHASE, amount=40, suspicious=True),
    )
    db_session.commit()

    assert entry.amount == 40
    assert ledger_service.balance(db_session, account.id) == 5
    assert ledger_service.ledger_balance(db_session, account.id) == 5


def test_lock_accounts_reports_missing_account(db_session, make_account):
    account = make_account()

    with pytest.raises(NotFoundError):
        ledger_service.lock_accounts(db_session, [account.id, account.id + 100])


def test_audit_balances_detects_drift(db_session, make_account):
    healthy = make_account(20)
    drifting = make_account(30)
    db_session.execute(update(Account).where(Account.id == drifting.id).values(points=999))
    db_session.commit()

    drift = ledger_service.audit_balances(db_session)

    assert drift == [(drifting.id, 999, 30)]
    assert healthy.id not in [account_id for account_id, _, _ in drift]


def test_list_transactions_filters(db_session, make_account):
    account = make_account(50)
    other = make_account(5)
    ledger_service.record(
        db_session,
        Transaction(
            account_id=account.id,
            type=TransactionType.PURCHASE,
            amount=120,
            promotion_ids=[7, 9],
        ),
    )
    db_session.commit()

    purchases = ledger_service.list_transactions(db_session, type=TransactionType.PURCHASE)
    assert [t.amount for t in purchases] == [120]

    by_promotion = ledger_service.list_transactions(db_session, promotion_id=9)
    assert [t.account_id for t in by_promotion] == [account.id]

    large = ledger_service.list_transactions(db_session, amount=50, operator="gte")
    assert sorted(t.amount for t in large) == [50, 120]

    mine = ledger_service.list_transactions(db_session, account_id=other.id)
    assert [t.amount for t in mine] == [5]

    with pytest.raises(ValidationError):
        ledger_service.list_transactions(db_session, amount=5, operator="eq")


def test_promotion_filter_paginates_in_sql(db_session, make_account):
    account = make_account()
    for amount, promotions in ((10, [3]), (20, [4]), (30, [3, 3]), (40, [3, 5])):
        ledger_service.record(
            db_session,
            Transaction(
                account_id=account.id,
                type=TransactionType.PURCHASE,
                amount=amount,
                promotion_ids=promotions,
            ),
        )
    db_session.commit()

    first_page = ledger_service.list_transactions(db_session, promotion_id=3, limit=2)
    second_page = ledger_service.list_transactions(db_session, promotion_id=3, limit=2, offset=2)

    assert [t.amount for t in first_page] == [40, 30]
    assert [t.amount for t in second_page] == [10]
    tagged = db_session.execute(
        select(func.count()).select_from(TransactionPromotion).where(TransactionPromotion.promotion_id == 3)
    ).scalar_one()
    assert tagged == 3
