from datetime import date
from unittest.mock import MagicMock

import pytest

from core.database import DatabaseManager
from core.exceptions import (
    PersistenceFailureException,
    ServiceClosedException,
    UserNotFoundException,
)
from core.models import Book, Loan, User
from services.user_service import UserService


def _fields(user: User):
    return (user.id, user.name, user.email, user.registration_date)


def test_insert_assigns_distinct_ids(service, make_user):
    a = service.insert_user(make_user("Alice", "alice@x.com"))
    b = service.insert_user(make_user("Bob", "bob@x.com"))

    assert a.id is not None
    assert b.id is not None
    assert a.id != b.id


def test_get_after_insert_returns_equal_record(service, make_user):
    user = service.insert_user(make_user())

    found = service.get_user(user.id)

    assert found is not None
    assert _fields(found) == (user.id, "Alice", "alice@x.com", date(2024, 1, 1))


def test_get_missing_returns_none(service):
    assert service.get_user(12345) is None


def test_require_user_missing_raises(service):
    with pytest.raises(UserNotFoundException) as exc_info:
        service.require_user(7)
    assert exc_info.value.user_id == 7


def test_update_changes_scalar_fields_only(service, make_user):
    user = service.insert_user(make_user())
    original_id = user.id

    updated = service.update_user(
        user.id, make_user("Carol", "carol@x.com", date(2024, 2, 1))
    )

    assert updated is True
    found = service.get_user(original_id)
    assert _fields(found) == (original_id, "Carol", "carol@x.com", date(2024, 2, 1))


def test_update_missing_id_is_noop(service, make_user):
    existing = service.insert_user(make_user())

    updated = service.update_user(existing.id + 100, make_user("Ghost", "ghost@x.com"))

    assert updated is False
    users = service.list_users()
    assert len(users) == 1
    assert _fields(users[0]) == _fields(existing)


def test_delete_existing_removes_record(service, make_user):
    user = service.insert_user(make_user())

    assert service.delete_user(user.id) is True

    assert service.get_user(user.id) is None
    assert user.id not in [u.id for u in service.list_users()]


def test_delete_missing_is_noop(service, make_user):
    service.insert_user(make_user())

    assert service.delete_user(999) is False
    assert len(service.list_users()) == 1


def test_list_after_deleting_middle_record(service, make_user):
    r1 = service.insert_user(make_user("R1", "r1@x.com"))
    r2 = service.insert_user(make_user("R2", "r2@x.com"))
    r3 = service.insert_user(make_user("R3", "r3@x.com"))

    service.delete_user(r2.id)

    assert {u.id for u in service.list_users()} == {r1.id, r3.id}


def test_list_empty(service):
    assert service.list_users() == []


def test_example_scenario(service, make_user):
    a = service.insert_user(make_user("Alice", "alice@x.com", date(2024, 1, 1)))
    b = service.insert_user(make_user("Bob", "bob@x.com", date(2024, 1, 15)))
    assert (a.id, b.id) == (1, 2)

    service.update_user(1, make_user("Carol", "carol@x.com", date(2024, 2, 1)))
    found = service.get_user(1)
    assert _fields(found) == (1, "Carol", "carol@x.com", date(2024, 2, 1))

    service.delete_user(1)
    remaining = service.list_users()
    assert [_fields(u) for u in remaining] == [(2, "Bob", "bob@x.com", date(2024, 1, 15))]


# ========== failures ==========


def test_insert_failure_rolls_back(service, make_user, storage_failure):
    service.insert_user(make_user("Alice", "alice@x.com"))
    storage_failure.enable()

    with pytest.raises(PersistenceFailureException) as exc_info:
        service.insert_user(make_user("Bob", "bob@x.com"))

    assert exc_info.value.operation == "insert"
    assert isinstance(exc_info.value.cause, RuntimeError)
    storage_failure.disable()
    assert [u.email for u in service.list_users()] == ["alice@x.com"]


def test_insert_failure_after_sql_sent_clears_id(service, make_user, storage_failure):
    user = make_user()
    storage_failure.enable("after_flush")

    with pytest.raises(PersistenceFailureException):
        service.insert_user(user)

    assert user.id is None
    storage_failure.disable()
    assert service.list_users() == []

    service.insert_user(user)
    assert user.id is not None
    assert [u.id for u in service.list_users()] == [user.id]


def test_update_failure_rolls_back(service, make_user, storage_failure):
    user = service.insert_user(make_user())
    storage_failure.enable()

    with pytest.raises(PersistenceFailureException):
        service.update_user(user.id, make_user("Carol", "carol@x.com", date(2024, 2, 1)))

    storage_failure.disable()
    assert _fields(service.get_user(user.id)) == _fields(user)


def test_delete_failure_rolls_back(service, make_user, storage_failure):
    user = service.insert_user(make_user())
    storage_failure.enable()

    with pytest.raises(PersistenceFailureException) as exc_info:
        service.delete_user(user.id)

    assert exc_info.value.operation == "delete"
    storage_failure.disable()
    assert service.get_user(user.id) is not None


def test_duplicate_email_rejected_on_insert(service, make_user):
    service.insert_user(make_user("Alice", "same@x.com"))

    with pytest.raises(PersistenceFailureException):
        service.insert_user(make_user("Other", "same@x.com"))

    assert len(service.list_users()) == 1


def test_duplicate_email_rejected_on_update(service, make_user):
    alice = service.insert_user(make_user("Alice", "alice@x.com"))
    bob = service.insert_user(make_user("Bob", "bob@x.com"))

    with pytest.raises(PersistenceFailureException):
        service.update_user(bob.id, make_user("Bob", "alice@x.com"))

    assert service.get_user(bob.id).email == "bob@x.com"
    assert service.get_user(alice.id).email == "alice@x.com"


# ========== loans ==========


def test_get_user_loan_ids(service, db, make_user):
    user = service.insert_user(make_user())
    other = service.insert_user(make_user("Bob", "bob@x.com"))

    with db.get_session() as session:
        book = Book(title="Ficciones", genre="Short stories")
        session.add(book)
        session.flush()
        session.add_all([
            Loan(loan_date=date(2024, 3, 1), user_id=user.id, book_id=book.id),
            Loan(loan_date=date(2024, 3, 2), user_id=other.id, book_id=book.id),
            Loan(loan_date=date(2024, 3, 5), user_id=user.id, book_id=book.id),
        ])
        session.commit()

    assert service.get_user_loan_ids(user.id) == [1, 3]
    assert service.get_user_loan_ids(12345) == []


# ========== lifecycle ==========


def test_calls_after_shutdown_raise(service, make_user):
    user = service.insert_user(make_user())
    service.shutdown()

    assert service.is_closed
    with pytest.raises(ServiceClosedException):
        service.insert_user(make_user("Bob", "bob@x.com"))
    with pytest.raises(ServiceClosedException):
        service.get_user(user.id)
    with pytest.raises(ServiceClosedException):
        service.update_user(user.id, make_user("Carol", "carol@x.com"))
    with pytest.raises(ServiceClosedException):
        service.delete_user(user.id)
    with pytest.raises(ServiceClosedException):
        service.list_users()


def test_shutdown_touches_no_storage_afterwards(make_user):
    db = MagicMock(spec=DatabaseManager)
    db.is_initialized.return_value = True
    service = UserService(db=db)

    service.shutdown()
    with pytest.raises(ServiceClosedException):
        service.insert_user(make_user())

    db.close.assert_called_once()
    db.get_session.assert_not_called()


def test_second_shutdown_is_harmless(service):
    service.shutdown()
    service.shutdown()

    assert service.is_closed


def test_session_released_when_repository_raises(make_user):
    db = MagicMock(spec=DatabaseManager)
    db.is_initialized.return_value = True
    session_cm = db.get_session.return_value
    repository = MagicMock()
    repository.insert.side_effect = PersistenceFailureException("insert", RuntimeError("boom"))
    service = UserService(db=db, repository=repository)

    with pytest.raises(PersistenceFailureException):
        service.insert_user(make_user())

    session_cm.__enter__.assert_called_once()
    session_cm.__exit__.assert_called_once()
