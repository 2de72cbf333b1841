"""Unit tests for auth/store.py -- UserStore repository."""

import pytest
from sqlalchemy.exc import IntegrityError

from auth.models import ADMIN_ACCESS_LEVEL, User
from auth.store import UserStore, normalize_email


def _user(email: str = "ana@example.com", **overrides) -> User:
    fields = {
        "first_name": "Ana",
        "last_name": "Ruiz",
        "email": email,
        "hashed_password": "0" * 32 + "$" + "1" * 64,
    }
    fields.update(overrides)
    return User(**fields)


@pytest.fixture
def store():
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


class TestCreateAndLookup:
    def test_create_assigns_id_and_defaults(self, store: UserStore) -> None:
        user_id = store.create_user(_user())
        user = store.get_by_id(user_id)
        assert user is not None
        assert user.id == user_id
        assert user.access_level == 1
        assert user.new_user is True
        assert user.bio == ""
        assert user.avatar == ""
        assert user.created_at
        assert user.created_at == user.updated_at

    def test_email_stored_lowercase(self, store: UserStore) -> None:
        user_id = store.create_user(_user(" Ana@Example.COM "))
        assert store.get_by_id(user_id).email == "ana@example.com"
        assert store.get_by_email("ANA@example.com").id == user_id

    def test_duplicate_email_rejected(self, store: UserStore) -> None:
        store.create_user(_user())
        with pytest.raises(IntegrityError):
            store.create_user(_user("ANA@example.com"))

    def test_missing_returns_none(self, store: UserStore) -> None:
        assert store.get_by_id(999) is None
        assert store.get_by_email("ghost@example.com") is None

    def test_email_exists(self, store: UserStore) -> None:
        store.create_user(_user())
        assert store.email_exists("ana@example.com") is True
        assert store.email_exists("Ana@Example.com") is True
        assert store.email_exists("bob@example.com") is False

    def test_list_users_ordered_by_id(self, store: UserStore) -> None:
        first = store.create_user(_user("a@example.com"))
        second = store.create_user(_user("b@example.com", access_level=ADMIN_ACCESS_LEVEL))
        users = store.list_users()
        assert [u.id for u in users] == [first, second]
        assert users[1].is_admin is True
        assert users[0].is_admin is False


class TestUpdate:
    def test_update_fields(self, store: UserStore) -> None:
        user_id = store.create_user(_user())
        assert store.update_user(user_id, bio="Backend engineer", new_user=False) is True
        user = store.get_by_id(user_id)
        assert user.bio == "Backend engineer"
        assert user.new_user is False

    def test_update_normalizes_email(self, store: UserStore) -> None:
        user_id = store.create_user(_user())
        store.update_user(user_id, email="New@Example.com")
        assert store.get_by_id(user_id).email == "new@example.com"

    def test_update_unknown_field_rejected(self, store: UserStore) -> None:
        user_id = store.create_user(_user())
        with pytest.raises(ValueError):
            store.update_user(user_id, id=42)

    def test_update_missing_user(self, store: UserStore) -> None:
        assert store.update_user(999, bio="x") is False

    def test_update_to_taken_email(self, store: UserStore) -> None:
        store.create_user(_user("a@example.com"))
        other = store.create_user(_user("b@example.com"))
        with pytest.raises(IntegrityError):
            store.update_user(other, email="a@example.com")


class TestDelete:
    def test_delete(self, store: UserStore) -> None:
        user_id = store.create_user(_user())
        assert store.delete_user(user_id) is True
        assert store.get_by_id(user_id) is None
        assert store.delete_user(user_id) is False

    def test_ping(self, store: UserStore) -> None:
        assert store.ping() is True


def test_normalize_email() -> None:
    assert normalize_email("  Mixed@Case.IO ") == "mixed@case.io"


def test_deleted_id_never_reused(store: UserStore) -> None:
    first = store.create_user(_user("first@example.com"))
    last = store.create_user(_user("last@example.com"))
    store.delete_user(last)
    replacement = store.create_user(_user("replacement@example.com"))
    assert replacement > last > first
