"""Tests for the create-user command in main.py.

Covers:
- a typed password is hashed and the account lands in the configured database
- mismatched, empty, and non-UTF-8 passwords exit 1 without writing anything
- an email that already has an account exits 1
"""

import pytest

from auth.passwords import verify_password
from auth.store import UserStore
from core.config import get_settings
from main import main

_ARGS = ["create-user", "--email", "Admin@Example.com", "--first-name", "Ada", "--last-name", "Admin"]


@pytest.fixture
def database_url(tmp_path, monkeypatch) -> str:
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    monkeypatch.setattr(get_settings(), "database_url", url)
    return url


def _typed(monkeypatch, *answers: str) -> None:
    """Feed getpass the given answers in order."""
    replies = iter(answers)
    monkeypatch.setattr("getpass.getpass", lambda prompt="": next(replies))


def _stored(url: str, email: str):
    store = UserStore(url)
    try:
        return store.get_by_email(email)
    finally:
        store.close()


def test_creates_user(database_url, monkeypatch, capsys) -> None:
    _typed(monkeypatch, "s3cret-pass", "s3cret-pass")
    assert main([*_ARGS, "--access-level", "2"]) == 0
    assert "Created user" in capsys.readouterr().out

    user = _stored(database_url, "admin@example.com")
    assert user is not None
    assert user.access_level == 2
    assert verify_password("s3cret-pass", user.hashed_password)


def test_unencodable_password_exits_cleanly(database_url, monkeypatch, capsys) -> None:
    """A lone surrogate cannot be hashed; the command reports it instead of crashing."""
    _typed(monkeypatch, "\ud800", "\ud800")
    assert main(_ARGS) == 1
    assert "UTF-8" in capsys.readouterr().out
    assert _stored(database_url, "admin@example.com") is None


@pytest.mark.parametrize(("first", "second"), [("", ""), ("one-password", "another-password")])
def test_rejected_passwords(database_url, monkeypatch, first, second) -> None:
    _typed(monkeypatch, first, second)
    assert main(_ARGS) == 1
    assert _stored(database_url, "admin@example.com") is None


def test_duplicate_email(database_url, monkeypatch, capsys) -> None:
    _typed(monkeypatch, "s3cret-pass", "s3cret-pass", "other-pass", "other-pass")
    assert main(_ARGS) == 0
    assert main(_ARGS) == 1
    assert "already exists" in capsys.readouterr().out
