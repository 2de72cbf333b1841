"""Unit tests for auth/passwords.py -- stored hash derivation and verification.

Covers:
- hash format: 32 hex salt, "$", 64 hex derived key
- round trip, wrong password, fresh salt per call
- compatibility: the hex salt TEXT is the PBKDF2 salt input
- malformed stored values fail closed (False, never an exception)
- authenticate_user() for known, unknown, and wrong-password logins
"""

import hashlib
import re

import pytest

from auth.models import User
from auth.passwords import authenticate_user, hash_password, verify_password
from auth.store import UserStore

_FORMAT = re.compile(r"^[0-9a-f]{32}\$[0-9a-f]{64}$")


class TestHashPassword:
    def test_format(self) -> None:
        stored = hash_password("correct-horse-battery")
        assert _FORMAT.match(stored), stored
        assert stored.count("$") == 1

    def test_round_trip(self) -> None:
        stored = hash_password("correct-horse-battery")
        assert verify_password("correct-horse-battery", stored) is True
        assert verify_password("wrong-password", stored) is False

    def test_fresh_salt_each_time(self) -> None:
        first = hash_password("same-secret")
        second = hash_password("same-secret")
        assert first != second
        assert first.split("$")[0] != second.split("$")[0]
        assert verify_password("same-secret", first)
        assert verify_password("same-secret", second)

    def test_salt_text_is_kdf_input(self) -> None:
        """Existing stored hashes were derived with the hex salt string as the salt bytes."""
        stored = hash_password("p@ssw0rd")
        salt, derived = stored.split("$")
        expected = hashlib.pbkdf2_hmac("sha512", b"p@ssw0rd", salt.encode("ascii"), 2048, dklen=32).hex()
        assert derived == expected

    def test_verifies_externally_produced_hash(self) -> None:
        salt = "00112233445566778899aabbccddeeff"
        derived = hashlib.pbkdf2_hmac("sha512", "héllo wörld".encode(), salt.encode(), 2048, dklen=32).hex()
        assert verify_password("héllo wörld", f"{salt}${derived}") is True

    def test_empty_password_still_hashes(self) -> None:
        stored = hash_password("")
        assert verify_password("", stored) is True
        assert verify_password(" ", stored) is False

    def test_whitespace_is_significant(self) -> None:
        stored = hash_password(" padded ")
        assert verify_password("padded", stored) is False


class TestVerifyMalformed:
    @pytest.mark.parametrize(
        "stored",
        [
            "",
            "no-separator-at-all",
            "abc$def",
            "$",
            "0" * 32 + "$" + "0" * 64 + "$extra",
            "0" * 32 + "0" * 64,
            "g" * 32 + "$" + "0" * 64,
            "A" * 32 + "$" + "B" * 64,
            "0" * 31 + "$" + "0" * 64,
        ],
    )
    def test_malformed_stored_hash_is_false(self, stored: str) -> None:
        assert verify_password("anything", stored) is False

    def test_non_string_stored_hash_is_false(self) -> None:
        assert verify_password("anything", None) is False  # type: ignore[arg-type]

    def test_unencodable_password_is_false(self) -> None:
        stored = hash_password("secret")
        assert verify_password("\ud800", stored) is False

    def test_flipped_derived_character_is_false(self) -> None:
        stored = hash_password("secret")
        salt, derived = stored.split("$")
        flipped = ("1" if derived[0] == "0" else "0") + derived[1:]
        assert verify_password("secret", f"{salt}${flipped}") is False


class TestAuthenticateUser:
    @pytest.fixture
    def store(self):
        s = UserStore("sqlite:///:memory:")
        s.create_user(
            User(
                first_name="Ana",
                last_name="Ruiz",
                email="ana@example.com",
                hashed_password=hash_password("correct-horse-battery"),
            )
        )
        yield s
        s.close()

    def test_valid_login(self, store: UserStore) -> None:
        user = authenticate_user(store, "ana@example.com", "correct-horse-battery")
        assert user is not None
        assert user.email == "ana@example.com"

    def test_email_is_case_insensitive(self, store: UserStore) -> None:
        assert authenticate_user(store, "ANA@Example.com", "correct-horse-battery") is not None

    def test_wrong_password(self, store: UserStore) -> None:
        assert authenticate_user(store, "ana@example.com", "nope") is None

    def test_unknown_email(self, store: UserStore) -> None:
        assert authenticate_user(store, "ghost@example.com", "correct-horse-battery") is None
