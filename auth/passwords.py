"""
auth/passwords.py -- Password hashing and verification.

Stored hash format:
  "<salt>$<derived>" where salt is 16 random bytes as 32 lowercase hex chars
  and derived is PBKDF2-HMAC-SHA512(password, salt, 2048 iterations, 32 bytes)
  as 64 lowercase hex chars.

  The salt fed into PBKDF2 is the hex TEXT of the random bytes, not the raw
  bytes. Every hash already stored in the users table was produced that way,
  so the salt length, iteration count, key length, digest and this salt
  encoding are fixed. Changing any of them makes existing accounts unable
  to log in.

Failure policy:
  verify_password() is a pure allow/deny decision. A malformed stored value
  is "does not match", never an exception.

Layer rule: no imports from api/, applications/, or uploads/.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import re
import secrets
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("jobtrack.auth")

_SALT_BYTES = 16
_ITERATIONS = 2048
_KEY_LENGTH = 32
_DIGEST = "sha512"
_SEPARATOR = "$"

_STORED_HASH_RE = re.compile(r"([0-9a-f]{32})\$([0-9a-f]{64})")


def _derive(plain: str, salt: str) -> str:
    return hashlib.pbkdf2_hmac(
        _DIGEST,
        plain.encode("utf-8"),
        salt.encode("ascii"),
        _ITERATIONS,
        dklen=_KEY_LENGTH,
    ).hex()


def hash_password(plain: str) -> str:
    """Return a freshly salted stored hash for the given plaintext password.

    Callers validate the password first (the API models require 1..1024
    characters). An empty string still hashes -- it just isn't a secret.
    Raises UnicodeEncodeError for text that is not valid UTF-8 (lone
    surrogates), the same input verify_password() answers False for.
    """
    salt = secrets.token_hex(_SALT_BYTES)
    return f"{salt}{_SEPARATOR}{_derive(plain, salt)}"


def verify_password(plain: str, stored: str) -> bool:
    """Return True if the plaintext password reproduces the stored hash."""
    if not isinstance(plain, str) or not isinstance(stored, str):
        return False
    match = _STORED_HASH_RE.fullmatch(stored)
    if match is None:
        logger.warning("Rejected malformed stored password hash")
        return False
    salt, expected = match.groups()
    try:
        candidate = _derive(plain, salt)
    except UnicodeEncodeError:
        return False
    return hmac.compare_digest(candidate, expected)


# Timing equalization dummy hash.
# Computed once at module load. authenticate_user() verifies against it when
# the email is unknown, so an unknown account costs the same PBKDF2 run as a
# wrong password and response time does not reveal which emails exist.
_DUMMY_HASH: str = hash_password("jobtrack_timing_dummy")


def authenticate_user(store: UserStore, email: str, password: str) -> User | None:
    """Authenticate an email/password login with timing equalization.

    Returns the User on success, None on any failure. Unknown email and
    wrong password are indistinguishable to the caller.
    """
    user = store.get_by_email(email)
    if user is None:
        # Equalize timing -- do NOT return early before running PBKDF2
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user
