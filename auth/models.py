"""
auth/models.py -- Domain dataclass for user accounts.

Pattern: Data class. Mirrors the approach in applications/models.py --
dataclasses own domain shape; stores and routes do the work.

Layer rule: no imports from api/, applications/, or uploads/.
"""

from __future__ import annotations

from dataclasses import dataclass

# Access levels. Signup always creates DEFAULT_ACCESS_LEVEL accounts; only an
# account at ADMIN_ACCESS_LEVEL or above can act on other users' records.
DEFAULT_ACCESS_LEVEL = 1
ADMIN_ACCESS_LEVEL = 2


@dataclass
class User:
    """A JobTrack account.

    hashed_password holds the "<salt>$<derived>" stored hash from
    auth.passwords.hash_password(); the plaintext is never kept.

    avatar is the stored file name (e.g. "user_7.png") or "" when unset.
    new_user stays True until the client clears it after onboarding.
    """

    first_name: str
    last_name: str
    email: str
    hashed_password: str
    id: int | None = None
    bio: str = ""
    avatar: str = ""
    access_level: int = DEFAULT_ACCESS_LEVEL
    new_user: bool = True
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.access_level >= ADMIN_ACCESS_LEVEL
