"""
tests/conftest.py -- Shared test fixtures for JobTrack integration tests.

This module provides:
  - _make_test_stores(): isolated in-memory DBs for users + applications
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - ApiHarness: TestClient plus the stores and signer behind it, with helpers
    to create users and bearer headers
  - api: module-scoped ApiHarness fixture
  - png_bytes: a minimal valid PNG for avatar uploads

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.

SECRET_KEY and SIGNIN_RATE_LIMIT must be set before any app import:
get_settings() refuses to load without a key, and the default sign-in limit
would trip across a module's worth of logins.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

# CRITICAL: Set env before any api/core import.
os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789abcdef0123456789")
os.environ.setdefault("SIGNIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from applications.store import ApplicationStore
from auth.models import DEFAULT_ACCESS_LEVEL, User
from auth.passwords import hash_password
from auth.store import UserStore
from auth.tokens import TokenSigner, user_claims
from uploads.store import UploadStore

TEST_SECRET_KEY = os.environ["SECRET_KEY"]
DEFAULT_PASSWORD = "correct-horse-battery"

# 1x1 transparent PNG.
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"
    b"\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, ApplicationStore]:
    """Create isolated named shared-memory SQLite stores for test isolation.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    db_url = f"sqlite:///file:test_jobtrack_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url), ApplicationStore(db_url)


def _patch_lifespan(user_store: UserStore, applications: ApplicationStore, uploads: UploadStore, signer: TokenSigner):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.token_signer = signer
        app.state.user_store = user_store
        app.state.applications = applications
        app.state.uploads = uploads
        yield

    return test_lifespan


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@dataclass
class ApiHarness:
    client: TestClient
    user_store: UserStore
    applications: ApplicationStore
    uploads: UploadStore
    signer: TokenSigner

    def create_user(
        self,
        email: str,
        password: str = DEFAULT_PASSWORD,
        access_level: int = DEFAULT_ACCESS_LEVEL,
        first_name: str = "Test",
        last_name: str = "User",
    ) -> User:
        user_id = self.user_store.create_user(
            User(
                first_name=first_name,
                last_name=last_name,
                email=email,
                hashed_password=hash_password(password),
                access_level=access_level,
            )
        )
        return self.user_store.get_by_id(user_id)

    def auth_headers(self, user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.signer.mint(user_claims(user))}"}


# ---------------------------------------------------------------------------
# Module-scoped fixture -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api(request, tmp_path_factory) -> Generator[ApiHarness, None, None]:
    """Yield an ApiHarness wired to isolated stores for this test module."""
    suffix = request.module.__name__.rsplit(".", 1)[-1]
    user_store, applications = _make_test_stores(suffix)
    uploads = UploadStore(Path(tmp_path_factory.mktemp(f"uploads_{suffix}")))
    signer = TokenSigner(secret_key=TEST_SECRET_KEY)

    app.router.lifespan_context = _patch_lifespan(user_store, applications, uploads, signer)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield ApiHarness(
            client=client,
            user_store=user_store,
            applications=applications,
            uploads=uploads,
            signer=signer,
        )

    applications.close()
    user_store.close()
