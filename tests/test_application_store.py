"""Unit tests for applications/store.py -- ApplicationStore repository."""

import pytest

from applications.models import JobApplication
from applications.store import ApplicationStore


def _application(user_id: int = 1, **overrides) -> JobApplication:
    fields = {
        "user_id": user_id,
        "company": "Acme",
        "position": "Backend Engineer",
        "location": "Remote",
        "date_applied": "2024-03-01",
    }
    fields.update(overrides)
    return JobApplication(**fields)


@pytest.fixture
def store():
    s = ApplicationStore("sqlite:///:memory:")
    yield s
    s.close()


class TestCreate:
    def test_create_and_get(self, store: ApplicationStore) -> None:
        app_id = store.create(_application(documents=["cv.pdf"], min_salary=90000, max_salary=120000))
        application = store.get(app_id)
        assert application is not None
        assert application.id == app_id
        assert application.status == "applied"
        assert application.documents == ["cv.pdf"]
        assert application.min_salary == 90000
        assert application.max_salary == 120000
        assert application.created_at

    def test_strings_trimmed(self, store: ApplicationStore) -> None:
        app_id = store.create(_application(company="  Acme  ", job_url=" https://acme.test/jobs/1 "))
        application = store.get(app_id)
        assert application.company == "Acme"
        assert application.job_url == "https://acme.test/jobs/1"

    def test_zero_salary_stored_as_unset(self, store: ApplicationStore) -> None:
        app_id = store.create(_application(min_salary=0, max_salary=0))
        application = store.get(app_id)
        assert application.min_salary is None
        assert application.max_salary is None

    def test_unknown_status_rejected(self, store: ApplicationStore) -> None:
        with pytest.raises(ValueError):
            store.create(_application(status="ghosted"))

    def test_get_missing(self, store: ApplicationStore) -> None:
        assert store.get(404) is None


class TestList:
    def test_only_owner_records_newest_first(self, store: ApplicationStore) -> None:
        first = store.create(_application(user_id=1, company="First"))
        second = store.create(_application(user_id=1, company="Second"))
        store.create(_application(user_id=2, company="Other"))
        listed = store.list_for_user(1)
        assert [a.id for a in listed] == [second, first]

    def test_empty(self, store: ApplicationStore) -> None:
        assert store.list_for_user(99) == []


class TestReplaceAndDelete:
    def test_replace(self, store: ApplicationStore) -> None:
        app_id = store.create(_application())
        updated = _application(status="interviewing", interview_date="2024-03-10", interview_time="14:30")
        assert store.replace(app_id, updated) is True
        application = store.get(app_id)
        assert application.status == "interviewing"
        assert application.interview_date == "2024-03-10"
        assert application.interview_time == "14:30"

    def test_replace_missing(self, store: ApplicationStore) -> None:
        assert store.replace(404, _application()) is False

    def test_delete(self, store: ApplicationStore) -> None:
        app_id = store.create(_application())
        assert store.delete(app_id) is True
        assert store.get(app_id) is None
        assert store.delete(app_id) is False

    def test_deleted_id_never_reused(self, store: ApplicationStore) -> None:
        app_id = store.create(_application())
        store.delete(app_id)
        assert store.create(_application()) > app_id

    def test_delete_for_user(self, store: ApplicationStore) -> None:
        store.create(_application(user_id=5))
        store.create(_application(user_id=5))
        kept = store.create(_application(user_id=6))
        assert store.delete_for_user(5) == 2
        assert store.list_for_user(5) == []
        assert store.get(kept) is not None
