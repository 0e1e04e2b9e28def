import pytest

from apps.api.deps import get_accounts, get_applications
from apps.api.main import app
from services.backup.csv_codec import HEADER
from services.persistence.mongo import AccountRepository, ApplicationRepository, StoreError


class DownApplications(ApplicationRepository):
    def insert(self, data):
        raise StoreError("insert failed: connection refused")

    def get(self, app_id):
        raise StoreError("read failed: connection refused")

    def list(self, owner_id=None):
        raise StoreError("read failed: connection refused")

    def delete(self, app_id):
        raise StoreError("delete failed: connection refused")


class DownAccounts(AccountRepository):
    def find_by_name(self, name):
        raise StoreError("read failed: connection refused")


class RejectsBob(ApplicationRepository):
    def insert(self, data):
        if data["applicant"] == "Bob":
            raise StoreError("insert failed: write concern")
        return super().insert(data)


@pytest.fixture
def applications_down(seeded_db):
    app.dependency_overrides[get_applications] = lambda: DownApplications(seeded_db)


def _assert_db_error(r):
    assert r.status_code == 500
    assert r.json()["detail"].startswith("db error:")


def test_listing_reports_store_failure(client, amam_headers, applications_down):
    _assert_db_error(client.get("/applications/", headers=amam_headers))
    _assert_db_error(client.get("/applications/export", headers=amam_headers))


def test_delete_reports_store_failure(client, amam_headers, applications_down):
    r = client.delete(
        "/applications/65a000000000000000000000",
        headers=amam_headers,
        params={"confirm": "true"},
    )
    _assert_db_error(r)


def test_submission_reports_store_failure(client, applications_down, seeded_db):
    _assert_db_error(client.post("/forms/amam", json={"applicant": "Alice"}))
    assert seeded_db["applications"].count_documents({}) == 0


def test_login_reports_store_failure(client, seeded_db):
    app.dependency_overrides[get_accounts] = lambda: DownAccounts(seeded_db)
    _assert_db_error(client.post("/auth/login", json={"tenant": "amam", "password": "1234"}))
    _assert_db_error(client.get("/auth/tenants/amam"))


def test_import_counts_each_failed_insert(client, amam_headers, seeded_db):
    app.dependency_overrides[get_applications] = lambda: RejectsBob(seeded_db)
    text = ",".join(HEADER) + "\nB1,Alice,0912\nB2,Bob,0913\nB3,Carol,0914"
    r = client.post(
        "/applications/import",
        headers=amam_headers,
        params={"confirm": "true"},
        files={"file": ("backup.csv", text.encode("utf-8"), "text/csv")},
    )
    assert r.status_code == 200
    report = r.json()
    assert (report["groups"], report["succeeded"], report["failed"]) == (3, 2, 1)
    assert report["message"] == "2 succeeded, 1 failed"
    assert sorted(d["applicant"] for d in seeded_db["applications"].find({})) == ["Alice", "Carol"]
