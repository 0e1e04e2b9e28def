"""
Shared fixtures: a mongomock-backed API client, seeded accounts and a
throwaway Excel template.
"""
import os

os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["MONGO_URL"] = "mongodb://localhost:27017"
os.environ["MONGO_DB"] = "safety_test"
os.environ["IMPORT_CONCURRENCY"] = "1"
os.environ.pop("SUPER_ADMIN_CODE", None)

import mongomock
import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook

from apps.api.deps import get_db, get_settings
from apps.api.main import app
from core.config import settings
from core.security import hash_code
from services.persistence.mongo import ensure_indexes

TEMPLATE_LABELS = {
    "C2": "申請人： ",
    "A3": "供應商名稱：",
    "C3": "供應商負責人：",
    "A4": "現場聯絡人：",
    "C4": "連絡電話：",
    "B5": "姓名",
    "B16": "備註",
}


@pytest.fixture
def db():
    database = mongomock.MongoClient()["safety_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def seeded_db(db):
    db["accounts"].insert_many(
        [
            {"name": "admin", "display_name": "admin", "code": hash_code("root"), "role": "super_admin"},
            # legacy plaintext code, as the original collection stored it
            {"name": "amam", "display_name": "啊玫", "code": "1234", "role": "tenant"},
            {"name": "david", "display_name": "大衛", "code": hash_code("5678"), "role": "tenant"},
        ]
    )
    return db


@pytest.fixture
def template_path(tmp_path):
    wb = Workbook()
    ws = wb.active
    for address, label in TEMPLATE_LABELS.items():
        ws[address] = label
    path = tmp_path / "template.xlsx"
    wb.save(path)
    return path


@pytest.fixture
def client(seeded_db, template_path):
    test_settings = settings.model_copy(update={"EXCEL_TEMPLATE_PATH": str(template_path)})
    app.dependency_overrides[get_db] = lambda: seeded_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    yield TestClient(app)
    app.dependency_overrides.clear()


def login(client, tenant, password):
    r = client.post("/auth/login", json={"tenant": tenant, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def amam_headers(client):
    return login(client, "amam", "1234")


@pytest.fixture
def david_headers(client):
    return login(client, "david", "5678")


@pytest.fixture
def admin_headers(client):
    return login(client, "admin", "root")
