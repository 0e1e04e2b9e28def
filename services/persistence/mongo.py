from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from core.config import settings

logger = logging.getLogger(__name__)

APPLICATIONS = "applications"
ACCOUNTS = "accounts"


class StoreError(Exception):
    pass


class DuplicateAccountError(StoreError):
    pass


@lru_cache
def get_mongo_client() -> MongoClient:
    return MongoClient(settings.MONGO_URL, serverSelectionTimeoutMS=2000)


def get_mongo() -> Database:
    return get_mongo_client()[settings.MONGO_DB]


def ensure_indexes(db: Database) -> None:
    db[APPLICATIONS].create_index([("ownerId", ASCENDING)])
    db[ACCOUNTS].create_index([("name", ASCENDING)], unique=True)
    logger.info("indexes ensured on %s", db.name)


def _to_object_id(doc_id: str) -> ObjectId | None:
    try:
        return ObjectId(doc_id)
    except (InvalidId, TypeError):
        return None


def _out(doc: dict[str, Any]) -> dict[str, Any]:
    """Mongo document -> plain dict with a string ``id``."""
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return doc


class ApplicationRepository:
    def __init__(self, db: Database):
        self.col = db[APPLICATIONS]

    def insert(self, data: dict[str, Any]) -> str:
        try:
            res = self.col.insert_one(dict(data))
        except PyMongoError as e:
            raise StoreError(f"insert failed: {e}") from e
        return str(res.inserted_id)

    def get(self, app_id: str) -> dict[str, Any] | None:
        oid = _to_object_id(app_id)
        if oid is None:
            return None
        try:
            doc = self.col.find_one({"_id": oid})
        except PyMongoError as e:
            raise StoreError(f"read failed: {e}") from e
        return _out(doc) if doc else None

    def list(self, owner_id: str | None = None) -> list[dict[str, Any]]:
        """All applications, or those owned by ``owner_id``, in store order."""
        flt = {} if owner_id is None else {"ownerId": owner_id}
        try:
            return [_out(d) for d in self.col.find(flt)]
        except PyMongoError as e:
            raise StoreError(f"read failed: {e}") from e

    def delete(self, app_id: str) -> bool:
        oid = _to_object_id(app_id)
        if oid is None:
            return False
        try:
            return self.col.delete_one({"_id": oid}).deleted_count == 1
        except PyMongoError as e:
            raise StoreError(f"delete failed: {e}") from e


class AccountRepository:
    def __init__(self, db: Database):
        self.col = db[ACCOUNTS]

    def find_by_name(self, name: str) -> dict[str, Any] | None:
        try:
            doc = self.col.find_one({"name": name})
        except PyMongoError as e:
            raise StoreError(f"read failed: {e}") from e
        return _out(doc) if doc else None

    def get(self, account_id: str) -> dict[str, Any] | None:
        oid = _to_object_id(account_id)
        if oid is None:
            return None
        try:
            doc = self.col.find_one({"_id": oid})
        except PyMongoError as e:
            raise StoreError(f"read failed: {e}") from e
        return _out(doc) if doc else None

    def list(self) -> list[dict[str, Any]]:
        try:
            return [_out(d) for d in self.col.find({})]
        except PyMongoError as e:
            raise StoreError(f"read failed: {e}") from e

    def create(self, data: dict[str, Any]) -> str:
        if self.find_by_name(data["name"]) is not None:
            raise DuplicateAccountError(f"account '{data['name']}' already exists")
        try:
            res = self.col.insert_one(dict(data))
        except DuplicateKeyError as e:
            raise DuplicateAccountError(f"account '{data['name']}' already exists") from e
        except PyMongoError as e:
            raise StoreError(f"insert failed: {e}") from e
        return str(res.inserted_id)

    def set_code(self, account_id: str, code: str) -> None:
        oid = _to_object_id(account_id)
        if oid is None:
            return
        try:
            self.col.update_one({"_id": oid}, {"$set": {"code": code}})
        except PyMongoError as e:
            raise StoreError(f"update failed: {e}") from e

    def delete(self, account_id: str) -> bool:
        oid = _to_object_id(account_id)
        if oid is None:
            return False
        try:
            return self.col.delete_one({"_id": oid}).deleted_count == 1
        except PyMongoError as e:
            raise StoreError(f"delete failed: {e}") from e
