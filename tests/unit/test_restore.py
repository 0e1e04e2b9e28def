import itertools
import threading

import pytest

from domain.value_objects import VerifiedScope
from services.backup.restore import restore_applications, stamp_owner


class ListStore:
    def __init__(self, fail_on=()):
        self.docs = []
        self.fail_on = set(fail_on)
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def insert(self, doc):
        if doc["applicant"] in self.fail_on:
            raise RuntimeError(f"rejected {doc['applicant']}")
        with self._lock:
            self.docs.append(doc)
            return f"id{next(self._ids)}"


RECORDS = [
    {"applicant": "Alice", "workers": [{"name": "W1"}]},
    {"applicant": "Bob", "workers": []},
    {"applicant": "Carol", "workers": []},
]


@pytest.mark.parametrize("workers", [1, 4])
def test_every_record_becomes_a_new_document(workers):
    store = ListStore()
    outcome = restore_applications(RECORDS, store.insert, max_workers=workers)
    assert outcome.succeeded == 3
    assert outcome.failed == 0
    assert len(set(outcome.inserted_ids)) == 3
    assert sorted(d["applicant"] for d in store.docs) == ["Alice", "Bob", "Carol"]


def test_restoring_twice_duplicates():
    store = ListStore()
    restore_applications(RECORDS, store.insert)
    restore_applications(RECORDS, store.insert)
    assert len(store.docs) == 6


def test_failures_are_counted_per_record_and_others_still_commit():
    store = ListStore(fail_on={"Bob"})
    outcome = restore_applications(RECORDS, store.insert, max_workers=2)
    assert outcome.succeeded == 2
    assert outcome.failed == 1
    assert "rejected Bob" in outcome.errors[0]
    assert outcome.summary() == "2 succeeded, 1 failed"
    assert sorted(d["applicant"] for d in store.docs) == ["Alice", "Carol"]


def test_owner_scope_is_stamped_without_touching_input():
    store = ListStore()
    owner = VerifiedScope(tenant="amam", display_name="啊玫")
    restore_applications(RECORDS, store.insert, owner=owner)
    assert all(d["ownerId"] == "amam" and d["ownerName"] == "啊玫" for d in store.docs)
    assert "ownerId" not in RECORDS[0]


def test_stamp_owner_without_scope_keeps_record():
    rec = {"applicant": "Alice", "ownerId": "old"}
    assert stamp_owner(rec, None) == rec


def test_empty_input_writes_nothing():
    store = ListStore()
    outcome = restore_applications([], store.insert)
    assert outcome.total == 0
    assert store.docs == []
