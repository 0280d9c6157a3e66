import pytest

from comite.core.exceptions import DocumentStoreException
from comite.services.base import document_store
from comite.services.base.document_store import InMemoryDocumentStore


def test_missing_key_returns_default():
    store = InMemoryDocumentStore()
    assert store.get("nope") is None
    assert store.get("nope", default=[]) == []


def test_values_are_stored_as_json():
    store = InMemoryDocumentStore()
    store.set("reading-stats/u1", {"total_chapters_read": 2, "genre_counts": {"Action": 2}})

    value = store.get("reading-stats/u1")
    assert value == {"total_chapters_read": 2, "genre_counts": {"Action": 2}}

    # callers get a fresh copy, not the stored object
    value["total_chapters_read"] = 99
    assert store.get("reading-stats/u1")["total_chapters_read"] == 2


def test_unserializable_value_is_rejected():
    store = InMemoryDocumentStore()
    with pytest.raises(DocumentStoreException):
        store.set("bad", {"when": object()})
    assert store.get("bad") is None


def test_corrupt_payload_reads_as_default():
    store = InMemoryDocumentStore()
    store._write("broken", "{not json")
    assert store.get("broken", default={}) == {}


def test_delete():
    store = InMemoryDocumentStore()
    store.set("k", [1, 2])
    assert store.delete("k") is True
    assert store.delete("k") is False
    assert store.get("k") is None


class FakeSnapshot:
    def __init__(self, data):
        self._data = data
        self.exists = data is not None

    def to_dict(self):
        return dict(self._data)


class FakeDocument:
    def __init__(self, docs, doc_id):
        self.docs = docs
        self.doc_id = doc_id

    def get(self):
        return FakeSnapshot(self.docs.get(self.doc_id))

    def set(self, data):
        self.docs[self.doc_id] = data

    def delete(self):
        self.docs.pop(self.doc_id, None)


class FakeCollection:
    def __init__(self):
        self.docs = {}

    def document(self, doc_id):
        return FakeDocument(self.docs, doc_id)


class BrokenCollection:
    def document(self, doc_id):
        raise RuntimeError("firestore unavailable")


class FakeFirestore:
    def __init__(self, collection_cls=FakeCollection):
        self.collection_cls = collection_cls
        self.collections = {}

    def collection(self, name):
        return self.collections.setdefault(name, self.collection_cls())


def test_firestore_store_round_trip(monkeypatch):
    fake = FakeFirestore()
    monkeypatch.setattr(document_store.firestore, "client", lambda: fake)

    store = document_store.FirestoreDocumentStore("comite_documents")
    store.set("reading-stats/u1", {"total_chapters_read": 1})

    raw = fake.collections["comite_documents"].docs["reading-stats__u1"]
    assert raw["key"] == "reading-stats/u1"
    assert store.get("reading-stats/u1") == {"total_chapters_read": 1}
    assert store.delete("reading-stats/u1") is True
    assert store.get("reading-stats/u1") is None


def test_firestore_failures_are_wrapped(monkeypatch):
    monkeypatch.setattr(document_store.firestore, "client", lambda: FakeFirestore(BrokenCollection))
    store = document_store.FirestoreDocumentStore("comite_documents")

    with pytest.raises(DocumentStoreException):
        store.get("reading-stats/u1")
    with pytest.raises(DocumentStoreException):
        store.set("reading-stats/u1", {"total_chapters_read": 1})
