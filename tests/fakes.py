"""Test doubles for the Firestore collection and change builders."""

from enum import Enum

from livedonut.core.domain.models import ChangeType, DocumentChange, Record

class FirestoreChangeType(Enum):
    """Same member names as the Firestore client's change type enum."""

    ADDED = 1
    REMOVED = 2
    MODIFIED = 3

class FakeDocumentSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    def to_dict(self):
        return None if self._data is None else dict(self._data)

class FakeChange:
    def __init__(self, change_type, doc_id, data=None):
        self.type = change_type
        self.document = FakeDocumentSnapshot(doc_id, data)

class FakeWatch:
    def __init__(self):
        self.unsubscribed = False

    def unsubscribe(self):
        self.unsubscribed = True

class FakeDocumentReference:
    def __init__(self, collection, doc_id):
        self._collection = collection
        self.id = doc_id

    def delete(self):
        if self._collection.delete_error is not None:
            raise self._collection.delete_error
        self._collection.deleted.append(self.id)

class FakeCollection:
    """Collection reference with the two calls the subscription uses."""

    def __init__(self, collection_id="groceries"):
        self.id = collection_id
        self.callback = None
        self.watch = None
        self.deleted = []
        self.delete_error = None

    def on_snapshot(self, callback):
        self.callback = callback
        self.watch = FakeWatch()
        return self.watch

    def document(self, doc_id):
        return FakeDocumentReference(self, doc_id)

    def push(self, *changes):
        self.callback([], list(changes), "now")

class ImmediateThreadPool:
    def __init__(self):
        self.started = []

    def start(self, worker):
        self.started.append(worker)
        worker.run()

def added(doc_id, name, cost):
    return DocumentChange(ChangeType.ADDED, doc_id, {"name": name, "cost": cost})

def modified(doc_id, name, cost):
    return DocumentChange(ChangeType.MODIFIED, doc_id, {"name": name, "cost": cost})

def removed(doc_id):
    return DocumentChange(ChangeType.REMOVED, doc_id, {})

def record(doc_id, name, cost):
    return Record(id=doc_id, name=name, cost=cost)
