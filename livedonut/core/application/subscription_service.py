"""
Live subscription to a Firestore collection.

The Firestore client delivers snapshot batches on its own thread. Each batch
is converted to DocumentChange objects and emitted as one Qt signal, which
a queued connection hands over to the GUI thread.
"""

import logging
from typing import Any, List, Optional

from google.api_core.exceptions import GoogleAPICallError
from PyQt6.QtCore import QObject, pyqtSignal

from livedonut.core.domain.models import ChangeType, DocumentChange

logger = logging.getLogger(__name__)

class SubscriptionError(Exception):
    """Raised when the collection subscription cannot be opened."""

def open_collection(
    collection_name: str,
    project_id: Optional[str] = None,
    credentials_path: Optional[str] = None,
):
    """
    Creates a Firestore client and returns the collection reference.

    Args:
        collection_name: Name of the collection to watch
        project_id: Google Cloud project, taken from the environment if empty
        credentials_path: Service account JSON, application default
            credentials are used if empty
    """
    from google.cloud import firestore

    try:
        if credentials_path:
            client = firestore.Client.from_service_account_json(
                credentials_path, project=project_id or None
            )
        else:
            client = firestore.Client(project=project_id or None)
    except Exception as e:
        raise SubscriptionError(f"Could not create Firestore client: {e}") from e

    return client.collection(collection_name)

def convert_changes(raw_changes: List[Any]) -> List[DocumentChange]:
    """Converts Firestore change objects, dropping unknown change types."""
    changes = []
    for raw in raw_changes:
        try:
            change_type = ChangeType.parse(raw.type)
        except ValueError:
            logger.warning(f"Ignoring change with unknown type {raw.type!r}")
            continue

        document = raw.document
        changes.append(
            DocumentChange(
                type=change_type,
                doc_id=document.id,
                data=document.to_dict() or {},
            )
        )
    return changes

class CollectionSubscription(QObject):
    """Watches one collection and deletes documents from it."""

    changes_received = pyqtSignal(list)

    def __init__(self, collection, parent=None):
        super().__init__(parent)
        self._collection = collection
        self._watch = None

    @property
    def collection_id(self) -> str:
        return getattr(self._collection, "id", "")

    @property
    def is_active(self) -> bool:
        return self._watch is not None

    def start(self):
        """Opens the live subscription."""
        if self._watch is not None:
            return

        try:
            self._watch = self._collection.on_snapshot(self._on_snapshot)
        except GoogleAPICallError as e:
            logger.error(f"Subscription to '{self.collection_id}' failed: {e}")
            raise SubscriptionError(str(e)) from e

        logger.info(f"Subscribed to collection '{self.collection_id}'")

    def stop(self):
        """Closes the subscription."""
        if self._watch is None:
            return

        self._watch.unsubscribe()
        self._watch = None
        logger.info(f"Unsubscribed from collection '{self.collection_id}'")

    def delete_record(self, record_id: str):
        """Issues one delete request. Blocking, run it off the GUI thread."""
        logger.debug(f"Deleting document {record_id} from '{self.collection_id}'")
        self._collection.document(record_id).delete()

    def _on_snapshot(self, documents, changes, read_time):
        try:
            batch = convert_changes(changes)
        except Exception:
            logger.error("Failed to read snapshot batch", exc_info=True)
            return

        logger.debug(f"Snapshot batch with {len(batch)} changes at {read_time}")
        self.changes_received.emit(batch)
