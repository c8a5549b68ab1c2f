import logging
from typing import List, Optional

from PyQt6.QtCore import QObject, QThreadPool, pyqtSignal

from livedonut.core.domain.models import DocumentChange, Record
from livedonut.presenters.app_state import AppState
from livedonut.presenters.workers import DeleteRecordWorker

logger = logging.getLogger(__name__)

class DonutChartPresenter(QObject):
    """Connects the collection subscription, the record state and the chart view."""

    records_changed = pyqtSignal(list)

    def __init__(self, subscription, view, state: Optional[AppState] = None,
                 thread_pool=None, parent=None):
        super().__init__(parent)
        self.subscription = subscription
        self.view = view
        self.state = state or AppState(collection=subscription.collection_id)
        self._thread_pool = thread_pool or QThreadPool.globalInstance()

        self.subscription.changes_received.connect(self.on_changes_received)
        self.view.interaction.delete_requested.connect(self.request_delete)

    def start(self):
        self.view.render(self.state.records)
        self.subscription.start()

    def shutdown(self):
        self.subscription.stop()

    def on_changes_received(self, changes: List[DocumentChange]):
        """Applies one snapshot batch and renders once."""
        records = self.state.apply_changes(changes)
        logger.debug(
            f"Batch {self.state.batches_received}: {len(changes)} changes, "
            f"{len(records)} records"
        )
        self.view.render(records)
        self.records_changed.emit(records)

    def request_delete(self, record_id: str):
        """Sends a delete for the record; the list changes only via the subscription."""
        if record_id in self.state.pending_deletes:
            logger.debug(f"Delete of {record_id} already pending")
            return

        self.state.pending_deletes.add(record_id)

        worker = DeleteRecordWorker(self.subscription, record_id)
        worker.signals.finished.connect(self._on_delete_finished)
        self._thread_pool.start(worker)

    def _on_delete_finished(self, success: bool, message: str, record_id):
        if success:
            logger.info(f"Record {record_id} deleted")
            return

        self.state.pending_deletes.discard(record_id)
        self.state.last_error = message
        logger.warning(f"Delete of {record_id} failed: {message}")
        self.view.show_notification(message)

    @property
    def records(self) -> List[Record]:
        return self.state.records
