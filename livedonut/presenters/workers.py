from PyQt6.QtCore import QObject, QRunnable, pyqtSignal

from google.api_core.exceptions import GoogleAPICallError

class WorkerSignals(QObject):
    """Signals for worker threads."""

    finished = pyqtSignal(bool, str, object)

class DeleteRecordWorker(QRunnable):
    """Worker for deleting one document in a separate thread."""

    def __init__(self, subscription, record_id: str):
        super().__init__()
        self.subscription = subscription
        self.record_id = record_id
        self.signals = WorkerSignals()

    def run(self):
        try:
            self.subscription.delete_record(self.record_id)
            self.signals.finished.emit(True, "Deleted", self.record_id)
        except GoogleAPICallError as e:
            self.signals.finished.emit(
                False, f"Could not delete record: {e.message}", self.record_id
            )
        except Exception as e:
            self.signals.finished.emit(
                False, f"Unexpected error: {e}", self.record_id
            )
