"""
Centralized application state.

Owns the record list shown on the chart. The list is replaced, never
mutated, so a render always sees a consistent snapshot.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

from livedonut.core.application.record_reducer import reduce_changes
from livedonut.core.domain.models import DocumentChange, Record

@dataclass
class AppState:
    """Application state."""

    collection: str = ""
    records: List[Record] = field(default_factory=list)
    pending_deletes: Set[str] = field(default_factory=set)
    batches_received: int = 0
    last_error: Optional[str] = None

    def apply_changes(self, changes: Iterable[DocumentChange]) -> List[Record]:
        """Reduces one batch into a new record list and stores it."""
        self.records = reduce_changes(self.records, changes)
        self.batches_received += 1

        present = {record.id for record in self.records}
        self.pending_deletes &= present

        return self.records

    def record_ids(self) -> List[str]:
        return [record.id for record in self.records]
