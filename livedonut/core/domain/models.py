"""
Domain models for livedonut.

These models represent the collection documents shown on the chart and the
changes reported for them. They do not depend on PyQt or Firestore.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Union

class ChangeType(Enum):
    """Kind of change reported for a document."""

    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"

    @classmethod
    def parse(cls, value: Union[str, Enum, "ChangeType"]) -> "ChangeType":
        """
        Parses a change type.

        Accepts this enum, plain strings ("added", "MODIFIED") and foreign
        enums such as the one used by the Firestore client, matched by name.

        Raises:
            ValueError: If the value does not name a known change type
        """
        if isinstance(value, cls):
            return value

        if isinstance(value, Enum):
            value = value.name

        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown change type: {value!r}") from None

@dataclass(frozen=True)
class Record:
    """One document of the collection: a named cost."""

    id: str
    name: str
    cost: Any

    def __post_init__(self):
        if not self.id:
            raise ValueError("Record ID cannot be empty")

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "Record":
        """Builds a record from a document snapshot and its id."""
        data = data or {}
        name = data.get("name")
        return cls(
            id=str(doc_id),
            name="" if name is None else str(name),
            cost=data.get("cost"),
        )

@dataclass(frozen=True)
class DocumentChange:
    """A single change inside a snapshot batch."""

    type: ChangeType
    doc_id: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_record(self) -> Record:
        return Record.from_document(self.doc_id, self.data)
