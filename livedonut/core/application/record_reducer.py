"""
Reducer for snapshot change batches.

Applies a batch of document changes to the current record list and returns
the resulting list. The input list is never mutated.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from livedonut.core.domain.models import ChangeType, DocumentChange, Record

logger = logging.getLogger(__name__)

def find_record_index(records: Sequence[Record], record_id: str) -> Optional[int]:
    """Returns the position of the record with this id, or None."""
    for index, record in enumerate(records):
        if record.id == record_id:
            return index
    return None

def reduce_changes(
    records: Sequence[Record], changes: Iterable[DocumentChange]
) -> List[Record]:
    """
    Applies changes in order and returns a new record list.

    Args:
        records: Current records, ids are unique
        changes: One snapshot batch

    Returns:
        List[Record]: New list, ids still unique
    """
    result = list(records)

    for change in changes:
        record = change.to_record()

        if change.type is ChangeType.ADDED:
            index = find_record_index(result, record.id)
            if index is None:
                result.append(record)
            else:
                logger.debug(f"Record {record.id} added twice, replacing")
                result[index] = record

        elif change.type is ChangeType.MODIFIED:
            index = find_record_index(result, record.id)
            if index is None:
                logger.warning(
                    f"Modified record {record.id} is not in the list, change skipped"
                )
                continue
            result[index] = record

        elif change.type is ChangeType.REMOVED:
            before = len(result)
            result = [r for r in result if r.id != record.id]
            if len(result) == before:
                logger.debug(f"Removed record {record.id} was not in the list")

    return result
