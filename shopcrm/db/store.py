"""
Record Store - In-memory collections for the lifetime of the process.
Each collection is an immutable tuple that is replaced wholesale on every change.
"""

from contextlib import contextmanager
import logging
import uuid
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

COLLECTIONS = ('clients', 'projects', 'inventory', 'events')


class RecordStore:
    """
    Holds the ordered collections (clients, projects, inventory, events).

    Readers get the current tuple. Writers go through edit(), which hands out a
    working copy and swaps it in only when the block finishes cleanly.
    """

    def __init__(self):
        self._collections: Dict[str, Tuple] = {name: () for name in COLLECTIONS}

    @property
    def clients(self) -> Tuple:
        return self._collections['clients']

    @property
    def projects(self) -> Tuple:
        return self._collections['projects']

    @property
    def inventory(self) -> Tuple:
        return self._collections['inventory']

    @property
    def events(self) -> Tuple:
        return self._collections['events']

    def next_id(self, prefix: str = '') -> str:
        """Short random id, in the style of the seed ids (e.g. "k3v9x0q2a")."""
        return f"{prefix}{uuid.uuid4().hex[:9]}"

    def commit(self, collection: str, records) -> Tuple:
        """Replace a collection wholesale. Returns the new tuple."""
        if collection not in self._collections:
            raise ValueError(f"Unknown collection '{collection}'. Choose from: {', '.join(COLLECTIONS)}")
        new = tuple(records)
        old = self._collections[collection]
        self._collections[collection] = new
        logger.debug(f"commit {collection}: {len(old)} -> {len(new)} records")
        return new

    @contextmanager
    def edit(self, collection: str):
        """
        Context manager for a copy-on-write change.
        Commits the working list on success, discards it on error.

        Usage:
            with store.edit('projects') as projects:
                projects.append(project)
        """
        if collection not in self._collections:
            raise ValueError(f"Unknown collection '{collection}'. Choose from: {', '.join(COLLECTIONS)}")
        working: List = list(self._collections[collection])
        try:
            yield working
        except Exception as e:
            logger.error(f"Edit of '{collection}' discarded due to error: {e}")
            raise
        self.commit(collection, working)

    def find(self, collection: str, record_id: str) -> Optional[object]:
        """Look up a record by id. Returns None when absent."""
        for record in self._collections[collection]:
            if record.id == record_id:
                return record
        return None

