"""
Shared fixtures for unit tests.

- now: fixed clock (NOW) every seeded record is relative to
- store: RecordStore filled with the demo data at NOW
- empty_store: RecordStore with every collection empty
"""

from datetime import datetime

import pytest

from shopcrm.db.store import RecordStore
from shopcrm.db.seed import seed_store

NOW = datetime(2026, 3, 10, 12, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def store():
    return seed_store(RecordStore(), now=NOW)


@pytest.fixture
def empty_store():
    return RecordStore()
