"""Shared fixtures for the trade tracker tests."""

import os
import tempfile

# Keep config from creating data directories inside the project
os.environ.setdefault("TRADE_TRACKER_DATA_DIR", tempfile.mkdtemp(prefix="trade-tracker-"))
os.environ.setdefault("TRADE_TRACKER_STORAGE", "memory")

import pytest

from core.storage import MemoryStore
from journal.ledger import LedgerStore
from journal.models import Decision
from tests.helpers import FakeClock


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger(store, clock):
    return LedgerStore(store, clock=clock)


@pytest.fixture
def sample_ledger(ledger, clock):
    """Capital 10000, then Win(50), Loss(20), Win(30)."""
    ledger.append(Decision.WIN, 50, 20)
    clock.advance()
    ledger.append(Decision.LOSS, 40, 20)
    clock.advance()
    ledger.append(Decision.WIN, 30, 10)
    return ledger
