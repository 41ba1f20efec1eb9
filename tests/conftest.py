"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
Every test gets its own SQLite database file under tmp_path and a fake wall
clock it can move forwards and backwards.
"""
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from wordledger.core.clock import TrustedClockGuard  # noqa: E402
from wordledger.db.corpus import Corpus  # noqa: E402
from wordledger.db.database import create_db_engine, init_db, make_session_factory  # noqa: E402
from wordledger.db.sql_store import SqlProgressStore  # noqa: E402
from wordledger.study.ledger import StudyLedger  # noqa: E402
from wordledger.study.quota import UnlockQuotaManager  # noqa: E402
from wordledger.study.service import WordLedgerService  # noqa: E402

DAY_MS = 24 * 60 * 60 * 1000
HOUR_MS = 60 * 60 * 1000

# 2026-02-09 12:00 UTC
BASE_MILLIS = int(datetime(2026, 2, 9, 12, 0, tzinfo=timezone.utc).timestamp() * 1000)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (file database, CLI)")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


class FakeWallClock:
    """Settable wall clock standing in for the device clock."""

    def __init__(self, now: int = BASE_MILLIS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis

    def rewind(self, millis: int) -> None:
        self.now -= millis


SAMPLE_CORPUS = {
    "levels": [
        {"name": "Grade 1"},
        {
            "name": "Unit 1",
            "parent": "Grade 1",
            "items": [
                {"prompt": "apple", "answer": "りんご"},
                {"prompt": "book", "answer": "本"},
                {"prompt": "cat", "answer": "猫"},
                {"prompt": "dog", "answer": "犬"},
                {"prompt": "egg", "answer": "卵"},
            ],
        },
        {
            "name": "Unit 2",
            "parent": "Grade 1",
            "items": [
                {"prompt": "fish", "answer": "魚"},
                {"prompt": "go", "answer": "行く"},
            ],
        },
    ]
}


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'ledger.db'}"


@pytest.fixture
def engine(db_url):
    engine = create_db_engine(db_url)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return SqlProgressStore(make_session_factory(engine))


@pytest.fixture
def wall_clock():
    return FakeWallClock()


@pytest.fixture
def clock(store, wall_clock):
    return TrustedClockGuard(store, wall_clock)


@pytest.fixture
def sample_corpus():
    return Corpus.model_validate(SAMPLE_CORPUS)


@pytest.fixture
def seeded_store(store, sample_corpus):
    """Store holding the sample corpus: levels 1-3, items 1-5 in level 2, items 6-7 in level 3."""
    store.run_in_transaction(lambda tx: store.seed_corpus(sample_corpus, tx))
    return store


@pytest.fixture
def ledger(seeded_store, clock):
    return StudyLedger(seeded_store, clock)


@pytest.fixture
def quota(seeded_store, clock):
    return UnlockQuotaManager(seeded_store, clock, daily_limit=3, unlock_duration_hours=3)


@pytest.fixture
def service(seeded_store, clock, ledger, quota):
    return WordLedgerService(seeded_store, clock, ledger, quota)


@pytest.fixture
def item_mastery(seeded_store):
    """Read an item's committed mastery level."""

    def read(item_id: int) -> int:
        return seeded_store.run_in_transaction(lambda tx: seeded_store.get_item(item_id, tx)).mastery_level

    return read
