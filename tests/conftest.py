import os
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Ensure project root is on sys.path so tests can import 'oee_tracker' package
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Point the app at a throwaway sqlite file before anything imports settings
os.environ["DATABASE_URL"] = "sqlite:///./test_oee.db"

from oee_tracker.db import Base, engine, SessionLocal
from oee_tracker.core.metrics import MetricsEngine
from oee_tracker.core.notifier import Notifier
from oee_tracker.core.state_machine import OrderStateMachine


class FakeClock:
    """Deterministic clock; tests move time forward explicitly."""

    def __init__(self, start=None):
        self.now = start or datetime(2025, 3, 10, 8, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, minutes=0, seconds=0):
        self.now = self.now + timedelta(minutes=minutes, seconds=seconds)
        return self.now


class RecordingNotifier(Notifier):
    def __init__(self):
        super().__init__()
        self.events = []
        self.subscribe(lambda name, payload: self.events.append((name, payload)))

    def names(self):
        return [name for name, _ in self.events]


@pytest.fixture(autouse=True)
def reset_db():
    # Drop all and re-create so the test DB matches the current models exactly
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def events():
    return RecordingNotifier()


@pytest.fixture
def machine(db, clock, events):
    return OrderStateMachine(db, notifier=events, clock=clock, engine=MetricsEngine(reference_rate=4000))


@pytest.fixture
def make_order(machine):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        fields = {
            "order_code": f"OF-{counter['n']:04d}",
            "article_code": "ART-100",
            "product_name": "Agua 1.5L",
            "target_quantity": 4000,
            "target_boxes": 0,
        }
        fields.update(overrides)
        return machine.create(fields)

    return _make
