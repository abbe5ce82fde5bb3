"""
Pytest configuration and shared fixtures.

This file adds the parent directory to the Python path so that tests
can import from the domain, repositories, services and api packages.
"""

import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add the project root to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from repositories.lead_store import InMemoryLeadStore  # noqa: E402
from repositories.seed_data import demo_leads, demo_users  # noqa: E402
from repositories.user_repository import InMemoryUserDirectory  # noqa: E402
from services.event_bus import EventBus  # noqa: E402
from services.lead_service import LeadService  # noqa: E402
from services.notification_service import MockWhatsAppDispatcher  # noqa: E402

OWNER_NUMBER = "919876543210"


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class SequentialIds:
    def __init__(self, prefix: str = "id") -> None:
        self.prefix = prefix
        self.count = 0

    def __call__(self) -> str:
        self.count += 1
        return f"{self.prefix}-{self.count}"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def empty_store(clock: FakeClock) -> InMemoryLeadStore:
    return InMemoryLeadStore(clock=clock, id_factory=SequentialIds())


@pytest.fixture
def seeded_store(clock: FakeClock) -> InMemoryLeadStore:
    return InMemoryLeadStore(demo_leads(), clock=clock, id_factory=SequentialIds())


@pytest.fixture
def users() -> InMemoryUserDirectory:
    return InMemoryUserDirectory(demo_users())


@pytest.fixture
def bus(clock: FakeClock) -> EventBus:
    return EventBus(clock=clock)


def make_service(store, users, bus, success_rate: float = 1.0) -> LeadService:
    dispatcher = MockWhatsAppDispatcher(store, success_rate=success_rate, rng=random.Random(7))
    return LeadService(
        store=store,
        users=users,
        dispatcher=dispatcher,
        bus=bus,
        owner_number=OWNER_NUMBER,
    )


@pytest.fixture
def service(seeded_store, users, bus) -> LeadService:
    """Seeded service whose WhatsApp sends always succeed."""
    return make_service(seeded_store, users, bus)


@pytest.fixture
def service_factory(seeded_store, users, bus):
    """Build a seeded service with a chosen WhatsApp success rate."""

    def build(success_rate: float = 1.0) -> LeadService:
        return make_service(seeded_store, users, bus, success_rate=success_rate)

    return build
