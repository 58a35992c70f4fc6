"""Shared test fixtures for the groupbot test suite.

WHY: Session, bot and server tests all need the same channel roster and
a fake chat platform that records what was published.

HOW: FakePlatform implements the ChatPlatform protocol in memory. Tests
set fetch_error / publish_error to simulate collaborator failures.

RULES:
- The roster has seven members with ids "A".."G"
- Randomness is seeded where a test depends on group contents
"""

import random
from typing import List, Optional, Tuple

import pytest

from groupbot.core.models import Member
from groupbot.core.sessions import SessionManager

ROSTER: List[Member] = [
    Member(id="A", name="Alice"),
    Member(id="B", name="Bob"),
    Member(id="C", name="Carol"),
    Member(id="D", name="Dave"),
    Member(id="E", name="Erin"),
    Member(id="F", name="Frank"),
    Member(id="G", name="Grace"),
]


class FakePlatform:
    """In-memory ChatPlatform that records fetches and publishes."""

    def __init__(self, roster: Optional[List[Member]] = None) -> None:
        self.roster = list(ROSTER if roster is None else roster)
        self.fetch_error: Optional[Exception] = None
        self.publish_error: Optional[Exception] = None
        self.fetched: List[str] = []
        self.published: List[Tuple[str, str]] = []

    def fetch_channel_members(self, channel_id: str) -> List[Member]:
        self.fetched.append(channel_id)
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.roster)

    def publish_message(self, channel_id: str, text: str) -> None:
        if self.publish_error is not None:
            raise self.publish_error
        self.published.append((channel_id, text))


class FakeClock:
    """Controllable replacement for time.time()."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def roster():
    return list(ROSTER)


@pytest.fixture
def platform():
    return FakePlatform()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def manager(clock):
    """SessionManager with a one-hour TTL, seeded RNG and fake clock."""
    return SessionManager(ttl_seconds=3600, rng=random.Random(42), clock=clock)
