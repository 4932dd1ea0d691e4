"""Shared fixtures: isolated stores, a zero-latency service, fixed randomness."""

from __future__ import annotations

import random

import pytest

from db.session import InMemoryKeyValueStore
from services.analysis import AnalysisService, LatencyProfile
from services.history import HistoryStore
from services.sentiment import SentimentService


class FixedRandom(random.Random):
    """Random source whose ``uniform`` always lands on the same fraction."""

    def __init__(self, fraction: float = 0.5):
        super().__init__(0)
        self.fraction = fraction
        self.calls = 0

    def uniform(self, a, b):
        self.calls += 1
        return a + (b - a) * self.fraction


@pytest.fixture
def fixed_rng() -> FixedRandom:
    return FixedRandom()


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def history(kv_store) -> HistoryStore:
    return HistoryStore(kv_store)


@pytest.fixture
def service(kv_store, fixed_rng) -> AnalysisService:
    return AnalysisService(
        kv_store,
        scorer=SentimentService(rng=fixed_rng),
        latency=LatencyProfile.none(),
    )
