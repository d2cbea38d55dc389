"""Shared fixtures for the ingestion service tests."""

from datetime import datetime, timedelta

import pytest

from portfolio_ingest.core.config import ErrorPolicy, load_settings
from portfolio_ingest.core.errors import FetchError
from portfolio_ingest.services.storage import Storage

WALLET_A = "0x00000000000000000000000000000000000000aa"
WALLET_B = "0x00000000000000000000000000000000000000bb"
WALLET_C = "0x00000000000000000000000000000000000000cc"


class FakeFetcher:
    """Returns canned payloads and records every address it was asked for."""

    def __init__(self, payloads=None, fail_on=()):
        self.payloads = payloads or {}
        self.fail_on = set(fail_on)
        self.calls = []

    def fetch(self, address: str) -> str:
        self.calls.append(address)
        if address in self.fail_on:
            raise FetchError(f"boom for {address}")
        return self.payloads.get(address, '{"address": "%s"}' % address)


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start=datetime(2024, 1, 1, 12, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "data" / "store.db"


@pytest.fixture
def storage(store_path):
    store = Storage(store_path).open([WALLET_A, WALLET_B])
    yield store
    store.close()


@pytest.fixture
def fake_fetcher():
    return FakeFetcher(payloads={WALLET_A: '{"tokens": ["a"]}', WALLET_B: '{"tokens": ["b"]}'})


@pytest.fixture
def settings(store_path):
    return load_settings(
        storage_path=store_path,
        seed_addresses=[WALLET_A, WALLET_B],
        poll_interval=3600,
        error_policy=ErrorPolicy.REPORT,
    )
