"""Shared fixtures for night-canteen tests."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from canteen.config import SubmissionConfig
from canteen.persistence import SessionStorage, SubmissionLedger
from canteen.submission import SubmissionClient

PRIMARY_URL = "https://sheets.example/exec"
BACKUP_URL = "https://backup.example/api/orders"


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def storage():
    store = SessionStorage()
    yield store
    store.close()


@pytest.fixture
def ledger(storage: SessionStorage) -> SubmissionLedger:
    return SubmissionLedger(storage)


@pytest.fixture
def primary_url() -> str:
    return PRIMARY_URL


@pytest.fixture
def backup_url() -> str:
    return BACKUP_URL


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_submitter(ledger: SubmissionLedger, sleeper: RecordingSleep):
    """Build a SubmissionClient whose HTTP calls go to ``handler``."""

    def factory(handler: Callable[[httpx.Request], object], **config_overrides: object) -> SubmissionClient:
        config = SubmissionConfig(url=PRIMARY_URL, **config_overrides)
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return SubmissionClient(ledger, config=config, client=client, sleep=sleeper)

    return factory


@pytest.fixture
def order_payload() -> dict[str, object]:
    return {
        "name": "Asha",
        "room": "B-204",
        "mobile": "98765 43210",
        "order": "Maggie Noodles (x2)",
        "total": 24,
        "items": [{"id": 1, "name": "Maggie Noodles", "price": 12, "quantity": 2}],
        "timestamp": "19/10/2026, 11:05:00 PM",
    }
