"""
Pytest configuration and shared fixtures.
"""
import pytest
from httpx import AsyncClient, ASGITransport

from events_api.api.main import app, get_event_store
from events_api.infrastructure.persistence.memory_store import InMemoryEventStore


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def store():
    return InMemoryEventStore()


@pytest.fixture
async def client(store):
    """Async HTTP client for testing FastAPI endpoints against an in-memory store."""
    app.dependency_overrides[get_event_store] = lambda: store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def nft_transfer_row(timestamp, receipt_id, old_owner_id="alice.near", new_owner_id="bob.near", **overrides):
    row = {
        "transaction_id": f"tx-{receipt_id}",
        "receipt_id": receipt_id,
        "block_height": 1000 + timestamp,
        "timestamp": timestamp,
        "contract_id": "nft.near",
        "old_owner_id": old_owner_id,
        "new_owner_id": new_owner_id,
        "token_ids": ["1"],
        "memo": None,
        "token_prices_near": ["0"],
    }
    row.update(overrides)
    return row


def nft_mint_row(timestamp, receipt_id, owner_id="alice.near", **overrides):
    row = {
        "transaction_id": f"tx-{receipt_id}",
        "receipt_id": receipt_id,
        "block_height": 1000 + timestamp,
        "timestamp": timestamp,
        "contract_id": "nft.near",
        "owner_id": owner_id,
        "token_ids": ["1"],
        "memo": None,
    }
    row.update(overrides)
    return row
