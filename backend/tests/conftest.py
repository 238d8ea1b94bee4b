"""Pytest fixtures and configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Generator
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from app.repositories.history_repo import HistoryRepository
from app.schemas.models import ParsedTransaction

WALLET = "addr_test1qzwallet000000000000000000000000000000000000000000000"
RECIPIENT = "addr_test1qrecipient0000000000000000000000000000000000000000000"

CONFIG_ENV_VARS = [
    "BLOCKFROST_API_KEY",
    "BLOCKFROST_MAINNET_API_KEY",
    "AI_API_KEY",
    "OPENAI_API_KEY",
    "GROQ_API_KEY",
    "ANTHROPIC_API_KEY",
    "GOOGLE_CLOUD_PROJECT",
    "VERTEX_PROJECT",
    "DEFAULT_AI_PROVIDER",
    "HISTORY_PATH",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path) -> None:
    """Start every test without explorer or LLM credentials."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HISTORY_PATH", str(tmp_path / "history.json"))


@pytest.fixture
def wallet_address() -> str:
    return WALLET


@pytest.fixture
def sample_utxos() -> dict[str, Any]:
    """UTXO payload where the wallet spends 10 ADA and receives 6.5 ADA change."""
    return {
        "hash": "abc123",
        "inputs": [
            {
                "address": WALLET,
                "amount": [{"unit": "lovelace", "quantity": "10000000"}],
            },
        ],
        "outputs": [
            {
                "address": RECIPIENT,
                "amount": [{"unit": "lovelace", "quantity": "3300000"}],
            },
            {
                "address": WALLET,
                "amount": [
                    {"unit": "lovelace", "quantity": "6500000"},
                    {"unit": "a0028f350aaabe0545fdcb56b039bfb08e4bb4d8c4d7c3c7d481c235484f534b59", "quantity": "42"},
                ],
            },
        ],
    }


@pytest.fixture
def sample_transactions() -> list[ParsedTransaction]:
    """Explorer-shaped history for the wallet."""
    return [
        ParsedTransaction(
            id="tx1",
            hash="tx1",
            timestamp=1_700_000_000_000,
            amount="25.0",
            recipient=RECIPIENT,
            sender=WALLET,
            message="Payment for coffee and lunch",
            status="success",
            fees="0.2",
            network="preprod",
            block_height=100,
            confirmations=5,
        ),
        ParsedTransaction(
            id="tx2",
            hash="tx2",
            timestamp=1_700_000_100_000,
            amount="75.0",
            recipient=WALLET,
            sender=RECIPIENT,
            message="Salary payment received",
            status="success",
            fees="0.19",
            network="preprod",
            block_height=101,
            confirmations=4,
        ),
        ParsedTransaction(
            id="tx3",
            hash="tx3",
            timestamp=1_700_000_200_000,
            amount="20.0",
            recipient=RECIPIENT,
            sender=WALLET,
            message="  ",
            status="failed",
            fees="0.2",
            network="preprod",
            block_height=0,
            confirmations=0,
            error_message="Insufficient funds in wallet",
        ),
        ParsedTransaction(
            id="tx4",
            hash="tx4",
            timestamp=1_700_000_300_000,
            amount="3.5",
            recipient=RECIPIENT,
            sender=WALLET,
            message="Dinner at restaurant",
            status="success",
            fees="0.14",
            network="preprod",
            block_height=102,
            confirmations=3,
        ),
    ]


@pytest.fixture
def mock_category_response() -> list[dict[str, Any]]:
    """Parsed LLM categorization results for three memos."""
    return [
        {"transactionIndex": 1, "category": "Food & Dining", "confidence": 0.9, "reasoning": "Meal purchase"},
        {"transactionIndex": 2, "category": "Business & Work", "confidence": 0.95, "reasoning": "Salary"},
        {"transactionIndex": 3, "category": "Food & Dining", "confidence": 0.8, "reasoning": "Restaurant"},
    ]


@pytest.fixture
def mock_blockfrost_client() -> MagicMock:
    """BlockfrostClient stand-in with a one-transaction history."""
    client = MagicMock()
    client.network = "preprod"
    client.address_transactions.return_value = [
        {"tx_hash": "abc123", "tx_index": 0, "block_height": 1000, "block_time": 1_700_000_000},
    ]
    client.transaction.return_value = {"hash": "abc123", "fees": "200000"}
    client.transaction_metadata.return_value = [
        {"label": "674", "json_metadata": {"msg": ["Coffee", "with", "Sam"]}},
    ]
    client.latest_block.return_value = {"height": 1010}
    client.address_info.return_value = {
        "address": WALLET,
        "amount": [{"unit": "lovelace", "quantity": "50000000"}],
    }
    client.submit_transaction.return_value = "f" * 64
    return client


@pytest.fixture
def history_repo(tmp_path: Path) -> HistoryRepository:
    return HistoryRepository(tmp_path / "history.json")


@pytest.fixture
def mock_services(history_repo) -> Generator[dict[str, Any], None, None]:
    """Patch the route-level service getters with mocks."""
    mock_ledger = MagicMock()
    mock_inference = MagicMock()
    mock_transfers = MagicMock()

    with patch("app.api.routes.get_ledger", return_value=mock_ledger), \
         patch("app.api.routes.get_inference", return_value=mock_inference), \
         patch("app.api.routes.get_transfers", return_value=mock_transfers), \
         patch("app.api.routes.get_history", return_value=history_repo):
        yield {
            "ledger": mock_ledger,
            "inference": mock_inference,
            "transfers": mock_transfers,
            "history": history_repo,
        }


@pytest.fixture
def client(mock_services) -> TestClient:
    from app.main import app

    return TestClient(app)
