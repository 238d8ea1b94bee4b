from __future__ import annotations

import time
from typing import Any, Callable

from app.adapters.blockfrost import BlockfrostClient
from app.core.config import is_blockfrost_available
from app.core.exceptions import ExplorerError, ValidationError
from app.core.logging import LogContext, get_logger, short_address
from app.core.utils import format_ada, lovelace_quantity
from app.schemas.models import ParsedTransaction

logger = get_logger("memoledger.services.ledger")

MEMO_METADATA_LABEL = "674"
UNKNOWN_RECIPIENT = "Unknown Recipient"


def net_amount_lovelace(utxos: dict[str, Any], address: str) -> int:
    """Net lovelace moved to or from ``address`` by one transaction.

    Sums the lovelace of outputs paid to the address and of inputs spent
    from it, and returns the absolute difference.
    """
    received = sum(
        lovelace_quantity(output.get("amount"))
        for output in utxos.get("outputs", [])
        if output.get("address") == address
    )
    spent = sum(
        lovelace_quantity(inp.get("amount"))
        for inp in utxos.get("inputs", [])
        if inp.get("address") == address
    )
    return abs(received - spent)


def net_amount_ada(utxos: dict[str, Any], address: str) -> str:
    return format_ada(net_amount_lovelace(utxos, address))


def extract_message(metadata: list[dict[str, Any]]) -> str | None:
    """Return the memo stored under metadata label 674, if any."""
    for meta in metadata or []:
        if str(meta.get("label")) != MEMO_METADATA_LABEL:
            continue
        payload = meta.get("json_metadata")
        if not payload:
            continue
        if isinstance(payload, dict) and isinstance(payload.get("msg"), list):
            return " ".join(str(part) for part in payload["msg"])
        if isinstance(payload, str):
            return payload
    return None


class LedgerService:
    def __init__(self, client_factory: Callable[[str], BlockfrostClient] | None = None) -> None:
        self._client_factory = client_factory or BlockfrostClient.for_network
        self._clients: dict[str, BlockfrostClient] = {}

    def client(self, network: str = "preprod") -> BlockfrostClient:
        if network not in self._clients:
            self._clients[network] = self._client_factory(network)
        return self._clients[network]

    def get_transactions(
        self,
        address: str,
        network: str = "preprod",
        page: int = 1,
        count: int = 50,
    ) -> tuple[list[ParsedTransaction], str]:
        """Return the address history and its source ("blockfrost" or "mock")."""
        if is_blockfrost_available():
            return self.fetch_address_transactions(address, network, page, count), "blockfrost"
        logger.info("Blockfrost key not configured, serving demo transactions")
        return get_mock_transactions(address), "mock"

    def fetch_address_transactions(
        self,
        address: str,
        network: str = "preprod",
        page: int = 1,
        count: int = 50,
    ) -> list[ParsedTransaction]:
        client = self.client(network)
        with LogContext(logger, "fetch_address_transactions", address=address, network=network):
            rows = client.address_transactions(address, page=page, count=count)
            latest_height: int | None = None
            parsed: list[ParsedTransaction] = []

            for row in rows:
                tx_hash = row.get("tx_hash", "")
                try:
                    details = client.transaction(tx_hash)
                    metadata = self._fetch_metadata(client, tx_hash)
                    if latest_height is None:
                        latest_height = int(client.latest_block().get("height", 0))
                    block_height = int(row.get("block_height", 0))
                    parsed.append(
                        ParsedTransaction(
                            id=tx_hash,
                            hash=tx_hash,
                            timestamp=int(row.get("block_time", 0)) * 1000,
                            amount=self.transaction_amount(client, tx_hash, address),
                            recipient=UNKNOWN_RECIPIENT,
                            sender=address,
                            message=extract_message(metadata),
                            status="success",
                            fees=format_ada(int(details.get("fees", "0") or 0)),
                            network=network,
                            block_height=block_height,
                            confirmations=latest_height - block_height,
                        )
                    )
                except (ExplorerError, ValueError, TypeError) as e:
                    logger.error(f"Error parsing transaction {tx_hash}: {e}")

            logger.info(f"Parsed {len(parsed)}/{len(rows)} transactions for {short_address(address)}")
            return parsed

    @staticmethod
    def _fetch_metadata(client: BlockfrostClient, tx_hash: str) -> list[dict[str, Any]]:
        try:
            return client.transaction_metadata(tx_hash)
        except ExplorerError as e:
            logger.error(f"Error fetching transaction metadata for {tx_hash}: {e}")
            return []

    @staticmethod
    def transaction_amount(client: BlockfrostClient, tx_hash: str, address: str) -> str:
        try:
            return net_amount_ada(client.transaction_utxos(tx_hash), address)
        except (ExplorerError, ValueError) as e:
            logger.error(f"Error calculating transaction amount for {tx_hash}: {e}")
            return "0"

    def net_amount(self, tx_hash: str, address: str, network: str = "preprod") -> int:
        """Net lovelace for ``address`` in ``tx_hash``; explorer errors propagate."""
        return net_amount_lovelace(self.client(network).transaction_utxos(tx_hash), address)

    def balance_lovelace(self, address: str, network: str = "preprod") -> int:
        info = self.client(network).address_info(address)
        amounts = info.get("amount") or []
        if not amounts:
            raise ValidationError("No balance data received from wallet")
        if not any(entry.get("unit") == "lovelace" for entry in amounts):
            raise ValidationError("No ADA (lovelace) found in wallet")
        return lovelace_quantity(amounts)

    def submit_transaction(self, cbor_hex: str, network: str = "preprod") -> str:
        return self.client(network).submit_transaction(cbor_hex)


_MOCK_ROWS: list[dict[str, Any]] = [
    {
        "id": "payment_001",
        "hash": "a1b2c3d4e5f6789012345678901234567890123456789012345678901234abcd",
        "age_ms": 3_600_000,
        "amount": "25.0",
        "recipient": "addr_test1qpw3sjcca3w0lkqfqfmu8me4m9vz4g2z8kqlu9l2j8h4z9kx7l8f9",
        "message": "Payment for coffee and lunch",
        "fees": "0.2",
        "block_height": 98765,
        "confirmations": 15,
    },
    {
        "id": "payment_002",
        "hash": "b2c3d4e5f67890123456789012345678901234567890123456789012345bcde",
        "age_ms": 7_200_000,
        "amount": "50.0",
        "recipient": "addr_test1qqz4w3m6r8t9y5u7i1o3p4a5s6d7f8g9h0j2k3l4m5n6b8c9d0e1f2",
        "message": "Rent payment for this month",
        "fees": "0.18",
        "block_height": 98760,
        "confirmations": 20,
    },
    {
        "id": "payment_003",
        "hash": "c3d4e5f678901234567890123456789012345678901234567890123456cdef",
        "age_ms": 86_400_000,
        "amount": "5.5",
        "recipient": "addr_test1qr5t6y7u8i9o0p1q2w3e4r5t6y7u8i9o0p1q2w3e4r5t6y7u8i9o0",
        "message": "Gift for birthday",
        "fees": "0.15",
        "block_height": 98650,
        "confirmations": 120,
    },
    {
        "id": "payment_004",
        "hash": "d4e5f67890123456789012345678901234567890123456789012345678def0",
        "age_ms": 172_800_000,
        "amount": "15.75",
        "recipient": "addr_test1qqs6d7f8g9h0j1k2l3m4n5b6v7c8x9z0a1s2d3f4g5h6j7k8l9m0",
        "message": "Freelance work payment",
        "fees": "0.22",
        "block_height": 98500,
        "confirmations": 280,
    },
    {
        "id": "payment_005",
        "hash": "e5f6789012345678901234567890123456789012345678901234567890ef01",
        "age_ms": 259_200_000,
        "amount": "8.25",
        "recipient": "addr_test1qqg7h8j9k0l1m2n3b4v5c6x7z8a9s0d1f2g3h4j5k6l7m8n9b0v1",
        "message": "Dinner at restaurant",
        "fees": "0.17",
        "block_height": 98400,
        "confirmations": 380,
    },
    {
        "id": "payment_006",
        "hash": "f67890123456789012345678901234567890123456789012345678901234f012",
        "age_ms": 345_600_000,
        "amount": "100.0",
        "recipient": "addr_test1qqx8z9a0s1d2f3g4h5j6k7l8m9n0b1v2c3x4z5a6s7d8f9g0h1j2k3",
        "message": "Investment in crypto portfolio",
        "fees": "0.25",
        "block_height": 98300,
        "confirmations": 480,
    },
    {
        "id": "received_001",
        "hash": "789012345678901234567890123456789012345678901234567890123456780",
        "age_ms": 432_000_000,
        "amount": "75.0",
        "sender": "addr_test1qqa9s0d1f2g3h4j5k6l7m8n9b0v1c2x3z4a5s6d7f8g9h0j1k2l3m4",
        "message": "Salary payment received",
        "fees": "0.19",
        "block_height": 98200,
        "confirmations": 580,
    },
    {
        "id": "payment_007",
        "hash": "890123456789012345678901234567890123456789012345678901234567890",
        "age_ms": 518_400_000,
        "amount": "3.5",
        "recipient": "addr_test1qqb0v1c2x3z4a5s6d7f8g9h0j1k2l3m4n5b6v7c8x9z0a1s2d3f4g5",
        "message": "Tip for delivery",
        "fees": "0.14",
        "block_height": 98100,
        "confirmations": 680,
    },
    {
        "id": "failed_001",
        "hash": "901234567890123456789012345678901234567890123456789012345678901",
        "age_ms": 604_800_000,
        "amount": "20.0",
        "recipient": "addr_test1qqc1x2z3a4s5d6f7g8h9j0k1l2m3n4b5v6c7x8z9a0s1d2f3g4h5j6",
        "message": "Testing transaction - failed",
        "fees": "0.2",
        "block_height": 98000,
        "confirmations": 0,
        "status": "failed",
        "error_message": "Insufficient funds in wallet",
    },
]


def get_mock_transactions(address: str, now_ms: int | None = None) -> list[ParsedTransaction]:
    """Demo history used when no explorer key is configured."""
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    transactions = []
    for row in _MOCK_ROWS:
        transactions.append(
            ParsedTransaction(
                id=row["id"],
                hash=row["hash"],
                timestamp=now_ms - row["age_ms"],
                amount=row["amount"],
                recipient=row.get("recipient", address),
                sender=row.get("sender", address),
                message=row["message"],
                status=row.get("status", "success"),
                fees=row["fees"],
                network="preprod",
                block_height=row["block_height"],
                confirmations=row["confirmations"],
                error_message=row.get("error_message"),
            )
        )
    return transactions
