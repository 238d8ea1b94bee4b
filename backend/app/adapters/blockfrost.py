from __future__ import annotations

from typing import Any

import requests

from app.core.config import BlockfrostConfig, get_blockfrost_config
from app.core.exceptions import ExplorerError, ExplorerNotFoundError, ValidationError
from app.core.logging import get_logger, mask_secret

logger = get_logger("memoledger.adapters.blockfrost")


class BlockfrostClient:
    """Thin wrapper over the Blockfrost REST API for one network."""

    def __init__(self, config: BlockfrostConfig, session: requests.Session | None = None) -> None:
        self.config = config
        self.base_url = config.url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({"project_id": config.api_key})
        logger.info(
            f"Initialized BlockfrostClient for {config.network} with key: {mask_secret(config.api_key)}"
        )

    @classmethod
    def for_network(cls, network: str = "preprod") -> "BlockfrostClient":
        return cls(get_blockfrost_config(network))

    @property
    def network(self) -> str:
        return self.config.network

    def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        try:
            response = self.session.get(url, params=params, timeout=self.config.timeout)
        except requests.RequestException as e:
            logger.error(f"Blockfrost GET {endpoint} failed: {e}")
            raise ExplorerError(
                f"Blockfrost request failed: {e}",
                details={"endpoint": endpoint},
            ) from e
        self._raise_for_status(response, f"GET {endpoint}")
        return response.json()

    def post_cbor(self, endpoint: str, payload: bytes) -> Any:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        try:
            response = self.session.post(
                url,
                data=payload,
                headers={"Content-Type": "application/cbor"},
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Blockfrost POST {endpoint} failed: {e}")
            raise ExplorerError(
                f"Blockfrost request failed: {e}",
                details={"endpoint": endpoint},
            ) from e
        self._raise_for_status(response, f"POST {endpoint}")
        return response.json()

    @staticmethod
    def _raise_for_status(response: requests.Response, operation: str) -> None:
        if 200 <= response.status_code < 300:
            return
        body = response.text[:280]
        logger.error(f"Blockfrost {operation} failed ({response.status_code}): {body}")
        error_cls = ExplorerNotFoundError if response.status_code == 404 else ExplorerError
        raise error_cls(
            f"Blockfrost API error: {response.status_code} {response.reason or ''}".strip(),
            status_code=response.status_code,
            details={"operation": operation, "body": body},
        )

    def address_transactions(
        self,
        address: str,
        page: int = 1,
        count: int = 50,
        order: str = "desc",
    ) -> list[dict[str, Any]]:
        return self.get(
            f"addresses/{address}/transactions",
            {"page": page, "count": count, "order": order},
        )

    def address_info(self, address: str) -> dict[str, Any]:
        return self.get(f"addresses/{address}")

    def transaction(self, tx_hash: str) -> dict[str, Any]:
        return self.get(f"txs/{tx_hash}")

    def transaction_metadata(self, tx_hash: str) -> list[dict[str, Any]]:
        try:
            return self.get(f"txs/{tx_hash}/metadata")
        except ExplorerNotFoundError:
            return []

    def transaction_utxos(self, tx_hash: str) -> dict[str, Any]:
        return self.get(f"txs/{tx_hash}/utxos")

    def latest_block(self) -> dict[str, Any]:
        return self.get("blocks/latest")

    def submit_transaction(self, cbor_hex: str) -> str:
        try:
            payload = bytes.fromhex(cbor_hex.strip())
        except ValueError as e:
            raise ValidationError("Signed transaction is not valid CBOR hex") from e
        tx_hash = self.post_cbor("tx/submit", payload)
        logger.info(f"Submitted transaction {tx_hash} on {self.network}")
        return str(tx_hash)
