from __future__ import annotations

from decimal import Decimal
from typing import Any

from app.core.config import ADDRESS_PREFIXES
from app.core.exceptions import ExplorerError, TransferError, ValidationError
from app.core.logging import LogContext, get_logger
from app.core.utils import LOVELACE_PER_ADA, ada_to_lovelace, parse_ada
from app.repositories.history_repo import HistoryRepository
from app.services.ledger_service import MEMO_METADATA_LABEL, LedgerService

logger = get_logger("memoledger.services.transfer")

FEE_BUFFER_ADA = Decimal(2)


def friendly_error(message: str) -> str:
    """Translate wallet/node error text into a message for the user."""
    if "UTxO Fully Depleted" in message:
        return (
            "Insufficient funds. Please ensure you have enough ADA to cover the "
            "transaction amount plus network fees (~2 ADA)."
        )
    if "insufficient funds" in message:
        return "Insufficient funds in your wallet."
    if "User declined" in message:
        return "Transaction was cancelled by user."
    return message or "Transaction failed"


def build_memo_metadata(message: str | None) -> dict[str, Any] | None:
    if not message or not message.strip():
        return None
    return {MEMO_METADATA_LABEL: {"msg": [message.strip()]}}


def validate_recipient(recipient: str, network: str) -> None:
    prefix = ADDRESS_PREFIXES.get(network)
    if prefix is None:
        raise ValidationError(f"Unsupported network: {network}")
    if not recipient.startswith(prefix):
        raise ValidationError(
            f'Invalid {network} address format. Address must start with "{prefix}"'
        )


def validate_amount(amount: str) -> Decimal:
    try:
        value = parse_ada(amount)
    except ValueError as e:
        raise ValidationError("Amount must be greater than 0") from e
    if value <= 0:
        raise ValidationError("Amount must be greater than 0")
    # Lovelace is indivisible
    if (value * LOVELACE_PER_ADA) % 1 != 0:
        raise ValidationError(
            "Amount cannot have more than 6 decimal places",
            details={"amount": amount},
        )
    return value


class TransferService:
    def __init__(self, ledger: LedgerService, history: HistoryRepository) -> None:
        self.ledger = ledger
        self.history = history

    def prepare_transfer(
        self,
        sender_address: str,
        recipient: str,
        amount: str,
        message: str | None = None,
        network: str = "preprod",
    ) -> dict[str, Any]:
        """Validate a transfer and return what the wallet needs to build it."""
        validate_recipient(recipient, network)
        amount_ada = validate_amount(amount)

        balance_lovelace = self.ledger.balance_lovelace(sender_address, network)
        balance_ada = Decimal(balance_lovelace) / LOVELACE_PER_ADA
        min_required = amount_ada + FEE_BUFFER_ADA
        if balance_ada < min_required:
            raise ValidationError(
                f"Insufficient balance. You have {balance_ada:.6f} ADA, but need at least "
                f"{min_required:.6f} ADA (including ~2 ADA for fees)",
                details={"balance": str(balance_ada), "required": str(min_required)},
            )

        metadata = build_memo_metadata(message)
        if metadata:
            logger.info(f"Adding metadata to transaction: {metadata}")
        return {
            "recipient": recipient,
            "amount": amount,
            "lovelace": str(ada_to_lovelace(amount_ada)),
            "metadata": metadata,
            "network": network,
        }

    def submit_transfer(
        self,
        signed_tx: str,
        recipient: str,
        amount: str,
        message: str | None = None,
        network: str = "preprod",
    ) -> dict[str, Any]:
        """Submit a wallet-signed transaction and record the outcome."""
        try:
            with LogContext(logger, "submit_transfer", recipient=recipient, network=network):
                tx_hash = self.ledger.submit_transaction(signed_tx, network)
        except (ExplorerError, ValidationError) as e:
            error_message = friendly_error(self._error_text(e))
            self.history.add(
                {
                    "network": network,
                    "amount": amount,
                    "recipient": recipient,
                    "message": message or None,
                    "status": "failed",
                    "error_message": error_message,
                }
            )
            raise TransferError(error_message) from e

        return self.history.add(
            {
                "network": network,
                "amount": amount,
                "recipient": recipient,
                "message": message or None,
                "status": "success",
                "tx_hash": tx_hash,
            }
        )

    def record_failure(
        self,
        recipient: str,
        amount: str,
        error: str,
        message: str | None = None,
        network: str = "preprod",
    ) -> dict[str, Any]:
        logger.warning(f"Transaction failed: {error}")
        return self.history.add(
            {
                "network": network,
                "amount": amount,
                "recipient": recipient,
                "message": message or None,
                "status": "failed",
                "error_message": friendly_error(error),
            }
        )

    @staticmethod
    def _error_text(error: Exception) -> str:
        # Node rejections carry the useful text in the response body
        body = getattr(error, "details", {}).get("body")
        return f"{error} {body}".strip() if body else str(error)
