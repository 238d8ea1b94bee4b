"""Unit tests for TransferService."""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from app.core.exceptions import ExplorerError, TransferError, ValidationError
from app.services.transfer_service import (
    TransferService,
    build_memo_metadata,
    friendly_error,
    validate_amount,
    validate_recipient,
)

from conftest import RECIPIENT, WALLET


@pytest.fixture
def ledger() -> MagicMock:
    ledger = MagicMock()
    ledger.balance_lovelace.return_value = 50_000_000
    ledger.submit_transaction.return_value = "ab" * 32
    return ledger


@pytest.fixture
def service(ledger, history_repo) -> TransferService:
    return TransferService(ledger, history_repo)


class TestValidation:
    def test_preprod_prefix(self):
        validate_recipient(RECIPIENT, "preprod")

    def test_wrong_prefix(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_recipient("addr1qxyz", "preprod")
        assert exc_info.value.message == 'Invalid preprod address format. Address must start with "addr_test1"'

    def test_mainnet_prefix(self):
        validate_recipient("addr1qxyz", "mainnet")
        with pytest.raises(ValidationError, match='must start with "addr1"'):
            validate_recipient("stake1uxyz", "mainnet")

    @pytest.mark.parametrize("amount", ["0", "-1", "abc", "", "NaN"])
    def test_rejects_bad_amounts(self, amount):
        with pytest.raises(ValidationError, match="Amount must be greater than 0"):
            validate_amount(amount)

    def test_accepts_fractional_amount(self):
        assert validate_amount("1.5") == Decimal("1.5")

    def test_accepts_one_lovelace(self):
        assert validate_amount("0.000001") == Decimal("0.000001")

    @pytest.mark.parametrize("amount", ["0.0000001", "1.0000005"])
    def test_rejects_sub_lovelace_precision(self, amount):
        with pytest.raises(ValidationError, match="more than 6 decimal places"):
            validate_amount(amount)

    def test_prepare_rejects_amount_below_one_lovelace(self, service, ledger):
        with pytest.raises(ValidationError):
            service.prepare_transfer(WALLET, RECIPIENT, "0.0000001")
        ledger.balance_lovelace.assert_not_called()


class TestMetadata:
    def test_memo_under_label_674(self):
        assert build_memo_metadata("  Rent for May ") == {"674": {"msg": ["Rent for May"]}}

    def test_blank_memo(self):
        assert build_memo_metadata("   ") is None
        assert build_memo_metadata(None) is None


class TestFriendlyError:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("UTxO Fully Depleted", "Insufficient funds. Please ensure you have enough ADA"),
            ("wallet has insufficient funds", "Insufficient funds in your wallet."),
            ("User declined to sign", "Transaction was cancelled by user."),
            ("", "Transaction failed"),
            ("Something odd", "Something odd"),
        ],
    )
    def test_messages(self, raw, expected):
        assert friendly_error(raw).startswith(expected)


class TestPrepareTransfer:
    def test_returns_wallet_payload(self, service, ledger):
        prepared = service.prepare_transfer(WALLET, RECIPIENT, "10.5", message="Dinner")

        assert prepared == {
            "recipient": RECIPIENT,
            "amount": "10.5",
            "lovelace": "10500000",
            "metadata": {"674": {"msg": ["Dinner"]}},
            "network": "preprod",
        }
        ledger.balance_lovelace.assert_called_once_with(WALLET, "preprod")

    def test_insufficient_balance(self, service, ledger):
        ledger.balance_lovelace.return_value = 10_000_000

        with pytest.raises(ValidationError) as exc_info:
            service.prepare_transfer(WALLET, RECIPIENT, "9")

        assert exc_info.value.message == (
            "Insufficient balance. You have 10.000000 ADA, but need at least "
            "11.000000 ADA (including ~2 ADA for fees)"
        )

    def test_exact_buffer_is_enough(self, service, ledger):
        ledger.balance_lovelace.return_value = 11_000_000
        assert service.prepare_transfer(WALLET, RECIPIENT, "9")["lovelace"] == "9000000"

    def test_validates_before_balance_lookup(self, service, ledger):
        with pytest.raises(ValidationError):
            service.prepare_transfer(WALLET, "addr1qmainnet", "1")
        ledger.balance_lovelace.assert_not_called()


class TestSubmitTransfer:
    def test_records_success(self, service, history_repo):
        record = service.submit_transfer("84a300", RECIPIENT, "5", message="Gift")

        assert record["status"] == "success"
        assert record["tx_hash"] == "ab" * 32
        assert history_repo.list_entries()[0]["id"] == record["id"]

    def test_records_failure_and_raises(self, service, ledger, history_repo):
        ledger.submit_transaction.side_effect = ExplorerError(
            "Blockfrost API error: 400 Bad Request",
            status_code=400,
            details={"body": "UTxO Fully Depleted"},
        )

        with pytest.raises(TransferError, match="Insufficient funds"):
            service.submit_transfer("84a300", RECIPIENT, "5")

        entry = history_repo.list_entries()[0]
        assert entry["status"] == "failed"
        assert entry["error_message"].startswith("Insufficient funds.")
        assert entry["message"] is None

    def test_invalid_cbor(self, service, ledger, history_repo):
        ledger.submit_transaction.side_effect = ValidationError("Signed transaction is not valid CBOR hex")

        with pytest.raises(TransferError, match="not valid CBOR hex"):
            service.submit_transfer("zz", RECIPIENT, "5")
        assert len(history_repo.list_entries()) == 1


class TestRecordFailure:
    def test_stores_friendly_message(self, service, history_repo):
        record = service.record_failure(RECIPIENT, "3", "User declined", message="Tip")

        assert record["error_message"] == "Transaction was cancelled by user."
        assert record["message"] == "Tip"
        assert history_repo.list_entries() == [record]
