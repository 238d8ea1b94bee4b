from __future__ import annotations

from decimal import Decimal, InvalidOperation

from app.schemas.models import DashboardSummary, FlowTotals, ParsedTransaction, StatusCategory

# Checked in order; the first matching group wins
ERROR_CATEGORIES: list[tuple[tuple[str, ...], str]] = [
    (("insufficient", "depleted"), "Insufficient Funds"),
    (("declined", "cancelled"), "User Cancelled"),
    (("network", "connection"), "Network Issues"),
    (("address", "invalid"), "Invalid Address"),
    (("timeout",), "Timeout"),
]


def error_category(error_message: str | None) -> str:
    message = (error_message or "").lower()
    for needles, label in ERROR_CATEGORIES:
        if any(needle in message for needle in needles):
            return label
    return "Other Errors"


def _amount(tx: ParsedTransaction) -> Decimal:
    try:
        return Decimal(tx.amount)
    except (InvalidOperation, ValueError):
        return Decimal(0)


def _totals(transactions: list[ParsedTransaction]) -> FlowTotals:
    total = sum((_amount(tx) for tx in transactions), Decimal(0))
    return FlowTotals(count=len(transactions), total_ada=round(float(total), 2))


def summarize(transactions: list[ParsedTransaction], wallet_address: str) -> DashboardSummary:
    successful = [tx for tx in transactions if tx.status == "success"]
    return DashboardSummary(
        sent=_totals([tx for tx in successful if tx.sender == wallet_address]),
        received=_totals([tx for tx in successful if tx.recipient == wallet_address]),
        failed=sum(1 for tx in transactions if tx.status == "failed"),
        pending=sum(1 for tx in transactions if tx.status == "pending"),
    )


def status_categories(transactions: list[ParsedTransaction]) -> list[StatusCategory]:
    categories = [
        StatusCategory(
            title="Successful Transactions",
            transactions=[tx for tx in transactions if tx.status == "success"],
            color="bg-green-100 border-green-300 text-green-800",
            icon="✅",
        ),
        StatusCategory(
            title="Pending Transactions",
            transactions=[tx for tx in transactions if tx.status == "pending"],
            color="bg-yellow-100 border-yellow-300 text-yellow-800",
            icon="⏳",
        ),
    ]

    failed_by_error: dict[str, list[ParsedTransaction]] = {}
    for tx in transactions:
        if tx.status == "failed":
            failed_by_error.setdefault(error_category(tx.error_message), []).append(tx)

    for label, txs in failed_by_error.items():
        categories.append(
            StatusCategory(
                title=f"Failed: {label}",
                transactions=txs,
                color="bg-red-100 border-red-300 text-red-800",
                icon="❌",
            )
        )
    return categories
