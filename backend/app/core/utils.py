"""
Core utilities for Memo Ledger backend.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

LOVELACE_PER_ADA = 1_000_000
LOVELACE_UNIT = "lovelace"


def lovelace_quantity(amounts: list[dict[str, Any]] | None) -> int:
    """Return the lovelace quantity from an explorer ``amount`` list.

    Args:
        amounts: List of ``{"unit": ..., "quantity": ...}`` entries

    Returns:
        The lovelace quantity, or 0 when the list has no lovelace entry
    """
    for entry in amounts or []:
        if entry.get("unit") == LOVELACE_UNIT:
            return int(entry.get("quantity", "0") or 0)
    return 0


def format_ada(lovelace: int) -> str:
    """Render lovelace as an ADA string without trailing zeros."""
    ada = Decimal(lovelace) / Decimal(LOVELACE_PER_ADA)
    text = f"{ada:.6f}"
    return text.rstrip("0").rstrip(".") if "." in text else text


def format_ada_fixed(lovelace: int, places: int = 6) -> str:
    ada = Decimal(lovelace) / Decimal(LOVELACE_PER_ADA)
    return f"{ada:.{places}f}"


def parse_ada(value: Any) -> Decimal:
    """Parse a user supplied ADA amount.

    Raises:
        ValueError: If the value is not a finite decimal number
    """
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid ADA amount: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"Invalid ADA amount: {value!r}")
    return amount


def ada_to_lovelace(amount: Decimal) -> int:
    return int((amount * LOVELACE_PER_ADA).to_integral_value())
