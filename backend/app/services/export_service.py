from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font

from app.schemas.models import ParsedTransaction

HEADERS = ["Date (UTC)", "Hash", "Direction", "Amount (ADA)", "Fees (ADA)", "Message", "Status", "Confirmations"]


class ExportService:
    def build_workbook_bytes(self, transactions: list[ParsedTransaction], wallet_address: str) -> bytes:
        wb = Workbook()
        ws = wb.active
        ws.title = "Transactions"

        ws.append(HEADERS)
        for cell in ws[1]:
            cell.font = Font(bold=True)

        for tx in transactions:
            ws.append(
                [
                    self._format_date(tx.timestamp),
                    tx.hash,
                    self._direction(tx, wallet_address),
                    self._to_number(tx.amount),
                    self._to_number(tx.fees),
                    tx.message or "",
                    tx.status,
                    tx.confirmations,
                ]
            )

        ws.freeze_panes = "A2"
        ws.column_dimensions["B"].width = 66
        ws.column_dimensions["F"].width = 40

        out = BytesIO()
        wb.save(out)
        return out.getvalue()

    @staticmethod
    def _format_date(timestamp_ms: int) -> str:
        return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

    @staticmethod
    def _direction(tx: ParsedTransaction, wallet_address: str) -> str:
        if tx.recipient == wallet_address and tx.sender != wallet_address:
            return "received"
        if tx.sender == wallet_address:
            return "sent"
        return "unknown"

    @staticmethod
    def _to_number(value: str) -> float | str:
        try:
            return float(Decimal(value))
        except (InvalidOperation, ValueError):
            return value
