from io import BytesIO
from typing import Literal

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse, StreamingResponse

from app.core.categories import AVAILABLE_CATEGORIES
from app.core.config import available_network, default_ai_provider, is_blockfrost_available
from app.core.exceptions import (
    ExplorerError,
    ExplorerNotFoundError,
    LLMError,
    MemoLedgerError,
    ProviderNotConfiguredError,
    TransferError,
    ValidationError,
)
from app.core.logging import get_logger
from app.core.utils import format_ada, format_ada_fixed
from app.repositories.history_repo import HistoryRepository
from app.schemas.models import (
    BalanceResponse,
    CategorizeRequest,
    CategorizeResponse,
    CategoryItem,
    DashboardResponse,
    HistoryEntry,
    MessageCategory,
    NetAmountResponse,
    NetworkResponse,
    PreparedTransfer,
    ProvidersResponse,
    TransactionListResponse,
    TransferFailureReport,
    TransferRequest,
    TransferSubmitRequest,
)
from app.services import dashboard_service
from app.services.export_service import ExportService
from app.services.inference_service import InferenceService, available_providers
from app.services.ledger_service import LedgerService
from app.services.transfer_service import TransferService

logger = get_logger("memoledger.api")

router = APIRouter()

NetworkParam = Literal["preprod", "mainnet"]

# Lazy initialization so importing the app never touches the network or disk
_ledger: LedgerService | None = None
_inference: InferenceService | None = None
_history: HistoryRepository | None = None
_transfers: TransferService | None = None
_export: ExportService | None = None


def get_ledger() -> LedgerService:
    global _ledger
    if _ledger is None:
        _ledger = LedgerService()
    return _ledger


def get_inference() -> InferenceService:
    global _inference
    if _inference is None:
        _inference = InferenceService()
    return _inference


def get_history() -> HistoryRepository:
    global _history
    if _history is None:
        _history = HistoryRepository()
    return _history


def get_transfers() -> TransferService:
    global _transfers
    if _transfers is None:
        _transfers = TransferService(get_ledger(), get_history())
    return _transfers


def get_export_service() -> ExportService:
    global _export
    if _export is None:
        _export = ExportService()
    return _export


def to_http_error(error: MemoLedgerError) -> HTTPException:
    """Map a domain error onto the HTTP status the client should see."""
    if isinstance(error, ExplorerNotFoundError):
        status_code = 404
    elif isinstance(error, (ValidationError, ProviderNotConfiguredError, TransferError)):
        status_code = 400
    elif isinstance(error, (ExplorerError, LLMError)):
        status_code = 502
    else:
        status_code = 500
    return HTTPException(status_code=status_code, detail=error.message)


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/network", response_model=NetworkResponse)
def get_network() -> NetworkResponse:
    return NetworkResponse(network=available_network(), blockfrost_available=is_blockfrost_available())


@router.get("/wallet/{address}/balance", response_model=BalanceResponse)
def get_balance(address: str, network: NetworkParam = "preprod") -> BalanceResponse:
    try:
        lovelace = get_ledger().balance_lovelace(address, network)
    except MemoLedgerError as e:
        raise to_http_error(e) from e
    return BalanceResponse(
        address=address,
        network=network,
        lovelace=lovelace,
        ada=format_ada_fixed(lovelace),
    )


@router.get("/transactions/{address}", response_model=TransactionListResponse)
def list_transactions(
    address: str,
    network: NetworkParam = "preprod",
    page: int = Query(1, ge=1),
    count: int = Query(50, ge=1, le=100),
) -> TransactionListResponse:
    """List the address history, newest first.

    Falls back to demo transactions when no Blockfrost key is configured.
    """
    try:
        transactions, source = get_ledger().get_transactions(address, network, page, count)
    except MemoLedgerError as e:
        raise HTTPException(
            status_code=to_http_error(e).status_code,
            detail=f"Failed to fetch blockchain data: {e.message}",
        ) from e
    return TransactionListResponse(address=address, network=network, source=source, transactions=transactions)


@router.get("/transactions/{address}/export")
def export_transactions(address: str, network: NetworkParam = "preprod") -> StreamingResponse:
    """Download the address history as an Excel workbook."""
    try:
        transactions, _ = get_ledger().get_transactions(address, network)
    except MemoLedgerError as e:
        raise to_http_error(e) from e

    content = get_export_service().build_workbook_bytes(transactions, address)
    filename = f"transactions_{address[:16]}.xlsx"
    return StreamingResponse(
        BytesIO(content),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/transactions/{address}/{tx_hash}/amount", response_model=NetAmountResponse)
def get_net_amount(address: str, tx_hash: str, network: NetworkParam = "preprod") -> NetAmountResponse:
    try:
        lovelace = get_ledger().net_amount(tx_hash, address, network)
    except MemoLedgerError as e:
        raise to_http_error(e) from e
    return NetAmountResponse(tx_hash=tx_hash, address=address, lovelace=lovelace, ada=format_ada(lovelace))


@router.get("/dashboard/{address}", response_model=DashboardResponse)
def get_dashboard(address: str, network: NetworkParam = "preprod") -> DashboardResponse:
    try:
        transactions, source = get_ledger().get_transactions(address, network)
    except MemoLedgerError as e:
        raise to_http_error(e) from e
    return DashboardResponse(
        address=address,
        source=source,
        summary=dashboard_service.summarize(transactions, address),
        categories=dashboard_service.status_categories(transactions),
    )


@router.post("/dashboard/{address}/categorize", response_model=list[MessageCategory])
def categorize_dashboard(
    address: str,
    provider: str | None = None,
    network: NetworkParam = "preprod",
) -> list[MessageCategory]:
    """Group the address's memo-bearing transactions into AI categories."""
    provider = provider or default_ai_provider()
    try:
        transactions, _ = get_ledger().get_transactions(address, network)
        return get_inference().categorize_address_transactions(transactions, provider)
    except MemoLedgerError as e:
        raise to_http_error(e) from e


@router.get("/categories", response_model=list[CategoryItem])
def get_categories() -> list[CategoryItem]:
    return [CategoryItem(**cat) for cat in AVAILABLE_CATEGORIES]


@router.get("/ai/providers", response_model=ProvidersResponse)
def get_providers() -> ProvidersResponse:
    return ProvidersResponse(providers=available_providers(), default=default_ai_provider())


@router.post("/api/categorize", response_model=CategorizeResponse)
def categorize(payload: CategorizeRequest) -> JSONResponse:
    """Categorize raw memo texts with the chosen provider.

    Always answers with the ``{success, data, error}`` envelope.
    """
    def envelope(status_code: int, **body) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content=CategorizeResponse(**body).model_dump(exclude_none=True),
        )

    messages = payload.messages
    if not isinstance(messages, list) or not messages or not all(isinstance(m, str) for m in messages):
        return envelope(400, success=False, error="Messages array is required")
    if not isinstance(payload.provider, str) or not payload.provider.strip():
        return envelope(400, success=False, error="Provider is required")

    logger.info(f"Received categorize request: messages={len(messages)}, provider={payload.provider}")

    try:
        results = get_inference().categorize_messages(messages, payload.provider.strip().lower())
    except (ValidationError, ProviderNotConfiguredError) as e:
        return envelope(400, success=False, error=e.message)
    except LLMError as e:
        return envelope(500, success=False, error=e.message)

    logger.info(f"Returning successful response with {len(results)} results")
    return envelope(200, success=True, data=results)


@router.post("/transfers/prepare", response_model=PreparedTransfer)
def prepare_transfer(payload: TransferRequest) -> PreparedTransfer:
    try:
        prepared = get_transfers().prepare_transfer(
            payload.sender_address,
            payload.recipient,
            payload.amount,
            message=payload.message,
            network=payload.network,
        )
    except MemoLedgerError as e:
        raise to_http_error(e) from e
    return PreparedTransfer(**prepared)


@router.post("/transfers/submit", response_model=HistoryEntry)
def submit_transfer(payload: TransferSubmitRequest) -> HistoryEntry:
    try:
        entry = get_transfers().submit_transfer(
            payload.signed_tx,
            payload.recipient,
            payload.amount,
            message=payload.message,
            network=payload.network,
        )
    except MemoLedgerError as e:
        raise to_http_error(e) from e
    return HistoryEntry(**entry)


@router.post("/transfers/failed", response_model=HistoryEntry)
def report_failed_transfer(payload: TransferFailureReport) -> HistoryEntry:
    """Record a transfer that failed in the wallet before submission."""
    entry = get_transfers().record_failure(
        payload.recipient,
        payload.amount,
        payload.error,
        message=payload.message,
        network=payload.network,
    )
    return HistoryEntry(**entry)


@router.get("/history", response_model=list[HistoryEntry])
def list_history(limit: int | None = Query(None, ge=1, le=100)) -> list[HistoryEntry]:
    return [HistoryEntry(**entry) for entry in get_history().list_entries(limit)]


@router.delete("/history")
def clear_history() -> dict:
    get_history().clear()
    return {"status": "cleared"}
