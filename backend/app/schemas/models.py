from typing import Any, Literal

from pydantic import BaseModel, Field

TransactionStatus = Literal["success", "failed", "pending"]
Network = Literal["preprod", "mainnet"]


class ParsedTransaction(BaseModel):
    id: str
    hash: str
    timestamp: int = Field(..., description="Milliseconds since the Unix epoch.")
    amount: str
    recipient: str | None = None
    sender: str | None = None
    message: str | None = None
    status: TransactionStatus
    fees: str = "0"
    network: str
    block_height: int = 0
    confirmations: int | None = None
    error_message: str | None = None


class TransactionListResponse(BaseModel):
    address: str
    network: str
    source: Literal["blockfrost", "mock"]
    transactions: list[ParsedTransaction]


class NetAmountResponse(BaseModel):
    tx_hash: str
    address: str
    lovelace: int
    ada: str


class BalanceResponse(BaseModel):
    address: str
    network: str
    lovelace: int
    ada: str


class NetworkResponse(BaseModel):
    network: str | None
    blockfrost_available: bool


class CategoryItem(BaseModel):
    name: str
    description: str
    icon: str
    color: str


class AICategory(BaseModel):
    category: str
    confidence: float = 0.0
    reasoning: str = ""
    icon: str
    color: str


class CategorizedTransaction(BaseModel):
    transaction_id: str
    category: AICategory


class MessageCategory(BaseModel):
    category: str
    transactions: list[ParsedTransaction]
    color: str
    icon: str
    confidence: float | None = None
    reasoning: str | None = None


class CategorizeRequest(BaseModel):
    # Checked in the route so malformed input still gets the envelope
    messages: Any = None
    provider: Any = None


class CategorizeResponse(BaseModel):
    success: bool
    data: list[dict[str, Any]] | None = None
    error: str | None = None


class ProvidersResponse(BaseModel):
    providers: list[str]
    default: str


class TransferRequest(BaseModel):
    sender_address: str
    recipient: str
    amount: str
    message: str | None = None
    network: Network = "preprod"


class PreparedTransfer(BaseModel):
    recipient: str
    amount: str
    lovelace: str
    metadata: dict[str, Any] | None = None
    network: str


class TransferSubmitRequest(BaseModel):
    signed_tx: str = Field(..., description="Signed transaction as CBOR hex.")
    recipient: str
    amount: str
    message: str | None = None
    network: Network = "preprod"


class TransferFailureReport(BaseModel):
    recipient: str
    amount: str
    error: str
    message: str | None = None
    network: Network = "preprod"


class HistoryEntry(BaseModel):
    id: str
    timestamp: int
    network: str
    amount: str
    recipient: str
    message: str | None = None
    status: TransactionStatus
    error_message: str | None = None
    tx_hash: str | None = None


class FlowTotals(BaseModel):
    count: int
    total_ada: float


class DashboardSummary(BaseModel):
    sent: FlowTotals
    received: FlowTotals
    failed: int
    pending: int


class StatusCategory(BaseModel):
    title: str
    transactions: list[ParsedTransaction]
    color: str
    icon: str


class DashboardResponse(BaseModel):
    address: str
    source: Literal["blockfrost", "mock"]
    summary: DashboardSummary
    categories: list[StatusCategory]
