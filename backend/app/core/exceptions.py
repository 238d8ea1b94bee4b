"""Custom exceptions for the Memo Ledger application."""

from __future__ import annotations


class MemoLedgerError(Exception):
    """Base exception for all Memo Ledger errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(MemoLedgerError):
    """Raised when input validation fails."""

    pass


class ExplorerError(MemoLedgerError):
    """Raised when the block-explorer API returns an error."""

    def __init__(self, message: str, status_code: int | None = None, details: dict | None = None) -> None:
        super().__init__(message, details)
        self.status_code = status_code


class ExplorerNotFoundError(ExplorerError):
    """Raised when the explorer has no record of the requested resource."""

    pass


class LLMError(MemoLedgerError):
    """Base exception for LLM-related errors."""

    pass


class LLMConnectionError(LLMError):
    """Raised when connection to LLM provider fails."""

    pass


class LLMParseError(LLMError):
    """Raised when parsing LLM response fails."""

    def __init__(self, message: str, raw_response: str = "", details: dict | None = None) -> None:
        super().__init__(message, details)
        self.raw_response = raw_response


class LLMRateLimitError(LLMError):
    """Raised when LLM rate limit is exceeded."""

    pass


class LLMAuthenticationError(LLMError):
    """Raised when the LLM provider rejects the API key."""

    pass


class ProviderNotConfiguredError(LLMError):
    """Raised when a provider is requested without credentials."""

    pass


class TransferError(MemoLedgerError):
    """Raised when a transfer cannot be submitted."""

    pass
