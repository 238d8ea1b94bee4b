from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from app.adapters.anthropic_adapter import AnthropicAdapter
from app.adapters.base import LLMAdapter
from app.adapters.gemini_vertex import GeminiVertexAdapter
from app.adapters.openai_compat import OpenAICompatibleAdapter
from app.core.categories import FALLBACK_CATEGORY, lookup_category
from app.core.exceptions import LLMError, ProviderNotConfiguredError, ValidationError
from app.core.logging import LogContext, get_logger
from app.schemas.models import AICategory, CategorizedTransaction, MessageCategory, ParsedTransaction

logger = get_logger("memoledger.services.inference")


@dataclass(frozen=True)
class ProviderSpec:
    key: str
    display_name: str
    credential_envs: tuple[str, ...]
    model_env: str
    default_model: str

    def credential(self) -> str | None:
        for env in self.credential_envs:
            value = os.getenv(env)
            if value:
                return value
        return None

    def model(self) -> str:
        return os.getenv(self.model_env, self.default_model)


# Order matters: it is the order reported by available_providers()
PROVIDERS: dict[str, ProviderSpec] = {
    "openai": ProviderSpec("openai", "OpenAI", ("AI_API_KEY", "OPENAI_API_KEY"), "OPENAI_MODEL", "gpt-3.5-turbo"),
    "gemini": ProviderSpec(
        "gemini", "Gemini", ("GOOGLE_CLOUD_PROJECT", "VERTEX_PROJECT"), "GEMINI_MODEL", "gemini-1.5-flash"
    ),
    "anthropic": ProviderSpec(
        "anthropic", "Anthropic", ("ANTHROPIC_API_KEY",), "CLAUDE_MODEL", "claude-3-haiku-20240307"
    ),
    "groq": ProviderSpec("groq", "Groq", ("GROQ_API_KEY", "AI_API_KEY"), "GROQ_MODEL", "llama3-8b-8192"),
}


def available_providers() -> list[str]:
    providers = [key for key, spec in PROVIDERS.items() if spec.credential()]
    logger.info(f"Available AI providers: {providers}")
    if not providers:
        logger.warning("No AI API keys found. AI categorization will not work without proper API keys.")
        providers.append("openai")
    return providers


def build_adapter(provider: str) -> LLMAdapter:
    """Create the adapter for ``provider`` from environment credentials.

    Raises:
        ValidationError: If the provider is unknown
        ProviderNotConfiguredError: If the provider has no credentials
    """
    spec = PROVIDERS.get(provider)
    if spec is None:
        raise ValidationError("Unknown provider", details={"provider": provider})

    credential = spec.credential()
    if not credential:
        raise ProviderNotConfiguredError(
            f"{spec.display_name} API key not configured",
            details={"provider": provider, "env": list(spec.credential_envs)},
        )

    if provider == "gemini":
        return GeminiVertexAdapter(
            spec.model(),
            project=credential,
            location=os.getenv("VERTEX_LOCATION", "us-central1"),
        )
    if provider == "anthropic":
        return AnthropicAdapter(credential, spec.model())
    if provider == "groq":
        return OpenAICompatibleAdapter.groq(credential, spec.model())
    return OpenAICompatibleAdapter(credential, spec.model())


class InferenceService:
    def __init__(self) -> None:
        self._adapters: dict[str, LLMAdapter] = {}

    def get_adapter(self, provider: str) -> LLMAdapter:
        provider = (provider or "").lower()
        if provider not in self._adapters:
            self._adapters[provider] = build_adapter(provider)
        return self._adapters[provider]

    def categorize_messages(self, messages: list[str], provider: str) -> list[dict[str, Any]]:
        """Ask ``provider`` to categorize ``messages`` and return its raw results.

        Errors from the provider propagate; callers decide how to degrade.
        """
        if not messages:
            return []
        with LogContext(logger, "categorize_messages", provider=provider, message_count=len(messages)):
            adapter = self.get_adapter(provider)
            results, _ = adapter.infer_categories(messages)
        return results

    def categorize_transactions(
        self, messages: list[str], provider: str
    ) -> list[CategorizedTransaction]:
        """Categorize memos, falling back to "Other" for every memo on failure."""
        if not messages:
            return []

        logger.info(f"Starting AI categorization with {provider} for {len(messages)} messages")
        try:
            results = self.categorize_messages(messages, provider)
        except (LLMError, ValidationError) as e:
            logger.error(f"AI categorization error: {e}")
            return self._fallback(messages, e.message)

        categorized = [self._to_categorized(result) for result in results]
        logger.info(f"Successfully categorized {len(categorized)} transactions")
        return categorized

    def categorize_address_transactions(
        self, transactions: list[ParsedTransaction], provider: str
    ) -> list[MessageCategory]:
        with_messages = [tx for tx in transactions if tx.message and tx.message.strip()]
        if not with_messages:
            raise ValidationError(
                "No transactions with messages found. "
                "AI categorization requires transactions that have message content."
            )

        messages = [tx.message for tx in with_messages]
        results = self.categorize_transactions(messages, provider)
        return self.group_by_category(with_messages, results)

    @staticmethod
    def group_by_category(
        transactions: list[ParsedTransaction],
        results: list[CategorizedTransaction],
    ) -> list[MessageCategory]:
        """Group transactions by their AI category, largest group first.

        Transactions and results are paired by position.
        """
        groups: dict[str, MessageCategory] = {}
        for transaction, result in zip(transactions, results):
            name = result.category.category
            if name not in groups:
                groups[name] = MessageCategory(
                    category=name,
                    transactions=[],
                    color=result.category.color,
                    icon=result.category.icon,
                    confidence=result.category.confidence,
                    reasoning=result.category.reasoning,
                )
            groups[name].transactions.append(transaction)

        return sorted(groups.values(), key=lambda group: len(group.transactions), reverse=True)

    @staticmethod
    def _to_categorized(result: dict[str, Any]) -> CategorizedTransaction:
        catalog_entry = lookup_category(result.get("category"))
        return CategorizedTransaction(
            transaction_id=f"tx_{result.get('transactionIndex')}",
            category=AICategory(
                category=result.get("category") or FALLBACK_CATEGORY,
                confidence=result.get("confidence", 0.0),
                reasoning=result.get("reasoning", ""),
                icon=catalog_entry["icon"],
                color=catalog_entry["color"],
            ),
        )

    @staticmethod
    def _fallback(messages: list[str], error_message: str) -> list[CategorizedTransaction]:
        other = lookup_category(FALLBACK_CATEGORY)
        return [
            CategorizedTransaction(
                transaction_id=f"tx_{index}",
                category=AICategory(
                    category=FALLBACK_CATEGORY,
                    confidence=0,
                    reasoning=f"AI categorization failed: {error_message}",
                    icon=other["icon"],
                    color=other["color"],
                ),
            )
            for index, _ in enumerate(messages, start=1)
        ]
