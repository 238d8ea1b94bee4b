"""OpenAI chat-completions adapter, also used for Groq's compatible endpoint."""

from __future__ import annotations

from typing import Any

import openai

from app.adapters.base import MAX_TOKENS, TEMPERATURE, LLMAdapter
from app.core.exceptions import LLMAuthenticationError, LLMConnectionError, LLMRateLimitError
from app.core.logging import get_logger, mask_secret

logger = get_logger("memoledger.adapters.openai")

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


class OpenAICompatibleAdapter(LLMAdapter):
    provider = "openai"
    display_name = "OpenAI"

    def __init__(
        self,
        api_key: str,
        model_name: str,
        base_url: str | None = None,
        provider: str = "openai",
        display_name: str = "OpenAI",
    ) -> None:
        super().__init__(model_name)
        self.provider = provider
        self.display_name = display_name

        client_kwargs: dict[str, Any] = {"api_key": api_key}
        if base_url:
            client_kwargs["base_url"] = base_url
        self._client = openai.OpenAI(**client_kwargs)
        logger.info(f"Using {display_name} API with key: {mask_secret(api_key)} (model={model_name})")

    @classmethod
    def groq(cls, api_key: str, model_name: str) -> "OpenAICompatibleAdapter":
        return cls(api_key, model_name, base_url=GROQ_BASE_URL, provider="groq", display_name="Groq")

    def _call_model(self, prompt: str, operation: str = "generate") -> str:
        try:
            response = self._client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": prompt}],
                temperature=TEMPERATURE,
                max_tokens=MAX_TOKENS,
            )
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            logger.error(f"{self.display_name} API Error: {e}")
            raise LLMAuthenticationError(
                f"Authentication failed with {self.display_name}. Please check your API key.",
                details={"operation": operation, "status": e.status_code},
            ) from e
        except openai.RateLimitError as e:
            logger.error(f"{self.display_name} API Error: {e}")
            raise LLMRateLimitError(
                f"Rate limit exceeded for {self.display_name}. Please try again later.",
                details={"operation": operation, "status": e.status_code},
            ) from e
        except openai.BadRequestError as e:
            logger.error(f"{self.display_name} API Error: {e}")
            raise LLMConnectionError(
                f"Bad request to {self.display_name}. Please check your input.",
                details={"operation": operation, "status": e.status_code},
            ) from e
        except openai.APIStatusError as e:
            logger.error(f"{self.display_name} API Error: {e}")
            raise LLMConnectionError(
                f"{self.display_name} API error: {e.status_code}",
                details={"operation": operation, "status": e.status_code},
            ) from e
        except openai.APIError as e:
            logger.error(f"{self.display_name} request failed: {e}")
            raise LLMConnectionError(
                f"Failed to communicate with {self.display_name}: {e}",
                details={"operation": operation},
            ) from e

        if not response.choices:
            logger.warning(f"Empty response from {self.display_name} for operation: {operation}")
            return ""
        return response.choices[0].message.content or ""
