from __future__ import annotations

import anthropic

from app.adapters.base import MAX_TOKENS, TEMPERATURE, LLMAdapter
from app.core.exceptions import LLMAuthenticationError, LLMConnectionError, LLMRateLimitError
from app.core.logging import get_logger, mask_secret

logger = get_logger("memoledger.adapters.anthropic")


class AnthropicAdapter(LLMAdapter):
    provider = "anthropic"
    display_name = "Anthropic"

    def __init__(self, api_key: str, model_name: str) -> None:
        super().__init__(model_name)
        self._client = anthropic.Anthropic(api_key=api_key)
        logger.info(f"Using Anthropic API with key: {mask_secret(api_key)} (model={model_name})")

    def _call_model(self, prompt: str, operation: str = "generate") -> str:
        try:
            response = self._client.messages.create(
                model=self.model_name,
                max_tokens=MAX_TOKENS,
                temperature=TEMPERATURE,
                messages=[{"role": "user", "content": prompt}],
            )
        except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as e:
            logger.error(f"Anthropic API Error: {e}")
            raise LLMAuthenticationError(
                "Authentication failed with Anthropic. Please check your API key.",
                details={"operation": operation, "status": e.status_code},
            ) from e
        except anthropic.RateLimitError as e:
            logger.error(f"Anthropic API Error: {e}")
            raise LLMRateLimitError(
                "Rate limit exceeded for Anthropic. Please try again later.",
                details={"operation": operation, "status": e.status_code},
            ) from e
        except anthropic.APIStatusError as e:
            logger.error(f"Anthropic API Error: {e}")
            raise LLMConnectionError(
                f"Anthropic API error: {e.status_code}",
                details={"operation": operation, "status": e.status_code},
            ) from e
        except anthropic.APIError as e:
            logger.error(f"Anthropic request failed: {e}")
            raise LLMConnectionError(
                f"Failed to communicate with Anthropic: {e}",
                details={"operation": operation},
            ) from e

        text_blocks = [block.text for block in response.content if getattr(block, "type", "") == "text"]
        if not text_blocks:
            logger.warning(f"Empty response from Anthropic for operation: {operation}")
            return ""
        return text_blocks[0]
